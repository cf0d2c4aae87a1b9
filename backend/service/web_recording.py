"""
Web recording job.

Joins a web call through the automation backend, announces the session in
presence, and starts capturing call media toward the analysis dispatcher.

Lifecycle:
- start(): watch for the backend reaching Running, then request the join
- backend Running: add presence fields, send presence, start capture
  as one attempt; any failure => Error(ERROR_SETTING_PRESENCE_FIELDS)
- stop(): stop capture, then leave the call and quit the browser
"""

from __future__ import annotations

from dataclasses import dataclass

from automation.backend import AutomationBackend, CallParams, XmppCredentials
from config import ConfigSource, LegacyConfigSource, resolve_dispatcher_url
from constants import (
    PRESENCE_MODE_KEY,
    PRESENCE_SESSION_ID_KEY,
    RECORDING_MODE_FILE,
    RECORDING_URL_OPTIONS,
    SELENIUM_COMPONENT_ID,
)
from observability.logger import log_event, now_ms
from service.base import JibriService
from service.steps import run_steps
from status.component_state import Error, Running
from status.error_kinds import ERROR_SETTING_PRESENCE_FIELDS


@dataclass(frozen=True)
class WebRecordingParams:
    """
    Parameters needed for starting a WebRecordingJibriService.

    call_params:
        Which call we'll join

    session_id:
        The ID of this session

    call_login_params:
        Login needed to appear invisible in the call
    """

    call_params: CallParams
    session_id: str
    call_login_params: XmppCredentials


class WebRecordingJibriService(JibriService):
    """
    Joins a web call, captures its audio and video, and sends that media
    to the analysis dispatcher.

    The dispatcher URL is resolved once, here, at construction. A missing
    URL raises ConfigError and the service is never created.
    """

    def __init__(
        self,
        params: WebRecordingParams,
        backend: AutomationBackend,
        *,
        legacy_config: LegacyConfigSource,
        config: ConfigSource,
    ) -> None:
        super().__init__("Web recording")
        self._params = params
        self._backend = backend
        self.dispatcher_url = resolve_dispatcher_url(legacy_config, config)

        log_event({
            "ts_ms": now_ms(),
            "event_type": "DISPATCHER_URL_RESOLVED",
            "service": self.name,
            "session_id": params.session_id,
            "dispatcher_url": self.dispatcher_url,
        })

        self.register_sub_component(SELENIUM_COMPONENT_ID, backend)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        # Watch first so a backend that reports Running during join_call
        # is not missed
        self.whenever(self._backend).transitions_to(Running(), self._on_call_joined)

        call_url_info = self._params.call_params.call_url_info.with_url_params(
            RECORDING_URL_OPTIONS
        )
        self._backend.join_call(call_url_info, self._params.call_login_params)

    def stop(self) -> None:
        """
        Stop capturing, then release the call.

        The release runs even if stopping the capturer raises, so the
        browser is never leaked; the capture-stop error is re-raised after.
        """
        log_event({
            "ts_ms": now_ms(),
            "event_type": "WEB_RECORDING_STOPPING",
            "service": self.name,
            "session_id": self._params.session_id,
        })
        self.clear_watchers()
        try:
            self._backend.stop_capturing()
        finally:
            self._backend.leave_call_and_quit_browser()

    # ------------------------------------------------------------------
    # Watchers
    # ------------------------------------------------------------------

    def _on_call_joined(self) -> None:
        log_event({
            "ts_ms": now_ms(),
            "event_type": "WEB_RECORDING_CALL_JOINED",
            "service": self.name,
            "session_id": self._params.session_id,
        })

        backend = self._backend
        result = run_steps((
            ("add_session_id_to_presence",
             lambda: backend.add_to_presence(PRESENCE_SESSION_ID_KEY, self._params.session_id)),
            ("add_mode_to_presence",
             lambda: backend.add_to_presence(PRESENCE_MODE_KEY, RECORDING_MODE_FILE)),
            ("send_presence", backend.send_presence),
            ("start_capturing", lambda: backend.start_capturing(self.dispatcher_url)),
        ))

        if result.ok:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "WEB_RECORDING_CAPTURE_STARTED",
                "service": self.name,
                "session_id": self._params.session_id,
            })
            return

        assert result.failure is not None
        log_event({
            "ts_ms": now_ms(),
            "event_type": "WEB_RECORDING_PRESENCE_ERROR",
            "service": self.name,
            "session_id": self._params.session_id,
            "failed_step": result.failed_step,
            "completed_steps": list(result.completed),
            "exception": type(result.failure.cause).__name__,
            "message": str(result.failure.cause),
        })
        self.publish_status(Error(ERROR_SETTING_PRESENCE_FIELDS))
