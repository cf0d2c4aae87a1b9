"""
Worker composition root.

Responsibilities:
- Own the JibriStatusManager and the WebhookClient for this process
- Wire status changes to webhook delivery
- Start and stop the (single) active capture job
- Release the job slot when a job ends on its own (Error / Finished)

Non-responsibilities:
- No HTTP command surface: callers decide when to start or stop
- No job-specific sequencing (see service.web_recording)
"""

from __future__ import annotations

import threading

from automation.backend import AutomationBackend
from config import AppConfig
from errors import JibriBusyError
from observability.logger import log_event, now_ms
from service.base import JibriService
from service.web_recording import WebRecordingJibriService, WebRecordingParams
from status.component_state import ComponentState
from status.health_manager import JibriStatusManager
from status.jibri_status import ComponentBusyStatus
from webhooks.client import WebhookClient


class JibriWorker:
    """
    One worker process == one status manager == at most one active job.

    The previous job's health entry is dropped when the next job starts,
    so subscribers see its error until the worker is given new work.
    """

    def __init__(
        self,
        *,
        config: AppConfig,
        webhook_client: WebhookClient | None = None,
    ) -> None:
        self._config = config
        self.status_manager = JibriStatusManager()
        self.webhook_client = webhook_client or WebhookClient(
            config.jibri_id,
            timeout_s=config.webhook_timeout_s,
            max_workers=config.webhook_io_workers,
            subscribers=config.webhook_subscribers,
        )
        self.status_manager.add_status_handler(self.webhook_client.update_status)

        self._lock = threading.Lock()
        self._active: JibriService | None = None
        self._last_session_id: str | None = None

    @property
    def active_service(self) -> JibriService | None:
        return self._active

    def start_web_recording(
        self,
        params: WebRecordingParams,
        backend: AutomationBackend,
    ) -> WebRecordingJibriService:
        """
        Create and start a web recording job.

        If start() raises, the slot is released and IDLE is reported
        before the error reaches the caller.

        Raises:
            JibriBusyError if a job is already active.
            ConfigError if no dispatcher URL is configured.
        """
        with self._lock:
            if self._active is not None:
                raise JibriBusyError(f"Already running: {self._active.name}")
            service = WebRecordingJibriService(
                params,
                backend,
                legacy_config=self._config.legacy,
                config=self._config.current,
            )
            self._active = service
            previous_session_id, self._last_session_id = (
                self._last_session_id, params.session_id
            )

        log_event({
            "ts_ms": now_ms(),
            "event_type": "JOB_STARTING",
            "service": service.name,
            "session_id": params.session_id,
        })
        if previous_session_id is not None:
            self.status_manager.clear_health(previous_session_id)

        try:
            self.status_manager.track_service(params.session_id, service)
            service.add_status_handler(
                lambda state: self._on_service_state(service, state)
            )
            service.start()
        except Exception as exc:
            with self._lock:
                if self._active is service:
                    self._active = None
            log_event({
                "ts_ms": now_ms(),
                "event_type": "JOB_START_FAILED",
                "service": service.name,
                "session_id": params.session_id,
                "exception": type(exc).__name__,
                "message": str(exc),
            })
            self.status_manager.update_busy_status(ComponentBusyStatus.IDLE)
            raise

        return service

    def stop_service(self) -> None:
        """Stop the active job, if any. The worker is free afterwards."""
        with self._lock:
            service, self._active = self._active, None
        if service is None:
            return
        self._stop(service)

    def shutdown(self) -> None:
        self.stop_service()
        self.webhook_client.shutdown()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _on_service_state(self, service: JibriService, state: ComponentState) -> None:
        if not state.is_terminal:
            return
        with self._lock:
            if self._active is not service:
                return
            self._active = None

        log_event({
            "ts_ms": now_ms(),
            "event_type": "JOB_ENDED",
            "service": service.name,
            "state": state.describe(),
        })
        try:
            self._stop(service)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # Runs on the publishing thread; the slot is already free
            log_event({
                "ts_ms": now_ms(),
                "event_type": "JOB_STOP_FAILED",
                "service": service.name,
                "exception": type(exc).__name__,
                "message": str(exc),
            })

    def _stop(self, service: JibriService) -> None:
        log_event({
            "ts_ms": now_ms(),
            "event_type": "JOB_STOPPING",
            "service": service.name,
        })
        try:
            service.stop()
        finally:
            self.status_manager.update_busy_status(ComponentBusyStatus.IDLE)
