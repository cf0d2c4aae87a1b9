"""
Browser automation backend contract.

This module defines the *interface only*. The process that actually drives
a browser into the call, sets XMPP presence and launches the capturer lives
elsewhere.

Key invariants:
- The backend publishes its own ComponentState changes (Starting, Running,
  Finished, Error) through its StatusPublisher channel.
- join_call() only requests the join; reaching Running is reported later
  through a published transition.
- The backend never makes service-level decisions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace

from status.component_state import ComponentState
from status.publisher import StatusPublisher


# ---------------------------------------------------------------------
# Call parameters
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class CallUrlInfo:
    """
    Location of a call.

    url_params are appended to the URL fragment when the browser loads it.
    """

    base_url: str
    call_name: str
    url_params: tuple[str, ...] = ()

    @property
    def call_url(self) -> str:
        url = f"{self.base_url.rstrip('/')}/{self.call_name}"
        if self.url_params:
            url += "#" + "&".join(self.url_params)
        return url

    def with_url_params(self, url_params: tuple[str, ...]) -> CallUrlInfo:
        return replace(self, url_params=tuple(url_params))


@dataclass(frozen=True)
class CallParams:
    """Which call to join."""

    call_url_info: CallUrlInfo
    email: str = ""
    passcode: str | None = None
    display_name: str = ""


@dataclass(frozen=True)
class XmppCredentials:
    """Login used to join the call invisibly."""

    domain: str
    username: str
    password: str = field(repr=False, default="")


# ---------------------------------------------------------------------
# Backend interface
# ---------------------------------------------------------------------

class AutomationBackend(StatusPublisher[ComponentState], ABC):
    """
    Abstract interface for the browser automation backend.

    Implementations are responsible for:
    - Loading the call in a browser and logging in with the credentials
    - Adding fields to, and sending, the participant's XMPP presence
    - Starting and stopping the capture process
    - Publishing their own lifecycle states

    All methods are blocking calls from the caller's point of view.
    """

    @abstractmethod
    def join_call(self, call_url_info: CallUrlInfo, credentials: XmppCredentials) -> None:
        """Request that the browser joins the call."""
        raise NotImplementedError

    @abstractmethod
    def add_to_presence(self, key: str, value: str) -> None:
        """Stage a key/value pair for the next presence update."""
        raise NotImplementedError

    @abstractmethod
    def send_presence(self) -> None:
        """Send the staged presence update."""
        raise NotImplementedError

    @abstractmethod
    def start_capturing(self, dispatcher_url: str) -> None:
        """Start capturing call media, reporting to the given dispatcher."""
        raise NotImplementedError

    @abstractmethod
    def stop_capturing(self) -> None:
        """Stop the capture process."""
        raise NotImplementedError

    @abstractmethod
    def leave_call_and_quit_browser(self) -> None:
        """Leave the call and tear the browser down."""
        raise NotImplementedError
