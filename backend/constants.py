"""
Behavioral constants for the capture worker control plane.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers or magic strings elsewhere in the codebase.
- Other modules MUST import from this file.
"""

from __future__ import annotations

from typing import Final, Mapping

# =============================================================================
# Sub-component identities
# =============================================================================

SELENIUM_COMPONENT_ID: Final[str] = "Selenium"

# =============================================================================
# Presence fields announced once the browser has joined the call
# =============================================================================

PRESENCE_SESSION_ID_KEY: Final[str] = "session_id"
PRESENCE_MODE_KEY: Final[str] = "mode"

# Recording mode advertised in presence for web recordings
RECORDING_MODE_FILE: Final[str] = "file"

# =============================================================================
# Call URL options used when joining as a recorder
# =============================================================================
# Appended to the call URL fragment. Keeps the recorder silent and out of the
# participant list.

RECORDING_URL_OPTIONS: Final[tuple[str, ...]] = (
    "config.iAmRecorder=true",
    "config.externalConnectUrl=null",
    "config.startWithAudioMuted=true",
    "config.startWithVideoMuted=true",
    "interfaceConfig.APP_NAME=\"Jibri\"",
    "config.analytics.disabled=true",
    "config.p2p.enabled=false",
    "config.prejoinPageEnabled=false",
    "config.requireDisplayName=false",
)

# =============================================================================
# Configuration keys
# =============================================================================

# Key inside the legacy JSON config file
LEGACY_DISPATCHER_URL_KEY: Final[str] = "dispatcherUrl"

# Key inside the current configuration
DISPATCHER_URL_CONFIG_KEY: Final[str] = "jibri.analysis.dispatcher"

# Environment variable -> current configuration key
ENV_TO_CONFIG_KEY: Final[Mapping[str, str]] = {
    "JIBRI_ANALYSIS_DISPATCHER": DISPATCHER_URL_CONFIG_KEY,
}

# =============================================================================
# Webhooks
# =============================================================================

WEBHOOK_STATUS_PATH: Final[str] = "/v1/status"
WEBHOOK_CONTENT_TYPE: Final[str] = "application/json"

WEBHOOK_REQUEST_TIMEOUT_S: Final[float] = 5.0
WEBHOOK_IO_MAX_WORKERS: Final[int] = 8
WEBHOOK_IO_THREAD_PREFIX: Final[str] = "webhook-io"

# =============================================================================
# HTTP health surface
# =============================================================================

HEALTH_ROUTE: Final[str] = "/jibri/api/v1.0/health"
