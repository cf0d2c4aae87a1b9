"""
Worker-level health and busy status.

Responsibilities:
- Hold the worker's busy status and per-component health
- Build an immutable JibriStatus snapshot on every change
- Forward each new snapshot to registered handlers (e.g. webhooks)
- Translate a service's overall ComponentState into busy/health updates

Non-responsibilities:
- No network I/O (handlers own delivery)
- No aggregation of sub-component states (see status.aggregator)
"""

from __future__ import annotations

import threading

from observability.logger import log_event, now_ms
from status.component_state import ComponentState, Error, Finished
from status.error_kinds import ErrorScope
from status.jibri_status import (
    ComponentBusyStatus,
    ComponentHealthStatus,
    JibriStatus,
    OverallHealth,
)
from status.publisher import StatusPublisher


class JibriStatusManager(StatusPublisher[JibriStatus]):
    """
    Publishes a JibriStatus each time busy status or health changes.

    Overall health is UNHEALTHY as soon as any tracked component reports
    UNHEALTHY; details carry one entry per component that reported one.
    """

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self._busy_status = ComponentBusyStatus.IDLE
        self._component_health: dict[str, ComponentHealthStatus] = {}
        self._details: dict[str, str] = {}
        self._status = self._build()

    @property
    def status(self) -> JibriStatus:
        return self._status

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update_busy_status(self, busy_status: ComponentBusyStatus) -> None:
        with self._lock:
            if busy_status == self._busy_status:
                return
            self._busy_status = busy_status
            status = self._rebuild()
        self._emit(status)

    def update_health(
        self,
        component_id: str,
        health_status: ComponentHealthStatus,
        detail: str = "",
    ) -> None:
        with self._lock:
            if (
                self._component_health.get(component_id) == health_status
                and self._details.get(component_id, "") == detail
            ):
                return
            self._component_health[component_id] = health_status
            self._details[component_id] = detail
            status = self._rebuild()
        self._emit(status)

    def clear_health(self, component_id: str) -> None:
        """Forget a component's health entry, e.g. a finished job's session."""
        with self._lock:
            if component_id not in self._component_health:
                return
            del self._component_health[component_id]
            self._details.pop(component_id, None)
            status = self._rebuild()
        self._emit(status)

    def track_service(self, service_id: str, service: StatusPublisher[ComponentState]) -> None:
        """
        Follow a service's overall state.

        - Starting / Running => BUSY
        - Finished => IDLE
        - Error => IDLE, health detail recorded; SYSTEM-scoped errors also
          mark the worker UNHEALTHY
        """
        service.add_status_handler(
            lambda state: self._on_service_state(service_id, state)
        )
        self.update_busy_status(ComponentBusyStatus.BUSY)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _on_service_state(self, service_id: str, state: ComponentState) -> None:
        if isinstance(state, Error):
            health = (
                ComponentHealthStatus.UNHEALTHY
                if state.reason.scope is ErrorScope.SYSTEM
                else ComponentHealthStatus.HEALTHY
            )
            self.update_health(service_id, health, state.describe())
            self.update_busy_status(ComponentBusyStatus.IDLE)
        elif isinstance(state, Finished):
            self.update_busy_status(ComponentBusyStatus.IDLE)
        else:
            self.update_busy_status(ComponentBusyStatus.BUSY)

    def _build(self) -> JibriStatus:
        unhealthy = any(
            h is ComponentHealthStatus.UNHEALTHY
            for h in self._component_health.values()
        )
        return JibriStatus(
            busy_status=self._busy_status,
            health=OverallHealth(
                status=(
                    ComponentHealthStatus.UNHEALTHY
                    if unhealthy
                    else ComponentHealthStatus.HEALTHY
                ),
                details=self._details,
            ),
        )

    def _rebuild(self) -> JibriStatus:
        self._status = self._build()
        return self._status

    def _emit(self, status: JibriStatus) -> None:
        log_event({
            "ts_ms": now_ms(),
            "event_type": "JIBRI_STATUS_CHANGED",
            "status": status.to_dict(),
        })
        self.publish_status(status)
