"""
Sub-component status aggregation and one-shot transition watchers.

Responsibilities:
- Own the registry of named sub-components and their latest state
- Fire one-shot watchers when a component first transitions into a state
- Derive the overall state through a pluggable aggregation policy
- Publish overall state changes to the aggregator's own handlers
- Let the owning job force an overall state (orchestration errors)

Non-responsibilities:
- No retries and no recovery: recovery belongs to the owning job
- No threads of its own: everything runs on the publishing thread

Concurrency:
- Registry updates and watcher selection happen under one reentrant lock,
  so a watcher registered concurrently is either fired by this transition
  or left for a later one, never lost or fired twice.
- Watcher actions and overall publication run after the lock is released.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Mapping

from observability.logger import log_event, now_ms
from status.component_state import ComponentState, Error, Running, Starting
from status.publisher import StatusPublisher


# ---------------------------------------------------------------------
# Aggregation policy
# ---------------------------------------------------------------------

AggregationPolicy = Callable[[Mapping[str, ComponentState]], ComponentState | None]


def default_aggregation_policy(
    states: Mapping[str, ComponentState],
) -> ComponentState | None:
    """
    Default overall-state derivation.

    - Any sub-component in Error => that Error (first in registration
      order wins)
    - All sub-components Running => Running
    - Otherwise None: overall state is left unchanged
    """
    for state in states.values():
        if isinstance(state, Error):
            return state

    if states and all(isinstance(state, Running) for state in states.values()):
        return Running()

    return None


# ---------------------------------------------------------------------
# Watchers
# ---------------------------------------------------------------------

WatcherAction = Callable[[], None]


@dataclass(frozen=True, eq=False)
class _Watcher:
    target: ComponentState
    action: WatcherAction


class TransitionWatch:
    """
    Builder returned by StatusAggregator.whenever().

    Usage:
        self.whenever(selenium).transitions_to(Running(), self._on_joined)
    """

    def __init__(self, aggregator: StatusAggregator, component_id: str) -> None:
        self._aggregator = aggregator
        self._component_id = component_id

    def transitions_to(self, state: ComponentState, action: WatcherAction) -> None:
        self._aggregator._add_watcher(self._component_id, _Watcher(state, action))


# ---------------------------------------------------------------------
# StatusAggregator
# ---------------------------------------------------------------------

class StatusAggregator(StatusPublisher[ComponentState]):
    """
    Tracks sub-component states on behalf of an owning job.

    The aggregator is itself a StatusPublisher: handlers added with
    add_status_handler() receive every overall state change.

    Guarantees:
    - Terminal component states (Finished, Error) are final; later
      publishes from that component are ignored
    - Republishing a component's current state is not a transition
    - A watcher fires at most once
    - Once the overall state is terminal, it never changes again
    """

    def __init__(
        self,
        name: str,
        *,
        aggregation_policy: AggregationPolicy = default_aggregation_policy,
    ) -> None:
        super().__init__()
        self.name = name
        self._policy = aggregation_policy
        self._lock = threading.RLock()

        self._state: ComponentState = Starting()

        # Insertion order == registration order (used by the policy)
        self._component_states: dict[str, ComponentState] = {}
        self._components: list[tuple[StatusPublisher[ComponentState], str]] = []
        self._watchers: dict[str, list[_Watcher]] = {}

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> ComponentState:
        """Current overall state."""
        return self._state

    def component_states(self) -> dict[str, ComponentState]:
        """Snapshot of the latest state of every registered sub-component."""
        with self._lock:
            return dict(self._component_states)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_sub_component(
        self,
        component_id: str,
        component: StatusPublisher[ComponentState],
    ) -> None:
        """
        Start tracking a sub-component.

        Raises:
            ValueError if component_id is already registered.
        """
        with self._lock:
            if component_id in self._component_states:
                raise ValueError(f"Sub-component already registered: {component_id}")
            self._component_states[component_id] = Starting()
            self._components.append((component, component_id))

        component.add_status_handler(
            lambda state: self._on_sub_component_state(component_id, state)
        )

    def whenever(self, component: StatusPublisher[ComponentState] | str) -> TransitionWatch:
        """
        Start a one-shot watcher on a registered sub-component.

        Accepts either the component object or its registered id.
        """
        return TransitionWatch(self, self._component_id_for(component))

    def clear_watchers(self, component_id: str | None = None) -> None:
        """
        Drop outstanding watchers for one component, or for all of them.

        Called on teardown so no action fires against a stopped service.
        """
        with self._lock:
            if component_id is None:
                self._watchers.clear()
            else:
                self._watchers.pop(component_id, None)

    # ------------------------------------------------------------------
    # Overall state
    # ------------------------------------------------------------------

    def publish_status(self, status: ComponentState) -> None:
        """
        Force the overall state, independent of sub-component states.

        Used for orchestration-level errors that have no sub-component.
        """
        self._update_overall(status, forced=True)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _component_id_for(self, component: StatusPublisher[ComponentState] | str) -> str:
        with self._lock:
            if isinstance(component, str):
                if component in self._component_states:
                    return component
            else:
                for registered, component_id in self._components:
                    if registered is component:
                        return component_id
        raise ValueError(f"{self.name}: unknown sub-component {component!r}")

    def _add_watcher(self, component_id: str, watcher: _Watcher) -> None:
        with self._lock:
            self._watchers.setdefault(component_id, []).append(watcher)

    def _on_sub_component_state(self, component_id: str, state: ComponentState) -> None:
        with self._lock:
            previous = self._component_states[component_id]

            if previous.is_terminal:
                log_event({
                    "ts_ms": now_ms(),
                    "event_type": "SUB_COMPONENT_TRANSITION_IGNORED",
                    "service": self.name,
                    "component_id": component_id,
                    "current": previous.describe(),
                    "requested": state.describe(),
                })
                return

            if previous == state:
                return

            self._component_states[component_id] = state

            pending = self._watchers.get(component_id, [])
            fired = [w for w in pending if w.target == state]
            if fired:
                remaining = [w for w in pending if w.target != state]
                if remaining:
                    self._watchers[component_id] = remaining
                else:
                    del self._watchers[component_id]

        log_event({
            "ts_ms": now_ms(),
            "event_type": "SUB_COMPONENT_TRANSITION",
            "service": self.name,
            "component_id": component_id,
            "from": previous.describe(),
            "to": state.describe(),
            "watchers_fired": len(fired),
        })

        for watcher in fired:
            self._run_watcher(component_id, watcher)

        overall = self._policy(self.component_states())
        if overall is not None:
            self._update_overall(overall, forced=False)

    def _run_watcher(self, component_id: str, watcher: _Watcher) -> None:
        try:
            watcher.action()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # Owning job converts its own failures; never reaches the publisher
            log_event({
                "ts_ms": now_ms(),
                "event_type": "WATCHER_ACTION_FAILED",
                "service": self.name,
                "component_id": component_id,
                "target": watcher.target.describe(),
                "exception": type(exc).__name__,
                "message": str(exc),
            })

    def _update_overall(self, state: ComponentState, *, forced: bool) -> None:
        with self._lock:
            previous = self._state
            if previous.is_terminal:
                log_event({
                    "ts_ms": now_ms(),
                    "event_type": "SERVICE_TRANSITION_IGNORED",
                    "service": self.name,
                    "current": previous.describe(),
                    "requested": state.describe(),
                    "forced": forced,
                })
                return
            if previous == state:
                return
            self._state = state

        log_event({
            "ts_ms": now_ms(),
            "event_type": "SERVICE_STATE_CHANGED",
            "service": self.name,
            "from": previous.describe(),
            "to": state.describe(),
            "forced": forced,
        })

        super().publish_status(state)
