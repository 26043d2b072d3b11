"""Cluster lifecycle state machine primitives."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Iterator, Optional

from fc_common.errors import StatePreconditionError

logger = logging.getLogger(__name__)


class ClusterState(str, Enum):
    """Lifecycle states of a managed cluster handle."""

    STOPPED = "stopped"
    STARTED = "started"
    TERMINATED = "terminated"


StateCallback = Callable[[ClusterState, str], None]


class ClusterStateMachine:
    """Thread-safe state holder with compare-and-set transition guards.

    Only one transition runs at a time; a second caller fails with
    :class:`StatePreconditionError` instead of waiting. TERMINATED admits
    no further transitions.
    """

    def __init__(self) -> None:
        self._state = ClusterState.STOPPED
        self._lock = threading.Lock()
        self._in_flight: Optional[str] = None
        self._callbacks: list[StateCallback] = []

    @property
    def state(self) -> ClusterState:
        with self._lock:
            return self._state

    @property
    def in_flight(self) -> Optional[str]:
        with self._lock:
            return self._in_flight

    def register_callback(self, callback: StateCallback) -> None:
        """Register a callback invoked with (new_state, transition) on every change."""
        self._callbacks.append(callback)

    @contextmanager
    def transition(self, name: str) -> Iterator[None]:
        """Claim the right to run transition ``name``.

        Raises:
            StatePreconditionError: if the cluster is terminated or another
                transition is in progress.
        """
        with self._lock:
            if self._state is ClusterState.TERMINATED:
                raise StatePreconditionError(
                    f"Cannot {name} a cluster that is terminated.",
                    context={"transition": name, "state": self._state.value},
                )
            if self._in_flight is not None:
                raise StatePreconditionError(
                    f"Cannot {name} while {self._in_flight} is in progress.",
                    context={
                        "transition": name,
                        "state": self._state.value,
                        "in_flight": self._in_flight,
                    },
                )
            self._in_flight = name
        try:
            yield
        finally:
            with self._lock:
                self._in_flight = None

    def set_state(self, new_state: ClusterState, transition: str) -> None:
        with self._lock:
            self._state = new_state
        for callback in list(self._callbacks):
            try:
                callback(new_state, transition)
            except Exception:
                logger.exception("State callback failed on %s -> %s", transition, new_state.value)
