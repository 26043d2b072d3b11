"""Managed cluster handle: lifecycle transitions over a fleet sequencer."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from fc_controller.engine.sequencer import FleetSequencer, SequenceReport
from fc_controller.engine.state import ClusterState, ClusterStateMachine, StateCallback
from fc_controller.models.topology import Topology

logger = logging.getLogger(__name__)


class ClusterHandle:
    """Start, stop and terminate a fleet described by a topology.

    ``context_factory`` builds the (closable) coordination-service context on
    first use of :meth:`server_context`; terminate closes it if it was built.
    """

    def __init__(
        self,
        sequencer: FleetSequencer,
        context_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self._sequencer = sequencer
        self._machine = ClusterStateMachine()
        self._context_factory = context_factory
        self._context: Any = None
        self._context_created = False
        self._context_lock = threading.Lock()

    @property
    def state(self) -> ClusterState:
        return self._machine.state

    @property
    def topology(self) -> Topology:
        return self._sequencer.topology

    @property
    def monitor(self) -> str:
        return self.topology.monitor

    @property
    def control(self) -> FleetSequencer:
        return self._sequencer

    def register_callback(self, callback: StateCallback) -> None:
        self._machine.register_callback(callback)

    def server_context(self) -> Any:
        """Return the memoized coordination-service context."""
        if self._context_factory is None:
            raise RuntimeError("No coordination context factory configured")
        with self._context_lock:
            if not self._context_created:
                self._context = self._context_factory()
                self._context_created = True
            return self._context

    def start(self) -> SequenceReport:
        with self._machine.transition("start"):
            self._sequencer.set_goal_state()
            report = self._sequencer.start_all()
            self._machine.set_state(ClusterState.STARTED, "start")
        return report

    def stop(self) -> SequenceReport:
        with self._machine.transition("stop"):
            report = self._sequencer.stop_all()
            self._machine.set_state(ClusterState.STOPPED, "stop")
        return report

    def terminate(self) -> None:
        with self._machine.transition("terminate"):
            if self._machine.state is ClusterState.STARTED:
                self._sequencer.stop_all()
                self._machine.set_state(ClusterState.STOPPED, "terminate")
            self._release_context()
            self._sequencer.dispatcher.close()
            self._machine.set_state(ClusterState.TERMINATED, "terminate")

    def _release_context(self) -> None:
        with self._context_lock:
            if not self._context_created:
                return
            close = getattr(self._context, "close", None)
            if callable(close):
                logger.debug("Closing coordination context")
                close()
            self._context = None
            self._context_created = False
