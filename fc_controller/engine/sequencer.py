"""Fleet start/stop sequencing and the graceful -> forced stop escalation.

Stop path, in order:

1. ask the coordinator to stop every role (administrative request),
2. wait ``admin_grace_seconds``,
3. ``stop`` then ``kill`` coordinators, garbage collectors, monitor, tracers,
4. stop workers (``stop``, wait ``worker_grace_seconds``, ``kill``, purge),
5. purge coordinator, worker and tracer registrations.

Step 3 runs even when step 1 succeeded. Dispatch, administrative and purge
failures are logged and never interrupt the sequence.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Collection, Iterable, List, Optional

from fc_common.errors import AdministrativeShutdownFailure, CleanupFailure
from fc_controller.adapters.admin import AdminClient, CoordinationPurger
from fc_controller.dispatch.dispatcher import DispatchOutcome, Dispatcher
from fc_controller.identity import LocalIdentity
from fc_controller.models.roles import SINGLETON_ROLES, ControlCommand, Role
from fc_controller.models.settings import ControlSettings
from fc_controller.models.topology import Topology

logger = logging.getLogger(__name__)

GOAL_STATE_NORMAL = "NORMAL"

ESCALATION = (ControlCommand.STOP, ControlCommand.KILL)

# stop-here visits the local worker first, then the rest.
LOCAL_STOP_ORDER = (
    Role.WORKER,
    Role.GARBAGE_COLLECTOR,
    Role.COORDINATOR,
    Role.MONITOR,
    Role.TRACER,
)


def _all_ok(current: Optional[bool], new: Optional[bool]) -> Optional[bool]:
    """Combine two step results; None means the step did not run."""
    if new is None:
        return current
    if current is None:
        return new
    return current and new


@dataclass
class SequenceReport:
    """What a fleet operation dispatched and how the side requests went."""

    operation: str
    outcomes: List[DispatchOutcome] = field(default_factory=list)
    admin_ok: Optional[bool] = None
    purge_ok: Optional[bool] = None
    barriers: int = 0

    @property
    def failures(self) -> List[DispatchOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    def merge(self, other: "SequenceReport") -> None:
        self.outcomes.extend(other.outcomes)
        self.barriers += other.barriers
        self.admin_ok = _all_ok(self.admin_ok, other.admin_ok)
        self.purge_ok = _all_ok(self.purge_ok, other.purge_ok)


class FleetSequencer:
    """Run whole-fleet and local start/stop/kill operations over a topology."""

    def __init__(
        self,
        topology: Topology,
        dispatcher: Dispatcher,
        admin: AdminClient,
        purger: CoordinationPurger,
        settings: ControlSettings,
        identity: Optional[LocalIdentity] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.topology = topology
        self.dispatcher = dispatcher
        self.admin = admin
        self.purger = purger
        self.settings = settings
        self.identity = identity or dispatcher.identity
        self._sleep = sleep

    def _run(
        self,
        report: SequenceReport,
        role: Role,
        hosts: Iterable[str],
        command: ControlCommand,
    ) -> None:
        report.outcomes.extend(self.dispatcher.run(role, hosts, command))

    def _purge(self, report: SequenceReport, roles: Collection[Role]) -> None:
        names = ", ".join(role.value for role in roles)
        logger.info("Cleaning %s entries from the coordination service", names)
        try:
            self.purger.purge(roles)
        except CleanupFailure as exc:
            logger.warning("%s (will be retried by the next stop or kill)", exc)
            report.purge_ok = False
        else:
            report.purge_ok = _all_ok(report.purge_ok, True)

    def set_goal_state(self, goal: str = GOAL_STATE_NORMAL) -> bool:
        """Ask the coordinator to move to ``goal``; failure is only logged."""
        try:
            self.admin.set_goal_state(goal)
        except AdministrativeShutdownFailure as exc:
            logger.warning("Could not set goal state %s: %s", goal, exc)
            return False
        return True

    def first_local(self, role: Role) -> Optional[str]:
        """Return the first configured host of ``role`` that is this machine."""
        for host in self.topology.hosts(role):
            if self.identity.is_local(host):
                return host
        return None

    def start_workers(self) -> SequenceReport:
        report = SequenceReport("start-workers")
        logger.info("Starting %d worker host(s)", len(self.topology.workers))
        batch = self.dispatcher.start_workers(self.topology.workers)
        report.outcomes.extend(batch.outcomes)
        report.barriers = batch.barriers
        return report

    def start_all(self) -> SequenceReport:
        """Start workers first, then every singleton role in turn."""
        report = SequenceReport("start")
        report.merge(self.start_workers())
        for role in SINGLETON_ROLES:
            self._run(report, role, self.topology.hosts(role), ControlCommand.START)
        return report

    def stop_workers(self) -> SequenceReport:
        """Stop, wait, kill every worker host, then purge worker entries.

        Every step runs regardless of how the previous one went.
        """
        report = SequenceReport("stop-workers")
        logger.info("Stopping unresponsive workers (if any)")
        self._run(report, Role.WORKER, self.topology.workers, ControlCommand.STOP)
        self._sleep(self.settings.worker_grace_seconds)
        self._run(report, Role.WORKER, self.topology.workers, ControlCommand.KILL)
        self._purge(report, [Role.WORKER])
        return report

    def stop_all(self) -> SequenceReport:
        report = SequenceReport("stop")
        try:
            self.admin.request_stop_all()
        except AdministrativeShutdownFailure as exc:
            logger.warning("Graceful stop request failed, escalating: %s", exc)
            report.admin_ok = False
        else:
            logger.info("Requested coordinated stop; waiting for it to take effect")
            report.admin_ok = True
        self._sleep(self.settings.admin_grace_seconds)

        for command in ESCALATION:
            for role in SINGLETON_ROLES:
                self._run(report, role, self.topology.hosts(role), command)

        workers = self.stop_workers()
        report.merge(workers)
        self._purge(report, [Role.COORDINATOR, Role.WORKER, Role.TRACER])
        return report

    def kill_all(self) -> SequenceReport:
        """Kill every role immediately, without grace periods."""
        report = SequenceReport("kill")
        for role in (*SINGLETON_ROLES, Role.WORKER):
            self._run(report, role, self.topology.hosts(role), ControlCommand.KILL)
        self._purge(report, [Role.COORDINATOR, Role.WORKER])
        return report

    def restart(self) -> SequenceReport:
        report = SequenceReport("restart")
        report.merge(self.stop_all())
        report.merge(self.start_all())
        return report

    def start_here(self) -> SequenceReport:
        """Start the first local entry of each role."""
        report = SequenceReport("start-here")
        for role in (Role.WORKER, *SINGLETON_ROLES):
            host = self.first_local(role)
            if host is not None:
                self._run(report, role, [host], ControlCommand.START)
        return report

    def stop_here(self) -> SequenceReport:
        """Stop then kill the first local entry of each role."""
        report = SequenceReport("stop-here")
        worker = self.first_local(Role.WORKER)
        if worker is not None:
            try:
                self.admin.request_stop_worker(worker)
            except AdministrativeShutdownFailure as exc:
                logger.warning("Graceful stop of local worker %s failed: %s", worker, exc)
                report.admin_ok = False
            else:
                report.admin_ok = True
        for command in ESCALATION:
            for role in LOCAL_STOP_ORDER:
                host = self.first_local(role)
                if host is not None:
                    self._run(report, role, [host], command)
        return report
