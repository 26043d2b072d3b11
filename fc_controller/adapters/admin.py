"""Administrative and coordination-service collaborators.

Both talk to the cluster through the admin CLI on the controller host:

    <admin> stop-all
    <admin> set-goal-state NORMAL
    <admin> stop-server <host>
    <admin> zap --managers --tservers --tracers
"""

from __future__ import annotations

import logging
import shlex
from typing import Collection, List, Optional, Protocol

from fc_common.errors import (
    AdministrativeShutdownFailure,
    CleanupFailure,
    CommandExecutionError,
)
from fc_controller.adapters.local import LocalProcessRunner
from fc_controller.models.roles import Role

logger = logging.getLogger(__name__)

# Order matters only for readable command lines.
_ZAP_FLAGS = {
    Role.COORDINATOR: "--managers",
    Role.WORKER: "--tservers",
    Role.TRACER: "--tracers",
}


class AdminClient(Protocol):
    """Administrative RPC surface of the coordinator."""

    def request_stop_all(self) -> None:
        ...

    def set_goal_state(self, goal: str) -> None:
        ...

    def request_stop_worker(self, host: str) -> None:
        ...


class CoordinationPurger(Protocol):
    """Removes stale role registrations from the coordination service."""

    def purge(self, roles: Collection[Role]) -> None:
        ...


class CommandAdminClient:
    """AdminClient backed by the admin CLI."""

    def __init__(
        self,
        admin_command: str,
        runner: Optional[LocalProcessRunner] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._base = shlex.split(admin_command)
        self._runner = runner or LocalProcessRunner()
        self._timeout = timeout

    def _call(self, *args: str) -> None:
        argv = [*self._base, *args]
        try:
            self._runner.run(argv, timeout=self._timeout)
        except CommandExecutionError as exc:
            raise AdministrativeShutdownFailure(
                f"Administrative request '{' '.join(args)}' failed: {exc}",
                context={"argv": argv, **exc.context},
                cause=exc,
            ) from exc

    def request_stop_all(self) -> None:
        self._call("stop-all")

    def set_goal_state(self, goal: str) -> None:
        self._call("set-goal-state", goal)

    def request_stop_worker(self, host: str) -> None:
        self._call("stop-server", host)


class CommandCoordinationPurger:
    """CoordinationPurger backed by the admin CLI ``zap`` verb."""

    def __init__(
        self,
        admin_command: str,
        runner: Optional[LocalProcessRunner] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._base = shlex.split(admin_command)
        self._runner = runner or LocalProcessRunner()
        self._timeout = timeout

    def build_argv(self, roles: Collection[Role]) -> List[str]:
        flags = [flag for role, flag in _ZAP_FLAGS.items() if role in roles]
        if not flags:
            raise ValueError(f"No purgeable roles in {sorted(r.value for r in roles)}")
        return [*self._base, "zap", *flags]

    def purge(self, roles: Collection[Role]) -> None:
        argv = self.build_argv(roles)
        try:
            self._runner.run(argv, timeout=self._timeout)
        except CommandExecutionError as exc:
            raise CleanupFailure(
                f"Purging registrations failed: {exc}",
                context={"roles": sorted(role.value for role in roles), **exc.context},
                cause=exc,
            ) from exc
