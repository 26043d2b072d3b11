"""Server roles managed by the fleet controller."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Server process categories; the value is the service name."""

    COORDINATOR = "manager"
    WORKER = "tserver"
    GARBAGE_COLLECTOR = "gc"
    MONITOR = "monitor"
    TRACER = "tracer"

    @property
    def hosts_file(self) -> str:
        return _HOSTS_FILES[self]

    @property
    def legacy_file(self) -> Optional[str]:
        return _LEGACY_FILES.get(self)

    @property
    def multi_instance(self) -> bool:
        """Only workers may run several instances per host."""
        return self is Role.WORKER


_HOSTS_FILES = {
    Role.COORDINATOR: "managers",
    Role.WORKER: "tservers",
    Role.GARBAGE_COLLECTOR: "gc",
    Role.MONITOR: "monitor",
    Role.TRACER: "tracers",
}

_LEGACY_FILES = {
    Role.COORDINATOR: "masters",
    Role.WORKER: "slaves",
}

# Non-worker roles in the order the stop and kill sweeps visit them.
SINGLETON_ROLES = (
    Role.COORDINATOR,
    Role.GARBAGE_COLLECTOR,
    Role.MONITOR,
    Role.TRACER,
)


class ControlCommand(str, Enum):
    """Verbs understood by the per-instance service control script."""

    START = "start"
    STOP = "stop"
    KILL = "kill"
