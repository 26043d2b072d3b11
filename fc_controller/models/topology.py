"""Resolved topology value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from fc_controller.models.roles import Role


@dataclass(frozen=True)
class Topology:
    """Validated role -> hosts mapping.

    Host order and duplicates are kept exactly as listed in the hosts files.
    """

    workers: Tuple[str, ...]
    coordinators: Tuple[str, ...]
    monitor: str
    tracers: Tuple[str, ...]
    garbage_collectors: Tuple[str, ...]

    def hosts(self, role: Role) -> Tuple[str, ...]:
        """Return the hosts configured for ``role``."""
        if role is Role.WORKER:
            return self.workers
        if role is Role.COORDINATOR:
            return self.coordinators
        if role is Role.MONITOR:
            return (self.monitor,)
        if role is Role.TRACER:
            return self.tracers
        return self.garbage_collectors

    def as_dict(self) -> dict[str, list[str]]:
        return {role.value: list(self.hosts(role)) for role in Role}


@dataclass(frozen=True)
class PendingWrite:
    """An inferred hosts file that should be persisted to the config source."""

    role: Role
    file_name: str
    hosts: Tuple[str, ...]


@dataclass(frozen=True)
class TopologyResolution:
    """Outcome of resolving a config source, before any write-back."""

    topology: Topology
    pending_writes: Tuple[PendingWrite, ...] = ()
    warnings: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ServiceInstance:
    """One numbered process of a role on a host."""

    role: Role
    host: str
    index: int = 1
    numbered: bool = False

    @property
    def instance_env(self) -> str:
        """Value exported to the service script; empty for single instances."""
        return str(self.index) if self.numbered else ""

    @property
    def identity(self) -> str:
        label = f"{self.role.value}@{self.host}"
        if self.numbered:
            label = f"{label}#{self.index}"
        return label
