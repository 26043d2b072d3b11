"""Resolve and validate the role -> hosts topology.

Resolution is a pure function of the config source. Hosts inferred for the
tracer and garbage collector roles are returned as pending writes and only
persisted by :func:`apply_write_backs`, so a second resolution finds the
files in place and keeps the inferred value.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from fc_common.errors import ConfigurationError
from fc_controller.models.roles import Role
from fc_controller.models.topology import PendingWrite, Topology, TopologyResolution
from fc_controller.topology.source import ConfigSource, parse_hosts

logger = logging.getLogger(__name__)


def _read_hosts(source: ConfigSource, name: str) -> List[str]:
    return parse_hosts(source.read_lines(name))


def _resolve_workers(source: ConfigSource) -> List[str]:
    legacy = Role.WORKER.legacy_file
    current = Role.WORKER.hosts_file
    if legacy and source.exists(legacy):
        raise ConfigurationError(
            f"A '{legacy}' file was found; rename it to '{current}'.",
            context={"role": Role.WORKER.value, "file": legacy},
        )
    if not source.exists(current):
        raise ConfigurationError(
            f"A '{current}' file was not found; run 'fc create-config' to create one.",
            context={"role": Role.WORKER.value, "file": current},
        )
    hosts = _read_hosts(source, current)
    if not hosts:
        raise ConfigurationError(
            f"The '{current}' file lists no hosts.",
            context={"role": Role.WORKER.value, "file": current},
        )
    return hosts


def _resolve_coordinators(source: ConfigSource, warnings: List[str]) -> List[str]:
    current = Role.COORDINATOR.hosts_file
    legacy = Role.COORDINATOR.legacy_file
    if source.exists(current):
        return _read_hosts(source, current)
    if legacy and source.exists(legacy):
        warnings.append(f"Use of '{legacy}' is deprecated; use '{current}' instead.")
        return _read_hosts(source, legacy)
    return []


def _resolve_monitor(source: ConfigSource, default: Optional[str]) -> str:
    name = Role.MONITOR.hosts_file
    if source.exists(name):
        hosts = _read_hosts(source, name)
        if hosts:
            return hosts[0]
    if default is None:
        raise ConfigurationError(
            f"Missing '{name}' file and no '{Role.COORDINATOR.hosts_file}' entry to default to.",
            context={"role": Role.MONITOR.value, "file": name},
        )
    return default


def _resolve_inferable(
    source: ConfigSource,
    role: Role,
    default: Optional[str],
    pending: List[PendingWrite],
) -> List[str]:
    name = role.hosts_file
    if source.exists(name):
        return _read_hosts(source, name)
    if default is None:
        raise ConfigurationError(
            f"Missing '{name}' file and no '{Role.COORDINATOR.hosts_file}' entry to default to.",
            context={"role": role.value, "file": name},
        )
    pending.append(PendingWrite(role=role, file_name=name, hosts=(default,)))
    return [default]


def resolve_topology(source: ConfigSource) -> TopologyResolution:
    """Validate ``source`` and build a :class:`Topology`.

    Raises:
        ConfigurationError: on the first violated rule; nothing is written.
    """
    warnings: List[str] = []
    pending: List[PendingWrite] = []

    workers = _resolve_workers(source)
    coordinators = _resolve_coordinators(source, warnings)
    first_coordinator = coordinators[0] if coordinators else None
    monitor = _resolve_monitor(source, first_coordinator)
    tracers = _resolve_inferable(source, Role.TRACER, first_coordinator, pending)
    garbage_collectors = _resolve_inferable(
        source, Role.GARBAGE_COLLECTOR, first_coordinator, pending
    )

    topology = Topology(
        workers=tuple(workers),
        coordinators=tuple(coordinators),
        monitor=monitor,
        tracers=tuple(tracers),
        garbage_collectors=tuple(garbage_collectors),
    )
    return TopologyResolution(
        topology=topology,
        pending_writes=tuple(pending),
        warnings=tuple(warnings),
    )


def apply_write_backs(source: ConfigSource, resolution: TopologyResolution) -> None:
    """Persist inferred hosts files; files that appeared meanwhile are left alone."""
    for write in resolution.pending_writes:
        if source.exists(write.file_name):
            continue
        logger.info(
            "Defaulting %s to %s and saving it to '%s'",
            write.role.value,
            ", ".join(write.hosts),
            write.file_name,
        )
        source.write_lines(write.file_name, write.hosts)


def load_topology(source: ConfigSource) -> Topology:
    """Resolve, report warnings, persist inferred defaults, return the topology."""
    resolution = resolve_topology(source)
    for message in resolution.warnings:
        logger.warning(message)
    apply_write_backs(source, resolution)
    return resolution.topology


def create_default_config(
    source: ConfigSource,
    host: str = "localhost",
    *,
    overwrite: bool = False,
) -> List[str]:
    """Write a single-host hosts file for every role.

    Returns the names of the files written.

    Raises:
        ConfigurationError: if a hosts file already exists and ``overwrite``
            is false.
    """
    names: Sequence[str] = [role.hosts_file for role in Role]
    existing = [name for name in names if source.exists(name)]
    if existing and not overwrite:
        raise ConfigurationError(
            "Refusing to overwrite existing hosts files.",
            context={"files": existing},
        )
    for name in names:
        source.write_lines(name, [host])
    return list(names)
