"""Topology sources and resolution."""

from fc_controller.topology.resolver import (
    apply_write_backs,
    create_default_config,
    load_topology,
    resolve_topology,
)
from fc_controller.topology.source import (
    ConfigSource,
    DirectoryConfigSource,
    MemoryConfigSource,
    parse_hosts,
)

__all__ = [
    "ConfigSource",
    "DirectoryConfigSource",
    "MemoryConfigSource",
    "apply_write_backs",
    "create_default_config",
    "load_topology",
    "parse_hosts",
    "resolve_topology",
]
