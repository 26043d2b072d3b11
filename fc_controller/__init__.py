"""Fleet lifecycle controller.

Resolves the role -> hosts topology, dispatches start/stop/kill to each
role instance locally or over SSH, and sequences graceful and forced
fleet shutdown.
"""

from fc_controller.api import (
    ClusterHandle,
    ClusterState,
    ControlSettings,
    FleetSequencer,
    Role,
    Topology,
    load_topology,
    open_cluster,
)

__all__ = [
    "ClusterHandle",
    "ClusterState",
    "ControlSettings",
    "FleetSequencer",
    "Role",
    "Topology",
    "load_topology",
    "open_cluster",
]
