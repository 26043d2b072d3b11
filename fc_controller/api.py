"""Public controller API surface."""

from fc_controller.adapters.admin import (
    AdminClient,
    CommandAdminClient,
    CommandCoordinationPurger,
    CoordinationPurger,
)
from fc_controller.adapters.local import LocalProcessRunner
from fc_controller.adapters.remote import FabricRemoteExecutor
from fc_controller.dispatch.dispatcher import (
    WORKER_START_BATCH,
    BatchReport,
    DispatchOutcome,
    Dispatcher,
)
from fc_controller.engine.cluster import ClusterHandle
from fc_controller.engine.sequencer import FleetSequencer, SequenceReport
from fc_controller.engine.state import ClusterState, ClusterStateMachine
from fc_controller.factory import build_dispatcher, build_sequencer, open_cluster
from fc_controller.identity import LocalIdentity
from fc_controller.models.roles import ControlCommand, Role
from fc_controller.models.settings import ControlSettings
from fc_controller.models.topology import (
    PendingWrite,
    ServiceInstance,
    Topology,
    TopologyResolution,
)
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
)

__all__ = [
    "AdminClient",
    "BatchReport",
    "ClusterHandle",
    "ClusterState",
    "ClusterStateMachine",
    "CommandAdminClient",
    "CommandCoordinationPurger",
    "ConfigSource",
    "ControlCommand",
    "ControlSettings",
    "CoordinationPurger",
    "DirectoryConfigSource",
    "DispatchOutcome",
    "Dispatcher",
    "FabricRemoteExecutor",
    "FleetSequencer",
    "LocalIdentity",
    "LocalProcessRunner",
    "MemoryConfigSource",
    "PendingWrite",
    "Role",
    "SequenceReport",
    "ServiceInstance",
    "Topology",
    "TopologyResolution",
    "WORKER_START_BATCH",
    "apply_write_backs",
    "build_dispatcher",
    "build_sequencer",
    "create_default_config",
    "load_topology",
    "open_cluster",
    "resolve_topology",
]
