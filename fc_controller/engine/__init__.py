"""Lifecycle state, sequencing and the cluster handle."""

from fc_controller.engine.cluster import ClusterHandle
from fc_controller.engine.sequencer import FleetSequencer, SequenceReport
from fc_controller.engine.state import ClusterState, ClusterStateMachine

__all__ = [
    "ClusterHandle",
    "ClusterState",
    "ClusterStateMachine",
    "FleetSequencer",
    "SequenceReport",
]
