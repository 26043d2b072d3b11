"""Controller value objects."""

from fc_controller.models.roles import SINGLETON_ROLES, ControlCommand, Role
from fc_controller.models.settings import ControlSettings
from fc_controller.models.topology import (
    PendingWrite,
    ServiceInstance,
    Topology,
    TopologyResolution,
)

__all__ = [
    "ControlCommand",
    "ControlSettings",
    "PendingWrite",
    "Role",
    "ServiceInstance",
    "SINGLETON_ROLES",
    "Topology",
    "TopologyResolution",
]
