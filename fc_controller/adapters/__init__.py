"""Adapters for process launch, SSH and the cluster's admin CLI."""

from fc_controller.adapters.admin import (
    AdminClient,
    CommandAdminClient,
    CommandCoordinationPurger,
    CoordinationPurger,
)
from fc_controller.adapters.local import LocalProcessRunner
from fc_controller.adapters.remote import FabricRemoteExecutor

__all__ = [
    "AdminClient",
    "CommandAdminClient",
    "CommandCoordinationPurger",
    "CoordinationPurger",
    "FabricRemoteExecutor",
    "LocalProcessRunner",
]
