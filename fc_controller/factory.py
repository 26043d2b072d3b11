"""Wire settings, topology and collaborators into a cluster handle."""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from fc_controller.adapters.admin import (
    AdminClient,
    CommandAdminClient,
    CommandCoordinationPurger,
    CoordinationPurger,
)
from fc_controller.adapters.local import LocalProcessRunner
from fc_controller.adapters.remote import FabricRemoteExecutor
from fc_controller.dispatch.dispatcher import Dispatcher, LocalRunner, RemoteExecutor
from fc_controller.engine.cluster import ClusterHandle
from fc_controller.engine.sequencer import FleetSequencer
from fc_controller.identity import LocalIdentity
from fc_controller.models.settings import ControlSettings
from fc_controller.models.topology import Topology
from fc_controller.topology.resolver import load_topology
from fc_controller.topology.source import ConfigSource, DirectoryConfigSource


def build_dispatcher(
    settings: ControlSettings,
    *,
    identity: Optional[LocalIdentity] = None,
    local_runner: Optional[LocalRunner] = None,
    remote_executor: Optional[RemoteExecutor] = None,
) -> Dispatcher:
    return Dispatcher(
        settings=settings,
        identity=identity or LocalIdentity(),
        local_runner=local_runner or LocalProcessRunner(),
        remote_executor=remote_executor
        or FabricRemoteExecutor(
            user=settings.ssh_user,
            port=settings.ssh_port,
            key_filename=settings.ssh_key,
            connect_timeout=settings.connect_timeout,
            command_timeout=settings.command_timeout,
        ),
    )


def build_sequencer(
    settings: ControlSettings,
    topology: Topology,
    *,
    identity: Optional[LocalIdentity] = None,
    local_runner: Optional[LocalRunner] = None,
    remote_executor: Optional[RemoteExecutor] = None,
    admin: Optional[AdminClient] = None,
    purger: Optional[CoordinationPurger] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> FleetSequencer:
    dispatcher = build_dispatcher(
        settings,
        identity=identity,
        local_runner=local_runner,
        remote_executor=remote_executor,
    )
    admin_runner = LocalProcessRunner()
    return FleetSequencer(
        topology=topology,
        dispatcher=dispatcher,
        admin=admin
        or CommandAdminClient(settings.admin_command, admin_runner, timeout=settings.admin_timeout),
        purger=purger
        or CommandCoordinationPurger(
            settings.admin_command, admin_runner, timeout=settings.admin_timeout
        ),
        settings=settings,
        sleep=sleep,
    )


def open_cluster(
    settings: ControlSettings,
    source: Optional[ConfigSource] = None,
    *,
    context_factory: Optional[Callable[[], Any]] = None,
    **collaborators: Any,
) -> ClusterHandle:
    """Resolve the topology, then build a handle over it.

    The topology is fully validated (and inferred defaults persisted) before
    any dispatch machinery exists, so configuration errors surface first.
    """
    topology = load_topology(source or DirectoryConfigSource(settings.conf_dir))
    sequencer = build_sequencer(settings, topology, **collaborators)
    return ClusterHandle(sequencer, context_factory=context_factory)
