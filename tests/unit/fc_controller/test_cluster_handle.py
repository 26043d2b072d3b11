"""Lifecycle law of the cluster handle."""

from __future__ import annotations

import pytest

from fc_common.errors import StatePreconditionError
from fc_controller.api import ClusterHandle, ClusterState, Role
from tests.helpers.fakes import Rig, make_topology


pytestmark = pytest.mark.unit_controller


class _Context:
    def __init__(self) -> None:
        self.closed = 0

    def close(self) -> None:
        self.closed += 1


def _handle(**rig_kwargs) -> tuple[ClusterHandle, Rig]:
    rig = Rig(make_topology(), **rig_kwargs)
    return ClusterHandle(rig.sequencer), rig


def test_fresh_handle_is_stopped() -> None:
    handle, _ = _handle()
    assert handle.state is ClusterState.STOPPED
    assert handle.monitor == "mon1"
    assert handle.topology.workers == ("w1", "w2")


def test_start_terminate_then_everything_fails() -> None:
    handle, rig = _handle()

    handle.start()
    assert handle.state is ClusterState.STARTED

    handle.terminate()
    assert handle.state is ClusterState.TERMINATED

    before = rig.remote.count()
    for op in (handle.start, handle.stop, handle.terminate):
        with pytest.raises(StatePreconditionError):
            op()
    assert handle.state is ClusterState.TERMINATED
    assert rig.remote.count() == before


def test_start_sets_goal_state_then_starts_workers_first() -> None:
    handle, rig = _handle()
    handle.start()

    assert rig.admin.goal_states == ["NORMAL"]
    kinds = rig.events.kinds()
    assert kinds[0] == "admin-goal"
    starts = [e for e in rig.events.entries if e[0] == "start"]
    roles = [role for _, role, _ in starts]
    assert roles[:2] == ["tserver", "tserver"]
    assert roles[2:] == ["manager", "gc", "monitor", "tracer"]


def test_goal_state_failure_does_not_block_start() -> None:
    handle, rig = _handle(admin_fail=True)
    handle.start()
    assert handle.state is ClusterState.STARTED


def test_stop_sets_stopped_even_when_dispatch_fails() -> None:
    handle, rig = _handle(fail_commands=["stop", "kill"], admin_fail=True, purge_fail=True)
    handle.start()
    report = handle.stop()

    assert handle.state is ClusterState.STOPPED
    assert report.admin_ok is False
    assert report.purge_ok is False
    assert report.failures


def test_terminate_from_stopped_skips_stop() -> None:
    handle, rig = _handle()
    handle.terminate()
    assert handle.state is ClusterState.TERMINATED
    assert rig.admin.stop_all_calls == 0
    assert rig.remote.count() == 0


def test_terminate_from_started_stops_first() -> None:
    handle, rig = _handle()
    states = []
    handle.register_callback(lambda state, name: states.append((state, name)))
    handle.start()
    handle.terminate()

    assert rig.admin.stop_all_calls == 1
    assert states == [
        (ClusterState.STARTED, "start"),
        (ClusterState.STOPPED, "terminate"),
        (ClusterState.TERMINATED, "terminate"),
    ]
    assert frozenset({Role.COORDINATOR, Role.WORKER, Role.TRACER}) in rig.purger.purges


def test_terminate_closes_context_only_if_created() -> None:
    created = []

    def factory() -> _Context:
        ctx = _Context()
        created.append(ctx)
        return ctx

    rig = Rig(make_topology())
    handle = ClusterHandle(rig.sequencer, context_factory=factory)
    handle.terminate()
    assert created == []

    rig = Rig(make_topology())
    handle = ClusterHandle(rig.sequencer, context_factory=factory)
    assert handle.server_context() is handle.server_context()
    handle.terminate()
    assert len(created) == 1
    assert created[0].closed == 1


def test_server_context_requires_factory() -> None:
    handle, _ = _handle()
    with pytest.raises(RuntimeError):
        handle.server_context()
