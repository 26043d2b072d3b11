"""Ordering and escalation of fleet start/stop/kill."""

from __future__ import annotations

import pytest

from fc_controller.api import Role
from tests.helpers.fakes import Rig, make_topology


pytestmark = pytest.mark.unit_controller

NON_WORKER = ["manager", "gc", "monitor", "tracer"]


def _dispatches(rig: Rig) -> list[tuple[str, ...]]:
    return [e for e in rig.events.entries if e[0] in {"start", "stop", "kill"}]


def test_stop_workers_is_stop_sleep_kill_purge() -> None:
    rig = Rig(make_topology(workers=("w1", "w2", "w3")))
    report = rig.sequencer.stop_workers()

    kinds = rig.events.kinds()
    assert kinds == ["stop"] * 3 + ["sleep"] + ["kill"] * 3 + ["purge"]
    assert rig.sleeps == [10.0]
    assert rig.purger.purges == [frozenset({Role.WORKER})]
    assert report.purge_ok is True


def test_stop_workers_is_unconditional_when_every_stop_fails() -> None:
    rig = Rig(make_topology(workers=("w1", "w2")), fail_commands=["stop"])
    report = rig.sequencer.stop_workers()

    kinds = rig.events.kinds()
    assert kinds == ["stop", "stop", "sleep", "kill", "kill", "purge"]
    assert len(report.failures) == 2
    assert {o.instance.host for o in report.outcomes if o.command.value == "kill"} == {"w1", "w2"}


def test_stop_all_sequence() -> None:
    rig = Rig(make_topology())
    report = rig.sequencer.stop_all()

    kinds = rig.events.kinds()
    assert kinds[0] == "admin-stop-all"
    assert kinds[1] == "sleep"
    assert rig.sleeps == [5.0, 10.0]

    dispatches = _dispatches(rig)
    singleton = [(verb, role) for verb, role, _ in dispatches if role != "tserver"]
    assert singleton == [("stop", r) for r in NON_WORKER] + [("kill", r) for r in NON_WORKER]

    # workers come after every singleton dispatch
    first_worker = next(i for i, e in enumerate(dispatches) if e[1] == "tserver")
    assert all(e[1] == "tserver" for e in dispatches[first_worker:])

    assert rig.purger.purges == [
        frozenset({Role.WORKER}),
        frozenset({Role.COORDINATOR, Role.WORKER, Role.TRACER}),
    ]
    assert report.admin_ok is True
    assert report.purge_ok is True


def test_stop_all_escalates_even_after_successful_admin_stop() -> None:
    rig = Rig(make_topology())
    rig.sequencer.stop_all()
    verbs = {(verb, role) for verb, role, _ in _dispatches(rig)}
    for role in NON_WORKER + ["tserver"]:
        assert ("stop", role) in verbs
        assert ("kill", role) in verbs


def test_stop_all_continues_after_admin_and_dispatch_failures() -> None:
    rig = Rig(make_topology(), admin_fail=True, fail_hosts=["m1", "w1"], purge_fail=True)
    report = rig.sequencer.stop_all()

    assert report.admin_ok is False
    assert report.purge_ok is False
    assert {o.instance.host for o in report.failures} == {"m1", "w1"}
    assert len(rig.purger.purges) == 2


def test_kill_all_has_no_grace_and_purges_coordinator_and_workers() -> None:
    rig = Rig(make_topology())
    rig.sequencer.kill_all()

    assert rig.sleeps == []
    assert rig.admin.stop_all_calls == 0
    roles = [role for verb, role, _ in _dispatches(rig)]
    assert all(verb == "kill" for verb, _, _ in _dispatches(rig))
    assert roles == NON_WORKER + ["tserver", "tserver"]
    assert rig.purger.purges == [frozenset({Role.COORDINATOR, Role.WORKER})]


def test_start_all_workers_first() -> None:
    rig = Rig(make_topology(coordinators=("m1", "m2")))
    report = rig.sequencer.start_all()

    roles = [role for _, role, _ in _dispatches(rig)]
    assert roles == ["tserver", "tserver", "manager", "manager", "gc", "monitor", "tracer"]
    assert report.barriers == 1


def test_restart_stops_then_starts() -> None:
    rig = Rig(make_topology())
    report = rig.sequencer.restart()

    verbs = [verb for verb, _, _ in _dispatches(rig)]
    last_kill = max(i for i, v in enumerate(verbs) if v == "kill")
    first_start = verbs.index("start")
    assert last_kill < first_start
    assert report.operation == "restart"
    assert report.admin_ok is True


def test_multi_instance_workers_on_stop() -> None:
    rig = Rig(make_topology(workers=("w1",)), workers_per_host=3)
    report = rig.sequencer.stop_workers()
    assert len(report.outcomes) == 6
    assert sorted(cmd for host, cmd in rig.remote.calls)[0].startswith("FC_SERVICE_INSTANCE=1 ")


def test_start_here_acts_on_first_local_entry_only() -> None:
    topology = make_topology(
        workers=("w1", "node1", "localhost", "node1"),
        coordinators=("m1", "node1"),
        monitor="node1",
        tracers=("t1",),
        garbage_collectors=("node1", "localhost"),
    )
    rig = Rig(topology, local_names=["node1"], workers_per_host=2)
    report = rig.sequencer.start_here()

    assert rig.remote.calls == []
    hosts_by_role: dict[str, list[str]] = {}
    for outcome in report.outcomes:
        hosts_by_role.setdefault(outcome.instance.role.value, []).append(outcome.instance.host)
    assert hosts_by_role == {
        "tserver": ["node1", "node1"],
        "manager": ["node1"],
        "gc": ["node1"],
        "monitor": ["node1"],
    }


def test_stop_here_requests_worker_stop_then_escalates_locally() -> None:
    topology = make_topology(workers=("w1", "localhost"), coordinators=("localhost",))
    rig = Rig(topology)
    report = rig.sequencer.stop_here()

    assert rig.admin.stopped_workers == ["localhost"]
    assert report.admin_ok is True
    local_argv = [argv for argv, _ in rig.local.calls]
    assert local_argv == [
        ["fleet-service", "tserver", "stop"],
        ["fleet-service", "manager", "stop"],
        ["fleet-service", "tserver", "kill"],
        ["fleet-service", "manager", "kill"],
    ]
    assert rig.remote.calls == []


def test_stop_here_without_local_entries_does_nothing() -> None:
    rig = Rig(make_topology())
    report = rig.sequencer.stop_here()
    assert report.outcomes == []
    assert report.admin_ok is None
    assert rig.admin.stopped_workers == []


def test_local_dispatch_failures_are_reported() -> None:
    rig = Rig(make_topology(workers=("localhost",)), local_fail=True)
    report = rig.sequencer.start_workers()
    assert len(report.failures) == 1
    assert report.failures[0].local is True


def test_stop_all_reports_an_earlier_purge_failure() -> None:
    rig = Rig(make_topology())
    rig.purger.fail_calls = {0}
    report = rig.sequencer.stop_all()

    # worker purge failed, final purge succeeded
    assert len(rig.purger.purges) == 2
    assert report.purge_ok is False


def test_restart_keeps_the_stop_purge_failure() -> None:
    rig = Rig(make_topology(), purge_fail=True)
    report = rig.sequencer.restart()
    assert report.purge_ok is False


def test_closed_rig_refuses_new_dispatches() -> None:
    with Rig(make_topology()) as rig:
        rig.sequencer.start_workers()
    with pytest.raises(RuntimeError):
        rig.sequencer.start_workers()
