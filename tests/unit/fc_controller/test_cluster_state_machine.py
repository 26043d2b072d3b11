import threading

import pytest

from fc_common.errors import StatePreconditionError
from fc_controller.engine.state import ClusterState, ClusterStateMachine


pytestmark = pytest.mark.unit_controller


def test_initial_state_is_stopped():
    sm = ClusterStateMachine()
    assert sm.state == ClusterState.STOPPED
    assert sm.in_flight is None


def test_transition_sets_and_clears_in_flight():
    sm = ClusterStateMachine()
    with sm.transition("start"):
        assert sm.in_flight == "start"
        sm.set_state(ClusterState.STARTED, "start")
    assert sm.in_flight is None
    assert sm.state == ClusterState.STARTED


def test_overlapping_transition_is_rejected():
    sm = ClusterStateMachine()
    with sm.transition("start"):
        with pytest.raises(StatePreconditionError) as excinfo:
            with sm.transition("stop"):
                pass
    assert excinfo.value.context["in_flight"] == "start"
    assert sm.state == ClusterState.STOPPED


def test_terminated_rejects_everything():
    sm = ClusterStateMachine()
    with sm.transition("terminate"):
        sm.set_state(ClusterState.TERMINATED, "terminate")
    for name in ("start", "stop", "terminate"):
        with pytest.raises(StatePreconditionError, match="terminated") as excinfo:
            with sm.transition(name):
                pass
        assert excinfo.value.context == {"transition": name, "state": "terminated"}
    assert sm.state == ClusterState.TERMINATED


def test_failure_inside_transition_releases_guard():
    sm = ClusterStateMachine()
    with pytest.raises(RuntimeError):
        with sm.transition("start"):
            raise RuntimeError("dispatch exploded")
    assert sm.in_flight is None
    assert sm.state == ClusterState.STOPPED


def test_callbacks_receive_changes_and_errors_are_contained():
    sm = ClusterStateMachine()
    seen = []
    sm.register_callback(lambda state, name: seen.append((state, name)))
    sm.register_callback(lambda *_: (_ for _ in ()).throw(ValueError("bad callback")))

    sm.set_state(ClusterState.STARTED, "start")

    assert seen == [(ClusterState.STARTED, "start")]
    assert sm.state == ClusterState.STARTED


def test_concurrent_transitions_race_onto_precondition_error():
    sm = ClusterStateMachine()
    entered = threading.Event()
    release = threading.Event()
    errors = []

    def slow_start():
        with sm.transition("start"):
            entered.set()
            release.wait(5)
            sm.set_state(ClusterState.STARTED, "start")

    worker = threading.Thread(target=slow_start)
    worker.start()
    assert entered.wait(5)
    try:
        with sm.transition("stop"):
            pass
    except StatePreconditionError as exc:
        errors.append(exc)
    release.set()
    worker.join(5)

    assert len(errors) == 1
    assert sm.state == ClusterState.STARTED
