from __future__ import annotations

import time

from commit_canvas.models import ProgressState
from commit_canvas.progress import ProgressTracker


def test_ensure_given_unknown_id_when_called_twice_then_same_pending_snapshot_is_returned(tracker) -> None:
    # Given
    progress_id = "run-1"

    # When
    first = tracker.ensure(progress_id)
    second = tracker.ensure(progress_id)

    # Then
    assert first is second
    assert first.status == "pending"
    assert first.progress == 0
    assert tracker.get(progress_id) is first


def test_get_given_unknown_id_when_called_then_nothing_is_created(tracker) -> None:
    # Given
    progress_id = "missing"

    # When
    state = tracker.get(progress_id)

    # Then
    assert state is None
    assert tracker.get(progress_id) is None


def test_update_given_out_of_range_percent_when_updated_then_value_is_clamped_and_message_kept(tracker) -> None:
    # Given
    tracker.start("run-1", "Starting")

    # When
    high = tracker.update("run-1", 140.4)
    low = tracker.update("run-1", -3, "Rewinding")

    # Then
    assert high.progress == 100
    assert high.message == "Starting"
    assert high.status == "running"
    assert low.progress == 0
    assert low.message == "Rewinding"


def test_fail_given_running_progress_when_failed_then_last_percent_and_error_are_kept(tracker) -> None:
    # Given
    tracker.start("run-1")
    tracker.update("run-1", 42)

    # When
    state = tracker.fail("run-1", "git exploded")

    # Then
    assert state.status == "error"
    assert state.progress == 42
    assert state.error == "git exploded"
    assert state.is_terminal


def test_complete_given_running_progress_when_completed_then_full_percent_is_published(tracker) -> None:
    # Given
    received: list[ProgressState] = []
    tracker.subscribe("run-1", received.append)
    tracker.start("run-1")

    # When
    tracker.complete("run-1")

    # Then
    assert [(state.status, state.progress) for state in received] == [("running", 0), ("complete", 100)]
    assert received[-1].message == "Complete"


def test_subscribe_given_two_listeners_when_one_unsubscribes_then_the_other_keeps_receiving(tracker) -> None:
    # Given
    first: list[int] = []
    second: list[int] = []
    unsubscribe_first = tracker.subscribe("run-1", lambda state: first.append(state.progress))
    tracker.subscribe("run-1", lambda state: second.append(state.progress))
    tracker.update("run-1", 10)

    # When
    unsubscribe_first()
    unsubscribe_first()
    tracker.update("run-1", 20)

    # Then
    assert first == [10]
    assert second == [10, 20]
    assert tracker.listener_count("run-1") == 1


def test_subscribe_given_listener_for_other_id_when_published_then_it_is_not_called(tracker) -> None:
    # Given
    received: list[str] = []
    tracker.subscribe("other", lambda state: received.append(state.id))

    # When
    tracker.update("run-1", 50)

    # Then
    assert received == []


def test_publish_given_failing_listener_when_published_then_other_listeners_still_run(tracker) -> None:
    # Given
    received: list[int] = []

    def broken(_state: ProgressState) -> None:
        raise RuntimeError("listener bug")

    tracker.subscribe("run-1", broken)
    tracker.subscribe("run-1", lambda state: received.append(state.progress))

    # When
    tracker.update("run-1", 30)

    # Then
    assert received == [30]
    assert tracker.get("run-1").progress == 30


def test_stream_given_live_run_when_iterated_then_snapshot_comes_first_and_stream_ends_on_terminal(tracker) -> None:
    # Given
    stream = tracker.stream("run-1", timeout=1)

    # When
    first = next(stream)
    tracker.start("run-1")
    tracker.update("run-1", 60)
    tracker.complete("run-1")
    rest = list(stream)

    # Then
    assert first.status == "pending"
    assert [state.status for state in rest] == ["running", "running", "complete"]
    assert tracker.listener_count("run-1") == 0


def test_stream_given_finished_run_when_iterated_then_only_final_snapshot_is_yielded(tracker) -> None:
    # Given
    tracker.start("run-1")
    tracker.complete("run-1", "Done")

    # When
    states = list(tracker.stream("run-1"))

    # Then
    assert len(states) == 1
    assert states[0].status == "complete"
    assert states[0].message == "Done"


def test_complete_given_short_eviction_delay_when_waiting_then_state_is_evicted() -> None:
    # Given
    tracker = ProgressTracker(eviction_delay=0.05)
    tracker.start("run-1")

    # When
    tracker.complete("run-1")
    deadline = time.monotonic() + 5
    while tracker.get("run-1") is not None and time.monotonic() < deadline:
        time.sleep(0.01)

    # Then
    assert tracker.get("run-1") is None
    tracker.close()


def test_start_given_pending_eviction_when_restarted_then_state_survives() -> None:
    # Given
    tracker = ProgressTracker(eviction_delay=0.05)
    tracker.fail("run-1", "first attempt failed")

    # When
    tracker.start("run-1", "Second attempt")
    time.sleep(0.2)

    # Then
    state = tracker.get("run-1")
    assert state is not None
    assert state.status == "running"
    tracker.close()


def test_to_payload_given_pending_state_when_serialized_then_wire_fields_are_used(tracker) -> None:
    # Given
    state = tracker.ensure("run-1")

    # When
    payload = state.to_payload()

    # Then
    assert set(payload) == {"id", "status", "progress", "message", "updatedAt"}
    assert payload["updatedAt"].endswith("Z")
