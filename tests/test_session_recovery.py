import json

from backend.storage import ACTIVE_SESSION_KEYS
from backend.workout_session import WorkoutSession


def _resume(repo, clock, **kwargs):
    return WorkoutSession.load_from_recovery(repo, clock=clock, now=clock.time, **kwargs)


def test_snapshot_written_to_both_keys(store, make_session, push_routine):
    session = make_session(push_routine, "d1")
    session.update_set(0, 0, "reps", 8)
    first, second = (store.get(key) for key in ACTIVE_SESSION_KEYS)
    assert first == second
    assert json.loads(first) == session.to_snapshot().to_dict()


def test_resume_restores_elapsed_time(repo, make_session, push_routine, clock):
    make_session(push_routine, "d1")
    clock.sleep(125)
    resumed = _resume(repo, clock)
    assert resumed.elapsed_seconds() == 125
    assert resumed.formatted_elapsed() == "2:05"


def test_resume_keeps_edits(repo, make_session, push_routine, clock):
    session = make_session(push_routine, "d1")
    session.update_set(0, 1, "weight", 57.5)
    session.toggle_set(0, 0)
    resumed = _resume(repo, clock)
    assert resumed.log.id == session.log.id
    assert resumed.exercises[0].sets[1].weight == 57.5
    assert resumed.exercises[0].sets[0].completed
    assert resumed.routine_id == "r1"
    assert resumed.day_id == "d1"


def test_corrupt_primary_copy_falls_back(store, repo, make_session, push_routine, clock):
    session = make_session(push_routine, "d1")
    store.set(ACTIVE_SESSION_KEYS[0], "{not json")
    resumed = _resume(repo, clock)
    assert resumed.log.id == session.log.id


def test_unreadable_snapshots_mean_no_session(store, repo, make_session, push_routine, clock):
    make_session(push_routine, "d1")
    store.set(ACTIVE_SESSION_KEYS[0], "{not json")
    store.set(ACTIVE_SESSION_KEYS[1], json.dumps({"log": {}}))
    assert _resume(repo, clock) is None


def test_resume_or_start(repo, make_session, push_routine, clock, cues):
    original = make_session(push_routine, "d1")
    again = WorkoutSession.resume_or_start(
        repo, push_routine, "d1", clock=clock, now=clock.time, cue_player=cues
    )
    assert again.log.id == original.log.id

    original.cancel()
    fresh = WorkoutSession.resume_or_start(
        repo, push_routine, "d1", clock=clock, now=clock.time, cue_player=cues
    )
    assert fresh.log.id != original.log.id


def test_resync_timers_after_pause(make_session, push_routine, cues, clock):
    session = make_session(push_routine, "d1")
    session.toggle_set(0, 0)
    clock.sleep(30)
    session.resync_timers(30)
    assert session.rest_timer.remaining == 60

    session.resync_timers(100)
    assert session.rest_timer.state is None
    assert cues.kinds[-1] == "rest_finish"


def test_resync_set_timer_expires_on_next_tick(make_session, push_routine, clock):
    session = make_session(push_routine, "d1")
    session.start_set_timer(1, 0)
    session.resync_timers(45)
    assert session.set_timer.remaining == 0
    assert not session.exercises[1].sets[0].completed
    clock.advance(1)
    assert session.exercises[1].sets[0].completed
