import datetime
import time

import pytest

from survey_insights.cleanup import SessionCleanupService
from survey_insights.session_data import SessionStatus, SurveySession
from survey_insights.session_store import ThreadSafeSessionStore

HOUR = datetime.timedelta(hours=1)


def _now():
    return datetime.datetime.now(datetime.timezone.utc)


@pytest.fixture()
def store():
    return ThreadSafeSessionStore()


def _add(store, session_id, idle):
    session = SurveySession(session_id, f"inst-{session_id}", f"tok-{session_id}")
    session.last_activity_at = _now() - idle
    store.add_session(session)
    return session


def test_idle_sessions_are_expired(store):
    idle = _add(store, "idle", 3 * HOUR)
    fresh = _add(store, "fresh", datetime.timedelta(minutes=5))
    service = SessionCleanupService(store, timeout=HOUR, interval_seconds=60)

    assert service.perform_cleanup() == 1
    assert idle.status is SessionStatus.EXPIRED
    assert idle.metadata["expiredBy"] == "cleanup-service"
    assert fresh.status is SessionStatus.STARTED

    # a second sweep has nothing left to do
    assert service.perform_cleanup() == 0


def test_naive_now_is_treated_as_utc(store):
    idle = _add(store, "idle", 3 * HOUR)
    fresh = _add(store, "fresh", datetime.timedelta(minutes=5))
    service = SessionCleanupService(store, timeout=HOUR, interval_seconds=60)

    naive_now = _now().replace(tzinfo=None)

    assert service.perform_cleanup(now=naive_now) == 1
    assert idle.status is SessionStatus.EXPIRED
    assert fresh.status is SessionStatus.STARTED


def test_offset_now_is_converted(store):
    idle = _add(store, "idle", 3 * HOUR)
    service = SessionCleanupService(store, timeout=HOUR, interval_seconds=60)
    plus_two = datetime.timezone(datetime.timedelta(hours=2))

    assert service.perform_cleanup(now=_now().astimezone(plus_two)) == 1
    assert idle.status is SessionStatus.EXPIRED


def test_closed_sessions_are_left_alone(store):
    done = _add(store, "done", 3 * HOUR)
    done.complete()
    done.last_activity_at = _now() - 3 * HOUR
    service = SessionCleanupService(store, timeout=HOUR, interval_seconds=60)

    assert service.perform_cleanup() == 0
    assert done.status is SessionStatus.COMPLETED


def test_batches_cover_every_stale_session(store):
    for i in range(5):
        _add(store, f"s{i}", 2 * HOUR)
    service = SessionCleanupService(store, timeout=HOUR, interval_seconds=60, batch_size=2)

    assert service.perform_cleanup() == 5


def test_failing_store_does_not_raise(store, monkeypatch):
    _add(store, "idle", 3 * HOUR)

    def boom(*_args, **_kwargs):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(store, "modify_session", boom)
    service = SessionCleanupService(store, timeout=HOUR, interval_seconds=60)

    assert service.perform_cleanup() == 0


def test_invalid_interval():
    with pytest.raises(ValueError):
        SessionCleanupService(ThreadSafeSessionStore(), interval_seconds=0)


def test_start_runs_first_sweep_and_stop_joins(store):
    idle = _add(store, "idle", 3 * HOUR)
    service = SessionCleanupService(store, timeout=HOUR, interval_seconds=3600)

    service.start()
    service.start()  # second start is a no-op
    try:
        deadline = time.monotonic() + 2
        while idle.status is not SessionStatus.EXPIRED and time.monotonic() < deadline:
            time.sleep(0.01)
        assert service.is_running
    finally:
        service.stop()

    assert idle.status is SessionStatus.EXPIRED
    assert not service.is_running
