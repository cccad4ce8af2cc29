from datetime import datetime, timedelta

import pytest

from routinesense.core.exceptions import RemoteStoreError
from routinesense.database import USAGE_EVENTS
from routinesense.models.usage import UsageEvent
from routinesense.services.usage_log_service import UsageLogService
from tests.conftest import USER_ID


def seed(remote, count, routine_id="r1"):
    start = datetime(2024, 6, 1)
    for i in range(count):
        remote.collections[USAGE_EVENTS].append(
            UsageEvent(id=f"e{i}", user_id=USER_ID, routine_id=routine_id, action="viewed",
                       timestamp=start + timedelta(minutes=i)).model_dump()
        )


def test_log_event_appends(user_context, remote):
    UsageLogService(user_context).log_event(USER_ID, "r1", "viewed")

    [stored] = remote.collections[USAGE_EVENTS]
    assert stored["action"] == "viewed"
    assert stored["routine_id"] == "r1"


def test_guest_events_are_not_recorded(guest_context, remote):
    UsageLogService(guest_context).log_event(None, "r1", "viewed")
    assert remote.calls == []


def test_unknown_action_is_ignored(user_context, remote):
    UsageLogService(user_context).log_event(USER_ID, "r1", "shared")
    assert remote.collections[USAGE_EVENTS] == []


def test_write_failure_is_swallowed(user_context, remote):
    remote.failing.add("insert")
    UsageLogService(user_context).log_event(USER_ID, "r1", "viewed")
    assert remote.collections[USAGE_EVENTS] == []


def test_events_are_newest_first_and_capped(user_context, remote):
    seed(remote, 60)

    events = UsageLogService(user_context).load_events(USER_ID)

    assert len(events) == 50
    assert events[0].id == "e59"
    assert events == sorted(events, key=lambda e: e.timestamp, reverse=True)


def test_events_filtered_by_routine(user_context, remote):
    seed(remote, 3, routine_id="r1")
    seed(remote, 2, routine_id="r2")

    assert len(UsageLogService(user_context).load_events(USER_ID, "r2")) == 2


def test_load_failure(user_context, remote):
    remote.failing.add("find")
    service = UsageLogService(user_context)

    assert service.load_events(USER_ID) == []
    with pytest.raises(RemoteStoreError):
        service.load_events_result(USER_ID).unwrap()
