import pytest

from routinesense.core.cache import MemoryLocalCache
from routinesense.core.context import SessionContext
from routinesense.core.exceptions import AuthenticationError, ResourceNotFoundError
from routinesense.database import ROUTINES, USAGE_EVENTS
from routinesense.services.routine_editor import RoutineEditor
from routinesense.services.routine_store import RoutineStore
from routinesense.services.version_store import VersionStore
from tests.conftest import USER_ID, make_routine


def actions(remote):
    return [doc["action"] for doc in remote.collections[USAGE_EVENTS]]


class TestSave:
    def test_first_save_creates_version_one(self, user_context, remote):
        editor = RoutineEditor(user_context)

        assert editor.save_routine(make_routine("r1", ["Cleanser"]), label="Starter")

        versions = VersionStore(user_context).list_versions("r1")
        assert len(versions) == 1
        assert versions[0].change_summary == "Routine created"
        assert versions[0].label == "Starter"
        assert actions(remote) == ["created"]

    def test_second_save_records_diff(self, user_context, remote):
        editor = RoutineEditor(user_context)
        editor.save_routine(make_routine("r1", ["Cleanser"]))
        editor.save_routine(make_routine("r1", ["Cleanser", "Retinol Serum"]))

        latest = VersionStore(user_context).list_versions("r1")[0]
        assert latest.version_number == 2
        assert latest.change_summary == "Added Retinol Serum"
        assert actions(remote) == ["created", "updated"]

    def test_save_bumps_updated_at(self, user_context):
        routine = make_routine("r1")
        RoutineEditor(user_context).save_routine(routine)
        assert RoutineStore(user_context).get("r1").updated_at > routine.updated_at

    def test_guest_save_is_local_only(self, guest_context, remote):
        assert RoutineEditor(guest_context).save_routine(make_routine("r1"))
        assert RoutineStore(guest_context).get("r1") is not None
        assert remote.calls == []

    def test_failed_snapshot_does_not_fail_save(self, user_context, remote):
        remote.failing.add("insert")

        assert RoutineEditor(user_context).save_routine(make_routine("r1"))
        assert len(remote.collections[ROUTINES]) == 1

    def test_failed_remote_save_skips_history(self, user_context, remote):
        remote.failing.add("upsert")

        assert not RoutineEditor(user_context).save_routine(make_routine("r1"))
        assert ("insert", "routine_versions") not in remote.calls

    def test_second_device_diffs_against_latest_snapshot(self, remote, local_cache):
        with SessionContext(USER_ID, remote, MemoryLocalCache()) as phone:
            RoutineEditor(phone).save_routine(make_routine("r1", ["Cleanser"]))

        with SessionContext(USER_ID, remote, local_cache) as laptop:
            assert RoutineEditor(laptop).save_routine(make_routine("r1", ["Cleanser", "Retinol"]))
            latest = VersionStore(laptop).list_versions("r1")[0]

        assert latest.version_number == 2
        assert latest.change_summary == "Added Retinol"
        assert actions(remote) == ["created", "updated"]


class TestDelete:
    def test_delete_logs_event(self, user_context, remote):
        editor = RoutineEditor(user_context)
        editor.save_routine(make_routine("r1"))

        assert editor.delete_routine("r1")
        assert actions(remote)[-1] == "deleted"
        assert remote.collections[ROUTINES][0]["is_active"] is False


class TestRevert:
    def test_revert_appends_a_new_version(self, user_context):
        editor = RoutineEditor(user_context)
        editor.save_routine(make_routine("r1", ["Cleanser"], name="V1"))
        editor.save_routine(make_routine("r1", ["Cleanser", "Toner"], name="V2"))
        editor.save_routine(make_routine("r1", ["Toner"], name="V3"))

        reverted = editor.revert("r1", 1)

        assert reverted.name == "V1"
        assert [s.product.name for s in reverted.steps] == ["Cleanser"]
        versions = VersionStore(user_context).list_versions("r1")
        assert [v.version_number for v in versions] == [4, 3, 2, 1]
        assert versions[0].label == "Reverted to version 1"
        assert versions[0].change_summary == "Added Cleanser. Removed Toner"
        assert RoutineStore(user_context).get("r1").name == "V1"

    def test_missing_version(self, user_context):
        editor = RoutineEditor(user_context)
        editor.save_routine(make_routine("r1"))

        with pytest.raises(ResourceNotFoundError):
            editor.revert("r1", 7)

    def test_guest_cannot_revert(self, guest_context):
        with pytest.raises(AuthenticationError):
            RoutineEditor(guest_context).revert("r1", 1)

    def test_revert_returns_none_when_save_fails(self, user_context, remote):
        editor = RoutineEditor(user_context)
        editor.save_routine(make_routine("r1"))
        remote.failing.add("upsert")

        assert editor.revert("r1", 1) is None
        assert len(VersionStore(user_context).list_versions("r1")) == 1
