import pytest

from routinesense.core.context import SessionClosedError, SessionContext
from routinesense.core.exceptions import AuthenticationError, RemoteStoreError
from routinesense.core.result import OperationResult
from routinesense.services.compatibility_service import ingredient_oracle
from routinesense.services.routine_store import RoutineStore
from tests.conftest import TODAY, USER_ID


def test_closed_context_refuses_use(remote, local_cache):
    with SessionContext(USER_ID, remote, local_cache) as context:
        store = RoutineStore(context)

    assert context.closed
    with pytest.raises(SessionClosedError):
        store.read_local()
    with pytest.raises(SessionClosedError):
        context.skin_profile()


def test_guest_detection(remote, local_cache):
    assert SessionContext("", remote, local_cache).is_guest
    with pytest.raises(AuthenticationError):
        SessionContext(None, remote, local_cache).require_user()
    assert SessionContext(USER_ID, remote, local_cache).require_user() == USER_ID


def test_defaults(user_context):
    assert user_context.today() == TODAY
    assert user_context.oracle is ingredient_oracle


def test_skin_profile_is_migrated_once(remote, local_cache):
    calls = []

    def provider():
        calls.append(1)
        return {"skin_type": "Dry", "skin_concerns": ["Aging"]}

    context = SessionContext(USER_ID, remote, local_cache, skin_profile_provider=provider)

    assert context.skin_profile().skin_type == "dry"
    assert context.skin_profile().has_concern("aging")
    assert len(calls) == 1


def test_unreadable_skin_profile_falls_back(remote, local_cache):
    context = SessionContext(USER_ID, remote, local_cache,
                             skin_profile_provider=lambda: {"schema_version": 5})
    assert context.skin_profile().skin_type == "unknown"


class TestOperationResult:
    def test_success(self):
        result = OperationResult.success([1])
        assert result.ok
        assert result.unwrap() == [1]

    def test_failure_keeps_fallback_and_error(self):
        error = RemoteStoreError("down")
        result = OperationResult.failure(error, [])

        assert not result.ok
        assert result.value == []
        assert result.value_or(None) is None
        with pytest.raises(RemoteStoreError):
            result.unwrap()
