"""
Per-session collaborators.

A SessionContext is built when a session starts (one request in the API),
handed to every service, and closed when the session ends. It replaces
module-level session state: the current user, the device's local cache,
the remote store, the compatibility oracle and the skin profile source all
travel together.
"""
from datetime import date
from typing import Any, Callable, Optional
import logging

from pydantic import ValidationError as PydanticValidationError

from routinesense.core.cache import LocalCache
from routinesense.core.exceptions import AuthenticationError, RoutineSenseException
from routinesense.database import RemoteStore
from routinesense.models.user import SkinProfile, migrate_skin_profile
from routinesense.utils.date_utils import utc_today

logger = logging.getLogger(__name__)


class SessionClosedError(RoutineSenseException):
    """Raised when a closed session context is used"""
    pass


class SessionContext:
    def __init__(
        self,
        user_id: Optional[str],
        remote: RemoteStore,
        local_cache: LocalCache,
        oracle=None,
        skin_profile_provider: Optional[Callable[[], Any]] = None,
        today: Optional[date] = None,
    ):
        self.user_id = user_id or None
        self._remote = remote
        self._local_cache = local_cache
        self._oracle = oracle
        self._skin_profile_provider = skin_profile_provider
        self._skin_profile: Optional[SkinProfile] = None
        self._today = today
        self.closed = False

    def __enter__(self) -> "SessionContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True
        self._remote = None
        self._local_cache = None
        self._skin_profile = None

    def _ensure_open(self):
        if self.closed:
            raise SessionClosedError("Session context is closed")

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    def require_user(self) -> str:
        if self.user_id is None:
            raise AuthenticationError("This operation requires a signed-in user")
        return self.user_id

    @property
    def remote(self) -> RemoteStore:
        self._ensure_open()
        return self._remote

    @property
    def local_cache(self) -> LocalCache:
        self._ensure_open()
        return self._local_cache

    @property
    def oracle(self):
        if self._oracle is None:
            from routinesense.services.compatibility_service import ingredient_oracle
            self._oracle = ingredient_oracle
        return self._oracle

    def today(self) -> date:
        """Reference day for streaks and completions (fixed in tests)"""
        return self._today or utc_today()

    def skin_profile(self) -> SkinProfile:
        self._ensure_open()
        if self._skin_profile is None:
            raw = self._skin_profile_provider() if self._skin_profile_provider else None
            try:
                self._skin_profile = migrate_skin_profile(raw)
            except (PydanticValidationError, TypeError, ValueError) as e:
                logger.warning(f"[SessionContext] Unreadable skin profile, using defaults: {e}")
                self._skin_profile = SkinProfile()
        return self._skin_profile
