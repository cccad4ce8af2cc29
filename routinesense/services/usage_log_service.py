import logging
from typing import List, Optional

from routinesense.core.config import settings
from routinesense.core.context import SessionContext
from routinesense.core.result import OperationResult
from routinesense.database import USAGE_EVENTS
from routinesense.models.usage import USAGE_ACTIONS, UsageEvent

logger = logging.getLogger(__name__)


class UsageLogService:
    """Append-only routine usage telemetry. Writes are fire-and-forget."""

    def __init__(self, context: SessionContext):
        self.context = context

    def log_event(self, user_id: Optional[str], routine_id: Optional[str], action: str) -> None:
        if not user_id:
            return
        if action not in USAGE_ACTIONS:
            logger.warning(f"[UsageLog] Ignoring unknown action '{action}'")
            return
        try:
            event = UsageEvent(user_id=user_id, routine_id=routine_id, action=action)
            self.context.remote.insert(USAGE_EVENTS, event.model_dump())
        except Exception as e:
            # Analytics must never block the caller
            logger.debug(f"[UsageLog] Dropped '{action}' event: {e}")

    def load_events_result(
        self, user_id: str, routine_id: Optional[str] = None
    ) -> OperationResult[List[UsageEvent]]:
        query = {"user_id": user_id}
        if routine_id:
            query["routine_id"] = routine_id
        try:
            documents = self.context.remote.find(
                USAGE_EVENTS,
                query,
                sort=[("timestamp", -1)],
                limit=settings.USAGE_EVENT_LIMIT,
            )
            events = [UsageEvent.model_validate(doc) for doc in documents]
            events.sort(key=lambda event: event.timestamp, reverse=True)
            return OperationResult.success(events[:settings.USAGE_EVENT_LIMIT])
        except Exception as e:
            logger.error(f"[UsageLog] Error loading events for user {user_id}: {e}")
            return OperationResult.failure(e, [])

    def load_events(self, user_id: str, routine_id: Optional[str] = None) -> List[UsageEvent]:
        return self.load_events_result(user_id, routine_id).value
