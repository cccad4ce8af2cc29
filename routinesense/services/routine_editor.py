"""
Save, delete and revert flows that tie the routine store to version
history and usage telemetry.
"""
import logging
from typing import Optional

from routinesense.core.context import SessionContext
from routinesense.core.exceptions import ResourceNotFoundError
from routinesense.models.routine import RoutineDefinition
from routinesense.services.routine_store import RoutineStore
from routinesense.services.usage_log_service import UsageLogService
from routinesense.services.version_store import VersionStore, diff_steps
from routinesense.utils.date_utils import get_utc_now

logger = logging.getLogger(__name__)


class RoutineEditor:
    def __init__(self, context: SessionContext):
        self.context = context
        self.store = RoutineStore(context)
        self.versions = VersionStore(context)
        self.usage = UsageLogService(context)

    def save_routine(self, routine: RoutineDefinition, label: Optional[str] = None) -> bool:
        """
        Persist an explicit user save.

        Signed-in users also get a version snapshot (best effort) whose
        summary is diffed against the previously cached copy, or against the
        latest snapshot when this device has never cached the routine.
        """
        previous = self.store.get(routine.id)
        routine = routine.model_copy(update={"updated_at": get_utc_now()})

        if not self.store.save(routine):
            return False

        if self.context.is_guest:
            return True

        previous_steps = previous.steps if previous is not None else None
        if previous_steps is None:
            history = self.versions.list_versions(routine.id)
            if history:
                previous_steps = history[0].steps

        if previous_steps is None:
            summary = "Routine created"
            action = "created"
        else:
            summary = diff_steps(previous_steps, routine.steps)
            action = "updated"

        if not self.versions.create_snapshot(routine.id, routine, label=label, change_summary=summary):
            logger.warning(f"[RoutineEditor] Saved {routine.id} without a version snapshot")
        self.usage.log_event(self.context.user_id, routine.id, action)
        return True

    def delete_routine(self, routine_id: str) -> bool:
        deleted = self.store.delete(routine_id)
        if deleted:
            self.usage.log_event(self.context.user_id, routine_id, "deleted")
        return deleted

    def revert(self, routine_id: str, version_number: int) -> Optional[RoutineDefinition]:
        """
        Restore an older snapshot as the current routine.

        Later versions are kept; the revert itself is recorded as a new
        version. Returns None if the store rejects the save. Raises
        AuthenticationError for guests and ResourceNotFoundError when the
        version does not exist.
        """
        self.context.require_user()
        version = self.versions.get_version(routine_id, version_number)
        if version is None:
            raise ResourceNotFoundError(
                f"Routine {routine_id} has no version {version_number}"
            )

        current = self.store.get(routine_id)
        reverted = VersionStore.build_reverted_routine(routine_id, version, current)
        if not self.store.save(reverted):
            return None

        summary = diff_steps(current.steps, reverted.steps) if current else "Routine restored"
        self.versions.create_snapshot(
            routine_id,
            reverted,
            label=f"Reverted to version {version_number}",
            change_summary=summary,
        )
        self.usage.log_event(self.context.user_id, routine_id, "updated")
        return reverted
