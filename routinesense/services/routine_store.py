"""
Routine Store: canonical routine definitions kept in the remote store and
mirrored in the device's local cache.

Guests never touch the remote store. Signed-in users write remote first and
then mirror into the local cache. On load the two copies are merged, remote
winning on id collisions.
"""
import logging
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from routinesense.core.cache import read_json_list, write_json_list
from routinesense.core.context import SessionContext
from routinesense.core.result import OperationResult
from routinesense.database import ROUTINES
from routinesense.models.routine import RoutineDefinition

logger = logging.getLogger(__name__)

ROUTINES_KEY = "routines"


def merge_routines(
    local: Iterable[RoutineDefinition],
    remote: Iterable[RoutineDefinition],
) -> List[RoutineDefinition]:
    """Union by id; remote entries win, local-only entries are appended"""
    merged: Dict[str, RoutineDefinition] = {}
    for routine in remote:
        merged[routine.id] = routine
    for routine in local:
        if routine.id not in merged:
            merged[routine.id] = routine
    return list(merged.values())


def _upsert_by_id(routines: List[RoutineDefinition], routine: RoutineDefinition) -> List[RoutineDefinition]:
    for index, existing in enumerate(routines):
        if existing.id == routine.id:
            routines[index] = routine
            return routines
    routines.append(routine)
    return routines


class RoutineStore:
    """Local/remote persistence of routine definitions for one session"""

    def __init__(self, context: SessionContext):
        self.context = context

    # -----------------------------
    # Local cache
    # -----------------------------

    def read_local(self) -> List[RoutineDefinition]:
        routines = []
        for item in read_json_list(self.context.local_cache, ROUTINES_KEY):
            try:
                routines.append(RoutineDefinition.model_validate(item))
            except PydanticValidationError as e:
                logger.error(f"[RoutineStore] Skipping malformed cached routine: {e}")
        return routines

    def write_local(self, routines: List[RoutineDefinition]) -> bool:
        payload = [routine.model_dump(mode="json") for routine in routines]
        saved = write_json_list(self.context.local_cache, ROUTINES_KEY, payload)
        if not saved:
            logger.error("[RoutineStore] Error saving local routines")
        return saved

    def get(self, routine_id: str) -> Optional[RoutineDefinition]:
        """Cached copy of one routine"""
        for routine in self.read_local():
            if routine.id == routine_id:
                return routine
        return None

    # -----------------------------
    # Remote store
    # -----------------------------

    def read_remote_result(self) -> OperationResult[List[RoutineDefinition]]:
        if self.context.is_guest:
            return OperationResult.success([])
        try:
            documents = self.context.remote.find(
                ROUTINES,
                {"user_id": self.context.user_id, "is_active": True},
                sort=[("created_at", -1)],
            )
            return OperationResult.success(
                [RoutineDefinition.from_document(doc) for doc in documents]
            )
        except Exception as e:
            logger.error(f"[RoutineStore] Error loading routines: {e}")
            return OperationResult.failure(e, [])

    def read_remote(self) -> List[RoutineDefinition]:
        return self.read_remote_result().value

    def _owned_by_other(self, routine_id: str) -> bool:
        """True when the id already belongs to a different user in the remote store"""
        documents = self.context.remote.find(ROUTINES, {"id": routine_id})
        return any(doc.get("user_id") != self.context.user_id for doc in documents)

    def push_remote(self, routines: List[RoutineDefinition]) -> bool:
        """Bulk upsert; used to migrate a device's routines into a fresh account"""
        if self.context.is_guest:
            return False
        try:
            owned = []
            for routine in routines:
                if self._owned_by_other(routine.id):
                    logger.warning(f"[RoutineStore] Not pushing {routine.id}: id belongs to another user")
                    continue
                owned.append(routine)
            documents = [routine.to_document(self.context.user_id) for routine in owned]
            self.context.remote.upsert_many(ROUTINES, ("id", "user_id"), documents)
            return True
        except Exception as e:
            logger.error(f"[RoutineStore] Error syncing routines: {e}")
            return False

    def count_active(self, user_id: str) -> int:
        try:
            return self.context.remote.count(ROUTINES, {"user_id": user_id, "is_active": True})
        except Exception as e:
            logger.error(f"[RoutineStore] Error getting routine count: {e}")
            return 0

    # -----------------------------
    # Save / delete
    # -----------------------------

    def save(self, routine: RoutineDefinition) -> bool:
        if self.context.is_guest:
            return self.write_local(_upsert_by_id(self.read_local(), routine))

        try:
            if self._owned_by_other(routine.id):
                logger.warning(f"[RoutineStore] Refusing to save {routine.id}: id belongs to another user")
                return False
            self.context.remote.upsert(
                ROUTINES,
                {"id": routine.id, "user_id": self.context.user_id},
                routine.to_document(self.context.user_id),
            )
        except Exception as e:
            logger.error(f"[RoutineStore] Error saving routine {routine.id}: {e}")
            return False

        # Mirror locally for offline access
        self.write_local(_upsert_by_id(self.read_local(), routine))
        return True

    def delete(self, routine_id: str) -> bool:
        remaining = [routine for routine in self.read_local() if routine.id != routine_id]
        self.write_local(remaining)

        if self.context.is_guest:
            return True

        try:
            self.context.remote.update(
                ROUTINES,
                {"id": routine_id, "user_id": self.context.user_id},
                {"is_active": False},
            )
            return True
        except Exception as e:
            logger.error(f"[RoutineStore] Error deleting routine {routine_id}: {e}")
            return False

    # -----------------------------
    # Merge / hydrate
    # -----------------------------

    def merge(self, local, remote) -> List[RoutineDefinition]:
        return merge_routines(local, remote)

    def hydrate(self) -> List[RoutineDefinition]:
        """Load the session's routines, reconciling the local cache with the remote store"""
        local = self.read_local()
        if self.context.is_guest:
            return local

        try:
            result = self.read_remote_result()
            if not result.ok:
                # An unreadable remote is not an empty one; leave both copies alone
                return local
            remote = result.value
            merged = self.merge(local, remote)
            self.write_local(merged)

            # Fresh account on a device that already has routines
            if local and not remote:
                logger.info(f"[RoutineStore] Pushing {len(merged)} local routines to new account")
                self.push_remote(merged)

            return merged
        except Exception as e:
            logger.error(f"[RoutineStore] Error hydrating routines: {e}")
            return local
