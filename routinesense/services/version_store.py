"""
Append-only routine version history.

Snapshots are numbered per routine starting at 1. A failed snapshot write
consumes no number because the next number is always read back from the
store. Snapshotting must never block the primary save, so the lenient
entry points return False / empty lists instead of raising.
"""
import logging
from typing import Iterable, List, Optional

from routinesense.core.context import SessionContext
from routinesense.core.exceptions import AuthenticationError
from routinesense.core.result import OperationResult
from routinesense.database import VERSIONS
from routinesense.models.routine import RoutineDefinition, RoutineStep
from routinesense.models.version import RoutineVersion
from routinesense.utils.date_utils import get_utc_now

logger = logging.getLogger(__name__)


def diff_steps(older: Iterable[RoutineStep], newer: Iterable[RoutineStep]) -> str:
    """Human-readable summary of what changed between two step lists"""
    older = list(older)
    newer = list(newer)
    old_products = [step.product.name for step in older if step.product]
    new_products = [step.product.name for step in newer if step.product]

    added = [name for name in dict.fromkeys(new_products) if name not in old_products]
    removed = [name for name in dict.fromkeys(old_products) if name not in new_products]

    parts = []
    if added:
        parts.append(f"Added {', '.join(added)}")
    if removed:
        parts.append(f"Removed {', '.join(removed)}")
    if not parts and len(newer) != len(older):
        parts.append(f"Steps changed from {len(older)} to {len(newer)}")

    return ". ".join(parts) if parts else "Routine updated"


class VersionStore:
    def __init__(self, context: SessionContext):
        self.context = context

    def latest_version_number_result(self, routine_id: str) -> OperationResult[int]:
        if self.context.is_guest:
            return OperationResult.success(0)
        try:
            documents = self.context.remote.find(
                VERSIONS,
                {"routine_id": routine_id},
                sort=[("version_number", -1)],
                limit=1,
            )
            if not documents:
                return OperationResult.success(0)
            return OperationResult.success(int(documents[0]["version_number"]))
        except Exception as e:
            logger.error(f"[VersionStore] Error reading latest version of {routine_id}: {e}")
            return OperationResult.failure(e, 0)

    def get_latest_version_number(self, routine_id: str) -> int:
        return self.latest_version_number_result(routine_id).value

    def create_snapshot_result(
        self,
        routine_id: str,
        routine: RoutineDefinition,
        label: Optional[str] = None,
        change_summary: Optional[str] = None,
    ) -> OperationResult[Optional[RoutineVersion]]:
        if self.context.is_guest:
            return OperationResult.failure(
                AuthenticationError("Guests do not keep version history"), None
            )
        try:
            # A number is only assigned once the current latest is known
            latest = self.latest_version_number_result(routine_id).unwrap()
            version = RoutineVersion(
                routine_id=routine_id,
                version_number=latest + 1,
                label=label or None,
                steps=routine.steps,
                step_count=len(routine.steps),
                name=routine.name,
                time_of_day=routine.time_of_day,
                change_summary=change_summary or None,
            )
            document = version.model_dump()
            document["user_id"] = self.context.user_id
            self.context.remote.insert(VERSIONS, document)
            logger.info(f"[VersionStore] Routine {routine_id} is now at version {version.version_number}")
            return OperationResult.success(version)
        except Exception as e:
            logger.warning(f"[VersionStore] Snapshot of {routine_id} failed: {e}")
            return OperationResult.failure(e, None)

    def create_snapshot(
        self,
        routine_id: str,
        routine: RoutineDefinition,
        label: Optional[str] = None,
        change_summary: Optional[str] = None,
    ) -> bool:
        return self.create_snapshot_result(routine_id, routine, label, change_summary).ok

    def list_versions_result(self, routine_id: str) -> OperationResult[List[RoutineVersion]]:
        if self.context.is_guest:
            return OperationResult.success([])
        try:
            documents = self.context.remote.find(
                VERSIONS,
                {"routine_id": routine_id, "user_id": self.context.user_id},
                sort=[("version_number", -1)],
            )
            versions = [RoutineVersion.model_validate(doc) for doc in documents]
            versions.sort(key=lambda version: version.version_number, reverse=True)
            return OperationResult.success(versions)
        except Exception as e:
            logger.error(f"[VersionStore] Error loading versions of {routine_id}: {e}")
            return OperationResult.failure(e, [])

    def list_versions(self, routine_id: str) -> List[RoutineVersion]:
        return self.list_versions_result(routine_id).value

    def get_version(self, routine_id: str, version_number: int) -> Optional[RoutineVersion]:
        for version in self.list_versions(routine_id):
            if version.version_number == version_number:
                return version
        return None

    def diff(self, older: Iterable[RoutineStep], newer: Iterable[RoutineStep]) -> str:
        return diff_steps(older, newer)

    @staticmethod
    def build_reverted_routine(routine_id: str, version: RoutineVersion,
                               current: Optional[RoutineDefinition] = None) -> RoutineDefinition:
        """Routine content from a snapshot, stamped as updated now"""
        return RoutineDefinition(
            id=routine_id,
            name=version.name,
            description=current.description if current else None,
            time_of_day=version.time_of_day,
            steps=list(version.steps),
            thumbnail=current.thumbnail if current else None,
            created_at=current.created_at if current else version.created_at,
            updated_at=get_utc_now(),
        )
