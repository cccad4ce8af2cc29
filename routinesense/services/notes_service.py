import logging
from typing import List, Optional

from routinesense.core.context import SessionContext
from routinesense.database import NOTES
from routinesense.models.routine import RoutineNote

logger = logging.getLogger(__name__)


class NotesService:
    """Routine journal notes in the remote store. Signed-in users only."""

    def __init__(self, context: SessionContext):
        self.context = context

    def load_notes(self, routine_id: str) -> List[RoutineNote]:
        if self.context.is_guest:
            return []
        try:
            documents = self.context.remote.find(
                NOTES,
                {"user_id": self.context.user_id, "routine_id": routine_id},
                sort=[("created_at", -1)],
            )
            return [RoutineNote.model_validate(doc) for doc in documents]
        except Exception as e:
            logger.error(f"[Notes] Error loading notes for {routine_id}: {e}")
            return []

    def count_notes(self, routine_id: Optional[str] = None) -> int:
        if self.context.is_guest:
            return 0
        query = {"user_id": self.context.user_id}
        if routine_id:
            query["routine_id"] = routine_id
        try:
            return self.context.remote.count(NOTES, query)
        except Exception as e:
            logger.error(f"[Notes] Error counting notes: {e}")
            return 0

    def add_note(self, routine_id: str, content: str, note_type: str = "observation") -> Optional[RoutineNote]:
        if self.context.is_guest:
            return None
        note = RoutineNote(routine_id=routine_id, content=content, note_type=note_type or "observation")
        document = note.model_dump()
        document["user_id"] = self.context.user_id
        try:
            self.context.remote.insert(NOTES, document)
            return note
        except Exception as e:
            logger.error(f"[Notes] Error saving note for {routine_id}: {e}")
            return None
