"""
Daily routine completions, kept in the device's local cache.

The full history is retained (the streak engine needs it); "today" views
filter it down to the session's reference day.
"""
import logging
from datetime import date
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from routinesense.core.cache import read_json_list, write_json_list
from routinesense.core.context import SessionContext
from routinesense.models.routine import CompletionRecord
from routinesense.utils.date_utils import to_day_string

logger = logging.getLogger(__name__)

COMPLETIONS_KEY = "routine_completions"


class CompletionService:
    def __init__(self, context: SessionContext):
        self.context = context

    def _today(self) -> str:
        return to_day_string(self.context.today())

    def history(self) -> List[CompletionRecord]:
        records = []
        for item in read_json_list(self.context.local_cache, COMPLETIONS_KEY):
            try:
                records.append(CompletionRecord.model_validate(item))
            except PydanticValidationError as e:
                logger.error(f"[Completions] Skipping malformed record: {e}")
        return records

    def _save(self, records: List[CompletionRecord]) -> bool:
        return write_json_list(
            self.context.local_cache,
            COMPLETIONS_KEY,
            [record.model_dump(mode="json") for record in records],
        )

    def completions_for(self, day: Optional[date] = None) -> List[CompletionRecord]:
        day_string = to_day_string(day) if day else self._today()
        return [record for record in self.history() if record.date == day_string]

    def is_completed_today(self, routine_id: str) -> bool:
        return any(record.routine_id == routine_id for record in self.completions_for())

    def mark_done(self, routine_id: str) -> bool:
        if self.is_completed_today(routine_id):
            return True
        records = self.history()
        records.append(CompletionRecord(routine_id=routine_id, date=self._today()))
        return self._save(records)

    def undo(self, routine_id: str) -> bool:
        today = self._today()
        records = [
            record for record in self.history()
            if not (record.routine_id == routine_id and record.date == today)
        ]
        return self._save(records)

    def toggle(self, routine_id: str) -> bool:
        """Flip today's completion; returns the new state"""
        if self.is_completed_today(routine_id):
            self.undo(routine_id)
            return False
        self.mark_done(routine_id)
        return True

    def today_count(self) -> int:
        return len(self.completions_for())
