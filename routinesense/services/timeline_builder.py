"""
Routine timeline: versions, notes and usage events fused into one
newest-first feed. Each source is normalized separately; ids are prefixed
with the source (v-, n-, e-) so they cannot collide.
"""
from typing import Iterable, List

from routinesense.core.config import settings
from routinesense.models.insights import TimelineEvent
from routinesense.models.routine import RoutineNote
from routinesense.models.usage import UsageEvent
from routinesense.models.version import RoutineVersion

ACTION_LABELS = {
    "created": "Routine created",
    "updated": "Routine updated",
    "deleted": "Routine deleted",
    "viewed": "Routine viewed",
    "notes_opened": "Notes opened",
    "progress_updated": "Progress updated",
}

ACTION_ICONS = {
    "created": "ri-add-circle-line",
    "updated": "ri-edit-line",
    "deleted": "ri-delete-bin-line",
    "viewed": "ri-eye-line",
    "notes_opened": "ri-file-text-line",
    "progress_updated": "ri-bar-chart-line",
}


def truncate_note(content: str, length: int = settings.NOTE_PREVIEW_LENGTH) -> str:
    return content[:length] + "..." if len(content) > length else content


def version_event(version: RoutineVersion) -> TimelineEvent:
    title = f"Version {version.version_number}"
    if version.label:
        title += f" — {version.label}"
    return TimelineEvent(
        id=f"v-{version.id}",
        type="version",
        icon="ri-history-line",
        icon_color="text-primary",
        title=title,
        description=version.change_summary or f"{version.step_count} steps · {version.time_of_day}",
        timestamp=version.created_at,
    )


def note_event(note: RoutineNote) -> TimelineEvent:
    note_type = note.note_type or "observation"
    return TimelineEvent(
        id=f"n-{note.id}",
        type="note",
        icon="ri-sticky-note-line",
        icon_color="text-sage",
        title=f"{note_type[:1].upper()}{note_type[1:]} logged",
        description=truncate_note(note.content),
        timestamp=note.created_at,
    )


def usage_event(event: UsageEvent) -> TimelineEvent:
    return TimelineEvent(
        id=f"e-{event.id}",
        type="event",
        icon=ACTION_ICONS.get(event.action, "ri-flashlight-line"),
        icon_color="text-warm-gray",
        title=ACTION_LABELS.get(event.action, event.action),
        description="",
        timestamp=event.timestamp,
    )


def build_timeline(
    versions: Iterable[RoutineVersion] = (),
    notes: Iterable[RoutineNote] = (),
    events: Iterable[UsageEvent] = (),
    limit: int = settings.TIMELINE_LIMIT,
) -> List[TimelineEvent]:
    timeline = [version_event(v) for v in versions]
    timeline.extend(note_event(n) for n in notes)
    timeline.extend(usage_event(e) for e in events)

    timeline.sort(key=lambda item: item.timestamp, reverse=True)
    return timeline[:limit]
