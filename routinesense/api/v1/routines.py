from fastapi import APIRouter, Depends, Query
from typing import List, Optional
import logging

from routinesense.api.deps import get_session_context
from routinesense.core.context import SessionContext
from routinesense.core.exceptions import (
    AuthenticationError, ResourceNotFoundError, bad_request, internal_error, not_found, unauthorized
)
from routinesense.models.insights import RoutineInsight, TimelineEvent
from routinesense.models.routine import RoutineDefinition, RoutineNote
from routinesense.models.usage import UsageEvent
from routinesense.models.version import RoutineVersion
from routinesense.schemas.routine import (
    CompletionToggleResponse, NoteCreateRequest, OperationStatusResponse,
    RoutineCountResponse, StreaksResponse
)
from routinesense.services.completion_service import CompletionService
from routinesense.services.insight_engine import generate_insights
from routinesense.services.notes_service import NotesService
from routinesense.services.routine_editor import RoutineEditor
from routinesense.services.routine_store import RoutineStore
from routinesense.services.streak_engine import compute_streaks, get_streak_summary
from routinesense.services.timeline_builder import build_timeline
from routinesense.services.usage_log_service import UsageLogService
from routinesense.services.version_store import VersionStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[RoutineDefinition])
async def list_routines(context: SessionContext = Depends(get_session_context)):
    """Routines for this device and user, local cache reconciled with the remote store"""
    return RoutineStore(context).hydrate()


@router.get("/count", response_model=RoutineCountResponse)
async def count_routines(context: SessionContext = Depends(get_session_context)):
    if context.is_guest:
        return RoutineCountResponse(count=len(RoutineStore(context).read_local()))
    return RoutineCountResponse(count=RoutineStore(context).count_active(context.user_id))


@router.get("/streaks", response_model=StreaksResponse)
async def get_streaks(context: SessionContext = Depends(get_session_context)):
    routines = RoutineStore(context).hydrate()
    history = CompletionService(context).history()
    streaks = compute_streaks(routines, history, today=context.today())
    return StreaksResponse(streaks=streaks, summary=get_streak_summary(streaks))


@router.get("/insights", response_model=List[RoutineInsight])
async def get_insights(context: SessionContext = Depends(get_session_context)):
    routines = RoutineStore(context).hydrate()
    streaks = compute_streaks(routines, CompletionService(context).history(), today=context.today())
    return generate_insights(
        routines,
        streaks,
        note_count=NotesService(context).count_notes(),
        skin_profile=context.skin_profile(),
        oracle=context.oracle,
    )


@router.get("/events", response_model=List[UsageEvent])
async def get_events(
    routine_id: Optional[str] = Query(None),
    context: SessionContext = Depends(get_session_context)
):
    if context.is_guest:
        return []
    return UsageLogService(context).load_events(context.user_id, routine_id)


@router.put("/{routine_id}", response_model=OperationStatusResponse)
async def save_routine(
    routine_id: str,
    routine: RoutineDefinition,
    label: Optional[str] = Query(None, max_length=120),
    context: SessionContext = Depends(get_session_context)
):
    if routine.id != routine_id:
        raise bad_request("Routine id in path and body do not match")
    saved = RoutineEditor(context).save_routine(routine, label=label)
    if not saved:
        logger.error(f"Failed to save routine {routine_id}")
    return OperationStatusResponse(success=saved)


@router.delete("/{routine_id}", response_model=OperationStatusResponse)
async def delete_routine(routine_id: str, context: SessionContext = Depends(get_session_context)):
    return OperationStatusResponse(success=RoutineEditor(context).delete_routine(routine_id))


@router.post("/{routine_id}/complete", response_model=CompletionToggleResponse)
async def toggle_completion(routine_id: str, context: SessionContext = Depends(get_session_context)):
    completions = CompletionService(context)
    completed = completions.toggle(routine_id)
    UsageLogService(context).log_event(context.user_id, routine_id, "progress_updated")
    return CompletionToggleResponse(
        routine_id=routine_id,
        completed_today=completed,
        today_count=completions.today_count(),
    )


@router.get("/{routine_id}/versions", response_model=List[RoutineVersion])
async def list_versions(routine_id: str, context: SessionContext = Depends(get_session_context)):
    return VersionStore(context).list_versions(routine_id)


@router.post("/{routine_id}/versions/{version_number}/revert", response_model=RoutineDefinition)
async def revert_routine(
    routine_id: str,
    version_number: int,
    context: SessionContext = Depends(get_session_context)
):
    try:
        reverted = RoutineEditor(context).revert(routine_id, version_number)
    except AuthenticationError as e:
        raise unauthorized(str(e))
    except ResourceNotFoundError as e:
        raise not_found(str(e))

    if reverted is None:
        raise internal_error("Could not restore this version")
    return reverted


@router.get("/{routine_id}/timeline", response_model=List[TimelineEvent])
async def get_timeline(routine_id: str, context: SessionContext = Depends(get_session_context)):
    events = []
    if not context.is_guest:
        events = UsageLogService(context).load_events(context.user_id, routine_id)
    return build_timeline(
        versions=VersionStore(context).list_versions(routine_id),
        notes=NotesService(context).load_notes(routine_id),
        events=events,
    )


@router.post("/{routine_id}/notes", response_model=RoutineNote)
async def add_note(
    routine_id: str,
    request: NoteCreateRequest,
    context: SessionContext = Depends(get_session_context)
):
    if context.is_guest:
        raise unauthorized("Sign in to keep routine notes")
    note = NotesService(context).add_note(routine_id, request.content, request.note_type)
    if note is None:
        raise internal_error("Could not save note")
    return note
