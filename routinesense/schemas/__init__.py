from .routine import (
    RoutineCountResponse,
    CompletionToggleResponse,
    StreaksResponse,
    NoteCreateRequest,
    OperationStatusResponse
)

__all__ = [
    "RoutineCountResponse",
    "CompletionToggleResponse",
    "StreaksResponse",
    "NoteCreateRequest",
    "OperationStatusResponse"
]
