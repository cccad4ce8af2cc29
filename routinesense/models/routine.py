from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional, Literal

from .common import UTCDateTime, new_id, timestamp_field

TimeOfDay = Literal["morning", "evening", "both"]
StepTimeOfDay = Literal["morning", "evening"]


class RoutineProduct(BaseModel):
    """Product attached to a routine step"""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    brand: str = ""
    image: str = ""
    category: str = ""
    # Purchase metadata
    purchased_from: Optional[str] = None
    purchase_date: Optional[str] = None
    expiration_date: Optional[str] = None
    source: Optional[Literal["discovery", "marketplace"]] = None


class RoutineStep(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=new_id)
    step_number: int
    title: str
    description: str = ""
    time_of_day: StepTimeOfDay = "morning"
    product: Optional[RoutineProduct] = None
    recommended: bool = False


class RoutineDefinition(BaseModel):
    """A saved routine, as held in the remote store and mirrored in the local cache"""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=new_id)
    name: str
    description: Optional[str] = None
    time_of_day: TimeOfDay
    steps: List[RoutineStep] = []
    step_count: int = 0
    thumbnail: Optional[str] = None
    created_at: UTCDateTime = timestamp_field()
    updated_at: UTCDateTime = timestamp_field()

    @model_validator(mode="after")
    def sync_step_count(self):
        # step_count is derived, never trusted from input
        self.step_count = len(self.steps)
        return self

    def product_names(self) -> List[str]:
        return [step.product.name for step in self.steps if step.product]

    def to_document(self, user_id: str, is_active: bool = True) -> dict:
        """Remote store document for this routine"""
        document = self.model_dump(mode="python")
        document["user_id"] = user_id
        document["is_active"] = is_active
        return document

    @classmethod
    def from_document(cls, document: dict) -> "RoutineDefinition":
        return cls.model_validate(document)


class CompletionRecord(BaseModel):
    """Evidence that a routine was performed on a given calendar day"""
    routine_id: str
    date: str  # YYYY-MM-DD
    completed_at: UTCDateTime = timestamp_field()


class RoutineNote(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=new_id)
    routine_id: str
    content: str
    note_type: str = "observation"
    created_at: UTCDateTime = timestamp_field()
