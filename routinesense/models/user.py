"""
Skin profile schema.

Profiles written by older clients are untagged dicts (``skin_type`` plus
``skin_concerns``, sometimes camelCase). Everything read from storage goes
through ``migrate_skin_profile`` so the insight rules only ever see the
current ``SkinProfile`` shape.
"""
from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, field_validator
from typing import Annotated, Any, List, Literal, Optional, Union, get_args
import logging

logger = logging.getLogger(__name__)

SkinType = Literal["dry", "oily", "normal", "combination", "sensitive", "unknown"]

CURRENT_SKIN_PROFILE_VERSION = 2


def _normalize_tags(values: List[str]) -> List[str]:
    tags = []
    for value in values:
        tag = str(value).strip().lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class LegacySkinProfile(BaseModel):
    """Version 1: the loosely structured profile stored before tagging"""
    schema_version: Literal[1] = 1
    skin_type: Optional[str] = Field(None, validation_alias=AliasChoices("skin_type", "skinType"))
    skin_concerns: List[str] = Field([], validation_alias=AliasChoices("skin_concerns", "concerns"))

    def upgrade(self) -> "SkinProfile":
        skin_type = (self.skin_type or "").strip().lower()
        if skin_type not in get_args(SkinType):
            skin_type = "unknown"
        return SkinProfile(skin_type=skin_type, concerns=self.skin_concerns)


class SkinProfile(BaseModel):
    schema_version: Literal[2] = 2
    skin_type: SkinType = "unknown"
    concerns: List[str] = []

    @field_validator("concerns")
    @classmethod
    def normalize_concerns(cls, v):
        return _normalize_tags(v)

    def has_concern(self, concern: str) -> bool:
        return concern.lower() in self.concerns


_profile_adapter = TypeAdapter(
    Annotated[Union[LegacySkinProfile, SkinProfile], Field(discriminator="schema_version")]
)


def migrate_skin_profile(raw: Any) -> SkinProfile:
    """
    Bring a stored profile up to the current schema.

    Untagged dicts are treated as version 1. Raises pydantic's
    ValidationError when the data cannot be interpreted at all.
    """
    if raw is None:
        return SkinProfile()
    if isinstance(raw, SkinProfile):
        return raw
    if isinstance(raw, LegacySkinProfile):
        return raw.upgrade()

    data = dict(raw)
    data.setdefault("schema_version", 1)
    parsed = _profile_adapter.validate_python(data)
    if isinstance(parsed, LegacySkinProfile):
        logger.debug(f"[SkinProfile] Migrating legacy profile to version {CURRENT_SKIN_PROFILE_VERSION}")
        return parsed.upgrade()
    return parsed
