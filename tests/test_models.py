from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from routinesense.models.routine import RoutineDefinition
from routinesense.models.user import LegacySkinProfile, SkinProfile, migrate_skin_profile
from routinesense.models.usage import UsageEvent
from routinesense.models.version import RoutineVersion
from tests.conftest import make_routine


class TestRoutineDefinition:
    def test_step_count_follows_steps(self):
        routine = RoutineDefinition.model_validate(
            {**make_routine("r1", ["A", "B"]).model_dump(), "step_count": 99}
        )
        assert routine.step_count == 2

    def test_document_round_trip_ignores_store_fields(self):
        routine = make_routine("r1", ["Cleanser"])
        document = routine.to_document("u1")
        document["_id"] = "mongo-id"

        assert document["is_active"] is True
        assert RoutineDefinition.from_document(document).model_dump() == routine.model_dump()

    def test_aware_timestamps_are_normalized_to_naive_utc(self):
        aware = datetime(2024, 6, 15, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        routine = make_routine("r1").model_copy(update={"created_at": aware})
        restored = RoutineDefinition.model_validate(routine.model_dump())

        assert restored.created_at == datetime(2024, 6, 15, 8, 0)
        assert restored.created_at.tzinfo is None


def test_usage_event_rejects_unknown_action():
    with pytest.raises(ValidationError):
        UsageEvent(user_id="u1", action="shared")


def test_version_numbers_start_at_one():
    with pytest.raises(ValidationError):
        RoutineVersion(routine_id="r1", version_number=0, name="x", time_of_day="morning")


class TestSkinProfileMigration:
    def test_missing_profile_gets_defaults(self):
        assert migrate_skin_profile(None) == SkinProfile()

    def test_untagged_legacy_dict(self):
        profile = migrate_skin_profile({"skinType": "Oily", "concerns": ["Acne", " acne ", "Aging"]})

        assert profile.schema_version == 2
        assert profile.skin_type == "oily"
        assert profile.concerns == ["acne", "aging"]

    def test_unknown_legacy_skin_type(self):
        assert migrate_skin_profile({"skin_type": "glowing"}).skin_type == "unknown"

    def test_current_profile_passes_through(self):
        profile = migrate_skin_profile({"schema_version": 2, "skin_type": "dry", "concerns": ["Hyperpigmentation"]})
        assert profile.has_concern("HYPERPIGMENTATION")

    def test_model_instances(self):
        assert migrate_skin_profile(LegacySkinProfile(skin_concerns=["Aging"])).concerns == ["aging"]

    def test_unsupported_version(self):
        with pytest.raises(ValidationError):
            migrate_skin_profile({"schema_version": 9})


def test_product_names_skip_steps_without_products():
    routine = make_routine("r1", ["Cleanser", "Toner"], extra_steps=1)
    assert routine.product_names() == ["Cleanser", "Toner"]
