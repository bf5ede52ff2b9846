"""Tests for src/persistence/codec.py: encoding, validation and migration."""

from datetime import datetime, timezone

import pytest

from src.engine.base import ActiveSkillType, DiceType
from src.persistence.codec import decode_snapshot, encode_snapshot, migrate_document
from src.persistence.errors import CorruptSaveError, SaveVersionError
from src.persistence.models import SAVE_VERSION, SaveSnapshot

FIXED_TIME = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _v1_document(**overrides):
    document = {
        "save_version": 1,
        "timestamp": "2025-01-02T03:04:05+00:00",
        "money": 120.0,
        "dark_matter": 7.0,
        "lifetime_money": 5000.0,
        "lifetime_dark_matter": 9.0,
        "prestige_level": 1,
        "total_prestige_dark_matter_earned": 9.0,
        "unlocked_dice_types": ["basic", "bronze"],
        "unlocked_skill_nodes": ["core_dark_matter_core", "de_bronze_dice"],
        "unlocked_active_skills": [],
        "dice_value_upgrade_level": 2,
    }
    document.update(overrides)
    return document


class TestEncode:
    """Tests for encode_snapshot."""

    def test_layout_uses_snake_case_and_enum_values(self):
        snapshot = SaveSnapshot(
            timestamp=FIXED_TIME,
            unlocked_active_skills=[ActiveSkillType.ROLL_BURST],
        )
        document = encode_snapshot(snapshot)

        assert document["save_version"] == SAVE_VERSION
        assert document["timestamp"].startswith("2026-10-19T12:00:00")
        assert document["money"] == {"current": 0.0, "lifetime": 0.0}
        assert document["unlocked_dice_types"] == ["basic"]
        assert document["owned_counts"] == {"basic": 1}
        assert document["unlocked_active_skills"] == ["roll_burst"]
        assert document["prestige"] == {
            "level": 0,
            "total_dark_matter_earned": 0.0,
            "has_ascended": False,
        }

    def test_decode_reverses_encode(self):
        snapshot = SaveSnapshot(
            timestamp=FIXED_TIME,
            modifiers={"global_money_multiplier": 1.25, "idle_king_active": True},
            owned_counts={DiceType.BASIC: 4, DiceType.GOLD: 1},
        )
        assert decode_snapshot(encode_snapshot(snapshot)) == snapshot


class TestDecodeErrors:
    """Tests for decode_snapshot failures."""

    def test_negative_balance_is_corrupt(self):
        document = encode_snapshot(SaveSnapshot(timestamp=FIXED_TIME))
        document["money"] = {"current": -5.0, "lifetime": 0.0}
        with pytest.raises(CorruptSaveError):
            decode_snapshot(document)

    def test_unknown_dice_type_is_corrupt(self):
        document = encode_snapshot(SaveSnapshot(timestamp=FIXED_TIME))
        document["unlocked_dice_types"] = ["plastic"]
        with pytest.raises(CorruptSaveError):
            decode_snapshot(document)

    def test_missing_timestamp_is_corrupt(self):
        document = encode_snapshot(SaveSnapshot(timestamp=FIXED_TIME))
        del document["timestamp"]
        with pytest.raises(CorruptSaveError):
            decode_snapshot(document)


class TestMigrate:
    """Tests for migrate_document."""

    @pytest.mark.parametrize("version", [None, "2", True, 0])
    def test_invalid_version_is_corrupt(self, version):
        with pytest.raises(CorruptSaveError):
            migrate_document({"save_version": version})

    def test_newer_version_fails_closed(self):
        with pytest.raises(SaveVersionError) as exc_info:
            migrate_document({"save_version": SAVE_VERSION + 1})
        assert exc_info.value.found == SAVE_VERSION + 1
        assert exc_info.value.supported == SAVE_VERSION

    def test_current_version_passes_through(self):
        document = encode_snapshot(SaveSnapshot(timestamp=FIXED_TIME))
        assert migrate_document(document) == document

    def test_input_not_mutated(self):
        document = _v1_document()
        migrate_document(document)
        assert document == _v1_document()

    def test_v1_fields_regrouped(self):
        migrated = migrate_document(_v1_document())

        assert migrated["save_version"] == SAVE_VERSION
        assert migrated["money"] == {"current": 120.0, "lifetime": 5000.0}
        assert migrated["dark_matter"] == {"current": 7.0, "lifetime": 9.0}
        assert migrated["prestige"] == {
            "level": 1,
            "total_dark_matter_earned": 9.0,
            "has_ascended": True,
        }

    def test_v1_new_fields_take_defaults(self):
        migrated = migrate_document(_v1_document(prestige_level=0))

        assert migrated["time_shards"] == {"current": 0.0, "lifetime": 0.0}
        assert migrated["owned_counts"] == {"basic": 1}
        assert migrated["modifiers"] == {}
        assert migrated["prestige"]["has_ascended"] is False

    def test_v1_without_timestamp_decodes(self):
        document = _v1_document()
        del document["timestamp"]
        snapshot = decode_snapshot(document)
        assert snapshot.timestamp.year == 1970

    def test_v1_owned_dice_become_counts(self):
        migrated = migrate_document(_v1_document(owned_dice=[
            {"type": "basic", "position": {"x": 0.5, "y": 1.0}},
            {"type": "basic", "position": {"x": 2.0, "y": 1.0}},
            "bronze",
        ]))

        assert migrated["owned_counts"] == {"basic": 2, "bronze": 1}
        snapshot = decode_snapshot(_v1_document(owned_dice=["basic", "basic", "bronze"]))
        assert snapshot.owned_counts == {DiceType.BASIC: 2, DiceType.BRONZE: 1}

    @pytest.mark.parametrize("owned_dice", ["basic", [{"position": {}}], [7]])
    def test_v1_unreadable_owned_dice_is_corrupt(self, owned_dice):
        with pytest.raises(CorruptSaveError):
            migrate_document(_v1_document(owned_dice=owned_dice))

    def test_v1_dark_matter_unlocked_means_ascended(self):
        migrated = migrate_document(_v1_document(prestige_level=0, dark_matter_unlocked=True))
        assert migrated["prestige"]["has_ascended"] is True

    def test_v2_gains_empty_milestone_progress(self):
        document = encode_snapshot(SaveSnapshot(timestamp=FIXED_TIME))
        del document["claimed_milestones"]
        del document["total_rolls"]
        document["save_version"] = 2

        migrated = migrate_document(document)

        assert migrated["save_version"] == 3
        assert migrated["claimed_milestones"] == []
        assert migrated["total_rolls"] == 0


class TestModifierTable:
    """Saved modifiers must hold the right kind of value."""

    @pytest.mark.parametrize("modifiers", [
        {"idle_king_active": 1.0},
        {"global_money_multiplier": True},
    ])
    def test_wrong_kind_is_corrupt(self, modifiers):
        document = encode_snapshot(SaveSnapshot(timestamp=FIXED_TIME))
        document["modifiers"] = modifiers
        with pytest.raises(CorruptSaveError):
            decode_snapshot(document)

    def test_unknown_names_accepted(self):
        document = encode_snapshot(SaveSnapshot(timestamp=FIXED_TIME))
        document["modifiers"] = {"retired_knob": 3.0}
        assert decode_snapshot(document).modifiers == {"retired_knob": 3.0}
