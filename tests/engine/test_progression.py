"""Tests for src/engine/progression.py: unlocks, owned dice and prices."""

import pytest

from src.engine.base import ActiveSkillType, DiceType
from src.engine.catalog import DEFAULT_DICE_CATALOG
from src.engine.progression import DiceTypeLockedError, ProgressionState
from src.events import CoreEvent


class TestInitialState:
    """A new ProgressionState starts with one Basic die."""

    def test_basic_unlocked_and_owned(self, progression):
        assert progression.unlocked_dice_types == frozenset({DiceType.BASIC})
        assert progression.owned_counts == {DiceType.BASIC: 1}
        assert progression.dice_value_upgrade_level == 0

    def test_reads_return_copies(self, progression):
        counts = progression.owned_counts
        counts[DiceType.BASIC] = 99
        assert progression.owned_count(DiceType.BASIC) == 1


class TestPricing:
    """Tests for current_price."""

    def test_price_with_three_owned(self, progression):
        progression.record_purchase(DiceType.BASIC)
        progression.record_purchase(DiceType.BASIC)
        assert progression.owned_count(DiceType.BASIC) == 3
        assert progression.current_price(DiceType.BASIC) == pytest.approx(10 * 1.15 ** 3)
        assert progression.current_price(DiceType.BASIC) == pytest.approx(15.2087, abs=1e-4)

    def test_price_with_none_owned_is_base_cost(self, progression):
        assert progression.current_price(DiceType.GOLD) == 2500

    def test_missing_catalog_entry_raises(self, bus):
        catalog = {DiceType.BASIC: DEFAULT_DICE_CATALOG[DiceType.BASIC]}
        state = ProgressionState(catalog, bus)
        with pytest.raises(ValueError, match="No catalog entry"):
            state.current_price(DiceType.RUBY)


class TestUnlocks:
    """Tests for unlock_* methods."""

    def test_first_unlock_returns_true_once(self, progression, recorder):
        assert progression.unlock_dice_type(DiceType.BRONZE) is True
        assert progression.unlock_dice_type(DiceType.BRONZE) is False
        assert recorder.events == [CoreEvent.DICE_TYPE_UNLOCKED]
        assert recorder.payloads[0].data == {"dice_type": DiceType.BRONZE}

    def test_skill_node_and_active_skill(self, progression, recorder):
        assert progression.unlock_skill_node("me_loose_change")
        assert progression.unlock_active_skill(ActiveSkillType.ROLL_BURST)
        assert progression.is_skill_node_unlocked("me_loose_change")
        assert ActiveSkillType.ROLL_BURST in progression.unlocked_active_skills
        assert recorder.events == [
            CoreEvent.SKILL_NODE_UNLOCKED,
            CoreEvent.ACTIVE_SKILL_UNLOCKED,
        ]


class TestOwnedDice:
    """Tests for record_purchase / record_removal."""

    def test_purchase_of_locked_type_raises(self, progression):
        with pytest.raises(DiceTypeLockedError) as exc_info:
            progression.record_purchase(DiceType.SILVER)
        assert exc_info.value.dice_type is DiceType.SILVER
        assert progression.owned_count(DiceType.SILVER) == 0

    def test_purchase_returns_new_count(self, progression):
        progression.unlock_dice_type(DiceType.BRONZE)
        assert progression.record_purchase(DiceType.BRONZE) == 1
        assert progression.record_purchase(DiceType.BRONZE) == 2

    def test_removal_floors_at_zero(self, progression):
        assert progression.record_removal(DiceType.BASIC) == 0
        assert progression.record_removal(DiceType.BASIC) == 0


class TestResets:
    """Tests for reset_for_prestige and restore."""

    def test_prestige_reset_keeps_unlocks(self, progression):
        progression.unlock_dice_type(DiceType.BRONZE)
        progression.record_purchase(DiceType.BRONZE)
        progression.unlock_skill_node("de_bronze_dice")
        progression.increment_dice_value_upgrade()

        progression.reset_for_prestige()

        assert progression.owned_counts == {DiceType.BASIC: 1}
        assert progression.dice_value_upgrade_level == 0
        assert DiceType.BRONZE in progression.unlocked_dice_types
        assert progression.is_skill_node_unlocked("de_bronze_dice")

    def test_restore_always_keeps_basic(self, progression):
        progression.restore(
            unlocked_dice_types=[DiceType.GOLD],
            owned_counts={DiceType.GOLD: 2},
            unlocked_skill_nodes=[],
            unlocked_active_skills=[],
            dice_value_upgrade_level=3,
        )
        assert progression.unlocked_dice_types == frozenset({DiceType.BASIC, DiceType.GOLD})
        assert progression.owned_counts == {DiceType.GOLD: 2}
        assert progression.dice_value_upgrade_level == 3

    def test_restore_publishes_only_new_unlocks(self, progression, recorder):
        progression.unlock_dice_type(DiceType.BRONZE)
        recorder.clear()

        progression.restore(
            unlocked_dice_types=[DiceType.BRONZE, DiceType.SILVER],
            owned_counts={DiceType.BASIC: 1},
            unlocked_skill_nodes=["de_silver_dice"],
            unlocked_active_skills=[],
            dice_value_upgrade_level=0,
        )

        assert recorder.events == [CoreEvent.DICE_TYPE_UNLOCKED, CoreEvent.SKILL_NODE_UNLOCKED]
        assert recorder.payloads[0].data == {"dice_type": DiceType.SILVER}

    def test_restore_rejects_negative_count(self, progression):
        with pytest.raises(ValueError):
            progression.restore(
                unlocked_dice_types=[],
                owned_counts={DiceType.BASIC: -1},
                unlocked_skill_nodes=[],
                unlocked_active_skills=[],
                dice_value_upgrade_level=0,
            )
        assert progression.owned_counts == {DiceType.BASIC: 1}

    def test_reset_returns_to_new_game(self, progression):
        progression.unlock_dice_type(DiceType.RUBY)
        progression.reset()
        assert progression.unlocked_dice_types == frozenset({DiceType.BASIC})
        assert progression.unlocked_skill_nodes == frozenset()
