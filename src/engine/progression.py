"""
Incredicer - Progression State

Unlocked content and owned dice. Unlock sets only ever grow; owned counts
and the dice value upgrade level are the resettable part of a run.
"""

from typing import Iterable, Mapping

from src.engine.base import ActiveSkillType, DiceType
from src.engine.catalog import DEFAULT_DICE_CATALOG, DiceTypeConfig
from src.engine.validators import validate_count
from src.events import CoreEvent, EventBus


class DiceTypeLockedError(ValueError):
    """Raised when a purchase is recorded for a dice type that is not unlocked."""

    def __init__(self, dice_type: DiceType) -> None:
        super().__init__(f"Dice type {dice_type.name} is not unlocked.")
        self.dice_type = dice_type


class ProgressionState:
    """
    Owns unlock sets, per-type owned counts and the dice value upgrade level.

    The Basic dice type is unlocked from creation and can never be removed.
    Not thread-safe on its own: GameCore serializes every call.
    """

    def __init__(
        self,
        catalog: Mapping[DiceType, DiceTypeConfig] | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self._catalog = dict(catalog if catalog is not None else DEFAULT_DICE_CATALOG)
        self._bus = bus if bus is not None else EventBus()
        self._unlocked_dice_types: set[DiceType] = {DiceType.BASIC}
        self._owned_counts: dict[DiceType, int] = {DiceType.BASIC: 1}
        self._unlocked_skill_nodes: set[str] = set()
        self._unlocked_active_skills: set[ActiveSkillType] = set()
        self._dice_value_upgrade_level = 0

    # -- Reads -----------------------------------------------------------

    @property
    def unlocked_dice_types(self) -> frozenset[DiceType]:
        return frozenset(self._unlocked_dice_types)

    @property
    def unlocked_skill_nodes(self) -> frozenset[str]:
        return frozenset(self._unlocked_skill_nodes)

    @property
    def unlocked_active_skills(self) -> frozenset[ActiveSkillType]:
        return frozenset(self._unlocked_active_skills)

    @property
    def owned_counts(self) -> dict[DiceType, int]:
        return dict(self._owned_counts)

    @property
    def dice_value_upgrade_level(self) -> int:
        return self._dice_value_upgrade_level

    def is_dice_type_unlocked(self, dice_type: DiceType) -> bool:
        return dice_type in self._unlocked_dice_types

    def is_skill_node_unlocked(self, node_id: str) -> bool:
        return node_id in self._unlocked_skill_nodes

    def owned_count(self, dice_type: DiceType) -> int:
        return self._owned_counts.get(dice_type, 0)

    def config_for(self, dice_type: DiceType) -> DiceTypeConfig:
        """Static configuration for ``dice_type``."""
        try:
            return self._catalog[dice_type]
        except KeyError:
            raise ValueError(f"No catalog entry for dice type {dice_type.name}.") from None

    def current_price(self, dice_type: DiceType) -> float:
        """Shop price of the next unit: base cost * growth ** owned."""
        return self.config_for(dice_type).price_for(self.owned_count(dice_type))

    # -- Unlocks ---------------------------------------------------------

    def unlock_dice_type(self, dice_type: DiceType) -> bool:
        """Unlock a dice type. Returns True only on first unlock."""
        if dice_type in self._unlocked_dice_types:
            return False
        self._unlocked_dice_types.add(dice_type)
        self._bus.publish(CoreEvent.DICE_TYPE_UNLOCKED, dice_type=dice_type)
        return True

    def unlock_skill_node(self, node_id: str) -> bool:
        """Unlock a skill node. Returns True only on first unlock."""
        if node_id in self._unlocked_skill_nodes:
            return False
        self._unlocked_skill_nodes.add(node_id)
        self._bus.publish(CoreEvent.SKILL_NODE_UNLOCKED, node_id=node_id)
        return True

    def unlock_active_skill(self, skill: ActiveSkillType) -> bool:
        """Unlock an active skill. Returns True only on first unlock."""
        if skill in self._unlocked_active_skills:
            return False
        self._unlocked_active_skills.add(skill)
        self._bus.publish(CoreEvent.ACTIVE_SKILL_UNLOCKED, skill=skill)
        return True

    # -- Owned dice ------------------------------------------------------

    def record_purchase(self, dice_type: DiceType) -> int:
        """Count one more owned unit and return the new count.

        Raises:
            DiceTypeLockedError: If the type has not been unlocked
        """
        if dice_type not in self._unlocked_dice_types:
            raise DiceTypeLockedError(dice_type)
        count = self.owned_count(dice_type) + 1
        self._owned_counts[dice_type] = count
        return count

    def record_removal(self, dice_type: DiceType) -> int:
        """Count one fewer owned unit (floored at zero) and return the new count."""
        count = max(0, self.owned_count(dice_type) - 1)
        self._owned_counts[dice_type] = count
        return count

    def increment_dice_value_upgrade(self) -> int:
        self._dice_value_upgrade_level += 1
        return self._dice_value_upgrade_level

    # -- Resets ----------------------------------------------------------

    def reset_for_prestige(self) -> None:
        """Drop the run's dice and upgrades; unlocks are permanent."""
        self._owned_counts = {DiceType.BASIC: 1}
        self._dice_value_upgrade_level = 0

    def restore(
        self,
        *,
        unlocked_dice_types: Iterable[DiceType],
        owned_counts: Mapping[DiceType, int],
        unlocked_skill_nodes: Iterable[str],
        unlocked_active_skills: Iterable[ActiveSkillType],
        dice_value_upgrade_level: int,
    ) -> None:
        """Overwrite the whole state from saved values.

        Publishes an unlocked event for every id that was not unlocked
        before, the same as live unlocking would.
        """
        counts = {
            dice_type: validate_count(count, f"Owned count for {dice_type.name}")
            for dice_type, count in owned_counts.items()
        }
        level = validate_count(dice_value_upgrade_level, "Dice value upgrade level")
        dice_types = set(unlocked_dice_types) | {DiceType.BASIC}
        skill_nodes = set(unlocked_skill_nodes)
        active_skills = set(unlocked_active_skills)

        newly_dice = dice_types - self._unlocked_dice_types
        newly_nodes = skill_nodes - self._unlocked_skill_nodes
        newly_skills = active_skills - self._unlocked_active_skills

        self._unlocked_dice_types = dice_types
        self._unlocked_skill_nodes = skill_nodes
        self._unlocked_active_skills = active_skills
        self._owned_counts = counts
        self._dice_value_upgrade_level = level

        for dice_type in sorted(newly_dice, key=lambda d: d.value):
            self._bus.publish(CoreEvent.DICE_TYPE_UNLOCKED, dice_type=dice_type)
        for node_id in sorted(newly_nodes):
            self._bus.publish(CoreEvent.SKILL_NODE_UNLOCKED, node_id=node_id)
        for skill in sorted(newly_skills, key=lambda s: s.value):
            self._bus.publish(CoreEvent.ACTIVE_SKILL_UNLOCKED, skill=skill)

    def reset(self) -> None:
        """Back to a brand-new game (used only when a save is deleted)."""
        self.restore(
            unlocked_dice_types=(DiceType.BASIC,),
            owned_counts={DiceType.BASIC: 1},
            unlocked_skill_nodes=(),
            unlocked_active_skills=(),
            dice_value_upgrade_level=0,
        )
