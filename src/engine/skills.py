"""
Incredicer - Skill Tree

Permanent Dark Matter upgrades. Buying a node spends Dark Matter, records the
unlock in ProgressionState and applies the node's effects to the
ModifierRegistry once. Unlocks survive prestige, so their effects do too.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Iterable, Mapping

from src.engine.base import ActiveSkillType, CurrencyKind, DiceType
from src.engine.ledger import Ledger
from src.engine.modifiers import ModifierRegistry
from src.engine.progression import ProgressionState

logger = logging.getLogger(__name__)


class EffectKind(Enum):
    """What a skill effect does."""
    MULTIPLY = auto()            # knob *= value
    ADD = auto()                 # knob += value
    SET_FLAG = auto()            # flag knob = True
    UNLOCK_DICE_TYPE = auto()
    UNLOCK_ACTIVE_SKILL = auto()


@dataclass(frozen=True)
class SkillEffect:
    """
    A single effect applied by a skill node.

    Attributes:
        kind: Effect type
        knob: Modifier name for MULTIPLY / ADD / SET_FLAG
        value: Factor or delta
        dice_type: Target of UNLOCK_DICE_TYPE
        active_skill: Target of UNLOCK_ACTIVE_SKILL
    """
    kind: EffectKind
    knob: str = ""
    value: float = 0.0
    dice_type: DiceType | None = None
    active_skill: ActiveSkillType | None = None


@dataclass(frozen=True)
class SkillNodeDef:
    """
    Static definition of a skill node.

    Attributes:
        node_id: Stable identifier stored in saves
        display_name: Human-readable name
        dark_matter_cost: Price in Dark Matter
        prerequisites: Nodes that must be unlocked first
        effects: Effects applied on purchase
    """
    node_id: str
    display_name: str
    dark_matter_cost: float
    prerequisites: tuple[str, ...] = ()
    effects: tuple[SkillEffect, ...] = field(default_factory=tuple)


def _mul(knob: str, value: float) -> SkillEffect:
    return SkillEffect(EffectKind.MULTIPLY, knob=knob, value=value)


def _add(knob: str, value: float) -> SkillEffect:
    return SkillEffect(EffectKind.ADD, knob=knob, value=value)


def _flag(knob: str) -> SkillEffect:
    return SkillEffect(EffectKind.SET_FLAG, knob=knob)


def _dice(dice_type: DiceType) -> SkillEffect:
    return SkillEffect(EffectKind.UNLOCK_DICE_TYPE, dice_type=dice_type)


def _skill(skill: ActiveSkillType) -> SkillEffect:
    return SkillEffect(EffectKind.UNLOCK_ACTIVE_SKILL, active_skill=skill)


_DEFAULT_NODES = (
    SkillNodeDef("core_dark_matter_core", "Dark Matter Core", 0),
    # Money engine
    SkillNodeDef("me_loose_change", "Loose Change", 5_000, ("core_dark_matter_core",),
                 (_add("global_money_multiplier", 0.25),)),
    SkillNodeDef("me_table_tax", "Table Tax", 10_000, ("core_dark_matter_core",),
                 (_add("table_tax_chance", 0.01),)),
    SkillNodeDef("me_compound_interest", "Compound Interest", 50_000, ("me_loose_change",),
                 (_mul("global_money_multiplier", 1.5),)),
    SkillNodeDef("me_tip_jar", "Tip Jar", 50_000, ("me_table_tax",),
                 (_add("tip_jar_scaling", 0.05),)),
    SkillNodeDef("me_big_payouts", "Big Payouts", 250_000, ("me_compound_interest",),
                 (_mul("global_money_multiplier", 2.0),)),
    SkillNodeDef("me_jackpot_chance", "Jackpot Chance", 1_500_000, ("me_big_payouts", "me_tip_jar"),
                 (_add("jackpot_chance", 0.03), _mul("jackpot_multiplier", 5.0))),
    SkillNodeDef("me_infinite_float", "Infinite Float", 15_000_000, ("me_jackpot_chance",),
                 (_mul("idle_money_multiplier", 3.0), _mul("manual_money_multiplier", 0.8))),
    # Automation
    SkillNodeDef("au_idle_king", "Idle King", 20_000_000, ("me_infinite_float",),
                 (_flag("idle_king_active"),)),
    # Dice evolution
    SkillNodeDef("de_bronze_dice", "Bronze Dice", 10_000, ("core_dark_matter_core",),
                 (_dice(DiceType.BRONZE),)),
    SkillNodeDef("de_silver_dice", "Silver Dice", 50_000, ("de_bronze_dice",),
                 (_dice(DiceType.SILVER),)),
    SkillNodeDef("de_gold_dice", "Gold Dice", 250_000, ("de_silver_dice",),
                 (_dice(DiceType.GOLD),)),
    SkillNodeDef("de_emerald_dice", "Emerald Dice", 2_000_000, ("de_gold_dice",),
                 (_dice(DiceType.EMERALD),)),
    SkillNodeDef("de_ruby_dice", "Ruby Dice", 12_000_000, ("de_emerald_dice",),
                 (_dice(DiceType.RUBY),)),
    SkillNodeDef("de_diamond_dice", "Diamond Dice", 30_000_000, ("de_ruby_dice",),
                 (_dice(DiceType.DIAMOND),)),
    # Skills & utility
    SkillNodeDef("sk_roll_burst", "Roll Burst", 7_500, ("core_dark_matter_core",),
                 (_skill(ActiveSkillType.ROLL_BURST),)),
    SkillNodeDef("sk_rapid_cooldown", "Rapid Cooldown", 100_000, ("sk_roll_burst",),
                 (_mul("skill_cooldown_multiplier", 0.8),)),
    SkillNodeDef("sk_hyperburst", "Hyperburst", 2_000_000, ("sk_rapid_cooldown",),
                 (_skill(ActiveSkillType.HYPERBURST),)),
    SkillNodeDef("sk_time_dilation", "Time Dilation", 18_000_000, ("sk_hyperburst",),
                 (_flag("time_dilation_active"),)),
)

DEFAULT_SKILL_NODES: Mapping[str, SkillNodeDef] = MappingProxyType(
    {node.node_id: node for node in _DEFAULT_NODES}
)


class SkillTree:
    """
    Purchases skill nodes and applies their effects.

    Not thread-safe on its own: GameCore serializes every call.
    """

    def __init__(
        self,
        ledger: Ledger,
        modifiers: ModifierRegistry,
        progression: ProgressionState,
        nodes: Iterable[SkillNodeDef] | None = None,
    ) -> None:
        self._ledger = ledger
        self._modifiers = modifiers
        self._progression = progression
        source = nodes if nodes is not None else DEFAULT_SKILL_NODES.values()
        self._nodes = {node.node_id: node for node in source}

    def node(self, node_id: str) -> SkillNodeDef | None:
        return self._nodes.get(node_id)

    def prerequisites_met(self, node_id: str) -> bool:
        node = self._nodes.get(node_id)
        if node is None:
            return False
        return all(self._progression.is_skill_node_unlocked(p) for p in node.prerequisites)

    def can_purchase(self, node_id: str) -> bool:
        """Known, not owned, prerequisites met and affordable."""
        node = self._nodes.get(node_id)
        if node is None or self._progression.is_skill_node_unlocked(node_id):
            return False
        if not self.prerequisites_met(node_id):
            return False
        return self._ledger.can_afford(CurrencyKind.DARK_MATTER, node.dark_matter_cost)

    def try_purchase(self, node_id: str) -> bool:
        """Buy a node with Dark Matter and apply its effects."""
        if not self.can_purchase(node_id):
            logger.debug("Skill node %s cannot be purchased", node_id)
            return False

        node = self._nodes[node_id]
        if not self._ledger.try_spend(CurrencyKind.DARK_MATTER, node.dark_matter_cost):
            return False

        self._progression.unlock_skill_node(node_id)
        for effect in node.effects:
            self._apply(effect)
        logger.info("Skill node %s purchased for %.0f dark matter", node_id, node.dark_matter_cost)
        return True

    def _apply(self, effect: SkillEffect) -> None:
        if effect.kind is EffectKind.MULTIPLY:
            self._modifiers.multiply(effect.knob, effect.value)
        elif effect.kind is EffectKind.ADD:
            self._modifiers.add(effect.knob, effect.value)
        elif effect.kind is EffectKind.SET_FLAG:
            self._modifiers.set(effect.knob, True)
        elif effect.kind is EffectKind.UNLOCK_DICE_TYPE and effect.dice_type is not None:
            self._progression.unlock_dice_type(effect.dice_type)
        elif effect.kind is EffectKind.UNLOCK_ACTIVE_SKILL and effect.active_skill is not None:
            self._progression.unlock_active_skill(effect.active_skill)
