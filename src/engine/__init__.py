"""
Incredicer Progression Engine.

Pure Python game rules with zero UI/storage dependencies.
Handles currencies, reward modifiers, unlocks, the shop economy and prestige.
"""

from src.engine.base import (
    ActiveSkillType,
    CurrencyBalance,
    CurrencyKind,
    DiceType,
    PrestigeRecord,
    PrestigeResult,
    PrestigeState,
    RollResult,
)
from src.engine.catalog import DEFAULT_DICE_CATALOG, DiceTypeConfig
from src.engine.core import GameCore, UpgradePricing
from src.engine.ledger import Ledger
from src.engine.milestones import DEFAULT_MILESTONES, MilestoneDef, MilestoneMetric, MilestoneTracker
from src.engine.modifiers import KNOBS, ModifierRegistry
from src.engine.prestige import PrestigeEngine, PrestigeTuning
from src.engine.progression import DiceTypeLockedError, ProgressionState
from src.engine.skills import DEFAULT_SKILL_NODES, SkillNodeDef, SkillTree

__all__ = [
    # Data Classes
    "CurrencyBalance",
    "DiceTypeConfig",
    "MilestoneDef",
    "PrestigeRecord",
    "PrestigeResult",
    "RollResult",
    "SkillNodeDef",
    "UpgradePricing",
    "PrestigeTuning",
    # Enums
    "ActiveSkillType",
    "CurrencyKind",
    "MilestoneMetric",
    "DiceType",
    "PrestigeState",
    # Components
    "GameCore",
    "Ledger",
    "MilestoneTracker",
    "ModifierRegistry",
    "PrestigeEngine",
    "ProgressionState",
    "SkillTree",
    # Static data
    "DEFAULT_DICE_CATALOG",
    "DEFAULT_MILESTONES",
    "DEFAULT_SKILL_NODES",
    "KNOBS",
    # Errors
    "DiceTypeLockedError",
]
