"""
Incredicer - Save Models

Pydantic models that declare every persisted field. Nothing is inferred by
reflection: a field missing here is not saved.
"""

from datetime import datetime

from pydantic import BaseModel, Field, NonNegativeFloat, NonNegativeInt, field_validator

from src.engine.base import ActiveSkillType, DiceType
from src.engine.modifiers import validate_modifier_table

# Increment when the persisted layout changes and add a step in codec.py
SAVE_VERSION = 3


class BalanceModel(BaseModel):
    """Current and lifetime amount of one currency."""

    current: NonNegativeFloat = 0.0
    lifetime: NonNegativeFloat = 0.0

    model_config = {"frozen": True}


class PrestigeModel(BaseModel):
    """Permanent prestige progress."""

    level: NonNegativeInt = 0
    total_dark_matter_earned: NonNegativeFloat = 0.0
    has_ascended: bool = False

    model_config = {"frozen": True}


class SaveSnapshot(BaseModel):
    """Versioned copy of all core state."""

    save_version: int = SAVE_VERSION
    timestamp: datetime
    money: BalanceModel = Field(default_factory=BalanceModel)
    dark_matter: BalanceModel = Field(default_factory=BalanceModel)
    time_shards: BalanceModel = Field(default_factory=BalanceModel)
    modifiers: dict[str, float | bool] = Field(default_factory=dict)
    unlocked_dice_types: list[DiceType] = Field(default_factory=lambda: [DiceType.BASIC])
    owned_counts: dict[DiceType, NonNegativeInt] = Field(
        default_factory=lambda: {DiceType.BASIC: 1}
    )
    unlocked_skill_nodes: list[str] = Field(default_factory=list)
    unlocked_active_skills: list[ActiveSkillType] = Field(default_factory=list)
    dice_value_upgrade_level: NonNegativeInt = 0
    prestige: PrestigeModel = Field(default_factory=PrestigeModel)
    claimed_milestones: list[str] = Field(default_factory=list)
    total_rolls: NonNegativeInt = 0

    model_config = {"frozen": True}

    @field_validator("modifiers")
    @classmethod
    def validate_modifiers(cls, value: dict[str, float | bool]) -> dict[str, float | bool]:
        """Known knobs must hold the right kind of value (flag or number)."""
        validate_modifier_table(value)
        return value
