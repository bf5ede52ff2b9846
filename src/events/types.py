"""
Incredicer - Core Event Definitions

Event types and payloads published to the presentation layer.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class CoreEvent(Enum):
    """Events that the progression engine publishes."""

    MONEY_CHANGED = auto()
    DARK_MATTER_CHANGED = auto()
    TIME_SHARDS_CHANGED = auto()
    LIFETIME_MONEY_CHANGED = auto()
    LIFETIME_DARK_MATTER_CHANGED = auto()
    LIFETIME_TIME_SHARDS_CHANGED = auto()
    DICE_TYPE_UNLOCKED = auto()
    DICE_PURCHASED = auto()
    SKILL_NODE_UNLOCKED = auto()
    ACTIVE_SKILL_UNLOCKED = auto()
    PRESTIGE_COMPLETED = auto()
    POTENTIAL_PRESTIGE_REWARD_CHANGED = auto()
    MILESTONE_COMPLETED = auto()
    GAME_SAVED = auto()
    GAME_LOADED = auto()


@dataclass
class EventPayload:
    """Wrapper for event data."""

    event: CoreEvent
    data: dict[str, Any] = field(default_factory=dict)
