"""
Incredicer - Engine Base Classes

This module defines the enums and value objects shared by the progression
engine. Mutable game state lives in the component classes; everything handed
back to callers is a frozen dataclass so it can be inspected from any thread.
"""

from dataclasses import dataclass
from enum import Enum


class CurrencyKind(Enum):
    """Currencies tracked by the ledger."""
    MONEY = "money"
    DARK_MATTER = "dark_matter"
    TIME_SHARDS = "time_shards"


class DiceType(Enum):
    """Dice tiers, lowest to highest."""
    BASIC = "basic"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    EMERALD = "emerald"
    RUBY = "ruby"
    DIAMOND = "diamond"


class ActiveSkillType(Enum):
    """Player-triggered skills unlocked through the skill tree."""
    ROLL_BURST = "roll_burst"
    HYPERBURST = "hyperburst"


class PrestigeState(Enum):
    """Where the player sits in the prestige loop."""
    FRESH = "fresh"            # never ascended, not yet eligible
    ELIGIBLE = "eligible"      # lifetime money meets the requirement
    PRESTIGED = "prestiged"    # ascended at least once, not eligible again yet


@dataclass(frozen=True)
class CurrencyBalance:
    """
    Balance of a single currency.

    Attributes:
        current: Spendable amount
        lifetime: Everything ever earned (never decreases)
    """
    current: float = 0.0
    lifetime: float = 0.0


@dataclass(frozen=True)
class PrestigeRecord:
    """
    Permanent prestige progress.

    Attributes:
        level: Number of completed prestiges
        total_dark_matter_earned: Dark Matter awarded by all prestiges
        has_ascended: True once the first prestige has completed
    """
    level: int = 0
    total_dark_matter_earned: float = 0.0
    has_ascended: bool = False


@dataclass(frozen=True)
class RollResult:
    """
    Rewards credited for a single roll.

    Attributes:
        money: Money from the modifier pipeline
        dark_matter: Dark Matter credited (0 before the first ascension)
        is_jackpot: Whether the jackpot multiplier applied
        table_tax_bonus: Bonus coin from Table Tax / Tip Jar
    """
    money: float
    dark_matter: float = 0.0
    is_jackpot: bool = False
    table_tax_bonus: float = 0.0

    @property
    def total_money(self) -> float:
        """Money including the bonus coin."""
        return self.money + self.table_tax_bonus


@dataclass(frozen=True)
class PrestigeResult:
    """
    Outcome of a prestige attempt.

    Attributes:
        ok: Whether the prestige happened
        dark_matter_awarded: Dark Matter credited (0 when not ok)
        new_level: Prestige level after the attempt
        reason: Why the attempt was refused, empty on success
    """
    ok: bool
    dark_matter_awarded: float = 0.0
    new_level: int = 0
    reason: str = ""
