"""
Incredicer - Dice Catalog

Static per-type dice configuration: payout multiplier, Dark Matter per roll
and the shop cost curve. This is game data, not player state.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from src.engine.base import DiceType


@dataclass(frozen=True)
class DiceTypeConfig:
    """
    Configuration for one dice type.

    Attributes:
        dice_type: Which tier this describes
        display_name: Human-readable name
        base_payout: Money multiplier applied to the face value
        dm_per_roll: Extra Dark Matter per roll once ascended
        shop_base_cost: Price of the first unit
        shop_cost_growth: Price multiplier per unit already owned
    """
    dice_type: DiceType
    display_name: str
    base_payout: float
    dm_per_roll: float
    shop_base_cost: float
    shop_cost_growth: float

    def __post_init__(self) -> None:
        """Validate the cost curve."""
        if self.shop_base_cost <= 0:
            raise ValueError(f"Shop base cost for {self.dice_type.name} must be positive.")
        if self.shop_cost_growth < 1:
            raise ValueError(f"Shop cost growth for {self.dice_type.name} must be at least 1.")

    def price_for(self, owned_count: int) -> float:
        """Exponential shop price given how many are already owned."""
        return self.shop_base_cost * self.shop_cost_growth ** owned_count


def _entry(
    dice_type: DiceType,
    name: str,
    payout: float,
    dm: float,
    cost: float,
    growth: float,
) -> tuple[DiceType, DiceTypeConfig]:
    return dice_type, DiceTypeConfig(dice_type, name, payout, dm, cost, growth)


DEFAULT_DICE_CATALOG: Mapping[DiceType, DiceTypeConfig] = MappingProxyType(dict([
    #       type              name             payout  DM     cost       growth
    _entry(DiceType.BASIC,   "Basic Dice",     1,      0.0,   10,        1.15),
    _entry(DiceType.BRONZE,  "Bronze Dice",    3,      0.0,   100,       1.18),
    _entry(DiceType.SILVER,  "Silver Dice",    10,     0.05,  500,       1.2),
    _entry(DiceType.GOLD,    "Gold Dice",      50,     0.2,   2500,      1.22),
    _entry(DiceType.EMERALD, "Emerald Dice",   250,    1.0,   15000,     1.25),
    _entry(DiceType.RUBY,    "Ruby Dice",      1500,   5.0,   100000,    1.28),
    _entry(DiceType.DIAMOND, "Diamond Dice",   10000,  25.0,  1000000,   1.3),
]))
