"""
Incredicer - Modifier Registry

Every stat knob the skill tree and upgrades can touch, and the two reward
pipelines that read them. Knobs are a flat, declared table: each has a
default and optional clamp bounds, and a save stores them by name.

Pipeline order for money is fixed: global multiplier, then the manual or
idle multiplier, then a single jackpot trial on the fully-modified amount.
Idle rewards never receive the manual multiplier.
"""

import logging
import random
from dataclasses import dataclass
from typing import Mapping

from src.engine.validators import clamp, validate_amount

logger = logging.getLogger(__name__)

TIME_DILATION_DARK_MATTER_FACTOR = 2.0
TABLE_TAX_FLAT_BONUS = 50.0


@dataclass(frozen=True)
class KnobSpec:
    """
    Declaration of one modifier knob.

    Attributes:
        name: Key used in code and in save files
        default: Value after reset; a bool default makes the knob a flag
        minimum: Lower clamp bound (None = open)
        maximum: Upper clamp bound (None = open)
    """
    name: str
    default: float | bool
    minimum: float | None = None
    maximum: float | None = None

    @property
    def is_flag(self) -> bool:
        return isinstance(self.default, bool)


KNOBS: tuple[KnobSpec, ...] = (
    # Money
    KnobSpec("global_money_multiplier", 1.0, minimum=0.0),
    KnobSpec("manual_money_multiplier", 1.0, minimum=0.0),
    KnobSpec("idle_money_multiplier", 1.0, minimum=0.0),
    # Jackpot
    KnobSpec("jackpot_chance", 0.0, minimum=0.0, maximum=1.0),
    KnobSpec("jackpot_multiplier", 2.0, minimum=0.0),
    # Table Tax / Tip Jar
    KnobSpec("table_tax_chance", 0.0, minimum=0.0, maximum=1.0),
    KnobSpec("tip_jar_scaling", 0.0, minimum=0.0, maximum=1.0),
    # Dark Matter
    KnobSpec("dark_matter_gain_multiplier", 1.0, minimum=0.0),
    # Helper hands
    KnobSpec("helper_hand_speed_multiplier", 1.0, minimum=0.0),
    KnobSpec("helper_hand_extra_rolls", 0.0, minimum=0.0),
    # Skills
    KnobSpec("skill_cooldown_multiplier", 1.0, minimum=0.0),
    KnobSpec("active_skill_duration_multiplier", 1.0, minimum=0.0),
    KnobSpec("cursor_roll_radius", 1.0, minimum=0.0),
    # Special flags
    KnobSpec("idle_king_active", False),
    KnobSpec("time_dilation_active", False),
    KnobSpec("focused_gravity_active", False),
    KnobSpec("precision_aim_active", False),
)

_KNOBS_BY_NAME: dict[str, KnobSpec] = {spec.name: spec for spec in KNOBS}


def check_modifier_value(name: str, value: float | bool) -> float | bool:
    """Value ``name`` would store, clamped to its bounds.

    Raises:
        ValueError: If the name is unknown, a flag gets a non-bool or a
            numeric knob gets a bool or a non-finite number
    """
    try:
        spec = _KNOBS_BY_NAME[name]
    except KeyError:
        raise ValueError(f"Unknown modifier '{name}'.") from None

    if spec.is_flag:
        if not isinstance(value, bool):
            raise ValueError(f"Modifier '{name}' is a flag and needs a bool, got {type(value).__name__}.")
        return value
    return clamp(validate_amount(value, f"Modifier '{name}'"), spec.minimum, spec.maximum)


def validate_modifier_table(values: Mapping[str, float | bool]) -> dict[str, float | bool]:
    """Checked copy of a saved knob table. Unknown names are left out.

    Raises:
        ValueError: On the first known knob holding an invalid value
    """
    return {
        name: check_modifier_value(name, value)
        for name, value in values.items()
        if name in _KNOBS_BY_NAME
    }


@dataclass(frozen=True)
class ModifiedMoney:
    """Result of the money pipeline."""
    amount: float
    is_jackpot: bool


class ModifierRegistry:
    """
    Owns all multiplicative, additive and boolean modifiers.

    Reward functions have no side effects beyond the jackpot and table tax
    draws taken from the injected random source.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._values: dict[str, float | bool] = {}
        self.reset_to_defaults()

    # -- Knob access -----------------------------------------------------

    def get(self, name: str) -> float | bool:
        """Current value of a knob."""
        return self._values[self._spec(name).name]

    def set(self, name: str, value: float | bool) -> float | bool:
        """Assign a knob, clamped to its bounds. Returns the stored value."""
        stored = check_modifier_value(name, value)
        self._values[name] = stored
        return stored

    def multiply(self, name: str, factor: float) -> float | bool:
        """Scale a numeric knob by ``factor``."""
        return self.set(name, self._numeric(name) * factor)

    def add(self, name: str, delta: float) -> float | bool:
        """Shift a numeric knob by ``delta``."""
        return self.set(name, self._numeric(name) + delta)

    def as_dict(self) -> dict[str, float | bool]:
        """Copy of every knob, keyed by name."""
        return dict(self._values)

    def load(self, values: Mapping[str, float | bool]) -> None:
        """Replace every knob from a saved table.

        Knobs missing from ``values`` take their defaults. Unknown names are
        logged and ignored. Nothing changes if any value is invalid.

        Raises:
            ValueError: If a known knob holds a value of the wrong kind
        """
        for name in values:
            if name not in _KNOBS_BY_NAME:
                logger.warning("Ignoring unknown modifier '%s' in saved state", name)

        loaded = validate_modifier_table(values)
        self._values = {spec.name: spec.default for spec in KNOBS} | loaded

    def reset_to_defaults(self) -> None:
        """Restore every knob to its declared default (fresh game only)."""
        self._values = {spec.name: spec.default for spec in KNOBS}

    # -- Pipelines -------------------------------------------------------

    def evaluate_money(self, base: float, is_manual: bool, is_idle: bool) -> ModifiedMoney:
        """Run the money pipeline and report whether the jackpot hit.

        Takes exactly one jackpot draw per call.
        """
        amount = validate_amount(base, "Base money") * self._values["global_money_multiplier"]

        if is_manual:
            amount *= self._values["manual_money_multiplier"]

        if is_idle:
            amount *= self._values["idle_money_multiplier"]

        is_jackpot = self._rng.random() < self._values["jackpot_chance"]
        if is_jackpot:
            amount *= self._values["jackpot_multiplier"]

        return ModifiedMoney(amount=amount, is_jackpot=is_jackpot)

    def apply_money_modifiers(self, base: float, is_manual: bool, is_idle: bool) -> float:
        """Final money for a raw reward. Call once per reward."""
        return self.evaluate_money(base, is_manual, is_idle).amount

    def apply_dark_matter_modifiers(self, base: float) -> float:
        """Final Dark Matter for a raw reward. Deterministic."""
        amount = validate_amount(base, "Base dark matter") * self._values["dark_matter_gain_multiplier"]

        if self._values["time_dilation_active"]:
            amount *= TIME_DILATION_DARK_MATTER_FACTOR

        return amount

    def check_table_tax(self, current_money: float) -> float:
        """Bonus coin for this roll, or 0 when Table Tax does not proc.

        With Tip Jar scaling the bonus is a share of current money,
        otherwise a flat amount.
        """
        chance = self._values["table_tax_chance"]
        if chance <= 0:
            return 0.0
        if self._rng.random() >= chance:
            return 0.0

        scaling = self._values["tip_jar_scaling"]
        if scaling > 0:
            return max(0.0, current_money) * scaling
        return TABLE_TAX_FLAT_BONUS

    # -- Helpers ---------------------------------------------------------

    @staticmethod
    def _spec(name: str) -> KnobSpec:
        try:
            return _KNOBS_BY_NAME[name]
        except KeyError:
            raise ValueError(f"Unknown modifier '{name}'.") from None

    def _numeric(self, name: str) -> float:
        spec = self._spec(name)
        if spec.is_flag:
            raise ValueError(f"Modifier '{name}' is a flag and cannot be scaled.")
        return float(self._values[name])
