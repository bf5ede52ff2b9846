"""
Incredicer - Prestige Engine

Eligibility, reward and the soft-reset transition. Prestiging exchanges the
current run's money and dice for Dark Matter and a permanent level; lifetime
money is never reset and drives every future requirement.

State machine: FRESH -> ELIGIBLE -> PRESTIGED -> ELIGIBLE -> ... with no
terminal state.
"""

import logging
import math
from dataclasses import dataclass

from src.engine.base import CurrencyKind, PrestigeRecord, PrestigeResult, PrestigeState
from src.engine.ledger import Ledger
from src.engine.modifiers import ModifierRegistry
from src.engine.progression import ProgressionState
from src.engine.validators import validate_balance, validate_count
from src.events import CoreEvent, EventBus

logger = logging.getLogger(__name__)

# Currencies whose balances survive a prestige
RETAINED_CURRENCIES = frozenset({CurrencyKind.DARK_MATTER, CurrencyKind.TIME_SHARDS})


@dataclass(frozen=True)
class PrestigeTuning:
    """
    Constants of the prestige curve.

    Attributes:
        base_requirement: Lifetime money needed for the first prestige
        scaling_factor: Requirement multiplier per level (> 1)
        dark_matter_per_prestige: Reward scale
        level_scaling: Reward multiplier per level
    """
    base_requirement: float = 1000.0
    scaling_factor: float = 10.0
    dark_matter_per_prestige: float = 1.0
    level_scaling: float = 1.1

    def __post_init__(self) -> None:
        """Validate tuning."""
        if self.base_requirement <= 0:
            raise ValueError("Prestige base requirement must be positive.")
        if self.scaling_factor <= 1:
            raise ValueError("Prestige scaling factor must be greater than 1.")
        if self.dark_matter_per_prestige <= 0:
            raise ValueError("Dark matter per prestige must be positive.")
        if self.level_scaling <= 0:
            raise ValueError("Prestige level scaling must be positive.")


class PrestigeEngine:
    """
    Computes prestige eligibility and reward, and performs the reset.

    Not thread-safe on its own: GameCore serializes every call.
    """

    def __init__(
        self,
        ledger: Ledger,
        modifiers: ModifierRegistry,
        progression: ProgressionState,
        tuning: PrestigeTuning | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self._ledger = ledger
        self._modifiers = modifiers
        self._progression = progression
        self.tuning = tuning if tuning is not None else PrestigeTuning()
        self._bus = bus if bus is not None else EventBus()
        self._level = 0
        self._total_dark_matter_earned = 0.0
        self._has_ascended = False

    @property
    def level(self) -> int:
        return self._level

    @property
    def total_dark_matter_earned(self) -> float:
        return self._total_dark_matter_earned

    @property
    def has_ascended(self) -> bool:
        return self._has_ascended

    @property
    def state(self) -> PrestigeState:
        if self.can_prestige():
            return PrestigeState.ELIGIBLE
        if self._has_ascended:
            return PrestigeState.PRESTIGED
        return PrestigeState.FRESH

    def record(self) -> PrestigeRecord:
        return PrestigeRecord(
            level=self._level,
            total_dark_matter_earned=self._total_dark_matter_earned,
            has_ascended=self._has_ascended,
        )

    # -- Rules -----------------------------------------------------------

    def required_lifetime_money(self) -> float:
        """Lifetime money needed for the next prestige."""
        return self.tuning.base_requirement * self.tuning.scaling_factor ** self._level

    def can_prestige(self) -> bool:
        return self._ledger.lifetime_money >= self.required_lifetime_money()

    def potential_reward(self) -> float:
        """Dark Matter a prestige would award right now.

        The log10 of the over-requirement ratio gives diminishing returns
        for overshooting the threshold.
        """
        ratio = self._ledger.lifetime_money / self.required_lifetime_money()
        raw = math.floor(
            self.tuning.dark_matter_per_prestige
            * math.log10(ratio + 1)
            * 10
            * self.tuning.level_scaling ** self._level
        )
        return self._modifiers.apply_dark_matter_modifiers(raw)

    def execute(self) -> PrestigeResult:
        """Perform a prestige if eligible.

        Refusals mutate nothing. On success every mutation completes before
        any event is delivered.
        """
        if not self.can_prestige():
            logger.debug(
                "Prestige refused: lifetime money %.2f below %.2f",
                self._ledger.lifetime_money,
                self.required_lifetime_money(),
            )
            return PrestigeResult(ok=False, new_level=self._level, reason="ineligible")

        reward = self.potential_reward()
        if reward <= 0:
            logger.debug("Prestige refused: reward %.2f is not positive", reward)
            return PrestigeResult(ok=False, new_level=self._level, reason="no_reward")

        with self._bus.batch():
            self._ledger.add_currency(CurrencyKind.DARK_MATTER, reward)
            self._level += 1
            self._total_dark_matter_earned += reward
            self._ledger.reset_keeping_some(RETAINED_CURRENCIES)
            self._progression.reset_for_prestige()
            self._has_ascended = True
            self._bus.publish(
                CoreEvent.PRESTIGE_COMPLETED,
                level=self._level,
                dark_matter_awarded=reward,
            )

        logger.info("Prestige %d completed, awarded %.2f dark matter", self._level, reward)
        return PrestigeResult(ok=True, dark_matter_awarded=reward, new_level=self._level)

    # -- Persistence -----------------------------------------------------

    def restore(self, record: PrestigeRecord) -> None:
        """Overwrite prestige progress from saved values."""
        self._level = validate_count(record.level, "Prestige level")
        self._total_dark_matter_earned = validate_balance(
            record.total_dark_matter_earned, "Total dark matter earned"
        )
        self._has_ascended = bool(record.has_ascended) or self._level > 0

    def reset(self) -> None:
        """Back to a brand-new game (used only when a save is deleted)."""
        self.restore(PrestigeRecord())
