"""
Incredicer - Milestones

One-time rewards for crossing lifetime thresholds. Milestones are the
producer of Time Shards: each pays its reward exactly once, and the set of
claimed ids is permanent (it survives prestige and is saved).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping

from src.engine.base import CurrencyKind
from src.engine.ledger import Ledger
from src.engine.validators import validate_count
from src.events import CoreEvent, EventBus

logger = logging.getLogger(__name__)


class MilestoneMetric(Enum):
    """Lifetime counter a milestone watches."""
    LIFETIME_MONEY = "lifetime_money"
    LIFETIME_DARK_MATTER = "lifetime_dark_matter"
    TOTAL_ROLLS = "total_rolls"


@dataclass(frozen=True)
class MilestoneDef:
    """
    Static definition of a milestone.

    Attributes:
        milestone_id: Stable identifier stored in saves
        display_name: Human-readable name
        metric: Counter compared against ``target``
        target: Value the counter must reach
        time_shard_reward: Time Shards paid on completion
    """
    milestone_id: str
    display_name: str
    metric: MilestoneMetric
    target: float
    time_shard_reward: float


_DEFAULT_MILESTONES = (
    MilestoneDef("money_1k", "First Grand", MilestoneMetric.LIFETIME_MONEY, 1_000, 5),
    MilestoneDef("money_10k", "Getting Rich", MilestoneMetric.LIFETIME_MONEY, 10_000, 15),
    MilestoneDef("money_100k", "Wealthy", MilestoneMetric.LIFETIME_MONEY, 100_000, 50),
    MilestoneDef("dm_100", "Dark Collector", MilestoneMetric.LIFETIME_DARK_MATTER, 100, 10),
    MilestoneDef("rolls_100", "Roller", MilestoneMetric.TOTAL_ROLLS, 100, 5),
    MilestoneDef("rolls_1000", "Dice Master", MilestoneMetric.TOTAL_ROLLS, 1_000, 20),
)

DEFAULT_MILESTONES: Mapping[str, MilestoneDef] = MappingProxyType(
    {milestone.milestone_id: milestone for milestone in _DEFAULT_MILESTONES}
)


class MilestoneTracker:
    """
    Counts rolls and pays Time Shards for completed milestones.

    Not thread-safe on its own: GameCore serializes every call.
    """

    def __init__(
        self,
        ledger: Ledger,
        milestones: Iterable[MilestoneDef] | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self._ledger = ledger
        self._bus = bus if bus is not None else EventBus()
        source = milestones if milestones is not None else DEFAULT_MILESTONES.values()
        self._milestones = {milestone.milestone_id: milestone for milestone in source}
        self._claimed: set[str] = set()
        self._total_rolls = 0

    @property
    def claimed(self) -> frozenset[str]:
        return frozenset(self._claimed)

    @property
    def total_rolls(self) -> int:
        return self._total_rolls

    def is_claimed(self, milestone_id: str) -> bool:
        return milestone_id in self._claimed

    def progress(self, metric: MilestoneMetric) -> float:
        """Current value of the counter behind ``metric``."""
        if metric is MilestoneMetric.LIFETIME_MONEY:
            return self._ledger.lifetime(CurrencyKind.MONEY)
        if metric is MilestoneMetric.LIFETIME_DARK_MATTER:
            return self._ledger.lifetime(CurrencyKind.DARK_MATTER)
        return float(self._total_rolls)

    def record_roll(self) -> int:
        self._total_rolls += 1
        return self._total_rolls

    def check(self) -> list[MilestoneDef]:
        """Claim every milestone whose target has been reached.

        Returns:
            Milestones completed by this call, in definition order
        """
        completed = []
        for milestone in self._milestones.values():
            if milestone.milestone_id in self._claimed:
                continue
            if self.progress(milestone.metric) < milestone.target:
                continue

            self._claimed.add(milestone.milestone_id)
            self._ledger.add_currency(CurrencyKind.TIME_SHARDS, milestone.time_shard_reward)
            self._bus.publish(
                CoreEvent.MILESTONE_COMPLETED,
                milestone_id=milestone.milestone_id,
                time_shards=milestone.time_shard_reward,
            )
            logger.info("Milestone %s completed", milestone.milestone_id)
            completed.append(milestone)
        return completed

    def restore(self, *, claimed: Iterable[str], total_rolls: int) -> None:
        """Overwrite claimed ids and the roll counter from saved values.

        Ids no longer defined are kept so they are never paid twice if the
        milestone returns.
        """
        rolls = validate_count(total_rolls, "Total rolls")
        self._claimed = set(claimed)
        self._total_rolls = rolls

    def reset(self) -> None:
        """Back to a brand-new game (used only when a save is deleted)."""
        self.restore(claimed=(), total_rolls=0)
