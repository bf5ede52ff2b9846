"""
Incredicer - Game Core

Single entry point for every state mutation. GameCore owns one instance of
each component, wires them to a shared EventBus and serializes all
read-modify-write sequences behind one re-entrant lock, so two concurrent
``try_spend`` calls can never both see the same starting balance.

Events raised during an operation are delivered only after the whole
operation has completed and the lock has been released.
"""

from __future__ import annotations

import logging
import random
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping

from src.engine.base import (
    ActiveSkillType,
    CurrencyBalance,
    CurrencyKind,
    DiceType,
    PrestigeRecord,
    PrestigeResult,
    RollResult,
)
from src.engine.catalog import DiceTypeConfig
from src.engine.ledger import Ledger
from src.engine.milestones import MilestoneDef, MilestoneTracker
from src.engine.modifiers import ModifierRegistry
from src.engine.prestige import PrestigeEngine, PrestigeTuning
from src.engine.progression import ProgressionState
from src.engine.skills import SkillNodeDef, SkillTree
from src.engine.validators import validate_amount
from src.events import CoreEvent, EventBus

if TYPE_CHECKING:
    from src.config.settings import Settings

logger = logging.getLogger(__name__)

# Idle King: helper rolls earn +50% Dark Matter (and no extra money)
IDLE_KING_DARK_MATTER_FACTOR = 1.5


@dataclass(frozen=True)
class UpgradePricing:
    """Cost curve of the dice value upgrade."""
    base_cost: float = 25.0
    cost_growth: float = 1.8

    def price_for(self, level: int) -> float:
        return self.base_cost * self.cost_growth ** level


class GameCore:
    """
    Serialized facade over Ledger, ModifierRegistry, ProgressionState,
    PrestigeEngine, SkillTree and MilestoneTracker.

    The rendering/input layer calls only the methods below; the components
    are exposed for read access and for the persistence gateway.
    """

    def __init__(
        self,
        *,
        bus: EventBus | None = None,
        catalog: Mapping[DiceType, DiceTypeConfig] | None = None,
        prestige_tuning: PrestigeTuning | None = None,
        upgrade_pricing: UpgradePricing | None = None,
        skill_nodes: Iterable[SkillNodeDef] | None = None,
        milestones: Iterable[MilestoneDef] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.bus = bus if bus is not None else EventBus()
        self._rng = rng if rng is not None else random.Random()
        self._lock = threading.RLock()

        self.ledger = Ledger(self.bus)
        self.modifiers = ModifierRegistry(self._rng)
        self.progression = ProgressionState(catalog, self.bus)
        self.prestige = PrestigeEngine(
            self.ledger, self.modifiers, self.progression, prestige_tuning, self.bus
        )
        self.skill_tree = SkillTree(self.ledger, self.modifiers, self.progression, skill_nodes)
        self.milestones = MilestoneTracker(self.ledger, milestones, self.bus)
        self.upgrade_pricing = upgrade_pricing if upgrade_pricing is not None else UpgradePricing()
        self._last_potential_reward = self.prestige.potential_reward()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> GameCore:
        """Build a core with tuning taken from Settings."""
        return cls(
            prestige_tuning=PrestigeTuning(
                base_requirement=settings.prestige_base_requirement,
                scaling_factor=settings.prestige_scaling_factor,
                dark_matter_per_prestige=settings.dark_matter_per_prestige,
                level_scaling=settings.prestige_level_scaling,
            ),
            upgrade_pricing=UpgradePricing(
                base_cost=settings.dice_value_upgrade_base_cost,
                cost_growth=settings.dice_value_upgrade_cost_growth,
            ),
            **kwargs,
        )

    # -- Locking ---------------------------------------------------------

    @property
    def lock(self) -> threading.RLock:
        """The mutation lock. Hold it to read a consistent view."""
        return self._lock

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Hold the mutation lock and defer events until the block completes.

        Queued events are delivered after the lock is released, so a slow
        subscriber never blocks other threads.
        """
        with self.bus.batch():
            with self._lock:
                yield
                self._after_mutation()

    # -- Currency --------------------------------------------------------

    def add_currency(self, kind: CurrencyKind, amount: float, *, incidental: bool = False) -> None:
        with self.transaction():
            self.ledger.add_currency(kind, amount, incidental=incidental)

    def try_spend(self, kind: CurrencyKind, amount: float) -> bool:
        with self.transaction():
            return self.ledger.try_spend(kind, amount)

    def can_afford(self, kind: CurrencyKind, amount: float) -> bool:
        with self._lock:
            return self.ledger.can_afford(kind, amount)

    def balance(self, kind: CurrencyKind) -> CurrencyBalance:
        with self._lock:
            return self.ledger.balance(kind)

    # -- Rolling ---------------------------------------------------------

    def roll(
        self,
        base_face_value: float,
        tier_multiplier: float = 1.0,
        is_manual: bool = True,
        is_idle: bool = False,
        *,
        dark_matter_bonus: float = 0.0,
    ) -> RollResult:
        """Credit the reward for one die showing ``base_face_value``.

        Money: (face + dice value upgrade level) * tier multiplier through the
        money pipeline, plus any Table Tax bonus. Dark Matter is earned only
        after the first ascension: face value plus ``dark_matter_bonus``,
        boosted for idle rolls under Idle King, through the Dark Matter
        pipeline.
        """
        face = validate_amount(base_face_value, "Face value")
        tier = validate_amount(tier_multiplier, "Tier multiplier")
        bonus_dm = validate_amount(dark_matter_bonus, "Dark matter bonus")

        with self.transaction():
            base_money = (face + self.progression.dice_value_upgrade_level) * tier
            money = self.modifiers.evaluate_money(base_money, is_manual, is_idle)
            table_tax = self.modifiers.check_table_tax(self.ledger.money)

            dark_matter = 0.0
            if self.prestige.has_ascended:
                base_dm = face + bonus_dm
                if is_idle and self.modifiers.get("idle_king_active"):
                    base_dm *= IDLE_KING_DARK_MATTER_FACTOR
                dark_matter = self.modifiers.apply_dark_matter_modifiers(base_dm)

            self.ledger.add_currency(CurrencyKind.MONEY, money.amount + table_tax)
            self.ledger.add_currency(CurrencyKind.DARK_MATTER, dark_matter)
            self.milestones.record_roll()

        return RollResult(
            money=money.amount,
            dark_matter=dark_matter,
            is_jackpot=money.is_jackpot,
            table_tax_bonus=table_tax,
        )

    def roll_dice(
        self,
        dice_type: DiceType,
        *,
        is_manual: bool = True,
        is_idle: bool = False,
        face_value: int | None = None,
    ) -> RollResult:
        """Roll one die of ``dice_type`` using its catalog payout.

        Args:
            dice_type: Tier of the die
            is_manual: Player-triggered roll
            is_idle: Helper-hand roll
            face_value: Optional pre-determined face (for testing)
        """
        config = self.progression.config_for(dice_type)
        if face_value is None:
            face_value = self._rng.randint(1, 6)
        return self.roll(
            face_value,
            config.base_payout,
            is_manual,
            is_idle,
            dark_matter_bonus=config.dm_per_roll,
        )

    # -- Shop ------------------------------------------------------------

    def current_price(self, dice_type: DiceType) -> float:
        with self._lock:
            return self.progression.current_price(dice_type)

    def try_buy_dice_type(self, dice_type: DiceType) -> bool:
        """Buy one die of an unlocked type at its current price."""
        with self.transaction():
            if not self.progression.is_dice_type_unlocked(dice_type):
                logger.debug("Purchase refused: %s is locked", dice_type.name)
                return False

            price = self.progression.current_price(dice_type)
            if not self.ledger.try_spend(CurrencyKind.MONEY, price):
                logger.debug("Purchase refused: %s costs %.2f", dice_type.name, price)
                return False

            count = self.progression.record_purchase(dice_type)
            self.bus.publish(
                CoreEvent.DICE_PURCHASED,
                dice_type=dice_type,
                owned_count=count,
                price=price,
            )
            return True

    def record_dice_removal(self, dice_type: DiceType) -> int:
        """An owned die was destroyed by gameplay."""
        with self.transaction():
            return self.progression.record_removal(dice_type)

    def dice_value_upgrade_price(self) -> float:
        with self._lock:
            return self.upgrade_pricing.price_for(self.progression.dice_value_upgrade_level)

    def try_buy_dice_value_upgrade(self) -> bool:
        """Spend money for +1 on every future roll's face value."""
        with self.transaction():
            price = self.upgrade_pricing.price_for(self.progression.dice_value_upgrade_level)
            if not self.ledger.try_spend(CurrencyKind.MONEY, price):
                return False
            self.progression.increment_dice_value_upgrade()
            return True

    def try_purchase_skill_node(self, node_id: str) -> bool:
        with self.transaction():
            return self.skill_tree.try_purchase(node_id)

    # -- Prestige --------------------------------------------------------

    def try_prestige(self) -> PrestigeResult:
        with self.transaction():
            return self.prestige.execute()

    def potential_prestige_reward(self) -> float:
        with self._lock:
            return self.prestige.potential_reward()

    # -- Whole-state operations -----------------------------------------

    def restore(
        self,
        *,
        balances: Mapping[CurrencyKind, CurrencyBalance],
        modifiers: Mapping[str, float | bool],
        unlocked_dice_types: Iterable[DiceType],
        owned_counts: Mapping[DiceType, int],
        unlocked_skill_nodes: Iterable[str],
        unlocked_active_skills: Iterable[ActiveSkillType],
        dice_value_upgrade_level: int,
        prestige: PrestigeRecord,
        claimed_milestones: Iterable[str] = (),
        total_rolls: int = 0,
    ) -> None:
        """Overwrite every component, base values first.

        Order: ledger and modifiers, then progression, then prestige and
        milestones. All or nothing: if any value is rejected the previous
        state is put back, no events are delivered and the error propagates.

        Raises:
            ValueError: If a saved value is invalid
        """
        with self.transaction():
            previous = self._checkpoint()
            try:
                self._restore_components(
                    balances=balances,
                    modifiers=modifiers,
                    unlocked_dice_types=unlocked_dice_types,
                    owned_counts=owned_counts,
                    unlocked_skill_nodes=unlocked_skill_nodes,
                    unlocked_active_skills=unlocked_active_skills,
                    dice_value_upgrade_level=dice_value_upgrade_level,
                    prestige=prestige,
                    claimed_milestones=claimed_milestones,
                    total_rolls=total_rolls,
                )
            except ValueError:
                self._restore_components(**previous)
                raise

    def reset_game(self) -> None:
        """Start a completely fresh game, lifetime totals included."""
        with self.transaction():
            self.ledger.set_all({})
            self.modifiers.reset_to_defaults()
            self.progression.reset()
            self.prestige.reset()
            self.milestones.reset()
        logger.info("Game reset to initial state")

    def _checkpoint(self) -> dict:
        progression = self.progression
        return {
            "balances": self.ledger.balances(),
            "modifiers": self.modifiers.as_dict(),
            "unlocked_dice_types": progression.unlocked_dice_types,
            "owned_counts": progression.owned_counts,
            "unlocked_skill_nodes": progression.unlocked_skill_nodes,
            "unlocked_active_skills": progression.unlocked_active_skills,
            "dice_value_upgrade_level": progression.dice_value_upgrade_level,
            "prestige": self.prestige.record(),
            "claimed_milestones": self.milestones.claimed,
            "total_rolls": self.milestones.total_rolls,
        }

    def _restore_components(
        self,
        *,
        balances,
        modifiers,
        unlocked_dice_types,
        owned_counts,
        unlocked_skill_nodes,
        unlocked_active_skills,
        dice_value_upgrade_level,
        prestige,
        claimed_milestones,
        total_rolls,
    ) -> None:
        self.ledger.set_all(balances)
        self.modifiers.load(modifiers)
        self.progression.restore(
            unlocked_dice_types=unlocked_dice_types,
            owned_counts=owned_counts,
            unlocked_skill_nodes=unlocked_skill_nodes,
            unlocked_active_skills=unlocked_active_skills,
            dice_value_upgrade_level=dice_value_upgrade_level,
        )
        self.prestige.restore(prestige)
        self.milestones.restore(claimed=claimed_milestones, total_rolls=total_rolls)

    def _after_mutation(self) -> None:
        self.milestones.check()
        amount = self.prestige.potential_reward()
        if amount != self._last_potential_reward:
            self._last_potential_reward = amount
            self.bus.publish(CoreEvent.POTENTIAL_PRESTIGE_REWARD_CHANGED, amount=amount)
