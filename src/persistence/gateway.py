"""
Incredicer - Persistence Gateway

Snapshots core state, writes it to a SaveStore and restores it on startup.

Capture runs under the core lock so a snapshot never mixes two operations;
the write itself runs outside it so gameplay is never blocked on I/O.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable

from src.engine.base import CurrencyBalance, CurrencyKind, PrestigeRecord
from src.engine.core import GameCore
from src.events import CoreEvent
from src.persistence.codec import decode_snapshot, encode_snapshot
from src.persistence.errors import (
    CorruptSaveError,
    SaveError,
    SaveVersionError,
    SaveWriteError,
)
from src.persistence.models import SAVE_VERSION, BalanceModel, PrestigeModel, SaveSnapshot
from src.persistence.stores import SaveStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PersistenceGateway:
    """Moves GameCore state to and from a SaveStore."""

    def __init__(
        self,
        core: GameCore,
        store: SaveStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.core = core
        self.store = store
        self._clock = clock
        self._io_lock = threading.Lock()

    # -- Save ------------------------------------------------------------

    def capture(self) -> SaveSnapshot:
        """Consistent copy of every persisted field."""
        core = self.core
        with core.lock:
            balances = core.ledger.balances()
            record = core.prestige.record()
            progression = core.progression
            return SaveSnapshot(
                save_version=SAVE_VERSION,
                timestamp=self._clock(),
                money=_balance_model(balances[CurrencyKind.MONEY]),
                dark_matter=_balance_model(balances[CurrencyKind.DARK_MATTER]),
                time_shards=_balance_model(balances[CurrencyKind.TIME_SHARDS]),
                modifiers=core.modifiers.as_dict(),
                unlocked_dice_types=sorted(progression.unlocked_dice_types, key=lambda d: d.value),
                owned_counts=progression.owned_counts,
                unlocked_skill_nodes=sorted(progression.unlocked_skill_nodes),
                unlocked_active_skills=sorted(
                    progression.unlocked_active_skills, key=lambda s: s.value
                ),
                dice_value_upgrade_level=progression.dice_value_upgrade_level,
                prestige=PrestigeModel(
                    level=record.level,
                    total_dark_matter_earned=record.total_dark_matter_earned,
                    has_ascended=record.has_ascended,
                ),
                claimed_milestones=sorted(core.milestones.claimed),
                total_rolls=core.milestones.total_rolls,
            )

    def persist(self, snapshot: SaveSnapshot) -> None:
        """Write a snapshot to the store.

        Raises:
            SaveWriteError: If the snapshot could not be encoded or written.
                In-memory state is untouched.
        """
        try:
            document = encode_snapshot(snapshot)
        except (TypeError, ValueError) as exc:
            logger.error("Could not encode save snapshot: %s", exc)
            raise SaveWriteError(f"Could not encode save snapshot: {exc}") from exc

        with self._io_lock:
            try:
                self.store.write(document)
            except SaveWriteError:
                logger.exception("Save failed; game state kept in memory")
                raise

        logger.debug("Game saved at %s", snapshot.timestamp.isoformat())
        self.core.bus.publish(CoreEvent.GAME_SAVED, timestamp=snapshot.timestamp)

    def save(self) -> SaveSnapshot:
        """Capture and persist in one step."""
        snapshot = self.capture()
        self.persist(snapshot)
        return snapshot

    # -- Load ------------------------------------------------------------

    def load_latest(self) -> SaveSnapshot | None:
        """Most recent stored snapshot, migrated to the current version.

        Returns:
            None when no save exists

        Raises:
            CorruptSaveError: If stored data cannot be decoded
            SaveVersionError: If stored data is newer than this build
        """
        with self._io_lock:
            document = self.store.read()
        if document is None:
            return None
        return decode_snapshot(document)

    def apply(self, snapshot: SaveSnapshot) -> None:
        """Overwrite core state from a snapshot.

        Raises:
            ValueError: If the core rejects a value; its state is unchanged
        """
        self.core.restore(
            balances={
                CurrencyKind.MONEY: _currency_balance(snapshot.money),
                CurrencyKind.DARK_MATTER: _currency_balance(snapshot.dark_matter),
                CurrencyKind.TIME_SHARDS: _currency_balance(snapshot.time_shards),
            },
            modifiers=snapshot.modifiers,
            unlocked_dice_types=snapshot.unlocked_dice_types,
            owned_counts=snapshot.owned_counts,
            unlocked_skill_nodes=snapshot.unlocked_skill_nodes,
            unlocked_active_skills=snapshot.unlocked_active_skills,
            dice_value_upgrade_level=snapshot.dice_value_upgrade_level,
            prestige=PrestigeRecord(
                level=snapshot.prestige.level,
                total_dark_matter_earned=snapshot.prestige.total_dark_matter_earned,
                has_ascended=snapshot.prestige.has_ascended,
            ),
            claimed_milestones=snapshot.claimed_milestones,
            total_rolls=snapshot.total_rolls,
        )
        self.core.bus.publish(
            CoreEvent.GAME_LOADED,
            save_version=snapshot.save_version,
            timestamp=snapshot.timestamp,
        )

    def load_and_apply(self) -> bool:
        """Startup load. Never raises for bad stored data.

        Corrupt or too-new saves are logged and moved aside so autosave
        cannot overwrite them; the game then starts fresh.

        Returns:
            True if a save was applied, False on a fresh start
        """
        try:
            snapshot = self.load_latest()
        except SaveVersionError as exc:
            logger.error("%s Starting a fresh game.", exc)
            self._quarantine("unsupported")
            return False
        except CorruptSaveError as exc:
            logger.error("Save data is corrupt (%s). Starting a fresh game.", exc)
            self._quarantine("corrupt")
            return False
        except SaveError:
            logger.exception("Save could not be read. Starting a fresh game.")
            return False

        if snapshot is None:
            logger.info("No save found. Starting a fresh game.")
            return False

        try:
            self.apply(snapshot)
        except ValueError as exc:
            logger.error("Save data was rejected (%s). Starting a fresh game.", exc)
            self._quarantine("corrupt")
            return False

        logger.info("Loaded save from %s", snapshot.timestamp.isoformat())
        return True

    def delete_save(self) -> None:
        """Remove the stored save and reset the core to a new game."""
        with self._io_lock:
            self.store.delete()
        self.core.reset_game()
        logger.info("Save deleted")

    def _quarantine(self, reason: str) -> None:
        try:
            with self._io_lock:
                self.store.quarantine(reason)
        except SaveError:
            logger.exception("Could not move unreadable save aside")


def _balance_model(balance: CurrencyBalance) -> BalanceModel:
    return BalanceModel(current=balance.current, lifetime=balance.lifetime)


def _currency_balance(model: BalanceModel) -> CurrencyBalance:
    return CurrencyBalance(current=model.current, lifetime=model.lifetime)
