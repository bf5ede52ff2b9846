"""
Incredicer - Autosave Scheduler

Background thread that saves on a fixed interval, plus the lifecycle hooks
(pause, quit) that force an immediate save.
"""

from __future__ import annotations

import logging
import threading

from src.persistence.errors import SaveError
from src.persistence.gateway import PersistenceGateway

logger = logging.getLogger(__name__)


class AutosaveScheduler:
    """Periodic saver. A failed save is retried on the next tick."""

    def __init__(self, gateway: PersistenceGateway, interval: float = 60.0) -> None:
        if interval <= 0:
            raise ValueError(f"Autosave interval must be positive, got {interval}")
        self._gateway = gateway
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the autosave thread. No-op if already running."""
        if self.running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop,
            daemon=True,
            name="incredicer-autosave",
        )
        self._thread.start()
        logger.info("Autosave started (every %.0fs)", self._interval)

    def stop(self, *, final_save: bool = True) -> None:
        """Stop the thread, then optionally save once more (quit hook)."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self._interval + 5.0)
            self._thread = None
            logger.info("Autosave stopped")
        if final_save:
            self.save_now()

    def save_now(self) -> bool:
        """Save immediately (pause/quit hook).

        Returns:
            True if the save succeeded
        """
        try:
            self._gateway.save()
        except SaveError:
            logger.warning("Save failed; will retry on next autosave")
            return False
        return True

    def _loop(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self.save_now()
            except Exception:
                logger.exception("Unexpected error during autosave")
