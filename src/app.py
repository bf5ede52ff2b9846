"""
Incredicer - Application Bootstrap

Wires settings, the game core, the save store and autosave together.
The save is loaded synchronously before anything else can mutate state.

Run headless with: python -m src.app
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from src.config import Settings, configure_logging, get_settings
from src.engine import CurrencyKind, GameCore
from src.persistence import (
    AutosaveScheduler,
    FileSaveStore,
    PersistenceGateway,
    SaveStore,
    SupabaseSaveStore,
)
from src.persistence.client import get_supabase_client

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Everything a front end needs to drive one game."""
    settings: Settings
    core: GameCore
    gateway: PersistenceGateway
    autosave: AutosaveScheduler
    loaded_from_save: bool = False

    def pause(self) -> bool:
        """Lifecycle hook: save immediately."""
        return self.autosave.save_now()

    def shutdown(self) -> None:
        """Lifecycle hook: stop autosave and write a final save."""
        self.autosave.stop(final_save=True)


def build_store(settings: Settings) -> SaveStore:
    """Save store for the configured backend."""
    if settings.save_backend == "supabase":
        return SupabaseSaveStore(get_supabase_client(settings), settings.player_id)
    return FileSaveStore(settings.save_path)


def bootstrap(
    settings: Settings | None = None,
    *,
    store: SaveStore | None = None,
    core: GameCore | None = None,
) -> GameSession:
    """Build a ready-to-play session.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        store: Save store override (defaults to ``build_store(settings)``)
        core: Pre-built core override (defaults to ``GameCore.from_settings``)
    """
    settings = settings if settings is not None else get_settings()
    core = core if core is not None else GameCore.from_settings(settings)
    gateway = PersistenceGateway(core, store if store is not None else build_store(settings))

    loaded = gateway.load_and_apply()

    autosave = AutosaveScheduler(gateway, settings.autosave_interval)
    if settings.autosave_enabled:
        autosave.start()

    return GameSession(
        settings=settings,
        core=core,
        gateway=gateway,
        autosave=autosave,
        loaded_from_save=loaded,
    )


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    session = bootstrap(settings)

    money = session.core.balance(CurrencyKind.MONEY)
    logger.info(
        "Incredicer ready: %.2f money (%.2f lifetime), prestige level %d",
        money.current,
        money.lifetime,
        session.core.prestige.level,
    )

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        session.shutdown()


if __name__ == "__main__":
    main()
