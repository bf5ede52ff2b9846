"""
Incredicer - Test Configuration and Fixtures

Common fixtures and helpers for all test modules.
"""

import random
from datetime import datetime, timezone

import pytest

from src.engine.core import GameCore
from src.engine.ledger import Ledger
from src.engine.modifiers import ModifierRegistry
from src.engine.prestige import PrestigeEngine
from src.engine.progression import ProgressionState
from src.events import CoreEvent, EventBus, EventPayload
from src.persistence.gateway import PersistenceGateway
from src.persistence.stores import FileSaveStore

FIXED_TIME = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class EventRecorder:
    """Subscriber that keeps every payload it receives."""

    def __init__(self) -> None:
        self.payloads: list[EventPayload] = []

    def __call__(self, payload: EventPayload) -> None:
        self.payloads.append(payload)

    @property
    def events(self) -> list[CoreEvent]:
        return [p.event for p in self.payloads]

    def of(self, event: CoreEvent) -> list[EventPayload]:
        return [p for p in self.payloads if p.event is event]

    def clear(self) -> None:
        self.payloads.clear()


# =============================================================================
# EVENTS
# =============================================================================

@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(bus: EventBus) -> EventRecorder:
    """Recorder subscribed to every event on ``bus``."""
    rec = EventRecorder()
    bus.subscribe(rec)
    return rec


# =============================================================================
# ENGINE COMPONENTS
# =============================================================================

@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def ledger(bus: EventBus) -> Ledger:
    return Ledger(bus)


@pytest.fixture
def modifiers(rng: random.Random) -> ModifierRegistry:
    return ModifierRegistry(rng)


@pytest.fixture
def progression(bus: EventBus) -> ProgressionState:
    return ProgressionState(bus=bus)


@pytest.fixture
def prestige(ledger, modifiers, progression, bus) -> PrestigeEngine:
    return PrestigeEngine(ledger, modifiers, progression, bus=bus)


@pytest.fixture
def core(rng: random.Random) -> GameCore:
    return GameCore(rng=rng)


@pytest.fixture
def core_recorder(core: GameCore) -> EventRecorder:
    """Recorder subscribed to every event on the core's bus."""
    rec = EventRecorder()
    core.bus.subscribe(rec)
    return rec


# =============================================================================
# PERSISTENCE
# =============================================================================

@pytest.fixture
def save_path(tmp_path):
    return tmp_path / "saves" / "incredicer_save.json"


@pytest.fixture
def file_store(save_path) -> FileSaveStore:
    return FileSaveStore(save_path)


@pytest.fixture
def gateway(core: GameCore, file_store: FileSaveStore) -> PersistenceGateway:
    return PersistenceGateway(core, file_store, clock=lambda: FIXED_TIME)
