"""
Incredicer - Ledger

Current and lifetime balances for every currency. The ledger knows nothing
about how amounts are earned; it only guarantees that balances stay
non-negative and that lifetime totals never decrease.

Not thread-safe on its own: GameCore serializes every call.
"""

from typing import Iterable, Mapping

from src.engine.base import CurrencyBalance, CurrencyKind
from src.engine.validators import validate_amount, validate_balance
from src.events import CoreEvent, EventBus

_CHANGED_EVENTS: dict[CurrencyKind, CoreEvent] = {
    CurrencyKind.MONEY: CoreEvent.MONEY_CHANGED,
    CurrencyKind.DARK_MATTER: CoreEvent.DARK_MATTER_CHANGED,
    CurrencyKind.TIME_SHARDS: CoreEvent.TIME_SHARDS_CHANGED,
}

_LIFETIME_EVENTS: dict[CurrencyKind, CoreEvent] = {
    CurrencyKind.MONEY: CoreEvent.LIFETIME_MONEY_CHANGED,
    CurrencyKind.DARK_MATTER: CoreEvent.LIFETIME_DARK_MATTER_CHANGED,
    CurrencyKind.TIME_SHARDS: CoreEvent.LIFETIME_TIME_SHARDS_CHANGED,
}


class Ledger:
    """Owns spendable and lifetime balances for Money, Dark Matter and Time Shards."""

    def __init__(self, bus: EventBus | None = None) -> None:
        self._bus = bus if bus is not None else EventBus()
        self._current: dict[CurrencyKind, float] = {kind: 0.0 for kind in CurrencyKind}
        self._lifetime: dict[CurrencyKind, float] = {kind: 0.0 for kind in CurrencyKind}

    # -- Reads -----------------------------------------------------------

    def current(self, kind: CurrencyKind) -> float:
        return self._current[kind]

    def lifetime(self, kind: CurrencyKind) -> float:
        return self._lifetime[kind]

    def balance(self, kind: CurrencyKind) -> CurrencyBalance:
        return CurrencyBalance(current=self._current[kind], lifetime=self._lifetime[kind])

    def balances(self) -> dict[CurrencyKind, CurrencyBalance]:
        """Snapshot of every balance."""
        return {kind: self.balance(kind) for kind in CurrencyKind}

    @property
    def money(self) -> float:
        return self._current[CurrencyKind.MONEY]

    @property
    def lifetime_money(self) -> float:
        return self._lifetime[CurrencyKind.MONEY]

    @property
    def dark_matter(self) -> float:
        return self._current[CurrencyKind.DARK_MATTER]

    def can_afford(self, kind: CurrencyKind, amount: float) -> bool:
        """True if the current balance covers ``amount``."""
        return self._current[kind] >= amount

    # -- Mutations -------------------------------------------------------

    def add_currency(self, kind: CurrencyKind, amount: float, *, incidental: bool = False) -> None:
        """Credit ``amount`` to ``kind``.

        Non-positive amounts are ignored. Incidental credits (refunds,
        transfers) raise the current balance without counting toward the
        lifetime total.
        """
        amount = validate_amount(amount)
        if amount <= 0:
            return

        self._current[kind] += amount
        self._emit_current(kind)

        if not incidental:
            self._lifetime[kind] += amount
            self._emit_lifetime(kind)

    def try_spend(self, kind: CurrencyKind, amount: float) -> bool:
        """Deduct ``amount`` if affordable.

        Returns:
            True if spent (or amount <= 0), False on insufficient funds
        """
        amount = validate_amount(amount)
        if amount <= 0:
            return True
        if amount > self._current[kind]:
            return False

        self._current[kind] = max(0.0, self._current[kind] - amount)
        self._emit_current(kind)
        return True

    def set_all(self, values: Mapping[CurrencyKind, CurrencyBalance]) -> None:
        """Overwrite every balance; kinds missing from ``values`` become zero.

        Used when loading a save or starting a fresh game. Emits every
        changed event so subscribers resynchronize.
        """
        incoming = {kind: values.get(kind, CurrencyBalance()) for kind in CurrencyKind}
        for kind, balance in incoming.items():
            validate_balance(balance.current, f"{kind.value} current")
            validate_balance(balance.lifetime, f"{kind.value} lifetime")

        for kind, balance in incoming.items():
            self._current[kind] = float(balance.current)
            self._lifetime[kind] = float(balance.lifetime)

        for kind in CurrencyKind:
            self._emit_current(kind)
            self._emit_lifetime(kind)

    def reset_keeping_some(self, keep_kinds: Iterable[CurrencyKind]) -> None:
        """Zero the current balance of every kind not in ``keep_kinds``.

        Lifetime totals are never touched.
        """
        keep = frozenset(keep_kinds)
        for kind in CurrencyKind:
            if kind in keep or self._current[kind] == 0.0:
                continue
            self._current[kind] = 0.0
            self._emit_current(kind)

    # -- Events ----------------------------------------------------------

    def _emit_current(self, kind: CurrencyKind) -> None:
        self._bus.publish(_CHANGED_EVENTS[kind], current=self._current[kind])

    def _emit_lifetime(self, kind: CurrencyKind) -> None:
        self._bus.publish(_LIFETIME_EVENTS[kind], lifetime=self._lifetime[kind])
