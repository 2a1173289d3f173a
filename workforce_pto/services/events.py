"""Balance-change notifications.

Ledger and employee mutations publish a ``BalanceChanged`` after they
commit. Callers that cache balances subscribe to invalidate them.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from workforce_pto.models.enums import LeaveType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceChanged:
    company_id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: LeaveType | None  # None when every leave type may be affected
    reason: str


BalanceListener = Callable[[BalanceChanged], None]


class BalanceEventBus:
    """Explicit subscription point for balance invalidation."""

    def __init__(self) -> None:
        self._listeners: list[BalanceListener] = []

    def subscribe(self, listener: BalanceListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, event: BalanceChanged) -> None:
        """Deliver ``event`` to every listener.

        Runs after the mutation has committed, so a failing listener is
        logged and the remaining listeners still run.
        """
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Balance listener %r failed for %s", listener, event)


_balance_events = BalanceEventBus()


def get_balance_events() -> BalanceEventBus:
    """FastAPI dependency for the balance event bus."""
    return _balance_events


def set_balance_events(bus: BalanceEventBus) -> None:
    """Override the bus (for testing or production wiring)."""
    global _balance_events
    _balance_events = bus
