"""
Ledger Event Bus

A plain publish-on-change callback list. The engine publishes one
LedgerEvent per successful mutation; observers subscribe to all events.
"""

from typing import Callable

import structlog

from ledger.models.events import LedgerEvent


logger = structlog.get_logger(__name__)

LedgerObserver = Callable[[LedgerEvent], None]


class LedgerEventBus:
    """Synchronous observer list."""

    def __init__(self):
        self._subscribers: list[LedgerObserver] = []

    def subscribe(self, handler: LedgerObserver) -> Callable[[], None]:
        """
        Register an observer.

        Returns a callable that unsubscribes it again.
        """
        if handler not in self._subscribers:
            self._subscribers.append(handler)
        return lambda: self.unsubscribe(handler)

    def unsubscribe(self, handler: LedgerObserver) -> None:
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    def publish(self, event: LedgerEvent) -> None:
        """
        Deliver an event to every observer in subscription order.

        An observer that raises is logged and skipped; the mutation
        that produced the event has already happened.
        """
        for handler in list(self._subscribers):
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    "observer_failed",
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    event_type=event.event_type.value,
                    error=str(e),
                )

    def __len__(self) -> int:
        return len(self._subscribers)
