"""Change notification and logging package."""

from ledger.events.bus import LedgerEventBus, LedgerObserver
from ledger.events.logger import ChangeLogger, configure_logging

__all__ = ["ChangeLogger", "LedgerEventBus", "LedgerObserver", "configure_logging"]
