"""
Change Logger

Every ledger mutation is logged as a structured line.
This provides:
1. Debugging capability
2. A readable trace of what the UI asked the ledger to do

The change logger:
- Only writes to the local log (no persisted history)
- Never raises into the engine
"""

import logging
import sys

import structlog

from ledger.events.bus import LedgerEventBus
from ledger.models.events import LedgerEvent, LedgerEventType


_configured = False


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Safe to call more than once; only the level is updated afterwards.
    """
    global _configured

    root = logging.getLogger()
    root.setLevel(level)

    if _configured:
        return

    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


class ChangeLogger:
    """
    Observer that logs every LedgerEvent.

    Deletions are logged at warning level since they cascade.
    """

    _WARNING_EVENTS = {
        LedgerEventType.ACCOUNT_DELETED,
        LedgerEventType.CATEGORY_DELETED,
    }

    def __init__(self, bus: LedgerEventBus):
        self._logger = structlog.get_logger("ledger.changes")
        self._unsubscribe = bus.subscribe(self.log)

    def log(self, event: LedgerEvent) -> None:
        log_dict = event.to_log_dict()

        if event.event_type in self._WARNING_EVENTS:
            self._logger.warning("ledger_change", **log_dict)
        elif event.details.get("recovered_from_error"):
            self._logger.error("ledger_change", **log_dict)
        else:
            self._logger.info("ledger_change", **log_dict)

    def detach(self) -> None:
        self._unsubscribe()
