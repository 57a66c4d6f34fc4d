"""
CSV Export

Flattens transactions into one line per transaction.
Quoting is standard CSV: a field containing the delimiter, a quote or a
newline is wrapped in quotes, with inner quotes doubled.
"""

import csv
import io
import time
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import structlog

from ledger.models.entities import Transaction, TransactionExportRecord


logger = structlog.get_logger(__name__)

EXPORT_COLUMNS = [
    "id",
    "date",
    "type",
    "amount",
    "purpose",
    "note",
    "account",
    "category",
    "payback_group_id",
]


def iso_timestamp(moment: datetime) -> str:
    """ISO-8601 to the second; aware datetimes are rendered in UTC with a Z."""
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    return moment.isoformat(timespec="seconds")


def to_export_record(tx: Transaction, account_name: Optional[str]) -> TransactionExportRecord:
    """Flatten one transaction. Unresolved references become empty strings."""
    return TransactionExportRecord(
        id=str(tx.id),
        date=iso_timestamp(tx.date),
        type=tx.type.value,
        amount=str(tx.amount),
        purpose=tx.purpose,
        note=tx.note,
        account=account_name or "",
        category=str(tx.category_id) if tx.category_id else "",
        payback_group_id=str(tx.payback_group_id) if tx.payback_group_id else "",
    )


def render_csv(records: Iterable[TransactionExportRecord]) -> str:
    """Header line plus one line per record, newline separated."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(EXPORT_COLUMNS)
    for record in records:
        writer.writerow(record.to_row())
    return buffer.getvalue().rstrip("\n")


def write_csv_file(
    records: Iterable[TransactionExportRecord],
    directory: Union[str, Path],
) -> Optional[Path]:
    """
    Write an export file named transactions_export_<unix-seconds>.csv.

    Returns the path, or None if the file could not be written.
    """
    target = Path(directory) / f"transactions_export_{int(time.time())}.csv"
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(render_csv(records), encoding="utf-8")
    except OSError as e:
        logger.error("csv_export_failed", path=str(target), error=str(e))
        return None
    logger.info("csv_exported", path=str(target))
    return target
