"""Export package."""

from ledger.export.csv_export import (
    EXPORT_COLUMNS,
    iso_timestamp,
    render_csv,
    to_export_record,
    write_csv_file,
)

__all__ = [
    "EXPORT_COLUMNS",
    "iso_timestamp",
    "render_csv",
    "to_export_record",
    "write_csv_file",
]
