"""I/O utilities for spreadsheets and run reports."""

from src.io.reports import write_json_atomic
from src.io.spreadsheet import (
    build_export_rows,
    export_rows,
    read_spreadsheet_rows,
    rows_to_scholar_records,
)

__all__ = [
    "build_export_rows",
    "export_rows",
    "read_spreadsheet_rows",
    "rows_to_scholar_records",
    "write_json_atomic",
]
