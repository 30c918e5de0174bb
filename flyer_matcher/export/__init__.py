"""
Result export package.

Official-name-only, detailed and unmatched tables as CSV or workbook.
"""

from .exporter import (
    DETAILED_COLUMNS,
    OFFICIAL_COLUMNS,
    UNMATCHED_COLUMNS,
    ResultExporter,
    collation_key,
    export_names,
    truncate,
)

__all__ = [
    'DETAILED_COLUMNS',
    'OFFICIAL_COLUMNS',
    'UNMATCHED_COLUMNS',
    'ResultExporter',
    'collation_key',
    'export_names',
    'truncate',
]
