"""
Master list file loading.

Reads the official-name master from CSV / text or Excel files into row
lists for ``MasterIndex.load``. Column 1 holds the official name; any
further columns hold aliases.
"""

import csv
import logging
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from flyer_matcher.matching.master_index import MasterIndex
from flyer_matcher.normalization.text_normalizer import NameNormalizer

logger = logging.getLogger(__name__)

CSV_SUFFIXES = ('.csv', '.txt', '.tsv')
EXCEL_SUFFIXES = ('.xlsx', '.xlsm', '.xls')


def read_master_rows(path: Union[str, Path], sheet: Union[int, str] = 0,
                     encoding: str = 'utf-8-sig') -> List[List[str]]:
    """
    Read master rows from a CSV / TSV / text or Excel file.

    CSV rows may be ragged (an official name with or without alias
    columns). A leading byte-order mark is dropped.

    Args:
        path: Master file path
        sheet: Sheet name or index for Excel files
        encoding: Text encoding for CSV files

    Returns:
        List of rows (lists of cell strings)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file type is not supported
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Master file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        delimiter = '\t' if suffix == '.tsv' else ','
        with open(path, 'r', encoding=encoding, newline='') as f:
            rows = [row for row in csv.reader(f, delimiter=delimiter)]
    elif suffix in EXCEL_SUFFIXES:
        df = pd.read_excel(path, sheet_name=sheet, header=None, dtype=str)
        rows = [
            ['' if pd.isna(cell) else str(cell) for cell in row]
            for row in df.itertuples(index=False, name=None)
        ]
    else:
        raise ValueError(f"Unsupported master file type '{suffix}': {path.name}")

    logger.info("Read %d master rows from %s", len(rows), path.name)
    return rows


def load_master_index(path: Union[str, Path], sheet: Union[int, str] = 0,
                      normalizer: Optional[NameNormalizer] = None) -> MasterIndex:
    """
    Read a master file and build its index.

    Args:
        path: Master file path
        sheet: Sheet name or index for Excel files
        normalizer: NameNormalizer instance (creates new if None)

    Returns:
        Loaded MasterIndex
    """
    rows = read_master_rows(path, sheet=sheet)
    return MasterIndex.from_rows(rows, normalizer=normalizer)
