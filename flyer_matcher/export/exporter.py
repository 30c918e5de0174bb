"""
Result export for extraction runs.

Turns a ResultSet into tables and writes them as CSV (UTF-8 with BOM by
default, so spreadsheet software opens Japanese text correctly) or as a
formatted Excel workbook.

Tables:
    official    - one column ``official_name``: unique, collated
    detailed    - ``official_name, match_type, source_text, distance``
                  (+ ``page, extraction`` with provenance)
    unmatched   - ``source_text`` of lines that resolved to nothing
"""

import logging
import unicodedata
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from flyer_matcher.matching.match_result import MatchResult, MatchType, ResultSet

logger = logging.getLogger(__name__)

OFFICIAL_COLUMNS = ["official_name"]
DETAILED_COLUMNS = ["official_name", "match_type", "source_text", "distance"]
PROVENANCE_COLUMNS = ["page", "extraction"]
UNMATCHED_COLUMNS = ["source_text"]

ELLIPSIS = "…"

# ── Styling constants ─────────────────────────────────────────────────────────
HEADER_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)

GREEN_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
YELLOW_FILL = PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid")
RED_FILL = PatternFill(start_color="FFE5E5", end_color="FFE5E5", fill_type="solid")
GREY_FILL = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")

THIN_BORDER = Border(
    left=Side(style="thin", color="D9D9D9"),
    right=Side(style="thin", color="D9D9D9"),
    top=Side(style="thin", color="D9D9D9"),
    bottom=Side(style="thin", color="D9D9D9"),
)


def collation_key(name: str) -> Tuple[str, str]:
    """
    Sort key approximating Japanese collation.

    NFKC, case folding and katakana folded onto hiragana put kana names in
    syllabary order next to their script variants; the original string
    breaks ties so the order is total.
    """
    folded = unicodedata.normalize("NFKC", name).casefold()
    folded = "".join(
        chr(ord(ch) - 0x60) if 0x30A1 <= ord(ch) <= 0x30F6 else ch
        for ch in folded
    )
    return folded, name


def truncate(text: Optional[str], max_length: int) -> str:
    """Cap ``text`` at ``max_length`` characters, marking the cut with an ellipsis."""
    text = text or ""
    if max_length <= 0 or len(text) <= max_length:
        return text
    return text[:max_length] + ELLIPSIS


class ResultExporter:
    """
    Builds and writes the output tables of an extraction run.

    Args:
        source_cut: Maximum source_text length in the detailed table (0 = no cap)
        bom: Prefix CSV files with a UTF-8 byte-order mark
        include_unmatched: Append unmatched lines to the detailed table
        include_provenance: Add page / extraction columns to the detailed table
    """

    def __init__(self, source_cut: int = 120, bom: bool = True,
                 include_unmatched: bool = False, include_provenance: bool = False):
        if source_cut < 0:
            raise ValueError(f"source_cut must be non-negative, got {source_cut}")
        self.source_cut = source_cut
        self.bom = bom
        self.include_unmatched = include_unmatched
        self.include_provenance = include_provenance

    # ═══════════════════════════════════════════════════════════════════════
    #  Tables
    # ═══════════════════════════════════════════════════════════════════════

    def official_table(self, results: Union[ResultSet, Iterable[MatchResult]]) -> pd.DataFrame:
        """Unique official names sorted by ``collation_key``."""
        names = {r.official for r in results if r.is_resolved}
        ordered = sorted(names, key=collation_key)
        return pd.DataFrame({"official_name": ordered}, columns=OFFICIAL_COLUMNS)

    def detailed_table(self, results: ResultSet) -> pd.DataFrame:
        """One row per output record with match type and source text."""
        columns = list(DETAILED_COLUMNS)
        if self.include_provenance:
            columns += PROVENANCE_COLUMNS

        rows = []
        for record in results.rows(include_unmatched=self.include_unmatched):
            row = {
                "official_name": record.official or "",
                "match_type": record.match_type.value,
                "source_text": truncate(record.display, self.source_cut),
                "distance": "" if record.distance is None else record.distance,
            }
            if self.include_provenance:
                row["page"] = "" if record.page is None else record.page
                row["extraction"] = record.extraction or ""
            rows.append(row)

        counts = results.counts_by_type()
        logger.info(
            "Breakdown: exact %d / partial %d / fuzzy %d / unmatched %d",
            counts["exact"], counts["partial"], counts["fuzzy"], counts["unmatched"],
        )
        return pd.DataFrame(rows, columns=columns, dtype=object)

    def unmatched_table(self, results: ResultSet) -> pd.DataFrame:
        """Display text of every line that survived filtering but did not resolve."""
        texts = [r.display for r in results.unmatched if r.match_type is MatchType.UNMATCHED]
        return pd.DataFrame({"source_text": texts}, columns=UNMATCHED_COLUMNS)

    # ═══════════════════════════════════════════════════════════════════════
    #  Serialization
    # ═══════════════════════════════════════════════════════════════════════

    def to_csv_text(self, df: pd.DataFrame) -> str:
        """
        Render a table as CSV text (no BOM).

        Fields containing a comma, quote or line break are quoted with
        doubled internal quotes; rows end with CRLF.
        """
        return df.to_csv(index=False, lineterminator="\r\n")

    def write_csv(self, df: pd.DataFrame, path: Union[str, Path]) -> Path:
        """
        Write a table as CSV.

        Args:
            df: Table to write
            path: Output path (parent directories are created)

        Returns:
            Path written
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        encoding = "utf-8-sig" if self.bom else "utf-8"
        df.to_csv(path, index=False, encoding=encoding, lineterminator="\r\n")
        logger.info("Wrote %d rows to %s", len(df), path)
        return path

    def write_workbook(self, results: ResultSet, path: Union[str, Path]) -> Path:
        """
        Write official, detailed and unmatched tables as one Excel workbook.

        Args:
            results: Result set of the run
            path: Output .xlsx path

        Returns:
            Path written
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        sheets = [
            ("Official", self.official_table(results)),
            ("Detailed", self.detailed_table(results)),
            ("Unmatched", self.unmatched_table(results)),
        ]
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, df in sheets:
                df.to_excel(writer, sheet_name=sheet_name, index=False)
                ws = writer.sheets[sheet_name]
                _style_header(ws)
                if sheet_name == "Detailed" and not df.empty:
                    _color_match_rows(ws, df)
                _auto_width(ws, max_width=60)
                ws.freeze_panes = "A2"

        logger.info("Exported workbook to %s", path)
        return path


# ═══════════════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════════════

def _style_header(ws):
    for cell in ws[1]:
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = HEADER_ALIGN
        cell.border = THIN_BORDER


def _match_fill(match_type: str) -> PatternFill:
    if match_type == MatchType.EXACT.value:
        return GREEN_FILL
    elif match_type in (MatchType.PARTIAL.value, MatchType.FUZZY.value):
        return YELLOW_FILL
    elif match_type == MatchType.UNMATCHED.value:
        return RED_FILL
    return GREY_FILL


def _color_match_rows(ws, df: pd.DataFrame):
    """Row-level color coding by match type."""
    type_col = df.columns.get_loc("match_type") + 1
    for row_idx in range(2, len(df) + 2):
        fill = _match_fill(ws.cell(row=row_idx, column=type_col).value)
        for col_idx in range(1, len(df.columns) + 1):
            cell = ws.cell(row=row_idx, column=col_idx)
            cell.fill = fill
            cell.border = THIN_BORDER


def _auto_width(ws, max_width: int = 50):
    """Auto-adjust column widths based on content."""
    for column_cells in ws.columns:
        col_letter = get_column_letter(column_cells[0].column)
        max_len = max(len(str(cell.value or "")) for cell in column_cells)
        ws.column_dimensions[col_letter].width = min(max_len + 3, max_width)


def export_names(names: List[str], path: Union[str, Path], bom: bool = True) -> Path:
    """Write a bare official-name list (already resolved) as a one-column CSV."""
    exporter = ResultExporter(bom=bom)
    ordered = sorted(set(n for n in names if n), key=collation_key)
    return exporter.write_csv(pd.DataFrame({"official_name": ordered}), path)
