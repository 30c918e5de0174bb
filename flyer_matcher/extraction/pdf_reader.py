"""
PDF line extraction for parlor flyers.

Reads the text layer of every page with PyMuPDF. When a page yields fewer
than ``min_page_chars`` non-whitespace characters, the page is rendered
and OCRed instead. Each line carries its page number and extraction
method so the detailed export can show where a name came from; the
matching core never looks at either.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Union

import fitz
from tqdm import tqdm

from flyer_matcher.extraction import ocr

logger = logging.getLogger(__name__)


class ExtractionMethod(Enum):
    """How a line was obtained from the PDF."""
    TEXT_LAYER = "text"
    OCR = "ocr"


@dataclass(frozen=True)
class RawLine:
    """
    One extracted line with provenance.

    Attributes:
        text: Line text as extracted
        page: Page number (1-based)
        method: Text layer or OCR
    """
    text: str
    page: int
    method: ExtractionMethod = ExtractionMethod.TEXT_LAYER

    def __str__(self) -> str:
        return self.text


def _split_lines(text: str) -> List[str]:
    """Non-empty stripped lines of a page text."""
    return [line.strip() for line in (text or '').splitlines() if line.strip()]


def _visible_chars(lines: Sequence[str]) -> int:
    """Count non-whitespace characters."""
    return sum(len(''.join(line.split())) for line in lines)


class PdfLineReader:
    """
    Line provider backed by a PDF file.

    Pages are processed sequentially. A page that fails to render or OCR
    contributes no lines; the rest of the document is still read.
    """

    def __init__(self,
                 pdf_path: Union[str, Path],
                 ocr_fallback: bool = True,
                 min_page_chars: int = 20,
                 ocr_lang: str = ocr.DEFAULT_OCR_LANG,
                 ocr_zoom: float = ocr.DEFAULT_ZOOM,
                 show_progress: bool = False):
        """
        Initialize the reader.

        Args:
            pdf_path: Path to the PDF file
            ocr_fallback: OCR pages whose text layer is too thin
            min_page_chars: Non-whitespace characters below which a page is OCRed
            ocr_lang: Tesseract language string
            ocr_zoom: Render scale factor for OCR
            show_progress: Display a tqdm progress bar over pages
        """
        self.pdf_path = Path(pdf_path)
        self.ocr_fallback = ocr_fallback
        self.min_page_chars = min_page_chars
        self.ocr_lang = ocr_lang
        self.ocr_zoom = ocr_zoom
        self.show_progress = show_progress

    def provide_lines(self) -> List[RawLine]:
        """Lines of the whole document (LineProvider interface)."""
        return self.read_lines()

    def read_lines(self) -> List[RawLine]:
        """
        Extract lines from every page.

        Returns:
            RawLine objects in page order

        Raises:
            FileNotFoundError: If the PDF does not exist
        """
        if not self.pdf_path.exists():
            raise FileNotFoundError(f"PDF not found: {self.pdf_path}")

        lines: List[RawLine] = []
        ocr_pages = 0

        with fitz.open(str(self.pdf_path)) as doc:
            pages = tqdm(
                enumerate(doc, start=1),
                total=doc.page_count,
                desc=self.pdf_path.name,
                unit="page",
                disable=not self.show_progress,
            )
            for page_num, page in pages:
                page_lines = self._read_page(page, page_num)
                if page_lines and page_lines[0].method is ExtractionMethod.OCR:
                    ocr_pages += 1
                lines.extend(page_lines)

            logger.info(
                "Read %d lines from %s (%d pages, %d via OCR)",
                len(lines), self.pdf_path.name, doc.page_count, ocr_pages,
            )
        return lines

    def _read_page(self, page: "fitz.Page", page_num: int) -> List[RawLine]:
        """Extract one page, falling back to OCR when its text is too thin."""
        try:
            text_lines = _split_lines(page.get_text("text"))
        except (RuntimeError, ValueError) as e:
            logger.warning("Page %d: text extraction failed: %s", page_num, e)
            text_lines = []

        if not self.ocr_fallback or _visible_chars(text_lines) >= self.min_page_chars:
            return [RawLine(t, page_num, ExtractionMethod.TEXT_LAYER) for t in text_lines]

        logger.info("Page %d: weak text layer (%d chars) -> OCR",
                    page_num, _visible_chars(text_lines))
        try:
            ocr_lines = ocr.ocr_page_to_lines(page, lang=self.ocr_lang, zoom=self.ocr_zoom)
        except Exception as e:
            logger.warning("Page %d: OCR failed: %s", page_num, e)
            ocr_lines = []

        if not ocr_lines:
            return [RawLine(t, page_num, ExtractionMethod.TEXT_LAYER) for t in text_lines]
        return [RawLine(t, page_num, ExtractionMethod.OCR) for t in ocr_lines]


class StaticLineProvider:
    """Line provider over an in-memory sequence (tests, text dumps)."""

    def __init__(self, lines: Sequence[Union[str, RawLine]]):
        self._lines = list(lines)

    def provide_lines(self) -> List[Union[str, RawLine]]:
        return list(self._lines)


def read_pdf_lines(pdf_path: Union[str, Path], ocr_fallback: bool = True,
                   min_page_chars: int = 20) -> List[RawLine]:
    """Convenience wrapper around PdfLineReader.read_lines()."""
    return PdfLineReader(pdf_path, ocr_fallback=ocr_fallback,
                         min_page_chars=min_page_chars).read_lines()


def load_text_lines(path: Union[str, Path], encoding: Optional[str] = 'utf-8-sig') -> List[str]:
    """
    Read a plain-text line dump (one candidate per line).

    Args:
        path: Text file path
        encoding: File encoding

    Returns:
        Non-empty stripped lines
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Line file not found: {path}")
    return _split_lines(path.read_text(encoding=encoding))
