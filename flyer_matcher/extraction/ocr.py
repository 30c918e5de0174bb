"""
OCR fallback for flyer pages without a usable text layer.

Renders a PDF page with PyMuPDF and runs Tesseract OCR over the image.
Scanned flyers are mostly images; their text layer is empty or a few
stray characters, so the reader falls back to this module page by page.

Requires:
  - pytesseract (pip install pytesseract)
  - Tesseract OCR binary with the 'jpn' and 'eng' language data
  - Pillow, PyMuPDF
"""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import List, Optional

import fitz
import pytesseract
from PIL import Image

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tesseract configuration
# ---------------------------------------------------------------------------

# Common install locations on Windows
_TESSERACT_PATHS = [
    r"C:\Program Files\Tesseract-OCR\tesseract.exe",
    r"C:\Program Files (x86)\Tesseract-OCR\tesseract.exe",
]

DEFAULT_OCR_LANG = "jpn+eng"
DEFAULT_ZOOM = 2.0


def _configure_tesseract() -> bool:
    """Find and configure the Tesseract binary path. Returns True if found."""
    # Already configured or on PATH?
    try:
        pytesseract.get_tesseract_version()
        return True
    except (pytesseract.TesseractNotFoundError, OSError):
        pass

    # Check environment variable
    env_path = os.environ.get("TESSERACT_CMD")
    if env_path and Path(env_path).exists():
        pytesseract.pytesseract.tesseract_cmd = env_path
        return True

    # Scan common locations
    for p in _TESSERACT_PATHS:
        if Path(p).exists():
            pytesseract.pytesseract.tesseract_cmd = p
            return True

    logger.warning(
        "Tesseract OCR binary not found, OCR fallback disabled "
        "(set TESSERACT_CMD or install tesseract-ocr with jpn data)"
    )
    return False


_tesseract_available: Optional[bool] = None


def tesseract_available() -> bool:
    """Lazy one-time check for Tesseract availability."""
    global _tesseract_available
    if _tesseract_available is None:
        _tesseract_available = _configure_tesseract()
    return _tesseract_available


# ---------------------------------------------------------------------------
# Rendering + recognition
# ---------------------------------------------------------------------------

def render_page(page: "fitz.Page", zoom: float = DEFAULT_ZOOM) -> Image.Image:
    """Render a PDF page to a PIL image at ``zoom`` times 72 dpi."""
    pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
    img = Image.open(io.BytesIO(pix.tobytes("png")))
    img.load()
    return img


def ocr_image_to_lines(img: Image.Image, lang: str = DEFAULT_OCR_LANG) -> List[str]:
    """
    OCR an image and return its non-empty text lines.

    Args:
        img: Page image
        lang: Tesseract language string

    Returns:
        Stripped, non-empty lines in reading order
    """
    text = pytesseract.image_to_string(img, lang=lang)
    return [line.strip() for line in text.splitlines() if line.strip()]


def ocr_page_to_lines(page: "fitz.Page", lang: str = DEFAULT_OCR_LANG,
                      zoom: float = DEFAULT_ZOOM) -> List[str]:
    """
    Render and OCR one PDF page.

    Args:
        page: PyMuPDF page
        lang: Tesseract language string
        zoom: Render scale factor

    Returns:
        OCR text lines (empty when Tesseract is unavailable)
    """
    if not tesseract_available():
        return []
    img = render_page(page, zoom=zoom)
    return ocr_image_to_lines(img, lang=lang)
