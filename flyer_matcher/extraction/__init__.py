"""
Flyer line extraction module.

Provides the line sources consumed by the matching core (PDF text layer
with OCR fallback, in-memory lists, text dumps), master list loading, and
the noise filter that separates candidate names from flyer boilerplate.

The PDF and OCR readers are imported on first attribute access, so the
matching core can use ``filters`` without loading PyMuPDF or Tesseract.

Usage:
    from flyer_matcher.extraction import PdfLineReader, load_master_index

    index = load_master_index("master.csv")
    lines = PdfLineReader("flyer.pdf").provide_lines()
"""

import importlib
from typing import TYPE_CHECKING, Protocol, Sequence, Union

from .filters import DEFAULT_NG_WORDS, NoiseFilter

if TYPE_CHECKING:
    from .pdf_reader import RawLine

# attribute -> submodule, resolved lazily
_LAZY_ATTRS = {
    'load_master_index': 'master_file',
    'read_master_rows': 'master_file',
    'ExtractionMethod': 'pdf_reader',
    'PdfLineReader': 'pdf_reader',
    'RawLine': 'pdf_reader',
    'StaticLineProvider': 'pdf_reader',
    'load_text_lines': 'pdf_reader',
    'read_pdf_lines': 'pdf_reader',
}


def __getattr__(name):
    module_name = _LAZY_ATTRS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = importlib.import_module(f"{__name__}.{module_name}")
    return getattr(module, name)


class LineProvider(Protocol):
    """Anything that can hand the matching core a flat line sequence."""

    def provide_lines(self) -> Sequence[Union[str, 'RawLine']]:
        ...


__all__ = [
    'DEFAULT_NG_WORDS',
    'ExtractionMethod',
    'LineProvider',
    'NoiseFilter',
    'PdfLineReader',
    'RawLine',
    'StaticLineProvider',
    'load_master_index',
    'load_text_lines',
    'read_master_rows',
    'read_pdf_lines',
]
