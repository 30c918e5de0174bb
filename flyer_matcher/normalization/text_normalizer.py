"""
Text normalization module for machine names.

Produces two representations for every string read from a flyer or a
master list:

- a *display* form: readable, punctuation-free, spacing preserved
- a *loose key*: the comparison form used by every matching tier
  (lower-cased, katakana folded to hiragana, half-width folded, no
  whitespace, only hiragana / kanji / latin / digits / hyphen kept)
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import Optional

# Versioned normalization: increment when rules change, regenerate stored keys
NORMALIZATION_VERSION = 2


@dataclass(frozen=True)
class NormalizedForm:
    """
    Normalized representations of one input string.

    Attributes:
        display: Human-readable canonical form
        loose_key: Comparison key (empty string means "not comparable")
    """
    display: str
    loose_key: str

    @property
    def is_comparable(self) -> bool:
        """True if the loose key can take part in matching."""
        return bool(self.loose_key)


class NameNormalizer:
    """
    Normalizes machine names to a display form and a loose key.

    Handles:
    - Unicode normalization (NFKC)
    - Full-width to half-width folding
    - Katakana to hiragana folding
    - Dash / prolonged sound mark unification
    - Bracket, decorative symbol and zero-width character stripping
    - Whitespace collapse and case folding

    Every stage is a pure function, so both outputs are deterministic and
    applying ``make_loose_key`` to its own output returns it unchanged.
    """

    # Katakana block folded onto hiragana by a fixed codepoint offset
    KATAKANA_START = 0x30A1
    KATAKANA_END = 0x30F6
    KANA_OFFSET = 0x60

    # Full-width ASCII variants folded onto ASCII
    FULLWIDTH_START = 0xFF01
    FULLWIDTH_END = 0xFF5E
    FULLWIDTH_OFFSET = 0xFEE0

    # Hyphens, dashes, minus signs, full-width hyphen, prolonged sound marks
    DASH_PATTERN = re.compile(r'[‐-―−－ーｰ]')

    ZERO_WIDTH_PATTERN = re.compile(r'[\u200b\u200c\u200d\u2060\ufeff]')

    # Brackets and decorative glyphs that show up around names on flyers
    SYMBOL_PATTERN = re.compile(
        r'[【】〔〕［］「」『』〈〉《》（）()\[\]{}'
        r'☆★●○◎◯◇◆♦■□▲△▼▽▶▷◀◁※♪♫♬♡♥❤✓✔☓×✕✖'
        r'→←↑↓⇒⇔➡⟁・~〜～+*＝=≠≒≈≡≪≫＜＞<>|\\/,:;!?！？。、：'
        r'\ufe0f]'
    )

    WHITESPACE_PATTERN = re.compile(r'\s+')

    # Everything outside these ranges is dropped from the loose key:
    # hiragana, CJK ideographs (+ext A, iteration marks), a-z, 0-9, hyphen
    LOOSE_KEY_DISALLOWED = re.compile(
        r'[^a-z0-9\-぀-ゟ㐀-䶿一-鿿々-〇]'
    )

    def normalize(self, text: Optional[str]) -> NormalizedForm:
        """
        Compute both normalized representations of ``text``.

        Args:
            text: Raw line or master name

        Returns:
            NormalizedForm with display and loose key
        """
        return NormalizedForm(
            display=self.normalize_display(text),
            loose_key=self.make_loose_key(text),
        )

    def normalize_display(self, text: Optional[str]) -> str:
        """
        Build the human-readable display form.

        Pipeline order:
        1. Unicode normalization (NFKC)
        2. Dash unification
        3. Zero-width character removal
        4. Symbol / bracket / punctuation replacement with spaces
        5. Whitespace collapse and trim

        Args:
            text: Raw text

        Returns:
            Display form, or '' for empty input

        Examples:
            >>> NameNormalizer().normalize_display("【新台】Ｐ ＡＢＣ－７７７★")
            '新台 P ABC-777'
        """
        if not text or not isinstance(text, str):
            return ''

        text = self._unicode_normalize(text)
        text = self._unify_dashes(text)
        text = self._remove_zero_width(text)
        text = self._strip_symbols(text)
        text = self._strip_punctuation(text)
        return self._collapse_whitespace(text).strip()

    def make_loose_key(self, text: Optional[str]) -> str:
        """
        Build the loose comparison key.

        Pipeline order:
        1. Unicode normalization (NFKC)
        2. Half-width folding
        3. Katakana to hiragana folding
        4. Dash unification
        5. Zero-width removal and symbol stripping
        6. Whitespace removal
        7. Canonical recomposition (NFC) of voiced kana
        8. Case folding (lowercase)
        9. Restriction to hiragana / kanji / latin / digits / hyphen

        Args:
            text: Raw text

        Returns:
            Loose key, or '' when nothing comparable remains

        Examples:
            >>> NameNormalizer().make_loose_key("ラッキー セブン")
            'らっき-せぶん'
            >>> NameNormalizer().make_loose_key("ａｂｃ－７７７")
            'abc-777'
        """
        if not text or not isinstance(text, str):
            return ''

        text = self._unicode_normalize(text)
        text = self._to_half_width(text)
        text = self._katakana_to_hiragana(text)
        text = self._unify_dashes(text)
        text = self._remove_zero_width(text)
        text = self._strip_symbols(text)
        text = self.WHITESPACE_PATTERN.sub('', text)
        text = self._compose(text)
        text = text.lower()
        return self.LOOSE_KEY_DISALLOWED.sub('', text)

    def _unicode_normalize(self, text: str) -> str:
        """Apply Unicode NFKC normalization."""
        return unicodedata.normalize('NFKC', text)

    def _compose(self, text: str) -> str:
        """
        Recompose kana with a detached voicing mark.

        NFKC turns a spacing dakuten into space + U+3099, so the mark only
        reaches its kana once spaces and symbols are gone.
        """
        return unicodedata.normalize('NFC', text)

    def _to_half_width(self, text: str) -> str:
        """
        Fold full-width ASCII variants and the ideographic space.

        NFKC already covers most of these; the explicit pass keeps the
        loose key stable for callers that skip step 1.
        """
        chars = []
        for ch in text:
            code = ord(ch)
            if self.FULLWIDTH_START <= code <= self.FULLWIDTH_END:
                chars.append(chr(code - self.FULLWIDTH_OFFSET))
            elif ch == '　':
                chars.append(' ')
            else:
                chars.append(ch)
        return ''.join(chars)

    def _katakana_to_hiragana(self, text: str) -> str:
        """Map katakana U+30A1..U+30F6 to hiragana by a fixed offset."""
        chars = []
        for ch in text:
            code = ord(ch)
            if self.KATAKANA_START <= code <= self.KATAKANA_END:
                chars.append(chr(code - self.KANA_OFFSET))
            else:
                chars.append(ch)
        return ''.join(chars)

    def _unify_dashes(self, text: str) -> str:
        """Collapse every dash-like glyph to '-'."""
        return self.DASH_PATTERN.sub('-', text)

    def _remove_zero_width(self, text: str) -> str:
        """Drop zero-width spaces, joiners and the BOM."""
        return self.ZERO_WIDTH_PATTERN.sub('', text)

    def _strip_symbols(self, text: str) -> str:
        """Replace denylisted brackets and decorative glyphs with a space."""
        return self.SYMBOL_PATTERN.sub(' ', text)

    def _strip_punctuation(self, text: str) -> str:
        """
        Replace remaining punctuation and symbol characters with a space.

        Letters, marks, numbers, whitespace and '-' survive.
        """
        chars = []
        for ch in text:
            if ch == '-' or ch.isspace():
                chars.append(ch)
                continue
            category = unicodedata.category(ch)
            if category[0] in ('P', 'S', 'C'):
                chars.append(' ')
            else:
                chars.append(ch)
        return ''.join(chars)

    def _collapse_whitespace(self, text: str) -> str:
        """Collapse runs of whitespace to a single space."""
        return self.WHITESPACE_PATTERN.sub(' ', text)


# Module-level singleton for convenience functions
_normalizer_instance = None


def _get_normalizer() -> NameNormalizer:
    """Get or create the module-level NameNormalizer singleton."""
    global _normalizer_instance
    if _normalizer_instance is None:
        _normalizer_instance = NameNormalizer()
    return _normalizer_instance


def normalize_display(text: Optional[str]) -> str:
    """Display form of ``text`` using the shared normalizer."""
    return _get_normalizer().normalize_display(text)


def make_loose_key(text: Optional[str]) -> str:
    """Loose key of ``text`` using the shared normalizer."""
    return _get_normalizer().make_loose_key(text)


def normalize(text: Optional[str]) -> NormalizedForm:
    """Display form and loose key of ``text`` using the shared normalizer."""
    return _get_normalizer().normalize(text)
