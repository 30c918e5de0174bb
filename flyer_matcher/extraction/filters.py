"""
Line-level filters for flyer text extraction.

Separates candidate machine-name lines from promotional headers, facility
announcements, UI labels, numbers and other non-name content.
"""

import logging
import re
from typing import FrozenSet, Iterable, List, Optional

from flyer_matcher.normalization.text_normalizer import NameNormalizer

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# Operational / boilerplate vocabulary that never names a machine
# ─────────────────────────────────────────────────────────────────────────────
DEFAULT_NG_WORDS: List[str] = [
    # promotional wording
    '新台', 'おすすめ', 'オススメ', '人気', '注目', '最新', '機種入替', '導入',
    '増台', '減台', '設置', '台数', '配置', 'コーナー', 'ラインナップ',
    'ラインアップ', '入替', '入替え', 'リニューアル',
    # headings and UI labels
    '一覧', 'ご案内', 'お知らせ', '営業時間', '抽選', '整理券', 'SNS', 'X',
    'Twitter', 'LINE', 'YouTube', '休業', '開店', '閉店',
    # floor and payout jargon
    'バラエティ', 'スロットコーナー', 'パチンココーナー', '甘デジ', 'ライトミドル',
    'ミドル', '高確率', '低確率', '右打ち', 'へそ', '電サポ', '遊タイム',
]

# Lines made of nothing but numbers and separators
NUMERIC_ONLY = re.compile(r'^[0-9\-_. ]+$')


class NoiseFilter:
    """
    Rejects lines that cannot be a machine name.

    A line is noise when its display form or loose key is empty, when it
    is only digits and separators, when its loose key contains a denylisted
    phrase, or when its display form is too short.

    Denylist phrases whose own loose key is shorter than ``ng_min_length``
    are ignored: one- and two-character words collide with fragments of
    real names too often.
    """

    def __init__(self, ng_words: Optional[Iterable[str]] = None,
                 ng_min_length: int = 3, min_display_length: int = 3,
                 normalizer: Optional[NameNormalizer] = None):
        """
        Initialize the noise filter.

        Args:
            ng_words: Denylist phrases (defaults to DEFAULT_NG_WORDS)
            ng_min_length: Minimum loose-key length for a phrase to be used
            min_display_length: Minimum display length of a candidate name
            normalizer: NameNormalizer instance (creates new if None)
        """
        if ng_min_length < 1:
            raise ValueError(f"ng_min_length must be at least 1, got {ng_min_length}")
        if min_display_length < 0:
            raise ValueError(
                f"min_display_length must be non-negative, got {min_display_length}"
            )

        self.normalizer = normalizer or NameNormalizer()
        self.ng_min_length = ng_min_length
        self.min_display_length = min_display_length

        words = DEFAULT_NG_WORDS if ng_words is None else list(ng_words)
        keys = (self.normalizer.make_loose_key(w) for w in words)
        self.ng_keys: FrozenSet[str] = frozenset(
            k for k in keys if k and len(k) >= ng_min_length
        )
        logger.debug(
            "NoiseFilter: %d of %d denylist phrases active (min length %d)",
            len(self.ng_keys), len(words), ng_min_length,
        )

    def is_noise(self, line: Optional[str]) -> bool:
        """
        Check whether a line should be skipped.

        Args:
            line: Raw line text

        Returns:
            True if the line is noise
        """
        return self.reason(line) is not None

    def reason(self, line: Optional[str]) -> Optional[str]:
        """
        Name of the rule that rejects ``line``.

        Args:
            line: Raw line text

        Returns:
            One of 'empty', 'no_key', 'numeric', 'ng_word', 'too_short',
            or None when the line is a candidate name
        """
        if not line or not isinstance(line, str):
            return 'empty'

        display = self.normalizer.normalize_display(line)
        if not display:
            return 'empty'

        loose = self.normalizer.make_loose_key(display)
        if not loose:
            return 'no_key'

        if NUMERIC_ONLY.match(loose) or NUMERIC_ONLY.match(display):
            return 'numeric'

        for ng in self.ng_keys:
            if ng in loose:
                return 'ng_word'

        if len(display) < self.min_display_length:
            return 'too_short'

        return None
