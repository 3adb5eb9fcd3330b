"""Keyword matching over requirement text.

Keywords match at a word start, so ``encrypt`` finds ``encryption`` while
``load`` does not fire on ``download``. Keywords of three characters or fewer
(``ai``, ``api``, ``iot``) must match a whole word or its plural (``APIs``).
"""

import re
from functools import lru_cache
from typing import Iterable, List, Pattern


@lru_cache(maxsize=512)
def _pattern(keyword: str) -> Pattern[str]:
    escaped = re.escape(keyword.lower())
    if len(keyword) <= 3:
        return re.compile(rf"\b{escaped}s?\b")
    return re.compile(rf"\b{escaped}")


def contains_keyword(text: str, keyword: str) -> bool:
    return _pattern(keyword).search(text.lower()) is not None


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(_pattern(k).search(lowered) for k in keywords)


def matching_keywords(text: str, keywords: Iterable[str]) -> List[str]:
    lowered = text.lower()
    return [k for k in keywords if _pattern(k).search(lowered)]


def significant_words(text: str, limit: int = 10) -> List[str]:
    """First ``limit`` words longer than three characters, lowercased."""
    words = [w for w in text.lower().split() if len(w) > 3]
    return words[:limit]
