"""Lexical heuristics over free-text query conditions and index definitions.

Conditions (``"id = 1 AND status = 'active'"``, ``"{ active: true }"``) and
index definitions (``"idx_users_email (email)"``) are unstructured strings.
They are split into identifier-like words with a regex and nothing more;
there is no grammar.  Words inside string literals count as words, and
"join" is detected anywhere it appears as a whole word.  Estimates built on
these helpers depend on that exact behavior.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_WORD = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def word_tokens(text: str) -> list[str]:
    """Identifier-like words in order of appearance, original case."""
    return _WORD.findall(text or "")


def count_words(text: str, words: Iterable[str]) -> int:
    """Count case-insensitive whole-word occurrences of any of ``words``."""
    alternatives = "|".join(re.escape(w) for w in words)
    if not alternatives or not text:
        return 0
    return len(re.findall(rf"\b(?:{alternatives})\b", text, flags=re.IGNORECASE))


def match_fields(text: str, field_names: Iterable[str]) -> list[str]:
    """Words of ``text`` that name a field, lower-cased, deduplicated, in order."""
    known = {name.lower() for name in field_names if name}
    found: list[str] = []
    for token in word_tokens(text):
        lowered = token.lower()
        if lowered in known and lowered not in found:
            found.append(lowered)
    return found
