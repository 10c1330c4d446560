"""Spanish text helpers shared by the motility narrative and the conclusions list."""

from __future__ import annotations

import re
from typing import Iterable

# Tokens that keep their canonical casing wherever they appear in a clause
PROTECTED_ACRONYMS: tuple[str, ...] = ("DA", "CD", "Cx", "WMSI")

_ACRONYM_RES = [
    (re.compile(rf"\b{acronym}\b", re.IGNORECASE), acronym)
    for acronym in PROTECTED_ACRONYMS
]


def takes_e_conjunction(word: str) -> bool:
    """True when 'y' must become 'e' before ``word``.

    Applies to words starting with the sound /i/: 'i...' or 'hi...', except
    'hie...' (hierro, hielo) where the sound is /ʝe/.
    """
    w = word.strip().lower()
    return w.startswith("i") or (w.startswith("hi") and not w.startswith("hie"))


def conjunction_before(clause: str) -> str:
    first_word = clause.strip().split(" ", 1)[0] if clause.strip() else ""
    return "e" if takes_e_conjunction(first_word) else "y"


def join_spanish(items: Iterable[str]) -> str:
    """Join as 'a', 'a y b', 'a, b y c' with the euphonic 'e' where needed."""
    parts = [item for item in items if item]
    if not parts:
        return ""
    if len(parts) == 1:
        return parts[0]
    return f"{', '.join(parts[:-1])} {conjunction_before(parts[-1])} {parts[-1]}"


def force_acronyms(text: str) -> str:
    for pattern, acronym in _ACRONYM_RES:
        text = pattern.sub(acronym, text)
    return text


def strip_trailing_period(text: str) -> str:
    text = text.strip()
    return text[:-1] if text.endswith(".") else text


def lowercase_first(text: str) -> str:
    """Lowercase the first character, then restore protected acronyms."""
    if not text:
        return text
    return force_acronyms(text[0].lower() + text[1:])


def capitalize_first(text: str) -> str:
    if not text:
        return text
    return text[0].upper() + text[1:]


def as_subordinate_clause(sentence: str) -> str:
    """Turn a standalone sentence into a clause that continues another one."""
    return lowercase_first(strip_trailing_period(sentence))


def append_clause(base: str, clause: str) -> str:
    """Attach ``clause`` to ``base`` with 'y'/'e' as the clause's first word requires."""
    if not base:
        return capitalize_first(clause)
    if not clause:
        return base
    return f"{base} {conjunction_before(clause)} {clause}"


def ensure_period(text: str) -> str:
    text = text.rstrip()
    return text if text.endswith(".") else f"{text}."


def format_number(value: float) -> str:
    """Render 45.0 as '45' and 45.5 as '45.5'."""
    return f"{value:g}"
