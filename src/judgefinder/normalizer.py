"""
Identifier normalization.

Judges are addressed by short hyphenated identifiers ("jane-doe"). This module
derives those identifiers from display names and goes the other way, turning
an identifier back into plausible name spellings to search by.
"""

from __future__ import annotations

import re
import unicodedata

UNKNOWN_IDENTIFIER = "unknown-judge"
MAX_VARIATIONS = 6

HONORIFIC_TOKENS = frozenset({"judge", "justice", "hon", "honorable"})
HONORIFIC_PREFIXES = ("Hon.", "Judge", "Justice")
GENERATIONAL_SUFFIXES = frozenset({"ii", "iii", "iv"})

_APOSTROPHES = re.compile(r"['’`]")
_SEPARATORS = re.compile(r"[^a-z0-9]+")


def _tokens(text: str) -> list[str]:
    folded = unicodedata.normalize("NFKD", text)
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    folded = _APOSTROPHES.sub("", folded.lower())
    return [token for token in _SEPARATORS.split(folded) if token]


def _strip_honorifics(tokens: list[str]) -> list[str]:
    start = 0
    while start < len(tokens):
        if tokens[start] in HONORIFIC_TOKENS:
            start += 1
        elif (
            tokens[start] == "the"
            and start + 1 < len(tokens)
            and tokens[start + 1] in ("honorable", "hon")
        ):
            start += 2
        else:
            break
    return tokens[start:]


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated form of ``text``; empty when nothing survives."""
    return "-".join(_tokens(text))


def derive_identifier(name: str) -> str:
    """
    Canonical identifier for a display name.

    "Hon. Mary O'Brien-Smith" -> "mary-obrien-smith". Leading honorifics are
    dropped; a name with nothing left maps to ``unknown-judge``. Applying it
    to its own output returns the output unchanged.
    """
    tokens = _strip_honorifics(_tokens(name or ""))
    if not tokens:
        return UNKNOWN_IDENTIFIER
    return "-".join(tokens)


def _display_word(word: str) -> str:
    if len(word) == 1 and word.isalpha():
        return f"{word.upper()}."
    if word.isdigit() or word in GENERATIONAL_SUFFIXES:
        return word.upper()
    return word[:1].upper() + word[1:]


def identifier_to_name(identifier: str) -> str:
    """Best-effort display name for an identifier: "john-a-smith-iii" -> "John A. Smith III"."""
    return " ".join(_display_word(word) for word in identifier.split("-") if word)


def expand_variations(identifier: str) -> list[str]:
    """
    Ordered name guesses for an identifier, most likely first.

    Order: the reconstructed name, the name without initial periods,
    first + last (only with a middle part), "Last, First", then the
    honorific-prefixed forms. Duplicates are removed and the list is capped
    at six entries, so the order decides which guesses survive.
    """
    base = identifier_to_name(identifier)
    if not base:
        return []

    parts = base.split(" ")
    candidates = [base, base.replace(".", "")]
    if len(parts) > 2:
        candidates.append(f"{parts[0]} {parts[-1]}")
    if len(parts) >= 2:
        candidates.append(f"{parts[-1]}, {parts[0]}")
    candidates.extend(f"{prefix} {base}" for prefix in HONORIFIC_PREFIXES)

    variations: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in variations:
            variations.append(candidate)
    return variations[:MAX_VARIATIONS]
