"""Organization name normalization."""

import re

# Legal-entity designators stripped from names before comparison.
LEGAL_SUFFIXES = (
    "inc",
    "incorporated",
    "llc",
    "ltd",
    "limited",
    "corp",
    "corporation",
    "co",
    "company",
)

_SUFFIX_RE = re.compile(
    r"\b(?:" + "|".join(LEGAL_SUFFIXES) + r")\b\.?",
    flags=re.IGNORECASE,
)
_NON_WORD_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_name(raw: str | None) -> str:
    """Normalize an organization name for matching.

    Lowercases, removes whole-word legal suffixes ("Inc.", "LLC", ...),
    drops punctuation and collapses whitespace. "Incorporate Systems Inc"
    becomes "incorporate systems".
    """
    if not raw:
        return ""

    normalized = raw.lower()
    normalized = _SUFFIX_RE.sub(" ", normalized)
    normalized = _NON_WORD_RE.sub("", normalized)
    # Dropping punctuation can expose a suffix ("in.c" -> "inc").
    normalized = _SUFFIX_RE.sub(" ", normalized)
    normalized = _WHITESPACE_RE.sub(" ", normalized).strip()

    return normalized
