from __future__ import annotations

import re

_whitespace_re = re.compile(r"\s+")
_non_alnum_re = re.compile(r"[^a-z0-9\s]")


def normalize_participant(value: str) -> str:
    """Dedup key normalization: trim, lower-case, collapse inner whitespace.

    Exact only: "Man Utd" and "Manchester United" stay distinct.
    """

    return _whitespace_re.sub(" ", value.strip().lower())


def normalize_keyword_text(value: str) -> str:
    """Looser normalization used for keyword matching (punctuation becomes spaces)."""

    v = value.strip().lower()
    v = _non_alnum_re.sub(" ", v)
    v = _whitespace_re.sub(" ", v)
    return v.strip()


def contains_keyword(haystack: str, keyword: str) -> bool:
    """Whole-word(s) keyword match on keyword-normalized text."""

    h = f" {normalize_keyword_text(haystack)} "
    k = f" {normalize_keyword_text(keyword)} "
    return k.strip() != "" and k in h
