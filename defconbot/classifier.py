# -*- coding: utf-8 -*-
"""Keyword heuristics deciding whether an edit summary describes a revert of vandalism."""
from __future__ import annotations

import re

VANDALISM_KEYWORDS = (
    "revert",
    "rv ",
    "long-term abuse",
    "long term abuse",
    "lta",
    "abuse",
    "rvv ",
    "undid",
)
NOT_VANDALISM_KEYWORDS = (
    "uaa",
    "good faith",
    "agf",
    "unsourced",
    "unreferenced",
    "self",
    "speculat",
    "original research",
    "rv tag",
    "typo",
    "incorrect",
    "format",
)

# Section-link autocomments, e.g. "/* Early life */ rv"
SECTION_HEADER_RE = re.compile(r"/\*[\s\S]+?\*/")

_ASCII_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")


def normalize_summary(summary: str) -> str:
    """Drop every `/* ... */` span, then lowercase ASCII letters only."""
    return SECTION_HEADER_RE.sub("", summary or "").translate(_ASCII_LOWER)


def is_revert_of_vandalism(summary: str) -> bool:
    """Returns True if the edit should be counted in the RPM statistic."""
    normalized = normalize_summary(summary)
    if any(keyword in normalized for keyword in NOT_VANDALISM_KEYWORDS):
        return False
    return any(keyword in normalized for keyword in VANDALISM_KEYWORDS)
