# -*- coding: utf-8 -*-
from __future__ import annotations

import re

UNKNOWN_LEVEL = 0
LEVEL_RE = re.compile(r"level\s*=\s*(\d+)")

# (upper bound in RPM, level), checked in order
LEVEL_BREAKPOINTS = (
    (2.0, 5),
    (4.0, 4),
    (6.0, 3),
    (8.0, 2),
)
MOST_SEVERE_LEVEL = 1

STATUS_TEMPLATE = """{{{{#switch: {{{{{{1}}}}}}
| level = {level}
| sign = ~~~~~
| info = {rpm:.2f} RPM according to [[User:{bot}|{bot}]]
}}}}"""
SUMMARY_TEMPLATE = "{prefix} updating vandalism level to level {level} ({rpm:.2f} RPM) #DEFCON{level}"


def rpm_to_level(rpm: float) -> int:
    for upper_bound, level in LEVEL_BREAKPOINTS:
        if rpm <= upper_bound:
            return level
    return MOST_SEVERE_LEVEL


def parse_published_level(text: str) -> int:
    """Level currently shown on the status page, or UNKNOWN_LEVEL if none is found."""
    match = LEVEL_RE.search(text or "")
    if not match:
        return UNKNOWN_LEVEL
    return int(match.group(1))


def render_status_text(level: int, rpm: float, bot_name: str) -> str:
    return STATUS_TEMPLATE.format(level=level, rpm=rpm, bot=bot_name)


def build_edit_summary(level: int, rpm: float, prefix: str = "Bot") -> str:
    return SUMMARY_TEMPLATE.format(prefix=prefix, level=level, rpm=rpm).strip()
