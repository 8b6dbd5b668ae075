# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Mapping, Protocol

from .classifier import is_revert_of_vandalism

LOGGER = logging.getLogger(__name__)

INTERVAL_IN_MINS = 60


class RecentEditSource(Protocol):
    def fetch_recent_edit_comments(self, start: datetime, end: datetime) -> Iterable[list[Mapping[str, str]]]:
        ...


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval [start, end) in UTC."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class RateEstimate:
    reverts: int
    interval_minutes: int
    window: TimeWindow

    @property
    def rpm(self) -> float:
        return self.reverts / self.interval_minutes


def current_window(interval_minutes: int = INTERVAL_IN_MINS, now: datetime | None = None) -> TimeWindow:
    if interval_minutes <= 0:
        raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")
    end = now or datetime.now(timezone.utc)
    return TimeWindow(start=end - timedelta(minutes=interval_minutes), end=end)


def count_reverts(pages: Iterable[Iterable[Mapping[str, str]]]) -> int:
    total = 0
    for page_number, page in enumerate(pages, start=1):
        page_reverts = 0
        page_size = 0
        for edit in page:
            page_size += 1
            if is_revert_of_vandalism(str(edit.get("comment") or "")):
                page_reverts += 1
        LOGGER.debug("Page %d: %d reverts out of %d edits", page_number, page_reverts, page_size)
        total += page_reverts
    return total


def reverts_per_minute(
    source: RecentEditSource,
    interval_minutes: int = INTERVAL_IN_MINS,
    now: datetime | None = None,
) -> RateEstimate:
    """
    Count reverts of vandalism over the trailing window and divide by its length.

    The window is fixed once before fetching so a slow paginated fetch cannot
    drift it. Every page is consumed; errors from the source propagate as is.
    """
    window = current_window(interval_minutes, now=now)
    reverts = count_reverts(source.fetch_recent_edit_comments(window.start, window.end))
    estimate = RateEstimate(reverts=reverts, interval_minutes=interval_minutes, window=window)
    LOGGER.info("%d reverts in the last %d minutes (%.2f RPM)", reverts, interval_minutes, estimate.rpm)
    return estimate
