# -*- coding: utf-8 -*-
"""Publish the current vandalism level (DEFCON) to the status page when it changes."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from defconbot.discord import send_task_report
from defconbot.env import DefconConfig, load_dotenv, load_settings
from defconbot.levels import build_edit_summary, parse_published_level, render_status_text, rpm_to_level
from defconbot.locking import LockUnavailableError, hold_lock
from defconbot.logging_setup import configure_root_logging, log_server_action
from defconbot.rate import RateEstimate, reverts_per_minute
from defconbot.task_control import (
    RunPausedError,
    dry_run_enabled,
    ensure_runtime_allowed,
    report_lock_unavailable,
    submit_or_dry_run,
)
from defconbot.wiki import WikiClient

LOGGER = logging.getLogger(__name__)
SCRIPT_NAME = "defcon"
LOCK_NAME = "defcon"


@dataclass(frozen=True)
class ReconcileOutcome:
    previous_level: int
    level: int
    estimate: RateEstimate
    revision_id: int
    edited: bool
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return self.previous_level != self.level


def reconcile(client: Any, config: DefconConfig, now: datetime | None = None) -> ReconcileOutcome:
    """
    Read the published level, recompute it, and edit the page only if it differs.

    The edit is guarded by the revision id read at the start, so a concurrent
    change to the page makes the submission fail instead of being overwritten.
    """
    revision = client.fetch_page_revision(config.report_page)
    previous_level = parse_published_level(revision.content)
    LOGGER.info("Published level on %s is %d (revision %d)", config.report_page, previous_level, revision.revision_id)

    estimate = reverts_per_minute(client, interval_minutes=config.interval_minutes, now=now)
    level = rpm_to_level(estimate.rpm)

    if level == previous_level:
        LOGGER.info("No edit necessary: level is still %d (%.2f RPM)", level, estimate.rpm)
        return ReconcileOutcome(previous_level, level, estimate, revision.revision_id, edited=False)

    summary = build_edit_summary(level, estimate.rpm, config.summary_prefix)
    saved = submit_or_dry_run(
        client,
        script_name=SCRIPT_NAME,
        title=config.report_page,
        summary=summary,
        text=render_status_text(level, estimate.rpm, config.bot_name),
        base_revision_id=revision.revision_id,
    )
    if saved:
        LOGGER.info("Updated %s from level %d to level %d", config.report_page, previous_level, level)
    return ReconcileOutcome(previous_level, level, estimate, revision.revision_id, edited=saved, dry_run=not saved)


def _report(outcome: ReconcileOutcome, duration: float) -> None:
    stats = {
        "previous_level": outcome.previous_level,
        "level": outcome.level,
        "rpm": f"{outcome.estimate.rpm:.2f}",
        "reverts": outcome.estimate.reverts,
        "dry_run": int(outcome.dry_run),
    }
    if outcome.edited:
        status, details = "SUCCESS", f"Level {outcome.previous_level} -> {outcome.level} ({outcome.estimate.rpm:.2f} RPM)"
    elif outcome.dry_run:
        status, details = "WARNING", f"Dry-run: would set level {outcome.level} ({outcome.estimate.rpm:.2f} RPM)"
    else:
        status, details = "INFO", f"Level unchanged at {outcome.level} ({outcome.estimate.rpm:.2f} RPM)"
    log_server_action("run_end", script_name=SCRIPT_NAME, level=status, context={**stats, "duration_seconds": round(duration, 2)})
    # notify on level changes only
    if outcome.changed:
        send_task_report(script_name=SCRIPT_NAME, status=status, duration_seconds=duration, details=details, stats=stats)


def run(config: DefconConfig | None = None, client: Any = None) -> int:
    started = time.monotonic()
    config = config or load_settings()
    try:
        ensure_runtime_allowed()
    except RunPausedError as exc:
        log_server_action("run_paused", script_name=SCRIPT_NAME, level="WARNING", context={"reason": exc.reason})
        return 0

    try:
        with hold_lock(LOCK_NAME):
            log_server_action(
                "run_start",
                script_name=SCRIPT_NAME,
                context={
                    "report_page": config.report_page,
                    "site": f"{config.lang}.{config.family}",
                    "interval_minutes": config.interval_minutes,
                    "dry_run": int(dry_run_enabled()),
                },
            )
            if client is None:
                client = WikiClient.connect(config.lang, config.family, config.oauth_token)
            outcome = reconcile(client, config)
            _report(outcome, time.monotonic() - started)
            return 0
    except LockUnavailableError:
        return report_lock_unavailable(SCRIPT_NAME, started, LOCK_NAME)


def main() -> int:
    load_dotenv()
    configure_root_logging(logger_name=SCRIPT_NAME)
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
