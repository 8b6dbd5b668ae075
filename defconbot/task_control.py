# -*- coding: utf-8 -*-
from __future__ import annotations

import time
from pathlib import Path
from typing import Any

from .discord import send_task_report
from .env import get_bool_env
from .logging_setup import log_server_action
from .paths import KILL_SWITCH_FILE


def dry_run_enabled() -> bool:
    return get_bool_env("DEFCONBOT_DRY_RUN", False)


class RunPausedError(RuntimeError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def ensure_runtime_allowed(kill_switch: Path | None = None) -> None:
    if (kill_switch or KILL_SWITCH_FILE).exists():
        raise RunPausedError("Kill switch active")


def submit_or_dry_run(
    client: Any,
    *,
    script_name: str,
    title: str,
    summary: str,
    text: str,
    base_revision_id: int,
) -> bool:
    """Submit the edit, or log it and return False when dry-run is enabled."""
    if dry_run_enabled():
        log_server_action(
            "dry_run_skip_save",
            script_name=script_name,
            level="WARNING",
            context={"title": title, "summary": summary[:220], "base_revision_id": base_revision_id},
        )
        return False
    token = client.fetch_edit_token()
    client.submit_edit(title, summary, text, base_revision_id, token)
    return True


def report_lock_unavailable(script_name: str, started_monotonic: float, lock_name: str) -> int:
    duration = max(0.0, time.monotonic() - started_monotonic)
    log_server_action(
        "run_skipped_lock_held",
        script_name=script_name,
        level="WARNING",
        context={"lock_name": lock_name, "duration_seconds": round(duration, 3)},
    )
    send_task_report(
        script_name=script_name,
        status="WARNING",
        duration_seconds=duration,
        details=f"Run skipped: lock '{lock_name}' already held.",
        stats={"reason": "lock_held", "lock_name": lock_name},
        level="WARNING",
    )
    return 0
