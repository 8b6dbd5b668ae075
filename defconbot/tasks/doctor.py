# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import time
from pathlib import Path

from defconbot.discord import is_webhook_url, send_task_report
from defconbot.env import ConfigurationError, get_env, load_dotenv, load_settings, parse_oauth_credential
from defconbot.logging_setup import configure_root_logging, log_server_action
from defconbot.paths import KILL_SWITCH_FILE, LOG_DIR

LOGGER = logging.getLogger(__name__)
SCRIPT_NAME = "doctor"


def _check_writable(path: Path) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8"):
            pass
        return True
    except OSError:
        return False


def run_checks() -> tuple[list[str], list[str], list[str]]:
    """Returns (ok, warnings, critical) check descriptions."""
    ok_checks: list[str] = []
    warning_checks: list[str] = []
    critical_checks: list[str] = []

    def add_check(name: str, passed: bool, *, detail: str, severity: str = "warning") -> None:
        if passed:
            ok_checks.append(f"{name}: {detail}")
        elif severity == "critical":
            critical_checks.append(f"{name}: {detail}")
        else:
            warning_checks.append(f"{name}: {detail}")

    try:
        config = load_settings()
    except ConfigurationError as exc:
        add_check("settings", False, detail=str(exc), severity="critical")
    else:
        add_check("settings", True, detail=f"{config.lang}.{config.family}, page {config.report_page}")
        # load_settings already rejected a malformed credential
        parts = parse_oauth_credential(config.oauth_token)
        add_check("DEFCON_OAUTH_TOKEN", True, detail=f"{len(parts)} OAuth parts")

    for key in ("DISCORD_WEBHOOK_MAIN", "DISCORD_WEBHOOK_ERRORS"):
        raw = get_env(key)
        add_check(key, not raw or is_webhook_url(raw), detail="configured" if raw else "not set (optional)")

    add_check("LOG_DIR", _check_writable(LOG_DIR / "doctor.check"), detail=str(LOG_DIR), severity="critical")
    add_check("kill switch", not KILL_SWITCH_FILE.exists(), detail=str(KILL_SWITCH_FILE))
    return ok_checks, warning_checks, critical_checks


def main() -> int:
    started = time.monotonic()
    load_dotenv()
    configure_root_logging(logger_name=SCRIPT_NAME)

    ok_checks, warning_checks, critical_checks = run_checks()
    for line in ok_checks:
        LOGGER.info("OK %s", line)
    for line in warning_checks:
        LOGGER.warning("WARN %s", line)
    for line in critical_checks:
        LOGGER.error("CRITICAL %s", line)

    status = "FAILED" if critical_checks else ("WARNING" if warning_checks else "SUCCESS")
    duration = time.monotonic() - started
    log_server_action(
        "doctor_end",
        script_name=SCRIPT_NAME,
        level="ERROR" if critical_checks else status,
        context={"critical": len(critical_checks), "warning": len(warning_checks), "ok": len(ok_checks)},
    )
    send_task_report(
        script_name=SCRIPT_NAME,
        status=status,
        duration_seconds=duration,
        details="\n".join(critical_checks + warning_checks) or "All checks passed",
        stats={"critical": len(critical_checks), "warning": len(warning_checks), "ok": len(ok_checks)},
    )
    return 1 if critical_checks else 0


if __name__ == "__main__":
    raise SystemExit(main())
