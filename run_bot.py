#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import time

from defconbot.discord import send_task_report
from defconbot.env import load_dotenv
from defconbot.logging_setup import configure_root_logging, log_server_action
from defconbot.tasks import defcon, doctor

LOGGER = logging.getLogger("run_bot")

TASKS = {
    "defcon": defcon.run,
    "doctor": doctor.main,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a DefconBot task")
    parser.add_argument("task", nargs="?", default="defcon", choices=sorted(TASKS.keys()), help="Task name to run")
    args = parser.parse_args(argv)
    task_name = args.task
    started = time.monotonic()
    load_dotenv()
    configure_root_logging(logger_name="run_bot.py")
    try:
        exit_code = int(TASKS[task_name]())
    except Exception as exc:
        duration = time.monotonic() - started
        LOGGER.exception("Task %s failed", task_name)
        log_server_action(
            "task_runner_exception",
            script_name="run_bot.py",
            level="CRITICAL",
            context={"task": task_name, "error_type": type(exc).__name__, "error": str(exc)[:300]},
        )
        send_task_report(
            script_name="run_bot.py",
            status="FAILED",
            duration_seconds=duration,
            details=f"Task {task_name} crashed: {type(exc).__name__}: {exc}",
            stats={"task": task_name},
            level="CRITICAL",
        )
        return 1

    log_server_action(
        "task_runner_success" if exit_code == 0 else "task_runner_non_zero_exit",
        script_name="run_bot.py",
        level="SUCCESS" if exit_code == 0 else "WARNING",
        context={"task": task_name, "exit_code": exit_code, "duration_seconds": round(time.monotonic() - started, 2)},
    )
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
