# -*- coding: utf-8 -*-
from __future__ import annotations

from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
LOG_DIR = ROOT_DIR / "logs"
LOCK_DIR = LOG_DIR / "locks"
BOT_LOG_FILE = LOG_DIR / "defconbot.log"
SERVER_ACTIONS_FILE = LOG_DIR / "server_actions.jsonl"
CONTROL_DIR = ROOT_DIR / "control"
KILL_SWITCH_FILE = CONTROL_DIR / "kill.switch"


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
