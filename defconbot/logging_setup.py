# -*- coding: utf-8 -*-
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from .env import get_bool_env, get_env
from .paths import BOT_LOG_FILE, SERVER_ACTIONS_FILE

LOGGER = logging.getLogger(__name__)
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# SUCCESS is not a stdlib level; it is logged as INFO
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "SUCCESS": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_root_logging(logger_name: str = "defconbot", log_file: Path | None = None) -> logging.Logger:
    """Attach a console handler and a file handler to the root logger, once."""
    root = logging.getLogger()
    if getattr(root, "_defconbot_configured", False):
        return logging.getLogger(logger_name)

    root.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(LEVELS.get(str(get_env("DEFCONBOT_LOG_LEVEL", "INFO")).upper(), logging.INFO))
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    path = log_file or BOT_LOG_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        LOGGER.warning("Unable to open log file %s: %s", path, exc)
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root._defconbot_configured = True  # type: ignore[attr-defined]
    return logging.getLogger(logger_name)


def _actions_file() -> Path:
    return Path(get_env("SERVER_ACTIONS_FILE", str(SERVER_ACTIONS_FILE)) or str(SERVER_ACTIONS_FILE))


def log_server_action(
    action: str,
    *,
    script_name: str,
    level: str = "INFO",
    context: dict[str, object] | None = None,
) -> None:
    """Log a run event and append it as one JSON line to the server actions file."""
    normalized = (level or "INFO").upper()
    payload = {
        "at": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "action": action,
        "script_name": script_name,
        "level": normalized,
        "context": context or {},
    }
    LOGGER.log(LEVELS.get(normalized, logging.INFO), "%s %s %s", script_name, action, payload["context"])

    if not get_bool_env("SERVER_LOG_EVERY_ACTION", True):
        return
    path = _actions_file()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
    except OSError as exc:
        LOGGER.warning("Unable to write server action to %s: %s", path, exc)
