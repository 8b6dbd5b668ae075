# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

import requests

from .env import get_env, get_int_env

LOGGER = logging.getLogger(__name__)

MAX_EMBED_DESCRIPTION = 4096
MAX_EMBED_TITLE = 256
MAX_EMBED_FIELDS = 25
MAX_FIELD_NAME = 256
MAX_FIELD_VALUE = 1024
WEBHOOK_PREFIXES = (
    "https://discord.com/api/webhooks/",
    "https://ptb.discord.com/api/webhooks/",
    "https://canary.discord.com/api/webhooks/",
)
PLACEHOLDER_MARKERS = ("votre_webhook_ici", "your_webhook_here", "<webhook>", "example.com")
RETRYABLE_STATUSES = {429, 500, 502, 503, 504}
STATUS_COLORS = {
    "SUCCESS": 5763719,
    "INFO": 3447003,
    "WARNING": 15105570,
    "ERROR": 15158332,
    "FAILED": 15158332,
}


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _truncate(value: object, max_size: int) -> str:
    return str(value if value is not None else "")[:max_size]


def _is_webhook_placeholder(url: str) -> bool:
    marker = url.strip().lower()
    return any(token in marker for token in PLACEHOLDER_MARKERS)


def is_webhook_url(value: str | None) -> bool:
    if not value or _is_webhook_placeholder(value):
        return False
    return value.strip().lower().startswith(WEBHOOK_PREFIXES)


def _clean_webhook(raw_value: str | None, field_name: str) -> str | None:
    value = (raw_value or "").strip()
    if not value:
        return None
    if _is_webhook_placeholder(value):
        LOGGER.warning("%s is still a placeholder and will be ignored", field_name)
        return None
    if not is_webhook_url(value):
        LOGGER.warning("%s is not a valid Discord webhook URL and will be ignored", field_name)
        return None
    return value


class DiscordNotifier:
    def __init__(self, main: str | None = None, errors: str | None = None) -> None:
        self.main = _clean_webhook(main, "DISCORD_WEBHOOK_MAIN")
        self.errors = _clean_webhook(errors, "DISCORD_WEBHOOK_ERRORS")
        self.request_timeout = max(get_int_env("DISCORD_TIMEOUT_SECONDS", 12), 3)
        self.max_retries = max(get_int_env("DISCORD_MAX_RETRIES", 3), 0)

    @classmethod
    def from_env(cls) -> "DiscordNotifier":
        return cls(
            main=get_env("DISCORD_WEBHOOK_MAIN") or get_env("DISCORD_WEBHOOK"),
            errors=get_env("DISCORD_WEBHOOK_ERRORS"),
        )

    def _pick_webhook(self, level: str) -> str | None:
        if level in {"ERROR", "CRITICAL"} and self.errors:
            return self.errors
        return self.main or self.errors

    @staticmethod
    def _retry_after(response: requests.Response) -> float | None:
        try:
            retry_after = response.json().get("retry_after")
            return max(float(retry_after), 0.5)
        except (ValueError, TypeError, AttributeError):
            return None

    def _post(self, webhook: str, payload: dict[str, Any]) -> tuple[bool, str]:
        last_error = "unknown_error"
        for attempt in range(self.max_retries + 1):
            try:
                response = requests.post(webhook, json=payload, timeout=self.request_timeout)
            except requests.RequestException as exc:
                last_error = f"request_error: {exc}"
                if attempt < self.max_retries:
                    time.sleep(min(1.5**attempt, 8.0))
                    continue
                return False, last_error

            if 200 <= response.status_code < 300:
                return True, ""

            body_preview = _truncate((response.text or "").replace("\n", " "), 300)
            last_error = f"http_{response.status_code}: {body_preview}"
            if response.status_code in RETRYABLE_STATUSES and attempt < self.max_retries:
                wait_for = self._retry_after(response)
                time.sleep(wait_for if wait_for is not None else min(1.5**attempt, 8.0))
                continue
            return False, last_error
        return False, last_error

    def send(self, embed: dict[str, Any], level: str = "INFO") -> bool:
        normalized = (level or "INFO").upper()
        webhook = self._pick_webhook(normalized)
        if not webhook:
            LOGGER.debug("No Discord webhook configured, skipping %s notification", normalized)
            return False
        ok, error = self._post(webhook, {"embeds": [embed]})
        if not ok:
            LOGGER.warning("Discord webhook failed (%s): %s", normalized, error)
        return ok


@lru_cache(maxsize=1)
def get_notifier() -> DiscordNotifier:
    return DiscordNotifier.from_env()


def send_task_report(
    script_name: str,
    status: str,
    duration_seconds: float | None = None,
    stats: dict[str, object] | None = None,
    details: str | None = None,
    level: str | None = None,
    notifier: DiscordNotifier | None = None,
) -> bool:
    normalized_status = (status or "INFO").upper()
    inferred_level = (level or ("ERROR" if normalized_status in {"ERROR", "FAILED"} else "INFO")).upper()

    fields: list[dict[str, Any]] = []
    if duration_seconds is not None:
        fields.append({"name": "Duration", "value": f"{duration_seconds:.1f}s", "inline": True})
    for key, value in list((stats or {}).items())[: MAX_EMBED_FIELDS - 1]:
        fields.append({"name": _truncate(key, MAX_FIELD_NAME), "value": _truncate(value, MAX_FIELD_VALUE) or "-", "inline": True})

    embed = {
        "title": _truncate(f"{script_name} | RUN {normalized_status}", MAX_EMBED_TITLE),
        "description": _truncate(details or "Automatic report", MAX_EMBED_DESCRIPTION),
        "color": STATUS_COLORS.get(normalized_status, STATUS_COLORS["INFO"]),
        "fields": fields,
        "timestamp": _utc_now_iso(),
    }
    return (notifier or get_notifier()).send(embed, level=inferred_level)
