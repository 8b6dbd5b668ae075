# -*- coding: utf-8 -*-
from __future__ import annotations

import os
from dataclasses import dataclass
from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path
from types import ModuleType

from .paths import ROOT_DIR
from .rate import INTERVAL_IN_MINS as DEFAULT_INTERVAL_MINUTES


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing or unusable."""


def _load_python_config(path: Path) -> ModuleType | None:
    if not path.exists():
        return None
    spec = spec_from_file_location("defconbot_runtime_config", path)
    if spec is None or spec.loader is None:
        return None
    module = module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        value = value.strip().strip('"').strip("'")
        os.environ.setdefault(key, value)


def load_dotenv(root: Path | None = None) -> None:
    """
    Load runtime configuration from `config.<env>.py` (or `config.py`), then `.env`.

    Values already present in the process environment always win.
    """
    base = root or ROOT_DIR
    env_name = (os.environ.get("DEFCONBOT_ENV") or "prod").strip().lower()
    config_path = base / f"config.{env_name}.py"
    if not config_path.exists():
        config_path = base / "config.py"
    module = _load_python_config(config_path)
    if module is not None:
        for attr_name in dir(module):
            if not attr_name.isupper():
                continue
            value = getattr(module, attr_name)
            if value is None:
                continue
            os.environ.setdefault(attr_name, str(value))

    _load_env_file(base / ".env")
    if env_name:
        _load_env_file(base / f".env.{env_name}")


def get_env(name: str, default: str | None = None) -> str | None:
    return os.environ.get(name, default)


def get_bool_env(name: str, default: bool = False) -> bool:
    raw = get_env(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def get_int_env(name: str, default: int = 0) -> int:
    raw = get_env(name)
    if raw is None:
        return default
    try:
        return int(str(raw))
    except (TypeError, ValueError):
        return default


def parse_oauth_credential(raw: str) -> tuple[str, str, str, str]:
    """Split `consumer_key:consumer_secret:access_key:access_secret` into its four parts."""
    parts = [part.strip() for part in (raw or "").split(":")]
    if len(parts) != 4 or not all(parts):
        raise ConfigurationError(
            "OAuth credential must be consumer_key:consumer_secret:access_key:access_secret "
            f"(got {len(parts)} part(s), {sum(1 for part in parts if not part)} empty)"
        )
    return parts[0], parts[1], parts[2], parts[3]


def _first_env(*names: str) -> str:
    for name in names:
        value = str(get_env(name) or "").strip()
        if value:
            return value
    return ""


@dataclass(frozen=True)
class DefconConfig:
    oauth_token: str
    report_page: str
    lang: str = "en"
    family: str = "wikipedia"
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES
    bot_name: str = "DefconBot"
    summary_prefix: str = "Bot"

    def __repr__(self) -> str:
        # never leak the credential into logs or tracebacks
        return (
            f"DefconConfig(report_page={self.report_page!r}, lang={self.lang!r}, "
            f"family={self.family!r}, interval_minutes={self.interval_minutes})"
        )


def load_settings() -> DefconConfig:
    """Build the run configuration from the environment, failing before any network access."""
    oauth_token = _first_env("DEFCON_OAUTH_TOKEN", "APP_OAUTH_TOKEN")
    if not oauth_token:
        raise ConfigurationError("DEFCON_OAUTH_TOKEN is not set")
    parse_oauth_credential(oauth_token)
    report_page = _first_env("DEFCON_REPORT_PAGE", "APP_REPORT_PAGE")
    if not report_page:
        raise ConfigurationError("DEFCON_REPORT_PAGE is not set")

    raw_interval = _first_env("DEFCON_INTERVAL_MINUTES") or str(DEFAULT_INTERVAL_MINUTES)
    try:
        interval_minutes = int(raw_interval)
    except ValueError as exc:
        raise ConfigurationError(f"DEFCON_INTERVAL_MINUTES is not an integer: {raw_interval!r}") from exc
    if interval_minutes <= 0:
        raise ConfigurationError(f"DEFCON_INTERVAL_MINUTES must be positive, got {interval_minutes}")

    return DefconConfig(
        oauth_token=oauth_token,
        report_page=report_page,
        lang=_first_env("DEFCON_WIKI_LANG") or "en",
        family=_first_env("DEFCON_WIKI_FAMILY") or "wikipedia",
        interval_minutes=interval_minutes,
        bot_name=_first_env("DEFCON_BOT_NAME") or "DefconBot",
        summary_prefix=_first_env("DEFCON_SUMMARY_PREFIX") or "Bot",
    )
