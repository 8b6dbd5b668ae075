# -*- coding: utf-8 -*-
from __future__ import annotations

import fcntl
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .paths import LOCK_DIR, ensure_dir


class LockUnavailableError(RuntimeError):
    """Raised when another run already holds the lock."""


def _lock_file_name(lock_name: str) -> str:
    safe_name = "".join(ch if ch.isalnum() or ch in {"-", "_", "."} else "_" for ch in lock_name).strip("._")
    return f"{safe_name or 'task'}.lock"


@contextmanager
def hold_lock(lock_name: str, lock_dir: Path | None = None) -> Iterator[Path]:
    """
    Acquire an exclusive non-blocking lock so two cron runs never overlap.

    The lock is released when the context exits, including on error.
    """
    lock_path = ensure_dir(lock_dir or LOCK_DIR) / _lock_file_name(lock_name)

    lock_file = lock_path.open("a+", encoding="utf-8")
    try:
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as exc:
            raise LockUnavailableError(f"Lock already held: {lock_path}") from exc

        lock_file.seek(0)
        lock_file.truncate()
        lock_file.write(f"{os.getpid()}\n")
        lock_file.flush()
        yield lock_path
    finally:
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
        finally:
            lock_file.close()
