"""Runtime helpers for tracking how often functions execute in production."""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Dict, Optional

_LOCK = threading.RLock()
_COUNTS: Dict[str, int] = {}


def _tracking_file() -> Optional[Path]:
    raw = os.environ.get("FUNCTION_TRACKING_FILE", "").strip()
    return Path(raw) if raw else None


def _persist_counts_locked(target: Path) -> None:
    """Persist the in-memory counts to disk. Caller must hold ``_LOCK``."""
    tmp_path: Optional[Path] = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            "w", encoding="utf-8", dir=target.parent, delete=False
        ) as handle:
            json.dump(_COUNTS, handle, sort_keys=True)
            handle.write("\n")
            handle.flush()
            tmp_path = Path(handle.name)

        if tmp_path is not None:
            tmp_path.replace(target)
    except OSError:
        if tmp_path is not None:
            try:
                tmp_path.unlink()
            except OSError:
                pass


def t(func_name: str) -> None:
    """Record the provided function name each time it runs.

    Counts always live in memory; they are written to disk only when
    ``FUNCTION_TRACKING_FILE`` points at a JSON file.
    """
    if not func_name:
        return

    with _LOCK:
        _COUNTS[func_name] = _COUNTS.get(func_name, 0) + 1
        target = _tracking_file()
        if target is not None:
            _persist_counts_locked(target)


def tracked_calls() -> Dict[str, int]:
    """Return a snapshot of the recorded call counts."""
    with _LOCK:
        return dict(_COUNTS)
