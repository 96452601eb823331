from __future__ import annotations

import json
import logging
import os
import sys
from collections import deque
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from time import perf_counter


_SYNC_DEBUG_ENV = "PERMITSYNC_SYNC_DEBUG"
_SYNC_DEBUG_LOG_ENV = "PERMITSYNC_SYNC_DEBUG_LOG"
_RECENT_EVENT_LIMIT = 200
_REDACTED_VALUE = "<redacted>"
_SECRET_KEY_MARKERS = ("apikey", "authorization", "password", "secret", "token")
_LOCK = Lock()
_SEQUENCE = 0
_RECENT: deque[dict[str, object]] = deque(maxlen=_RECENT_EVENT_LIMIT)
_LOGGER = logging.getLogger("permitsync.sync")


def sync_debug_enabled() -> bool:
    return _is_truthy_env(os.getenv(_SYNC_DEBUG_ENV, ""))


def sync_debug(event: str, **payload: object) -> None:
    """Record a structured sync event.

    Events are always kept in a small in-memory ring (see ``recent_sync_events``).
    When ``PERMITSYNC_SYNC_DEBUG`` is truthy they are also written as JSON lines to
    ``PERMITSYNC_SYNC_DEBUG_LOG`` or, when that is unset or unwritable, to stderr.
    """
    global _SEQUENCE
    with _LOCK:
        _SEQUENCE += 1
        record: dict[str, object] = {
            "seq": _SEQUENCE,
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "event": str(event or "").strip() or "unknown",
            "data": _redact_value(payload),
        }
        _RECENT.append(record)

    if not sync_debug_enabled():
        return
    line = json.dumps(record, ensure_ascii=True, default=str)
    target = str(os.getenv(_SYNC_DEBUG_LOG_ENV, "") or "").strip()
    if target:
        try:
            destination = Path(target).expanduser()
            destination.parent.mkdir(parents=True, exist_ok=True)
            with destination.open("a", encoding="utf-8") as handle:
                handle.write(f"{line}\n")
            return
        except OSError as exc:
            _LOGGER.warning("Sync debug log %s is not writable: %s", target, exc)
    sys.stderr.write(f"[sync-debug] {line}\n")
    sys.stderr.flush()


def recent_sync_events(*, event: str = "", limit: int = 50) -> tuple[dict[str, object], ...]:
    safe_limit = max(1, int(limit))
    wanted = str(event or "").strip()
    with _LOCK:
        rows = [row for row in _RECENT if not wanted or row["event"] == wanted]
    return tuple(rows[-safe_limit:])


def clear_recent_sync_events() -> None:
    with _LOCK:
        _RECENT.clear()


def elapsed_ms(started_at: float) -> float:
    return round((perf_counter() - started_at) * 1000.0, 2)


def _is_truthy_env(value: str) -> bool:
    return str(value or "").strip().casefold() in {"1", "true", "yes", "on", "y"}


def _is_secret_key(key: object) -> bool:
    # "api_key", "X-Api-Key" and "apiKey" all normalize to "apikey"
    compact = "".join(char for char in str(key or "").casefold() if char.isalnum())
    return any(marker in compact for marker in _SECRET_KEY_MARKERS)


def _redact_value(value: object) -> object:
    if isinstance(value, Mapping):
        return {
            str(key): _REDACTED_VALUE if _is_secret_key(key) else _redact_value(raw)
            for key, raw in value.items()
        }
    if isinstance(value, (set, frozenset)):
        value = sorted(value, key=str)
    if isinstance(value, (list, tuple)):
        return [_redact_value(entry) for entry in value]
    return value
