"""Per-user security activity log kept as JSON lines with a retention window."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
import json
import os
from pathlib import Path
import threading
from typing import Any, Iterator

from ..intel.models import GeoLocation

ACTIVITY_LOG_PATH = Path.home() / ".geoguard" / "activity.jsonl"
ACTIVITY_LOG_ENV = "GEOGUARD_ACTIVITY_LOG"
DEFAULT_RETENTION_DAYS = 30

_WRITE_LOCK = threading.Lock()

try:
    import fcntl
except ModuleNotFoundError:  # Windows
    fcntl = None  # type: ignore[assignment]


def _resolve_log_path(path: str | Path | None) -> Path:
    if path is not None:
        return Path(path)
    override = os.getenv(ACTIVITY_LOG_ENV, "").strip()
    return Path(override) if override else ACTIVITY_LOG_PATH


@contextmanager
def _advisory_file_lock(path: Path) -> Iterator[None]:
    lock_path = path.with_suffix(path.suffix + ".lock")
    with lock_path.open("a+", encoding="utf-8") as lock_file:
        if fcntl is None:
            yield
            return
        fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


def _parse_timestamp(value: Any) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _read_entries(path: Path) -> list[dict[str, Any]]:
    if not path.exists():
        return []
    entries: list[dict[str, Any]] = []
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if not line:
                continue
            try:
                decoded = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(decoded, dict):
                entries.append(decoded)
    return entries


def _location_summary(location: GeoLocation | None) -> dict[str, str | None] | None:
    if location is None:
        return None
    return {"country": location.country, "region": location.region, "city": location.city}


def log_activity(
    event: str,
    ip: str,
    device_info: str,
    location: GeoLocation | None = None,
    details: dict[str, Any] | None = None,
    *,
    user_id: str | None = None,
    path: str | Path | None = None,
    retention_days: int | None = DEFAULT_RETENTION_DAYS,
    now: datetime | None = None,
) -> Path:
    """Append one activity entry and drop entries older than ``retention_days``.

    ``retention_days=None`` keeps everything. Lines that cannot be parsed, or
    carry no readable timestamp, are dropped when pruning.
    """
    target = _resolve_log_path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    stamp = now or datetime.now(timezone.utc)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    entry = {
        "timestamp": stamp.isoformat(),
        "event": event,
        "user_id": user_id,
        "ip": ip,
        "device_info": device_info,
        "location": _location_summary(location),
        "details": dict(details or {}),
    }

    with _WRITE_LOCK, _advisory_file_lock(target):
        if retention_days is None:
            with target.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(entry, ensure_ascii=False) + "\n")
            return target

        cutoff = stamp - timedelta(days=retention_days)
        kept = []
        for existing in _read_entries(target):
            logged_at = _parse_timestamp(existing.get("timestamp"))
            if logged_at is not None and logged_at > cutoff:
                kept.append(existing)
        kept.append(entry)
        with target.open("w", encoding="utf-8") as handle:
            for item in kept:
                handle.write(json.dumps(item, ensure_ascii=False) + "\n")
    return target


def list_activity(
    user_id: str | None = None,
    *,
    path: str | Path | None = None,
    event: str | None = None,
) -> list[dict[str, Any]]:
    """Return logged entries oldest first, optionally filtered by user and event."""
    entries = _read_entries(_resolve_log_path(path))
    return [
        entry
        for entry in entries
        if (user_id is None or entry.get("user_id") == user_id)
        and (event is None or entry.get("event") == event)
    ]
