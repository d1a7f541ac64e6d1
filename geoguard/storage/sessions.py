"""SQLite-backed login session history for geoguard."""

from __future__ import annotations

from contextlib import closing
from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
import sqlite3
from typing import Any

from ..intel.models import GeoLocation, RiskVerdict

logger = logging.getLogger(__name__)

DB_PATH = Path.home() / ".geoguard" / "geoguard.db"
DB_PATH_ENV = "GEOGUARD_DB_PATH"
MAX_SESSIONS_PER_USER = 10


def _resolve_db_path(db_path: str | Path | None) -> Path:
    if db_path is not None:
        return Path(db_path)
    override = os.getenv(DB_PATH_ENV, "").strip()
    return Path(override) if override else DB_PATH


def _connect(db_path: str | Path | None = None) -> sqlite3.Connection:
    path = _resolve_db_path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS login_sessions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            address TEXT NOT NULL,
            device_info TEXT NOT NULL,
            country TEXT,
            region TEXT,
            city TEXT,
            risk_level TEXT NOT NULL,
            reasons TEXT NOT NULL,
            last_used TEXT NOT NULL,
            UNIQUE(user_id, address, device_info)
        )
        """
    )
    return conn


def record_session(
    user_id: str,
    address: str,
    device_info: str,
    location: GeoLocation,
    verdict: RiskVerdict,
    *,
    db_path: str | Path | None = None,
) -> None:
    """Insert or refresh a session and keep only the newest ones per user."""
    stamp = datetime.now(timezone.utc).isoformat()
    reasons = json.dumps(list(verdict.reasons), ensure_ascii=False)
    with closing(_connect(db_path)) as conn, conn:
        conn.execute(
            """
            INSERT INTO login_sessions(
                user_id, address, device_info, country, region, city, risk_level, reasons, last_used
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, address, device_info) DO UPDATE SET
                country=excluded.country,
                region=excluded.region,
                city=excluded.city,
                risk_level=excluded.risk_level,
                reasons=excluded.reasons,
                last_used=excluded.last_used
            """,
            (
                user_id,
                address,
                device_info,
                location.country,
                location.region,
                location.city,
                verdict.risk_level,
                reasons,
                stamp,
            ),
        )
        trimmed = conn.execute(
            """
            DELETE FROM login_sessions
            WHERE user_id = ? AND id NOT IN (
                SELECT id FROM login_sessions WHERE user_id = ?
                ORDER BY last_used DESC, id DESC LIMIT ?
            )
            """,
            (user_id, user_id, MAX_SESSIONS_PER_USER),
        ).rowcount
    if trimmed:
        logger.debug("Trimmed %d old sessions for user %s", trimmed, user_id)


def list_sessions(user_id: str, *, db_path: str | Path | None = None) -> list[dict[str, Any]]:
    with closing(_connect(db_path)) as conn, conn:
        rows = conn.execute(
            """
            SELECT address, device_info, country, region, city, risk_level, reasons, last_used
            FROM login_sessions WHERE user_id = ?
            ORDER BY last_used DESC, id DESC
            """,
            (user_id,),
        ).fetchall()
    sessions: list[dict[str, Any]] = []
    for address, device_info, country, region, city, risk_level, reasons, last_used in rows:
        try:
            decoded = json.loads(str(reasons))
        except json.JSONDecodeError:
            decoded = [str(reasons)]
        sessions.append(
            {
                "address": address,
                "device_info": device_info,
                "location": {"country": country, "region": region, "city": city},
                "risk_level": risk_level,
                "reasons": decoded,
                "last_used": last_used,
            }
        )
    return sessions


def known_addresses(user_id: str, *, db_path: str | Path | None = None) -> set[str]:
    with closing(_connect(db_path)) as conn, conn:
        rows = conn.execute(
            "SELECT DISTINCT address FROM login_sessions WHERE user_id = ?",
            (user_id,),
        ).fetchall()
    return {str(row[0]) for row in rows}


def revoke_other_sessions(
    user_id: str,
    address: str,
    device_info: str,
    *,
    db_path: str | Path | None = None,
) -> int:
    """Drop every session of ``user_id`` except the current one."""
    with closing(_connect(db_path)) as conn, conn:
        removed = conn.execute(
            """
            DELETE FROM login_sessions
            WHERE user_id = ? AND NOT (address = ? AND device_info = ?)
            """,
            (user_id, address, device_info),
        ).rowcount
    return int(removed)


def revoke_session(
    user_id: str,
    address: str,
    device_info: str,
    *,
    db_path: str | Path | None = None,
) -> bool:
    """Drop one session; ``False`` when it did not exist."""
    with closing(_connect(db_path)) as conn, conn:
        removed = conn.execute(
            "DELETE FROM login_sessions WHERE user_id = ? AND address = ? AND device_info = ?",
            (user_id, address, device_info),
        ).rowcount
    return removed > 0


def clear_sessions(user_id: str, *, db_path: str | Path | None = None) -> int:
    with closing(_connect(db_path)) as conn, conn:
        removed = conn.execute("DELETE FROM login_sessions WHERE user_id = ?", (user_id,)).rowcount
    return int(removed)
