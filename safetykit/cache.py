# -*- coding: utf-8 -*-
"""
Scan Cache Module.
Short-lived result cache keyed by the canonical target string.
- MemoryCache: per-process dict
- SqliteCache: local SQLite file with a TTL
"""
from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class MemoryCache:
    """Unbounded in-memory cache. Fine for one session and for tests."""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self._data.get(key)

    def put(self, key: str, report: Dict[str, Any]) -> None:
        self._data[key] = report

    def clear(self) -> int:
        count = len(self._data)
        self._data.clear()
        return count


class SqliteCache:
    def __init__(self, path: Path, ttl_hours: int = 24):
        self.path = Path(path)
        self.ttl = timedelta(hours=ttl_hours)
        self._ensure_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.path))

    def _ensure_db(self):
        """Ensure database and table exist."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        conn = self._connect()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS scans (
                    key TEXT PRIMARY KEY,
                    report TEXT,
                    timestamp TEXT
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get a cached report for a target key.
        Returns None if not cached, expired or unreadable.
        """
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT report, timestamp FROM scans WHERE key = ?", (key,)
            ).fetchone()
        finally:
            conn.close()

        if not row:
            return None

        report_json, timestamp_str = row

        try:
            cached_time = datetime.fromisoformat(timestamp_str)
        except (TypeError, ValueError):
            return None
        if datetime.now() - cached_time > self.ttl:
            return None  # Expired

        try:
            return json.loads(report_json)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable cache entry for %s", key[:60])
            return None

    def put(self, key: str, report: Dict[str, Any]) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT OR REPLACE INTO scans (key, report, timestamp)
                VALUES (?, ?, ?)
                """,
                (key, json.dumps(report), datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def clear(self) -> int:
        """Clear all cached entries. Returns number of entries deleted."""
        conn = self._connect()
        try:
            count = conn.execute("SELECT COUNT(*) FROM scans").fetchone()[0]
            conn.execute("DELETE FROM scans")
            conn.commit()
        finally:
            conn.close()
        return count
