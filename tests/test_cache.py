import shutil
import sqlite3
import tempfile
import unittest
from datetime import datetime, timedelta
from pathlib import Path

from safetykit.cache import MemoryCache, SqliteCache

REPORT = {"target": {"kind": "url", "value": "https://example.com"}, "verdictType": "safe"}


class TestMemoryCache(unittest.TestCase):
    def test_put_get_clear(self):
        cache = MemoryCache()
        self.assertIsNone(cache.get("url:https://example.com"))
        cache.put("url:https://example.com", REPORT)
        self.assertEqual(cache.get("url:https://example.com"), REPORT)
        self.assertEqual(cache.clear(), 1)
        self.assertIsNone(cache.get("url:https://example.com"))


class TestSqliteCache(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.db_path = Path(self.test_dir) / "nested" / "cache.db"

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def _write_raw(self, key, report_text, timestamp):
        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.execute(
                "INSERT OR REPLACE INTO scans (key, report, timestamp) VALUES (?, ?, ?)",
                (key, report_text, timestamp),
            )
            conn.commit()
        finally:
            conn.close()

    def test_round_trip_across_instances(self):
        SqliteCache(self.db_path).put("url:https://example.com", REPORT)
        self.assertEqual(SqliteCache(self.db_path).get("url:https://example.com"), REPORT)

    def test_missing_key(self):
        self.assertIsNone(SqliteCache(self.db_path).get("email:nobody@example.com"))

    def test_expired_entry(self):
        cache = SqliteCache(self.db_path, ttl_hours=1)
        old = (datetime.now() - timedelta(hours=2)).isoformat()
        self._write_raw("url:https://old.example", '{"verdictType": "safe"}', old)
        self.assertIsNone(cache.get("url:https://old.example"))

    def test_unreadable_entry(self):
        cache = SqliteCache(self.db_path)
        self._write_raw("url:https://bad.example", "{not json", datetime.now().isoformat())
        self.assertIsNone(cache.get("url:https://bad.example"))

    def test_clear(self):
        cache = SqliteCache(self.db_path)
        cache.put("a", REPORT)
        cache.put("b", REPORT)
        self.assertEqual(cache.clear(), 2)
        self.assertIsNone(cache.get("a"))


if __name__ == "__main__":
    unittest.main()
