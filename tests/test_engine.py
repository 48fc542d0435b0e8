import threading
import time
import unittest
from unittest import mock

from safetykit.cache import MemoryCache
from safetykit.collectors.base import Collector
from safetykit.config import Settings
from safetykit.engine import SafetyScanner
from safetykit.errors import (
    AnalysisTimeoutError,
    ConfigurationError,
    InvalidInputError,
    UpstreamUnavailableError,
)
from safetykit.models import (
    EmailReputation,
    EmailSignals,
    HeaderSignals,
    ReputationTally,
    TargetKind,
    UrlSignals,
    VerdictType,
)


class StubCollector(Collector):
    kinds = (TargetKind.URL, TargetKind.EMAIL)

    def __init__(self, name, result=None, error=None, primary=False, delay=0.0, kinds=None):
        super().__init__(Settings(), http=mock.Mock())
        self.name = name
        self.primary = primary
        self.result = result or {}
        self.error = error
        self.delay = delay
        if kinds is not None:
            self.kinds = kinds
        self.calls = 0
        self._lock = threading.Lock()

    def collect(self, target):
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result


def scanner_with(collectors, **settings):
    factory = mock.Mock(return_value=collectors)
    return SafetyScanner(Settings(**settings), cache=MemoryCache(), collector_factory=factory), factory


class TestUrlScan(unittest.TestCase):
    def test_partials_are_merged(self):
        scanner, _ = scanner_with([
            StubCollector("virustotal", {"reputation": ReputationTally(harmless=80)}, primary=True),
            StubCollector("keywords", {"is_suspicious_keyword": True}),
            StubCollector("redirects", {"redirect_count": 1}),
        ])
        report = scanner.scan("https://example.com/login")

        self.assertIsInstance(report.signals, UrlSignals)
        self.assertEqual(report.signals.reputation.harmless, 80)
        self.assertTrue(report.signals.is_suspicious_keyword)
        self.assertEqual(report.signals.redirect_count, 1)
        self.assertEqual(report.verdict.score, 90)
        self.assertEqual(report.verdict.type, VerdictType.SAFE)
        self.assertFalse(report.cached)

    def test_secondary_failure_degrades(self):
        scanner, _ = scanner_with([
            StubCollector("virustotal", {"reputation": ReputationTally(harmless=80)}, primary=True),
            StubCollector("openphish", error=UpstreamUnavailableError("openphish", "HTTP 503")),
        ])
        report = scanner.scan("https://example.com")

        self.assertEqual(report.signals.unavailable, ["openphish"])
        self.assertFalse(report.signals.is_on_blocklist)
        self.assertEqual(report.verdict.score, 100)

    def test_slow_secondary_is_dropped(self):
        scanner, _ = scanner_with(
            [
                StubCollector("virustotal", {"reputation": ReputationTally(harmless=80)}, primary=True),
                StubCollector("ssllabs", {"ssl_status": "never"}, delay=1.0),
            ],
            collector_timeout=0.05,
        )
        started = time.monotonic()
        report = scanner.scan("https://example.com")

        self.assertLess(time.monotonic() - started, 0.9)
        self.assertEqual(report.signals.unavailable, ["ssllabs"])
        self.assertEqual(report.signals.reputation.harmless, 80)

    def test_primary_is_waited_for_past_the_deadline(self):
        scanner, _ = scanner_with(
            [StubCollector("virustotal", {"reputation": ReputationTally(malicious=1)},
                           primary=True, delay=0.2)],
            collector_timeout=0.01,
        )
        report = scanner.scan("https://example.com")
        self.assertEqual(report.signals.reputation.malicious, 1)
        self.assertEqual(report.signals.unavailable, [])

    def test_primary_failure_propagates(self):
        scanner, _ = scanner_with([
            StubCollector("virustotal", error=UpstreamUnavailableError("virustotal", "Quota exceeded"),
                          primary=True),
            StubCollector("keywords", {"is_suspicious_keyword": True}),
        ])
        with self.assertRaises(UpstreamUnavailableError):
            scanner.scan("https://example.com")

    def test_primary_timeout_propagates(self):
        scanner, _ = scanner_with([
            StubCollector("virustotal", error=AnalysisTimeoutError("took too long"), primary=True),
        ])
        with self.assertRaises(AnalysisTimeoutError):
            scanner.scan("https://example.com")

    def test_inapplicable_collectors_are_skipped(self):
        email_only = StubCollector("emailrep", {"reputation": None}, kinds=(TargetKind.EMAIL,))
        scanner, _ = scanner_with([email_only])
        scanner.scan("https://example.com")
        self.assertEqual(email_only.calls, 0)

    def test_missing_virustotal_key(self):
        scanner = SafetyScanner(Settings(), cache=MemoryCache())
        with self.assertRaises(ConfigurationError):
            scanner.scan("https://example.com")


class TestOtherTargets(unittest.TestCase):
    def test_empty_input_runs_nothing(self):
        scanner, factory = scanner_with([])
        with self.assertRaises(InvalidInputError):
            scanner.scan("   ")
        factory.assert_not_called()

    def test_email_scan(self):
        scanner, _ = scanner_with([
            StubCollector("emailrep", {"reputation": EmailReputation(reputation="high")}, primary=True),
        ])
        report = scanner.scan("bob@example.com")
        self.assertIsInstance(report.signals, EmailSignals)
        self.assertEqual(report.verdict.type, VerdictType.SAFE)
        self.assertIsNone(report.verdict.score)

    def test_header_scan_is_local(self):
        scanner, factory = scanner_with([])
        report = scanner.scan(
            "Received: from x ([203.0.113.5])\n"
            "Authentication-Results: mx; spf=fail; dkim=pass\n"
            "From: a@example.com"
        )
        self.assertIsInstance(report.signals, HeaderSignals)
        self.assertEqual(report.verdict.type, VerdictType.DANGER)
        self.assertEqual(report.signals.ip_hops, ["203.0.113.5"])
        factory.assert_not_called()


class TestCaching(unittest.TestCase):
    def test_cache_hit_skips_collectors(self):
        vt = StubCollector("virustotal", {"reputation": ReputationTally(harmless=80)}, primary=True)
        scanner, factory = scanner_with([vt])

        first = scanner.scan("https://example.com")
        second = scanner.scan("  https://example.com ")

        self.assertEqual(vt.calls, 1)
        self.assertEqual(factory.call_count, 1)
        self.assertTrue(second.cached)
        self.assertEqual(second.verdict, first.verdict)
        self.assertEqual(second.to_dict(), first.to_dict())

    def test_use_cache_false_rescans(self):
        vt = StubCollector("virustotal", {"reputation": ReputationTally(harmless=80)}, primary=True)
        scanner, _ = scanner_with([vt])
        scanner.scan("https://example.com")
        report = scanner.scan("https://example.com", use_cache=False)
        self.assertEqual(vt.calls, 2)
        self.assertFalse(report.cached)

    def test_failed_scan_is_not_cached(self):
        vt = StubCollector("virustotal", error=AnalysisTimeoutError("slow"), primary=True)
        scanner, _ = scanner_with([vt])
        with self.assertRaises(AnalysisTimeoutError):
            scanner.scan("https://example.com")
        self.assertIsNone(scanner.cache.get("url:https://example.com"))


if __name__ == "__main__":
    unittest.main()
