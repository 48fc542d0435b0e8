import unittest

from safetykit.models import (
    EmailReputation,
    EmailSignals,
    HeaderSignals,
    ReputationTally,
    SslStatus,
    UrlSignals,
    VerdictType,
)
from safetykit.scoring import classify_email, classify_headers, score, sender_mismatch, url_score

URL = "https://example.com/"


def clean_url_signals(**overrides):
    base = dict(
        url=URL,
        reputation=ReputationTally(harmless=70, undetected=10),
        ssl_status=SslStatus.VALID,
        ssl_grade="A",
    )
    base.update(overrides)
    return UrlSignals(**base)


class TestUrlScore(unittest.TestCase):
    def test_clean_url_scores_100(self):
        verdict = score(clean_url_signals())
        self.assertEqual(verdict.score, 100)
        self.assertEqual(verdict.type, VerdictType.SAFE)
        self.assertEqual(verdict.reasons, ())

    def test_everything_wrong_clamps_to_zero(self):
        signals = clean_url_signals(
            reputation=ReputationTally(malicious=5, suspicious=3, timeout=1),
            is_suspicious_keyword=True,
            is_on_blocklist=True,
            ssl_status=SslStatus.INVALID,
            is_high_risk_geo=True,
            redirect_count=3,
        )
        value, reasons = url_score(signals)
        self.assertEqual(value, 0)
        self.assertEqual(len(reasons), 8)
        self.assertEqual(score(signals).type, VerdictType.DANGER)

    def test_missing_reputation_deducts_nothing(self):
        value, reasons = url_score(UrlSignals(url=URL))
        self.assertEqual(value, 100)
        self.assertEqual(reasons, [])

    def test_mostly_undetected(self):
        value, reasons = url_score(clean_url_signals(
            reputation=ReputationTally(harmless=2, undetected=10)))
        self.assertEqual(value, 90)
        self.assertEqual(reasons, ["Scan incomplete or mostly undetected (-10)"])

    def test_undetected_half_is_not_mostly(self):
        value, _ = url_score(clean_url_signals(
            reputation=ReputationTally(harmless=5, undetected=5)))
        self.assertEqual(value, 100)
        value, reasons = url_score(clean_url_signals(
            reputation=ReputationTally(harmless=4, undetected=5)))
        self.assertEqual(value, 90)
        self.assertEqual(reasons, ["Scan incomplete or mostly undetected (-10)"])

    def test_thresholds(self):
        cases = [
            (dict(redirect_count=3), 85, VerdictType.SAFE),
            (dict(is_suspicious_keyword=True), 90, VerdictType.SAFE),
            (dict(reputation=ReputationTally(harmless=60, suspicious=1)), 80, VerdictType.WARNING),
            (dict(ssl_status=SslStatus.ERROR), 70, VerdictType.WARNING),
            (dict(is_on_blocklist=True), 60, VerdictType.DANGER),
            (dict(reputation=ReputationTally(harmless=60, malicious=1)), 50, VerdictType.DANGER),
        ]
        for overrides, expected_score, expected_type in cases:
            verdict = score(clean_url_signals(**overrides))
            self.assertEqual(verdict.score, expected_score, overrides)
            self.assertEqual(verdict.type, expected_type, overrides)

    def test_two_redirects_are_tolerated(self):
        self.assertEqual(url_score(clean_url_signals(redirect_count=2))[0], 100)

    def test_unknown_ssl_is_not_penalised(self):
        self.assertEqual(url_score(clean_url_signals(ssl_status=SslStatus.UNKNOWN))[0], 100)

    def test_adding_a_risk_never_raises_the_score(self):
        flags = [
            dict(is_suspicious_keyword=True),
            dict(is_on_blocklist=True),
            dict(ssl_status=SslStatus.INVALID),
            dict(is_high_risk_geo=True),
            dict(redirect_count=5),
            dict(reputation=ReputationTally(harmless=10, malicious=1)),
        ]
        base = clean_url_signals(is_suspicious_keyword=True)
        base_score = url_score(base)[0]
        for flag in flags:
            combined = dict(is_suspicious_keyword=True)
            combined.update(flag)
            self.assertLessEqual(url_score(clean_url_signals(**combined))[0], base_score, flag)

    def test_summary_mentions_score(self):
        verdict = score(clean_url_signals(is_high_risk_geo=True))
        self.assertIn("80/100", verdict.summary)


class TestClassifyEmail(unittest.TestCase):
    def _verdict(self, **rep):
        return classify_email(EmailSignals(address="bob@example.com",
                                           reputation=EmailReputation(**rep)))

    def test_no_reputation_is_info(self):
        verdict = classify_email(EmailSignals(address="bob@example.com"))
        self.assertEqual(verdict.type, VerdictType.INFO)
        self.assertIsNone(verdict.score)

    def test_high_is_safe(self):
        verdict = self._verdict(reputation="high")
        self.assertEqual(verdict.type, VerdictType.SAFE)
        self.assertIn("bob@example.com", verdict.summary)

    def test_medium_and_unknown_are_warnings(self):
        self.assertEqual(self._verdict(reputation="medium").type, VerdictType.WARNING)
        self.assertEqual(self._verdict(reputation="unknown").type, VerdictType.WARNING)

    def test_low_is_danger(self):
        self.assertEqual(self._verdict(reputation="low").type, VerdictType.DANGER)

    def test_risk_flags_override_high_reputation(self):
        for flag in ("suspicious", "blacklisted", "credentials_leaked", "data_breach"):
            verdict = self._verdict(reputation="high", **{flag: True})
            self.assertEqual(verdict.type, VerdictType.DANGER, flag)
            self.assertEqual(len(verdict.reasons), 1)

    def test_unrecognised_reputation_is_info(self):
        self.assertEqual(self._verdict(reputation="none").type, VerdictType.INFO)


class TestClassifyHeaders(unittest.TestCase):
    def test_auth_failure_is_danger(self):
        for field in ("spf", "dkim", "dmarc"):
            verdict = classify_headers(HeaderSignals(**{field: "fail"}))
            self.assertEqual(verdict.type, VerdictType.DANGER, field)
            self.assertEqual(verdict.reasons, (f"{field.upper()} failed",))

    def test_reply_to_mismatch_is_danger(self):
        signals = HeaderSignals(spf="pass", dkim="pass",
                                from_address="ceo@corp.example",
                                reply_to_address="ceo@gmail.example")
        verdict = classify_headers(signals)
        self.assertEqual(verdict.type, VerdictType.DANGER)
        self.assertIn("From and Reply-To addresses differ", verdict.reasons)

    def test_mismatch_ignores_case(self):
        signals = HeaderSignals(from_address="Bob@Example.com", reply_to_address="bob@example.com")
        self.assertFalse(sender_mismatch(signals))

    def test_missing_reply_to_is_not_a_mismatch(self):
        self.assertFalse(sender_mismatch(HeaderSignals(from_address="a@example.com")))

    def test_soft_failures_are_warnings(self):
        self.assertEqual(classify_headers(HeaderSignals(spf="softfail")).type, VerdictType.WARNING)
        self.assertEqual(classify_headers(HeaderSignals(dkim="temperror")).type, VerdictType.WARNING)
        self.assertEqual(classify_headers(HeaderSignals(dkim="permerror")).type, VerdictType.WARNING)

    def test_spf_and_dkim_pass_is_safe(self):
        verdict = classify_headers(HeaderSignals(spf="pass", dkim="pass", dmarc="none"))
        self.assertEqual(verdict.type, VerdictType.SAFE)

    def test_inconclusive_is_info(self):
        self.assertEqual(classify_headers(HeaderSignals(spf="pass")).type, VerdictType.INFO)
        self.assertEqual(classify_headers(HeaderSignals()).type, VerdictType.INFO)


class TestDispatch(unittest.TestCase):
    def test_unknown_bundle(self):
        with self.assertRaises(TypeError):
            score(object())


if __name__ == "__main__":
    unittest.main()
