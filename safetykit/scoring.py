# -*- coding: utf-8 -*-
"""
Scoring Module.
Pure functions: signal bundle in, Verdict out. No I/O.

URL targets get a 0-100 score built from independent deductions.
Email and header targets get a tier decision only.
"""
from __future__ import annotations

from typing import Callable, List, NamedTuple, Tuple

from safetykit.models import (
    EmailSignals,
    HeaderSignals,
    Signals,
    SslStatus,
    UrlSignals,
    Verdict,
    VerdictType,
)
from safetykit.verdicts import email_verdict, header_verdict, url_verdict

MAX_SCORE = 100
REDIRECT_LIMIT = 2


class Deduction(NamedTuple):
    points: int
    reason: str
    applies: Callable[[UrlSignals], bool]


def _incomplete(s: UrlSignals) -> bool:
    t = s.reputation
    return t.timeout > 0 or t.undetected > t.total / 2


# a missing tally contributes no deduction
URL_DEDUCTIONS: Tuple[Deduction, ...] = (
    Deduction(50, "Flagged as malicious by at least one engine",
              lambda s: s.reputation is not None and s.reputation.malicious > 0),
    Deduction(20, "Flagged as suspicious by at least one engine",
              lambda s: s.reputation is not None and s.reputation.suspicious > 0),
    Deduction(10, "Scan incomplete or mostly undetected",
              lambda s: s.reputation is not None and _incomplete(s)),
    Deduction(10, "URL contains a suspicious keyword",
              lambda s: s.is_suspicious_keyword),
    Deduction(40, "Listed on a phishing blocklist",
              lambda s: s.is_on_blocklist),
    Deduction(30, "SSL certificate invalid or check failed",
              lambda s: s.ssl_status in (SslStatus.INVALID, SslStatus.ERROR)),
    Deduction(20, "Hosted in a high-risk country",
              lambda s: s.is_high_risk_geo),
    Deduction(15, "More than two redirects",
              lambda s: s.redirect_count > REDIRECT_LIMIT),
)


def url_score(signals: UrlSignals) -> Tuple[int, List[str]]:
    """Return (score, reasons). Score is clamped to [0, 100]."""
    score = MAX_SCORE
    reasons: List[str] = []
    for d in URL_DEDUCTIONS:
        if d.applies(signals):
            score -= d.points
            reasons.append(f"{d.reason} (-{d.points})")
    return max(0, score), reasons


def score_url(signals: UrlSignals) -> Verdict:
    value, reasons = url_score(signals)
    return url_verdict(value, reasons)


def classify_email(signals: EmailSignals) -> Verdict:
    rep = signals.reputation
    if rep is None:
        return email_verdict(VerdictType.INFO, signals.address, "")

    reasons = []
    if rep.blacklisted:
        reasons.append("Address is blacklisted")
    if rep.suspicious:
        reasons.append("Address is marked suspicious")
    if rep.credentials_leaked:
        reasons.append("Credentials for this address have leaked")
    if rep.data_breach:
        reasons.append("Address appears in a data breach")
    if rep.reputation == "low":
        reasons.append("Reputation is low")

    if reasons:
        vtype = VerdictType.DANGER
    elif rep.reputation in ("medium", "unknown"):
        vtype = VerdictType.WARNING
    elif rep.reputation == "high":
        vtype = VerdictType.SAFE
    else:
        vtype = VerdictType.INFO
    return email_verdict(vtype, signals.address, rep.reputation, reasons)


def sender_mismatch(signals: HeaderSignals) -> bool:
    """From and Reply-To both present and different (case-insensitive)."""
    if not signals.from_address or not signals.reply_to_address:
        return False
    return signals.from_address.lower() != signals.reply_to_address.lower()


def is_phishing_likely(signals: HeaderSignals) -> bool:
    return (
        signals.spf == "fail"
        or signals.dkim == "fail"
        or signals.dmarc == "fail"
        or sender_mismatch(signals)
    )


def classify_headers(signals: HeaderSignals) -> Verdict:
    reasons = []
    for name in ("spf", "dkim", "dmarc"):
        if getattr(signals, name) == "fail":
            reasons.append(f"{name.upper()} failed")
    if sender_mismatch(signals):
        reasons.append("From and Reply-To addresses differ")

    if is_phishing_likely(signals):
        return header_verdict(VerdictType.DANGER, reasons)
    if signals.spf == "softfail" or signals.dkim in ("temperror", "permerror"):
        return header_verdict(VerdictType.WARNING, [
            f"SPF {signals.spf}" if signals.spf == "softfail" else f"DKIM {signals.dkim}"
        ])
    if signals.spf == "pass" and signals.dkim == "pass":
        return header_verdict(VerdictType.SAFE)
    return header_verdict(VerdictType.INFO)


def score(signals: Signals) -> Verdict:
    """Single entry point: dispatch on the bundle variant."""
    if isinstance(signals, UrlSignals):
        return score_url(signals)
    if isinstance(signals, EmailSignals):
        return classify_email(signals)
    if isinstance(signals, HeaderSignals):
        return classify_headers(signals)
    raise TypeError(f"Unsupported signal bundle: {type(signals).__name__}")
