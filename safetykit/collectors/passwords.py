# -*- coding: utf-8 -*-
"""
Password checks.
- Strength estimate (zxcvbn), computed locally
- Breached-password lookup (Have I Been Pwned range API)

k-anonymity: only the first 5 hex chars of the SHA-1 leave this process; the
suffix is matched locally against the returned "SUFFIX:COUNT" lines.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import requests
from zxcvbn import zxcvbn

from safetykit.errors import InvalidInputError, UpstreamUnavailableError
from safetykit.http_client import HttpClient

SOURCE = "pwnedpasswords"
PREFIX_LEN = 5

STRENGTH_LABELS = ("Very Weak", "Weak", "Fair", "Strong", "Very Strong")
# zxcvbn refuses longer input; the estimate for the prefix is a lower bound
MAX_STRENGTH_INPUT = 72
CRACK_TIME_SCENARIOS = (
    "online_throttling_100_per_hour",
    "online_no_throttling_10_per_second",
    "offline_slow_hashing_1e4_per_second",
    "offline_fast_hashing_1e10_per_second",
)


@dataclass
class PasswordStrength:
    score: int                      # 0..4
    label: str
    guesses: float
    crack_times: Dict[str, str] = field(default_factory=dict)
    warning: str = ""
    suggestions: List[str] = field(default_factory=list)


def password_strength(password: str) -> PasswordStrength:
    """zxcvbn estimate: score, label, crack-time displays and feedback."""
    if not password:
        raise InvalidInputError("No password provided")

    result = zxcvbn(password[:MAX_STRENGTH_INPUT])
    feedback = result.get("feedback") or {}
    displays = result.get("crack_times_display") or {}
    score = int(result["score"])
    return PasswordStrength(
        score=score,
        label=STRENGTH_LABELS[score],
        guesses=float(result.get("guesses") or 0),
        crack_times={k: str(displays[k]) for k in CRACK_TIME_SCENARIOS if k in displays},
        warning=feedback.get("warning") or "",
        suggestions=list(feedback.get("suggestions") or []),
    )


def sha1_split(password: str) -> Tuple[str, str]:
    """Uppercase SHA-1 hex split into (prefix, suffix)."""
    digest = hashlib.sha1(password.encode("utf-8")).hexdigest().upper()
    return digest[:PREFIX_LEN], digest[PREFIX_LEN:]


def count_in_range(range_text: str, suffix: str) -> int:
    wanted = suffix.upper()
    for line in range_text.splitlines():
        line_suffix, _, count = line.strip().partition(":")
        if not line_suffix:
            continue
        if line_suffix.upper() == wanted:
            try:
                return int(count or 0)
            except ValueError:
                return 0
    return 0


def check_password_breach(password: str, settings, http: Optional[HttpClient] = None) -> int:
    """Number of times the password appears in known breaches (0 if never)."""
    if not password:
        raise InvalidInputError("No password provided")

    http = http or HttpClient.from_settings(settings)
    prefix, suffix = sha1_split(password)
    try:
        resp = http.get(
            f"{settings.pwned_range_url}/{prefix}",
            headers={"Accept": "text/plain", "Add-Padding": "true"},
        )
    except requests.RequestException as e:
        raise UpstreamUnavailableError(SOURCE, f"{type(e).__name__}: {e}")
    if not resp.ok:
        raise UpstreamUnavailableError(SOURCE, f"HTTP {resp.status_code}", status=resp.status_code)

    return count_in_range(resp.text or "", suffix)
