# -*- coding: utf-8 -*-
"""
Configuration.
All credentials and endpoints live in one Settings object that is handed to
each collector. Nothing else in the package reads the environment.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from safetykit.errors import ConfigurationError

DEFAULT_HIGH_RISK_COUNTRIES = ("RU", "CN", "IR", "KP", "SY")
DEFAULT_SUSPICIOUS_KEYWORDS = (
    "login",
    "secure-update",
    "paypal-verification",
    "bank",
    "account",
    "verify",
)
DEFAULT_CACHE_FILE = Path.home() / ".safetykit" / "scan_cache.db"


@dataclass
class Settings:
    virustotal_api_key: Optional[str] = None
    emailrep_api_key: Optional[str] = None
    ipinfo_token: Optional[str] = None

    virustotal_base: str = "https://www.virustotal.com/api/v3"
    virustotal_gui_base: str = "https://www.virustotal.com/gui/url"
    emailrep_base: str = "https://emailrep.io"
    ssllabs_base: str = "https://api.ssllabs.com/api/v3"
    ssl_checker_base: str = "https://ssl-checker.io/api/v1/check"
    dns_resolver_url: str = "https://dns.google/resolve"
    ip_api_base: str = "http://ip-api.com/json"
    ipinfo_url: str = "https://ipinfo.io/json"
    openphish_feed_url: str = "https://openphish.com/feed.txt"
    pwned_range_url: str = "https://api.pwnedpasswords.com/range"

    user_agent: str = "SafetyKit/1.0 (reputation-aggregator)"
    http_timeout: float = 12
    http_retries: int = 3

    collector_timeout: float = 20.0
    poll_attempts: int = 15
    poll_interval: float = 3.0
    max_redirects: int = 10

    high_risk_countries: Tuple[str, ...] = DEFAULT_HIGH_RISK_COUNTRIES
    suspicious_keywords: Tuple[str, ...] = DEFAULT_SUSPICIOUS_KEYWORDS

    cache_path: Optional[Path] = field(default=None)
    cache_ttl_hours: int = 24

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from process environment (or any mapping)."""
        env = os.environ if environ is None else environ

        settings = cls(
            virustotal_api_key=env.get("VIRUSTOTAL_API_KEY") or None,
            emailrep_api_key=env.get("EMAILREP_API_KEY") or None,
            ipinfo_token=env.get("IPINFO_TOKEN") or None,
        )

        cache = env.get("SAFETYKIT_CACHE")
        if cache:
            settings.cache_path = Path(cache).expanduser()

        timeout = env.get("SAFETYKIT_COLLECTOR_TIMEOUT")
        if timeout:
            try:
                settings.collector_timeout = float(timeout)
            except ValueError:
                raise ConfigurationError(
                    f"SAFETYKIT_COLLECTOR_TIMEOUT must be a number, got {timeout!r}"
                )

        return settings

    def require_virustotal_key(self) -> str:
        if not self.virustotal_api_key:
            raise ConfigurationError(
                "VirusTotal API key not found. Set VIRUSTOTAL_API_KEY to scan URLs."
            )
        return self.virustotal_api_key
