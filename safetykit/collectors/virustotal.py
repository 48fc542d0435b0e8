# -*- coding: utf-8 -*-
"""
VirusTotal URL reputation (API v3).

Submit the URL, then poll the analysis until VirusTotal reports it completed.
The engine tally (harmless/malicious/suspicious/undetected/timeout) becomes the
`reputation` signal.
"""
from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional

import requests

from safetykit.collectors.base import Collector
from safetykit.errors import ConfigurationError, UpstreamUnavailableError
from safetykit.models import ReputationTally, ScanTarget, TargetKind
from safetykit.polling import PollPolicy

logger = logging.getLogger(__name__)


def url_identifier(url: str) -> str:
    """VirusTotal URL id: unpadded urlsafe base64 of the URL."""
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii").rstrip("=")


class VirusTotalCollector(Collector):
    name = "virustotal"
    kinds = (TargetKind.URL,)
    primary = True

    def __init__(self, settings, http=None, poll: Optional[PollPolicy] = None):
        super().__init__(settings, http)
        self.api_key = settings.require_virustotal_key()
        self.poll = poll or PollPolicy(
            max_attempts=settings.poll_attempts,
            interval=settings.poll_interval,
        )

    def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.settings.virustotal_base}{path}"
        headers = {"x-apikey": self.api_key}
        try:
            resp = self.http.request(method, url, headers=headers, **kwargs)
        except requests.RequestException as e:
            raise UpstreamUnavailableError(self.name, f"{type(e).__name__}: {e}")

        if resp.status_code in (401, 403):
            raise ConfigurationError("VirusTotal API Key is invalid or expired.")

        try:
            data = resp.json()
        except ValueError:
            data = {}

        if not resp.ok:
            message = (data.get("error") or {}).get("message") or f"HTTP {resp.status_code}"
            raise UpstreamUnavailableError(self.name, message, status=resp.status_code)
        return data

    def submit(self, url: str) -> str:
        """Submit a URL for analysis. Returns the analysis id."""
        data = self._call("POST", "/urls", data={"url": url})
        try:
            return data["data"]["id"]
        except (KeyError, TypeError):
            raise UpstreamUnavailableError(self.name, "submission returned no analysis id")

    def fetch_report(self, analysis_id: str) -> Optional[ReputationTally]:
        """One poll step: the tally when completed, None while queued."""
        data = self._call("GET", f"/analyses/{analysis_id}")
        attributes = (data.get("data") or {}).get("attributes") or {}
        if attributes.get("status") != "completed":
            return None
        return ReputationTally.from_stats(attributes.get("stats") or {})

    def collect(self, target: ScanTarget) -> Dict[str, Any]:
        url = target.value
        analysis_id = self.submit(url)
        logger.info("Submitted %s to VirusTotal (analysis %s)", url, analysis_id)

        tally = self.poll.run(lambda: self.fetch_report(analysis_id), what="VirusTotal report")
        return {
            "reputation": tally,
            "reputation_link": f"{self.settings.virustotal_gui_base}/{url_identifier(url)}/detection",
        }
