# -*- coding: utf-8 -*-
"""
SSL Labs grade lookup.
Uses cached assessments only (fromCache=on, maxAge=24) so a scan never
triggers a fresh multi-minute SSL Labs run.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

from safetykit.collectors.base import Collector
from safetykit.models import SslStatus, TargetKind

FAILING_GRADES = ("F", "T")


def ssl_status_from_assessment(data: Dict[str, Any]) -> Tuple[SslStatus, Optional[str]]:
    """Map an SSL Labs `analyze` response to (status, grade)."""
    status = data.get("status")
    if status == "ERROR":
        return SslStatus.ERROR, None
    if status != "READY":
        return SslStatus.UNKNOWN, None

    endpoints = data.get("endpoints") or []
    if not endpoints:
        return SslStatus.UNKNOWN, None

    grade = endpoints[0].get("grade")
    if not grade:
        return SslStatus.INVALID, None
    if grade in FAILING_GRADES:
        return SslStatus.INVALID, grade
    return SslStatus.VALID, grade


class SslGradeCollector(Collector):
    name = "ssllabs"
    kinds = (TargetKind.URL,)

    def collect(self, target):
        host = urlparse(target.value).hostname
        data = self._get_json(
            f"{self.settings.ssllabs_base}/analyze",
            params={"host": host, "fromCache": "on", "maxAge": 24},
        )
        status, grade = ssl_status_from_assessment(data or {})
        return {"ssl_status": status, "ssl_grade": grade}
