# -*- coding: utf-8 -*-
"""
Server geolocation.
Resolve the host over DNS-over-HTTPS, then geolocate the first A record.
"""
from __future__ import annotations

import ipaddress
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from safetykit.collectors.base import Collector
from safetykit.errors import UpstreamUnavailableError
from safetykit.models import GeoInfo, TargetKind

logger = logging.getLogger(__name__)

DNS_TYPE_A = 1
GEO_FIELDS = "status,message,country,countryCode,regionName,city"


def _is_ipv4(host: str) -> bool:
    try:
        return isinstance(ipaddress.ip_address(host), ipaddress.IPv4Address)
    except ValueError:
        return False


class GeoCollector(Collector):
    name = "geolocation"
    kinds = (TargetKind.URL,)

    def resolve(self, host: str) -> Optional[str]:
        if _is_ipv4(host):
            return host

        data = self._get_json(
            self.settings.dns_resolver_url, params={"name": host, "type": "A"}
        )
        for answer in (data or {}).get("Answer") or []:
            if answer.get("type") == DNS_TYPE_A and answer.get("data"):
                return answer["data"]
        return None

    def locate(self, ip: str) -> GeoInfo:
        data = self._get_json(
            f"{self.settings.ip_api_base}/{ip}", params={"fields": GEO_FIELDS}
        )
        if (data or {}).get("status") != "success":
            raise UpstreamUnavailableError(
                self.name, (data or {}).get("message") or "geolocation lookup failed"
            )
        return GeoInfo(
            country=data.get("country") or "",
            country_code=data.get("countryCode") or "",
            region=data.get("regionName") or "",
            city=data.get("city") or "",
            ip=ip,
        )

    def collect(self, target) -> Dict[str, Any]:
        host = urlparse(target.value).hostname or ""
        ip = self.resolve(host)
        if not ip:
            logger.info("No A record for %s; skipping geolocation", host)
            return {}

        geo = self.locate(ip)
        high_risk = {c.upper() for c in self.settings.high_risk_countries}
        return {
            "geo": geo,
            "is_high_risk_geo": geo.country_code.upper() in high_risk,
        }
