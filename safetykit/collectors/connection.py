# -*- coding: utf-8 -*-
"""
Connection check: what the outside world sees of this machine.
ip-api.com first, ipinfo.io as fallback when a token is configured.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from safetykit.collectors.base import ServiceClient
from safetykit.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

SELF_FIELDS = "status,message,country,countryCode,regionName,city,isp,org,query,proxy"


@dataclass
class ConnectionInfo:
    ip: str
    city: str = ""
    region: str = ""
    country: str = ""
    isp: str = ""
    org: str = ""
    proxy: bool = False
    vpn: bool = False
    source: str = "ip-api"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ConnectionChecker(ServiceClient):
    name = "connection"

    def _from_ip_api(self) -> ConnectionInfo:
        data = self._get_json(f"{self.settings.ip_api_base}/", params={"fields": SELF_FIELDS})
        if (data or {}).get("status") != "success":
            raise UpstreamUnavailableError("ip-api", (data or {}).get("message") or "lookup failed")
        return ConnectionInfo(
            ip=data.get("query") or "",
            city=data.get("city") or "",
            region=data.get("regionName") or "",
            country=data.get("country") or "",
            isp=data.get("isp") or "",
            org=data.get("org") or "",
            # ip-api reports VPN exits and proxies under one flag
            proxy=bool(data.get("proxy")),
            vpn=bool(data.get("proxy")),
        )

    def _from_ipinfo(self, token: str) -> ConnectionInfo:
        data = self._get_json(self.settings.ipinfo_url, params={"token": token}) or {}
        privacy = data.get("privacy") or {}
        return ConnectionInfo(
            ip=data.get("ip") or "",
            city=data.get("city") or "",
            region=data.get("region") or "",
            country=data.get("country") or "",
            org=data.get("org") or "",
            proxy=bool(privacy.get("proxy")),
            vpn=bool(privacy.get("vpn")),
            source="ipinfo",
        )

    def check(self) -> ConnectionInfo:
        try:
            return self._from_ip_api()
        except UpstreamUnavailableError as e:
            token: Optional[str] = self.settings.ipinfo_token
            if not token:
                raise
            logger.warning("ip-api lookup failed (%s); trying ipinfo", e)
            return self._from_ipinfo(token)


def check_connection(settings, http=None) -> ConnectionInfo:
    return ConnectionChecker(settings, http).check()
