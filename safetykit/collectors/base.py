from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import requests

from safetykit.errors import UpstreamUnavailableError
from safetykit.http_client import HttpClient
from safetykit.models import ScanTarget, TargetKind


class ServiceClient:
    """Thin wrapper over one external HTTP service."""
    name: str

    def __init__(self, settings, http: Optional[HttpClient] = None):
        self.settings = settings
        self.http = http or HttpClient.from_settings(settings)

    def _fetch(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = self.http.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise UpstreamUnavailableError(self.name, f"{type(e).__name__}: {e}")
        if not resp.ok:
            raise UpstreamUnavailableError(
                self.name, f"HTTP {resp.status_code} {resp.reason or ''}".strip(),
                status=resp.status_code,
            )
        return resp

    def _json(self, resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            raise UpstreamUnavailableError(self.name, "response is not valid JSON")

    def _get_json(self, url: str, **kwargs) -> Any:
        """GET returning decoded JSON; any failure becomes UpstreamUnavailableError."""
        return self._json(self._fetch("GET", url, **kwargs))


class Collector(ServiceClient, ABC):
    """One signal source. `collect` returns a partial signal mapping."""
    kinds: Tuple[TargetKind, ...] = ()
    primary: bool = False

    def applies_to(self, target: ScanTarget) -> bool:
        return target.kind in self.kinds

    @abstractmethod
    def collect(self, target: ScanTarget) -> Dict[str, Any]:
        pass
