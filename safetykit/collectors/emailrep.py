from urllib.parse import quote

from safetykit.collectors.base import Collector
from safetykit.errors import UpstreamUnavailableError
from safetykit.models import EmailReputation, TargetKind


class EmailRepCollector(Collector):
    name = "emailrep"
    kinds = (TargetKind.EMAIL,)
    primary = True

    def collect(self, target):
        headers = {"User-Agent": self.settings.user_agent}
        if self.settings.emailrep_api_key:
            headers["Key"] = self.settings.emailrep_api_key

        url = f"{self.settings.emailrep_base}/{quote(target.value, safe='@')}"
        data = self._get_json(url, headers=headers)
        if not isinstance(data, dict):
            raise UpstreamUnavailableError(self.name, "unexpected response shape")
        return {"reputation": EmailReputation.from_response(data)}
