from safetykit.collectors.base import Collector
from safetykit.models import TargetKind


def feed_contains(feed_text: str, url: str) -> bool:
    """Exact line match against a newline-delimited feed."""
    wanted = url.strip()
    return any(line.strip() == wanted for line in feed_text.splitlines())


class BlocklistCollector(Collector):
    """OpenPhish public feed."""
    name = "openphish"
    kinds = (TargetKind.URL,)

    def collect(self, target):
        resp = self._fetch("GET", self.settings.openphish_feed_url)
        return {"is_on_blocklist": feed_contains(resp.text or "", target.value)}
