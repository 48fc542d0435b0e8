from safetykit.collectors.base import Collector
from safetykit.models import TargetKind


def has_suspicious_keyword(url, keywords):
    lowered = url.lower()
    return any(k.lower() in lowered for k in keywords)


class KeywordCollector(Collector):
    """Local check, no network."""
    name = "keywords"
    kinds = (TargetKind.URL,)

    def collect(self, target):
        return {
            "is_suspicious_keyword": has_suspicious_keyword(
                target.value, self.settings.suspicious_keywords
            )
        }
