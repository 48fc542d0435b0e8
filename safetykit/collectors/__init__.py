from safetykit.collectors.base import Collector, ServiceClient
from safetykit.collectors.blocklist import BlocklistCollector
from safetykit.collectors.emailrep import EmailRepCollector
from safetykit.collectors.geo import GeoCollector
from safetykit.collectors.keywords import KeywordCollector
from safetykit.collectors.redirects import RedirectCollector
from safetykit.collectors.ssl_grade import SslGradeCollector
from safetykit.collectors.virustotal import VirusTotalCollector
from safetykit.models import ScanTarget, TargetKind


def build_collectors(settings, target: ScanTarget, http=None):
    """Collectors that apply to `target`. Missing credentials fail here, before any request."""
    if target.kind is TargetKind.URL:
        return [
            VirusTotalCollector(settings, http),
            KeywordCollector(settings, http),
            BlocklistCollector(settings, http),
            SslGradeCollector(settings, http),
            GeoCollector(settings, http),
            RedirectCollector(settings, http),
        ]
    if target.kind is TargetKind.EMAIL:
        return [EmailRepCollector(settings, http)]
    return []
