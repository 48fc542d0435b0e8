from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union


class TargetKind(str, Enum):
    URL = "url"
    EMAIL = "email"
    HEADERS = "headers"


class SslStatus(str, Enum):
    VALID = "Valid"
    INVALID = "Invalid"
    ERROR = "Error"
    UNKNOWN = "Unknown"


class VerdictType(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"
    INFO = "info"


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScanTarget(ABC):
    kind: ClassVar[TargetKind]

    @property
    @abstractmethod
    def value(self) -> str:
        """The canonical input string for this target."""

    @property
    def cache_key(self) -> str:
        return f"{self.kind.value}:{self.value}"


@dataclass(frozen=True)
class UrlTarget(ScanTarget):
    raw_url: str
    kind = TargetKind.URL

    @property
    def value(self) -> str:
        return self.raw_url


@dataclass(frozen=True)
class EmailTarget(ScanTarget):
    address: str
    kind = TargetKind.EMAIL

    @property
    def value(self) -> str:
        return self.address


@dataclass(frozen=True)
class HeaderBlockTarget(ScanTarget):
    raw_text: str
    kind = TargetKind.HEADERS

    @property
    def value(self) -> str:
        return self.raw_text


def target_from_dict(data: Dict[str, Any]) -> ScanTarget:
    kind = TargetKind(data["kind"])
    if kind is TargetKind.URL:
        return UrlTarget(data["value"])
    if kind is TargetKind.EMAIL:
        return EmailTarget(data["value"])
    return HeaderBlockTarget(data["value"])


# ---------------------------------------------------------------------------
# Collector outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReputationTally:
    """Per-engine verdict counts from a multi-engine scanner."""
    harmless: int = 0
    malicious: int = 0
    suspicious: int = 0
    undetected: int = 0
    timeout: int = 0

    def __post_init__(self):
        for f in fields(self):
            v = getattr(self, f.name)
            if not isinstance(v, int) or v < 0:
                raise ValueError(f"{f.name} must be a non-negative integer, got {v!r}")

    @property
    def total(self) -> int:
        return self.harmless + self.malicious + self.suspicious + self.undetected + self.timeout

    @classmethod
    def from_stats(cls, stats: Dict[str, Any]) -> "ReputationTally":
        return cls(**{f.name: int(stats.get(f.name) or 0) for f in fields(cls)})

    def to_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class EmailReputation:
    reputation: str = "unknown"     # high | medium | low | unknown | none
    suspicious: bool = False
    blacklisted: bool = False
    credentials_leaked: bool = False
    data_breach: bool = False

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "EmailReputation":
        details = data.get("details") or {}

        def flag(name: str) -> bool:
            # emailrep.io nests most flags under "details"
            return bool(data.get(name) or details.get(name))

        return cls(
            reputation=str(data.get("reputation") or "").lower(),
            suspicious=flag("suspicious"),
            blacklisted=flag("blacklisted"),
            credentials_leaked=flag("credentials_leaked"),
            data_breach=flag("data_breach"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class GeoInfo:
    country: str = ""
    country_code: str = ""
    region: str = ""
    city: str = ""
    ip: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ip": self.ip,
            "country": self.country,
            "countryCode": self.country_code,
            "region": self.region,
            "city": self.city,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeoInfo":
        return cls(
            country=data.get("country") or "",
            country_code=data.get("countryCode") or "",
            region=data.get("region") or "",
            city=data.get("city") or "",
            ip=data.get("ip"),
        )


# ---------------------------------------------------------------------------
# Signal bundles
# ---------------------------------------------------------------------------

class _Signals:
    """Shared merge logic for the signal bundles."""

    def apply(self, partial: Dict[str, Any]) -> None:
        for key, value in partial.items():
            if key not in {f.name for f in fields(self)}:
                raise KeyError(f"{type(self).__name__} has no signal {key!r}")
            setattr(self, key, value)

    def mark_unavailable(self, source: str) -> None:
        if source not in self.unavailable:
            self.unavailable.append(source)


@dataclass
class UrlSignals(_Signals):
    url: str
    reputation: Optional[ReputationTally] = None
    reputation_link: Optional[str] = None
    is_suspicious_keyword: bool = False
    is_on_blocklist: bool = False
    ssl_status: SslStatus = SslStatus.UNKNOWN
    ssl_grade: Optional[str] = None
    geo: Optional[GeoInfo] = None
    is_high_risk_geo: bool = False
    redirect_count: int = 0
    unavailable: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "reputation": self.reputation.to_dict() if self.reputation else None,
            "reputationLink": self.reputation_link,
            "isSuspiciousKeyword": self.is_suspicious_keyword,
            "isOnBlocklist": self.is_on_blocklist,
            "sslStatus": self.ssl_status.value,
            "sslGrade": self.ssl_grade,
            "geo": self.geo.to_dict() if self.geo else None,
            "isHighRiskGeo": self.is_high_risk_geo,
            "redirectCount": self.redirect_count,
            "unavailable": list(self.unavailable),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UrlSignals":
        rep = data.get("reputation")
        geo = data.get("geo")
        return cls(
            url=data["url"],
            reputation=ReputationTally(**rep) if rep else None,
            reputation_link=data.get("reputationLink"),
            is_suspicious_keyword=bool(data.get("isSuspiciousKeyword")),
            is_on_blocklist=bool(data.get("isOnBlocklist")),
            ssl_status=SslStatus(data.get("sslStatus") or SslStatus.UNKNOWN.value),
            ssl_grade=data.get("sslGrade"),
            geo=GeoInfo.from_dict(geo) if geo else None,
            is_high_risk_geo=bool(data.get("isHighRiskGeo")),
            redirect_count=int(data.get("redirectCount") or 0),
            unavailable=list(data.get("unavailable") or []),
        )


@dataclass
class EmailSignals(_Signals):
    address: str
    reputation: Optional[EmailReputation] = None
    unavailable: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "emailRep": self.reputation.to_dict() if self.reputation else None,
            "unavailable": list(self.unavailable),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmailSignals":
        rep = data.get("emailRep")
        return cls(
            address=data["address"],
            reputation=EmailReputation(**rep) if rep else None,
            unavailable=list(data.get("unavailable") or []),
        )


@dataclass
class HeaderSignals(_Signals):
    received_headers: List[str] = field(default_factory=list)
    ip_hops: List[str] = field(default_factory=list)
    authentication_results: Optional[str] = None
    spf: Optional[str] = None
    dkim: Optional[str] = None
    dmarc: Optional[str] = None
    from_address: Optional[str] = None
    reply_to_address: Optional[str] = None
    unavailable: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "receivedHeaders": list(self.received_headers),
            "ipHops": list(self.ip_hops),
            "authenticationResults": self.authentication_results,
            "spfResult": self.spf,
            "dkimResult": self.dkim,
            "dmarcResult": self.dmarc,
            "fromAddress": self.from_address,
            "replyToAddress": self.reply_to_address,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HeaderSignals":
        return cls(
            received_headers=list(data.get("receivedHeaders") or []),
            ip_hops=list(data.get("ipHops") or []),
            authentication_results=data.get("authenticationResults"),
            spf=data.get("spfResult"),
            dkim=data.get("dkimResult"),
            dmarc=data.get("dmarcResult"),
            from_address=data.get("fromAddress"),
            reply_to_address=data.get("replyToAddress"),
        )


Signals = Union[UrlSignals, EmailSignals, HeaderSignals]

_SIGNALS_BY_KIND = {
    TargetKind.URL: UrlSignals,
    TargetKind.EMAIL: EmailSignals,
    TargetKind.HEADERS: HeaderSignals,
}


# ---------------------------------------------------------------------------
# Verdict and report
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Verdict:
    type: VerdictType
    summary: str
    harm_explanation: str
    advice: str
    score: Optional[int] = None     # URL path only
    reasons: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScanReport:
    """Terminal output of one evaluation: the verdict and the signals behind it."""
    target: ScanTarget
    signals: Signals
    verdict: Verdict
    cached: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "target": {"kind": self.target.kind.value, "value": self.target.value},
            "verdictType": self.verdict.type.value,
        }
        if self.verdict.score is not None:
            out["score"] = self.verdict.score
        out.update({
            "summary": self.verdict.summary,
            "harmExplanation": self.verdict.harm_explanation,
            "advice": self.verdict.advice,
            "reasons": list(self.verdict.reasons),
            "signals": self.signals.to_dict(),
        })
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any], cached: bool = False) -> "ScanReport":
        target = target_from_dict(data["target"])
        signals = _SIGNALS_BY_KIND[target.kind].from_dict(data.get("signals") or {})
        verdict = Verdict(
            type=VerdictType(data["verdictType"]),
            summary=data.get("summary", ""),
            harm_explanation=data.get("harmExplanation", ""),
            advice=data.get("advice", ""),
            score=data.get("score"),
            reasons=tuple(data.get("reasons") or ()),
        )
        return cls(target=target, signals=signals, verdict=verdict, cached=cached)
