# -*- coding: utf-8 -*-
"""
Certificate inspection.
- Certificate details from ssl-checker.io
- Direct TLS handshake fallback for negotiated protocol / cipher
"""
from __future__ import annotations

import logging
import socket
import ssl
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from safetykit.collectors.base import ServiceClient
from safetykit.errors import InvalidInputError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

NA = "N/A"
DATE_FORMATS = ("%Y-%m-%d", "%Y-%m-%d %H:%M:%S", "%b %d %H:%M:%S %Y %Z")


@dataclass
class ChainEntry:
    common_name: str
    issuer: str
    validity: str
    serial_number: str
    public_key_size: Optional[int] = None


@dataclass
class CipherSuite:
    name: str
    strength: str
    forward_secrecy: bool = False


@dataclass
class OcspStapling:
    enabled: bool = False
    response_status: str = NA
    next_update: str = NA


@dataclass
class CtStatus:
    enabled: bool = False
    logs_count: int = 0
    logs: List[str] = field(default_factory=list)


@dataclass
class RevocationUris:
    crl: List[str] = field(default_factory=lambda: [NA])
    ocsp: List[str] = field(default_factory=lambda: [NA])


@dataclass
class CertificateDetail:
    domain: str
    validity: str                     # Valid | Invalid | Expired
    issuer: str
    common_name: str
    start_date: Optional[str] = None
    expiry_date: Optional[str] = None
    serial_number: str = ""
    signature_algorithm: str = "Unknown"
    public_key_algorithm: str = "RSA"
    public_key_size: int = 0
    key_usages: List[str] = field(default_factory=list)
    extended_key_usages: List[str] = field(default_factory=list)
    ciphers: List[CipherSuite] = field(default_factory=list)
    subject_alt_names: List[str] = field(default_factory=list)
    tls_versions: List[str] = field(default_factory=list)
    chain: List[ChainEntry] = field(default_factory=list)
    is_self_signed: bool = False
    is_expired: bool = False
    hsts: bool = False
    dns_status: str = "Failed"
    ocsp_stapling: OcspStapling = field(default_factory=OcspStapling)
    ct_status: CtStatus = field(default_factory=CtStatus)
    revocation_uris: RevocationUris = field(default_factory=RevocationUris)
    caa_records: List[str] = field(default_factory=list)
    negotiated_protocol: str = NA
    negotiated_cipher: str = NA
    grade: str = NA

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is not None and parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None)
    return parsed


def split_sans(raw: Any) -> List[str]:
    if not raw:
        return []
    if isinstance(raw, list):
        parts = raw
    else:
        parts = str(raw).split(";")
    return [p.replace("DNS:", "").strip() for p in parts if p and p.replace("DNS:", "").strip()]


def _as_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    """Upstream sizes arrive as ints or strings; anything unparseable is `default`."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def handshake_protocol_and_cipher(host: str, port: int = 443, timeout: float = 10) -> Tuple[str, str]:
    """Open a TLS connection and report what was negotiated."""
    context = ssl.create_default_context()
    with socket.create_connection((host, port), timeout=timeout) as sock:
        with context.wrap_socket(sock, server_hostname=host) as tls:
            cipher = tls.cipher()
            return tls.version() or NA, (cipher[0] if cipher else NA)


def map_certificate(domain: str, cert: Dict[str, Any], now: Optional[datetime] = None) -> CertificateDetail:
    """Reshape an ssl-checker.io result into CertificateDetail."""
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    expiry = parse_date(cert.get("valid_till"))
    is_expired = bool(expiry and expiry < now)

    if is_expired:
        validity = "Expired"
    elif cert.get("cert_valid"):
        validity = "Valid"
    else:
        validity = "Invalid"

    issuer_cn = cert.get("issuer_cn") or "Unknown"
    issuer = f"{issuer_cn} ({cert['issuer_o']})" if cert.get("issuer_o") else issuer_cn

    hsts = cert.get("hsts")
    chain = [
        ChainEntry(
            common_name=c.get("cn") or "Unknown",
            issuer=c.get("issuer") or "Unknown",
            validity=c.get("validity") or "Unknown",
            serial_number=c.get("sn") or "",
            public_key_size=_as_int(c.get("pubkey_size"), None),
        )
        for c in cert.get("chain") or []
    ]
    ciphers = [
        CipherSuite(
            name=c.get("name") or "Unknown",
            strength=c.get("strength") or "Unknown",
            forward_secrecy=bool(c.get("forward_secrecy")),
        )
        for c in cert.get("ciphers") or []
    ]
    ct_logs = list(cert.get("ct_logs") or [])

    return CertificateDetail(
        domain=domain,
        validity=validity,
        issuer=issuer,
        common_name=cert.get("issued_to") or domain,
        start_date=cert.get("valid_from"),
        expiry_date=cert.get("valid_till"),
        serial_number=cert.get("cert_sn") or "",
        signature_algorithm=cert.get("cert_alg") or "Unknown",
        public_key_algorithm=cert.get("cert_pubkey_alg") or "RSA",
        public_key_size=_as_int(cert.get("cert_pubkey_size")),
        key_usages=list(cert.get("cert_key_usage") or []),
        extended_key_usages=list(cert.get("cert_ext_key_usage") or []),
        ciphers=ciphers,
        subject_alt_names=split_sans(cert.get("cert_sans")),
        tls_versions=list(cert.get("tls_versions") or []),
        chain=chain,
        is_self_signed=bool(cert.get("cert_self_signed")),
        is_expired=is_expired,
        hsts=hsts is True or (isinstance(hsts, dict) and hsts.get("enabled") is True),
        dns_status="OK" if cert.get("dns_valid") else "Failed",
        ocsp_stapling=OcspStapling(
            enabled=bool(cert.get("ocsp_stapling")),
            response_status=cert.get("ocsp_response_status") or NA,
            next_update=cert.get("ocsp_next_update") or NA,
        ),
        ct_status=CtStatus(enabled=bool(cert.get("ct")), logs_count=len(ct_logs), logs=ct_logs),
        revocation_uris=RevocationUris(
            crl=list(cert.get("crl_urls") or [NA]),
            ocsp=list(cert.get("ocsp_urls") or [NA]),
        ),
        caa_records=list(cert.get("caa") or []),
        negotiated_protocol=cert.get("negotiated_protocol") or NA,
        negotiated_cipher=cert.get("negotiated_cipher") or NA,
        grade=cert.get("grade") or NA,
    )


class CertificateInspector(ServiceClient):
    name = "ssl-checker"

    def __init__(self, settings, http=None,
                 handshake: Callable[[str], Tuple[str, str]] = handshake_protocol_and_cipher):
        super().__init__(settings, http)
        self.handshake = handshake

    def inspect(self, domain: str) -> CertificateDetail:
        domain = (domain or "").strip()
        if not domain:
            raise InvalidInputError("Domain is required")

        data = self._get_json(f"{self.settings.ssl_checker_base}/{domain}")
        if not isinstance(data, dict):
            raise UpstreamUnavailableError(self.name, "unexpected response shape")
        detail = map_certificate(domain, data.get("result") or data)

        if detail.negotiated_protocol == NA or detail.negotiated_cipher == NA:
            try:
                protocol, cipher = self.handshake(domain)
            except (OSError, ssl.SSLError) as e:
                logger.warning("Handshake fallback failed for %s: %s", domain, e)
            else:
                if detail.negotiated_protocol == NA:
                    detail.negotiated_protocol = protocol
                if detail.negotiated_cipher == NA:
                    detail.negotiated_cipher = cipher
        return detail


def inspect_certificate(domain: str, settings, http=None) -> CertificateDetail:
    return CertificateInspector(settings, http).inspect(domain)
