# -*- coding: utf-8 -*-
"""
Header Analysis Module.
- Collect Received hops and the first IPv4 address of each
- Parse Authentication-Results (SPF, DKIM, DMARC)
- Pull From / Reply-To addresses
"""
from __future__ import annotations

import ipaddress
import re
from typing import Dict, Optional

from safetykit.models import HeaderSignals

IPV4_RE = re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b")
AUTH_TOKEN_RES = {
    "spf": re.compile(r"spf=([^; ]+)"),
    "dkim": re.compile(r"dkim=([^; ]+)"),
    "dmarc": re.compile(r"dmarc=([^; ]+)"),
}


def _header_value(line: str, name: str) -> Optional[str]:
    """Return the value of `line` if it starts with header `name:` (any case)."""
    prefix = name + ":"
    if line.lower().startswith(prefix):
        return line[len(prefix):].strip()
    return None


def parse_authentication_results(value: str) -> Dict[str, Optional[str]]:
    """
    Extract spf/dkim/dmarc tokens from an Authentication-Results value.

    Example value:
        mx.google.com; dkim=pass header.i=@example.com; spf=fail smtp.mailfrom=x
    gives {"spf": "fail", "dkim": "pass", "dmarc": None}
    """
    results: Dict[str, Optional[str]] = {}
    for mechanism, pattern in AUTH_TOKEN_RES.items():
        m = pattern.search(value)
        results[mechanism] = m.group(1) if m else None
    return results


def _clean_address(value: str) -> str:
    return value.replace("<", "").replace(">", "").strip()


def extract_header_signals(raw_text: str) -> HeaderSignals:
    """
    Parse pasted header text line by line.

    Received lines accumulate; Authentication-Results, From and Reply-To keep
    their first occurrence only.
    """
    signals = HeaderSignals()
    seen_auth = seen_from = seen_reply_to = False

    for raw in (raw_text or "").splitlines():
        line = raw.strip()
        if not line:
            continue

        received = _header_value(line, "received")
        if received is not None:
            signals.received_headers.append(line)
            m = IPV4_RE.search(line)
            if m and m.group(0) not in signals.ip_hops:
                signals.ip_hops.append(m.group(0))
            continue

        if not seen_auth:
            auth = _header_value(line, "authentication-results")
            if auth is not None:
                seen_auth = True
                signals.authentication_results = auth
                parsed = parse_authentication_results(auth)
                signals.spf = parsed["spf"]
                signals.dkim = parsed["dkim"]
                signals.dmarc = parsed["dmarc"]
                continue

        if not seen_from:
            sender = _header_value(line, "from")
            if sender is not None:
                seen_from = True
                signals.from_address = _clean_address(sender)
                continue

        if not seen_reply_to:
            reply_to = _header_value(line, "reply-to")
            if reply_to is not None:
                seen_reply_to = True
                signals.reply_to_address = _clean_address(reply_to)

    return signals


def is_private_ip(ip: str) -> bool:
    """Private/loopback/link-local check. Malformed addresses count as public."""
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return addr.is_private or addr.is_loopback or addr.is_link_local
