# -*- coding: utf-8 -*-
"""
Target classification.
Decides whether raw input is an email address, a URL or a block of headers.
"""
from __future__ import annotations

import re
from urllib.parse import urlparse

from safetykit.errors import InvalidInputError
from safetykit.models import EmailTarget, HeaderBlockTarget, ScanTarget, UrlTarget

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_absolute_url(text: str) -> bool:
    """True when text has both a scheme and a host."""
    try:
        parsed = urlparse(text)
    except ValueError:
        return False
    if not parsed.scheme or not parsed.netloc:
        return False
    if any(c.isspace() for c in text):
        return False
    return bool(parsed.hostname)


def classify_target(raw: str) -> ScanTarget:
    text = (raw or "").strip()
    if not text:
        raise InvalidInputError("No input provided")

    if EMAIL_RE.match(text):
        return EmailTarget(text)
    if is_absolute_url(text):
        return UrlTarget(text)
    return HeaderBlockTarget(text)
