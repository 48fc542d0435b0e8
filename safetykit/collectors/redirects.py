# -*- coding: utf-8 -*-
"""
Redirect tracing.
Counts HTTP redirects plus <meta http-equiv="refresh"> hops in landing pages.

Landing pages are untrusted: bodies are streamed, only HTML is read and at
most MAX_BODY_BYTES of it.
"""
from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from safetykit.collectors.base import Collector
from safetykit.errors import UpstreamUnavailableError
from safetykit.models import TargetKind

REFRESH_URL_RE = re.compile(r"""url\s*=\s*['"]?([^'";]+)""", re.IGNORECASE)
MAX_BODY_BYTES = 512 * 1024
CHUNK_SIZE = 16 * 1024


def meta_refresh_target(html: str, base_url: str) -> Optional[str]:
    """Absolute URL of a meta-refresh redirect, or None."""
    if not html:
        return None

    soup = BeautifulSoup(html, "lxml")
    for meta in soup.find_all("meta"):
        if (meta.get("http-equiv") or "").strip().lower() != "refresh":
            continue
        m = REFRESH_URL_RE.search(meta.get("content") or "")
        if m:
            return urljoin(base_url, m.group(1).strip())
    return None


def read_capped(resp: requests.Response, limit: int = MAX_BODY_BYTES) -> str:
    """Decode at most `limit` bytes of a streamed body."""
    chunks = []
    size = 0
    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
        chunks.append(chunk)
        size += len(chunk)
        if size >= limit:
            break
    body = b"".join(chunks)[:limit]
    return body.decode(resp.encoding or "utf-8", errors="replace")


class RedirectCollector(Collector):
    name = "redirects"
    kinds = (TargetKind.URL,)

    def collect(self, target):
        url = target.value
        count = 0
        visited = {url}

        while count <= self.settings.max_redirects:
            try:
                resp = self.http.get(url, allow_redirects=True, stream=True, retries=1)
            except requests.TooManyRedirects:
                return {"redirect_count": self.settings.max_redirects}
            except requests.RequestException as e:
                if count:
                    break
                raise UpstreamUnavailableError(self.name, f"{type(e).__name__}: {e}")

            with resp:
                count += len(resp.history)
                ctype = resp.headers.get("Content-Type", "")
                if "html" not in ctype.lower():
                    break
                nxt = meta_refresh_target(read_capped(resp), resp.url or url)

            if not nxt or nxt in visited:
                break
            visited.add(nxt)
            count += 1
            url = nxt

        return {"redirect_count": min(count, self.settings.max_redirects)}
