import logging
import random
import time
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class HttpClient:
    def __init__(self, user_agent="SafetyKit/1.0", timeout=12, retries=3):
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent,
        })
        self.timeout = timeout
        self.retries = max(1, retries)

    @classmethod
    def from_settings(cls, settings):
        return cls(
            user_agent=settings.user_agent,
            timeout=settings.http_timeout,
            retries=settings.http_retries,
        )

    def request(self, method: str, url: str, retries: Optional[int] = None,
                **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        attempts = max(1, retries or self.retries)
        last_exc = None
        for i in range(attempts):
            try:
                return self.session.request(method, url, **kwargs)
            except requests.TooManyRedirects:
                # a redirect loop answers the same way every time
                raise
            except requests.RequestException as e:
                last_exc = e
                logger.debug("%s %s failed (attempt %d/%d): %s",
                             method, url, i + 1, attempts, e)
                if i + 1 < attempts:
                    time.sleep((2 ** i) + random.random())
        raise last_exc

    def get(self, url: str, **kwargs) -> requests.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> requests.Response:
        return self.request("POST", url, **kwargs)

    def close(self) -> None:
        self.session.close()
