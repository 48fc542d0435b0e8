# -*- coding: utf-8 -*-
"""
Bounded poll loop for asynchronous upstream reports.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from safetykit.errors import AnalysisTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PollPolicy:
    max_attempts: int = 15
    interval: float = 3.0
    cancel_event: threading.Event = field(default_factory=threading.Event)

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def run(self, attempt: Callable[[], Optional[T]], what: str = "report") -> T:
        """
        Call `attempt` until it returns something other than None.

        Waits `interval` seconds between attempts (never after the last one).
        Raises AnalysisTimeoutError when attempts run out or on cancel.
        """
        for n in range(1, self.max_attempts + 1):
            if self.cancelled:
                raise AnalysisTimeoutError(f"Polling for {what} was cancelled.")

            logger.debug("Polling %s: attempt %d of %d", what, n, self.max_attempts)
            result = attempt()
            if result is not None:
                return result

            if n < self.max_attempts and self.cancel_event.wait(self.interval):
                raise AnalysisTimeoutError(f"Polling for {what} was cancelled.")

        raise AnalysisTimeoutError(
            "The scan took too long. Please try again in a moment."
        )
