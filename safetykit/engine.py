# -*- coding: utf-8 -*-
"""
Scan engine.

classify input -> (cache) -> run collectors concurrently -> score -> report

Secondary collectors degrade to "unknown" on failure or timeout. Errors from
the primary reputation collector propagate to the caller.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional, Sequence

from safetykit.collectors import Collector, build_collectors
from safetykit.config import Settings
from safetykit.header_analysis import extract_header_signals
from safetykit.models import (
    EmailSignals,
    HeaderBlockTarget,
    ScanReport,
    ScanTarget,
    Signals,
    TargetKind,
    UrlSignals,
)
from safetykit.scoring import score
from safetykit.targets import classify_target

logger = logging.getLogger(__name__)

CollectorFactory = Callable[[Settings, ScanTarget], Sequence[Collector]]


def empty_signals(target: ScanTarget) -> Signals:
    if target.kind is TargetKind.URL:
        return UrlSignals(url=target.value)
    return EmailSignals(address=target.value)


class SafetyScanner:
    def __init__(self, settings: Optional[Settings] = None, cache=None,
                 collector_factory: Optional[CollectorFactory] = None):
        self.settings = settings or Settings()
        self.cache = cache
        self.collector_factory = collector_factory or build_collectors

    def scan(self, raw: str, use_cache: bool = True) -> ScanReport:
        target = classify_target(raw)

        if use_cache and self.cache is not None:
            hit = self.cache.get(target.cache_key)
            if hit:
                logger.info("Cache hit for %s target", target.kind.value)
                return ScanReport.from_dict(hit, cached=True)

        signals = self.collect_signals(target)
        report = ScanReport(target=target, signals=signals, verdict=score(signals))

        if self.cache is not None:
            self.cache.put(target.cache_key, report.to_dict())
        return report

    def collect_signals(self, target: ScanTarget) -> Signals:
        if isinstance(target, HeaderBlockTarget):
            return extract_header_signals(target.raw_text)

        collectors = [c for c in self.collector_factory(self.settings, target) if c.applies_to(target)]
        signals = empty_signals(target)
        self._run(target, collectors, signals)
        return signals

    def _run(self, target: ScanTarget, collectors: List[Collector], signals: Signals) -> None:
        """
        Run collectors concurrently and merge partials as they complete.

        Secondary collectors share one deadline (`collector_timeout`). Primary
        collectors bound themselves (HTTP timeouts, poll budget) and are
        always waited for.

        A secondary dropped at the deadline keeps its worker thread until its
        own request returns, at most `http_timeout` per attempt. The redirect
        collector makes a single attempt and reads a capped body, so a hostile
        landing page cannot stretch that. The interpreter joins these threads
        at exit, so a CLI run can outlast its printed verdict by that bound.
        """
        if not collectors:
            return

        timeout = self.settings.collector_timeout
        deadline = time.monotonic() + timeout
        pool = ThreadPoolExecutor(max_workers=len(collectors), thread_name_prefix="collector")
        futures: Dict[Future, Collector] = {pool.submit(c.collect, target): c for c in collectors}
        try:
            pending = set(futures)
            while pending:
                late = [f for f in pending if not futures[f].primary]
                remaining = deadline - time.monotonic() if late else None
                if remaining is not None and remaining <= 0:
                    for fut in late:
                        fut.cancel()
                        pending.discard(fut)
                        logger.warning("%s did not answer within %.0fs; treating as unknown",
                                       futures[fut].name, timeout)
                        signals.mark_unavailable(futures[fut].name)
                    continue

                done, pending = wait(pending, timeout=remaining, return_when=FIRST_COMPLETED)
                for fut in done:
                    self._merge(futures[fut], fut, signals)
        finally:
            # stragglers keep their thread but their results are dropped
            pool.shutdown(wait=False)

    def _merge(self, collector: Collector, fut: Future, signals: Signals) -> None:
        try:
            partial = fut.result()
        except Exception as e:
            if collector.primary:
                raise
            logger.warning("%s unavailable, treating as unknown: %s", collector.name, e)
            signals.mark_unavailable(collector.name)
            return

        signals.apply(partial or {})
