"""Batch scan runner - drives the per-domain pipeline for a list of domains.

For every input domain, concurrently:
1. Resolve the raw string to a canonical domain + candidate URLs
2. Fetch candidates in order until one returns a non-blank page
3. Classify liveness and reason
4. Extract the business profile

Guarantees:
- exactly one ScanResult per input, in input order (gather keeps order,
  completion order doesn't matter)
- never more than `concurrency` domains in flight
- one domain blowing up never touches its siblings
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence
from urllib.parse import urlparse

from domain_intel.util.types import (
    FailureReason, FetchFailure, FetchOutcome, FetchSuccess, REASON_INVALID_DOMAIN,
    ResolvedDomain, ScanConfig, ScanResult, ScanStatus,
)
from domain_intel.util.concurrency import WorkerPool
from domain_intel.util.time import elapsed_ms

from .classifier import ContentClassifier
from .extraction import ExtractionEngine
from .fetcher import HTTPFetcher, MAX_DETAIL_CHARS
from .resolver import resolve

logger = logging.getLogger(__name__)

ResultCallback = Callable[[int, ScanResult], None]


class DomainScanner:
    """The pipeline for a single domain. Stateless between calls."""

    def __init__(self, config: ScanConfig, fetcher,
                 classifier: Optional[ContentClassifier] = None,
                 engine: Optional[ExtractionEngine] = None):
        self.config = config
        self.fetcher = fetcher
        self.classifier = classifier or ContentClassifier(config.content_scan_limit)
        self.engine = engine or ExtractionEngine()

    async def fetch_best(self, resolved: ResolvedDomain) -> Optional[FetchOutcome]:
        """Walk candidates in order and pick the outcome to report.

        First success with a non-blank body wins. Otherwise the first
        success (blank page), otherwise the first failure.
        """
        first_success: Optional[FetchSuccess] = None
        first_failure: Optional[FetchFailure] = None
        dead_hosts = set()

        for url in resolved.candidates:
            host = urlparse(url).hostname
            if host in dead_hosts:
                logger.debug(f"Skipping {url}: {host} did not resolve")
                continue

            outcome = await self.fetcher.fetch(url)

            if isinstance(outcome, FetchSuccess):
                if not outcome.is_blank:
                    return outcome
                first_success = first_success or outcome
            else:
                first_failure = first_failure or outcome
                if outcome.classification == FailureReason.DNS_NOT_FOUND.value:
                    dead_hosts.add(host)

        return first_success or first_failure

    async def scan(self, raw_domain: str) -> ScanResult:
        resolved = resolve(raw_domain, self.config.try_all_candidates)
        if not resolved.domain:
            return ScanResult.unreachable("", REASON_INVALID_DOMAIN)

        outcome = await self.fetch_best(resolved)
        if outcome is None:
            return ScanResult.unreachable(resolved.domain, REASON_INVALID_DOMAIN)

        status, code, reason = self.classifier.classify(resolved.domain, outcome)
        result = ScanResult(domain=resolved.domain, status=status, status_code=code, reason=reason)

        if isinstance(outcome, FetchSuccess):
            result.profile, result.social = self.engine.extract(outcome.body, outcome.final_url)

        return result


class BatchScanner:
    """Scans a list of domains under a bounded worker pool.

    Usage:
        results = await BatchScanner(ScanConfig(concurrency=5)).run(domains)

    A fetcher can be injected (anything with `async fetch(url)`); otherwise
    an HTTPFetcher session is opened for the duration of the batch.
    """

    def __init__(self, config: Optional[ScanConfig] = None, fetcher=None,
                 classifier: Optional[ContentClassifier] = None,
                 engine: Optional[ExtractionEngine] = None):
        """Initialize scanner with configuration."""
        self.config = config or ScanConfig()
        self.fetcher = fetcher
        self.classifier = classifier
        self.engine = engine

    async def run(self, domains: Sequence[str],
                  on_result: Optional[ResultCallback] = None) -> List[ScanResult]:
        """Scan every domain and return results in input order."""
        domains = list(domains)
        if not domains:
            return []

        start = time.monotonic()
        logger.info(f"Scanning {len(domains)} domains (concurrency {self.config.concurrency})")

        if self.fetcher is not None:
            results = await self._run_with(self.fetcher, domains, on_result)
        else:
            async with HTTPFetcher(self.config) as fetcher:
                results = await self._run_with(fetcher, domains, on_result)

        active = sum(1 for r in results if r.status is ScanStatus.ACTIVE)
        logger.info(
            f"Batch complete: {active} active, {len(results) - active} inactive "
            f"in {elapsed_ms(start) / 1000:.1f}s"
        )
        return results

    async def _run_with(self, fetcher, domains: List[str],
                        on_result: Optional[ResultCallback]) -> List[ScanResult]:
        scanner = DomainScanner(self.config, fetcher, self.classifier, self.engine)
        pool = WorkerPool(self.config.concurrency, start_delay=self.config.rate_limit_delay)

        async def scan_one(index: int, raw: str) -> ScanResult:
            async with pool.slot():
                unit_start = time.monotonic()
                result = await scanner.scan(raw)
                logger.debug(
                    f"{result.domain or raw!r}: {result.status.value} {result.status_code} "
                    f"{result.reason!r} ({elapsed_ms(unit_start):.0f}ms)"
                )
            if on_result:
                on_result(index, result)
            return result

        outcomes = await asyncio.gather(
            *(scan_one(i, raw) for i, raw in enumerate(domains)),
            return_exceptions=True
        )

        # Map any escaped exception back to its own slot
        results = []
        for index, (raw, outcome) in enumerate(zip(domains, outcomes)):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, (KeyboardInterrupt, SystemExit, asyncio.CancelledError)):
                    raise outcome
                logger.error(f"Error scanning {raw!r}: {outcome!r}")
                detail = (str(outcome) or type(outcome).__name__)[:MAX_DETAIL_CHARS]
                domain = resolve(raw, False).domain
                outcome = ScanResult.unreachable(domain, f"{FailureReason.UNKNOWN.value}: {detail}")
                if on_result:
                    on_result(index, outcome)
            results.append(outcome)

        logger.debug(f"Peak concurrency {pool.peak}/{pool.size}")
        return results


def scan_domains(domains: Sequence[str], config: Optional[ScanConfig] = None,
                 on_result: Optional[ResultCallback] = None) -> List[ScanResult]:
    """Synchronous entry point: run a batch in a fresh event loop."""
    return asyncio.run(BatchScanner(config).run(domains, on_result))
