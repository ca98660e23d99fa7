"""Shared fixtures: an in-memory fetcher so no test touches the network."""

import asyncio
import os
from urllib.parse import urlparse

import pytest

from domain_intel.util.types import FailureReason, FetchFailure


class FakeFetcher:
    """Stands in for HTTPFetcher. Outcomes are looked up by exact URL.

    A mapped value that is an exception gets raised instead of returned.
    Unmapped URLs fail with DNS Not Found.
    """

    def __init__(self, responses=None, delays=None, default=None):
        self.responses = responses or {}
        self.delays = delays or {}
        self.default = default or FetchFailure(FailureReason.DNS_NOT_FOUND.value)
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, url):
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(urlparse(url).hostname, 0))
            outcome = self.responses.get(url, self.default)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Private copy of os.environ (load_dotenv writes into it) and an empty cwd."""
    monkeypatch.setattr(os, 'environ', dict(os.environ))
    for name in ('SCAN_CONCURRENCY', 'HTTP_TIMEOUT', 'TRY_ALL_CANDIDATES', 'PORT',
                 'BULK_MAX_DOMAINS', 'BATCH_SCAN_MAX_DOMAINS', 'OUT_DIR', 'ENABLE_EXCEL',
                 'VERIFY_SSL', 'USER_AGENT', 'LOG_LEVEL', 'RATE_LIMIT_DELAY'):
        os.environ.pop(name, None)
    monkeypatch.chdir(tmp_path)
    return tmp_path
