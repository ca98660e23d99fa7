"""Content classifier - liveness verdict and reason for one fetch outcome.

Two stages:

1. Status code: [200, 400) is Active, anything else Inactive with
   reason "HTTP <code>". Transport failures are Inactive with status 0.
2. Content rules: an ordered list of independent checks over the page.
   Every rule that matches overwrites the reason, so the LAST matching
   rule decides. A parked page is also forced to Inactive - it answers
   HTTP 200 but there is no business behind it.

Phrase rules only look at bodies under a size ceiling: large minified SPA
shells mention "coming soon" in some bundled string far too often.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Tuple
from urllib.parse import urlparse

from domain_intel.util.types import FetchFailure, FetchOutcome, FetchSuccess, ScanStatus

logger = logging.getLogger(__name__)

COMING_SOON_PHRASES = ("coming soon",)
UNDER_CONSTRUCTION_PHRASES = ("under construction",)
PARKED_PHRASES = (
    "parked domain",
    "this domain is for sale",
    "domain is for sale",
    "this domain may be for sale",
    "buy this domain",
    "parked free",
    "domain parking",
)

REASON_REDIRECTED = "Redirected"
REASON_COMING_SOON = "Coming Soon"
REASON_UNDER_CONSTRUCTION = "Under Construction"
REASON_PARKED = "Parked Domain"
REASON_BLANK = "Blank / No Content"


@dataclass
class PageView:
    """What the content rules get to look at."""
    domain: str
    final_url: str
    body: str
    text: str  # lower-cased body, empty when over the scan ceiling
    ok_status: bool = True


@dataclass(frozen=True)
class ContentRule:
    name: str
    reason: str
    matches: Callable[[PageView], bool]
    forces_inactive: bool = False


def _strip_www(host: str) -> str:
    host = (host or "").lower().split(':')[0].rstrip('.')
    return host[4:] if host.startswith("www.") else host


def _redirected_off_domain(page: PageView) -> bool:
    """Final host differs from the domain, ignoring www. 2xx/3xx only."""
    if not page.ok_status or not page.final_url or not page.domain:
        return False
    final_host = _strip_www(urlparse(page.final_url).netloc)
    return bool(final_host) and final_host != _strip_www(page.domain)


def _blank_page(page: PageView) -> bool:
    """Empty or whitespace-only body on a 2xx/3xx response.

    An empty 4xx/5xx page keeps its "HTTP <code>" reason.
    """
    return page.ok_status and not page.body.strip()


def _contains_any(phrases) -> Callable[[PageView], bool]:
    return lambda page: any(p in page.text for p in phrases)


# Evaluation order is precedence order: later entries win.
CONTENT_RULES: List[ContentRule] = [
    ContentRule("redirect", REASON_REDIRECTED, _redirected_off_domain),
    ContentRule("coming_soon", REASON_COMING_SOON, _contains_any(COMING_SOON_PHRASES)),
    ContentRule("under_construction", REASON_UNDER_CONSTRUCTION, _contains_any(UNDER_CONSTRUCTION_PHRASES)),
    ContentRule("parked", REASON_PARKED, _contains_any(PARKED_PHRASES), forces_inactive=True),
    ContentRule("blank", REASON_BLANK, _blank_page),
]


class ContentClassifier:
    """Turns a FetchOutcome into (status, status_code, reason)."""

    def __init__(self, content_scan_limit: int = 50_000, rules: List[ContentRule] = None):
        self.content_scan_limit = content_scan_limit
        self.rules = CONTENT_RULES if rules is None else rules

    def classify(self, domain: str, outcome: FetchOutcome) -> Tuple[ScanStatus, int, str]:
        if isinstance(outcome, FetchFailure):
            return ScanStatus.INACTIVE, 0, outcome.classification

        code = outcome.status_code
        if 200 <= code < 400:
            status, reason = ScanStatus.ACTIVE, ""
        else:
            status, reason = ScanStatus.INACTIVE, f"HTTP {code}"

        page = self._page_view(domain, outcome, status is ScanStatus.ACTIVE)
        for rule in self.rules:
            if not rule.matches(page):
                continue
            logger.debug(f"{domain}: content rule '{rule.name}' matched")
            reason = rule.reason
            if rule.forces_inactive:
                status = ScanStatus.INACTIVE

        return status, code, reason

    def _page_view(self, domain: str, outcome: FetchSuccess, ok_status: bool) -> PageView:
        body = outcome.body or ""
        text = body.lower() if len(body) < self.content_scan_limit else ""
        return PageView(domain=domain, final_url=outcome.final_url, body=body, text=text, ok_status=ok_status)
