"""Domain normalization and candidate URL generation.

Callers hand us domains in whatever shape they have them:

    "Example.com", "https://example.com/", "  http://example.com//  "

All of these are the same target. We reduce each to one canonical bare form
(used in the result record) and derive the ordered list of URLs to try:

    https://example.com
    http://example.com
    https://www.example.com
    http://www.example.com

HTTPS first because most live sites redirect HTTP to HTTPS anyway; the www
variants catch sites whose apex has no A record or no web server.
"""

import logging
import re
from typing import Optional

from domain_intel.util.types import ResolvedDomain

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r'^\s*https?://', re.IGNORECASE)


def normalize_domain(raw: Optional[str]) -> str:
    """Reduce a raw domain string to its canonical bare form.

    Examples:
        normalize_domain("https://Example.com/") → "example.com"
        normalize_domain("  http://shop.example.com/about ") → "shop.example.com"
        normalize_domain("   ") → ""

    Returns an empty string when nothing usable is left.
    """
    if not raw or not isinstance(raw, str):
        return ""

    domain = _SCHEME_RE.sub('', raw.strip())
    domain = domain.strip().rstrip('/')

    # Anything after the host (path, query, fragment) is not part of the domain
    domain = re.split(r'[/?#]', domain, maxsplit=1)[0]

    return domain.strip().rstrip('.').lower()


def candidate_urls(domain: str, try_all: bool = True) -> list:
    """Build candidate URLs in fixed preference order.

    A domain that already starts with www. gets no www.www. variants.
    """
    if not domain:
        return []

    candidates = [f"https://{domain}", f"http://{domain}"]
    if try_all and not domain.startswith("www."):
        candidates += [f"https://www.{domain}", f"http://www.{domain}"]

    if not try_all:
        return candidates[:1]
    return candidates


def resolve(raw: Optional[str], try_all: bool = True) -> ResolvedDomain:
    """Normalize a raw domain and attach its candidate URLs.

    Never raises: an unusable input comes back with an empty domain and no
    candidates, and the scheduler reports it as an invalid domain.
    """
    domain = normalize_domain(raw)
    if not domain:
        logger.debug(f"Unusable domain input: {raw!r}")
    return ResolvedDomain(domain=domain, candidates=candidate_urls(domain, try_all))
