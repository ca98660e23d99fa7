"""Parsed view of one fetched page, shared by all extraction tiers.

Parsing is lazy and happens once: the DOM on first access to .soup, JSON-LD
on first access to .jsonld. A page that fails to parse just yields None /
an empty list, and tiers that need the DOM quietly return nothing.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_JSONLD_TYPE = re.compile(r'ld\+json', re.IGNORECASE)
_COMMENT_WRAPPER = re.compile(r'^\s*(?:<!--|//\s*<!\[CDATA\[)|(?:-->|//\s*\]\]>)\s*$')


def _walk_json(obj: Any) -> Iterator[Dict[str, Any]]:
    """Yield every dict in a JSON-LD tree, @graph and nested entities included."""
    if isinstance(obj, list):
        for item in obj:
            yield from _walk_json(item)
    elif isinstance(obj, dict):
        yield obj
        for value in obj.values():
            if isinstance(value, (dict, list)):
                yield from _walk_json(value)


class PageDocument:
    """Raw markup plus lazily parsed DOM and structured data."""

    def __init__(self, html: str, final_url: str = ""):
        self.html = html or ""
        self.final_url = final_url or ""
        self._soup: Optional[BeautifulSoup] = None
        self._parsed = False
        self._jsonld: Optional[List[Dict[str, Any]]] = None
        self._memo: Dict[str, Any] = {}

    @property
    def soup(self) -> Optional[BeautifulSoup]:
        if not self._parsed:
            self._parsed = True
            try:
                self._soup = BeautifulSoup(self.html, 'html.parser')
            except Exception as e:
                logger.debug(f"DOM parse failed for {self.final_url}: {e}")
                self._soup = None
        return self._soup

    @property
    def jsonld(self) -> List[Dict[str, Any]]:
        """All JSON-LD objects on the page, flattened.

        Each <script type="application/ld+json"> block is parsed on its own;
        a malformed block is skipped without affecting the others.
        """
        if self._jsonld is None:
            self._jsonld = []
            soup = self.soup
            if soup is not None:
                for script in soup.find_all('script', attrs={'type': _JSONLD_TYPE}):
                    raw = _COMMENT_WRAPPER.sub('', script.string or script.get_text() or '').strip()
                    if not raw:
                        continue
                    try:
                        data = json.loads(raw)
                    except ValueError as e:
                        logger.debug(f"Skipping malformed JSON-LD block on {self.final_url}: {e}")
                        continue
                    self._jsonld.extend(_walk_json(data))
        return self._jsonld

    def memo(self, key: str, factory: Callable[[], Any]) -> Any:
        """Compute a per-page value once (e.g. a parsed <address> block)."""
        if key not in self._memo:
            self._memo[key] = factory()
        return self._memo[key]
