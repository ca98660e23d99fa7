"""Fallback markup tier - the <title> as business name."""

import html
import re
from typing import Iterator

from .base import FieldResolver
from .page import PageDocument

_TITLE_RE = re.compile(r'<title[^>]*>(.*?)</title>', re.IGNORECASE | re.DOTALL)


class FallbackMarkupResolver(FieldResolver):
    """Tier 3."""

    name = "fallback"

    def _name(self, page: PageDocument) -> Iterator[str]:
        soup = page.soup
        if soup is not None and soup.title is not None:
            yield soup.title.get_text(' ')
        # Unparseable DOM still usually has a readable <title>
        m = _TITLE_RE.search(page.html)
        if m:
            yield html.unescape(m.group(1))
