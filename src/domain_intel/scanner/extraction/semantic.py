"""Semantic markup tier - meta tags, <address>, tel:/mailto: and profile links."""

import re
from typing import Dict, Iterator, List
from urllib.parse import unquote, urljoin

from .base import FieldResolver
from .page import PageDocument
from .patterns import parse_address_lines

_TEL_HREF = re.compile(r'^\s*tel:', re.IGNORECASE)
_MAILTO_HREF = re.compile(r'^\s*mailto:', re.IGNORECASE)

NAME_META = (
    {'property': 'og:site_name'},
    {'name': 'application-name'},
)


class SemanticMarkupResolver(FieldResolver):
    """Tier 2: what the page says about itself through standard markup."""

    name = "semantic"

    def _name(self, page: PageDocument) -> Iterator[str]:
        soup = page.soup
        if soup is None:
            return
        for attrs in NAME_META:
            tag = soup.find('meta', attrs=attrs)
            if tag is not None:
                yield tag.get('content', '')

    def _address(self, page: PageDocument) -> Dict[str, str]:
        def parse():
            soup = page.soup
            if soup is None:
                return {}
            for tag in soup.find_all('address'):
                lines = tag.get_text('\n').splitlines()
                parts = parse_address_lines(lines)
                if parts:
                    return parts
            return {}
        return page.memo('semantic.address', parse)

    def _street(self, page: PageDocument) -> Iterator[str]:
        yield self._address(page).get('street', '')

    def _city(self, page: PageDocument) -> Iterator[str]:
        yield self._address(page).get('city', '')

    def _state(self, page: PageDocument) -> Iterator[str]:
        yield self._address(page).get('state', '')

    def _zip(self, page: PageDocument) -> Iterator[str]:
        yield self._address(page).get('zip', '')

    def _phone(self, page: PageDocument) -> Iterator[str]:
        soup = page.soup
        if soup is None:
            return
        for a in soup.find_all('a', href=_TEL_HREF):
            yield unquote(_TEL_HREF.sub('', a['href']))

    def _email(self, page: PageDocument) -> Iterator[str]:
        soup = page.soup
        if soup is None:
            return
        for a in soup.find_all('a', href=_MAILTO_HREF):
            address = unquote(_MAILTO_HREF.sub('', a['href'])).split('?', 1)[0]
            # mailto:a@x.com,b@x.com
            yield address.split(',', 1)[0]

    def _links(self, page: PageDocument) -> List[str]:
        def collect():
            soup = page.soup
            if soup is None:
                return []
            links = []
            for a in soup.find_all('a', href=True):
                href = a['href'].strip()
                if href and not href.startswith(('#', 'javascript:')):
                    links.append(urljoin(page.final_url, href) if page.final_url else href)
            return links
        return page.memo('semantic.links', collect)

    # Platform filtering (and share-link exclusion) is the field validator's job
    def _facebook(self, page: PageDocument) -> Iterator[str]:
        yield from self._links(page)

    def _instagram(self, page: PageDocument) -> Iterator[str]:
        yield from self._links(page)

    def _linkedin(self, page: PageDocument) -> Iterator[str]:
        yield from self._links(page)

    def _gmb(self, page: PageDocument) -> Iterator[str]:
        yield from self._links(page)
