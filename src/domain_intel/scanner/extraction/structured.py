"""Structured data tier - JSON-LD and schema.org microdata.

The most trusted source: when a site declares its own postal code in an
Organization block, that beats any zip-looking number elsewhere on the page.
"""

import logging
import re
from typing import Any, Dict, Iterator, List

from .base import FieldResolver
from .page import PageDocument
from .patterns import parse_address_text

logger = logging.getLogger(__name__)

ORGANIZATION_TYPES = {
    'organization', 'corporation', 'localbusiness', 'onlinebusiness', 'onlinestore',
    'professionalservice', 'store', 'restaurant', 'foodestablishment',
    'medicalorganization', 'medicalbusiness', 'dentist', 'physician',
    'legalservice', 'attorney', 'homeandconstructionbusiness', 'automotivebusiness',
    'financialservice', 'realestateagent', 'lodgingbusiness', 'healthandbeautybusiness',
    'sportsorganization', 'educationalorganization', 'ngo',
}
# Not 'service': schema.org Service, FoodService and TaxiService are offerings
ORGANIZATION_SUFFIXES = ('business', 'organization', 'store')

ADDRESS_KEYS = {
    'street': 'streetAddress',
    'city': 'addressLocality',
    'state': 'addressRegion',
    'zip': 'postalCode',
}

MICRODATA_PROPS = {
    'street': 'streetAddress',
    'city': 'addressLocality',
    'state': 'addressRegion',
    'zip': 'postalCode',
    'phone': 'telephone',
    'email': 'email',
}

_ORG_ITEMTYPE = re.compile(r'schema\.org/\w*(?:Organization|Business|Corporation|Store|Restaurant)', re.IGNORECASE)


def _types(obj: Dict[str, Any]) -> List[str]:
    raw = obj.get('@type', [])
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        return []
    return [str(t).rsplit('/', 1)[-1].lower() for t in raw]


def is_organization(obj: Dict[str, Any]) -> bool:
    return any(t in ORGANIZATION_TYPES or t.endswith(ORGANIZATION_SUFFIXES) for t in _types(obj))


def _strings(value: Any) -> Iterator[str]:
    """Flatten a JSON-LD value that may be a string, number or list of them."""
    if isinstance(value, (list, tuple)):
        for item in value:
            yield from _strings(item)
    elif isinstance(value, (str, int, float)) and not isinstance(value, bool):
        yield str(value)


def _itemprop_value(tag) -> str:
    if tag.get('content'):
        return tag['content']
    href = tag.get('href')
    if tag.name in ('a', 'link') and href:
        return re.sub(r'^(?:mailto|tel):', '', href, flags=re.IGNORECASE)
    return tag.get_text(' ')


class StructuredDataResolver(FieldResolver):
    """Tier 1: JSON-LD organization objects, then microdata itemprops."""

    name = "structured"

    def _organizations(self, page: PageDocument) -> List[Dict[str, Any]]:
        return page.memo('structured.orgs', lambda: [o for o in page.jsonld if is_organization(o)])

    def _addresses(self, page: PageDocument) -> Iterator[Dict[str, str]]:
        for org in self._organizations(page):
            address = org.get('address')
            for entry in (address if isinstance(address, list) else [address]):
                if isinstance(entry, dict):
                    yield {field: ' '.join(_strings(entry.get(key)))
                           for field, key in ADDRESS_KEYS.items()}
                elif isinstance(entry, str):
                    yield parse_address_text(entry)

    def _microdata(self, page: PageDocument, prop: str) -> Iterator[str]:
        soup = page.soup
        if soup is None:
            return
        for tag in soup.find_all(attrs={'itemprop': re.compile(rf'(?:^|\s){prop}(?:\s|$)')}):
            yield _itemprop_value(tag)

    def _address_part(self, page: PageDocument, field: str) -> Iterator[str]:
        for address in self._addresses(page):
            yield address.get(field, '')
        yield from self._microdata(page, MICRODATA_PROPS[field])

    def _name(self, page: PageDocument) -> Iterator[str]:
        for org in self._organizations(page):
            yield from _strings(org.get('name'))
        soup = page.soup
        if soup is None:
            return
        for scope in soup.find_all(attrs={'itemtype': _ORG_ITEMTYPE}):
            tag = scope.find(attrs={'itemprop': 'name'})
            if tag is not None:
                yield tag.get('content') or tag.get_text(' ')

    def _street(self, page: PageDocument) -> Iterator[str]:
        return self._address_part(page, 'street')

    def _city(self, page: PageDocument) -> Iterator[str]:
        return self._address_part(page, 'city')

    def _state(self, page: PageDocument) -> Iterator[str]:
        return self._address_part(page, 'state')

    def _zip(self, page: PageDocument) -> Iterator[str]:
        return self._address_part(page, 'zip')

    def _phone(self, page: PageDocument) -> Iterator[str]:
        for org in self._organizations(page):
            yield from _strings(org.get('telephone'))
            for point in (org.get('contactPoint') if isinstance(org.get('contactPoint'), list)
                          else [org.get('contactPoint')]):
                if isinstance(point, dict):
                    yield from _strings(point.get('telephone'))
        yield from self._microdata(page, 'telephone')

    def _email(self, page: PageDocument) -> Iterator[str]:
        for org in self._organizations(page):
            for value in _strings(org.get('email')):
                yield value.replace('mailto:', '')
        yield from self._microdata(page, 'email')

    def _same_as(self, page: PageDocument) -> Iterator[str]:
        for org in self._organizations(page):
            yield from _strings(org.get('sameAs'))

    def _facebook(self, page: PageDocument) -> Iterator[str]:
        return self._same_as(page)

    def _instagram(self, page: PageDocument) -> Iterator[str]:
        return self._same_as(page)

    def _linkedin(self, page: PageDocument) -> Iterator[str]:
        return self._same_as(page)

    def _gmb(self, page: PageDocument) -> Iterator[str]:
        for org in self._organizations(page):
            yield from _strings(org.get('hasMap'))
        yield from self._same_as(page)
