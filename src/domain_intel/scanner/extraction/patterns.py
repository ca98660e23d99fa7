"""Regex tier - last resort over the raw markup.

Selectors miss a lot on JS-rendered sites: the phone number lives in a
script blob, the Instagram link is built client-side. These patterns run
over the raw HTML for whatever fields the earlier tiers left empty.

Also home to the shared helpers (address line parsing, social URL
matching) that the structured and semantic tiers use.
"""

import re
from typing import Dict, Iterator, List
from urllib.parse import urlparse

from .base import FieldResolver
from .page import PageDocument

EMAIL_RE = re.compile(r'[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}')
EMAIL_FULL_RE = re.compile(r'^[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$')

# Substrings that mark an address as tooling noise, not a business inbox
EMAIL_EXCLUDE = ('example', 'sentry', 'webpack')
# "logo@2x.png" looks like an email to a regex
EMAIL_FILE_SUFFIXES = ('.png', '.jpg', '.jpeg', '.gif', '.svg', '.webp', '.css', '.js')

_PHONE = r'(?:\+?1[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}'
# Keyword, then up to 60 non-digit characters, then the number
PHONE_CONTEXT_RE = re.compile(
    r'\b(?:phone|tel|call|contact)[a-z]*[^0-9+]{0,60}?(' + _PHONE + r')(?!\d)',
    re.IGNORECASE,
)
# Bare grouping needs real separators, otherwise every 10-digit id matches
PHONE_BARE_RE = re.compile(
    r'(?<![\w+])(?:\+?1[\s.-])?(?:\(\d{3}\)\s?|\d{3}[\s.-])\d{3}[\s.-]\d{4}(?!\d)'
)

CITY_STATE_ZIP_RE = re.compile(
    r'^(?P<city>[A-Za-z][A-Za-z .\'-]*?),?\s+(?P<state>[A-Z]{2})\.?,?\s+(?P<zip>\d{5}(?:-\d{4})?)$'
)
PO_BOX_RE = re.compile(r'^(?:P\.?\s*O\.?\s*Box|Post\s+Office\s+Box)\b', re.IGNORECASE)
ONE_LINE_ADDRESS_RE = re.compile(
    r'(?P<street>\d{1,5}\s[\w .#-]{2,60}?),\s*(?P<city>[A-Za-z][\w .\'-]{1,40}?),\s*'
    r'(?P<state>[A-Z]{2})\s*(?P<zip>\d{5}(?:-\d{4})?)(?!\d)'
)

SOCIAL_PLATFORMS = {
    'facebook': ('facebook.com', 'fb.com'),
    'instagram': ('instagram.com',),
    'linkedin': ('linkedin.com',),
}
GMB_MARKERS = ('google.com/maps', 'maps.google.', 'goo.gl/maps', 'maps.app.goo.gl', 'g.page/')
# Share buttons, tracking pixels and embeds point at the platform, not at the business
SOCIAL_NOISE = (
    'sharer', 'share.php', '/share', 'sharearticle', '/sharing/', 'intent/',
    '/dialog/', '/plugins/', 'facebook.com/tr?', 'facebook.com/tr/', '/embed',
)
SOCIAL_URL_RE = re.compile(r'(?:https?:)?//[^\s"\'<>()\\]+', re.IGNORECASE)


def is_business_email(value: str) -> bool:
    email = value.lower()
    if not EMAIL_FULL_RE.match(email):
        return False
    if any(token in email for token in EMAIL_EXCLUDE):
        return False
    return not email.endswith(EMAIL_FILE_SUFFIXES)


def phone_digits(value: str) -> str:
    return re.sub(r'\D', '', value)


def is_phone(value: str) -> bool:
    return 7 <= len(phone_digits(value)) <= 15


def _host(url: str) -> str:
    try:
        host = urlparse(url).netloc.lower()
    except ValueError:
        return ""
    return host.split('@')[-1].split(':')[0]


def is_social_link(platform: str, url: str) -> bool:
    """Does this URL point at the business's own profile on the platform?"""
    lowered = url.lower()
    if not lowered.startswith(('http://', 'https://')):
        return False
    if any(noise in lowered for noise in SOCIAL_NOISE):
        return False
    if platform == 'gmb':
        return any(marker in lowered for marker in GMB_MARKERS)
    host = _host(lowered)
    path = urlparse(lowered).path.strip('/')
    if not path:
        # Bare platform homepage
        return False
    return any(host == d or host.endswith('.' + d) for d in SOCIAL_PLATFORMS.get(platform, ()))


def looks_like_street(line: str) -> bool:
    """House number first ("742 Evergreen Terrace") or a PO Box."""
    return line[:1].isdigit() or bool(PO_BOX_RE.match(line))


def parse_address_lines(lines: List[str]) -> Dict[str, str]:
    """Split address lines into street / city / state / zip.

    Looks for a "City, ST 12345" line and takes the nearest street-looking
    line above it. Anything else above it (usually the business name) is not
    a street, so street stays empty and later tiers can fill it. Falls back
    to a one-line "street, city, ST zip" match.
    """
    lines = [" ".join(line.split()) for line in lines if line and line.strip()]
    for i, line in enumerate(lines):
        m = CITY_STATE_ZIP_RE.match(line)
        if not m:
            continue
        parts = m.groupdict()
        street = ""
        above = lines[:i]
        for prev in reversed(above):
            if looks_like_street(prev):
                street = prev
                break
        parts['street'] = street.rstrip(',')
        return parts

    m = ONE_LINE_ADDRESS_RE.search(", ".join(lines))
    if m:
        return m.groupdict()

    for line in lines:
        if looks_like_street(line):
            return {'street': line.rstrip(',')}
    return {}


def parse_address_text(text: str) -> Dict[str, str]:
    """One-line address string, e.g. from a JSON-LD "address": "..." value."""
    parts = [p.strip() for p in re.split(r'[\n\r]+', text or '') if p.strip()]
    return parse_address_lines(parts)


class PatternResolver(FieldResolver):
    """Tier 4: regular expressions over raw markup."""

    name = "pattern"

    def _email(self, page: PageDocument) -> Iterator[str]:
        yield from EMAIL_RE.findall(page.html)

    def _phone(self, page: PageDocument) -> Iterator[str]:
        for m in PHONE_CONTEXT_RE.finditer(page.html):
            yield m.group(1)
        yield from PHONE_BARE_RE.findall(page.html)

    def _address(self, page: PageDocument) -> Dict[str, str]:
        def parse():
            m = ONE_LINE_ADDRESS_RE.search(page.html)
            return m.groupdict() if m else {}
        return page.memo('pattern.address', parse)

    def _street(self, page: PageDocument) -> Iterator[str]:
        yield self._address(page).get('street', '')

    def _city(self, page: PageDocument) -> Iterator[str]:
        yield self._address(page).get('city', '')

    def _state(self, page: PageDocument) -> Iterator[str]:
        yield self._address(page).get('state', '')

    def _zip(self, page: PageDocument) -> Iterator[str]:
        yield self._address(page).get('zip', '')

    def _social_urls(self, page: PageDocument) -> List[str]:
        def scan():
            urls = []
            # JSON blobs escape slashes
            text = page.html.replace('\\/', '/')
            for raw in SOCIAL_URL_RE.findall(text):
                url = raw.rstrip('.,;')
                if url.startswith('//'):
                    url = 'https:' + url
                urls.append(url)
            return urls
        return page.memo('pattern.social_urls', scan)

    def _facebook(self, page: PageDocument) -> Iterator[str]:
        yield from self._social_urls(page)

    def _instagram(self, page: PageDocument) -> Iterator[str]:
        yield from self._social_urls(page)

    def _linkedin(self, page: PageDocument) -> Iterator[str]:
        yield from self._social_urls(page)

    def _gmb(self, page: PageDocument) -> Iterator[str]:
        yield from self._social_urls(page)
