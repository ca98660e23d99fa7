"""Extraction engine - resolves every profile field through its tier chain.

The rule table below is the whole policy: for each field, which tiers to
ask (most trusted first) and what a valid value looks like. Fields are
independent, so the street may come from JSON-LD while the phone comes
from a tel: link and the Instagram URL from a regex over a script blob.

Extraction never fails a scan. A tier that blows up on odd markup is
logged and skipped; the field just falls through to the next tier.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from domain_intel.util.types import BusinessProfile, SocialProfile

from .base import FieldResolver, PROFILE_FIELDS, SOCIAL_FIELDS
from .fallback import FallbackMarkupResolver
from .page import PageDocument
from .patterns import PatternResolver, is_business_email, is_phone, is_social_link
from .semantic import SemanticMarkupResolver
from .structured import StructuredDataResolver

logger = logging.getLogger(__name__)

STRUCTURED = StructuredDataResolver()
SEMANTIC = SemanticMarkupResolver()
FALLBACK = FallbackMarkupResolver()
PATTERN = PatternResolver()

DEFAULT_TIERS = (STRUCTURED, SEMANTIC, FALLBACK, PATTERN)

# "Acme Co | Home", "Acme Co – Plumbing in Austin", "Acme Co - Welcome", "Acme Co-Welcome"
NAME_SEPARATOR_RE = re.compile(r'\s*(?:\||–|—|-)\s*')
_ZIP_RE = re.compile(r'^[A-Za-z0-9][A-Za-z0-9 -]{1,10}$')


def _max_len(limit: int) -> Callable[[str], bool]:
    return lambda value: len(value) <= limit


def _is_zip(value: str) -> bool:
    return bool(_ZIP_RE.match(value)) and any(c.isdigit() for c in value)


def _social(platform: str) -> Callable[[str], bool]:
    return lambda value: is_social_link(platform, value)


@dataclass(frozen=True)
class FieldRule:
    field: str
    accept: Callable[[str], bool]
    tiers: Sequence[FieldResolver] = DEFAULT_TIERS


FIELD_RULES: List[FieldRule] = [
    FieldRule('name', _max_len(200), (STRUCTURED, SEMANTIC, FALLBACK)),
    FieldRule('street', _max_len(150)),
    FieldRule('city', _max_len(80)),
    FieldRule('state', _max_len(60)),
    FieldRule('zip', _is_zip),
    FieldRule('phone', is_phone),
    FieldRule('email', is_business_email),
    FieldRule('facebook', _social('facebook')),
    FieldRule('instagram', _social('instagram')),
    FieldRule('linkedin', _social('linkedin')),
    FieldRule('gmb', _social('gmb')),
]


def clean_business_name(name: str) -> str:
    """Strip a trailing site tagline: "Acme Co | Home" -> "Acme Co".

    Cuts at the first separator, and only when the part before it is longer
    than 2 chars. A bare hyphen inside the first word ("Coca-Cola Bottling")
    is part of the name, not a separator.
    """
    for m in NAME_SEPARATOR_RE.finditer(name):
        head = name[:m.start()].strip()
        if m.group() == '-' and not any(c.isspace() for c in head):
            continue
        if len(head) > 2:
            return head
        break
    return name


class ExtractionEngine:
    """Runs the rule table against one page."""

    def __init__(self, rules: Optional[List[FieldRule]] = None):
        self.rules = FIELD_RULES if rules is None else rules

    def resolve_field(self, rule: FieldRule, page: PageDocument) -> Tuple[str, str]:
        """Returns (value, tier name); ('', '') when no tier produced a valid value."""
        for tier in rule.tiers:
            try:
                value = tier.resolve(rule.field, page, rule.accept)
            except Exception as e:
                logger.debug(f"{tier.name} tier failed on '{rule.field}' for {page.final_url}: {e}")
                continue
            if value:
                return value, tier.name
        return "", ""

    def extract_fields(self, html: str, final_url: str = "") -> Dict[str, str]:
        page = PageDocument(html, final_url)
        values: Dict[str, str] = {}
        for rule in self.rules:
            value, tier = self.resolve_field(rule, page)
            if value:
                logger.debug(f"{final_url}: {rule.field} from {tier} tier")
            values[rule.field] = value

        if values.get('name'):
            values['name'] = clean_business_name(values['name'])
        if values.get('email'):
            values['email'] = values['email'].lower()
        return values

    def extract(self, html: str, final_url: str = "") -> Tuple[BusinessProfile, SocialProfile]:
        """Build the business and social profiles for a page."""
        if not html or not html.strip():
            return BusinessProfile(), SocialProfile()
        values = self.extract_fields(html, final_url)
        profile = BusinessProfile(**{f: values.get(f, '') for f in PROFILE_FIELDS})
        social = SocialProfile(**{f: values.get(f, '') for f in SOCIAL_FIELDS})
        return profile, social
