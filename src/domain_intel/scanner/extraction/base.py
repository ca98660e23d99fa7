"""Field resolver capability shared by every extraction tier.

A tier knows how to produce candidate values for some fields. The engine
asks each tier, in priority order, for the first candidate that passes the
field's validator; a tier with nothing to offer returns None.

Subclasses implement `_<field>` generator methods, e.g. `_email(page)`.
Fields without a method are simply not handled by that tier.
"""

import logging
from typing import Callable, Iterator, Optional

from .page import PageDocument

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('name', 'street', 'city', 'state', 'zip', 'phone', 'email')
SOCIAL_FIELDS = ('facebook', 'instagram', 'linkedin', 'gmb')


def clean_text(value) -> str:
    """Trim and collapse internal whitespace. Non-strings become ''."""
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return ""
    return " ".join(value.split())


class FieldResolver:
    """One extraction tier."""

    name = "base"

    def candidates(self, field: str, page: PageDocument) -> Iterator[str]:
        method = getattr(self, f"_{field}", None)
        if method is None:
            return iter(())
        return method(page)

    def resolve(self, field: str, page: PageDocument,
                accept: Callable[[str], bool] = bool) -> Optional[str]:
        """First cleaned candidate accepted by the validator, else None."""
        for raw in self.candidates(field, page):
            value = clean_text(raw)
            if value and accept(value):
                return value
        return None
