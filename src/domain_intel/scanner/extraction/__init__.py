"""Business profile extraction: tiered, per-field resolution."""

from .engine import ExtractionEngine, FieldRule, FIELD_RULES, clean_business_name
from .page import PageDocument

__all__ = ['ExtractionEngine', 'FieldRule', 'FIELD_RULES', 'PageDocument', 'clean_business_name']
