"""
Domain Intel - bulk website qualification and business profile extraction
"""

__version__ = "1.0.0"

from .scanner.runner import BatchScanner, scan_domains
from .util.types import BusinessProfile, ScanConfig, ScanResult, ScanStatus, SocialProfile

__all__ = [
    'BatchScanner',
    'BusinessProfile',
    'ScanConfig',
    'ScanResult',
    'ScanStatus',
    'SocialProfile',
    'scan_domains',
]
