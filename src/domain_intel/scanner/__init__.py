"""Per-domain scan pipeline: resolve, fetch, classify, extract."""

from .runner import BatchScanner, DomainScanner, scan_domains

__all__ = ['BatchScanner', 'DomainScanner', 'scan_domains']
