"""Core data types and enums used across the scanner.

These types make scan results explicit and consistent.
No magic strings floating around - every status and transport reason has a defined value.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Any, List, Union


class ScanStatus(Enum):
    """Liveness verdict for a domain."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class FailureReason(Enum):
    """Fixed classification table for transport-level fetch failures.

    Anything not covered here becomes UNKNOWN plus a short diagnostic.
    """
    DNS_NOT_FOUND = "DNS Not Found"
    CONNECTION_REFUSED = "Connection Refused"
    TIMED_OUT = "Timed Out"
    SSL_ERROR = "SSL Error"
    UNKNOWN = "Unknown Error"


# Reason strings produced outside the transport table
REASON_INVALID_DOMAIN = "Invalid Domain"


@dataclass
class FetchFailure:
    """Transport failure - we never got an HTTP response."""
    classification: str
    detail: str = ""
    url: str = ""


@dataclass
class FetchSuccess:
    """We got an HTTP response. Any status code counts, 4xx/5xx included."""
    status_code: int
    final_url: str
    body: str = ""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_blank(self) -> bool:
        return not self.body.strip()


FetchOutcome = Union[FetchFailure, FetchSuccess]


@dataclass
class BusinessProfile:
    """Best-effort business details. Empty string means unresolved, never None."""
    name: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    phone: str = ""
    email: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class SocialProfile:
    """Social and Google Business Profile links (URL or empty)."""
    facebook: str = ""
    instagram: str = ""
    linkedin: str = ""
    gmb: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class ScanResult:
    """One record per input domain.

    This is our atomic unit of output. The batch always returns exactly one
    of these per input, in input order.
    """
    domain: str
    status: ScanStatus
    status_code: int = 0
    reason: str = ""
    profile: BusinessProfile = field(default_factory=BusinessProfile)
    social: SocialProfile = field(default_factory=SocialProfile)

    @classmethod
    def unreachable(cls, domain: str, reason: str) -> "ScanResult":
        """Inactive result with no response and empty profile."""
        return cls(domain=domain, status=ScanStatus.INACTIVE, status_code=0, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape returned by the HTTP service."""
        return {
            'domain': self.domain,
            'status': self.status.value,
            'statusCode': self.status_code,
            'reason': self.reason,
            'profile': self.profile.to_dict(),
            'social': self.social.to_dict(),
        }

    def to_row(self) -> Dict[str, Any]:
        """Flat dict for CSV/Excel output."""
        row = {
            'domain': self.domain,
            'status': self.status.value,
            'status_code': self.status_code,
            'reason': self.reason,
        }
        row.update(self.profile.to_dict())
        row.update(self.social.to_dict())
        return row


@dataclass
class ResolvedDomain:
    """A normalized domain plus the candidate URLs to try, best first."""
    domain: str
    candidates: List[str] = field(default_factory=list)


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


@dataclass
class ScanConfig:
    """Runtime configuration for a batch scan.

    Passed explicitly into the scheduler - nothing reads global state.
    """
    concurrency: int = 5
    http_timeout: float = 8.0
    max_redirects: int = 5
    user_agent: str = DEFAULT_USER_AGENT
    try_all_candidates: bool = True
    max_body_bytes: int = 2 * 1024 * 1024
    content_scan_limit: int = 50_000
    rate_limit_delay: float = 0.0  # seconds between unit starts
    verify_ssl: bool = True

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.http_timeout <= 0:
            raise ValueError(f"http_timeout must be > 0, got {self.http_timeout}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ServiceConfig:
    """Settings for the HTTP service wrapping the pipeline."""
    host: str = "0.0.0.0"
    port: int = 3000
    bulk_max_domains: int = 50
    batch_scan_max_domains: int = 5
    scan: ScanConfig = field(default_factory=ScanConfig)
