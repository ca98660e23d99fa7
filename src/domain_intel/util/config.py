"""Configuration loaded from .env and the environment.

Single source of truth for runtime settings. Every value has a sane default,
so a missing .env is fine - the scanner just runs with defaults.
"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

from .types import ScanConfig, ServiceConfig, DEFAULT_USER_AGENT


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


class Config:
    """Configuration for the scanner, the CLI and the HTTP service.

    Reads .env from the working directory (or an explicit path) once at
    construction; real environment variables win over .env values.
    """

    def __init__(self, env_file: Optional[Path] = None):
        """Load configuration from .env file and environment."""
        env_file = Path(env_file) if env_file else Path.cwd() / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        # ===== SCAN PIPELINE =====
        self.scan = ScanConfig(
            concurrency=_env_int("SCAN_CONCURRENCY", 5),
            http_timeout=_env_float("HTTP_TIMEOUT", 8.0),
            max_redirects=_env_int("MAX_REDIRECTS", 5),
            user_agent=os.getenv("USER_AGENT") or DEFAULT_USER_AGENT,
            try_all_candidates=_env_bool("TRY_ALL_CANDIDATES", "true"),
            max_body_bytes=_env_int("MAX_BODY_BYTES", 2 * 1024 * 1024),
            content_scan_limit=_env_int("CONTENT_SCAN_LIMIT", 50_000),
            rate_limit_delay=_env_float("RATE_LIMIT_DELAY", 0.0),
            verify_ssl=_env_bool("VERIFY_SSL", "true"),
        )

        # ===== HTTP SERVICE =====
        # Batch caps are a deployment concern, the pipeline takes any size
        self.service = ServiceConfig(
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 3000),
            bulk_max_domains=_env_int("BULK_MAX_DOMAINS", 50),
            batch_scan_max_domains=_env_int("BATCH_SCAN_MAX_DOMAINS", 5),
            scan=self.scan,
        )

        # ===== OUTPUT =====
        self.out_dir = Path(os.getenv("OUT_DIR", "out"))
        self.enable_excel = _env_bool("ENABLE_EXCEL", "false")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    def to_dict(self) -> dict:
        """Convert config to dict for run metadata."""
        return {
            'scan': self.scan.to_dict(),
            'bulk_max_domains': self.service.bulk_max_domains,
            'batch_scan_max_domains': self.service.batch_scan_max_domains,
            'out_dir': str(self.out_dir),
            'enable_excel': self.enable_excel,
        }

    def __repr__(self) -> str:
        """Human-readable config summary."""
        return (
            f"Config(\n"
            f"  concurrency={self.scan.concurrency}\n"
            f"  http_timeout={self.scan.http_timeout}s\n"
            f"  try_all_candidates={self.scan.try_all_candidates}\n"
            f"  out_dir={self.out_dir}\n"
            f")"
        )
