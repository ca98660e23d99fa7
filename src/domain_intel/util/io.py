"""File helpers: domain lists in, result files out."""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

# Column names tried, in order, when a domain list is a CSV export
DOMAIN_COLUMNS = ('domain', 'website', 'url', 'site')


def ensure_dir(path: Path) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_json(path: Path, data: Any, indent: int = 2) -> None:
    """UTF-8 JSON; business names stay readable (no \\u escapes)."""
    path = Path(path)
    ensure_dir(path.parent)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, default=str, ensure_ascii=False)
    logger.debug(f"Wrote {path}")


def write_csv(path: Path, rows: Sequence[Dict[str, Any]], fieldnames: Sequence[str]) -> None:
    """One row per result. An empty batch still gets its header line."""
    path = Path(path)
    ensure_dir(path.parent)
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=list(fieldnames), extrasaction='ignore')
        writer.writeheader()
        writer.writerows(rows)
    logger.debug(f"Wrote {len(rows)} rows to {path}")


def _domain_column(header: List[str]) -> Optional[int]:
    lowered = [h.strip().lower() for h in header]
    for name in DOMAIN_COLUMNS:
        if name in lowered:
            return lowered.index(name)
    return None


def _read_csv_domains(path: Path) -> List[str]:
    with open(path, newline='', encoding='utf-8-sig') as f:
        rows = [row for row in csv.reader(f) if row]
    if not rows:
        return []
    column = _domain_column(rows[0])
    if column is None:
        # No recognizable header: first column, first row included
        column, body = 0, rows
    else:
        body = rows[1:]
    return [row[column].strip() for row in body if len(row) > column and row[column].strip()]


def read_domain_list(path: Path) -> List[str]:
    """Domains from a text file (one per line, # comments) or a CSV export.

    Order and duplicates are preserved: every entry gets its own result.
    A missing file gives an empty list.
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Domain list not found: {path}")
        return []

    if path.suffix.lower() == '.csv':
        domains = _read_csv_domains(path)
    else:
        with open(path, encoding='utf-8-sig') as f:
            domains = [line.strip() for line in f
                       if line.strip() and not line.lstrip().startswith('#')]

    logger.info(f"Read {len(domains)} domains from {path.name}")
    return domains
