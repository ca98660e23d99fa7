"""CSV/JSON and optional Excel output writer.

Primary output is JSON (same shape as the HTTP API) plus a flat CSV.
Excel is optional and generated from the same rows if enabled.
"""

import logging
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from domain_intel.util.types import ScanResult, ScanStatus
from domain_intel.util.io import write_csv, write_json, ensure_dir
from domain_intel.util.time import timestamp_str, date_str

logger = logging.getLogger(__name__)

CSV_FIELDS = [
    'domain', 'status', 'status_code', 'reason',
    'name', 'street', 'city', 'state', 'zip', 'phone', 'email',
    'facebook', 'instagram', 'linkedin', 'gmb',
]


def summarize(results: List[ScanResult]) -> Dict[str, Any]:
    """Batch-level counts for metadata and the Excel summary sheet."""
    reasons = Counter(r.reason for r in results if r.reason)
    with_contact = sum(1 for r in results if r.profile.email or r.profile.phone)
    return {
        'total_domains': len(results),
        'active': sum(1 for r in results if r.status is ScanStatus.ACTIVE),
        'inactive': sum(1 for r in results if r.status is ScanStatus.INACTIVE),
        'with_contact': with_contact,
        'reasons': dict(reasons.most_common()),
    }


class OutputWriter:
    """Writes batch results to disk.

    Output structure:
      out/<date>/<timestamp>/
        results.json          # One object per domain, API shape
        results.csv           # Flattened, one row per domain
        run_metadata.json     # Timing, config, summary counts
        summary.xlsx          # Optional Excel workbook
    """

    def __init__(self, out_dir: str = "out", enable_excel: bool = False, run_dir: Optional[Path] = None):
        """Results go to `<out_dir>/<date>/<timestamp>/` unless `run_dir` pins
        an exact directory (tests, or re-running into a known location).
        """
        self.enable_excel = enable_excel

        if run_dir:
            self.run_dir = Path(run_dir)
        else:
            self.run_dir = Path(out_dir) / date_str() / timestamp_str()
        ensure_dir(self.run_dir)

        logger.info(f"Output directory: {self.run_dir}")

    def write_all(self, results: List[ScanResult], run_metadata: Dict[str, Any]) -> Dict[str, Any]:
        """Write all output files. Returns the batch summary."""
        summary = summarize(results)

        write_json(self.run_dir / "results.json", [r.to_dict() for r in results])
        logger.info(f"Wrote {len(results)} results to results.json")

        write_csv(self.run_dir / "results.csv", [r.to_row() for r in results], fieldnames=CSV_FIELDS)

        write_json(self.run_dir / "run_metadata.json", {**run_metadata, 'summary': summary})

        if self.enable_excel:
            self._write_excel(results, summary)

        logger.info(f"Output written to {self.run_dir}")
        return summary

    def _write_excel(self, results: List[ScanResult], summary: Dict[str, Any]) -> None:
        """Results, Summary and Reasons sheets.

        Runs after the CSV/JSON files exist, so a workbook failure is only logged.
        """
        output_file = self.run_dir / "summary.xlsx"
        try:
            with pd.ExcelWriter(output_file, engine='openpyxl') as writer:
                results_df = pd.DataFrame([r.to_row() for r in results], columns=CSV_FIELDS)
                results_df.to_excel(writer, sheet_name='Results', index=False)

                counts = {k: v for k, v in summary.items() if k != 'reasons'}
                pd.DataFrame({'Metric': list(counts.keys()), 'Value': list(counts.values())}) \
                    .to_excel(writer, sheet_name='Summary', index=False)

                pd.DataFrame(list(summary['reasons'].items()), columns=['Reason', 'Domains']) \
                    .to_excel(writer, sheet_name='Reasons', index=False)

            logger.info(f"Wrote Excel summary to {output_file.name}")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write Excel output: {e}")

    def get_output_dir(self) -> Path:
        return self.run_dir
