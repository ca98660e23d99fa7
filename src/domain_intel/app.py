"""Command-line entry point.

    domain-intel scan example.com acme.io --file more_domains.txt --excel
    domain-intel serve --port 3000

Settings come from .env (see util.config); flags override them per run.
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from domain_intel.scanner.output.writer import OutputWriter
from domain_intel.scanner.runner import BatchScanner
from domain_intel.server import run_server
from domain_intel.util.config import Config
from domain_intel.util.io import read_domain_list
from domain_intel.util.log import setup_logging
from domain_intel.util.time import now_utc, timestamp_str

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='domain-intel',
        description='Bulk website liveness check and business profile extraction.'
    )
    parser.add_argument('--env-file', help='Path to .env (default: ./.env)')
    parser.add_argument('--log-level', help='DEBUG, INFO, WARNING (default from LOG_LEVEL)')
    sub = parser.add_subparsers(dest='command', required=True)

    scan = sub.add_parser('scan', help='Scan domains and write results to disk')
    scan.add_argument('domains', nargs='*', help='Domains to scan')
    scan.add_argument('--file', '-f',
                      help='Domain list: one per line (# comments allowed), or a CSV with a domain/website/url column')
    scan.add_argument('--out', help='Output directory (default from OUT_DIR)')
    scan.add_argument('--excel', action='store_true', help='Also write summary.xlsx')
    scan.add_argument('--concurrency', type=int, help='Domains scanned in parallel')
    scan.add_argument('--timeout', type=float, help='Per-request timeout in seconds')
    scan.add_argument('--first-candidate-only', action='store_true',
                      help='Only try https://<domain>, no http/www fallbacks')

    serve = sub.add_parser('serve', help='Run the HTTP service')
    serve.add_argument('--host', help='Bind address (default from HOST)')
    serve.add_argument('--port', type=int, help='Port (default from PORT)')
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> None:
    """Fold command-line flags into the loaded config."""
    scan = config.scan
    if getattr(args, 'concurrency', None):
        scan.concurrency = args.concurrency
    if getattr(args, 'timeout', None):
        scan.http_timeout = args.timeout
    if getattr(args, 'first_candidate_only', False):
        scan.try_all_candidates = False
    if getattr(args, 'out', None):
        config.out_dir = Path(args.out)
    if getattr(args, 'excel', False):
        config.enable_excel = True
    if getattr(args, 'host', None):
        config.service.host = args.host
    if getattr(args, 'port', None):
        config.service.port = args.port
    scan.validate()


def collect_domains(args: argparse.Namespace) -> List[str]:
    domains = list(args.domains or [])
    if args.file:
        domains.extend(read_domain_list(args.file))
    return domains


def run_scan(config: Config, domains: List[str]) -> dict:
    """Scan a batch with a progress bar and write the output files."""
    started_at = now_utc()
    start = time.monotonic()

    with tqdm(total=len(domains), desc="Scanning", unit="domain") as progress:
        scanner = BatchScanner(config.scan)
        results = asyncio.run(scanner.run(domains, on_result=lambda i, r: progress.update(1)))

    writer = OutputWriter(str(config.out_dir), enable_excel=config.enable_excel)
    summary = writer.write_all(results, run_metadata={
        'started_at': started_at.isoformat(),
        'finished_at': now_utc().isoformat(),
        'duration_seconds': round(time.monotonic() - start, 2),
        'domain_count': len(domains),
        'config': config.to_dict(),
    })
    return {
        'summary': summary,
        'output_dir': str(writer.get_output_dir()),
        'duration_seconds': time.monotonic() - start,
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = Config(args.env_file)
        apply_overrides(config, args)
    except ValueError as e:
        print(f"\n✗ Configuration error: {e}")
        return 1

    log_file = None
    if args.command == 'scan':
        log_file = config.out_dir / "logs" / f"scan_{timestamp_str()}.log"
    setup_logging(log_file=log_file, level=args.log_level or config.log_level)

    try:
        if args.command == 'serve':
            run_server(config.service)
            return 0

        domains = collect_domains(args)
        logger.info(f"Loaded {len(domains)} domains")
        if not domains:
            print("\n✗ No domains given (pass them as arguments or with --file)")
            return 1

        result = run_scan(config, domains)
        summary = result['summary']
        print(f"\n✓ Scanned {summary['total_domains']} domains")
        print(f"  Active: {summary['active']}  Inactive: {summary['inactive']}")
        print(f"  With contact details: {summary['with_contact']}")
        print(f"  Output: {result['output_dir']}")
        print(f"  Duration: {result['duration_seconds']:.1f}s")
        return 0

    except KeyboardInterrupt:
        print("\n\n✗ Scan interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
