#!/usr/bin/env python3
"""
Main CLI for the index comparison workbench.
Usage: python cli.py compare [--start YYYYMMDD] [--end YYYYMMDD]
       python cli.py etf-nav [TS_CODE]
"""

import os
import sys
import json
import logging
import argparse
from pathlib import Path
from typing import Dict, Any, List, Optional

from dotenv import load_dotenv

from ingestion.instruments import load_instruments, InstrumentConfigError
from pipeline.index_compare_dag import CompareConfig, run_index_compare
from pipeline.etf_nav_dag import EtfNavConfig, run_etf_nav, DEFAULT_FUND_CODE

# Load environment variables
load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        description='Compare CSI index performance',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py compare
  python cli.py compare --start 20230101 --end 20231231 --output compare.json
  python cli.py etf-nav 563300.SH --start 20240101
        """
    )
    parser.add_argument('--verbose', '-v',
                        action='store_true',
                        help='Debug logging (default level from LOG_LEVEL, else WARNING)')

    subparsers = parser.add_subparsers(dest='command')

    compare = subparsers.add_parser('compare', help='Align, rebase and score the configured indices')
    compare.add_argument('--config',
                         help='Instrument registry YAML (default: INDEX_CONFIG_PATH or ./config/indices.yml)')
    compare.add_argument('--workers',
                         type=int,
                         help='Concurrent fetches (default: FETCH_WORKERS or 5)')
    _add_common_arguments(compare)

    nav = subparsers.add_parser('etf-nav', help='Fetch an ETF net asset value history')
    nav.add_argument('ts_code',
                     nargs='?',
                     default=DEFAULT_FUND_CODE,
                     help=f'Tushare fund code (default: {DEFAULT_FUND_CODE})')
    _add_common_arguments(nav)

    return parser


def _add_common_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument('--start', help='Start date (YYYYMMDD)')
    subparser.add_argument('--end', help='End date (YYYYMMDD, default: today)')
    subparser.add_argument('--output', help='Write the JSON payload to this file')
    subparser.add_argument('--quiet', '-q',
                           action='store_true',
                           help='Minimal output (just success/failure)')


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args.verbose)

    try:
        if args.command == 'compare':
            instruments = load_instruments(args.config)
            config = CompareConfig(
                instruments=instruments,
                start_date=args.start,
                end_date=args.end,
                workers=args.workers
            )
            if not args.quiet:
                print(f"Comparing {len(instruments)} indices: {config.start_date} to {config.end_date}")
            payload = run_index_compare(config)
        else:
            config = EtfNavConfig(ts_code=args.ts_code, start_date=args.start, end_date=args.end)
            if not args.quiet:
                print(f"Fetching NAV for {config.ts_code}: {config.start_date} to {config.end_date}")
            payload = run_etf_nav(config)
    except (InstrumentConfigError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    if not payload['success']:
        print(f"ERROR: {payload['message']}", file=sys.stderr)
        sys.exit(1)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        if not args.quiet:
            print(f"Payload written to {output_path}")
    elif args.quiet:
        print(json.dumps(payload, ensure_ascii=False))

    if not args.quiet:
        if args.command == 'compare':
            _display_compare_results(payload)
        else:
            print(f"NAV rows: {payload['count']}")


def _configure_logging(verbose: bool) -> None:
    level_name = 'DEBUG' if verbose else os.getenv('LOG_LEVEL', 'WARNING').upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )


def _display_compare_results(payload: Dict[str, Any]):
    """Display a per-index metrics summary."""
    print(f"Rows: {payload['count']}")
    print()

    metrics = payload['performanceMetrics']
    header = f"{'Index':<16}{'AnnRet%':>10}{'Vol%':>9}{'Sharpe':>9}{'MaxDD%':>9}{'Calmar':>9}{'Sortino':>9}{'Win%':>8}"
    print(header)
    print('-' * len(header))

    for index in payload['indices']:
        m = metrics.get(index['key'])
        if m is None:
            print(f"{index['key']:<16}{'not available':>63}")
            continue
        print(
            f"{index['key']:<16}"
            f"{_fmt_pct(m['annualizedReturn']):>10}"
            f"{m['annualizedVolatility']:>9.2f}"
            f"{_fmt_ratio(m['sharpeRatio']):>9}"
            f"{m['maxDrawdown']:>9.2f}"
            f"{_fmt_ratio(m['calmarRatio']):>9}"
            f"{_fmt_ratio(m['sortinoRatio']):>9}"
            f"{m['winRate']:>8.2f}"
        )


def _fmt_ratio(value: Optional[float]) -> str:
    return 'n/a' if value is None else f"{value:.3f}"


def _fmt_pct(value: Optional[float]) -> str:
    return 'n/a' if value is None else f"{value:.2f}"


if __name__ == '__main__':
    main()
