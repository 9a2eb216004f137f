#!/usr/bin/env python3
"""
Unified CLI Runner for the Trade Journal Analytics Engine
Main entry point for all operations.

Usage:
    python -m tradejournal.run report [--config CONFIG] [--store STORE] [--capital N] [--date DATE]
    python -m tradejournal.run export [--config CONFIG] [--store STORE] [--output FILE] [--capital N]
    python -m tradejournal.run api [--host HOST] [--port PORT] [--reload]
"""

import argparse
import sys

from tradejournal.core.logger import get_logger

logger = get_logger(__name__)


def run_report(args):
    """Print a performance report."""
    from tradejournal.cli.report import main as report_main

    sys.argv = ["report"]
    if args.config:
        sys.argv.extend(["--config", args.config])
    if args.store:
        sys.argv.extend(["--store", args.store])
    if args.capital is not None:
        sys.argv.extend(["--capital", str(args.capital)])
    if args.date:
        sys.argv.extend(["--date", args.date])

    report_main()


def run_export(args):
    """Export analytics to Excel."""
    from tradejournal.cli.export_to_excel import export_to_excel
    from tradejournal.core.config import get_param, load_config
    from tradejournal.core.data_loader import load_trades

    cfg = load_config(args.config)
    capital = get_param(cfg, "analytics", "initial_capital", default=0.0) if args.capital is None else args.capital

    output = export_to_excel(
        load_trades(args.store or get_param(cfg, "journal", "store_path")),
        output_file=args.output,
        initial_capital=capital,
        monthly_contribution=get_param(cfg, "projection", "monthly_contribution", default=0.0),
        conservative=get_param(cfg, "projection", "conservative", default=False),
    )
    print(f"Excel export complete: {output}")


def run_api(args):
    """Start FastAPI server."""
    import uvicorn

    uvicorn.run(
        "tradejournal.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info"
    )


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Unified CLI Runner for the Trade Journal Analytics Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Report command
    report_parser = subparsers.add_parser("report", help="Print a performance report")
    report_parser.add_argument("--config", type=str, default=None, help="Config file path")
    report_parser.add_argument("--store", type=str, default=None, help="Trade store (JSON or CSV)")
    report_parser.add_argument("--capital", type=float, default=None, help="Initial capital")
    report_parser.add_argument("--date", type=str, help="Reference date for insights (YYYY-MM-DD)")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export analytics to Excel")
    export_parser.add_argument("--config", type=str, default=None, help="Config file path")
    export_parser.add_argument("--store", type=str, default=None, help="Trade store (JSON or CSV)")
    export_parser.add_argument("--output", type=str, default=None, help="Output .xlsx file")
    export_parser.add_argument("--capital", type=float, default=None, help="Initial capital")

    # API server command
    api_parser = subparsers.add_parser("api", help="Start FastAPI server")
    api_parser.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")
    api_parser.add_argument("--port", type=int, default=8084, help="Port to bind to")
    api_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Route to appropriate function
    commands = {
        "report": run_report,
        "export": run_export,
        "api": run_api,
    }

    try:
        commands[args.command](args)
    except KeyboardInterrupt:
        sys.exit(0)
    except Exception as e:
        logger.error(f"Error running {args.command}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
