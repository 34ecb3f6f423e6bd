"""
Command-line interface for the TLB analyzer.

Usage:
    tlb-analyzer <tlb_size> <tlb_way> <ntlb_size> <pwc_size> <mode> [options]
    tlb-analyzer --help

Modes:
    0 = NTLB       nested TLB only
    1 = PWC_EPT    page walk cache with extended paging
    2 = PWC_NOEPT  page walk cache without extended paging
    3 = FULL       nested TLB + page walk cache

Examples:
    # Nested TLB of 32 entries on traces captured with a 64-entry 4-way TLB
    tlb-analyzer 64 4 32 16 0

    # Combined design, rich table, four worker processes
    tlb-analyzer 64 4 32 16 3 --format table --jobs 4

    # Save JSON results
    tlb-analyzer 64 4 32 16 1 --format json --output results/pwc.json

    # HTML report (JSON results are saved next to it)
    tlb-analyzer 64 4 32 16 3 --format html --output results/full.html
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from tlb_analyzer.errors import ConfigurationError, TraceFileError
from tlb_analyzer.io.config import DEFAULT_TRACE_DIR, build_config
from tlb_analyzer.io.formatter import format_output, save_output
from tlb_analyzer.models.mode import SimulationMode
from tlb_analyzer.simulator.batch import run_simulation
from tlb_analyzer.visualizer.html import HTMLVisualizer
from tlb_analyzer.visualizer.terminal import TerminalVisualizer
from tlb_analyzer.visualizer.text import TextVisualizer


class UsageArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def configure_logging(verbosity: int) -> None:
    """Route log records to stderr through Rich."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = UsageArgumentParser(
        prog="tlb-analyzer",
        description="Nested translation cache simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes: 0=NTLB, 1=PWC_EPT, 2=PWC_NOEPT, 3=FULL

Examples:
  %(prog)s 64 4 32 16 0
  %(prog)s 64 4 32 16 3 --format table --jobs 4
  %(prog)s 64 4 32 16 1 --format json --output results/pwc.json
  %(prog)s 64 4 32 16 3 --format html --output results/full.html
        """
    )

    parser.add_argument("tlb_size", type=int, help="First-level TLB size (selects traces)")
    parser.add_argument("tlb_way", type=int, help="First-level TLB ways (selects traces, default for all caches)")
    parser.add_argument("ntlb_size", type=int, help="Nested TLB size")
    parser.add_argument("pwc_size", type=int, help="Page walk cache size")
    parser.add_argument(
        "mode",
        type=int,
        choices=[m.value for m in SimulationMode],
        help="Simulation mode"
    )

    parser.add_argument(
        "-d", "--trace-dir",
        type=Path,
        default=DEFAULT_TRACE_DIR,
        help=f"Folder holding trace files (default: {DEFAULT_TRACE_DIR})"
    )

    parser.add_argument("--ntlb-way", type=int, default=None, help="Nested TLB ways (default: tlb_way)")
    parser.add_argument("--pwc-way", type=int, default=None, help="Page walk cache ways (default: tlb_way)")

    parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=1,
        help="Worker processes (default: 1)"
    )

    parser.add_argument(
        "-f", "--format",
        choices=["text", "table", "json", "html"],
        default="text",
        help="Output format: text, table, json, or html (default: text)"
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Write results to this file (JSON; HTML report for --format html)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    try:
        config = build_config(
            args.tlb_size,
            args.tlb_way,
            args.ntlb_size,
            args.pwc_size,
            args.mode,
            ntlb_way=args.ntlb_way,
            pwc_way=args.pwc_way,
            trace_dir=args.trace_dir,
            jobs=args.jobs,
        )
        results = run_simulation(config)

    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except TraceFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == "text":
        TextVisualizer(config).visualize(results)
    elif args.format == "table":
        TerminalVisualizer(config).visualize(results)

    output = format_output(results, config)

    if args.format == "json" and args.output is None:
        print(output.to_json())

    if args.format == "html":
        html_viz = HTMLVisualizer(config)
        if args.output is None:
            html_viz.visualize(results)
        else:
            html_viz.save(results, args.output)
            print(f"HTML saved to: {args.output}", file=sys.stderr)

            # Always save JSON alongside HTML
            json_path = args.output.with_suffix(".json")
            save_output(output, json_path)
            print(f"JSON saved to: {json_path}", file=sys.stderr)

    elif args.output is not None:
        save_output(output, args.output)
        if args.format != "json":
            print(f"JSON saved to: {args.output}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
