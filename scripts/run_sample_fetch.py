#!/usr/bin/env python3
"""Sample fetch harness for checking live sources by hand.

Runs one pipeline pass over a few jurisdictions against the real providers,
writes the JSON export to a scratch directory and prints a per-adapter
breakdown of which provider answered and which failed.

Usage:
    python scripts/run_sample_fetch.py --states OR,WA,TX
    python scripts/run_sample_fetch.py --states CA --output /tmp/warn-sample --log-level DEBUG
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from app.config.exceptions import ConfigurationError
from app.config.loader import load_config
from app.logging.config import configure_logging
from app.main import parse_states
from app.pipeline import IngestPipeline
from app.sinks import JsonExportSink


def print_header(title: str):
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def print_summary_table(result):
    """Print run totals followed by one line per adapter."""
    print_header("Fetch Summary")

    metrics = [
        ("Notices fetched", result.total_fetched),
        ("Notices after merge", result.total_notices),
        ("Jurisdictions failed", ", ".join(result.failed_jurisdictions) or "none"),
        ("Sink errors", len(result.sink_errors)),
        ("Duration (seconds)", f"{result.total_duration_seconds:.2f}"),
    ]
    label_width = max(len(label) for label, _ in metrics)
    print("┌" + "─" * (label_width + 2) + "┬" + "─" * 22 + "┐")
    for label, value in metrics:
        print(f"│ {label:<{label_width}} │ {str(value):<20} │")
    print("└" + "─" * (label_width + 2) + "┴" + "─" * 22 + "┘")

    print_header("Per-Adapter Breakdown")
    for stats in sorted(result.adapter_stats, key=lambda s: s.jurisdiction):
        provider = stats.provider_used or "-"
        print(
            f"{stats.jurisdiction}  {stats.status.value:<9} {stats.notice_count:>5} notice(s)  "
            f"{stats.duration_seconds:6.1f}s  via {provider}"
        )
        for error in stats.provider_errors:
            print(f"      ! {error}")
        if stats.error_message:
            print(f"      ! {stats.error_message}")


def main():
    parser = argparse.ArgumentParser(
        description="Run a sample fetch against live WARN sources",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", type=Path, default=None, help="Configuration file (optional)")
    parser.add_argument("--states", default="OR,WA,TX", help="Jurisdictions to fetch (default: OR,WA,TX)")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("data/sample_fetch"),
        help="Export directory (default: data/sample_fetch)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    args = parser.parse_args()

    load_dotenv()

    try:
        app_config, env_config = load_config(args.config)
        states = parse_states(args.states)
    except ConfigurationError as e:
        print(f"\n❌ Configuration error: {e}")
        return 1

    configure_logging(level=args.log_level, format_type=app_config.logging.format, environment="sample")

    print_header("WARN Notice Pipeline - Sample Fetch")
    print(f"States: {', '.join(states)}")
    print(f"Export directory: {args.output.absolute()}")

    pipeline = IngestPipeline(
        app_config=app_config,
        env_config=env_config,
        sinks=[JsonExportSink(str(args.output))],
        states=states,
    )
    result = pipeline.run_once()
    print_summary_table(result)

    top = result.notices[:5]
    if top:
        print_header("Highest Nursing Impact")
        for notice in top:
            impact = notice.impact
            print(
                f"{impact.score:>3} {impact.label:<8} {notice.jurisdiction} "
                f"{notice.employer_name} ({notice.notice_date or 'no date'})"
            )

    print(f"\nExport written to {args.output.absolute()}\n")
    return 1 if result.had_errors else 0


if __name__ == "__main__":
    sys.exit(main())
