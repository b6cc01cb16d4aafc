"""Main entry point for the WARN notice pipeline."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import os
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from app.config.environment import EnvironmentConfig
from app.config.exceptions import ConfigurationError
from app.config.loader import load_config
from app.config.models import AppConfig
from app.domain.jurisdictions import resolve_state
from app.logging import get_logger
from app.logging.config import configure_logging
from app.persistence.database import close_database, init_database
from app.pipeline import IngestPipeline, PipelineRunResult
from app.scheduler import SchedulerService
from app.sinks import DatabaseSink, JsonExportSink, NoticeSink

logger = get_logger(__name__, component="cli")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_states(value: Optional[str]) -> List[str]:
    """Parse a comma-separated --states value into two-letter codes.

    Raises:
        ConfigurationError: If any entry is not a known jurisdiction
    """
    if not value:
        return []
    codes: List[str] = []
    unknown: List[str] = []
    for item in value.split(","):
        if not item.strip():
            continue
        code = resolve_state(item)
        if code is None:
            unknown.append(item.strip())
        elif code not in codes:
            codes.append(code)
    if unknown:
        raise ConfigurationError(
            f"Unknown jurisdiction(s) in --states: {', '.join(unknown)}",
            suggestions=["Use two-letter codes separated by commas, e.g. --states CA,NY"],
        )
    return codes


def load_runtime_config(
    config_path: Optional[Path],
    log_level_override: Optional[str],
    states_override: Optional[str] = None,
    output_override: Optional[str] = None,
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and apply CLI overrides.

    Precedence for each setting: CLI flag > environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    updates = {}
    if log_level_override:
        env_config.log_level = log_level_override
        updates["logging"] = app_config.logging.model_copy(update={"level": log_level_override})
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    states = parse_states(states_override)
    if states:
        env_config.states = states
        updates["states"] = states
    if output_override:
        updates["output"] = app_config.output.model_copy(update={"export_dir": output_override})

    if updates:
        app_config = app_config.model_copy(update=updates)
    return app_config, env_config


def build_sinks(app_config: AppConfig, env_config: EnvironmentConfig) -> List[NoticeSink]:
    """JSON export always; the notice store when output.database_enabled is set."""
    sinks: List[NoticeSink] = [
        JsonExportSink(app_config.output.export_dir, write_per_state=app_config.output.write_per_state)
    ]
    if app_config.output.database_enabled:
        init_database(env_config.database_url)
        sinks.append(DatabaseSink())
    return sinks


def log_run_summary(result: PipelineRunResult) -> None:
    if result.skipped:
        logger.warning("Run skipped", extra={"event": "service.manual_run.skipped"})
        return
    logger.info(
        f"Run completed: {result.total_fetched} fetched, {result.total_notices} after merge, "
        f"{len(result.failed_jurisdictions)} jurisdiction(s) failed",
        extra={
            "event": "service.manual_run.completed",
            "run_id": result.run_id,
            "duration_seconds": round(result.total_duration_seconds, 3),
            "total_fetched": result.total_fetched,
            "total_notices": result.total_notices,
            "states_failed": result.failed_jurisdictions,
            "sink_errors": result.sink_errors,
            "had_errors": result.had_errors,
        },
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="WARN notice pipeline - fetch, merge and score layoff notices from every state"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present, else built-in defaults)",
    )
    parser.add_argument(
        "--manual-run",
        action="store_true",
        help="Run a single fetch immediately and exit",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=LOG_LEVELS,
        help="Log level (overrides config and environment)",
    )
    parser.add_argument(
        "--states",
        default=None,
        help="Comma-separated jurisdictions to fetch, e.g. CA,NY (default: all)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Export directory (overrides output.export_dir)",
    )
    parser.add_argument(
        "--fail-on-errors",
        action="store_true",
        help="With --manual-run, exit 1 when any jurisdiction or sink failed",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the WARN notice pipeline.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(
            args.config, args.log_level, args.states, args.output
        )
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=os.environ.get("ENVIRONMENT", "local"),
        )
        logger.info(
            "WARN notice pipeline starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "manual_run": args.manual_run,
                "states": app_config.states or "all",
                "export_dir": app_config.output.export_dir,
                "scan_interval_seconds": app_config.scan_interval_seconds,
            },
        )

        pipeline = IngestPipeline(
            app_config=app_config,
            env_config=env_config,
            sinks=build_sinks(app_config, env_config),
            states=app_config.states or None,
        )

        if args.manual_run:
            result = pipeline.run_once()
            log_run_summary(result)
            close_database()
            logger.info(
                "WARN notice pipeline stopped",
                extra={"event": "service.stopping", "uptime_seconds": round(time.time() - start_time, 2)},
            )
            return 1 if args.fail_on_errors and result.had_errors else 0

        shutdown_event = threading.Event()
        scheduler_service = SchedulerService(
            run_callable=pipeline.run_once,
            interval_seconds=app_config.scan_interval_seconds,
            shutdown_event=shutdown_event,
        )

        def signal_handler(signum, frame):
            logger.info(
                f"Received signal {signum}, shutting down",
                extra={"event": "service.signal_received", "signal": signum},
            )
            scheduler_service.shutdown(wait=False)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        scheduler_service.start()
        logger.info("Scheduler started. Press Ctrl+C to stop", extra={"event": "service.daemon_mode.started"})

        try:
            shutdown_event.wait()
        except KeyboardInterrupt:
            scheduler_service.shutdown(wait=False)
        finally:
            close_database()

        logger.info(
            "WARN notice pipeline stopped",
            extra={"event": "service.stopping", "uptime_seconds": round(time.time() - start_time, 2)},
        )
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e.message}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={"event": "service.startup.failed", "error_type": type(e).__name__},
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
