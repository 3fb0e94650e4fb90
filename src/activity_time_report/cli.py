"""
Command-line entry point
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import attrs

from activity_time_report.config import DEFAULT_CONFIG_PATH, ExportConfig, load_config
from activity_time_report.exceptions import (
    ActivityReportError,
    MissingOptionalDependencyError,
)
from activity_time_report.export import export_report
from activity_time_report.pipeline import ActivityTimeReporter
from activity_time_report.store import MongoActivityStore

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger for command-line use."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Export the time each person spent on activities."
    )
    p.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Path to the JSON or YAML config (default: %(default)s).",
    )
    p.add_argument("--output-dir", type=Path, help="Overrides the config's output_dir.")
    p.add_argument(
        "--skip-failed-persons",
        action="store_true",
        help="Leave out people whose query fails instead of aborting.",
    )
    p.add_argument(
        "--no-excel", action="store_true", help="Don't write the spreadsheet."
    )
    p.add_argument("--jobs", type=int, help="Number of queries to run in parallel.")
    p.add_argument("--progress", action="store_true", help="Show a progress bar.")
    p.add_argument("--log-level", help="Overrides the config's log_level.")
    return p.parse_args(argv)


def apply_overrides(config: ExportConfig, args: argparse.Namespace) -> ExportConfig:
    """
    Apply command-line overrides to a config

    Parameters
    ----------
    config
        Config loaded from file

    args
        Parsed command-line arguments

    Returns
    -------
    :
        Config with the overrides applied
    """
    overrides: dict[str, object] = {}
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    if args.skip_failed_persons:
        overrides["on_query_error"] = "skip"
    if args.no_excel:
        overrides["write_excel"] = False
    if args.jobs is not None:
        overrides["n_processes"] = args.jobs
    if args.progress:
        overrides["progress"] = True
    if args.log_level is not None:
        overrides["log_level"] = args.log_level

    return attrs.evolve(config, **overrides)


def run(config: ExportConfig) -> list[Path]:
    """
    Produce and write the report

    Parameters
    ----------
    config
        Configuration of the run

    Returns
    -------
    :
        Paths of the files written
    """
    store = MongoActivityStore.from_config(config)
    try:
        table = ActivityTimeReporter(
            store=store,
            on_query_error=config.on_query_error,
            progress=config.progress,
            n_processes=config.n_processes,
        )()
    finally:
        store.close()

    logger.info("Report:\n%s", table)

    return export_report(
        table,
        output_dir=config.output_dir,
        csv_name=config.csv_name,
        transcoded_name=config.transcoded_name,
        transcode_encoding=config.transcode_encoding,
        excel_name=config.excel_name if config.write_excel else None,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = apply_overrides(load_config(args.config), args)
    except (ActivityReportError, TypeError, ValueError) as exc:
        setup_logging()
        logger.error("%s", exc)
        return 1

    setup_logging(config.log_level)
    try:
        run(config)
    except (
        ActivityReportError,
        MissingOptionalDependencyError,
        # Failed report checks and file system errors while writing
        AssertionError,
        OSError,
    ) as exc:
        logger.error("Export failed, no report written: %s", exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
