#!/usr/bin/env python3
"""CLI script for comparing or migrating data between the two databases.

This script runs the same comparison and migration as the HTTP API,
without starting a server.
"""

import argparse
import json
import sys

import structlog

from dbsync.errors import HandleValidationError
from dbsync.storage.data_sources import DataSourceRegistry
from dbsync.sync.models import CompareReport, MigrateReport
from dbsync.sync.sync_coordinator import SyncCoordinator
from dbsync.utils.config_loader import ConfigLoader, ConfigurationError
from dbsync.utils.logging_config import configure_logging

log = structlog.stdlib.get_logger()


def setup_logging(verbose: bool, config_path: str | None) -> None:
    """Configure logging based on verbosity level and config.

    Args:
        verbose: If True, set log level to DEBUG, otherwise use config
        config_path: Path to configuration file
    """
    try:
        config = ConfigLoader().load_config(config_path)
        log_level = "DEBUG" if verbose else config.logging.log_level

        configure_logging(
            log_level=log_level,
            json_logs=config.logging.json_logs,
            log_file=config.logging.log_file,
        )
    except ConfigurationError as e:
        # Fallback to console logging so the configuration error is visible
        configure_logging(log_level="DEBUG" if verbose else "INFO", json_logs=False)
        log.warning("failed_to_load_logging_config", error=str(e))


def parse_arguments() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Compare or migrate rows between the master and backup databases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report differences from master to backup
  python scripts/sync.py compare --from master --to backup

  # Copy missing and changed rows from master to backup
  python scripts/sync.py migrate --from master --to backup

  # Print the report as JSON using a custom configuration file
  python scripts/sync.py compare --from backup --to master --config config/production.yaml --json
        """,
    )

    parser.add_argument(
        "operation",
        choices=["compare", "migrate"],
        help="Operation to run",
    )

    parser.add_argument(
        "--from",
        dest="from_",
        type=str,
        required=True,
        help="Source data source (master or backup)",
    )

    parser.add_argument(
        "--to",
        type=str,
        required=True,
        help="Target data source (master or backup)",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to configuration YAML file (default: config/default.yaml)",
        default=None,
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
        default=False,
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
        default=False,
    )

    return parser.parse_args()


def print_compare_report(report: CompareReport) -> None:
    print(f"\nComparison window: {report.time_range}")
    print(f"  Tables compared: {report.total_tables}")
    print(f"  Consistent: {report.consistent_tables}")
    print(f"  Inconsistent: {report.inconsistent_tables}")

    for table_name, difference in report.table_differences.items():
        if isinstance(difference, str):
            print(f"    ✗ {table_name}: {difference}")
        elif difference.consistent:
            print(f"    ✓ {table_name}: {difference.description}")
        else:
            print(f"    ≠ {table_name}: {difference.description}")


def print_migrate_report(report: MigrateReport) -> None:
    print(f"\nMigration window: {report.time_range}")
    print(f"  Tables: {report.total_tables}")
    print(f"  Migrated: {report.success_count}")
    print(f"  Failed: {report.failed_count}")

    for entry in report.failed_tables:
        print(f"    - {entry}")


def run_operation(coordinator: SyncCoordinator, args: argparse.Namespace) -> int:
    """Run the requested operation and print its report.

    Returns:
        Exit code (0 for success, 1 if any table failed)
    """
    if args.operation == "compare":
        report = coordinator.compare(args.from_, args.to)
        failed = len(report.failed_tables)
    else:
        report = coordinator.migrate(args.from_, args.to)
        failed = report.failed_count

    if args.json:
        print(json.dumps(report.model_dump(by_alias=True), indent=2))
    elif args.operation == "compare":
        print_compare_report(report)
    else:
        print_migrate_report(report)

    return 1 if failed else 0


def main() -> int:
    """Main entry point for the sync CLI.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = parse_arguments()

    setup_logging(args.verbose, args.config)

    log.info(
        "sync_cli_started",
        operation=args.operation,
        source=args.from_,
        target=args.to,
        config=args.config,
    )

    registry = None
    try:
        config = ConfigLoader().load_config(args.config)
        registry = DataSourceRegistry.from_config(config)
        coordinator = SyncCoordinator(registry, config.sync)
        return run_operation(coordinator, args)

    except ConfigurationError as e:
        print(f"\n✗ Configuration error: {e}")
        print("\nPlease check your configuration file and environment variables.")
        return 1
    except HandleValidationError as e:
        print(f"\n✗ {e}")
        return 1
    except KeyboardInterrupt:
        log.info("sync_interrupted_by_user")
        print("\n\nSync interrupted by user.")
        return 1
    except Exception as e:
        log.error("sync_failed", operation=args.operation, error=str(e))
        label = "Database comparison" if args.operation == "compare" else "Data migration"
        print(f"\n✗ {label} failed: {e}")
        return 1
    finally:
        if registry is not None:
            registry.dispose()


if __name__ == "__main__":
    sys.exit(main())
