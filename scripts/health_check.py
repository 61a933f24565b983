#!/usr/bin/env python3
"""
Health check script for dbsync.

This script performs health checks on the components the service needs:
- Configuration validation
- Connectivity of each data source
- Upload directory writability

Can be used for monitoring, alerting, or pre-deployment validation.

Usage:
    python scripts/health_check.py [--config CONFIG_PATH] [--json]

Exit codes:
    0: All checks passed
    1: One or more checks failed
"""

import argparse
import json
import sys
import tempfile
from datetime import datetime
from pathlib import Path

import structlog

from dbsync.errors import SyncError
from dbsync.models.config import AppConfig
from dbsync.storage.data_sources import DataSourceRegistry
from dbsync.utils.config_loader import ConfigLoader

log = structlog.stdlib.get_logger()


class HealthChecker:
    """Performs health checks on system components."""

    def __init__(self, config_path: str | None = None):
        """
        Initialize health checker.

        Args:
            config_path: Optional path to configuration file
        """
        self.config_path = config_path
        self.config: AppConfig | None = None
        self.results: dict[str, dict] = {}

    def check_configuration(self) -> bool:
        """
        Check if configuration is valid.

        Returns:
            True if configuration is valid, False otherwise
        """
        check_name = "configuration"
        log.info("checking_configuration")

        try:
            config_loader = ConfigLoader()
            self.config = config_loader.load_config(self.config_path)
            warnings = config_loader.validate_config(self.config)

            self.results[check_name] = {
                "status": "warn" if warnings else "pass",
                "message": "Configuration loaded successfully",
                "details": {
                    "window_days": self.config.sync.window_days,
                    "table_overrides": sorted(self.config.sync.tables),
                    "warnings": warnings,
                },
            }
            return True

        except Exception as e:
            self.results[check_name] = {
                "status": "fail",
                "message": f"Configuration error: {str(e)}",
                "details": {},
            }
            return False

    def check_data_sources(self) -> bool:
        """
        Check that every configured data source accepts connections.

        Returns:
            True if all data sources are reachable, False otherwise
        """
        if self.config is None:
            self.results["data_sources"] = {
                "status": "skip",
                "message": "Skipped because configuration could not be loaded",
                "details": {},
            }
            return False

        log.info("checking_data_sources")

        try:
            registry = DataSourceRegistry.from_config(self.config)
        except SyncError as e:
            self.results["data_sources"] = {
                "status": "fail",
                "message": f"Could not create engines: {str(e)}",
                "details": {},
            }
            return False

        all_reachable = True
        try:
            for handle in registry.handles:
                check_name = f"data_source_{handle}"
                try:
                    registry.check(handle)
                    self.results[check_name] = {
                        "status": "pass",
                        "message": f"Data source {handle} is reachable",
                        "details": {"dialect": registry.resolve(handle).dialect.name},
                    }
                except SyncError as e:
                    all_reachable = False
                    self.results[check_name] = {
                        "status": "fail",
                        "message": str(e),
                        "details": {},
                    }
        finally:
            registry.dispose()

        return all_reachable

    def check_upload_dir(self) -> bool:
        """
        Check that the upload directory exists or can be created, and is writable.

        Returns:
            True if files can be stored, False otherwise
        """
        check_name = "upload_dir"
        if self.config is None:
            self.results[check_name] = {
                "status": "skip",
                "message": "Skipped because configuration could not be loaded",
                "details": {},
            }
            return False

        log.info("checking_upload_dir")
        upload_dir = Path(self.config.files.upload_dir)

        try:
            upload_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.TemporaryFile(dir=upload_dir):
                pass

            stored_files = sum(1 for f in upload_dir.iterdir() if f.is_file())
            self.results[check_name] = {
                "status": "pass",
                "message": "Upload directory is writable",
                "details": {
                    "upload_dir": str(upload_dir.resolve()),
                    "stored_files": stored_files,
                },
            }
            return True

        except OSError as e:
            self.results[check_name] = {
                "status": "fail",
                "message": f"Upload directory error: {str(e)}",
                "details": {"upload_dir": str(upload_dir)},
            }
            return False

    def run_all_checks(self) -> bool:
        """
        Run all health checks.

        Returns:
            True if all checks passed, False otherwise
        """
        checks = [
            self.check_configuration,
            self.check_data_sources,
            self.check_upload_dir,
        ]

        all_passed = True
        for check in checks:
            try:
                if not check():
                    all_passed = False
            except Exception as e:
                log.error("check_failed_with_exception", check=check.__name__, error=str(e))
                all_passed = False

        return all_passed

    def get_summary(self) -> dict:
        """
        Get summary of all health check results.

        Returns:
            Dictionary with summary information
        """
        statuses = [r["status"] for r in self.results.values()]
        failed = statuses.count("fail")

        return {
            "timestamp": datetime.now().isoformat(),
            "overall_status": "healthy" if failed == 0 else "unhealthy",
            "total_checks": len(statuses),
            "passed": statuses.count("pass"),
            "failed": failed,
            "warnings": statuses.count("warn"),
            "skipped": statuses.count("skip"),
            "checks": self.results,
        }


def print_summary(summary: dict) -> None:
    print("\n" + "=" * 60)
    print("HEALTH CHECK SUMMARY")
    print("=" * 60)
    print(f"Timestamp: {summary['timestamp']}")
    print(f"Overall Status: {summary['overall_status'].upper()}")
    print(f"Passed: {summary['passed']}/{summary['total_checks']}")
    print(f"Failed: {summary['failed']}")
    print(f"Warnings: {summary['warnings']}")
    print(f"Skipped: {summary['skipped']}")
    print("\n" + "-" * 60)

    for check_name, result in summary["checks"].items():
        status_symbol = {
            "pass": "✓",
            "fail": "✗",
            "warn": "⚠",
            "skip": "○",
        }.get(result["status"], "?")

        print(f"\n{status_symbol} {check_name.replace('_', ' ').title()}")
        print(f"  Message: {result['message']}")
        for key, value in result["details"].items():
            print(f"    - {key}: {value}")

    print("\n" + "=" * 60)


def main():
    """Main entry point for health check script."""
    parser = argparse.ArgumentParser(description="Health check for dbsync")
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results in JSON format",
    )

    args = parser.parse_args()

    checker = HealthChecker(config_path=args.config)
    all_passed = checker.run_all_checks()
    summary = checker.get_summary()

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print_summary(summary)

    sys.exit(0 if all_passed else 1)


if __name__ == "__main__":
    main()
