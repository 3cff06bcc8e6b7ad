from __future__ import annotations

import argparse
import getpass
import logging
import platform
from datetime import datetime

from pydantic import ValidationError

from apiharness import __version__
from apiharness.assertions import AssertionEngine
from apiharness.batch_executor import BatchExecutor
from apiharness.batch_thread_executor import BatchThreadExecutor
from apiharness.config import Settings, get_settings
from apiharness.log import setup_logging
from apiharness.result_exporter import ResultExporter
from apiharness.result_summary import build_summary
from apiharness.suite import SuiteError, build_client, build_user_suite, load_cases

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="apiharness", description="Run REST API test suites and write reports")
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--cases", help="JSON case file to run instead of the built-in users suite")
    parser.add_argument("--base-url", help="Override the configured base URL")
    parser.add_argument("--output-dir", help="Directory for JSON/HTML reports")
    parser.add_argument("--workers", type=int, default=1, help="Run cases on this many threads")
    parser.add_argument("--env-file", help="Read settings from this .env file")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--no-html", action="store_true", help="Skip the HTML report")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.version:
        print(__version__)
        return 0

    try:
        settings = get_settings(
            env_file=args.env_file,
            base_url=args.base_url,
            report_dir=args.output_dir,
            log_level=args.log_level,
        )
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}")
        return 2

    setup_logging(settings.log_level, settings.log_dir)
    logger.info("===== STARTING TEST SUITE =====")
    logger.info("Base URL: %s", settings.base_url)
    logger.info("Environment: %s", settings.environment)

    try:
        suite = _load_suite(args.cases, settings)
    except SuiteError as exc:
        logger.error("Suite setup failed: %s", exc)
        return 2

    client = build_client(settings)
    engine = AssertionEngine()
    if args.workers > 1:
        executor: BatchExecutor = BatchThreadExecutor(client, engine, max_workers=args.workers)
    else:
        executor = BatchExecutor(client, engine)
    cases = executor.run_cases(suite["cases"])
    summary = build_summary(cases)

    result = {
        "suite_name": suite["suite_name"],
        "environment": settings.environment,
        "base_url": settings.base_url,
        "system_info": system_info(settings),
        "summary": summary,
        "cases": cases,
        "execute_time": datetime.now().isoformat(timespec="seconds"),
    }
    exporter = ResultExporter()
    json_path = exporter.export_json(result, settings.report_dir)
    print(f"JSON report: {json_path}")
    if not args.no_html:
        html_path = exporter.export_html(result, settings.report_dir)
        print(f"HTML report: {html_path}")

    print(
        f"{summary['total']} cases: {summary['pass']} passed, {summary['fail']} failed, "
        f"{summary['warn']} warnings ({summary['pass_rate']}%)"
    )
    logger.info("===== TEST SUITE COMPLETED =====")
    return 1 if summary["fail"] else 0


def _load_suite(cases_file: str | None, settings: Settings) -> dict:
    if cases_file is None:
        return build_user_suite(settings)
    return load_cases(cases_file)


def system_info(settings: Settings) -> dict:
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "unknown"
    return {
        "Application": "REST API Testing Framework",
        "Operating System": platform.platform(),
        "User Name": user,
        "Python Version": platform.python_version(),
        "Environment": settings.environment,
        "Base URL": settings.base_url,
    }
