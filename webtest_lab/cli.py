"""CLI entry point for running a single website test."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from webtest_lab.config import WebTestLabConfig
from webtest_lab.errors import WebTestLabError
from webtest_lab.models.record import TestRecord
from webtest_lab.models.request import TEST_TYPES, Caller
from webtest_lab.orchestrator import TestLifecycleManager
from webtest_lab.scoring import score_band
from webtest_lab.store.memory import InMemoryRecordStore

CLI_CALLER = Caller(id="cli", role="user")

STATUS_SYMBOLS = {
    "completed": "✅",
    "failed": "❌",
    "running": "⏳",
    "pending": "…",
}


def log_results_summary(log: logging.Logger, record: TestRecord) -> None:
    """Log a formatted summary of a test record."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    symbol = STATUS_SYMBOLS.get(record.status, "?")
    log.info("%s %s %s: %s", symbol, record.test_type, record.url, record.status)
    if record.score is not None:
        log.info("  Score: %d (%s)", record.score, score_band(record.score))
    if record.error_message:
        log.info("  Message: %s", record.error_message)
    if record.results is not None and record.results.synthetic:
        log.info("  Results are synthetic (demo mode)")


def format_output(record: TestRecord) -> dict[str, Any]:
    """Format a test record for JSON output."""
    return record.model_dump(mode="json")


async def run(
    url: str,
    test_type: str,
    parameters_json: str = "{}",
    config_json: str = "{}",
    *,
    demo: bool = False,
) -> int:
    """Create and run one test and return the exit code."""
    log = logging.getLogger("webtest_lab")

    config = WebTestLabConfig.model_validate_json(config_json)
    parameters = json.loads(parameters_json)
    store = InMemoryRecordStore()

    async with TestLifecycleManager.from_config(config, store) as manager:
        try:
            record = await manager.create(CLI_CALLER, url, test_type, parameters)
        except WebTestLabError as exc:
            log.error("Invalid test request: %s", exc)
            return 1

        log.info("Running %s test for %s", record.test_type, record.url)
        try:
            if demo:
                await manager.run_demo(record.id, CLI_CALLER)
            else:
                await manager.run(record.id, CLI_CALLER)
        except WebTestLabError as exc:
            log.error("Test run failed: %s", exc)

        record = await manager.get(record.id, CLI_CALLER)

    log_results_summary(log, record)
    print(json.dumps(format_output(record), indent=2))

    return 0 if record.status == "completed" else 1


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run performance, accessibility, SEO, security and "
        "browser compatibility tests against a website"
    )
    parser.add_argument(
        "--url",
        required=True,
        help="Website URL to test",
    )
    parser.add_argument(
        "--test-type",
        required=True,
        choices=TEST_TYPES,
        help="Kind of test to run",
    )
    parser.add_argument(
        "--parameters",
        default="{}",
        help='JSON test parameters, e.g. {"browsers": ["chromium", "firefox"]}',
    )
    parser.add_argument(
        "--config",
        default="{}",
        help="JSON configuration for browsers and engines",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Produce synthetic results without running any engine",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            url=args.url,
            test_type=args.test_type,
            parameters_json=args.parameters,
            config_json=args.config,
            demo=args.demo,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
