"""Dispatch table mapping test types to their runners."""

from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from typing import Any

from webtest_lab.browser.base import SessionFactory
from webtest_lab.config import WebTestLabConfig
from webtest_lab.errors import UnsupportedTestTypeError
from webtest_lab.runners.accessibility import AccessibilityRunner
from webtest_lab.runners.base import EngineRunner
from webtest_lab.runners.browser_compat import BrowserCompatibilityRunner
from webtest_lab.runners.composite import CompositeRunner
from webtest_lab.runners.lighthouse import LighthouseRunner
from webtest_lab.runners.security import SecurityRunner

type RunnerTable = Mapping[str, EngineRunner[Any]]


def build_runners(
    config: WebTestLabConfig,
    session_factory: SessionFactory,
    security: EngineRunner[Any],
) -> RunnerTable:
    """Build one runner per test type.

    New engines are added here, together with a results variant and a
    normalizer branch.
    """
    performance = LighthouseRunner(
        category="performance",
        config=config.lighthouse,
        session_factory=session_factory,
    )
    seo = LighthouseRunner(
        category="seo",
        config=config.lighthouse,
        session_factory=session_factory,
    )
    accessibility = AccessibilityRunner(
        config=config.axe, session_factory=session_factory
    )

    return {
        "performance": performance,
        "accessibility": accessibility,
        "seo": seo,
        "security": security,
        "browser": BrowserCompatibilityRunner(
            config=config.axe, session_factory=session_factory
        ),
        "all": CompositeRunner(
            performance=performance,
            accessibility=accessibility,
            seo=seo,
            security=security,
        ),
    }


@asynccontextmanager
async def open_runners(
    config: WebTestLabConfig, session_factory: SessionFactory
) -> AsyncGenerator[RunnerTable, None]:
    """Build the runner table with its HTTP session open for the duration."""
    async with SecurityRunner.from_config(config.observatory) as security:
        yield build_runners(config, session_factory, security)


def get_runner(runners: RunnerTable, test_type: str) -> EngineRunner[Any]:
    """Look up the runner for a test type.

    Raises:
        UnsupportedTestTypeError: If no runner handles the type

    """
    try:
        return runners[test_type]
    except KeyError:
        raise UnsupportedTestTypeError(test_type, sorted(runners)) from None
