"""Runner for the browser-compatibility test type."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from webtest_lab.browser.base import SessionFactory
from webtest_lab.config import AxeConfig
from webtest_lab.errors import RunnerError
from webtest_lab.models.raw import BrowserCompatibilityScan, BrowserProbe
from webtest_lab.models.request import BrowserName, BrowserParameters
from webtest_lab.runners.accessibility import run_axe
from webtest_lab.runners.base import EngineRunner

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class BrowserCompatibilityRunner(EngineRunner[BrowserCompatibilityScan]):
    """Renders a page in each requested browser.

    axe-core violations stand in for compatibility issues; each browser also
    contributes a full-page screenshot and its uncaught runtime errors.
    """

    config: AxeConfig
    session_factory: SessionFactory

    async def run(
        self, url: str, parameters: Mapping[str, Any]
    ) -> BrowserCompatibilityScan:
        """Probe the page in every requested browser, one after another."""
        try:
            browsers = BrowserParameters.model_validate(dict(parameters)).browsers
        except ValidationError as exc:
            raise RunnerError(f"Invalid browser parameters: {exc}") from exc

        probes = [await self.probe(url, browser) for browser in browsers]
        return BrowserCompatibilityScan(probes=probes)

    async def probe(self, url: str, browser: BrowserName) -> BrowserProbe:
        """Render the page in one browser."""
        async with self.session_factory.session(browser=browser) as session:
            await session.navigate(url)
            axe = await run_axe(session, self.config)
            screenshot = await session.screenshot()
            errors = list(session.page_errors)

        if errors:
            log.info("%s reported %d runtime error(s) on %s", browser, len(errors), url)

        return BrowserProbe(browser=browser, axe=axe, screenshot=screenshot, errors=errors)
