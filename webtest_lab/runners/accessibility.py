"""axe-core runner for the accessibility test type."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from webtest_lab.browser.base import BrowserSession, SessionFactory
from webtest_lab.config import AxeConfig
from webtest_lab.errors import EvaluationError
from webtest_lab.models.raw import AxeResults
from webtest_lab.runners.base import EngineRunner

log = logging.getLogger(__name__)

# Only violations need node details; passes and incomplete are counted.
AXE_RUN_SCRIPT = """
async (tags) => await axe.run(document, {
    runOnly: {type: "tag", values: tags},
    resultTypes: ["violations"],
})
"""


async def run_axe(session: BrowserSession, config: AxeConfig) -> AxeResults:
    """Inject axe-core into the loaded page and run the WCAG rule sets."""
    await session.add_script(url=config.script_url)
    raw = await session.evaluate(AXE_RUN_SCRIPT, list(config.wcag_tags))

    try:
        results = AxeResults.model_validate(raw)
    except ValidationError as exc:
        raise EvaluationError(
            f"axe-core returned unexpected results ({exc.error_count()} error(s))"
        ) from exc

    log.info(
        "axe-core in %s: %d violation(s), %d pass(es)",
        session.browser_name,
        len(results.violations),
        len(results.passes),
    )
    return results


@dataclass(frozen=True, kw_only=True)
class AccessibilityRunner(EngineRunner[AxeResults]):
    """Checks a page against WCAG 2.0/2.1 A and AA rules."""

    config: AxeConfig
    session_factory: SessionFactory

    async def run(self, url: str, parameters: Mapping[str, Any]) -> AxeResults:
        """Load the page in Chromium and run axe-core."""
        async with self.session_factory.session() as session:
            await session.navigate(url)
            return await run_axe(session, self.config)
