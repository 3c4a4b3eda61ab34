"""Runner for the legacy ``all`` test type."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from webtest_lab.models.raw import (
    AxeResults,
    CompositeScan,
    LighthouseReport,
    ObservatoryScan,
)
from webtest_lab.runners.base import EngineRunner

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class CompositeRunner(EngineRunner[CompositeScan]):
    """Runs the performance, accessibility, SEO and security engines in turn.

    The first failing engine fails the whole run; partial results are not
    kept.
    """

    performance: EngineRunner[LighthouseReport]
    accessibility: EngineRunner[AxeResults]
    seo: EngineRunner[LighthouseReport]
    security: EngineRunner[ObservatoryScan]

    async def run(self, url: str, parameters: Mapping[str, Any]) -> CompositeScan:
        """Run every engine sequentially against the URL."""
        log.info("Running composite test for %s", url)
        return CompositeScan(
            performance=await self.performance.run(url, {}),
            accessibility=await self.accessibility.run(url, {}),
            seo=await self.seo.run(url, {}),
            security=await self.security.run(url, {}),
        )
