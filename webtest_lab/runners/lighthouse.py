"""Lighthouse runner for the performance and SEO test types."""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import ValidationError

from webtest_lab.browser.base import SessionFactory
from webtest_lab.config import LighthouseConfig
from webtest_lab.errors import RunnerError
from webtest_lab.models.raw import LighthouseReport
from webtest_lab.runners.base import EngineRunner

log = logging.getLogger(__name__)

# Characters of Lighthouse stderr kept in error messages.
STDERR_TAIL = 500


@dataclass(frozen=True, kw_only=True)
class LighthouseRunner(EngineRunner[LighthouseReport]):
    """Audits a page with the Lighthouse CLI, restricted to one category.

    Lighthouse connects to a Chromium launched through the session factory
    rather than starting its own, so the browser shares the session's
    configuration and is torn down with it.
    """

    category: Literal["performance", "seo"]
    config: LighthouseConfig
    session_factory: SessionFactory

    async def run(self, url: str, parameters: Mapping[str, Any]) -> LighthouseReport:
        """Run Lighthouse and return the validated report."""
        async with self.session_factory.session(remote_debugging=True) as session:
            if session.debugging_port is None:
                raise RunnerError("Browser session has no remote-debugging port")
            stdout = await self.execute(self.command(url, session.debugging_port))

        return self.parse_report(stdout)

    def command(self, url: str, port: int) -> Sequence[str]:
        """Build the Lighthouse command line."""
        cmd = [
            self.config.binary,
            url,
            f"--port={port}",
            "--output=json",
            "--output-path=stdout",
            f"--only-categories={self.category}",
            "--quiet",
        ]
        if self.config.preset:
            cmd.append(f"--preset={self.config.preset}")
        cmd.extend(self.config.extra_flags)
        return cmd

    async def execute(self, cmd: Sequence[str]) -> bytes:
        """Run Lighthouse, returning stdout or raising RunnerError."""
        log.info("Running Lighthouse %s audit: %s", self.category, " ".join(cmd))
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise RunnerError(
                f"Cannot start Lighthouse ({self.config.binary}): {exc}"
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.config.timeout
            )
        except TimeoutError:
            process.kill()
            await process.wait()
            raise RunnerError(
                f"Lighthouse did not finish within {self.config.timeout:g} seconds"
            ) from None

        if process.returncode != 0:
            detail = stderr.decode(errors="replace").strip()[-STDERR_TAIL:]
            raise RunnerError(
                f"Lighthouse failed with exit code {process.returncode}: {detail}"
            )

        return stdout

    def parse_report(self, stdout: bytes) -> LighthouseReport:
        """Validate the JSON report and check the audited category is scored."""
        try:
            report = LighthouseReport.model_validate_json(stdout)
        except ValidationError as exc:
            raise RunnerError(
                f"Lighthouse returned an unreadable report ({exc.error_count()} error(s))"
            ) from exc

        if report.runtime_error is not None:
            raise RunnerError(
                f"Lighthouse runtime error {report.runtime_error.code}: "
                f"{report.runtime_error.message}"
            )

        category = report.categories.get(self.category)
        if category is None or category.score is None:
            raise RunnerError(f"Lighthouse report has no {self.category} score")

        log.info(
            "Lighthouse %s score for %s: %.2f",
            self.category,
            report.final_url or "page",
            category.score,
        )
        return report
