"""MDN HTTP Observatory runner for the security test type."""

import logging
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import ValidationError
from yarl import URL

from webtest_lab.config import ObservatoryConfig
from webtest_lab.errors import RunnerError
from webtest_lab.models.raw import ObservatoryScan
from webtest_lab.runners.base import EngineRunner

log = logging.getLogger(__name__)

SCAN_PATH = "/api/v2/scan"


@dataclass(frozen=True, kw_only=True)
class SecurityRunner(EngineRunner[ObservatoryScan]):
    """Scores a site's HTTP security headers with the Observatory API.

    Only the hostname is sent; no local browser is involved. The API
    finishes the scan within the request, so the configured timeout is the
    only bound on completion.
    """

    config: ObservatoryConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: ObservatoryConfig
    ) -> AsyncGenerator["SecurityRunner", None]:
        """Create runner with managed session lifecycle."""
        async with aiohttp.ClientSession(
            base_url=config.api_base_url,
            headers={"Accept": "application/json"},
        ) as session:
            yield cls(config=config, session=session)

    async def run(self, url: str, parameters: Mapping[str, Any]) -> ObservatoryScan:
        """Request a scan of the URL's host."""
        host = URL(url).host
        if not host:
            raise RunnerError(f"Cannot determine hostname of {url}")

        log.info("Requesting Observatory scan: host=%s", host)
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        try:
            async with self.session.post(
                SCAN_PATH, params={"host": host}, timeout=timeout
            ) as response:
                if response.status != 200:
                    text = await response.text()
                    raise RunnerError(
                        f"Observatory scan failed: {response.status} {text}"
                    )
                data = await response.json()
        except TimeoutError as exc:
            raise RunnerError(
                f"Observatory scan of {host} did not finish within "
                f"{self.config.timeout:g} seconds"
            ) from exc
        except aiohttp.ContentTypeError as exc:
            raise RunnerError("Observatory returned a non-JSON response") from exc
        except ValueError as exc:
            raise RunnerError("Observatory returned malformed JSON") from exc
        except aiohttp.ClientError as exc:
            raise RunnerError(f"Observatory request failed: {exc}") from exc

        return self.parse_scan(host, data)

    def parse_scan(self, host: str, data: Any) -> ObservatoryScan:
        """Validate the scan payload."""
        try:
            scan = ObservatoryScan.model_validate(data)
        except ValidationError as exc:
            raise RunnerError(
                f"Observatory returned a malformed scan ({exc.error_count()} error(s))"
            ) from exc

        if scan.error:
            raise RunnerError(f"Observatory could not scan {host}: {scan.error}")
        if scan.score is None and scan.grade is None:
            raise RunnerError(f"Observatory returned no score for {host}")

        log.info("Observatory result for %s: score=%s grade=%s", host, scan.score, scan.grade)
        return scan
