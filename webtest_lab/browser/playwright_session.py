"""Playwright-backed browser sessions."""

import logging
import socket
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from webtest_lab.browser.base import BrowserSession, SessionFactory
from webtest_lab.config import BrowserConfig
from webtest_lab.errors import EvaluationError, NavigationError, RunnerError
from webtest_lab.models.request import BrowserName

log = logging.getLogger(__name__)


def free_port() -> int:
    """Ask the OS for an unused local TCP port.

    The port is released before Chromium binds it, so another process can
    claim it in between. Chromium then starts without a debugging endpoint
    and Lighthouse fails to connect, which surfaces as a RunnerError.
    Playwright owns the profile directory, so the port Chromium picks for
    `--remote-debugging-port=0` cannot be read back.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return int(sock.getsockname()[1])


@dataclass(kw_only=True)
class PlaywrightSession(BrowserSession):
    """A Playwright driver, browser, context and page owned by one run."""

    config: BrowserConfig
    browser_name: str
    playwright: Playwright = field(repr=False)
    browser: Browser = field(repr=False)
    context: BrowserContext = field(repr=False)
    page: Page = field(repr=False)
    debugging_port: int | None = None
    errors: list[str] = field(default_factory=list)
    closed: bool = False

    def __post_init__(self) -> None:
        self.page.on("pageerror", lambda error: self.errors.append(error.message))

    @property
    def page_errors(self) -> Sequence[str]:
        """Uncaught in-page errors observed since the session started."""
        return tuple(self.errors)

    async def navigate(self, url: str, *, wait_until: str | None = None) -> None:
        """Load a URL and wait for the configured condition."""
        condition = wait_until or self.config.wait_until
        log.info("Navigating %s to %s (wait_until=%s)", self.browser_name, url, condition)
        try:
            await self.page.goto(
                url,
                wait_until=condition,  # type: ignore[arg-type]
                timeout=self.config.navigation_timeout_ms,
            )
        except PlaywrightTimeoutError as exc:
            raise NavigationError(
                f"Timed out loading {url} after "
                f"{self.config.navigation_timeout_ms / 1000:.0f}s"
            ) from exc
        except PlaywrightError as exc:
            raise NavigationError(f"Failed to load {url}: {exc.message}") from exc

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run a script in the page and return its result."""
        try:
            return await self.page.evaluate(script, arg)
        except PlaywrightError as exc:
            raise EvaluationError(f"In-page evaluation failed: {exc.message}") from exc

    async def add_script(
        self, *, url: str | None = None, content: str | None = None
    ) -> None:
        """Inject a script tag into the loaded page."""
        try:
            await self.page.add_script_tag(url=url, content=content)
        except PlaywrightError as exc:
            source = url or "inline script"
            raise EvaluationError(f"Failed to inject {source}: {exc.message}") from exc

    async def screenshot(self) -> bytes:
        """Capture the full page as PNG."""
        try:
            return await self.page.screenshot(full_page=True, type="png")
        except PlaywrightError as exc:
            raise RunnerError(f"Screenshot failed: {exc.message}") from exc

    async def close(self) -> None:
        """Close the context and browser, then stop the driver."""
        if self.closed:
            return
        self.closed = True

        for resource in (self.context, self.browser):
            try:
                await resource.close()
            except PlaywrightError as exc:
                log.warning("Error closing %s session: %s", self.browser_name, exc)

        # Stopping the driver also kills any browser process left behind.
        try:
            await self.playwright.stop()
        except PlaywrightError as exc:
            log.warning("Error stopping Playwright for %s session: %s", self.browser_name, exc)
        log.info("Closed %s session", self.browser_name)


@dataclass(frozen=True, kw_only=True)
class PlaywrightSessionFactory(SessionFactory):
    """Launches a fresh Playwright driver and browser per session."""

    config: BrowserConfig

    async def acquire(
        self,
        *,
        browser: BrowserName = "chromium",
        remote_debugging: bool = False,
    ) -> BrowserSession:
        """Launch an isolated browser and open a page."""
        if remote_debugging and browser != "chromium":
            raise RunnerError(f"Remote debugging is not available for {browser}")

        playwright = await async_playwright().start()
        try:
            return await self._open(playwright, browser, remote_debugging)
        except PlaywrightError as exc:
            await playwright.stop()
            raise RunnerError(f"Failed to launch {browser}: {exc.message}") from exc
        except BaseException:
            await playwright.stop()
            raise

    async def _open(
        self, playwright: Playwright, browser: BrowserName, remote_debugging: bool
    ) -> PlaywrightSession:
        args = (
            self.config.chromium_args()
            if browser == "chromium"
            else list(self.config.launch_args)
        )
        debugging_port = None
        if remote_debugging:
            debugging_port = free_port()
            args.append(f"--remote-debugging-port={debugging_port}")

        log.info("Launching %s (headless=%s)", browser, self.config.headless)
        instance = await getattr(playwright, browser).launch(
            headless=self.config.headless, args=args
        )
        context = await instance.new_context(
            viewport={
                "width": self.config.viewport_width,
                "height": self.config.viewport_height,
            }
        )
        page = await context.new_page()

        return PlaywrightSession(
            config=self.config,
            browser_name=browser,
            playwright=playwright,
            browser=instance,
            context=context,
            page=page,
            debugging_port=debugging_port,
        )
