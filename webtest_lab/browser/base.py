"""Abstract headless browser sessions and the factory that scopes them."""

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from typing import Any

from webtest_lab.models.request import BrowserName


class BrowserSession(ABC):
    """A disposable browser with a single page.

    A session belongs to exactly one run and is never shared. Every method
    that talks to the browser raises a ``RunnerError`` subclass on failure.
    """

    browser_name: str
    debugging_port: int | None

    @property
    @abstractmethod
    def page_errors(self) -> Sequence[str]:
        """Uncaught in-page errors observed since the session started."""

    @abstractmethod
    async def navigate(self, url: str, *, wait_until: str | None = None) -> None:
        """Load a URL, waiting for the configured condition (network idle).

        Raises:
            NavigationError: On timeout or network failure

        """

    @abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run a script in the page and return its JSON-serializable result.

        Raises:
            EvaluationError: If the script throws or cannot be run

        """

    @abstractmethod
    async def add_script(
        self, *, url: str | None = None, content: str | None = None
    ) -> None:
        """Inject a script into the loaded page.

        Raises:
            EvaluationError: If the script cannot be loaded

        """

    @abstractmethod
    async def screenshot(self) -> bytes:
        """Capture the full page as PNG."""

    @abstractmethod
    async def close(self) -> None:
        """Terminate the browser. Safe to call more than once."""


class SessionFactory(ABC):
    """Launches browser sessions for runners."""

    @abstractmethod
    async def acquire(
        self,
        *,
        browser: BrowserName = "chromium",
        remote_debugging: bool = False,
    ) -> BrowserSession:
        """Launch an isolated browser and open a page.

        Args:
            browser: Browser engine to launch
            remote_debugging: Expose a remote-debugging port so external
                tools (Lighthouse) can drive the same browser

        Raises:
            RunnerError: If the browser cannot be launched

        """

    @asynccontextmanager
    async def session(
        self,
        *,
        browser: BrowserName = "chromium",
        remote_debugging: bool = False,
    ) -> AsyncGenerator[BrowserSession, None]:
        """Acquire a session and close it on every exit path."""
        session = await self.acquire(browser=browser, remote_debugging=remote_debugging)
        try:
            yield session
        finally:
            await session.close()
