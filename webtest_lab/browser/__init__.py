"""Headless browser sessions."""

from webtest_lab.browser.base import BrowserSession, SessionFactory
from webtest_lab.browser.playwright_session import (
    PlaywrightSession,
    PlaywrightSessionFactory,
)

__all__ = [
    "BrowserSession",
    "PlaywrightSession",
    "PlaywrightSessionFactory",
    "SessionFactory",
]
