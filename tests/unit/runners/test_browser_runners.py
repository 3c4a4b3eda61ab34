"""Tests for the runners that drive a browser page directly."""

import pytest

from webtest_lab.config import AxeConfig
from webtest_lab.errors import EvaluationError, NavigationError, RunnerError
from webtest_lab.runners.accessibility import AccessibilityRunner
from webtest_lab.runners.browser_compat import BrowserCompatibilityRunner
from webtest_lab.testing.fakes import PNG_BYTES, FakeSessionFactory
from webtest_lab.testing.payloads import axe_results, axe_rule


class TestAccessibilityRunner:
    """Tests for AccessibilityRunner."""

    async def test_injects_axe_and_returns_results(self) -> None:
        """Loads the page, injects axe-core and parses its results."""
        factory = FakeSessionFactory(
            evaluate_result=axe_results(violations=[axe_rule("image-alt")], passes=2)
        )
        config = AxeConfig()

        results = await AccessibilityRunner(config=config, session_factory=factory).run(
            "https://example.com", {}
        )

        assert [rule.id for rule in results.violations] == ["image-alt"]
        assert len(results.passes) == 2
        session = factory.sessions[0]
        assert session.visited == ["https://example.com"]
        assert session.scripts == [config.script_url]
        assert session.close_count == 1

    async def test_unexpected_axe_output(self) -> None:
        """Output that is not an axe result is an evaluation error."""
        factory = FakeSessionFactory(evaluate_result={"violations": "none"})

        with pytest.raises(EvaluationError, match="unexpected results"):
            await AccessibilityRunner(
                config=AxeConfig(), session_factory=factory
            ).run("https://example.com", {})

        assert factory.close_count == 1

    async def test_navigation_error_closes_session(self) -> None:
        """Sessions are released when the page cannot be loaded."""
        factory = FakeSessionFactory(navigate_error=NavigationError("Timed out"))

        with pytest.raises(NavigationError):
            await AccessibilityRunner(
                config=AxeConfig(), session_factory=factory
            ).run("https://example.com", {})

        assert factory.close_count == 1


class TestBrowserCompatibilityRunner:
    """Tests for BrowserCompatibilityRunner."""

    async def test_probes_each_browser(self) -> None:
        """Each requested browser gets its own session and probe."""
        factory = FakeSessionFactory(
            evaluate_result=axe_results(violations=[axe_rule("button-name")]),
            page_errors={"firefox": ["TypeError: x is undefined"]},
        )
        runner = BrowserCompatibilityRunner(config=AxeConfig(), session_factory=factory)

        scan = await runner.run(
            "https://example.com", {"browsers": ["chromium", "firefox"]}
        )

        assert [probe.browser for probe in scan.probes] == ["chromium", "firefox"]
        assert scan.probes[0].errors == []
        assert scan.probes[1].errors == ["TypeError: x is undefined"]
        assert scan.probes[0].screenshot == PNG_BYTES
        assert [session.browser_name for session in factory.sessions] == [
            "chromium",
            "firefox",
        ]
        assert factory.close_count == 2

    async def test_defaults_to_chromium(self) -> None:
        """Without parameters only Chromium is probed."""
        factory = FakeSessionFactory(evaluate_result=axe_results())
        runner = BrowserCompatibilityRunner(config=AxeConfig(), session_factory=factory)

        scan = await runner.run("https://example.com", {})

        assert [probe.browser for probe in scan.probes] == ["chromium"]

    async def test_rejects_invalid_parameters(self) -> None:
        """Invalid browser lists fail before any browser starts."""
        factory = FakeSessionFactory()
        runner = BrowserCompatibilityRunner(config=AxeConfig(), session_factory=factory)

        with pytest.raises(RunnerError, match="Invalid browser parameters"):
            await runner.run("https://example.com", {"browsers": "chromium"})

        assert factory.sessions == []

    async def test_first_failure_stops_probing(self) -> None:
        """A browser that cannot load the page fails the run."""
        factory = FakeSessionFactory(navigate_error=NavigationError("Failed to load"))
        runner = BrowserCompatibilityRunner(config=AxeConfig(), session_factory=factory)

        with pytest.raises(NavigationError):
            await runner.run(
                "https://example.com", {"browsers": ["webkit", "firefox"]}
            )

        assert [session.browser_name for session in factory.sessions] == ["webkit"]
        assert factory.close_count == 1
