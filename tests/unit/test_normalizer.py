"""Tests for raw engine output normalization."""

import base64

import pytest

from webtest_lab.errors import RunnerError
from webtest_lab.models.raw import (
    AxeResults,
    BrowserCompatibilityScan,
    BrowserProbe,
    CompositeScan,
    LighthouseReport,
    ObservatoryScan,
)
from webtest_lab.normalizer import (
    SEO_ISSUE_LIMIT,
    axe_score,
    normalize,
    normalize_accessibility,
    normalize_browser,
    normalize_performance,
    normalize_security,
    normalize_seo,
)
from webtest_lab.testing.payloads import (
    axe_results,
    axe_rule,
    lighthouse_audit,
    lighthouse_report,
    observatory_scan,
)


class TestPerformance:
    """Tests for Lighthouse performance reports."""

    def test_converts_metrics_to_seconds(self) -> None:
        """Timing metrics are reported in seconds."""
        report = LighthouseReport.model_validate(
            lighthouse_report(
                performance=0.85, fcp_ms=1500, lcp_ms=2300, cls=0.1, tti_ms=3200
            )
        )

        result = normalize_performance(report)

        assert result.score == 0.85
        assert result.metrics.fcp == 1.5
        assert result.metrics.lcp == 2.3
        assert result.metrics.cls == 0.1
        assert result.metrics.tti == 3.2
        assert result.metrics.tbt is None

    def test_missing_metric_is_runner_error(self) -> None:
        """A report without a required metric cannot be normalized."""
        payload = lighthouse_report(performance=0.5)
        del payload["audits"]["interactive"]

        with pytest.raises(RunnerError, match="interactive"):
            normalize_performance(LighthouseReport.model_validate(payload))

    def test_missing_category_is_runner_error(self) -> None:
        """A report without the performance category cannot be normalized."""
        report = LighthouseReport.model_validate(lighthouse_report(seo=0.9))

        with pytest.raises(RunnerError, match="no performance score"):
            normalize_performance(report)


class TestSeo:
    """Tests for Lighthouse SEO reports."""

    def test_lists_failed_audits_with_impact(self) -> None:
        """Failed audits become issues; low scores are serious."""
        report = LighthouseReport.model_validate(
            lighthouse_report(
                seo=0.7,
                seo_audits=[
                    lighthouse_audit(
                        "meta-description",
                        title="Document does not have a meta description",
                        description="Add a meta description",
                        score=0,
                    ),
                    lighthouse_audit("font-size", score=0.6),
                    lighthouse_audit("document-title", score=1),
                    lighthouse_audit("structured-data", score=None, display_mode="manual"),
                ],
            )
        )

        result = normalize_seo(report)

        assert result.score == 0.7
        assert [issue.rule_id for issue in result.issues] == [
            "meta-description",
            "font-size",
        ]
        assert result.issues[0].impact == "serious"
        assert result.issues[0].description == "Document does not have a meta description"
        assert result.issues[0].recommendation == "Add a meta description"
        assert result.issues[1].impact == "moderate"

    def test_caps_issue_count(self) -> None:
        """Only the first failed audits are kept."""
        audits = [lighthouse_audit(f"audit-{index}", score=0) for index in range(8)]
        report = LighthouseReport.model_validate(
            lighthouse_report(seo=0.2, seo_audits=audits)
        )

        result = normalize_seo(report)

        assert len(result.issues) == SEO_ISSUE_LIMIT
        assert result.issues[0].rule_id == "audit-0"


class TestAccessibility:
    """Tests for axe-core results."""

    def test_maps_violations_to_issues(self) -> None:
        """Each violated rule becomes one issue with every node."""
        results = AxeResults.model_validate(
            axe_results(
                violations=[
                    axe_rule(
                        "image-alt",
                        impact="critical",
                        targets=[["img.logo"], [["iframe#ad", "img"]]],
                    )
                ],
                passes=3,
                incomplete=2,
            )
        )

        result = normalize_accessibility(results)

        assert result.score == 0.75
        assert result.pass_count == 3
        assert result.incomplete_count == 2
        issue = result.issues[0]
        assert issue.rule_id == "image-alt"
        assert issue.impact == "critical"
        assert issue.help_url is not None
        assert issue.element == '<div id="image-alt-0"></div>'
        assert [node.target for node in issue.nodes] == [
            ["img.logo"],
            ["iframe#ad >>> img"],
        ]

    def test_unknown_impact_defaults_to_moderate(self) -> None:
        """Missing impacts are treated as moderate."""
        results = AxeResults.model_validate(
            axe_results(violations=[axe_rule("region", impact=None)])
        )

        assert normalize_accessibility(results).issues[0].impact == "moderate"

    def test_score_is_one_when_nothing_checked(self) -> None:
        """A page with no applicable rules scores 1."""
        assert axe_score(AxeResults()) == 1.0


class TestSecurity:
    """Tests for Observatory scans."""

    def test_copies_scan_fields(self) -> None:
        """Keeps the score and scan metadata."""
        scan = ObservatoryScan.model_validate(observatory_scan(score=75, grade="B"))

        result = normalize_security(scan)

        assert result.score == 75
        assert result.grade == "B"
        assert result.tests_passed == 7
        assert result.tests_failed == 3
        assert result.tests_quantity == 10
        assert result.status_code == 200
        assert result.algorithm_version == 4
        assert result.details_url is not None
        assert result.scanned_at is not None

    def test_derives_score_from_grade(self) -> None:
        """Falls back to the grade when no score is reported."""
        scan = ObservatoryScan.model_validate(observatory_scan(score=None, grade="A"))

        assert normalize_security(scan).score == 90

    def test_clamps_bonus_scores(self) -> None:
        """Scores above 100 are capped."""
        scan = ObservatoryScan.model_validate(observatory_scan(score=135, grade="A+"))

        assert normalize_security(scan).score == 100

    def test_unknown_grade_is_runner_error(self) -> None:
        """An unusable grade fails the run."""
        scan = ObservatoryScan.model_validate(observatory_scan(score=None, grade="Q"))

        with pytest.raises(RunnerError, match="Unknown security grade"):
            normalize_security(scan)


class TestBrowser:
    """Tests for browser-compatibility probes."""

    def test_merges_probes(self) -> None:
        """Issues, errors and screenshots are merged across browsers."""
        violations = AxeResults.model_validate(
            axe_results(violations=[axe_rule("button-name"), axe_rule("label")])
        )
        scan = BrowserCompatibilityScan(
            probes=[
                BrowserProbe(
                    browser="chromium",
                    axe=violations,
                    screenshot=b"one",
                    errors=["ReferenceError: foo is not defined"],
                ),
                BrowserProbe(browser="firefox", axe=violations, screenshot=b"two"),
            ]
        )

        result = normalize_browser(scan)

        assert result.summary.total_issues == 4
        assert result.summary.error_count == 1
        assert result.score == pytest.approx(0.8)
        assert result.score_is_heuristic
        assert [shot.browser for shot in result.screenshots] == ["chromium", "firefox"]
        assert result.screenshots[0].url == (
            "data:image/png;base64," + base64.b64encode(b"one").decode()
        )

    def test_clean_page_scores_one(self) -> None:
        """No issues gives a perfect score."""
        scan = BrowserCompatibilityScan(
            probes=[BrowserProbe(browser="webkit", axe=AxeResults(), screenshot=b"")]
        )

        assert normalize_browser(scan).score == 1.0


class TestNormalize:
    """Tests for dispatch by test type."""

    def test_composite_fills_every_variant(self) -> None:
        """The legacy all type normalizes each engine."""
        scan = CompositeScan(
            performance=LighthouseReport.model_validate(lighthouse_report(performance=0.9)),
            accessibility=AxeResults.model_validate(axe_results(passes=1)),
            seo=LighthouseReport.model_validate(lighthouse_report(seo=0.8)),
            security=ObservatoryScan.model_validate(observatory_scan()),
        )

        results = normalize("all", scan)

        assert results.performance is not None
        assert results.accessibility is not None
        assert results.seo is not None
        assert results.security is not None
        assert results.browser_compatibility is None
        assert not results.synthetic

    def test_mismatched_raw_type_is_runner_error(self) -> None:
        """Raw output of the wrong engine is rejected."""
        with pytest.raises(RunnerError, match="Cannot normalize"):
            normalize("performance", AxeResults())
