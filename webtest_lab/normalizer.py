"""Conversion of raw engine output into canonical test results."""

import base64
from collections.abc import Sequence
from typing import Any

from webtest_lab.errors import RunnerError
from webtest_lab.models.raw import (
    AxeResults,
    AxeRule,
    BrowserCompatibilityScan,
    CompositeScan,
    LighthouseAudit,
    LighthouseReport,
    ObservatoryScan,
)
from webtest_lab.models.request import TestType
from webtest_lab.models.results import (
    AccessibilityResult,
    BrowserCompatibilityResult,
    CompatibilitySummary,
    Impact,
    Issue,
    IssueNode,
    PerformanceMetrics,
    PerformanceResult,
    Screenshot,
    SecurityResult,
    SeoResult,
    TestResults,
)
from webtest_lab.scoring import browser_score, grade_score

# SEO issues are capped to keep record payloads small.
SEO_ISSUE_LIMIT = 5

# Audits that never count as failures.
UNSCORED_DISPLAY_MODES = frozenset(["manual", "notApplicable", "informative"])

AXE_IMPACTS: frozenset[str] = frozenset(["minor", "moderate", "serious", "critical"])


def normalize(test_type: TestType, raw: Any) -> TestResults:
    """Map a runner's raw output onto the results variant for its test type.

    Raises:
        RunnerError: If the raw output cannot be interpreted

    """
    match test_type, raw:
        case "performance", LighthouseReport():
            return TestResults(performance=normalize_performance(raw))
        case "seo", LighthouseReport():
            return TestResults(seo=normalize_seo(raw))
        case "accessibility", AxeResults():
            return TestResults(accessibility=normalize_accessibility(raw))
        case "security", ObservatoryScan():
            return TestResults(security=normalize_security(raw))
        case "browser", BrowserCompatibilityScan():
            return TestResults(browser_compatibility=normalize_browser(raw))
        case "all", CompositeScan():
            return TestResults(
                performance=normalize_performance(raw.performance),
                accessibility=normalize_accessibility(raw.accessibility),
                seo=normalize_seo(raw.seo),
                security=normalize_security(raw.security),
            )

    raise RunnerError(
        f"Cannot normalize {type(raw).__name__} results for test type '{test_type}'"
    )


def category_score(report: LighthouseReport, category: str) -> float:
    """Return a category score, which must be present."""
    entry = report.categories.get(category)
    if entry is None or entry.score is None:
        raise RunnerError(f"Lighthouse report has no {category} score")
    return entry.score


def _audit_value(
    report: LighthouseReport, audit_id: str, *, divisor: float = 1
) -> float | None:
    audit = report.audits.get(audit_id)
    if audit is None or audit.numeric_value is None:
        return None
    return round(audit.numeric_value / divisor, 2)


def _required_audit_value(
    report: LighthouseReport, audit_id: str, *, divisor: float = 1
) -> float:
    value = _audit_value(report, audit_id, divisor=divisor)
    if value is None:
        raise RunnerError(f"Lighthouse report is missing the {audit_id} metric")
    return value


def normalize_performance(report: LighthouseReport) -> PerformanceResult:
    """Extract the performance score and page-load metrics."""
    return PerformanceResult(
        score=category_score(report, "performance"),
        metrics=PerformanceMetrics(
            fcp=_required_audit_value(report, "first-contentful-paint", divisor=1000),
            lcp=_required_audit_value(report, "largest-contentful-paint", divisor=1000),
            cls=_required_audit_value(report, "cumulative-layout-shift"),
            tti=_required_audit_value(report, "interactive", divisor=1000),
            tbt=_audit_value(report, "total-blocking-time"),
            si=_audit_value(report, "speed-index", divisor=1000),
        ),
    )


def failed_audits(report: LighthouseReport, category: str) -> Sequence[LighthouseAudit]:
    """Audits of a category that scored below 1, in category order."""
    entry = report.categories.get(category)
    if entry is None:
        return []

    failed = []
    for ref in entry.audit_refs:
        audit = report.audits.get(ref.id)
        if audit is None or audit.score is None:
            continue
        if audit.score_display_mode in UNSCORED_DISPLAY_MODES:
            continue
        if audit.score < 1:
            failed.append(audit)
    return failed


def normalize_seo(report: LighthouseReport) -> SeoResult:
    """Extract the SEO score and the first failed audits as issues."""
    issues = [
        Issue(
            description=audit.title,
            impact="serious" if (audit.score or 0) < 0.5 else "moderate",
            rule_id=audit.id,
            recommendation=audit.description,
        )
        for audit in failed_audits(report, "seo")[:SEO_ISSUE_LIMIT]
    ]
    return SeoResult(score=category_score(report, "seo"), issues=issues)


def _axe_impact(rule: AxeRule) -> Impact:
    if rule.impact in AXE_IMPACTS:
        return rule.impact  # type: ignore[return-value]
    return "moderate"


def _node_target(target: Sequence[str | Sequence[str]]) -> list[str]:
    # Frame and shadow-root paths are joined the way axe prints them.
    return [part if isinstance(part, str) else " >>> ".join(part) for part in target]


def axe_issues(results: AxeResults) -> list[Issue]:
    """One issue per violated rule, keeping every affected node."""
    issues = []
    for rule in results.violations:
        nodes = [
            IssueNode(
                target=_node_target(node.target),
                html=node.html,
                failure_summary=node.failure_summary,
            )
            for node in rule.nodes
        ]
        issues.append(
            Issue(
                description=rule.description or rule.help,
                impact=_axe_impact(rule),
                rule_id=rule.id,
                help=rule.help,
                help_url=rule.help_url,
                tags=list(rule.tags),
                element=nodes[0].html if nodes else None,
                nodes=nodes,
            )
        )
    return issues


def axe_score(results: AxeResults) -> float:
    """Share of checked rules that passed, rounded to 2 decimals.

    A page where no rule applied scores 1.
    """
    passes = len(results.passes)
    checked = passes + len(results.violations)
    if checked == 0:
        return 1.0
    return round(passes / checked, 2)


def normalize_accessibility(results: AxeResults) -> AccessibilityResult:
    """Score the axe run and list its violations."""
    return AccessibilityResult(
        score=axe_score(results),
        issues=axe_issues(results),
        pass_count=len(results.passes),
        incomplete_count=len(results.incomplete),
    )


def normalize_security(scan: ObservatoryScan) -> SecurityResult:
    """Copy the Observatory scan, deriving the score from the grade if needed."""
    if scan.score is not None:
        score = scan.score
    elif scan.grade is not None:
        try:
            score = grade_score(scan.grade)
        except ValueError as exc:
            raise RunnerError(str(exc)) from exc
    else:
        raise RunnerError("Observatory scan has neither a score nor a grade")

    return SecurityResult(
        score=min(max(score, 0), 100),
        grade=scan.grade,
        tests_passed=scan.tests_passed,
        tests_failed=scan.tests_failed,
        tests_quantity=scan.tests_quantity,
        scanned_at=scan.scanned_at,
        details_url=scan.details_url,
        status_code=scan.status_code,
        algorithm_version=scan.algorithm_version,
    )


def screenshot_data_url(image: bytes) -> str:
    """Encode a PNG as a data: URL."""
    return "data:image/png;base64," + base64.b64encode(image).decode("ascii")


def normalize_browser(scan: BrowserCompatibilityScan) -> BrowserCompatibilityResult:
    """Merge every browser's probe into one result with a heuristic score."""
    issues: list[Issue] = []
    errors: list[str] = []
    screenshots: list[Screenshot] = []

    for probe in scan.probes:
        issues.extend(axe_issues(probe.axe))
        errors.extend(probe.errors)
        screenshots.append(
            Screenshot(browser=probe.browser, url=screenshot_data_url(probe.screenshot))
        )

    return BrowserCompatibilityResult(
        score=browser_score(len(issues)),
        score_is_heuristic=True,
        issues=issues,
        screenshots=screenshots,
        errors=errors,
        summary=CompatibilitySummary(total_issues=len(issues), error_count=len(errors)),
    )
