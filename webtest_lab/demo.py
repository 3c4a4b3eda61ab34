"""Synthetic results for the explicit demo mode.

These values never describe a real page. They exist so a UI can be shown
without browsers or network access, and every result is marked
``synthetic``.
"""

from webtest_lab.models.request import TestType
from webtest_lab.models.results import (
    AccessibilityResult,
    BrowserCompatibilityResult,
    CompatibilitySummary,
    Issue,
    PerformanceMetrics,
    PerformanceResult,
    SecurityResult,
    SeoResult,
    TestResults,
)
from webtest_lab.scoring import browser_score

DEMO_PERFORMANCE = PerformanceResult(
    score=0.85,
    metrics=PerformanceMetrics(fcp=1.5, lcp=2.3, cls=0.1, tti=3.2),
)

DEMO_ACCESSIBILITY = AccessibilityResult(
    score=0.92,
    issues=[
        Issue(
            description="Images do not have alt text",
            impact="serious",
            element="img",
        )
    ],
)

DEMO_SEO = SeoResult(
    score=0.88,
    issues=[
        Issue(
            description="Document does not have a meta description",
            impact="moderate",
            recommendation="Add a meta description tag",
        )
    ],
)

DEMO_SECURITY = SecurityResult(score=75, grade="B")

DEMO_BROWSER = BrowserCompatibilityResult(
    score=browser_score(1),
    issues=[
        Issue(
            description="Ensures buttons have discernible text",
            impact="critical",
            rule_id="button-name",
        )
    ],
    summary=CompatibilitySummary(total_issues=1, error_count=0),
)


def demo_results(test_type: TestType) -> TestResults:
    """Return clearly labelled synthetic results for a test type."""
    match test_type:
        case "performance":
            return TestResults(performance=DEMO_PERFORMANCE, synthetic=True)
        case "accessibility":
            return TestResults(accessibility=DEMO_ACCESSIBILITY, synthetic=True)
        case "seo":
            return TestResults(seo=DEMO_SEO, synthetic=True)
        case "security":
            return TestResults(security=DEMO_SECURITY, synthetic=True)
        case "browser":
            return TestResults(browser_compatibility=DEMO_BROWSER, synthetic=True)
        case "all":
            return TestResults(
                performance=DEMO_PERFORMANCE,
                accessibility=DEMO_ACCESSIBILITY,
                seo=DEMO_SEO,
                security=DEMO_SECURITY,
                synthetic=True,
            )

    raise ValueError(f"No demo results for test type '{test_type}'")
