"""Canonical, engine-independent test results.

Score scales are fixed per variant so listings and dashboards can treat them
uniformly: performance, accessibility, seo and browser compatibility scores
are fractions in [0, 1], the security score is on a 0-100 scale.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Literal

from pydantic import Field

from webtest_lab.models.base import Model

type Impact = Literal["minor", "moderate", "serious", "critical"]


class IssueNode(Model):
    """A DOM node affected by an issue."""

    target: Sequence[str] = Field(default_factory=list, description="CSS selectors")
    html: str = Field(default="", description="Outer HTML snippet")
    failure_summary: str | None = Field(default=None, description="Why it failed")


class Issue(Model):
    """A single problem reported by an engine."""

    description: str = Field(..., description="What is wrong")
    impact: Impact = Field(..., description="How much it matters")
    rule_id: str | None = Field(default=None, description="Engine rule identifier")
    help: str | None = Field(default=None, description="Short remediation hint")
    help_url: str | None = Field(default=None, description="Link to rule docs")
    tags: Sequence[str] = Field(default_factory=list, description="Rule tags")
    element: str | None = Field(default=None, description="First affected element")
    nodes: Sequence[IssueNode] = Field(default_factory=list, description="All nodes")
    recommendation: str | None = Field(default=None, description="Suggested fix")


class PerformanceMetrics(Model):
    """Page-load metrics, in seconds unless noted."""

    fcp: float = Field(..., description="First Contentful Paint")
    lcp: float = Field(..., description="Largest Contentful Paint")
    cls: float = Field(..., description="Cumulative Layout Shift (unitless)")
    tti: float = Field(..., description="Time to Interactive")
    tbt: float | None = Field(default=None, description="Total Blocking Time (ms)")
    si: float | None = Field(default=None, description="Speed Index")


class PerformanceResult(Model):
    """Normalized performance audit."""

    score: float = Field(..., ge=0, le=1)
    metrics: PerformanceMetrics


class AccessibilityResult(Model):
    """Normalized accessibility audit."""

    score: float = Field(..., ge=0, le=1)
    issues: Sequence[Issue] = Field(default_factory=list)
    pass_count: int = Field(default=0, ge=0)
    incomplete_count: int = Field(default=0, ge=0)


class SeoResult(Model):
    """Normalized SEO audit."""

    score: float = Field(..., ge=0, le=1)
    issues: Sequence[Issue] = Field(default_factory=list)


class SecurityResult(Model):
    """Normalized security scan."""

    score: float = Field(..., ge=0, le=100)
    grade: str | None = None
    tests_passed: int | None = None
    tests_failed: int | None = None
    tests_quantity: int | None = None
    scanned_at: datetime | None = None
    details_url: str | None = None
    status_code: int | None = None
    algorithm_version: int | None = None


class Screenshot(Model):
    """A rendering of the page in one browser, encoded inline."""

    browser: str
    url: str = Field(..., description="data: URL holding the PNG image")


class CompatibilitySummary(Model):
    """Issue and error totals across all rendered browsers."""

    total_issues: int = Field(..., ge=0)
    error_count: int = Field(..., ge=0)


class BrowserCompatibilityResult(Model):
    """Normalized browser-compatibility scan."""

    score: float = Field(..., ge=0, le=1)
    score_is_heuristic: bool = Field(
        default=True, description="Score derived from the issue count"
    )
    issues: Sequence[Issue] = Field(default_factory=list)
    screenshots: Sequence[Screenshot] = Field(default_factory=list)
    errors: Sequence[str] = Field(default_factory=list)
    summary: CompatibilitySummary


class TestResults(Model):
    """Results of one test run, keyed by the engine that produced them."""

    __test__ = False

    performance: PerformanceResult | None = None
    accessibility: AccessibilityResult | None = None
    seo: SeoResult | None = None
    security: SecurityResult | None = None
    browser_compatibility: BrowserCompatibilityResult | None = None
    synthetic: bool = Field(
        default=False, description="True for demo data, never for real engine output"
    )
