"""Raw, engine-specific results as produced by the runners."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import Field

from webtest_lab.models.base import EngineModel


class LighthouseAuditRef(EngineModel):
    """Reference from a category to one of its audits."""

    id: str
    weight: float = 0


class LighthouseCategory(EngineModel):
    """A scored Lighthouse category."""

    id: str
    title: str = ""
    score: float | None = None
    audit_refs: Sequence[LighthouseAuditRef] = Field(
        default_factory=list, alias="auditRefs"
    )


class LighthouseAudit(EngineModel):
    """A single Lighthouse audit."""

    id: str
    title: str = ""
    description: str = ""
    score: float | None = None
    score_display_mode: str = Field(default="binary", alias="scoreDisplayMode")
    numeric_value: float | None = Field(default=None, alias="numericValue")
    details: Mapping[str, Any] | None = None


class LighthouseRuntimeError(EngineModel):
    """Fatal error Lighthouse embeds in a report instead of failing."""

    code: str
    message: str = ""


class LighthouseReport(EngineModel):
    """The parts of a Lighthouse result (LHR) the normalizer reads."""

    lighthouse_version: str = Field(default="", alias="lighthouseVersion")
    final_url: str = Field(default="", alias="finalDisplayedUrl")
    categories: Mapping[str, LighthouseCategory] = Field(default_factory=dict)
    audits: Mapping[str, LighthouseAudit] = Field(default_factory=dict)
    runtime_error: LighthouseRuntimeError | None = Field(
        default=None, alias="runtimeError"
    )


class AxeNode(EngineModel):
    """A DOM node checked by an axe rule."""

    html: str = ""
    # Nested lists address nodes inside iframes or shadow roots.
    target: Sequence[str | Sequence[str]] = Field(default_factory=list)
    failure_summary: str | None = Field(default=None, alias="failureSummary")


class AxeRule(EngineModel):
    """Outcome of one axe rule."""

    id: str
    impact: str | None = None
    tags: Sequence[str] = Field(default_factory=list)
    description: str = ""
    help: str = ""
    help_url: str | None = Field(default=None, alias="helpUrl")
    nodes: Sequence[AxeNode] = Field(default_factory=list)


class AxeResults(EngineModel):
    """Results returned by ``axe.run``."""

    violations: Sequence[AxeRule] = Field(default_factory=list)
    passes: Sequence[AxeRule] = Field(default_factory=list)
    incomplete: Sequence[AxeRule] = Field(default_factory=list)


class ObservatoryScan(EngineModel):
    """Response of the MDN HTTP Observatory v2 scan endpoint."""

    id: int | None = None
    details_url: str | None = None
    algorithm_version: int | None = None
    scanned_at: datetime | None = None
    error: str | None = None
    grade: str | None = None
    score: float | None = None
    status_code: int | None = None
    tests_failed: int | None = None
    tests_passed: int | None = None
    tests_quantity: int | None = None


@dataclass(frozen=True, kw_only=True)
class BrowserProbe:
    """What one browser saw while rendering the page."""

    browser: str
    axe: AxeResults
    screenshot: bytes = field(repr=False)
    errors: Sequence[str] = ()


@dataclass(frozen=True, kw_only=True)
class BrowserCompatibilityScan:
    """Probes from every requested browser, in request order."""

    probes: Sequence[BrowserProbe]


@dataclass(frozen=True, kw_only=True)
class CompositeScan:
    """Raw results of the legacy ``all`` mode, keyed by test type."""

    performance: LighthouseReport
    accessibility: AxeResults
    seo: LighthouseReport
    security: ObservatoryScan
