"""Displayed-score derivation shared by listings and dashboards.

Thresholds elsewhere (sorting, coloring) depend on these exact rules, so any
change here is a user-visible behavior change.
"""

import math
from collections.abc import Mapping
from typing import Literal

from webtest_lab.models.request import TestType
from webtest_lab.models.results import TestResults

type ScoreBand = Literal["good", "average", "poor"]

# Issues at which the browser-compatibility heuristic reaches zero.
BROWSER_ISSUES_FOR_ZERO = 20

# Bottom of each Observatory grade band, used when a scan reports only a grade.
GRADE_SCORES: Mapping[str, int] = {
    "A+": 100,
    "A": 90,
    "A-": 85,
    "B+": 80,
    "B": 70,
    "B-": 65,
    "C+": 60,
    "C": 50,
    "C-": 45,
    "D+": 40,
    "D": 30,
    "D-": 25,
    "F": 0,
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, as the UI does."""
    return math.floor(value + 0.5)


def percent(fraction: float) -> int:
    """Convert a [0, 1] score to a displayed 0-100 score."""
    return round_half_up(fraction * 100)


def browser_score(total_issues: int) -> float:
    """Heuristic compatibility score: 1 with no issues, 0 at 20 or more.

    The mapping is arbitrary and kept for compatibility with existing
    reports; it is not a measured quantity.
    """
    return max(0.0, 1 - total_issues / BROWSER_ISSUES_FOR_ZERO)


def grade_score(grade: str) -> int:
    """Map a letter grade to a 0-100 score."""
    try:
        return GRADE_SCORES[grade.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown security grade '{grade}'") from None


def display_score(test_type: TestType, results: TestResults | None) -> int | None:
    """Return the 0-100 score shown for a test, or None when there is none."""
    if results is None:
        return None

    match test_type:
        case "performance" | "all":
            return percent(results.performance.score) if results.performance else None
        case "accessibility":
            return percent(results.accessibility.score) if results.accessibility else None
        case "seo":
            return percent(results.seo.score) if results.seo else None
        case "security":
            return round_half_up(results.security.score) if results.security else None
        case "browser":
            compat = results.browser_compatibility
            return percent(compat.score) if compat else None

    return None


def score_band(displayed: int) -> ScoreBand:
    """Bucket a displayed score for coloring: >=90 good, >=70 average."""
    if displayed >= 90:
        return "good"
    if displayed >= 70:
        return "average"
    return "poor"
