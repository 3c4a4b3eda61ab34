"""Tests for demo results."""

import pytest

from webtest_lab.demo import demo_results
from webtest_lab.models.request import TEST_TYPES, TestType
from webtest_lab.scoring import display_score


@pytest.mark.parametrize("test_type", TEST_TYPES)
def test_results_are_synthetic_and_scored(test_type: TestType) -> None:
    """Every type has labelled demo data with a displayed score."""
    results = demo_results(test_type)

    assert results.synthetic
    assert display_score(test_type, results) is not None


def test_known_values() -> None:
    """Demo values match the documented sample page."""
    results = demo_results("all")

    assert results.performance is not None
    assert results.performance.metrics.lcp == 2.3
    assert results.accessibility is not None
    assert results.accessibility.score == 0.92
    assert results.seo is not None
    assert results.seo.score == 0.88
    assert results.security is not None
    assert results.security.score == 75
    assert results.browser_compatibility is None
