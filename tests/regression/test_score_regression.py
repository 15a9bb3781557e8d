"""
Score Regression Tests.

These tests ensure that code changes don't unexpectedly alter scoring behavior.
If a test fails, the scoring rules have changed - update the expected values if
that was intentional, otherwise fix the code.

Golden data approach:
- Every fixture must satisfy the score invariants (bounds, sums, grades)
- Selected fixtures pin the rules they are built to pass or fail
- The empty document pins exact totals
"""
from __future__ import annotations

from pathlib import Path

import pytest

from aimapper.metrics.record import SiteSignals
from aimapper.pipeline import analyze_document
from aimapper.report.grading import determine_grade
from aimapper.scoring.base import percentage

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures" / "html"
FIXTURES = sorted(FIXTURES_DIR.glob("*.html"))


def _analyze(name: str, fixed_now, **kwargs) -> dict:
    html = (FIXTURES_DIR / name).read_text(encoding="utf-8")
    return analyze_document(html, now=fixed_now, **kwargs)


class TestScoreInvariants:
    """Invariants that hold for every fixture."""

    @pytest.mark.parametrize("path", FIXTURES, ids=lambda p: p.stem)
    def test_fixture_invariants(self, path, fixed_now):
        """Totals, breakdowns, pillars and grades agree with each other."""
        results = analyze_document(path.read_text(encoding="utf-8"), now=fixed_now)

        for key, pillar_key, max_points in (("seo", "seoPillars", 95), ("geo", "geoPillars", 100)):
            score = results[key]
            assert score["maxPoints"] == max_points
            assert 0 <= score["total"] <= 100
            assert sum(e["points"] for e in score["breakdown"].values()) == score["totalPoints"]
            assert all(0 <= e["points"] <= e["maxPoints"] for e in score["breakdown"].values())
            assert score["total"] == percentage(score["totalPoints"], score["maxPoints"])
            assert (score["grade"], score["gradeLabel"]) == determine_grade(score["total"])
            assert sum(p["points"] for p in results[pillar_key]) == score["totalPoints"]
            assert sum(p["maxPoints"] for p in results[pillar_key]) == max_points

    @pytest.mark.parametrize("path", FIXTURES, ids=lambda p: p.stem)
    def test_deterministic(self, path, fixed_now):
        """Same input and clock give identical results."""
        html = path.read_text(encoding="utf-8")
        assert analyze_document(html, now=fixed_now) == analyze_document(html, now=fixed_now)

    def test_recommendation_cap(self, fixed_now):
        """A weak page still gets at most ten combined recommendations."""
        results = _analyze("spa_shell.html", fixed_now)
        assert 1 <= len(results["recommendations"]["combined"]) <= 10


class TestPinnedRules:
    """Fixtures built to pass or fail specific rules."""

    def test_spa_shell_not_server_rendered(self, fixed_now):
        """An empty app shell fails the SSR check."""
        breakdown = _analyze("spa_shell.html", fixed_now)["geo"]["breakdown"]
        assert breakdown["serverRendered"]["points"] == 0
        assert breakdown["validSchema"]["points"] == 0

    def test_press_release_schema(self, fixed_now):
        """NewsArticle counts as article-type schema."""
        results = _analyze("press_release.html", fixed_now, content_type="pressRelease")
        breakdown = results["geo"]["breakdown"]
        assert breakdown["validSchema"]["passed"] is True
        assert breakdown["articleSchema"]["passed"] is True
        assert breakdown["authorAttribution"]["passed"] is True
        assert breakdown["dateModifiedRecent"]["passed"] is True
        assert breakdown["currentYearReference"]["passed"] is True

    def test_faq_page_schema(self, fixed_now):
        """FAQPage markup is valid schema."""
        breakdown = _analyze("faq_page.html", fixed_now)["geo"]["breakdown"]
        assert breakdown["validSchema"]["passed"] is True
        assert breakdown["serverRendered"]["passed"] is True

    def test_site_signals_raise_geo(self, fixed_now):
        """Site signals only ever add GEO points."""
        without = _analyze("press_release.html", fixed_now)
        with_signals = _analyze(
            "press_release.html",
            fixed_now,
            site_signals=SiteSignals(
                llms_txt_present=True,
                robots_allows_all=True,
                index_now_endpoint_ok=True,
                sitemap_lastmod_recent=True,
            ),
            status_code=200,
        )
        gained = with_signals["geo"]["totalPoints"] - without["geo"]["totalPoints"]
        assert gained == 5 + 4 + 3 + 2 + 1
        assert with_signals["seo"] == without["seo"]


class TestEmptyDocument:
    """Exact totals for an empty document."""

    def test_empty_totals(self, fixed_now):
        """Only rules satisfied by absence score on an empty document."""
        results = analyze_document("", now=fixed_now)
        assert results["seo"]["totalPoints"] == 27
        assert results["seo"]["total"] == 28
        assert results["seo"]["grade"] == "F"
        assert results["geo"]["totalPoints"] == 2
        assert results["geo"]["total"] == 2
        assert results["geo"]["grade"] == "F"
