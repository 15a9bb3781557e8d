"""Shared test fixtures and configuration."""
from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def fixed_now() -> datetime:
    """Reference time for freshness checks."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def article_html() -> str:
    """Return a well-structured article page."""
    return """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Solar Panels Explained: Costs, Output and Installation</title>
    <meta name="description" content="A practical guide to residential solar panels covering installation cost, energy output, payback periods and the incentives available to homeowners in 2026.">
    <link rel="canonical" href="https://example.com/guides/solar-panels">
    <meta name="robots" content="index, follow">
    <script type="application/ld+json">
    {
        "@context": "https://schema.org",
        "@type": "Article",
        "headline": "Solar Panels Explained",
        "author": {"@type": "Person", "name": "Dana Reyes", "sameAs": "https://www.wikidata.org/wiki/Q1"},
        "dateModified": "2026-02-10T09:00:00+00:00",
        "image": {"@type": "ImageObject", "url": "https://example.com/panel.jpg", "author": "Studio North"}
    }
    </script>
    <script type="application/ld+json">
    {"@context": "https://schema.org", "@type": "BreadcrumbList", "itemListElement": []}
    </script>
</head>
<body>
    <h1>Solar Panels Explained</h1>
    <p>Solar panels convert sunlight into electricity. A typical home system costs $12,000 before incentives. Most owners recover the cost within 8 years.</p>

    <h2>What are solar panels?</h2>
    <p>A solar panel is a grid of photovoltaic cells wired together. Each cell produces a small current when light hits it.</p>

    <h2>How much do solar panels cost?</h2>
    <p>Our data from 1,200 installations shows an average of $2.75 per watt. Prices fell 12% between 2023 and 2026.</p>
    <ul>
        <li>Panels: 40% of the total</li>
        <li>Inverter: 15% of the total</li>
        <li>Labor and permits: 45% of the total</li>
    </ul>

    <h2>Why install solar panels now?</h2>
    <p>The federal tax credit covers 30% of the system cost. See the <a href="https://www.energy.gov/solar">Department of Energy solar guide</a> for current rules.</p>

    <figure>
        <img src="/images/panel.jpg" alt="Rooftop solar panel array">
        <figcaption>Photo credit: Studio North</figcaption>
    </figure>

    <p>Read our <a href="/guides/inverters">inverter buying guide</a>, the <a href="/guides/batteries">home battery guide</a> and the <a href="/topics/solar">solar topic hub</a>.</p>

    <div class="author-bio">About the author: Dana Reyes has reviewed residential energy systems for ten years.</div>
</body>
</html>"""


@pytest.fixture
def minimal_html() -> str:
    """Return minimal HTML for edge case testing."""
    return """<!DOCTYPE html>
<html>
<head><title>Minimal</title></head>
<body><p>Content</p></body>
</html>"""


@pytest.fixture
def faq_html() -> str:
    """Return a page carrying FAQPage JSON-LD."""
    return """<html><head>
<script type="application/ld+json">
{"@context": "https://schema.org", "@type": "FAQPage", "mainEntity": [
    {"@type": "Question", "name": "What is GEO?",
     "acceptedAnswer": {"@type": "Answer", "text": "Generative engine optimization."}}
]}
</script>
</head><body><h1>FAQ</h1><p>What is GEO? It is generative engine optimization.</p></body></html>"""


@pytest.fixture
def html_noindex() -> str:
    """Return HTML with noindex directive."""
    return """<!DOCTYPE html>
<html>
<head>
    <title>Noindex Page</title>
    <meta name="robots" content="noindex, nofollow">
</head>
<body>
    <h1>Hidden Page</h1>
    <p>This page should not be indexed.</p>
</body>
</html>"""


@pytest.fixture
def mock_url() -> str:
    """Return a mock URL for testing."""
    return "https://example.com/guides/solar-panels"


@pytest.fixture
def robots_txt_allow_all() -> str:
    """Return robots.txt that allows all crawlers."""
    return """User-agent: *
Allow: /

Sitemap: https://example.com/sitemap-index.xml
"""


@pytest.fixture
def robots_txt_block_all() -> str:
    """Return robots.txt that blocks every crawler."""
    return """# staging
User-agent: GPTBot
Allow: /

User-agent: *
Disallow: /
"""
