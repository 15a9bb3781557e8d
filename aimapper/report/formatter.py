"""Report formatting utilities."""
from __future__ import annotations

import json
from typing import Literal

from aimapper.fetcher.performance import bytes_to_kb

OutputFormat = Literal["cli", "json", "markdown"]

_GRADE_COLORS = {"A": "green", "B": "blue", "C": "yellow", "D": "red", "F": "red bold"}
_STATUS_COLORS = {"Strong": "green", "Watch": "yellow", "Risk": "red"}
_PRIORITY_COLORS = {"Critical": "red", "High": "yellow", "Medium": "blue", "Maintain": "green"}


def format_report(results: dict, output: OutputFormat = "cli") -> str:
    """Format analysis results for output.

    Args:
        results: Dict returned by ``analyze_document``
        output: Output format - 'cli', 'json', or 'markdown'

    Returns:
        Formatted string representation of results
    """
    if output == "json":
        return _format_json(results)
    elif output == "markdown":
        return _format_markdown(results)
    else:
        return _format_cli(results)


def _format_json(results: dict) -> str:
    """Format results as JSON."""
    return json.dumps(results, ensure_ascii=False, indent=2)


def _progress_bar(percentage: int, width: int = 20) -> str:
    filled = int(width * max(0, min(100, percentage)) / 100)
    return "█" * filled + "░" * (width - filled)


def _page_title(results: dict, limit: int | None = None) -> str:
    title = results.get("meta", {}).get("title") or "Untitled document"
    if limit and len(title) > limit:
        title = title[:limit - 3] + "..."
    return title


def _cli_score_line(name: str, score: dict) -> str:
    total = score.get("total", 0)
    grade = score.get("grade", "N/A")
    label = score.get("gradeLabel", "")
    color = _GRADE_COLORS.get(grade, "white")
    return f"[bold]{name} Score:[/bold] [{color}]{total}/100 ({grade} - {label})[/{color}]"


def _cli_pillars(title: str, pillars: list[dict]) -> list[str]:
    lines = [f"[bold]{title}:[/bold]"]
    for pillar in pillars:
        score = pillar.get("score", 0)
        status = pillar.get("status", "")
        color = _STATUS_COLORS.get(status, "white")
        lines.append(
            f"  {pillar.get('label', ''):30} [{color}]{_progress_bar(score)}[/{color}] {score:3}% {status}"
        )
    lines.append("")
    return lines


def bingbot_status(signals: dict | None) -> str:
    """One-line robots.txt verdict for Bing's crawler."""
    allowed = (signals or {}).get("bingbotAllowed")
    if allowed is None:
        return "Unknown"
    if not allowed:
        return "Blocked"
    disallowed = signals.get("bingbotDisallow") or []
    if disallowed:
        return "Allowed · Disallowed: " + ", ".join(disallowed)
    return "Allowed"


def _markdown_site_signals(signals: dict) -> list[str]:
    lines = ["## Site Signals", ""]
    lines.append(f"- llms.txt: {'Detected' if signals.get('llmsTxtPresent') else 'Not detected'}")
    lines.append(f"- IndexNow endpoint: {'Accessible' if signals.get('indexNowEndpointOk') else 'Missing'}")
    lines.append(f"- Bingbot in robots.txt: {bingbot_status(signals)}")
    lines.append("")
    return lines


def _markdown_performance(performance: dict) -> list[str]:
    grades = performance.get("grades", {})
    lines = ["## Performance", ""]
    lines.append(f"**Score:** {performance.get('performanceScore', 0)}/100")
    lines.append("")
    lines.append("| Metric | Value | Grade |")
    lines.append("|--------|-------|-------|")
    lines.append(f"| Response time | {performance.get('responseTimeMs', 0)} ms | {grades.get('responseTime', '')} |")
    lines.append(f"| Page size | {bytes_to_kb(performance.get('pageSizeBytes'))} KB | {grades.get('pageSize', '')} |")
    lines.append(f"| Requests | {performance.get('numRequests', 0)} | {grades.get('numRequests', '')} |")
    lines.append(f"| Largest image | {bytes_to_kb(performance.get('largestImageBytes'))} KB | {grades.get('largestImage', '')} |")
    lines.append("")
    return lines


def _format_cli(results: dict) -> str:
    """Format results for terminal display with Rich-compatible markup."""
    lines = []
    seo = results.get("seo", {})
    geo = results.get("geo", {})

    lines.append("[bold cyan]AI Mapper Report[/bold cyan]")
    lines.append(f"[dim]Page:[/dim] {_page_title(results, limit=60)}")
    if results.get("url"):
        lines.append(f"[dim]URL:[/dim] {results['url']}")
    lines.append("")

    lines.append(_cli_score_line("SEO", seo))
    lines.append(_cli_score_line("GEO", geo))
    lines.append("")

    benchmark = results.get("benchmark")
    if benchmark:
        lines.append(f"[bold]Benchmark ({benchmark['industry']}):[/bold]")
        for key in ("seo", "geo"):
            summary = benchmark[key]
            lines.append(
                f"  {key.upper()}: {summary['label']} ({summary['delta']:+d} vs. {summary['average']})"
            )
        lines.append("")

    lines.extend(_cli_pillars("SEO Pillars", results.get("seoPillars", [])))
    lines.extend(_cli_pillars("GEO Pillars", results.get("geoPillars", [])))

    recommendations = results.get("recommendations", {}).get("combined", [])
    if recommendations:
        lines.append("[bold]Recommendations:[/bold]")
        for i, item in enumerate(recommendations, 1):
            priority = item.get("priority", "")
            color = _PRIORITY_COLORS.get(priority, "white")
            lines.append(f"  {i}. [{color}]\\[{priority}][/{color}] {item.get('text', '')} [dim]({item.get('mode', '')})[/dim]")
        lines.append("")

    findings = results.get("typeFindings", [])
    if findings:
        content_type = results.get("meta", {}).get("contentType", "")
        lines.append(f"[bold]Tips for {content_type}:[/bold]")
        for tip in findings:
            lines.append(f"  • {tip}")
        lines.append("")

    signals = results.get("siteSignals")
    if signals:
        lines.append(f"[dim]Bingbot:[/dim] {bingbot_status(signals)}")

    snapshot = results.get("snapshot")
    if snapshot:
        lines.append("[dim]" + snapshot.replace("\n", " · ") + "[/dim]")

    return "\n".join(lines)


def _markdown_breakdown(score: dict) -> list[str]:
    lines = [
        "| Check | Category | Points | Max | Passed |",
        "|-------|----------|--------|-----|--------|",
    ]
    for entry in score.get("breakdown", {}).values():
        passed = "✅" if entry.get("passed") else "❌"
        lines.append(
            f"| {entry['label']} | {entry['category']} | {entry['points']} | {entry['maxPoints']} | {passed} |"
        )
    lines.append("")
    return lines


def _markdown_pillars(pillars: list[dict]) -> list[str]:
    lines = [
        "| Pillar | Score | Status | Notes |",
        "|--------|-------|--------|-------|",
    ]
    for pillar in pillars:
        notes = "; ".join(pillar.get("notes", []))
        lines.append(f"| {pillar['label']} | {pillar['score']}% | {pillar.get('status', '')} | {notes} |")
    lines.append("")
    return lines


def _format_markdown(results: dict) -> str:
    """Format results as Markdown."""
    lines = []
    seo = results.get("seo", {})
    geo = results.get("geo", {})

    lines.append("# AI Mapper Report")
    lines.append("")
    lines.append(f"**Page:** {_page_title(results)}")
    if results.get("url"):
        lines.append(f"**URL:** {results['url']}")
    lines.append("")

    lines.append("## Scores")
    lines.append("")
    lines.append("| Dimension | Score | Grade |")
    lines.append("|-----------|-------|-------|")
    for name, score in (("SEO", seo), ("GEO", geo)):
        lines.append(
            f"| {name} | {score.get('total', 0)}/100 | {score.get('grade', 'N/A')} - {score.get('gradeLabel', '')} |"
        )
    lines.append("")

    benchmark = results.get("benchmark")
    if benchmark:
        lines.append(f"**Benchmark ({benchmark['industry']}):** "
                     f"SEO {benchmark['seo']['label'].lower()}, GEO {benchmark['geo']['label'].lower()}")
        lines.append("")

    lines.append("## SEO Pillars")
    lines.append("")
    lines.extend(_markdown_pillars(results.get("seoPillars", [])))
    lines.append("## GEO Pillars")
    lines.append("")
    lines.extend(_markdown_pillars(results.get("geoPillars", [])))

    lines.append("## SEO Breakdown")
    lines.append("")
    lines.extend(_markdown_breakdown(seo))
    lines.append("## GEO Breakdown")
    lines.append("")
    lines.extend(_markdown_breakdown(geo))

    recommendations = results.get("recommendations", {}).get("combined", [])
    if recommendations:
        lines.append("## Recommendations")
        lines.append("")
        for i, item in enumerate(recommendations, 1):
            lines.append(f"{i}. **[{item.get('priority', '').upper()}]** {item.get('text', '')} _({item.get('mode', '')})_")
        lines.append("")

    findings = results.get("typeFindings", [])
    if findings:
        lines.append("## Content-Type Tips")
        lines.append("")
        for tip in findings:
            lines.append(f"- {tip}")
        lines.append("")

    if results.get("siteSignals"):
        lines.extend(_markdown_site_signals(results["siteSignals"]))
    if results.get("performance"):
        lines.extend(_markdown_performance(results["performance"]))

    return "\n".join(lines)
