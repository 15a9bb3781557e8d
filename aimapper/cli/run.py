"""CLI commands."""
from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from aimapper.config.settings import settings
from aimapper.fetcher.html_fetcher import fetch_page
from aimapper.fetcher.performance import measure_performance
from aimapper.fetcher.site_signals import collect_site_signals
from aimapper.logging import setup_logging
from aimapper.pipeline import analyze_document, analyze_text
from aimapper.recommend.recommendations import CONTENT_TYPES
from aimapper.report.benchmarks import INDUSTRY_BENCHMARKS
from aimapper.report.formatter import OutputFormat, format_report
from aimapper.report.grading import is_failing

VERSION = "1.0.0"

app = typer.Typer(
    add_completion=False,
    help="AI Mapper - Score content for SEO and GEO (generative engine optimization)",
)
console = Console()


def _read_source(target: str) -> str:
    """Read a local file, or stdin when ``target`` is ``-``."""
    if target == "-":
        return sys.stdin.read()
    path = Path(target)
    if not path.is_file():
        raise ValueError(f"File not found: {target}")
    return path.read_text(encoding="utf-8", errors="replace")


def _analyze(target: str, input_type: str, content_type: str, industry: str | None, verbose: bool) -> dict:
    if input_type == "url":
        with console.status("[bold blue]Fetching page...", spinner="dots"):
            page = fetch_page(target)
        if verbose:
            console.print(f"[dim]Fetched {len(page.body):,} bytes from {page.final_url} ({page.status_code})[/dim]")

        with console.status("[bold blue]Collecting site signals...", spinner="dots"):
            signals = collect_site_signals(page.final_url)
        if verbose:
            console.print(f"[dim]Site signals: {signals.to_dict()}[/dim]")

        performance = None
        if settings.performance.enabled:
            with console.status("[bold blue]Measuring performance...", spinner="dots"):
                performance = measure_performance(page)
            if verbose:
                console.print(f"[dim]Performance: {performance.performance_score}/100 in {performance.response_time_ms}ms[/dim]")

        with console.status("[bold blue]Scoring...", spinner="dots"):
            return analyze_document(
                page.body,
                page.final_url,
                site_signals=signals,
                status_code=page.status_code,
                content_type=content_type,
                industry=industry,
                input_type="url",
                performance=performance,
            )

    source = _read_source(target)
    if verbose:
        console.print(f"[dim]Read {len(source):,} characters[/dim]")
    with console.status("[bold blue]Scoring...", spinner="dots"):
        if input_type == "text":
            return analyze_text(source, content_type=content_type, industry=industry)
        return analyze_document(source, content_type=content_type, industry=industry, input_type="html")


def _validate_options(input_type: str, content_type: str, industry: str | None, output: str) -> None:
    if input_type not in ("url", "html", "text"):
        raise ValueError(f"Invalid input type '{input_type}'. Use url, html, or text.")
    if content_type not in CONTENT_TYPES:
        raise ValueError(f"Invalid content type '{content_type}'. Use one of: {', '.join(CONTENT_TYPES)}.")
    if industry and industry not in INDUSTRY_BENCHMARKS:
        raise ValueError(f"Unknown industry '{industry}'. Use one of: {', '.join(INDUSTRY_BENCHMARKS)}.")
    if output not in ("cli", "json", "markdown"):
        raise ValueError(f"Invalid output format '{output}'. Use cli, json, or markdown.")


@app.command()
def run(
    target: str = typer.Argument(..., help="URL, or path to an HTML/text file ('-' for stdin)"),
    input_type: str = typer.Option(
        "url",
        "--input",
        "-i",
        help="Input type: url, html, text",
    ),
    content_type: str = typer.Option(
        "general",
        "--content-type",
        "-t",
        help="Content type: " + ", ".join(CONTENT_TYPES),
    ),
    industry: str | None = typer.Option(
        None,
        "--industry",
        help="Industry key for benchmark comparison",
    ),
    output: str = typer.Option(
        "cli",
        "--output",
        "-o",
        help="Output format: cli, json, markdown",
    ),
    save: str | None = typer.Option(
        None,
        "--save",
        "-s",
        help="Save report to file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed analysis information",
    ),
) -> None:
    """Analyze a page, HTML file or text file for SEO and GEO.

    Examples:
        ai-mapper run https://example.com
        ai-mapper run page.html --input html -o json
        ai-mapper run draft.txt --input text -t blogArticle -o markdown -s report.md
    """
    setup_logging("DEBUG" if verbose else None)

    try:
        _validate_options(input_type, content_type, industry, output)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    output_format: OutputFormat = output  # type: ignore

    if output_format == "cli":
        console.print(Panel.fit(
            f"[bold cyan]AI Mapper[/bold cyan]\n[dim]Analyzing ({input_type}):[/dim] {target}",
            border_style="cyan",
        ))

    try:
        results = _analyze(target, input_type, content_type, industry, verbose)
    except ValueError as e:
        console.print(f"\n[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except RuntimeError as e:
        console.print(f"\n[red]Runtime Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"\n[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)

    report = format_report(results, output_format)

    if save:
        save_path = Path(save)
        save_path.write_text(report, encoding="utf-8")
        console.print(f"\n[green]Report saved to:[/green] {save_path}")
    elif output_format == "cli":
        console.print("")
        console.print(report)
    else:
        console.print(report, markup=False, highlight=False, emoji=False, soft_wrap=True)

    if is_failing(results["seo"]["grade"]) or is_failing(results["geo"]["grade"]):
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]AI Mapper[/bold] v{VERSION}")
    console.print("[dim]Dual SEO/GEO content scoring engine[/dim]")


@app.command()
def check(
    target: str = typer.Argument(..., help="URL to quick-check"),
) -> None:
    """Quick check - prints only the SEO and GEO scores and grades.

    Example:
        ai-mapper check https://example.com
    """
    setup_logging()

    try:
        with console.status("[bold blue]Analyzing...", spinner="dots"):
            page = fetch_page(target)
            signals = collect_site_signals(page.final_url)
            results = analyze_document(
                page.body,
                page.final_url,
                site_signals=signals,
                status_code=page.status_code,
                input_type="url",
            )
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    grade_colors = {"A": "green", "B": "blue", "C": "yellow", "D": "red", "F": "red"}
    parts = []
    for name in ("seo", "geo"):
        score = results[name]
        color = grade_colors.get(score["grade"], "white")
        parts.append(f"{name.upper()} [{color}]{score['grade']}[/{color}] ({score['total']}/100)")
    console.print(f"{' · '.join(parts)} - {target}")

    if is_failing(results["seo"]["grade"]) or is_failing(results["geo"]["grade"]):
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn.

    Example:
        ai-mapper serve --port 8080
    """
    import uvicorn

    uvicorn.run("app.main:app", host=host, port=port, reload=reload, log_level=settings.log_level.lower())


if __name__ == "__main__":
    app()
