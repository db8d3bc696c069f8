"""repo-insight CLI - AI-assisted analysis of public GitHub repositories.

Usage:
    repo-insight analyze <github-url> [options]
    repo-insight analyze https://github.com/vercel/next.js --api-key KEY
    repo-insight analyze github.com/acme/widgets --skip-model --json-only
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.tree import Tree

from . import __version__
from .analyzer import RepositorySnapshot, build_snapshot
from .errors import RepoInsightError
from .generator import AnalysisResult, NarrativeAnalyzer
from .logging import configure_logging, get_logger
from .model import DEFAULT_MODEL, GeminiClient
from .serve import REPORT_FILENAME
from .tree import DirNode, Node

TREE_PREVIEW_LIMIT = 40

console = Console()
logger = get_logger(__name__)


def _quiet_console(json_only: bool) -> Console:
    return Console(file=open(os.devnull, "w")) if json_only else console


@click.group()
@click.version_option(version=__version__)
def cli():
    """repo-insight - AI-assisted analysis of public GitHub repositories.

    Walks a repository through the GitHub API, detects its technologies
    and asks Gemini for a structured architectural review.
    """
    pass


@cli.command()
@click.argument("url")
@click.option("--api-key", "-k", envvar="GEMINI_API_KEY", default=None, help="Gemini API key (or set GEMINI_API_KEY)")
@click.option("--model", "-m", envvar="GEMINI_MODEL", default=DEFAULT_MODEL, show_default=True, help="Gemini model name")
@click.option("--output", "-O", default=None, type=click.Path(path_type=Path), help="Write the JSON report to this file or directory")
@click.option("--json-only", is_flag=True, help="Output raw JSON to stdout (for piping)")
@click.option("--skip-model", is_flag=True, help="Heuristic-only analysis, no model inference")
@click.option("--verbose", "-v", is_flag=True, help="Log every remote call")
def analyze(url: str, api_key: str | None, model: str, output: Path | None, json_only: bool, skip_model: bool, verbose: bool):
    """Analyze a GitHub repository and print a structured report.

    URL is a GitHub repository URL, e.g. https://github.com/acme/widgets.

    Examples:

        repo-insight analyze https://github.com/acme/widgets --api-key KEY

        repo-insight analyze https://github.com/acme/widgets.git --skip-model

        GEMINI_API_KEY=... repo-insight analyze github.com/acme/widgets -O report.json
    """
    configure_logging(verbose=verbose)

    if not skip_model and not api_key:
        raise click.UsageError("A Gemini API key is required (use --api-key or GEMINI_API_KEY), or pass --skip-model")

    if not json_only:
        console.print()
        console.print(Panel.fit(
            f"[bold cyan]repo-insight v{__version__}[/] - GitHub Repository Analyzer",
            border_style="cyan",
        ))
        console.print()
        console.print("[bold]Phase 1:[/] Fetching repository", style="cyan")

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=_quiet_console(json_only),
        ) as progress:
            fetch_task = progress.add_task("Fetching...", total=4)

            def on_fetch_progress(status, current, total):
                progress.update(fetch_task, description=status, completed=current - 1, total=total)

            snapshot = build_snapshot(url, progress_callback=on_fetch_progress)
            progress.update(fetch_task, description="Repository fetched", completed=4)

        result = None
        if not skip_model:
            if not json_only:
                console.print()
                console.print("[bold]Phase 2:[/] Gemini analysis", style="cyan")
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=_quiet_console(json_only),
            ) as progress:
                progress.add_task(f"Analyzing with {model}...", total=None)
                with GeminiClient(api_key=api_key, model=model) as client:
                    result = NarrativeAnalyzer(client).analyze(snapshot)
    except RepoInsightError as e:
        logger.debug("Analysis aborted", exc_info=True)
        raise click.ClickException(str(e))

    report = build_report(snapshot, result, model if result else None)

    if json_only:
        click.echo(json.dumps(report, indent=2))
    else:
        _print_snapshot(snapshot)
        if result is None:
            console.print()
            console.print("[yellow]Skipped model inference (--skip-model)[/]")
        else:
            _print_analysis(result)

    if output:
        path = write_report(report, output)
        if not json_only:
            console.print(f"\n[green]Report written to {path}[/]")


@cli.command()
@click.argument("report", default=".", type=click.Path(exists=True, path_type=Path))
@click.option("--port", "-p", default=8420, show_default=True, help="Port to serve on")
@click.option("--open", "open_browser", is_flag=True, help="Open the viewer in a browser")
def serve(report: Path, port: int, open_browser: bool):
    """Browse a saved report in a local web viewer."""
    from .serve import start_server

    try:
        console.print(f"Serving {report} at [bold]http://localhost:{port}[/] (Ctrl+C to stop)")
        start_server(report, port=port, open_browser=open_browser)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))


@cli.command()
def version():
    """Show version information."""
    console.print(f"repo-insight v{__version__}")
    console.print("AI-assisted GitHub repository analyzer")


def build_report(
    snapshot: RepositorySnapshot,
    result: AnalysisResult | None,
    model_used: str | None,
) -> dict:
    return {
        "snapshot": snapshot.to_dict(),
        "analysis": result.to_dict() if result else None,
        "model_used": model_used or "none (heuristic only)",
    }


def write_report(report: dict, output: Path) -> Path:
    """Write the report; a directory target gets the default file name."""
    path = output / REPORT_FILENAME if output.is_dir() else output
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2))
    return path


def _print_snapshot(snapshot: RepositorySnapshot) -> None:
    """Print repository metadata, stats and technologies."""
    repo = snapshot.repository
    table = Table(title="Repository Analysis", show_header=False, border_style="dim")
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Name", escape(repo.full_name or f"{snapshot.owner}/{snapshot.repo}"))
    if repo.description:
        table.add_row("Description", escape(repo.description[:80]))
    table.add_row("Stars / Watchers / Forks", f"{repo.stargazers_count:,} / {repo.watchers_count:,} / {repo.forks_count:,}")
    if repo.language:
        table.add_row("Primary language", escape(repo.language))
    table.add_row("Created / Updated", escape(f"{repo.created_at[:10]} / {repo.updated_at[:10]}"))
    table.add_row("Files", f"{snapshot.stats.total_files:,}")
    table.add_row("Components", str(snapshot.stats.components))
    table.add_row("Pages", str(snapshot.stats.pages))

    if snapshot.languages:
        table.add_row("Languages", escape(", ".join(snapshot.languages[:8])))
    if snapshot.technologies:
        table.add_row("Technologies", escape(", ".join(snapshot.technologies)))
    if snapshot.sample_files:
        table.add_row("Sampled", escape(", ".join(s.path for s in snapshot.sample_files)))
    if snapshot.failed_paths:
        table.add_row("Unreadable dirs", str(len(snapshot.failed_paths)))

    console.print()
    console.print(table)

    if snapshot.file_structure:
        tree = Tree("[bold]File Structure[/]")
        _add_tree_nodes(tree, snapshot.file_structure, budget=[TREE_PREVIEW_LIMIT])
        console.print(tree)


def _add_tree_nodes(parent: Tree, nodes: tuple[Node, ...], budget: list[int]) -> None:
    for node in nodes:
        if budget[0] <= 0:
            parent.add("[dim]...[/]")
            return
        budget[0] -= 1
        if isinstance(node, DirNode):
            branch = parent.add(f"[bold blue]{escape(node.name)}/[/]")
            _add_tree_nodes(branch, node.children, budget)
        else:
            parent.add(escape(node.name))


def _print_analysis(result: AnalysisResult) -> None:
    """Print the narrative analysis."""
    console.print()
    console.print(Panel(escape(result.summary), title="Summary", border_style="green"))

    if result.features:
        console.print("[bold]Features:[/]")
        for f in result.features:
            console.print(f"  - {escape(f)}")

    console.print()
    console.print(f"[bold]Architecture:[/] {escape(result.architecture.pattern)}")
    for c in result.architecture.components:
        console.print(f"  [cyan]{escape(c)}[/]")

    insights = result.insights
    console.print()
    console.print(f"[bold]Complexity:[/] {insights.complexity}/10")
    console.print(f"[bold]Code quality:[/] {escape(insights.code_quality)}")
    console.print(f"[bold]Performance:[/] {escape(insights.performance)}")

    if result.recommendations:
        console.print()
        console.print("[bold]Recommendations:[/]")
        for r in result.recommendations:
            console.print(f"  [magenta]{escape(r)}[/]")


if __name__ == "__main__":
    cli()
