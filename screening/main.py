# screening/main.py

"""
Command-line interface (CLI) entry point for the adverse media aggregation service.

Commands:
- screen: run one screening and print the findings.
- search: rank stored context across the vector index namespaces.
- serve: run the HTTP API.
"""
import asyncio
import json
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

# config/ is a sibling package to screening/
import config.settings as settings

from screening.graph.workflow import AdverseMediaWorkflow
from screening.models.inputs import ScreeningQuery, SubjectType
from screening.models.outputs import RiskLevel, ScreeningResult, SourceStatus
from screening.retrieval import build_retrieval_service
from screening.utils.logger import get_logger

# Initialize logger and console immediately
logger = get_logger("CLI")
console = Console()

RISK_COLORS = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
    RiskLevel.CRITICAL: "bold red",
}

# --- Helper Functions for Output Formatting ---


def print_summary_table(result: ScreeningResult):
    """Prints the risk summary and the per-source outcome table."""
    media = result.adverse_media
    console.rule(f"[bold]{result.subject} Screening Summary[/bold]", style="bold magenta")

    table = Table(title="Risk Summary", show_header=True, header_style="bold blue", padding=(0, 1))
    table.add_column("Metric", style="dim")
    table.add_column("Value")

    color = RISK_COLORS[result.risk_level]
    table.add_row("Risk", f"[{color}]{result.risk_level.value} ({result.risk_score}/100)[/]", end_section=True)
    media_color = "red" if media.status == "FINDINGS" else "green"
    table.add_row("Adverse Media", f"[{media_color} bold]{media.status}[/]")
    table.add_row("Unique Articles", str(media.total_articles))
    table.add_row(
        "Severity",
        ", ".join(f"{k}: {v}" for k, v in result.severity_counts.items()),
    )
    table.add_row(
        "Categories",
        ", ".join(f"{k}: {v}" for k, v in media.categories.items() if v) or "none",
    )
    console.print(table)

    sources = Table(title="Sources Searched", show_header=True, header_style="bold blue")
    sources.add_column("Source")
    sources.add_column("Status")
    sources.add_column("Records", justify="right")
    sources.add_column("Error", style="red")
    for name, summary in result.sources_searched.items():
        status_color = {
            SourceStatus.OK: "green",
            SourceStatus.FAILED: "red",
            SourceStatus.NOT_CONFIGURED: "dim",
        }[summary.status]
        sources.add_row(name, f"[{status_color}]{summary.status.value}[/]", str(summary.count), summary.error or "")
    console.print(sources)


def print_articles(result: ScreeningResult):
    """Prints the returned articles, most relevant first as classified."""
    if not result.adverse_media.articles:
        return
    console.rule("[bold]Articles[/bold]", style="bold cyan")
    table = Table(show_header=True, header_style="bold blue", show_lines=False)
    table.add_column("Date", style="dim", no_wrap=True)
    table.add_column("Headline")
    table.add_column("Source")
    table.add_column("Category")
    table.add_column("Relevance")
    for article in result.adverse_media.articles:
        table.add_row(
            article.published_date or "-",
            article.headline,
            article.source_name,
            article.category.value,
            article.relevance.value,
        )
    console.print(table)


# --- CLI Command Group ---


@click.group()
def cli():
    """Adverse Media Screening System CLI."""
    # Settings are loaded here once for configuration
    settings.get_settings()


@cli.command()
@click.option("--name", required=True, type=str, help="Name of the person or entity being screened.")
@click.option(
    "--type",
    "subject_type",
    type=click.Choice([t.value for t in SubjectType], case_sensitive=False),
    default=SubjectType.INDIVIDUAL.value,
    help="Subject type.",
)
@click.option("--country", type=str, default=None, help="Optional jurisdiction for the sanctions search term.")
@click.option("--term", "terms", multiple=True, help="Additional search term (repeatable).")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write the JSON result here.")
@click.option("--index", "index_result", is_flag=True, default=False, help="Store the result in the prior_screenings namespace.")
@click.option("--workspace", type=str, default=None, help="Workspace id stored with an indexed result.")
def screen(name, subject_type, country, terms, output, index_result, workspace):
    """
    Executes an adverse media screening across all configured sources.
    """
    settings_instance = settings.get_settings()

    # 1. Prepare the input query model
    try:
        query = ScreeningQuery(name=name, type=subject_type, country=country, additionalTerms=list(terms))
    except ValidationError as e:
        console.print(f"[bold red]Input Error:[/bold red] Could not validate input: {e}")
        raise SystemExit(2)

    logger.info(f"Starting screening for {query.subject} ({query.subject_type.value})")

    # 2. Run Workflow
    workflow = AdverseMediaWorkflow(settings_instance)
    result = asyncio.run(workflow.run_workflow(query))

    # 3. Output
    print_summary_table(result)
    print_articles(result)

    if output:
        output.write_text(json.dumps(result.to_response(), indent=2))
        console.print(f"Result written to [bold]{output}[/bold]")

    if index_result:
        service = build_retrieval_service(settings_instance)
        if service is None:
            console.print("[yellow]Vector index not configured; result not indexed.[/yellow]")
            return
        indexed = asyncio.run(service.index_screening(result, workspace))
        console.print(f"Indexed as [bold]{indexed.id}[/bold]")


@cli.command()
@click.argument("query_text")
@click.option("--workspace", type=str, default=None, help="Restrict matches to this workspace.")
@click.option("--exclude-case", type=str, default=None, help="Exclude matches from this case.")
@click.option("--top-k", type=int, default=None, help="Global cap on returned matches.")
@click.option("--threshold", type=float, default=None, help="Minimum similarity score.")
def search(query_text, workspace, exclude_case, top_k, threshold):
    """
    Searches stored context across all vector index namespaces.
    """
    settings_instance = settings.get_settings()
    service = build_retrieval_service(settings_instance)
    if service is None:
        console.print("[bold red]Vector index not configured.[/bold red] Set PINECONE_API_KEY.")
        raise SystemExit(1)

    matches = asyncio.run(
        service.search(
            query_text,
            workspace_scope=workspace,
            exclude_id=exclude_case,
            top_k=top_k or settings_instance.rag_top_k,
            score_threshold=settings_instance.rag_score_threshold if threshold is None else threshold,
        )
    )

    table = Table(title=f"Matches for '{query_text}'", show_header=True, header_style="bold blue")
    table.add_column("Score", justify="right")
    table.add_column("Namespace")
    table.add_column("Id")
    table.add_column("Text")
    for match in matches:
        table.add_row(
            f"{match.score:.3f}",
            match.namespace,
            match.id,
            str(match.metadata.get("text", ""))[:120],
        )
    console.print(table)


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, type=int, show_default=True)
def serve(host, port):
    """
    Runs the HTTP API.
    """
    import uvicorn

    uvicorn.run("screening.api.server:app", host=host, port=port)


# --- Main Execution ---

if __name__ == "__main__":
    cli()
