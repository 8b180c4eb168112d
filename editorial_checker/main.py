"""Main script for running the editorial checker from a terminal."""

import asyncio
import logging
import sys

from rich.console import Console
from rich.table import Table

from .domain.errors import ConfigurationError
from .domain.models.report import Report
from .domain.services.article_text import prepare_article
from .infrastructure.dependencies import get_service_container

console = Console()


class ConsoleProgressReporter:
    """Prints progress updates as they arrive."""

    def report(self, percent: float, stage: str, message: str) -> None:
        console.print(f"[dim][{int(percent):3d}%] {stage}: {message}[/dim]")


def read_article() -> str:
    """Read article text until a line containing only a single dot (or EOF)."""
    lines = []
    for line in sys.stdin:
        if line.rstrip("\n") == ".":
            break
        lines.append(line)
    return "".join(lines)


def print_report(report: Report) -> None:
    """Render a report for the terminal."""
    console.print(f"\n[bold]Score:[/bold] {report.score}/100  [bold]Status:[/bold] {report.status.value}")
    console.print(report.description)

    if report.issues:
        table = Table(title="Issues")
        table.add_column("Severity")
        table.add_column("Type")
        table.add_column("Claim")
        table.add_column("Problem")
        for issue in report.issues:
            table.add_row(issue.severity.value, issue.type.value, issue.claim, issue.the_problem)
        console.print(table)

    if report.verified_facts:
        console.print("\n[bold]Verified facts:[/bold]")
        for fact in report.verified_facts:
            console.print(f"  ✔ {fact.claim} ({fact.confidence.value})")

    if report.sources:
        console.print("\n[bold]Sources:[/bold]")
        for i, source in enumerate(report.sources, 1):
            console.print(f"  {i}. {source.title} - {source.url}")


async def main():
    """Run the editorial checker."""
    logging.basicConfig(level=logging.WARNING)
    console.print("Editorial Checker - pre-publication fact checking")
    console.print("--------------------------------------------------")

    container = get_service_container()
    try:
        service = await container.get_fact_checking_service()
    except ConfigurationError as e:
        console.print(f"[red]{e}. Set PERPLEXITY_API_KEY and try again.[/red]")
        return

    try:
        while True:
            console.print("\nPaste an article, then a line with a single '.' (empty input quits):")
            article = prepare_article(read_article())
            if not article:
                break

            console.print("\nChecking facts...")
            report = await service.fact_check(article, progress=ConsoleProgressReporter())
            print_report(report)
    finally:
        await container.shutdown()


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
