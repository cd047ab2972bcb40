"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from resumeit.config import load_config
from resumeit.errors import LLMProviderError
from resumeit.logging.usage_store import UsageStore
from resumeit.pipeline.orchestrator import TailorOrchestrator
from resumeit.providers.chain import build_chain
from resumeit.providers.registry import PROVIDERS, has_usable_credential, resolve_config

app = typer.Typer(
    name="resumeit",
    help="Tailor a resume to a job posting with a fallback chain of LLM providers",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


@app.command()
def tailor(
    jd: Path = typer.Option(..., "--jd", help="Job description text file"),
    resume: Path = typer.Option(..., "--resume", help="Resume text file"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the tailored JSON here"),
    config_path: Path = typer.Option(None, "--config", "-c", help="config.yaml path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Generate a tailored resume and match analysis."""
    _setup_logging(verbose)
    for path in (jd, resume):
        if not path.exists():
            console.print(f"[red]File not found: {path}[/red]")
            raise typer.Exit(1)

    config = load_config(config_path)
    jd_text = jd.read_text(encoding="utf-8")
    resume_text = resume.read_text(encoding="utf-8")

    if verbose:
        console.print(f"[dim]Job description: {len(jd_text)} chars[/dim]")
        console.print(f"[dim]Resume: {len(resume_text)} chars[/dim]")

    orchestrator = TailorOrchestrator(config)
    try:
        with console.status("Tailoring resume..."):
            result = asyncio.run(orchestrator.generate_tailored_with_meta(jd_text, resume_text))
    except LLMProviderError as e:
        console.print(
            Panel(
                f"{e}\n\nkind: {e.kind.value} | provider: {e.provider.value if e.provider else '-'}"
                f" | http status: {e.http_status}",
                title="Tailoring failed",
                border_style="red",
            )
        )
        for outcome in e.attempts:
            console.print(f"  - {outcome.provider.value}: {outcome.status.value} {outcome.detail or ''}")
        raise typer.Exit(1)

    response = result.response
    console.print(
        Panel(
            f"[bold]Match score: {response.match_score:g}[/bold]\n"
            f"Provider: {result.provider.value} ({result.model}) | {result.duration_ms}ms\n"
            f"Attempted: {', '.join(result.attempted_providers) or '-'} | "
            f"Skipped: {', '.join(result.skipped_providers) or '-'}\n\n"
            f"{response.tailored.professional_summary}",
            title="Tailoring result",
        )
    )
    if response.tailored.key_skills:
        console.print("\n[bold]Key skills:[/bold] " + ", ".join(response.tailored.key_skills))

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(
            json.dumps(response.model_dump(exclude_none=True), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        console.print(f"[green]Saved: {output}[/green]")


@app.command()
def providers(
    config_path: Path = typer.Option(None, "--config", "-c", help="config.yaml path"),
) -> None:
    """Show the resolved provider chain and which providers are configured."""
    config = load_config(config_path)
    chain = build_chain(config.chain)

    table = Table(title="Provider chain")
    table.add_column("#", justify="right")
    table.add_column("Provider")
    table.add_column("Model")
    table.add_column("Credential")
    table.add_column("Daily limit", justify="right")
    for i, provider in enumerate(chain, 1):
        resolved = resolve_config(provider)
        ok = has_usable_credential(resolved)
        table.add_row(
            str(i),
            PROVIDERS[provider].display_name,
            resolved.model,
            f"[green]{PROVIDERS[provider].key_env}[/green]" if ok else f"[red]{PROVIDERS[provider].key_env} missing[/red]",
            str(config.quota.daily_limits.get(provider.value, "-")),
        )
    console.print(table)


@app.command()
def history(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of entries"),
    config_path: Path = typer.Option(None, "--config", "-c", help="config.yaml path"),
) -> None:
    """Show recent generation logs from the usage store."""
    config = load_config(config_path)
    if not config.store.enabled:
        console.print("[yellow]Usage store disabled. Set RESUMEIT_USAGE_DB to enable it.[/yellow]")
        raise typer.Exit(1)

    store = UsageStore(config.store.resolved_db_path)
    logs = store.get_logs(limit=limit)
    if not logs:
        console.print("[dim]No generations logged yet.[/dim]")
        return

    table = Table(title="Recent generations")
    table.add_column("Time")
    table.add_column("Provider")
    table.add_column("Result")
    table.add_column("Score", justify="right")
    table.add_column("ms", justify="right")
    for log in logs:
        table.add_row(
            log.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            log.provider or "-",
            "[green]ok[/green]" if log.success else f"[red]{log.error_kind}[/red]",
            f"{log.match_score:g}" if log.match_score is not None else "-",
            str(log.duration_ms),
        )
    console.print(table)

    stats = store.get_daily_stats()
    for provider, counts in stats["providers"].items():
        console.print(
            f"[dim]{stats['day']} {provider}: {counts['successes']} ok, {counts['failures']} failed[/dim]"
        )


if __name__ == "__main__":
    app()
