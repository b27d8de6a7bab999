"""CLI entry point — Typer app for butler commands.

Usage:
    butler ask "How much did I spend on food this month?" --data records.yaml
    butler classify "Why am I always tired?"
    butler rebuild --data records.yaml --store sqlite
    butler stats --data records.yaml
    butler status
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress
from rich.table import Table

app = typer.Typer(
    name="butler",
    help="Life Butler — ask questions about your personal records.",
    no_args_is_help=True,
)

console = Console()

_QUESTION = typer.Argument(..., help="Question to ask")
_DATA = typer.Option(..., "--data", "-d", help="YAML/JSON file of domain records")


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)",
    ),
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _build(data: Path, store: str | None, no_llm: bool):
    from butler.config import load_settings
    from butler.domain.access import InMemoryDomainData
    from butler.processing.service import build_service

    settings = load_settings()
    if store:
        settings.storage.backend = store
    domain_data = InMemoryDomainData.from_file(data)
    return build_service(settings, domain_data, use_llm=not no_llm)


@app.command()
def ask(
    question: Annotated[str, _QUESTION],
    data: Annotated[Path, _DATA],
    store: str | None = typer.Option(
        None, "--store", "-s", help="Embedding store backend (memory, sqlite)",
    ),
    no_llm: bool = typer.Option(
        False, "--no-llm", help="Skip the LLM and use rule-based answers",
    ),
) -> None:
    """Route a question, run it, and print the reply."""
    service = _build(data, store, no_llm)
    result = service.route_and_process(question)

    from butler.processing.formatting import to_response_text

    console.print(f"\n[bold]Q:[/] {question}\n")
    console.print(Markdown(to_response_text(result)))
    console.print(
        f"\n[dim]{type(result).__name__} | confidence {result.confidence:.2f} "
        f"| {result.processing_time:.2f}s[/]",
    )


@app.command()
def classify(
    question: Annotated[str, _QUESTION],
) -> None:
    """Show how a question would be routed, without running it."""
    from butler.config import load_settings
    from butler.routing.router import RequestRouter

    router = RequestRouter(settings=load_settings().routing)
    routing = router.route_request(question)
    decision = routing.decision

    table = Table(title="Fused Scores")
    table.add_column("Intent", style="cyan")
    table.add_column("Rule", justify="right")
    table.add_column("Semantic", justify="right")
    table.add_column("Fused", justify="right")

    for intent, fused in sorted(decision.fused_scores.items(), key=lambda kv: kv[1], reverse=True):
        table.add_row(
            str(intent),
            f"{decision.rule_result.scores.get(intent, 0.0):.3f}",
            f"{decision.semantic_result.scores.get(intent, 0.0):.3f}",
            f"{fused:.3f}",
        )
    console.print(table)

    lines = [
        f"Path: [bold]{routing.processing_path}[/]",
        f"Primary intent: {decision.primary_intent} ({decision.confidence:.3f})",
        f"Mixed query: {decision.is_mixed_query}",
        f"LLM stage ran: {decision.llm_result is not None}",
    ]
    if routing.calculation_specs:
        ops = ", ".join(str(op) for op in routing.calculation_specs.operations)
        lines.append(f"Operations: {ops}")
    if routing.retrieval_specs:
        lines.append(f"Generation: {routing.retrieval_specs.generation_type}")
        lines.append(f"Context needs: {routing.retrieval_specs.context_needs}")
    console.print(Panel("\n".join(lines), title="Routing"))


@app.command()
def rebuild(
    data: Annotated[Path, _DATA],
    store: str | None = typer.Option(
        None, "--store", "-s", help="Embedding store backend (memory, sqlite)",
    ),
) -> None:
    """Re-embed every record from the data file."""
    service = _build(data, store, no_llm=True)

    with Progress(console=console) as progress:
        task = progress.add_task("Embedding records", total=None)

        def on_progress(current: int, total: int) -> None:
            progress.update(task, completed=current, total=total)

        indexed = service.rag.rebuild_embeddings(on_progress=on_progress)

    console.print(f"\n[bold green]Indexed:[/] {indexed} records")
    console.print(f"  Embeddings: {service.rag.store.count()}")


@app.command()
def stats(
    data: Annotated[Path, _DATA],
    store: str | None = typer.Option(
        None, "--store", "-s", help="Embedding store backend (memory, sqlite)",
    ),
) -> None:
    """Show record counts, embedding counts and index coverage."""
    service = _build(data, store, no_llm=True)
    status_info = service.rag.indexing_status()

    table = Table(title="Indexing Status")
    table.add_column("Domain", style="cyan")
    table.add_column("Records", justify="right")
    table.add_column("Embeddings", justify="right")

    embedding_counts = status_info["embedding_counts"]
    for domain, count in sorted(status_info["domain_counts"].items()):
        table.add_row(domain, str(count), str(embedding_counts.get(domain, 0)))

    console.print(table)
    console.print(
        f"\nRecords: {status_info['total_domain_records']} "
        f"| Embeddings: {status_info['total_embeddings']} "
        f"| Coverage: {status_info['overall_coverage']:.0%}",
    )


@app.command()
def status() -> None:
    """Show system status (installed providers, stores, config)."""
    from butler.config import load_settings
    from butler.embeddings.factory import available_providers as emb_providers
    from butler.llm.factory import available_providers as llm_providers
    from butler.vectorstore.factory import available_stores

    settings = load_settings()
    console.print("\n[bold green]life-butler-rag[/] v0.1.0\n")

    table = Table(title="Available Components")
    table.add_column("Layer", style="cyan")
    table.add_column("Available")
    table.add_column("Configured")

    table.add_row("Embedding Providers", ", ".join(emb_providers()), settings.embedding.provider)
    table.add_row("Embedding Stores", ", ".join(available_stores()), settings.storage.backend)
    table.add_row("LLM Providers", ", ".join(llm_providers()), settings.llm.provider)

    console.print(table)


if __name__ == "__main__":
    app()
