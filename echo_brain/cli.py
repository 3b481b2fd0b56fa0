from typing import Optional
import typer
import asyncio
import logging
from typing_extensions import Annotated
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from echo_brain.client.echo_brain import EchoBrain
from echo_brain.domains.errors import EchoError

# --- Basic Logging Configuration ---
logging.basicConfig(level=logging.WARNING, format="%(levelname)s:%(name)s:%(message)s")
# --- End Logging Configuration ---

app = typer.Typer(help="Capture what you read and ask questions about it.")
console = Console()

ConfigOption = Annotated[
    str, typer.Option(help="Path to the configuration JSON file.")
]
UserOption = Annotated[str, typer.Option(help="The user ID that owns the memories.")]


def load_brain(config: str) -> EchoBrain:
    try:
        with console.status("[bold green]Initializing brain...", spinner="dots"):
            return EchoBrain(config_path=config)
    except FileNotFoundError:
        console.print(
            f"[bold red]Error:[/bold red] Configuration file not found at '{config}'"
        )
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(f"[bold red]Error loading configuration:[/bold red] {e}")
        raise typer.Exit(code=1)


def run(brain: EchoBrain, coro):
    """Run a client coroutine, closing the brain afterwards."""

    async def _run():
        try:
            return await coro
        finally:
            await brain.close()

    try:
        return asyncio.run(_run())
    except (EchoError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)


@app.command()
def register(
    email: Annotated[str, typer.Argument(help="E-mail address of the user.")],
    user_id: UserOption = "cli_user",
    config: ConfigOption = "config.json",
):
    """Register a user. Academic addresses receive the student plan."""
    brain = load_brain(config)
    account = run(brain, brain.register_user(user_id, email))
    console.print(
        f"[green]Registered[/green] {account.id} ({account.email}) "
        f"on plan [bold]{account.entitlement_tier}[/bold]"
    )


@app.command()
def ingest(
    content: Annotated[
        Optional[str], typer.Argument(help="Text to remember.")
    ] = None,
    file: Annotated[
        Optional[typer.FileText], typer.Option(help="Read the content from a text file.")
    ] = None,
    title: Annotated[Optional[str], typer.Option(help="Title of the source.")] = None,
    url: Annotated[Optional[str], typer.Option(help="URL of the source.")] = None,
    source_type: Annotated[
        str, typer.Option(help="note, web, pdf, video or conversation.")
    ] = "note",
    user_id: UserOption = "cli_user",
    config: ConfigOption = "config.json",
):
    """Capture content as a new memory."""
    if file is not None:
        content = file.read()
    if not content:
        console.print("[bold red]Error:[/bold red] Provide content or --file.")
        raise typer.Exit(code=1)

    brain = load_brain(config)
    metadata = {"source_type": source_type, "source_title": title, "source_url": url}
    memory = run(brain, brain.ingest(user_id, content, metadata=metadata))

    console.print(
        Panel(
            memory.summary or memory.cleaned_content[:200],
            title=f"Memory {memory.id}",
            subtitle=f"confidence {memory.confidence_score:.2f}",
        )
    )
    if memory.key_concepts:
        console.print(f"[dim]Concepts:[/dim] {', '.join(memory.key_concepts)}")


@app.command()
def ask(
    question: Annotated[str, typer.Argument(help="Question about your memories.")],
    intent: Annotated[
        Optional[str],
        typer.Option(help="overview, timeline, summary or comparison."),
    ] = None,
    limit: Annotated[
        Optional[int], typer.Option(help="Maximum supporting memories.")
    ] = None,
    user_id: UserOption = "cli_user",
    config: ConfigOption = "config.json",
):
    """Ask a question answered from your memories."""
    brain = load_brain(config)
    with console.status("[bold green]Thinking...", spinner="dots"):
        answer = run(brain, brain.query(user_id, question, intent=intent, limit=limit))

    console.print(f"[bright_blue]Echo:[/bright_blue] {answer.answer_text}")
    console.print(
        f"[dim]Intent: {answer.interpreted_intent} | "
        f"confidence {answer.overall_confidence:.2f}[/dim]"
    )
    if answer.uncertainty_notes:
        console.print(f"[yellow]{answer.uncertainty_notes}[/yellow]")

    if answer.timeline:
        table = Table(title="Timeline")
        table.add_column("Date")
        table.add_column("Role")
        table.add_column("Description")
        for entry in answer.timeline:
            table.add_row(entry.date.date().isoformat(), entry.role, entry.description)
        console.print(table)

    if answer.supporting_memories:
        table = Table(title="Sources")
        table.add_column("Memory")
        table.add_column("Title")
        table.add_column("Confidence", justify="right")
        for evidence in answer.supporting_memories:
            table.add_row(
                evidence.memory_id,
                evidence.source_title or "-",
                f"{evidence.confidence_score:.2f}",
            )
        console.print(table)


@app.command()
def stats(
    user_id: UserOption = "cli_user",
    config: ConfigOption = "config.json",
):
    """Show statistics about your memories."""
    brain = load_brain(config)
    summary = run(brain, brain.stats(user_id))

    table = Table(title=f"Memories of {user_id}")
    table.add_column("Source type")
    table.add_column("Count", justify="right")
    for source_type, count in sorted(summary.by_type.items()):
        table.add_row(source_type, str(count))
    table.add_row("[bold]total[/bold]", f"[bold]{summary.total}[/bold]")
    console.print(table)
    console.print(
        f"Average confidence {summary.avg_confidence:.2f}, "
        f"{summary.verified_count} verified"
    )


if __name__ == "__main__":
    app()
