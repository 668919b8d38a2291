"""Rich console output for answers, readiness and provider listings."""

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from witness.models import Answer, ProviderDescriptor, ReadinessStatus
from witness.protocol import parse_verdict

console = Console(legacy_windows=False)


def _preview(text: str, words: int = 50) -> str:
    """Return first N words of a text."""
    all_words = text.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def verdict_label(text: str) -> str:
    verdict = parse_verdict(text)
    if verdict is True:
        return "[bold green]YES[/bold green]"
    if verdict is False:
        return "[bold red]NO[/bold red]"
    return "[yellow]unclear[/yellow]"


def print_reflection(reflection: str) -> None:
    console.print(Rule("[bold cyan]Witness Reflection[/bold cyan]"))
    console.print(Panel(_preview(reflection, words=150), border_style="dim"))


def print_answer(answer: Answer, provider: ProviderDescriptor) -> None:
    """Print the witness answer with a YES/NO reading of it."""
    console.print(Rule("[bold green]Witness Answer[/bold green]"))
    console.print(
        Text(
            f"Provider: {provider.name} ({provider.interrogation_model}) | Answer id: {answer.id}",
            style="dim",
        )
    )
    console.print(
        Panel(
            answer.text,
            title=f"Verdict: {verdict_label(answer.text)}",
            border_style="green",
        )
    )


def readiness_table(results: dict[str, ReadinessStatus]) -> Table:
    table = Table(title="Provider readiness")
    table.add_column("Provider", style="bold")
    table.add_column("Kind")
    table.add_column("Model")
    table.add_column("Ready")
    table.add_column("Message")
    for name in sorted(results):
        status = results[name]
        table.add_row(
            name,
            status.provider.kind,
            status.provider.interrogation_model,
            "[green]OK[/green]" if status.ready else "[red]FAIL[/red]",
            status.message.splitlines()[0][:120] if status.message else "",
        )
    return table


def print_readiness(results: dict[str, ReadinessStatus]) -> None:
    console.print(readiness_table(results))


def print_providers(providers: dict[str, ProviderDescriptor], active: str) -> None:
    table = Table(title="Configured providers")
    table.add_column("")
    table.add_column("Provider", style="bold")
    table.add_column("Kind")
    table.add_column("Chat model")
    table.add_column("Vision model")
    table.add_column("Token")
    for name, descriptor in providers.items():
        table.add_row(
            "*" if name.lower() == active.lower() else "",
            name,
            descriptor.kind,
            descriptor.chat_model,
            descriptor.vision_model,
            "set" if descriptor.auth_token else "-",
        )
    console.print(table)
