"""Click CLI: load settings, pick a provider, interrogate or probe readiness."""

import asyncio
import logging
import sys
import uuid
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.logging import RichHandler

from config.config_loader import AppConfig, load_config
from witness.game_service import GameService, HttpGameService, StaticGameService
from witness.models import ChatTurn, ProviderDescriptor, Question
from witness.orchestrator import generate_answer
from witness.output import console, print_answer, print_providers, print_readiness, print_reflection
from witness.readiness import probe_all
from witness.transports.base import Send, UnsupportedProvider
from witness.transports.dispatch import build_transport

logger = logging.getLogger(__name__)

_CLI_SUSPECT = "cli-suspect"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _resolve_provider(config: AppConfig, provider_name: str | None) -> ProviderDescriptor:
    try:
        return config.active(provider_name)
    except KeyError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc.args[0]}")
        sys.exit(1)


def _recording_send(send: Send, replies: list[str]) -> Send:
    """Wrap a transport so every reply is also kept for display."""

    async def _send(turns: list[ChatTurn]) -> str:
        reply = await send(turns)
        replies.append(reply)
        return reply

    return _send


@click.group()
@click.option("--settings", "settings_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Path to settings.yaml (default: config/settings.yaml)")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.pass_context
def main(ctx: click.Context, settings_path: str | None, verbose: bool) -> None:
    """Witness -- AI witness for the suspect deduction game.

    \b
    Examples:
      witness ask "Does the perpetrator wear glasses?" --description "Tall man, round glasses."
      witness ask "Is the perpetrator older than 50?" --suspect 3f2a... --provider Ollama
      witness status
      witness providers
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config(Path(settings_path)) if settings_path else load_config()
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    ctx.obj = config


@main.command()
@click.argument("question")
@click.option("--description", "descriptions", multiple=True,
              help="Suspect description fragment; repeat to add more, kept in order")
@click.option("--suspect", "suspect_id", default=None, help="Fetch the suspect's descriptions from the game server")
@click.option("--round", "round_id", default=None, help="Round id the answer belongs to (default: random)")
@click.option("--provider", "provider_name", default=None, help="Provider to use (default: active provider)")
@click.option("--show-reflection", is_flag=True, help="Print the witness reflection before the answer")
@click.pass_obj
def ask(
    config: AppConfig,
    question: str,
    descriptions: tuple[str, ...],
    suspect_id: str | None,
    round_id: str | None,
    provider_name: str | None,
    show_reflection: bool,
) -> None:
    """Ask the witness one yes/no QUESTION about a suspect."""
    if not descriptions and not suspect_id:
        console.print("[bold red]Error:[/bold red] Provide --description or --suspect.")
        sys.exit(1)

    provider = _resolve_provider(config, provider_name)

    game_service: GameService
    if descriptions:
        suspect_id = _CLI_SUSPECT
        game_service = StaticGameService({suspect_id: list(descriptions)})
    else:
        game_service = HttpGameService(config.game_server.url, config.game_server.timeout_sec)

    replies: list[str] = []
    send: Send | None = None
    if show_reflection:
        try:
            send = _recording_send(build_transport(provider, config.defaults).send, replies)
        except UnsupportedProvider as exc:
            console.print(f"[bold red]Config error:[/bold red] {exc}")
            sys.exit(1)

    console.print(f"\n[bold cyan]Witness[/bold cyan] via {provider.name} ({provider.interrogation_model})")
    console.print(f"Question: [italic]{question[:80]}{'...' if len(question) > 80 else ''}[/italic]\n")

    answer = asyncio.run(
        generate_answer(
            round_id or str(uuid.uuid4()),
            Question(english=question),
            suspect_id,
            provider,
            game_service,
            defaults=config.defaults,
            prompts=config.prompts,
            send=send,
        )
    )

    if show_reflection and replies:
        print_reflection(replies[0])

    if answer is None:
        console.print("[bold red]No answer produced.[/bold red] See the log for the reason.")
        sys.exit(1)

    print_answer(answer, provider)


@main.command()
@click.option("--provider", "provider_names", multiple=True, help="Provider to probe; repeatable (default: all)")
@click.pass_obj
def status(config: AppConfig, provider_names: tuple[str, ...]) -> None:
    """Check which configured providers can serve interrogations now."""
    if provider_names:
        selected = (_resolve_provider(config, n) for n in provider_names)
        providers = list({p.name: p for p in selected}.values())
    else:
        providers = list(config.providers.values())

    if not providers:
        console.print("[bold red]Error:[/bold red] No providers configured.")
        sys.exit(1)

    console.print("\n[bold]Checking providers...[/bold]")
    results = asyncio.run(probe_all(providers, config.defaults))
    print_readiness(results)

    if not any(s.ready for s in results.values()):
        sys.exit(1)


@main.command()
@click.pass_obj
def providers(config: AppConfig) -> None:
    """List configured providers; the active one is starred."""
    print_providers(config.providers, config.defaults.active_provider)


if __name__ == "__main__":
    main()
