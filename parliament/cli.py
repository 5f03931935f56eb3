"""Click CLI: orchestrates config loading, reasoner selection, session, and output."""

import asyncio
import logging
import random
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, load_config
from parliament.engine import ParliamentEngine
from parliament.errors import ConfigurationError
from parliament.models import ActionType, DebateContext
from parliament.output import print_agents, print_round_summary, print_summary, print_votes, save_to_file
from parliament.proposals import DEFAULT_ACTION_TYPE, Proposal, parse_action_type, parse_proposal_file
from parliament.reasoners.anthropic import AnthropicReasoner
from parliament.reasoners.base import NullReasoner, Reasoner, ReasonerError
from parliament.reasoners.gemini import GeminiReasoner
from parliament.reasoners.openai_reasoner import OpenAIReasoner
from parliament.session import DebateRound, SessionResult, run_session

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

REASONER_CLASSES: dict[str, type[Reasoner]] = {
    "anthropic": AnthropicReasoner,
    "openai": OpenAIReasoner,
    "gemini": GeminiReasoner,
}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _build_reasoner(config: AppConfig, name: str) -> Reasoner:
    """Build the named reasoner, or NullReasoner when it cannot be used.

    'none' selects NullReasoner outright. A reasoner without an API key or an
    unknown SDK degrades to NullReasoner with a warning, so every agent falls
    back to its templated behaviour.

    Raises:
        click.BadParameter: If the name is not configured at all.
    """
    if name == "none":
        return NullReasoner()
    if name not in config.reasoners:
        valid = ", ".join(["none", *sorted(config.reasoners)])
        raise click.BadParameter(f"Unknown reasoner {name!r} (expected one of: {valid})", param_hint="--reasoner")

    reasoner_cfg = config.reasoners[name]
    if name not in config.available_reasoners:
        logger.warning("Reasoner '%s' has no API key (%s), using fallbacks", name, reasoner_cfg.api_key_env)
        return NullReasoner()
    if reasoner_cfg.sdk not in REASONER_CLASSES:
        logger.warning("Reasoner '%s' uses unknown sdk '%s', using fallbacks", name, reasoner_cfg.sdk)
        return NullReasoner()

    try:
        return REASONER_CLASSES[reasoner_cfg.sdk](reasoner_cfg)
    except ReasonerError as exc:
        logger.warning("Failed to instantiate reasoner '%s': %s", name, exc)
        return NullReasoner()


def _resolve_session_params(
    config: AppConfig,
    proposal: Proposal,
    rounds_cli: int | None,
    quorum_cli: int | None,
    majority_cli: float | None,
) -> tuple[int, int, float]:
    """Returns (rounds, quorum, required_majority).

    Precedence: CLI flag > proposal frontmatter > config default. Rounds are
    capped at defaults.max_rounds.
    """
    rounds = (
        rounds_cli if rounds_cli is not None
        else proposal.rounds if proposal.rounds is not None
        else config.defaults.rounds
    )
    quorum = (
        quorum_cli if quorum_cli is not None
        else proposal.quorum if proposal.quorum is not None
        else config.defaults.quorum
    )
    majority = (
        majority_cli if majority_cli is not None
        else proposal.required_majority if proposal.required_majority is not None
        else config.defaults.required_majority
    )

    if rounds < 1:
        raise click.BadParameter(f"rounds must be at least 1, got {rounds}", param_hint="--rounds")
    if rounds > config.defaults.max_rounds:
        logger.warning("Capping rounds at %d (requested %d)", config.defaults.max_rounds, rounds)
        rounds = config.defaults.max_rounds
    if quorum < 0:
        raise click.BadParameter(f"quorum must be non-negative, got {quorum}", param_hint="--quorum")
    if not 0 <= majority <= 100:
        raise click.BadParameter(f"majority must be within [0, 100], got {majority:g}", param_hint="--majority")
    return rounds, quorum, majority


def _load_proposal(
    topic: str | None,
    proposal_file: str | None,
    description: str | None,
    action_type: str | None,
) -> Proposal:
    if proposal_file:
        try:
            proposal = parse_proposal_file(Path(proposal_file))
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--file") from exc
    elif topic:
        proposal = Proposal(
            context=DebateContext(topic=topic, description="", action_type=DEFAULT_ACTION_TYPE)
        )
    else:
        raise click.UsageError("Provide a TOPIC argument or --file.")

    if description is not None:
        proposal.context.description = description
    if action_type is not None:
        try:
            proposal.context.action_type = parse_action_type(action_type)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--action-type") from exc
    return proposal


async def _run_session(
    engine: ParliamentEngine,
    proposal: Proposal,
    rounds: int,
    quorum: int,
    majority: float,
    redebate_rounds: int,
) -> SessionResult:
    context = proposal.context
    agents = engine.get_agent_profiles()

    console.print(
        f"\n[bold cyan]Agent Parliament[/bold cyan]: {len(agents)} agents, {rounds} rounds "
        f"[{context.action_type.value}]"
    )
    console.print(f"Reasoner: {engine.reasoner.name()}")
    console.print(f"Quorum: {quorum}, required majority: {majority:g}%")
    console.print(f"Topic: [italic]{context.topic[:80]}{'...' if len(context.topic) > 80 else ''}[/italic]\n")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:

        def on_round_complete(rnd: DebateRound) -> None:
            progress.print(f"[green]OK[/green] Round {rnd.number} complete ({len(rnd.entries)} statements)")

        progress.add_task("Deliberating...", total=None)
        return await run_session(
            engine,
            context,
            num_rounds=rounds,
            quorum=quorum,
            required_majority=majority,
            redebate_rounds=redebate_rounds,
            on_round_complete=on_round_complete,
        )


@click.command()
@click.argument("topic", required=False)
@click.option("--file", "proposal_file", type=click.Path(exists=True), help="Read proposal from .md file")
@click.option("--description", default=None, help="Proposal description (overrides file body)")
@click.option("--action-type", default=None,
              type=click.Choice([a.value for a in ActionType], case_sensitive=False),
              help="Proposal category (default: governance)")
@click.option("--rounds", default=None, type=int, help="Number of debate rounds (default: from config)")
@click.option("--quorum", default=None, type=int, help="Minimum number of votes (default: from config)")
@click.option("--majority", default=None, type=float, help="Required weighted majority in percent (default: from config)")
@click.option("--redebate", "redebate_rounds", default=None, type=int,
              help="Extra debate rounds allowed after a deadlock (default: from config)")
@click.option("--reasoner", "reasoner_name", default=None,
              help="Reasoner agents delegate to, or 'none' for templated fallbacks (default: from config)")
@click.option("--seed", default=None, type=int, help="Seed the random source for reproducible fallbacks")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--no-save", is_flag=True, default=False, help="Do not write the markdown transcript")
@click.option("--list-agents", is_flag=True, default=False, help="List configured agents and exit")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def main(
    topic: str | None,
    proposal_file: str | None,
    description: str | None,
    action_type: str | None,
    rounds: int | None,
    quorum: int | None,
    majority: float | None,
    redebate_rounds: int | None,
    reasoner_name: str | None,
    seed: int | None,
    output_path: str | None,
    no_save: bool,
    list_agents: bool,
    verbose: bool,
) -> None:
    """Agent Parliament -- multi-agent deliberation over DeFi proposals.

    \b
    Examples:
      parliament "Deploy 20% of treasury into Aave v3" --action-type yield_deployment
      parliament "Rotate stablecoins to Compound" --reasoner claude --rounds 3
      parliament --file proposal.md --seed 42 --no-save
      parliament --list-agents
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, ConfigurationError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    if list_agents:
        print_agents(config.agents)
        return

    proposal = _load_proposal(topic, proposal_file, description, action_type)
    effective_rounds, effective_quorum, effective_majority = _resolve_session_params(
        config, proposal, rounds, quorum, majority
    )
    effective_redebate = redebate_rounds if redebate_rounds is not None else config.defaults.redebate_rounds
    if effective_redebate < 0:
        raise click.BadParameter(f"must be non-negative, got {effective_redebate}", param_hint="--redebate")
    effective_output = Path(output_path) if output_path else config.defaults.output_dir
    reasoner = _build_reasoner(config, reasoner_name or config.defaults.reasoner)

    try:
        engine = ParliamentEngine.from_config(config, reasoner=reasoner, rng=random.Random(seed))
    except ConfigurationError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    result = asyncio.run(
        _run_session(
            engine,
            proposal,
            rounds=effective_rounds,
            quorum=effective_quorum,
            majority=effective_majority,
            redebate_rounds=effective_redebate,
        )
    )

    for rnd in result.rounds:
        print_round_summary(rnd)
    print_votes(result.votes)
    print_summary(result)

    if not no_save:
        slug = Path(proposal_file).stem if proposal_file else None
        saved_path = save_to_file(result, effective_output, slug_override=slug)
        console.print(f"\n[dim]Saved to: {saved_path}[/dim]")


if __name__ == "__main__":
    main()
