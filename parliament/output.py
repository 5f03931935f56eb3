"""Rich console output and markdown file save for parliament sessions."""

import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from parliament.models import AgentProfile, Outcome, Vote, VoteChoice
from parliament.session import DebateRound, SessionResult

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_VOTE_STYLES = {
    VoteChoice.APPROVE: "green",
    VoteChoice.REJECT: "red",
    VoteChoice.ABSTAIN: "yellow",
}

_OUTCOME_STYLES = {
    Outcome.APPROVED: "bold green",
    Outcome.REJECTED: "bold red",
    Outcome.DEADLOCKED: "bold yellow",
}


def _table_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len].rstrip("-")


def print_agents(profiles: list[AgentProfile]) -> None:
    """Print the configured agents as a table."""
    table = Table(title="Parliament Agents")
    table.add_column("ID")
    table.add_column("Type")
    table.add_column("Name")
    table.add_column("Credit", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Default")
    table.add_column("Specialization")
    for p in profiles:
        table.add_row(
            p.id,
            p.agent_type.value,
            p.name,
            f"{p.credit_score:g}",
            f"{p.historical_accuracy:.2f}",
            p.default_position.value,
            escape(", ".join(p.specialization)),
        )
    console.print(table)


def print_round_summary(rnd: DebateRound) -> None:
    """Print each agent's statement for one debate round."""
    console.print(Rule(f"[bold cyan]Debate Round {rnd.number}[/bold cyan]"))
    for entry in rnd.entries:
        body = escape(entry.statement)
        if entry.simulation_results is not None:
            sim = entry.simulation_results
            body += f"\n\n[dim]Stress test: {sim.scenario_name}: {sim.outcome} ({sim.confidence}%)[/dim]"
        console.print(
            Panel(
                body,
                title=f"[bold]{entry.agent_type.value}[/bold] ({entry.position.value})",
                subtitle=entry.source,
                border_style="dim",
            )
        )


def print_votes(votes: list[Vote]) -> None:
    table = Table(title="Votes")
    table.add_column("Agent")
    table.add_column("Vote")
    table.add_column("Confidence", justify="right")
    table.add_column("Return", justify="right")
    table.add_column("Risk", justify="right")
    table.add_column("Reasoning")
    for v in votes:
        outcome = v.expected_outcome
        table.add_row(
            v.agent_id,
            Text(v.vote.value, style=_VOTE_STYLES[v.vote]),
            f"{v.confidence}%",
            f"{outcome.return_percent}%" if outcome else "-",
            str(outcome.risk_score) if outcome else "-",
            escape(v.reasoning),
        )
    console.print(table)


def print_summary(result: SessionResult) -> None:
    """Print the meta summary and the resolved outcome."""
    summary = result.summary
    console.print(Rule("[bold green]Meta Summary[/bold green]"))
    console.print(
        Text(
            f"Recommendation: {summary.recommendation.value} | "
            f"Weighted confidence: {summary.weighted_confidence}% | "
            f"Risk: {summary.risk_assessment.overall_risk.value} | "
            f"Ballots: {result.ballots} | "
            f"Duration: {result.total_duration_sec:.1f}s",
            style="dim",
        )
    )
    console.print(escape(summary.synthesis_statement))
    for conflict in summary.conflicts_detected:
        console.print(f"  [yellow]Conflict:[/yellow] {escape(conflict)}")
    for amendment in summary.suggested_amendments:
        console.print(f"  [cyan]Amendment:[/cyan] {escape(amendment)}")
    console.print(
        f"\nOutcome: [{_OUTCOME_STYLES[result.outcome]}]{result.outcome.value.upper()}"
        f"[/{_OUTCOME_STYLES[result.outcome]}] "
        f"(quorum {result.quorum}, majority {result.required_majority:g}%)"
    )


def save_to_file(result: SessionResult, output_dir: Path, slug_override: str | None = None) -> Path:
    """Save the full session transcript as a markdown file.

    Args:
        result: The completed SessionResult.
        output_dir: Directory to save the file in.
        slug_override: If provided, use this as the filename stem instead of
            deriving one from the topic.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    slug = slug_override if slug_override is not None else _slug(result.context.topic)
    filepath = output_dir / f"{timestamp}_{slug}.md"

    context = result.context
    summary = result.summary
    lines: list[str] = [
        f"# Parliament Session: {context.topic[:80]}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Action type:** {context.action_type.value}",
        f"**Debate rounds:** {len(result.rounds)}",
        f"**Ballots:** {result.ballots}",
        f"**Quorum:** {result.quorum}",
        f"**Required majority:** {result.required_majority:g}%",
        f"**Outcome:** {result.outcome.value}",
        "",
    ]
    if context.description:
        lines += [context.description, ""]
    lines += ["---", ""]

    for rnd in result.rounds:
        lines.append(f"## Round {rnd.number}")
        lines.append("")
        for entry in rnd.entries:
            lines.append(f"### {entry.agent_type.value.title()} ({entry.position.value})")
            lines.append("")
            lines.append(entry.statement)
            lines.append("")
            if entry.simulation_results is not None:
                sim = entry.simulation_results
                lines.append(f"*Stress test: {sim.scenario_name}: {sim.outcome} ({sim.confidence}%)*")
                lines.append("")
            lines.append(f"*Sources: {', '.join(entry.data_sources)} | {entry.source}*")
            lines.append("")

    lines += ["## Votes", "", "| Agent | Vote | Confidence | Return | Risk | Reasoning |", "|---|---|---|---|---|---|"]
    for v in result.votes:
        outcome = v.expected_outcome
        lines.append(
            f"| {v.agent_id} | {v.vote.value} | {v.confidence}% "
            f"| {f'{outcome.return_percent}%' if outcome else '-'} "
            f"| {outcome.risk_score if outcome else '-'} | {_table_cell(v.reasoning)} |"
        )
    lines.append("")

    lines += [
        "## Meta Summary",
        "",
        f"**Recommendation:** {summary.recommendation.value}",
        f"**Weighted confidence:** {summary.weighted_confidence}%",
        f"**Overall risk:** {summary.risk_assessment.overall_risk.value}",
        "",
        summary.synthesis_statement,
        "",
    ]
    for title, items in (
        ("Conflicts", summary.conflicts_detected),
        ("Suggested amendments", summary.suggested_amendments),
        ("Risk factors", summary.risk_assessment.factors),
    ):
        if items:
            lines.append(f"### {title}")
            lines.append("")
            lines.extend(f"- {item}" for item in items)
            lines.append("")

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Session saved to: %s", filepath)
    return filepath
