"""Prompt and structured-context builders for delegate calls."""

from typing import Any

from config.config_loader import PromptsConfig
from parliament.errors import ConfigurationError
from parliament.models import AgentProfile, DebateContext, DebateEntry


def _render(template: str, **values: Any) -> str:
    try:
        return template.format(**values)
    except (KeyError, IndexError, ValueError) as exc:
        raise ConfigurationError(f"Invalid prompt template: {exc!r}") from exc


def system_instruction(agent: AgentProfile, prompts: PromptsConfig) -> str:
    """Role instructions for an agent, falling back to a generic one."""
    configured = prompts.instructions.get(agent.agent_type.value, "").strip()
    if configured:
        return configured
    return (
        f"You are the {agent.name} of a DeFi treasury governance parliament. "
        f"Your specialization: {', '.join(agent.specialization) or agent.agent_type.value}."
    )


def trailing_window(debates: list[DebateEntry], window: int) -> list[DebateEntry]:
    return debates[-window:] if window > 0 else []


def _debate_lines(debates: list[DebateEntry], with_position: bool) -> str:
    if not debates:
        return "- (no debate points yet)"
    if with_position:
        return "\n".join(f"- {d.agent_type.value} ({d.position.value}): {d.statement}" for d in debates)
    return "\n".join(f"- {d.agent_type.value}: {d.statement}" for d in debates)


def _entry_payload(entry: DebateEntry) -> dict[str, Any]:
    return {
        "agentType": entry.agent_type.value,
        "position": entry.position.value,
        "statement": entry.statement,
    }


def build_debate_prompt(
    agent: AgentProfile,
    context: DebateContext,
    prompts: PromptsConfig,
    data_sources: tuple[str, ...],
    window: int,
) -> tuple[str, dict[str, Any]]:
    """Return (user_prompt, structured_context) for a debate statement."""
    recent = trailing_window(context.previous_debates, window)
    prompt = _render(
        prompts.debate,
        agent_name=agent.name,
        topic=context.topic,
        description=context.description,
        action_type=context.action_type.value,
        specialization=", ".join(agent.specialization),
        data_sources=", ".join(data_sources),
        previous_debates=_debate_lines(recent, with_position=False),
    )
    structured = {
        "topic": context.topic,
        "actionType": context.action_type.value,
        "proposalData": context.proposal_data,
        "previousDebates": [_entry_payload(d) for d in recent],
    }
    return prompt, structured


def build_vote_prompt(
    agent: AgentProfile,
    context: DebateContext,
    prompts: PromptsConfig,
) -> tuple[str, dict[str, Any]]:
    """Return (user_prompt, structured_context) for a vote over the full debate."""
    prompt = _render(
        prompts.vote,
        agent_name=agent.name,
        topic=context.topic,
        description=context.description,
        action_type=context.action_type.value,
        debate_summary=_debate_lines(context.previous_debates, with_position=True),
    )
    structured = {
        "topic": context.topic,
        "actionType": context.action_type.value,
        "proposalData": context.proposal_data,
        "debates": [_entry_payload(d) for d in context.previous_debates],
        "otherVotes": [
            {"agentType": v.agent_type.value, "vote": v.vote.value, "confidence": v.confidence}
            for v in context.other_agent_votes
        ],
    }
    return prompt, structured
