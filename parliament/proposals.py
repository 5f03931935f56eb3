"""Proposal files: markdown body as description, YAML frontmatter for the rest."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import frontmatter

from parliament.models import ActionType, DebateContext

DEFAULT_ACTION_TYPE = ActionType.GOVERNANCE


@dataclass
class Proposal:
    context: DebateContext
    rounds: int | None = None
    quorum: int | None = None
    required_majority: float | None = None


def parse_action_type(value: Any) -> ActionType:
    """Accept 'yield_deployment', 'Yield Deployment' or 'yield-deployment'."""
    token = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return ActionType(token)
    except ValueError as exc:
        valid = ", ".join(a.value for a in ActionType)
        raise ValueError(f"Unknown action type {value!r} (expected one of: {valid})") from exc


def _optional_int(metadata: dict[str, Any], key: str) -> int | None:
    return int(metadata[key]) if metadata.get(key) is not None else None


def parse_proposal_file(file_path: Path) -> Proposal:
    """Parse a proposal markdown file.

    Frontmatter keys: topic (required), action_type, rounds, quorum,
    required_majority, data (mapping copied into proposal_data). Other keys
    are ignored. The body becomes the description.

    Raises:
        ValueError: If the topic is missing, the action type is unknown, or
            data is not a mapping.
    """
    post = frontmatter.load(str(file_path))
    metadata = post.metadata

    topic = str(metadata.get("topic", "") or "").strip()
    if not topic:
        raise ValueError(f"Proposal file {file_path} has no 'topic' in its frontmatter")

    raw_action = metadata.get("action_type")
    action_type = parse_action_type(raw_action) if raw_action is not None else DEFAULT_ACTION_TYPE

    data = metadata.get("data") or {}
    if not isinstance(data, dict):
        raise ValueError(f"Proposal file {file_path}: 'data' must be a mapping")

    rounds = _optional_int(metadata, "rounds")
    quorum = _optional_int(metadata, "quorum")
    majority = metadata.get("required_majority")

    return Proposal(
        context=DebateContext(
            topic=topic,
            description=post.content.strip(),
            action_type=action_type,
            proposal_data=dict(data),
        ),
        rounds=rounds,
        quorum=quorum,
        required_majority=float(majority) if majority is not None else None,
    )
