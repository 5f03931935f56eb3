"""Parse-or-fail adapter for reasoner output.

Every function here either returns a well-formed value or raises
InvalidReasonerResponse, which callers route to the same fallback path as a
transport failure.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

from parliament.models import AgentType, Position, VoteChoice
from parliament.reasoners.base import InvalidReasonerResponse

_SOURCE = "parser"
_MAX_TEXT_LEN = 500
_MAX_LIST_ITEMS = 2
DEFAULT_CONFIDENCE = 70

_RISK_CAUTION_WORDS = ("concern", "risk", "caution")
_FOR_WORDS = ("support", "approve", "opportunity")
_AGAINST_WORDS = ("reject", "oppose", "veto")
_APPROVE_WORDS = ("approve", "support")
_REJECT_WORDS = ("reject", "oppose", "veto")
_ABSTAIN_WORDS = ("abstain",)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)
_FENCED_BLOCK_RE = re.compile(r"```[a-zA-Z]*\s*(.*?)\s*```", re.DOTALL)
_DECODER = json.JSONDecoder()
_FIELD_RE = r"^[ \t]*[*_#-]*[ \t]*{name}[ \t]*[*_]*[ \t]*[:=][ \t]*(.+)$"
_SECTION_NAMES = ("vote", "confidence", "reasoning", "pros", "cons")


@dataclass(frozen=True)
class ParsedVote:
    vote: VoteChoice
    confidence: int
    reasoning: str
    pros: tuple[str, ...]
    cons: tuple[str, ...]


def _mentions(text: str, words: tuple[str, ...]) -> bool:
    return any(re.search(rf"\b{w}", text) for w in words)


def _strip_fence(text: str) -> str:
    match = _FENCE_RE.match(text)
    return match.group(1) if match else text


def _decode_object(text: str) -> dict[str, Any]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidReasonerResponse(_SOURCE, f"Malformed JSON object: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidReasonerResponse(_SOURCE, "JSON payload is not an object")
    return payload


def _load_object(text: str) -> dict[str, Any] | None:
    """Return the JSON object carried by the text, None if it is prose.

    A fenced block or a body opening with '{' must hold a valid object.
    Otherwise the first decodable object anywhere in the text is used, so a
    payload after a one-line preamble is still found.
    """
    fenced = _FENCED_BLOCK_RE.search(text)
    if fenced and fenced.group(1).startswith("{"):
        return _decode_object(fenced.group(1))
    if text.startswith("{"):
        return _decode_object(text)
    for match in re.finditer(r"\{", text):
        try:
            payload, _ = _DECODER.raw_decode(text, match.start())
        except json.JSONDecodeError:
            continue
        return payload
    return None


def _truncate(text: str) -> str:
    text = text.strip()
    if len(text) > _MAX_TEXT_LEN:
        text = text[: _MAX_TEXT_LEN - 3].rstrip() + "..."
    return text


def parse_statement(text: str) -> str:
    """Extract a debate statement from raw reasoner output."""
    body = _strip_fence((text or "").strip())
    if not body:
        raise InvalidReasonerResponse(_SOURCE, "Empty response")

    payload = _load_object(body)
    if payload is not None:
        for key in ("statement", "analysis", "reasoning"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return _truncate(value)
        raise InvalidReasonerResponse(_SOURCE, "JSON object has no statement text")

    return _truncate(body)


def infer_position(statement: str, agent_type: AgentType) -> Position:
    """Infer a debate position from statement keywords.

    Risk agents read caution words before anything else; every agent then
    checks supportive words before opposing ones.
    """
    lower = statement.lower()
    if agent_type == AgentType.RISK and _mentions(lower, _RISK_CAUTION_WORDS):
        return Position.AGAINST
    if _mentions(lower, _FOR_WORDS):
        return Position.FOR
    if _mentions(lower, _AGAINST_WORDS):
        return Position.AGAINST
    return Position.CLARIFICATION


def classify_vote(text: str) -> VoteChoice:
    """Keyword-classify free text. Anything ambiguous counts as an abstention."""
    lower = text.lower()
    if _mentions(lower, _ABSTAIN_WORDS):
        return VoteChoice.ABSTAIN
    approve = _mentions(lower, _APPROVE_WORDS)
    reject = _mentions(lower, _REJECT_WORDS)
    if approve and not reject:
        return VoteChoice.APPROVE
    if reject and not approve:
        return VoteChoice.REJECT
    return VoteChoice.ABSTAIN


def _coerce_confidence(raw: Any) -> int:
    if raw is None:
        return DEFAULT_CONFIDENCE
    if isinstance(raw, bool):
        raise InvalidReasonerResponse(_SOURCE, f"Confidence is not numeric: {raw!r}")
    if isinstance(raw, (int, float)):
        value = float(raw)
        fractional = isinstance(raw, float)
    else:
        token = str(raw).strip().rstrip("%").strip()
        try:
            value = float(token)
        except ValueError as exc:
            raise InvalidReasonerResponse(_SOURCE, f"Confidence is not numeric: {raw!r}") from exc
        fractional = "." in token

    if fractional and 0 < value <= 1:
        value *= 100
    if not 0 <= value <= 100:
        raise InvalidReasonerResponse(_SOURCE, f"Confidence {value} outside [0, 100]")
    return round(value)


def _coerce_items(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = re.split(r"[;,]", raw)
    if not isinstance(raw, list):
        raise InvalidReasonerResponse(_SOURCE, f"Expected a list, got {type(raw).__name__}")
    items = [str(item).strip() for item in raw if str(item).strip()]
    return tuple(items[:_MAX_LIST_ITEMS])


def _explicit_choice(raw: Any) -> VoteChoice:
    token = re.sub(r"[^a-z]", "", str(raw).lower())
    try:
        return VoteChoice(token)
    except ValueError:
        return classify_vote(str(raw))


def _text_field(body: str, name: str) -> str | None:
    match = re.search(_FIELD_RE.format(name=name), body, re.IGNORECASE | re.MULTILINE)
    if not match:
        return None
    return match.group(1).strip().strip("*_").strip() or None


def _text_section(body: str, name: str) -> tuple[str, ...]:
    """Collect an inline list or the bullet lines under a 'Name:' header."""
    lines = body.splitlines()
    header = re.compile(_FIELD_RE.format(name=name).replace("(.+)$", "(.*)$"), re.IGNORECASE)
    other_header = re.compile(
        r"^\s*[*_#-]*\s*(" + "|".join(_SECTION_NAMES) + r")\s*[*_]*\s*[:=]", re.IGNORECASE
    )
    for i, line in enumerate(lines):
        match = header.match(line)
        if not match:
            continue
        inline = match.group(1).strip().strip("*_").strip()
        if inline:
            return _coerce_items(inline)
        items: list[str] = []
        for follower in lines[i + 1:]:
            if not follower.strip() or other_header.match(follower):
                break
            items.append(re.sub(r"^\s*(?:[-*•]|\d+[.)])\s*", "", follower))
        return _coerce_items(items)
    return ()


def parse_vote(text: str) -> ParsedVote:
    """Extract a vote from a JSON object or a 'Field: value' text response."""
    body = _strip_fence((text or "").strip())
    if not body:
        raise InvalidReasonerResponse(_SOURCE, "Empty response")

    payload = _load_object(body)
    if payload is not None:
        reasoning = payload.get("reasoning") or payload.get("analysis")
        if not isinstance(reasoning, str) or not reasoning.strip():
            raise InvalidReasonerResponse(_SOURCE, "JSON vote has no reasoning")
        choice = (
            _explicit_choice(payload["vote"]) if payload.get("vote") is not None
            else classify_vote(reasoning)
        )
        return ParsedVote(
            vote=choice,
            confidence=_coerce_confidence(payload.get("confidence")),
            reasoning=_truncate(reasoning),
            pros=_coerce_items(payload.get("pros")),
            cons=_coerce_items(payload.get("cons")),
        )

    reasoning = _text_field(body, "reasoning") or body
    vote_field = _text_field(body, "vote")
    choice = _explicit_choice(vote_field) if vote_field else classify_vote(reasoning)
    return ParsedVote(
        vote=choice,
        confidence=_coerce_confidence(_text_field(body, "confidence")),
        reasoning=_truncate(reasoning),
        pros=_text_section(body, "pros"),
        cons=_text_section(body, "cons"),
    )
