"""ParliamentEngine: the public operations bound to injected dependencies."""

import asyncio
import logging
import random

from config.config_loader import AppConfig, PromptsConfig
from parliament.debate import generate_debate_entry
from parliament.models import (
    AgentProfile,
    AgentType,
    DebateContext,
    DebateEntry,
    MetaSummary,
    Outcome,
    Vote,
)
from parliament.outcome import determine_outcome
from parliament.reasoners.base import NullReasoner, Reasoner
from parliament.registry import AgentRegistry
from parliament.synthesis import synthesize_meta_summary
from parliament.voting import generate_vote

logger = logging.getLogger(__name__)


class ParliamentEngine:
    """Stateless deliberation service.

    Every dependency is injected and fixed at construction: the agent
    registry, the prompt templates, the reasoner (NullReasoner when none is
    given) and the random source used by all fallback paths. Instances share
    nothing, so any number of them can run side by side.
    """

    def __init__(
        self,
        registry: AgentRegistry,
        prompts: PromptsConfig,
        reasoner: Reasoner | None = None,
        rng: random.Random | None = None,
        delegate_timeout_sec: float = 45.0,
        debate_window: int = 3,
    ) -> None:
        self._registry = registry
        self._prompts = prompts
        self._reasoner = reasoner if reasoner is not None else NullReasoner()
        self._rng = rng if rng is not None else random.Random()
        self._timeout_sec = delegate_timeout_sec
        self._window = debate_window
        logger.debug(
            "Engine ready: %d agents, reasoner=%s, timeout=%.1fs",
            len(registry.get_agent_profiles()),
            self._reasoner.name(),
            delegate_timeout_sec,
        )

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        reasoner: Reasoner | None = None,
        rng: random.Random | None = None,
    ) -> "ParliamentEngine":
        return cls(
            registry=AgentRegistry.from_config(config),
            prompts=config.prompts,
            reasoner=reasoner,
            rng=rng,
            delegate_timeout_sec=config.defaults.delegate_timeout_sec,
            debate_window=config.defaults.debate_window,
        )

    @property
    def reasoner(self) -> Reasoner:
        return self._reasoner

    def get_agent_profiles(self) -> list[AgentProfile]:
        return self._registry.get_agent_profiles()

    def get_data_sources(self, agent_type: AgentType | str) -> tuple[str, ...]:
        return self._registry.get_data_sources(agent_type)

    async def generate_debate_entry(
        self, agent: AgentProfile, context: DebateContext, rng: random.Random | None = None
    ) -> DebateEntry:
        return await generate_debate_entry(
            agent,
            context,
            reasoner=self._reasoner,
            prompts=self._prompts,
            data_sources=self._registry.get_data_sources(agent.agent_type),
            rng=rng if rng is not None else self._rng,
            timeout_sec=self._timeout_sec,
            window=self._window,
        )

    async def generate_vote(
        self, agent: AgentProfile, context: DebateContext, rng: random.Random | None = None
    ) -> Vote:
        return await generate_vote(
            agent,
            context,
            reasoner=self._reasoner,
            prompts=self._prompts,
            data_sources=self._registry.get_data_sources(agent.agent_type),
            rng=rng if rng is not None else self._rng,
            timeout_sec=self._timeout_sec,
        )

    def _agent_rngs(self, agents: list[AgentProfile]) -> list[random.Random]:
        """One child generator per agent, seeded in registry order before any call starts."""
        return [random.Random(self._rng.getrandbits(64)) for _ in agents]

    async def debate_round(self, context: DebateContext) -> list[DebateEntry]:
        """One statement per agent, generated concurrently over the same context.

        The context is not modified; appending the entries is the caller's job.
        """
        agents = self.get_agent_profiles()
        rngs = self._agent_rngs(agents)
        return list(
            await asyncio.gather(*(self.generate_debate_entry(a, context, r) for a, r in zip(agents, rngs)))
        )

    async def collect_votes(self, context: DebateContext) -> list[Vote]:
        """One vote per agent, generated concurrently over the same context."""
        agents = self.get_agent_profiles()
        rngs = self._agent_rngs(agents)
        return list(await asyncio.gather(*(self.generate_vote(a, context, r) for a, r in zip(agents, rngs))))

    def synthesize_meta_summary(self, votes: list[Vote], debates: list[DebateEntry]) -> MetaSummary:
        return synthesize_meta_summary(votes, debates)

    def determine_outcome(
        self,
        votes: list[Vote],
        quorum: int,
        required_majority: float,
        meta_summary: MetaSummary | None = None,
    ) -> Outcome:
        return determine_outcome(votes, quorum, required_majority, meta_summary)
