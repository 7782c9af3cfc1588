"""Strategies that pick which agent speaks next in a multi-agent review.

Every strategy implements ``select_next(agents, history) -> agent``. Agents
are anything with a ``name``; history is a sequence of ``Message``. Selection
does no I/O and depends only on its inputs and the strategy's own counters.

None of the strategies ever halts: the surrounding loop bounds the
conversation with a turn counter.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Protocol, Sequence

from prcrew_core.agents.definitions import (
    APPROVAL_AGENT_NAME,
    REVIEW_AGENT_NAME,
    SUMMARY_AGENT_NAME,
    Message,
)

logger = logging.getLogger(__name__)


class NamedAgent(Protocol):
    name: str


# Which agent follows a given author in the review → summary → approval cycle.
_NEXT_AUTHOR = {
    REVIEW_AGENT_NAME: SUMMARY_AGENT_NAME,
    SUMMARY_AGENT_NAME: APPROVAL_AGENT_NAME,
    APPROVAL_AGENT_NAME: REVIEW_AGENT_NAME,
}


def _find(agents: Sequence[NamedAgent], name: str) -> NamedAgent | None:
    return next((a for a in agents if a.name == name), None)


def _named_or_first(agents: Sequence[NamedAgent], name: str) -> NamedAgent:
    return _find(agents, name) or agents[0]


class SelectionStrategy(ABC):
    name: str = ""

    def select_next(self, agents: Sequence[NamedAgent], history: Sequence[Message]) -> NamedAgent:
        if not agents:
            raise ValueError("No agents available for selection.")
        agent = self._select(agents, history)
        logger.debug("%s selected %s after %d message(s)", self.__class__.__name__, agent.name, len(history))
        return agent

    @abstractmethod
    def _select(self, agents: Sequence[NamedAgent], history: Sequence[Message]) -> NamedAgent:
        """Pick the next agent; ``agents`` is guaranteed non-empty."""


class SequentialStrategy(SelectionStrategy):
    """Cycle through agents in list order."""

    name = "sequential"

    def __init__(self):
        self._index = 0

    def _select(self, agents, history):
        agent = agents[self._index % len(agents)]
        self._index = (self._index + 1) % len(agents)
        return agent


class WorkflowStage(str, Enum):
    REVIEW_TURN = "ReviewTurn"
    SUMMARY_TURN = "SummaryTurn"
    APPROVAL_TURN = "ApprovalTurn"
    COMPLETE = "Complete"


_STAGE_AGENT = {
    WorkflowStage.REVIEW_TURN: REVIEW_AGENT_NAME,
    WorkflowStage.SUMMARY_TURN: SUMMARY_AGENT_NAME,
    WorkflowStage.APPROVAL_TURN: APPROVAL_AGENT_NAME,
}

WORKFLOW_TRANSITIONS = {
    WorkflowStage.REVIEW_TURN: WorkflowStage.SUMMARY_TURN,
    WorkflowStage.SUMMARY_TURN: WorkflowStage.APPROVAL_TURN,
    WorkflowStage.APPROVAL_TURN: WorkflowStage.COMPLETE,
    WorkflowStage.COMPLETE: WorkflowStage.REVIEW_TURN,
}


class WorkflowStrategy(SelectionStrategy):
    """Fixed review → summary → approval table.

    COMPLETE is transient: reaching it immediately cycles back to REVIEW_TURN,
    so ``stage`` is never observed as COMPLETE between calls.
    """

    name = "approval_workflow"

    def __init__(self):
        self.stage = WorkflowStage.REVIEW_TURN

    def _select(self, agents, history):
        agent = _find(agents, _STAGE_AGENT[self.stage])
        if agent is None:
            logger.debug("No agent for stage %s; using %s", self.stage.value, agents[0].name)
            agent = agents[0]

        self.stage = WORKFLOW_TRANSITIONS[self.stage]
        if self.stage is WorkflowStage.COMPLETE:
            self.stage = WORKFLOW_TRANSITIONS[self.stage]
        return agent


class ConditionalStrategy(SelectionStrategy):
    """Follow whoever spoke last: review → summary → approval → review."""

    name = "conditional"

    def _select(self, agents, history):
        if not history:
            return _named_or_first(agents, REVIEW_AGENT_NAME)
        next_name = _NEXT_AUTHOR.get(history[-1].author)
        if next_name is None:
            return agents[0]
        return _named_or_first(agents, next_name)


class RoundRobinStrategy(SelectionStrategy):
    """Pick the least-used agent; ties go to the earliest in the list."""

    name = "round_robin"

    def __init__(self):
        self._usage: dict[str, int] = {}

    def _select(self, agents, history):
        agent = min(agents, key=lambda a: self._usage.get(a.name, 0))
        self._usage[agent.name] = self._usage.get(agent.name, 0) + 1
        return agent


class ContentBasedStrategy(SelectionStrategy):
    """Route on markers in the last message.

    A heuristic, not a guarantee: unusual or adversarial model output can
    mis-route. Use WorkflowStrategy when a deterministic order matters.

    - ``DECISION:``                 the approver has spoken; restart with the reviewer
    - ``[CRITICAL]`` / ``[MAJOR]``  serious findings go straight to the approver
    - ``## Summary``                a summary is ready; hand to the approver
    - otherwise                     next agent after the last author
    """

    name = "content_based"

    def _select(self, agents, history):
        if not history:
            return _named_or_first(agents, REVIEW_AGENT_NAME)

        last = history[-1]
        content = last.content or ""
        if "DECISION:" in content.upper():
            return _named_or_first(agents, REVIEW_AGENT_NAME)
        if "[CRITICAL]" in content or "[MAJOR]" in content:
            return _named_or_first(agents, APPROVAL_AGENT_NAME)
        if "## Summary" in content:
            return _named_or_first(agents, APPROVAL_AGENT_NAME)
        return _named_or_first(agents, _NEXT_AUTHOR.get(last.author, REVIEW_AGENT_NAME))


STRATEGIES: dict[str, type[SelectionStrategy]] = {
    cls.name: cls
    for cls in (SequentialStrategy, WorkflowStrategy, ConditionalStrategy, RoundRobinStrategy, ContentBasedStrategy)
}


def create_strategy(name: str) -> SelectionStrategy:
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"Unknown selection strategy: {name!r}. Choose one of: {', '.join(sorted(STRATEGIES))}.")
