"""Tests for next-speaker selection strategies."""

import pytest

from prcrew_core.agents.definitions import (
    APPROVAL_AGENT,
    APPROVAL_AGENT_NAME,
    DEFAULT_AGENTS,
    REVIEW_AGENT,
    REVIEW_AGENT_NAME,
    SUMMARY_AGENT,
    SUMMARY_AGENT_NAME,
    Message,
)
from prcrew_core.agents.sequencer import (
    STRATEGIES,
    ConditionalStrategy,
    ContentBasedStrategy,
    RoundRobinStrategy,
    SequentialStrategy,
    WorkflowStage,
    WorkflowStrategy,
    create_strategy,
)

AGENTS = list(DEFAULT_AGENTS)


def _names(strategy, turns, agents=AGENTS):
    history = []
    picked = []
    for _ in range(turns):
        agent = strategy.select_next(agents, history)
        picked.append(agent.name)
        history.append(Message(agent.name, "ok"))
    return picked


@pytest.mark.parametrize("name", sorted(STRATEGIES))
def test_empty_agent_list_raises(name):
    with pytest.raises(ValueError):
        create_strategy(name).select_next([], [])


def test_unknown_strategy_raises():
    with pytest.raises(ValueError, match="Unknown selection strategy"):
        create_strategy("random")


def test_create_strategy_returns_fresh_instances():
    assert create_strategy("approval_workflow") is not create_strategy("approval_workflow")


class TestSequentialStrategy:
    def test_cycles_in_list_order(self):
        assert _names(SequentialStrategy(), 4) == [
            REVIEW_AGENT_NAME,
            SUMMARY_AGENT_NAME,
            APPROVAL_AGENT_NAME,
            REVIEW_AGENT_NAME,
        ]


class TestWorkflowStrategy:
    def test_review_summary_approval_then_restart(self):
        assert _names(WorkflowStrategy(), 4) == [
            REVIEW_AGENT_NAME,
            SUMMARY_AGENT_NAME,
            APPROVAL_AGENT_NAME,
            REVIEW_AGENT_NAME,
        ]

    def test_order_ignores_list_order(self):
        agents = [APPROVAL_AGENT, SUMMARY_AGENT, REVIEW_AGENT]
        assert _names(WorkflowStrategy(), 3, agents) == [REVIEW_AGENT_NAME, SUMMARY_AGENT_NAME, APPROVAL_AGENT_NAME]

    def test_complete_stage_is_transient(self):
        strategy = WorkflowStrategy()
        _names(strategy, 3)
        assert strategy.stage is WorkflowStage.REVIEW_TURN

    def test_missing_agent_falls_back_to_first(self):
        agents = [REVIEW_AGENT, APPROVAL_AGENT]
        assert _names(WorkflowStrategy(), 3, agents) == [REVIEW_AGENT_NAME, REVIEW_AGENT_NAME, APPROVAL_AGENT_NAME]


class TestConditionalStrategy:
    def test_starts_with_reviewer(self):
        assert ConditionalStrategy().select_next(AGENTS, []).name == REVIEW_AGENT_NAME

    def test_follows_last_author(self):
        strategy = ConditionalStrategy()
        assert strategy.select_next(AGENTS, [Message(REVIEW_AGENT_NAME, "r")]).name == SUMMARY_AGENT_NAME
        assert strategy.select_next(AGENTS, [Message(SUMMARY_AGENT_NAME, "s")]).name == APPROVAL_AGENT_NAME
        assert strategy.select_next(AGENTS, [Message(APPROVAL_AGENT_NAME, "a")]).name == REVIEW_AGENT_NAME

    def test_unknown_author_falls_back_to_first(self):
        agents = [SUMMARY_AGENT, REVIEW_AGENT]
        assert ConditionalStrategy().select_next(agents, [Message("Human", "hi")]).name == SUMMARY_AGENT_NAME


class TestRoundRobinStrategy:
    def test_least_used_first_ties_by_list_order(self):
        assert _names(RoundRobinStrategy(), 5) == [
            REVIEW_AGENT_NAME,
            SUMMARY_AGENT_NAME,
            APPROVAL_AGENT_NAME,
            REVIEW_AGENT_NAME,
            SUMMARY_AGENT_NAME,
        ]

    def test_new_agent_catches_up(self):
        strategy = RoundRobinStrategy()
        strategy.select_next([REVIEW_AGENT], [])
        strategy.select_next([REVIEW_AGENT], [])
        assert strategy.select_next([REVIEW_AGENT, SUMMARY_AGENT], []).name == SUMMARY_AGENT_NAME


class TestContentBasedStrategy:
    def _next(self, author, content):
        return ContentBasedStrategy().select_next(AGENTS, [Message(author, content)]).name

    def test_starts_with_reviewer(self):
        assert ContentBasedStrategy().select_next(AGENTS, []).name == REVIEW_AGENT_NAME

    def test_decision_goes_back_to_reviewer(self):
        assert self._next(APPROVAL_AGENT_NAME, "decision: approve") == REVIEW_AGENT_NAME

    def test_serious_findings_go_to_approver(self):
        assert self._next(REVIEW_AGENT_NAME, "### [CRITICAL] SQL Injection") == APPROVAL_AGENT_NAME
        assert self._next(REVIEW_AGENT_NAME, "### [MAJOR] Leak") == APPROVAL_AGENT_NAME

    def test_summary_goes_to_approver(self):
        assert self._next(SUMMARY_AGENT_NAME, "## Summary\nAdds login.") == APPROVAL_AGENT_NAME

    def test_plain_review_goes_to_summarizer(self):
        assert self._next(REVIEW_AGENT_NAME, "### [MINOR] Naming") == SUMMARY_AGENT_NAME
