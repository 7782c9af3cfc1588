from __future__ import annotations

from dataclasses import dataclass, replace

from prcrew_core.prompts import APPROVAL_SYSTEM_PROMPT, REVIEW_SYSTEM_PROMPT, SUMMARY_SYSTEM_PROMPT

REVIEW_AGENT_NAME = "ReviewAgent"
SUMMARY_AGENT_NAME = "SummaryAgent"
APPROVAL_AGENT_NAME = "ApprovalAgent"


@dataclass(frozen=True)
class AgentDefinition:
    name: str
    role: str
    system_prompt: str
    description: str = ""

    def with_system_prompt(self, system_prompt: str | None) -> AgentDefinition:
        return replace(self, system_prompt=system_prompt) if system_prompt else self


@dataclass(frozen=True)
class Message:
    """One turn of a multi-agent conversation."""

    author: str
    content: str


REVIEW_AGENT = AgentDefinition(
    name=REVIEW_AGENT_NAME,
    role="reviewer",
    system_prompt=REVIEW_SYSTEM_PROMPT,
    description="Finds problems in the change and reports them as severity-tagged sections.",
)

SUMMARY_AGENT = AgentDefinition(
    name=SUMMARY_AGENT_NAME,
    role="summarizer",
    system_prompt=SUMMARY_SYSTEM_PROMPT,
    description="Explains what the pull request does.",
)

APPROVAL_AGENT = AgentDefinition(
    name=APPROVAL_AGENT_NAME,
    role="approver",
    system_prompt=APPROVAL_SYSTEM_PROMPT,
    description="Decides whether the pull request can be approved.",
)

DEFAULT_AGENTS = (REVIEW_AGENT, SUMMARY_AGENT, APPROVAL_AGENT)
