"""Multi-agent PR review orchestration.

A run produces review text (and optionally a summary), asks the approval
agent for a decision, routes all of it through the agent tool functions into
a fresh ActionBuffer, and finally drains the buffer with ActionExecutor.

Orchestration modes:
    sequential     review → decide
    collaborative  (review ‖ summary) → decide
    parallel       (security ‖ performance ‖ quality reviews) → decide
    agent_chat     agents take turns chosen by a SelectionStrategy until the
                   approver has spoken or max_turns is reached
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable

from rich.console import Console
from rich.markup import escape

from prcrew_core.actions.buffer import ActionBuffer
from prcrew_core.actions.executor import ActionExecutor, build_preview
from prcrew_core.actions.tools import ActionTools
from prcrew_core.agents.definitions import (
    APPROVAL_AGENT,
    APPROVAL_AGENT_NAME,
    REVIEW_AGENT,
    REVIEW_AGENT_NAME,
    SUMMARY_AGENT,
    SUMMARY_AGENT_NAME,
    Message,
)
from prcrew_core.agents.sequencer import create_strategy
from prcrew_core.analysis.extractor import analyze_review
from prcrew_core.analysis.synthesizer import CommentSynthesizer, fallback_body
from prcrew_core.config import ORCHESTRATION_MODES
from prcrew_core.decision import blocking_severities, describe_threshold, parse_decision, parse_threshold
from prcrew_core.models import ApprovalDecision, ApprovalState, Severity, WorkflowResult
from prcrew_core.prompts import build_approval_prompt, build_review_prompt, build_summary_prompt
from prcrew_core.providers.anthropic import AnthropicClient
from prcrew_core.providers.openai import OpenAIClient

console = Console()
logger = logging.getLogger(__name__)

REVIEW_FOCUSES = {
    "Security Review": "Focus specifically on security vulnerabilities, authentication issues, "
    "and data protection concerns.",
    "Performance Review": "Focus specifically on performance implications, scalability concerns, and resource usage.",
    "Code Quality Review": "Focus specifically on code quality, maintainability, and adherence to best practices.",
}


def get_llm_client(config: dict):
    model = config["model"]
    timeout = config.get("timeout", 120)
    if model == "anthropic":
        return AnthropicClient(api_key=config["anthropic_api_key"], timeout=timeout, model=config.get("model_name"))
    if model == "openai":
        return OpenAIClient(api_key=config["openai_api_key"], timeout=timeout, model=config.get("model_name"))
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")


def run_concurrently(tasks: list[Callable[[], str]]) -> list[str]:
    """Run independent tasks in threads, wait for all, then re-raise the first failure.

    Failures are reported in submission order, never by completion time, so a
    slow failing branch is not masked by a fast one.
    """
    with ThreadPoolExecutor(max_workers=len(tasks)) as pool:
        futures = [pool.submit(task) for task in tasks]
        errors = [f.exception() for f in futures]
    for error in errors:
        if error is not None:
            raise error
    return [f.result() for f in futures]


@dataclass
class Outcome:
    """Raw agent output for one run; ``decision`` is None when no approver ran."""

    review: str
    summary: str | None = None
    decision: ApprovalDecision | None = None


@dataclass
class PreparedRun:
    outcome: Outcome
    buffer: ActionBuffer


class Orchestrator:
    def __init__(self, llm, host, config: dict, synthesizer: CommentSynthesizer | None = None):
        self.llm = llm
        self.host = host
        self.config = config
        self.synthesizer = synthesizer or CommentSynthesizer(llm)
        self.language = config.get("language", "en")
        self.threshold = parse_threshold(config.get("approval_threshold"))
        self.review_agent = REVIEW_AGENT.with_system_prompt(config.get("system_prompt"))

    # ------------------------------------------------------------------ #
    # Single-agent steps                                                  #
    # ------------------------------------------------------------------ #

    def pr_context(self, owner: str, repo: str, pr_number: int) -> str:
        return self.host.get_pull_request_diff(
            owner,
            repo,
            pr_number,
            max_chars=self.config.get("max_chars_per_file", 20000),
            exclude=self.config.get("exclude", []),
        )

    def review(
        self, owner: str, repo: str, pr_number: int, focus: str | None = None, context: str | None = None
    ) -> str:
        context = context if context is not None else self.pr_context(owner, repo, pr_number)
        prompt = build_review_prompt(context, self.language, focus)
        return self.llm.complete(prompt, system=self.review_agent.system_prompt)

    def summarize(self, owner: str, repo: str, pr_number: int, context: str | None = None) -> str:
        context = context if context is not None else self.pr_context(owner, repo, pr_number)
        return self.llm.complete(build_summary_prompt(context, self.language), system=SUMMARY_AGENT.system_prompt)

    def decide(self, owner: str, repo: str, pr_number: int, review_text: str) -> ApprovalDecision:
        pr = self.host.get_pull_request(owner, repo, pr_number)
        prompt = build_approval_prompt(pr.title, pr.user.login, review_text, describe_threshold(self.threshold))
        reply = self.llm.complete(prompt, system=APPROVAL_AGENT.system_prompt)
        decision = parse_decision(reply)
        logger.info(
            "Approval decision for #%d: approve=%s (%s)", pr_number, decision.should_approve, decision.reasoning
        )
        return decision

    # ------------------------------------------------------------------ #
    # Workflows                                                           #
    # ------------------------------------------------------------------ #

    def _sequential(self, owner, repo, pr_number) -> Outcome:
        review = self.review(owner, repo, pr_number)
        return Outcome(review, None, self.decide(owner, repo, pr_number, review))

    def _collaborative(self, owner, repo, pr_number) -> Outcome:
        context = self.pr_context(owner, repo, pr_number)
        review, summary = run_concurrently(
            [
                lambda: self.review(owner, repo, pr_number, context=context),
                lambda: self.summarize(owner, repo, pr_number, context=context),
            ]
        )
        enhanced = f"{review}\n\n## Summary\n{summary}"
        return Outcome(review, summary, self.decide(owner, repo, pr_number, enhanced))

    def _parallel(self, owner, repo, pr_number) -> Outcome:
        context = self.pr_context(owner, repo, pr_number)
        reviews = run_concurrently(
            [
                (lambda focus=focus: self.review(owner, repo, pr_number, focus=focus, context=context))
                for focus in REVIEW_FOCUSES.values()
            ]
        )
        combined = "\n\n".join(reviews)
        labelled = "## Combined Code Review\n\n" + "\n\n".join(
            f"### {title}\n{text}" for title, text in zip(REVIEW_FOCUSES, reviews)
        )
        return Outcome(combined, None, self.decide(owner, repo, pr_number, labelled))

    def _agent_chat(self, owner, repo, pr_number) -> Outcome:
        strategy = create_strategy(self.config.get("selection_strategy", "approval_workflow"))
        max_turns = int(self.config.get("max_turns", 10))
        agents = [self.review_agent, SUMMARY_AGENT, APPROVAL_AGENT]
        context = self.pr_context(owner, repo, pr_number)
        history: list[Message] = []
        review: str | None = None
        summary: str | None = None
        decision: ApprovalDecision | None = None

        for turn in range(1, max_turns + 1):
            agent = strategy.select_next(agents, history)
            console.print(f"  [dim]Turn {turn}/{max_turns}: {agent.name}[/dim]")
            if agent.name == REVIEW_AGENT_NAME:
                review = self.review(owner, repo, pr_number, context=context)
                decision = None
                content = review
            elif agent.name == SUMMARY_AGENT_NAME:
                summary = self.summarize(owner, repo, pr_number, context=context)
                content = summary
            else:
                basis = review or "No code review is available yet."
                if summary:
                    basis = f"{basis}\n\n## Summary\n{summary}"
                decision = self.decide(owner, repo, pr_number, basis)
                verdict = "APPROVE" if decision.should_approve else "REJECT"
                content = f"DECISION: {verdict}\nREASONING: {decision.reasoning}"
            history.append(Message(author=agent.name, content=content))

            if agent.name == APPROVAL_AGENT_NAME and review is not None:
                break
        else:
            logger.warning("Agent chat for #%d stopped after %d turn(s) without a final decision", pr_number, max_turns)

        if review is None:
            review = ""
        if decision is None:
            decision = self.decide(owner, repo, pr_number, review) if review else ApprovalDecision()
        return Outcome(review, summary, decision)

    # ------------------------------------------------------------------ #
    # Buffering and posting                                               #
    # ------------------------------------------------------------------ #

    def fill_buffer(self, buffer: ActionBuffer, outcome: Outcome) -> ActionBuffer:
        """Route a workflow outcome into ``buffer`` through the agent tool functions."""
        tools = ActionTools(buffer)
        analysis = analyze_review(outcome.review)

        located = [i for i in analysis.issues if i.is_located and i.severity is not Severity.POSITIVE]
        for issue, draft in zip(located, self.synthesizer.synthesize_all(located, self.language)):
            # The fallback body already carries the suggestion text.
            suggestion = None if draft.body == fallback_body(issue) else (issue.suggestion or None)
            reply = tools.dispatch(
                "post_line_comment",
                {
                    "file_path": draft.file_path,
                    "line": draft.anchor_line,
                    "comment": draft.body,
                    "suggestion": suggestion,
                    "start_line": draft.start_line if draft.position is None else None,
                },
            )
            if reply.startswith("Error:"):
                logger.warning("Dropped comment for %s: %s", issue.title, reply)

        if analysis.issues:
            unlocated = [i for i in analysis.issues if not i.is_located and i.severity is not Severity.POSITIVE]
            body = analysis.summary
            if unlocated:
                body += "\n\n" + "\n".join(f"- **{i.severity.value}** {i.title}: {i.description}" for i in unlocated)
            tools.dispatch("add_review_comment", {"comment": body})

        if outcome.summary:
            tools.dispatch("add_summary", {"summary": outcome.summary})

        decision = outcome.decision
        if decision is None:
            return buffer
        blocking = blocking_severities(self.threshold)
        blockers = [i for i in analysis.issues if i.is_located and i.severity in blocking]
        if decision.should_approve and not blockers:
            if self.config.get("auto_approve", False):
                tools.dispatch("approve_pull_request", {"comment": decision.comment})
            else:
                tools.dispatch("set_general_comment", {"comment": f"**Approval recommended.** {decision.reasoning}"})
        elif decision.should_approve:
            listed = ", ".join(f"{i.title} ({i.severity.value})" for i in blockers)
            reason = f"Blocked by the {self.threshold.value} threshold: {listed}"
            tools.dispatch("request_changes", {"comment": reason})
        else:
            reason = decision.reasoning or f"Issues at or above the {self.threshold.value} threshold were found."
            tools.dispatch("request_changes", {"comment": reason})
        return buffer

    def prepare(self, owner: str, repo: str, pr_number: int, mode: str | None = None) -> PreparedRun:
        """Run the agents for ``mode`` and queue their actions without posting anything."""
        mode = mode or self.config.get("orchestration_mode", "sequential")
        workflows = {
            "sequential": self._sequential,
            "collaborative": self._collaborative,
            "parallel": self._parallel,
            "agent_chat": self._agent_chat,
        }
        if mode not in workflows:
            raise ValueError(f"Unknown orchestration mode: {mode!r}. Choose one of: {', '.join(ORCHESTRATION_MODES)}.")

        console.print(f"[cyan]Running {mode} review of {owner}/{repo}#{pr_number}...[/cyan]")
        outcome = workflows[mode](owner, repo, pr_number)
        return PreparedRun(outcome=outcome, buffer=self.fill_buffer(ActionBuffer(), outcome))

    def prepare_summary(self, owner: str, repo: str, pr_number: int) -> PreparedRun:
        console.print(f"[cyan]Summarizing {owner}/{repo}#{pr_number}...[/cyan]")
        outcome = Outcome(review="", summary=self.summarize(owner, repo, pr_number))
        return PreparedRun(outcome=outcome, buffer=self.fill_buffer(ActionBuffer(), outcome))

    def post(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        prepared: PreparedRun,
        cancel: threading.Event | None = None,
    ) -> WorkflowResult:
        result = ActionExecutor(self.host, owner, repo, pr_number).execute(prepared.buffer, cancel=cancel)
        color = "green" if result.success else "red"
        console.print(f"[{color}]{escape(result.message)}[/{color}]")
        decision = prepared.outcome.decision or ApprovalDecision()
        return WorkflowResult(
            approved=result.approved,
            review=prepared.outcome.review,
            reasoning=decision.reasoning,
            comment=decision.comment,
            approval_url=result.approval_url,
            action_result=result,
        )

    def run(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        mode: str | None = None,
        post: bool = True,
        cancel: threading.Event | None = None,
    ) -> WorkflowResult:
        prepared = self.prepare(owner, repo, pr_number, mode)
        if post:
            return self.post(owner, repo, pr_number, prepared, cancel=cancel)

        console.print(build_preview(prepared.buffer, pr_number), markup=False)
        decision = prepared.outcome.decision or ApprovalDecision()
        return WorkflowResult(
            approved=prepared.buffer.approval_state is ApprovalState.APPROVED,
            review=prepared.outcome.review,
            reasoning=decision.reasoning,
            comment=decision.comment,
        )
