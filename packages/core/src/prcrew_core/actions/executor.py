"""Drain an ActionBuffer against the hosting API.

Categories are posted in a fixed order:

    1. review-level comments   (one call each)
    2. line comments           (one batched review call)
    3. summaries               (one "PR Summary" issue comment)
    4. general comment         (one issue comment)
    5. approval state          (approve, or a "Changes Requested" review comment)

GitHub has no cross-call transactions, so a failed category never rolls back
or blocks the others: the error is recorded on the ActionResult and posting
continues. ``execute`` never raises; callers inspect the returned result.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Callable

from prcrew_core.models import ActionResult, ApprovalState

if TYPE_CHECKING:
    from prcrew_core.actions.buffer import ActionBuffer
    from prcrew_core.gh.pull_request import GitHubHost

logger = logging.getLogger(__name__)

SUMMARY_HEADING = "## PR Summary"
CHANGES_REQUESTED_HEADING = "## Changes Requested"
DEFAULT_CHANGES_REQUESTED = "Please address the issues mentioned in the review."


class ActionExecutor:
    def __init__(self, host: GitHubHost, owner: str, repo: str, pr_number: int):
        self.host = host
        self.owner = owner
        self.repo = repo
        self.pr_number = pr_number

    def execute(
        self,
        buffer: ActionBuffer,
        cancel: threading.Event | None = None,
        clear: bool = True,
    ) -> ActionResult:
        result = ActionResult(owner=self.owner, repo=self.repo, pr_number=self.pr_number)
        steps: list[tuple[str, Callable[[ActionBuffer, ActionResult], None]]] = [
            ("review comments", self._post_review_comments),
            ("line comments", self._post_line_comments),
            ("summaries", self._post_summaries),
            ("general comment", self._post_general_comment),
            ("approval", self._post_approval_state),
        ]

        pending = buffer.get_state().total_actions
        for name, step in steps:
            if cancel is not None and cancel.is_set():
                self._fail(result, f"Cancelled before posting {name}")
                break
            try:
                step(buffer, result)
            except Exception as e:
                logger.error("Failed to post %s to %s/%s#%d: %s", name, self.owner, self.repo, self.pr_number, e)
                self._fail(result, f"{name}: {e}")

        posted = result.total_actions_posted
        if result.success:
            if pending == 0:
                result.message = f"No actions to post for PR #{self.pr_number}"
            else:
                result.message = f"Successfully posted {posted} action(s) to PR #{self.pr_number}"
        else:
            result.message = (
                f"Posted {posted} of {pending} action(s) to PR #{self.pr_number}; last error: {result.error}"
            )
        logger.info(result.message)

        if clear:
            buffer.clear()
        return result

    @staticmethod
    def _fail(result: ActionResult, error: str) -> None:
        result.success = False
        result.error = error

    # ------------------------------------------------------------------ #
    # Categories                                                          #
    # ------------------------------------------------------------------ #

    def _post_review_comments(self, buffer: ActionBuffer, result: ActionResult) -> None:
        for body in buffer.review_comments:
            try:
                self.host.create_review_comment(self.owner, self.repo, self.pr_number, body)
            except Exception as e:
                logger.error("Failed to post review comment: %s", e)
                self._fail(result, f"review comment: {e}")
                continue
            result.review_comments_posted += 1

    def _post_line_comments(self, buffer: ActionBuffer, result: ActionResult) -> None:
        comments = list(buffer.line_comments)
        if not comments:
            return
        self.host.create_multiple_line_comments(self.owner, self.repo, self.pr_number, comments)
        result.line_comments_posted = len(comments)

    def _post_summaries(self, buffer: ActionBuffer, result: ActionResult) -> None:
        summaries = buffer.summaries
        if not summaries:
            return
        body = f"{SUMMARY_HEADING}\n\n" + "\n\n".join(summaries)
        comment = self.host.create_issue_comment(self.owner, self.repo, self.pr_number, body)
        result.summaries_posted = len(summaries)
        result.summary_comment_url = getattr(comment, "html_url", None)

    def _post_general_comment(self, buffer: ActionBuffer, result: ActionResult) -> None:
        if not buffer.general_comment:
            return
        comment = self.host.create_issue_comment(self.owner, self.repo, self.pr_number, buffer.general_comment)
        result.general_comment_posted = True
        result.general_comment_url = getattr(comment, "html_url", None)

    def _post_approval_state(self, buffer: ActionBuffer, result: ActionResult) -> None:
        state = buffer.approval_state
        if state is ApprovalState.APPROVED:
            review = self.host.approve_pull_request(self.owner, self.repo, self.pr_number, buffer.approval_comment)
            result.approved = True
            result.approval_state = ApprovalState.APPROVED
            result.approval_url = getattr(review, "html_url", None)
        elif state is ApprovalState.CHANGES_REQUESTED:
            # Posted as a labelled comment rather than a REQUEST_CHANGES review.
            body = f"{CHANGES_REQUESTED_HEADING}\n\n{buffer.approval_comment or DEFAULT_CHANGES_REQUESTED}"
            self.host.create_review_comment(self.owner, self.repo, self.pr_number, body)
            result.changes_requested = True
            result.approval_state = ApprovalState.CHANGES_REQUESTED


def build_preview(buffer: ActionBuffer, pr_number: int) -> str:
    """Markdown preview of what ``execute`` would post, for shadow runs and confirmation prompts."""
    lines = [f"## Actions queued for PR #{pr_number}", ""]

    if buffer.review_comments:
        lines.append(f"### Review comments ({len(buffer.review_comments)})")
        lines.extend(f"- {body[:100]}" for body in buffer.review_comments)
        lines.append("")

    if buffer.line_comments:
        lines.append(f"### Line comments ({len(buffer.line_comments)})")
        for c in buffer.line_comments:
            suggestion = f"\n  suggestion: {c.suggestion}" if c.suggestion else ""
            lines_ref = f"{c.start_line}-{c.line}" if c.is_range else str(c.line)
            lines.append(f"- {c.file_path}:{lines_ref}: {c.body}{suggestion}")
        lines.append("")

    if buffer.summaries:
        lines.append(f"### Summaries ({len(buffer.summaries)})")
        lines.extend(f"- {s[:100]}..." if len(s) > 100 else f"- {s}" for s in buffer.summaries)
        lines.append("")

    if buffer.general_comment:
        lines.append("### General comment")
        lines.append(buffer.general_comment[:200])
        lines.append("")

    if buffer.approval_state is ApprovalState.APPROVED:
        lines.append("### Approval")
        lines.append(f"yes - {buffer.approval_comment or 'no comment'}")
        lines.append("")
    elif buffer.approval_state is ApprovalState.CHANGES_REQUESTED:
        lines.append("### Changes requested")
        lines.append(f"yes - {buffer.approval_comment or 'no comment'}")
        lines.append("")

    lines.append(f"**Total: {buffer.get_state().total_actions} action(s)**")
    return "\n".join(lines)
