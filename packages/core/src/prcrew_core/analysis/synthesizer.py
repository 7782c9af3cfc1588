"""Turn extracted issues into postable review comments."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prcrew_core.models import DraftComment, Issue
from prcrew_core.prompts import build_comment_prompt

if TYPE_CHECKING:
    from prcrew_core.providers.base import BaseLLMClient

logger = logging.getLogger(__name__)

_SYSTEM = "You write short, constructive GitHub review comments in plain text."


def fallback_body(issue: Issue) -> str:
    return f"{issue.severity.value}: {issue.description}\n\n{issue.suggestion}"


class CommentSynthesizer:
    """Ask the LLM to phrase each issue as a review comment.

    Synthesis never fails from the caller's point of view: if the model call
    raises or returns nothing, the comment is built from the issue fields.
    Nothing here touches an ActionBuffer.
    """

    def __init__(self, llm: BaseLLMClient):
        self.llm = llm

    def synthesize(self, issue: Issue, language: str = "en") -> DraftComment:
        try:
            body = (self.llm.complete(build_comment_prompt(issue, language), system=_SYSTEM) or "").strip()
        except Exception as e:
            logger.warning("Comment synthesis failed for %r; using fallback: %s", issue.title, e)
            body = ""
        if not body:
            body = fallback_body(issue)

        if issue.end_line > issue.start_line:
            return DraftComment.over_range(issue.file_path, body, issue.start_line, issue.end_line)
        return DraftComment.at_line(issue.file_path, body, issue.start_line)

    def synthesize_all(self, issues: list[Issue], language: str = "en") -> list[DraftComment]:
        comments = [self.synthesize(issue, language) for issue in issues]
        logger.info("Generated %d comment(s) from %d issue(s)", len(comments), len(issues))
        return comments
