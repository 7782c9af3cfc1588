"""PyGithub-backed hosting API used by the review pipeline.

Every write returns the PyGithub object GitHub created (all of them carry
``html_url``) and lets ``GithubException`` propagate; ActionExecutor decides
what a failed call means for the run.
"""

from __future__ import annotations

import logging
from typing import Iterable

from github import Auth, Github

from prcrew_core.models import DraftComment, LineComment
from prcrew_core.utils.code import is_code_file, is_excluded

logger = logging.getLogger(__name__)

DEFAULT_APPROVAL_BODY = "Approved by prcrew"


def get_client(token: str, timeout: int = 120) -> Github:
    return Github(auth=Auth.Token(token), timeout=timeout)


def _review_comment_payload(comment: LineComment | DraftComment) -> dict:
    if isinstance(comment, LineComment):
        payload = {"path": comment.file_path, "line": comment.line, "side": "RIGHT", "body": comment.render()}
        is_range = comment.is_range
    else:
        payload = {"path": comment.file_path, "line": comment.anchor_line, "side": "RIGHT", "body": comment.body}
        is_range = comment.position is None and comment.end_line > comment.start_line
    if is_range:
        payload["start_line"] = comment.start_line
        payload["start_side"] = "RIGHT"
    return payload


class GitHubHost:
    """The hosting-API collaborator, keyed by (owner, repo, pr_number) like GitHub's REST paths."""

    def __init__(self, client: Github):
        self.client = client

    @classmethod
    def from_token(cls, token: str, timeout: int = 120) -> GitHubHost:
        return cls(get_client(token, timeout))

    def _pull(self, owner: str, repo: str, pr_number: int):
        return self.client.get_repo(f"{owner}/{repo}").get_pull(pr_number)

    # ------------------------------------------------------------------ #
    # Reads                                                               #
    # ------------------------------------------------------------------ #

    def get_pull_request(self, owner: str, repo: str, pr_number: int):
        return self._pull(owner, repo, pr_number)

    def get_pull_request_files(self, owner: str, repo: str, pr_number: int) -> list:
        return sorted(self._pull(owner, repo, pr_number).get_files(), key=lambda f: f.filename)

    def get_pull_request_diff(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        max_chars: int = 20000,
        exclude: Iterable[str] = (),
    ) -> str:
        """Render PR metadata and per-file patches as one markdown document for a prompt."""
        pr = self._pull(owner, repo, pr_number)
        patterns = list(exclude)
        lines = [
            f"# Pull Request #{pr_number}: {pr.title}",
            f"Author: {pr.user.login}",
            f"Description: {pr.body or ''}",
            "",
        ]
        for file in sorted(pr.get_files(), key=lambda f: f.filename):
            if is_excluded(file.filename, patterns) or not is_code_file(file.filename):
                logger.debug("Skipping %s in diff", file.filename)
                continue
            lines.append(f"## {file.filename}")
            lines.append(f"Status: {file.status}")
            lines.append(f"Changes: +{file.additions} -{file.deletions}")
            lines.append("")
            patch = file.patch or ""
            if patch:
                if len(patch) > max_chars:
                    patch = patch[:max_chars] + "\n... [diff truncated]"
                lines.extend(["```diff", patch, "```"])
            lines.append("")
        return "\n".join(lines)

    # ------------------------------------------------------------------ #
    # Writes                                                              #
    # ------------------------------------------------------------------ #

    def create_review_comment(self, owner: str, repo: str, pr_number: int, body: str):
        return self._pull(owner, repo, pr_number).create_review(body=body, event="COMMENT")

    def create_multiple_line_comments(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        comments: list[LineComment | DraftComment],
        body: str = "",
    ):
        """Post every line comment in a single COMMENT review."""
        api_comments = [_review_comment_payload(c) for c in comments]
        return self._pull(owner, repo, pr_number).create_review(body=body, event="COMMENT", comments=api_comments)

    def create_issue_comment(self, owner: str, repo: str, pr_number: int, body: str):
        return self._pull(owner, repo, pr_number).create_issue_comment(body)

    def approve_pull_request(self, owner: str, repo: str, pr_number: int, comment: str | None = None):
        return self._pull(owner, repo, pr_number).create_review(
            body=comment or DEFAULT_APPROVAL_BODY,
            event="APPROVE",
        )
