"""Tool functions bound to one ActionBuffer.

Orchestrator.fill_buffer and the ``comment`` CLI command queue every action
by name through ``dispatch()``. ``schemas()`` returns the same tools as
Anthropic-style tool definitions for callers that hand them to a model.
Bad arguments come back as an ``Error:`` string instead of an exception.
Nothing here talks to GitHub.
"""

from __future__ import annotations

import logging
from typing import Callable

from prcrew_core.actions.buffer import ActionBuffer

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 50

TOOL_SCHEMAS: list[dict] = [
    {
        "name": "post_line_comment",
        "description": "Queue an inline comment on a specific line of a file in the pull request.",
        "input_schema": {
            "type": "object",
            "properties": {
                "file_path": {"type": "string", "description": "Path of the file relative to the repo root"},
                "line": {"type": "integer", "description": "Line number in the new version of the file"},
                "comment": {"type": "string", "description": "The comment body"},
                "suggestion": {"type": "string", "description": "Optional replacement code for the line"},
                "start_line": {
                    "type": "integer",
                    "description": "Optional first line of a multi-line comment that ends at line",
                },
            },
            "required": ["file_path", "line", "comment"],
        },
    },
    {
        "name": "add_review_comment",
        "description": "Queue a review-level comment that is not attached to a line.",
        "input_schema": {
            "type": "object",
            "properties": {"comment": {"type": "string"}},
            "required": ["comment"],
        },
    },
    {
        "name": "add_summary",
        "description": "Queue a summary of the pull request. All summaries are posted together.",
        "input_schema": {
            "type": "object",
            "properties": {"summary": {"type": "string"}},
            "required": ["summary"],
        },
    },
    {
        "name": "set_general_comment",
        "description": "Set the general PR comment. Calling it again replaces the previous one.",
        "input_schema": {
            "type": "object",
            "properties": {"comment": {"type": "string"}},
            "required": ["comment"],
        },
    },
    {
        "name": "approve_pull_request",
        "description": "Mark the pull request for approval. Replaces any earlier request_changes.",
        "input_schema": {
            "type": "object",
            "properties": {"comment": {"type": "string", "description": "Optional approval comment"}},
        },
    },
    {
        "name": "request_changes",
        "description": "Mark the pull request as needing changes. Replaces any earlier approval.",
        "input_schema": {
            "type": "object",
            "properties": {"comment": {"type": "string", "description": "What must change before merging"}},
        },
    },
    {
        "name": "get_buffer_state",
        "description": "Report how many actions are queued.",
        "input_schema": {"type": "object", "properties": {}},
    },
    {
        "name": "clear_buffer",
        "description": "Discard every queued action.",
        "input_schema": {"type": "object", "properties": {}},
    },
    {
        "name": "ready_to_commit",
        "description": "Signal that the queued actions are final and can be posted.",
        "input_schema": {"type": "object", "properties": {}},
    },
]


def _preview(text: str) -> str:
    return text if len(text) <= _PREVIEW_CHARS else text[:_PREVIEW_CHARS] + "..."


class ActionTools:
    def __init__(self, buffer: ActionBuffer):
        self.buffer = buffer
        self._handlers: dict[str, Callable[..., str]] = {
            "post_line_comment": self.post_line_comment,
            "add_review_comment": self.add_review_comment,
            "add_summary": self.add_summary,
            "set_general_comment": self.set_general_comment,
            "approve_pull_request": self.approve_pull_request,
            "request_changes": self.request_changes,
            "get_buffer_state": self.get_buffer_state,
            "clear_buffer": self.clear_buffer,
            "ready_to_commit": self.ready_to_commit,
        }

    @staticmethod
    def schemas() -> list[dict]:
        return [dict(schema) for schema in TOOL_SCHEMAS]

    def dispatch(self, name: str, arguments: dict | None = None) -> str:
        handler = self._handlers.get(name)
        if handler is None:
            return f"Error: unknown tool {name!r}."
        try:
            return handler(**(arguments or {}))
        except (TypeError, AttributeError) as e:
            logger.warning("Tool %s called with bad arguments %r: %s", name, arguments, e)
            return f"Error: invalid arguments for {name}: {e}"

    # ------------------------------------------------------------------ #
    # Tools                                                               #
    # ------------------------------------------------------------------ #

    def post_line_comment(
        self,
        file_path: str,
        line: int,
        comment: str,
        suggestion: str | None = None,
        start_line: int | None = None,
    ) -> str:
        if not file_path or not str(file_path).strip():
            return "Error: file_path must not be empty."
        try:
            line = int(line)
        except (TypeError, ValueError):
            return f"Error: line must be an integer, got {line!r}."
        if line < 1:
            return f"Error: line must be a positive integer, got {line}."
        if start_line is not None:
            try:
                start_line = int(start_line)
            except (TypeError, ValueError):
                return f"Error: start_line must be an integer, got {start_line!r}."
            if not 1 <= start_line <= line:
                return f"Error: start_line must be between 1 and {line}, got {start_line}."
            if start_line == line:
                start_line = None
        if not comment or not comment.strip():
            return "Error: comment must not be empty."

        self.buffer.add_line_comment(file_path, line, comment, suggestion or None, start_line)
        location = f"{file_path}:{start_line}-{line}" if start_line else f"{file_path}:{line}"
        suffix = f" (suggestion: {suggestion})" if suggestion else ""
        return f"Queued line comment: {location} - {comment}{suffix}"

    def add_review_comment(self, comment: str) -> str:
        if not comment or not comment.strip():
            return "Error: comment must not be empty."
        self.buffer.add_review_comment(comment)
        return f"Queued review comment: {_preview(comment)}"

    def add_summary(self, summary: str) -> str:
        if not summary or not summary.strip():
            return "Error: summary must not be empty."
        self.buffer.add_summary(summary)
        return f"Queued summary: {_preview(summary)}"

    def set_general_comment(self, comment: str) -> str:
        if not comment or not comment.strip():
            return "Error: comment must not be empty."
        self.buffer.set_general_comment(comment)
        return f"General comment set: {_preview(comment)}"

    def approve_pull_request(self, comment: str | None = None) -> str:
        self.buffer.mark_for_approval(comment or None)
        return "Marked for approval" + (f" (comment: {comment})" if comment else "")

    def request_changes(self, comment: str | None = None) -> str:
        self.buffer.mark_for_changes_requested(comment or None)
        return "Marked as changes requested" + (f" (comment: {comment})" if comment else "")

    def get_buffer_state(self) -> str:
        state = self.buffer.get_state()
        return (
            "Current buffer state:\n"
            f"- line comments: {state.line_comment_count}\n"
            f"- review comments: {state.review_comment_count}\n"
            f"- summaries: {state.summary_count}\n"
            f"- general comment: {'yes' if state.has_general_comment else 'no'}\n"
            f"- approval state: {state.approval_state.value}"
        )

    def clear_buffer(self) -> str:
        self.buffer.clear()
        return "Buffer cleared."

    def ready_to_commit(self) -> str:
        state = self.buffer.get_state()
        if state.total_actions == 0:
            return "No actions to commit."
        return f"{state.total_actions} action(s) ready to commit.\n" + self.get_buffer_state()
