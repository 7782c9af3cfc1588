"""Per-run accumulator for the actions an agent wants to take on a PR.

Agents call tool functions many times during a turn sequence; each call only
records an action here. ActionExecutor posts everything in one pass at the
end, so a run can be previewed, cleared, or applied as a whole.

Mutators accept whatever they are given. Argument validation belongs to the
tool-function layer (prcrew_core.actions.tools).
"""

from __future__ import annotations

from prcrew_core.models import ApprovalState, BufferState, LineComment


class ActionBuffer:
    def __init__(self):
        self._line_comments: list[LineComment] = []
        self._review_comments: list[str] = []
        self._summaries: list[str] = []
        self._general_comment: str | None = None
        self._approval_state = ApprovalState.NONE
        self._approval_comment: str | None = None

    # ------------------------------------------------------------------ #
    # Mutators                                                            #
    # ------------------------------------------------------------------ #

    def add_line_comment(
        self,
        file_path: str,
        line: int,
        body: str,
        suggestion: str | None = None,
        start_line: int | None = None,
    ) -> None:
        self._line_comments.append(
            LineComment(file_path=file_path, line=line, body=body, suggestion=suggestion, start_line=start_line)
        )

    def add_review_comment(self, body: str) -> None:
        self._review_comments.append(body)

    def add_summary(self, summary: str) -> None:
        self._summaries.append(summary)

    def set_general_comment(self, comment: str) -> None:
        self._general_comment = comment

    def mark_for_approval(self, comment: str | None = None) -> None:
        self._approval_state = ApprovalState.APPROVED
        self._approval_comment = comment

    def mark_for_changes_requested(self, comment: str | None = None) -> None:
        self._approval_state = ApprovalState.CHANGES_REQUESTED
        self._approval_comment = comment

    def clear(self) -> None:
        self._line_comments = []
        self._review_comments = []
        self._summaries = []
        self._general_comment = None
        self._approval_state = ApprovalState.NONE
        self._approval_comment = None

    # ------------------------------------------------------------------ #
    # Read access                                                         #
    # ------------------------------------------------------------------ #

    def get_state(self) -> BufferState:
        return BufferState(
            line_comment_count=len(self._line_comments),
            review_comment_count=len(self._review_comments),
            summary_count=len(self._summaries),
            has_general_comment=bool(self._general_comment),
            approval_state=self._approval_state,
        )

    @property
    def is_empty(self) -> bool:
        return self.get_state().total_actions == 0

    @property
    def line_comments(self) -> tuple[LineComment, ...]:
        return tuple(self._line_comments)

    @property
    def review_comments(self) -> tuple[str, ...]:
        return tuple(self._review_comments)

    @property
    def summaries(self) -> tuple[str, ...]:
        return tuple(self._summaries)

    @property
    def general_comment(self) -> str | None:
        return self._general_comment

    @property
    def approval_state(self) -> ApprovalState:
        return self._approval_state

    @property
    def approval_comment(self) -> str | None:
        return self._approval_comment
