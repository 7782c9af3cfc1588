"""Records that cross the core boundary.

Everything here is a plain dataclass so callers can log or persist it via
``to_dict()`` without knowing about the pipeline that produced it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

# Path recorded for an issue whose section names no file. Callers must treat
# it as "unlocated" and never post a line comment against it.
UNLOCATED_PATH = "src/File.cs"


class Severity(str, Enum):
    CRITICAL = "Critical"
    MAJOR = "Major"
    MINOR = "Minor"
    POSITIVE = "Positive"


class ApprovalState(str, Enum):
    NONE = "None"
    APPROVED = "Approved"
    CHANGES_REQUESTED = "ChangesRequested"


class ApprovalThreshold(str, Enum):
    """Lowest severity that still blocks auto-approval."""

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"
    NONE = "none"


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


class _Serializable:
    def to_dict(self) -> dict:
        return _plain(asdict(self))


@dataclass(frozen=True)
class Issue(_Serializable):
    """One finding extracted from review text."""

    title: str
    severity: Severity
    file_path: str
    start_line: int
    end_line: int
    description: str
    suggestion: str = ""

    @property
    def is_located(self) -> bool:
        return self.file_path != UNLOCATED_PATH


@dataclass(frozen=True)
class DraftComment(_Serializable):
    """A comment payload addressed either to one line or to a line range."""

    file_path: str
    body: str
    position: int | None = None
    start_line: int | None = None
    end_line: int | None = None

    def __post_init__(self):
        has_position = self.position is not None
        has_range = self.start_line is not None and self.end_line is not None
        if has_position == has_range:
            raise ValueError(
                f"DraftComment for {self.file_path!r} needs exactly one of position or (start_line, end_line)."
            )

    @classmethod
    def at_line(cls, file_path: str, body: str, line: int) -> DraftComment:
        return cls(file_path=file_path, body=body, position=line)

    @classmethod
    def over_range(cls, file_path: str, body: str, start_line: int, end_line: int) -> DraftComment:
        return cls(file_path=file_path, body=body, start_line=start_line, end_line=end_line)

    @property
    def anchor_line(self) -> int:
        """Line GitHub should attach the comment to (the last line of a range)."""
        return self.position if self.position is not None else self.end_line


@dataclass(frozen=True)
class LineComment(_Serializable):
    file_path: str
    line: int
    body: str
    suggestion: str | None = None
    start_line: int | None = None

    @property
    def is_range(self) -> bool:
        return self.start_line is not None and self.start_line < self.line

    def render(self) -> str:
        if self.suggestion:
            return f"{self.body}\n```suggestion\n{self.suggestion}\n```"
        return self.body


@dataclass(frozen=True)
class BufferState(_Serializable):
    """Counts-only snapshot of an ActionBuffer."""

    line_comment_count: int = 0
    review_comment_count: int = 0
    summary_count: int = 0
    has_general_comment: bool = False
    approval_state: ApprovalState = ApprovalState.NONE

    @property
    def total_actions(self) -> int:
        return (
            self.line_comment_count
            + self.review_comment_count
            + self.summary_count
            + (1 if self.has_general_comment else 0)
            + (0 if self.approval_state is ApprovalState.NONE else 1)
        )


@dataclass
class ActionResult(_Serializable):
    """Outcome of draining one buffer against the hosting API."""

    owner: str = ""
    repo: str = ""
    pr_number: int = 0
    success: bool = True
    review_comments_posted: int = 0
    line_comments_posted: int = 0
    summaries_posted: int = 0
    general_comment_posted: bool = False
    approved: bool = False
    changes_requested: bool = False
    approval_state: ApprovalState | None = None
    summary_comment_url: str | None = None
    general_comment_url: str | None = None
    approval_url: str | None = None
    error: str | None = None
    message: str = ""

    @property
    def total_actions_posted(self) -> int:
        return (
            self.review_comments_posted
            + self.line_comments_posted
            + self.summaries_posted
            + (1 if self.general_comment_posted else 0)
            + (1 if self.approved else 0)
            + (1 if self.changes_requested else 0)
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["total_actions_posted"] = self.total_actions_posted
        return data


@dataclass(frozen=True)
class ApprovalDecision(_Serializable):
    should_approve: bool = False
    reasoning: str = ""
    comment: str | None = None


@dataclass
class ReviewAnalysis(_Serializable):
    issues: list[Issue] = field(default_factory=list)
    summary: str = ""


@dataclass
class WorkflowResult(_Serializable):
    """What an orchestrated review-and-approve run produced."""

    approved: bool
    review: str
    reasoning: str = ""
    comment: str | None = None
    approval_url: str | None = None
    action_result: ActionResult | None = None
