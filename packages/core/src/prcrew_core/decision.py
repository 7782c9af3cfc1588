"""Approval decisions: parsing the approver's reply and applying the threshold policy."""

from __future__ import annotations

from typing import Iterable

from prcrew_core.models import ApprovalDecision, ApprovalThreshold, Issue, Severity

_DECISION = "DECISION:"
_REASONING = "REASONING:"
_APPROVAL_COMMENT = "APPROVAL_COMMENT:"

_THRESHOLD_DESCRIPTIONS = {
    ApprovalThreshold.CRITICAL: "CRITICAL: No critical issues allowed",
    ApprovalThreshold.MAJOR: "MAJOR: No major or critical issues allowed",
    ApprovalThreshold.MINOR: "MINOR: No minor, major, or critical issues allowed",
    ApprovalThreshold.NONE: "NONE: Always approve",
}

_BLOCKING = {
    ApprovalThreshold.CRITICAL: frozenset({Severity.CRITICAL}),
    ApprovalThreshold.MAJOR: frozenset({Severity.CRITICAL, Severity.MAJOR}),
    ApprovalThreshold.MINOR: frozenset({Severity.CRITICAL, Severity.MAJOR, Severity.MINOR}),
    ApprovalThreshold.NONE: frozenset(),
}


def _value_after(line: str, label: str) -> str | None:
    if line[: len(label)].upper() == label:
        return line[len(label) :].strip()
    return None


def parse_decision(text: str) -> ApprovalDecision:
    """Read DECISION / REASONING / APPROVAL_COMMENT lines from an agent's reply.

    Anything other than an explicit ``DECISION: APPROVE`` is a rejection.
    ``APPROVAL_COMMENT: N/A`` means no comment. Later labels overwrite earlier ones.
    """
    should_approve = False
    reasoning = ""
    comment = None

    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line:
            continue
        value = _value_after(line, _DECISION)
        if value is not None:
            should_approve = value.upper() == "APPROVE"
            continue
        value = _value_after(line, _REASONING)
        if value is not None:
            reasoning = value
            continue
        value = _value_after(line, _APPROVAL_COMMENT)
        if value is not None:
            comment = None if value.upper() == "N/A" else value

    return ApprovalDecision(should_approve=should_approve, reasoning=reasoning, comment=comment)


def parse_threshold(value: str | ApprovalThreshold | None) -> ApprovalThreshold:
    if isinstance(value, ApprovalThreshold):
        return value
    try:
        return ApprovalThreshold((value or "").strip().lower())
    except ValueError:
        return ApprovalThreshold.MINOR


def describe_threshold(threshold: ApprovalThreshold) -> str:
    return _THRESHOLD_DESCRIPTIONS[parse_threshold(threshold)]


def blocking_severities(threshold: ApprovalThreshold) -> frozenset[Severity]:
    return _BLOCKING[parse_threshold(threshold)]


def issues_block_approval(issues: Iterable[Issue], threshold: ApprovalThreshold) -> bool:
    blocking = blocking_severities(threshold)
    return any(issue.severity in blocking for issue in issues)
