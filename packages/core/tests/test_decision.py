"""Tests for approval decision parsing and the severity threshold policy."""

import pytest

from prcrew_core.decision import (
    blocking_severities,
    describe_threshold,
    issues_block_approval,
    parse_decision,
    parse_threshold,
)
from prcrew_core.models import ApprovalThreshold, Issue, Severity


def _issue(severity):
    return Issue("t", severity, "a.py", 1, 1, "d")


class TestParseDecision:
    def test_approve_with_reasoning_and_comment(self):
        decision = parse_decision(
            "DECISION: APPROVE\nREASONING: Only minor issues.\nCONDITIONS: none\nAPPROVAL_COMMENT: Nice work!"
        )
        assert decision.should_approve is True
        assert decision.reasoning == "Only minor issues."
        assert decision.comment == "Nice work!"

    def test_reject(self):
        decision = parse_decision("DECISION: REJECT\nREASONING: SQL injection.")
        assert decision.should_approve is False
        assert decision.reasoning == "SQL injection."

    def test_labels_are_case_insensitive(self):
        decision = parse_decision("decision: approve\nreasoning: fine")
        assert decision.should_approve is True
        assert decision.reasoning == "fine"

    def test_surrounding_whitespace_and_prose(self):
        text = "Here is my verdict.\n\n   DECISION:   APPROVE  \n   REASONING: ok\n"
        decision = parse_decision(text)
        assert decision.should_approve is True
        assert decision.reasoning == "ok"

    def test_na_comment_is_none(self):
        assert parse_decision("DECISION: APPROVE\nAPPROVAL_COMMENT: N/A").comment is None
        assert parse_decision("DECISION: APPROVE\nAPPROVAL_COMMENT: n/a").comment is None

    def test_anything_but_approve_rejects(self):
        assert parse_decision("DECISION: APPROVE WITH CHANGES").should_approve is False
        assert parse_decision("DECISION: maybe").should_approve is False

    def test_missing_decision_rejects(self):
        decision = parse_decision("I think this is fine.")
        assert decision.should_approve is False
        assert decision.reasoning == ""
        assert decision.comment is None

    def test_empty_reply(self):
        assert parse_decision("").should_approve is False
        assert parse_decision(None).should_approve is False

    def test_later_label_overrides_earlier(self):
        assert parse_decision("DECISION: APPROVE\nDECISION: REJECT").should_approve is False


class TestThreshold:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("critical", ApprovalThreshold.CRITICAL),
            ("MAJOR", ApprovalThreshold.MAJOR),
            (" minor ", ApprovalThreshold.MINOR),
            ("none", ApprovalThreshold.NONE),
            ("bogus", ApprovalThreshold.MINOR),
            (None, ApprovalThreshold.MINOR),
            (ApprovalThreshold.MAJOR, ApprovalThreshold.MAJOR),
        ],
    )
    def test_parse_threshold(self, value, expected):
        assert parse_threshold(value) is expected

    def test_descriptions(self):
        assert describe_threshold(ApprovalThreshold.CRITICAL) == "CRITICAL: No critical issues allowed"
        assert describe_threshold(ApprovalThreshold.NONE) == "NONE: Always approve"

    def test_major_blocks_critical_and_major(self):
        assert blocking_severities(ApprovalThreshold.MAJOR) == {Severity.CRITICAL, Severity.MAJOR}

    def test_positive_never_blocks(self):
        for threshold in ApprovalThreshold:
            assert Severity.POSITIVE not in blocking_severities(threshold)


class TestIssuesBlockApproval:
    def test_minor_issue_blocks_at_minor_threshold(self):
        assert issues_block_approval([_issue(Severity.MINOR)], ApprovalThreshold.MINOR) is True

    def test_minor_issue_passes_at_major_threshold(self):
        assert issues_block_approval([_issue(Severity.MINOR)], ApprovalThreshold.MAJOR) is False

    def test_none_threshold_never_blocks(self):
        assert issues_block_approval([_issue(Severity.CRITICAL)], ApprovalThreshold.NONE) is False

    def test_no_issues(self):
        assert issues_block_approval([], ApprovalThreshold.MINOR) is False
