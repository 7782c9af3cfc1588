"""Tests for turning review text into Issue records."""

import logging

from prcrew_core.analysis.extractor import (
    analyze_review,
    extract_issues,
    split_sections,
    summarize_issues,
)
from prcrew_core.models import UNLOCATED_PATH, Issue, Severity

SQL_INJECTION = """### [CRITICAL] SQL Injection
**File:** `src/Auth.cs` (lines 10-12)
**Problem:** user input concatenated into query.
```suggestion
use parameterized query
```
"""

MULTI = """Overall this change is in good shape.

### [MAJOR] Missing null check
**File:** `app/service.py` (line 42)
**Problem:** `user` can be None here.

### [MINOR] Naming
**File:** `app/models.py` (lines 3-4)
**Problem:** `tmp` does not say what it holds.

### [POSITIVE] Good test coverage
The new tests cover the error paths.
"""


class TestSplitSections:
    def test_preamble_is_dropped(self):
        sections = split_sections(MULTI)
        assert [s.heading for s in sections] == [
            "[MAJOR] Missing null check",
            "[MINOR] Naming",
            "[POSITIVE] Good test coverage",
        ]

    def test_headings_inside_code_fences_are_ignored(self):
        text = "### [MAJOR] Config\n```python\n# not a heading\nx = 1\n```\nrest\n"
        sections = split_sections(text)
        assert len(sections) == 1
        assert "# not a heading" in sections[0].body

    def test_empty_input(self):
        assert split_sections("") == []
        assert split_sections(None) == []

    def test_text_without_headings(self):
        assert split_sections("Looks good to me.") == []


class TestExtractIssues:
    def test_fully_specified_section(self):
        issues = extract_issues(SQL_INJECTION)
        assert issues == [
            Issue(
                title="SQL Injection",
                severity=Severity.CRITICAL,
                file_path="src/Auth.cs",
                start_line=10,
                end_line=12,
                description="user input concatenated into query.",
                suggestion="use parameterized query",
            )
        ]

    def test_one_issue_per_section_in_document_order(self):
        issues = extract_issues(MULTI)
        assert [i.title for i in issues] == ["Missing null check", "Naming", "Good test coverage"]
        assert [i.severity for i in issues] == [Severity.MAJOR, Severity.MINOR, Severity.POSITIVE]

    def test_single_line_reference(self):
        issue = extract_issues(MULTI)[0]
        assert issue.file_path == "app/service.py"
        assert (issue.start_line, issue.end_line) == (42, 42)

    def test_missing_severity_tag_defaults_to_major(self):
        issue = extract_issues("### Missing null check\n**File:** `a.py` (line 2)\n")[0]
        assert issue.severity is Severity.MAJOR
        assert issue.title == "Missing null check"

    def test_unknown_severity_tag_defaults_to_major(self):
        issue = extract_issues("### [INFO] Heads up\nsomething\n")[0]
        assert issue.severity is Severity.MAJOR
        assert issue.title == "Heads up"

    def test_severity_tag_is_case_insensitive(self):
        assert extract_issues("### [minor] Typo\n")[0].severity is Severity.MINOR

    def test_missing_file_and_lines_use_defaults(self):
        issue = extract_issues("### [MINOR] Style\nPrefer f-strings.\n")[0]
        assert issue.file_path == UNLOCATED_PATH
        assert not issue.is_located
        assert (issue.start_line, issue.end_line) == (1, 1)

    def test_defaults_are_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="prcrew_core.analysis.extractor"):
            extract_issues("### [MINOR] Style\nPrefer f-strings.\n")
        assert "file_path" in caplog.text
        assert "lines" in caplog.text

    def test_reversed_range_is_normalized(self):
        issue = extract_issues("### [MINOR] X\n**File:** `a.py` (lines 12-10)\n")[0]
        assert (issue.start_line, issue.end_line) == (10, 12)

    def test_zero_line_is_clamped(self):
        issue = extract_issues("### [MINOR] X\n**File:** `a.py` (lines 0-3)\n")[0]
        assert (issue.start_line, issue.end_line) == (1, 3)

    def test_description_falls_back_to_first_body_line(self):
        issue = extract_issues("### [MINOR] Typo\nThe word is misspelled.\nMore detail.\n")[0]
        assert issue.description == "The word is misspelled."

    def test_description_falls_back_to_title(self):
        issue = extract_issues("### [MINOR] Typo\n")[0]
        assert issue.description == "Typo"

    def test_location_labels_are_not_descriptions(self):
        issue = extract_issues("### [MAJOR] X\n**File:** `a.py` (line 3)\n**Why:** it leaks.\n")[0]
        assert issue.description == "it leaks."

    def test_missing_suggestion_is_empty(self):
        assert extract_issues(MULTI)[0].suggestion == ""

    def test_extraction_is_deterministic(self):
        assert extract_issues(MULTI) == extract_issues(MULTI)

    def test_empty_review_yields_no_issues(self):
        assert extract_issues("") == []


class TestSummarizeIssues:
    def test_counts_each_severity(self):
        summary = summarize_issues(extract_issues(MULTI))
        assert summary == "Issues found: 3 (Critical: 0, Major: 1, Minor: 1, Positive: 1)"

    def test_no_issues(self):
        assert summarize_issues([]) == "Issues found: 0 (Critical: 0, Major: 0, Minor: 0, Positive: 0)"


def test_analyze_review_combines_issues_and_summary():
    analysis = analyze_review(SQL_INJECTION)
    assert len(analysis.issues) == 1
    assert analysis.summary.startswith("Issues found: 1 (Critical: 1")
