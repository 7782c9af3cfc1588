"""Prompt templates shared by every agent and provider.

Kept in one module so the output formats the parsers depend on
(``### [SEVERITY] Title`` sections, ``DECISION:`` lines) are defined next to
each other and cannot drift apart.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prcrew_core.models import Issue

_LANGUAGE_NAMES = {"en": "English", "ja": "Japanese"}


def language_name(language: str) -> str:
    return _LANGUAGE_NAMES.get(language, "English")


REVIEW_SYSTEM_PROMPT = """You are a strict and precise senior code reviewer.
Identify security vulnerabilities, logic bugs, missing error handling and
maintainability problems in the pull request. Be concise and actionable.
Avoid assumptions when context is unclear."""

SUMMARY_SYSTEM_PROMPT = """You are a technical writer who summarizes pull requests
for busy reviewers. Describe what changed and why, and call out risky areas."""

APPROVAL_SYSTEM_PROMPT = """You are the final gatekeeper for merging pull requests.
You decide whether a pull request can be approved based on a code review and an
approval threshold. Be conservative: when in doubt, reject."""


def build_review_prompt(pr_context: str, language: str = "en", focus: str | None = None) -> str:
    focus_section = f"\n## Focus\n{focus}\n" if focus else ""
    return f"""Review the pull request below.
{focus_section}
{pr_context}

### Output Format:
Report every finding as its own markdown section:

### [CRITICAL|MAJOR|MINOR|POSITIVE] Short title
**File:** `path/to/file.ext` (lines N-M)
**Problem:** one paragraph describing the issue.
```suggestion
replacement code, if you have one
```

Severity guide:
- CRITICAL: security vulnerability, data loss risk, crash
- MAJOR: logic bug, missing error handling, significant performance issue
- MINOR: code smell, unclear naming, style
- POSITIVE: something done well worth keeping

Write the findings in {language_name(language)}. Keep the section markers in English."""


def build_summary_prompt(pr_context: str, language: str = "en") -> str:
    return f"""Summarize the pull request below.

{pr_context}

## Summary
Start your answer with a `## Summary` heading, then cover:
- purpose of the change
- main files and components touched
- risks or follow-ups for reviewers

Write in {language_name(language)}. Keep it under 300 words."""


def build_approval_prompt(title: str, author: str, review: str, threshold_description: str) -> str:
    return f"""Based on the code review below, make an approval decision for this pull request.

## Pull Request
- Title: {title}
- Author: {author}

## Code Review Result
{review}

## Approval Threshold
{threshold_description}

Provide your decision in this format:

DECISION: [APPROVE/REJECT]
REASONING: [Explain why, listing any issues above the threshold]
CONDITIONS: [Any conditions for merge, or N/A]
APPROVAL_COMMENT: [Brief comment if approved, or N/A]

Be conservative - when in doubt, reject or request additional review."""


def build_comment_prompt(issue: Issue, language: str = "en") -> str:
    return f"""Create a GitHub pull request review comment for this issue:

**Issue Title:** {issue.title}
**Level:** {issue.severity.value}
**File:** {issue.file_path} (Line {issue.start_line})
**Description:** {issue.description}
**Suggestion:** {issue.suggestion}

Create a concise comment that:
1. Clearly describes the problem
2. Provides actionable feedback
3. Uses professional and constructive language
4. Keeps it under 200 words

Write in {language_name(language)}.
**Output:** Only the comment text, no formatting."""
