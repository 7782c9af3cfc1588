"""Turn free-text review output into structured Issue records.

LLM output is unreliable free text, so extraction never fails: each field is
pulled by its own rule and falls back to an explicit default when the rule
does not match.

    ### [CRITICAL] SQL Injection
    **File:** `src/Auth.cs` (lines 10-12)
    **Problem:** user input concatenated into query.
    ```suggestion
    use parameterized query
    ```

yields ``Issue(title="SQL Injection", severity=CRITICAL, file_path="src/Auth.cs",
start_line=10, end_line=12, description="user input concatenated into query.",
suggestion="use parameterized query")``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from prcrew_core.models import UNLOCATED_PATH, Issue, ReviewAnalysis, Severity

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^ {0,3}#{1,4}[ \t]+(?P<text>\S.*?)[ \t#]*$")
_FENCE_RE = re.compile(r"^\s*```")

_SEVERITY_TAGS = {
    "CRITICAL": Severity.CRITICAL,
    "MAJOR": Severity.MAJOR,
    "MINOR": Severity.MINOR,
    "POSITIVE": Severity.POSITIVE,
}

# Bold labels that locate an issue rather than describe it.
_LOCATION_LABELS = {"file", "files", "path", "location", "line", "lines", "ファイル"}

_LABELLED_PARAGRAPH_RE = re.compile(
    r"^[ \t]*\*\*(?P<label>[^*\n]+?)\*\*:?[ \t]*"
    r"(?P<text>.*(?:\n(?![ \t]*\n)(?![ \t]*\*\*)(?![ \t]*```).+)*)",
    re.MULTILINE,
)


@dataclass(frozen=True)
class Section:
    heading: str
    body: str

    @property
    def text(self) -> str:
        return f"{self.heading}\n{self.body}"


@dataclass(frozen=True)
class FieldRule:
    """One independent extractor: a pattern, where to look, and what to use when it misses."""

    field: str
    pattern: re.Pattern
    default: object
    convert: Callable[[re.Match], object]
    source: str = "body"  # "heading" | "body" | "section"

    def apply(self, section: Section) -> tuple[object, bool]:
        haystack = {"heading": section.heading, "body": section.body, "section": section.text}[self.source]
        match = self.pattern.search(haystack)
        if match is None:
            return self.default, False
        return self.convert(match), True


def _severity(match: re.Match) -> Severity:
    return _SEVERITY_TAGS.get(match.group("tag").upper(), Severity.MAJOR)


def _line_range(match: re.Match) -> tuple[int, int]:
    start = max(int(match.group("start")), 1)
    end = max(int(match.group("end")), 1) if match.group("end") else start
    return (start, end) if end >= start else (end, start)


FIELD_RULES: tuple[FieldRule, ...] = (
    FieldRule(
        "severity",
        re.compile(r"^\[(?P<tag>[A-Za-z_]+)\]"),
        Severity.MAJOR,
        _severity,
        source="heading",
    ),
    FieldRule(
        "title",
        re.compile(r"^(?:\[[^\]]*\][ \t]*)?(?P<title>.*)$"),
        "",
        lambda m: m.group("title").strip(),
        source="heading",
    ),
    FieldRule(
        "file_path",
        re.compile(r"(?<!`)`(?P<path>[\w\-.~/]*[./][\w\-.~/]*)`(?!`)"),
        UNLOCATED_PATH,
        lambda m: m.group("path"),
    ),
    FieldRule(
        "lines",
        re.compile(r"\(\s*lines?\s*(?P<start>\d+)(?:\s*[-–]\s*(?P<end>\d+))?\s*\)", re.IGNORECASE),
        (1, 1),
        _line_range,
        source="section",
    ),
    FieldRule(
        "suggestion",
        re.compile(r"```suggestion[ \t]*\n(?P<code>.*?)```", re.DOTALL),
        "",
        lambda m: m.group("code").strip(),
    ),
)


def split_sections(review_text: str) -> list[Section]:
    """Split a document at markdown headings, ignoring headings inside code fences.

    Text before the first heading is a document-level preamble and is dropped.
    """
    sections: list[Section] = []
    heading: str | None = None
    body: list[str] = []
    in_fence = False

    for line in (review_text or "").splitlines():
        if _FENCE_RE.match(line):
            in_fence = not in_fence
        elif not in_fence:
            match = _HEADING_RE.match(line)
            if match:
                if heading is not None:
                    sections.append(Section(heading, "\n".join(body)))
                heading = match.group("text")
                body = []
                continue
        if heading is not None:
            body.append(line)

    if heading is not None:
        sections.append(Section(heading, "\n".join(body)))
    return sections


def _description(section: Section, title: str) -> str:
    for match in _LABELLED_PARAGRAPH_RE.finditer(section.body):
        label = match.group("label").strip().rstrip(":").strip().lower()
        if label in _LOCATION_LABELS:
            continue
        text = " ".join(part.strip() for part in match.group("text").splitlines() if part.strip())
        if text:
            return text
    for line in section.body.splitlines():
        if line.strip() and not _FENCE_RE.match(line):
            return line.strip()
    return title


def parse_section(section: Section) -> Issue:
    fields: dict[str, object] = {}
    for rule in FIELD_RULES:
        value, matched = rule.apply(section)
        fields[rule.field] = value
        if not matched and rule.field in ("file_path", "lines"):
            logger.warning(
                "No %s found in section %r; using default %r.", rule.field, section.heading[:100], rule.default
            )

    title = fields["title"] or section.heading.strip()
    start_line, end_line = fields["lines"]
    issue = Issue(
        title=title,
        severity=fields["severity"],
        file_path=fields["file_path"],
        start_line=start_line,
        end_line=end_line,
        description=_description(section, title),
        suggestion=fields["suggestion"],
    )
    logger.debug("Issue: %s - %s in %s:%d", issue.severity.value, issue.title, issue.file_path, issue.start_line)
    return issue


def extract_issues(review_text: str) -> list[Issue]:
    """Return one Issue per heading section, in document order."""
    return [parse_section(section) for section in split_sections(review_text)]


def summarize_issues(issues: list[Issue]) -> str:
    counts = {severity: 0 for severity in Severity}
    for issue in issues:
        counts[issue.severity] += 1
    return (
        f"Issues found: {len(issues)} "
        f"(Critical: {counts[Severity.CRITICAL]}, Major: {counts[Severity.MAJOR]}, "
        f"Minor: {counts[Severity.MINOR]}, Positive: {counts[Severity.POSITIVE]})"
    )


def analyze_review(review_text: str) -> ReviewAnalysis:
    issues = extract_issues(review_text)
    logger.info("Extracted %d issue(s) from review", len(issues))
    return ReviewAnalysis(issues=issues, summary=summarize_issues(issues))
