"""comment command: post a hand-written line comment, optionally approving the PR."""

from __future__ import annotations

import click

from prcrew_core.actions.buffer import ActionBuffer
from prcrew_core.actions.tools import ActionTools
from prcrew_core.orchestrator import Outcome, PreparedRun
from prcrew_cli.commands.review import build_orchestrator, publish, split_repo


def parse_target(target: str) -> tuple[str, int, int | None]:
    """Split ``FILE@LINE`` or ``FILE@START-END`` into (path, line, start_line)."""
    path, sep, lines = target.rpartition("@")
    if not sep or not path.strip():
        raise click.BadParameter("Expected FILE@LINE or FILE@START-END.", param_hint="TARGET")
    start, dash, end = lines.partition("-")
    try:
        line = int(end if dash else start)
        start_line = int(start) if dash else None
    except ValueError:
        raise click.BadParameter(f"Line numbers must be integers, got {lines!r}.", param_hint="TARGET")
    return path.strip(), line, start_line


@click.command("comment")
@click.argument("target")
@click.argument("text")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.option("--suggestion", default=None, help="Replacement code posted as a GitHub suggestion block.")
@click.option("--approve", is_flag=True, help="Also submit an APPROVE review.")
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print the queued actions without posting to GitHub.",
)
@click.option("--yes", "-y", is_flag=True, help="Post without asking for confirmation.")
@click.pass_context
def comment_cmd(ctx, target, text, repo, pr_number, suggestion, approve, shadow, yes):
    """Post TEXT as a line comment at TARGET (FILE@LINE or FILE@START-END).

    \b
    Examples:
      prcrew comment --repo octo/widgets --pr 5 src/auth.py@42 "Check for None"
      prcrew comment --repo octo/widgets --pr 5 src/auth.py@10-14 "Extract this" --approve
    """
    owner, name = split_repo(repo)
    file_path, line, start_line = parse_target(target)

    buffer = ActionBuffer()
    tools = ActionTools(buffer)
    reply = tools.dispatch(
        "post_line_comment",
        {"file_path": file_path, "line": line, "comment": text, "suggestion": suggestion, "start_line": start_line},
    )
    if reply.startswith("Error:"):
        raise click.UsageError(reply[len("Error:") :].strip())
    if approve:
        tools.dispatch("approve_pull_request")

    orchestrator = build_orchestrator(ctx, {}, needs_llm=False)
    prepared = PreparedRun(outcome=Outcome(review=""), buffer=buffer)
    result = publish(orchestrator, owner, name, pr_number, prepared, shadow, yes)
    if result is not None and result.approved:
        click.echo(f"Approved: {result.approval_url or f'{owner}/{name}#{pr_number}'}")
