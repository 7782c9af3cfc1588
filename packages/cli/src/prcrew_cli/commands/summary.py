"""summary command: post a PR summary without reviewing."""

from __future__ import annotations

import click

from prcrew_cli.commands.review import build_orchestrator, pr_options, publish, split_repo


@click.command("summary")
@pr_options
@click.pass_context
def summary_cmd(ctx, repo, pr_number, model, language, shadow, yes):
    """Generate a summary of a pull request and post it as a "PR Summary" comment."""
    owner, name = split_repo(repo)
    orchestrator = build_orchestrator(ctx, {"model": model, "language": language})
    prepared = orchestrator.prepare_summary(owner, name, pr_number)
    publish(orchestrator, owner, name, pr_number, prepared, shadow, yes)
