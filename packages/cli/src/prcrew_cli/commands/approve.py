"""approve command: review a pull request and approve it when nothing blocks."""

from __future__ import annotations

import click

from prcrew_core.config import ORCHESTRATION_MODES
from prcrew_core.models import ApprovalThreshold
from prcrew_cli.commands.review import build_orchestrator, pr_options, publish, split_repo


@click.command("approve")
@pr_options
@click.option(
    "--mode",
    type=click.Choice(ORCHESTRATION_MODES),
    default=None,
    help="Orchestration mode. Overrides config file.",
)
@click.option(
    "--threshold",
    type=click.Choice([t.value for t in ApprovalThreshold]),
    default=None,
    help="Lowest severity that blocks approval. Overrides config file.",
)
@click.pass_context
def approve_cmd(ctx, repo, pr_number, model, language, shadow, yes, mode, threshold):
    """Review a pull request and submit an APPROVE review when the approver agrees.

    Located issues at or above the threshold always block approval; in that
    case the changes-requested comment is posted instead.
    """
    owner, name = split_repo(repo)
    overrides = {
        "model": model,
        "language": language,
        "orchestration_mode": mode,
        "approval_threshold": threshold,
        "auto_approve": True,
    }
    orchestrator = build_orchestrator(ctx, overrides)
    prepared = orchestrator.prepare(owner, name, pr_number, mode)
    result = publish(orchestrator, owner, name, pr_number, prepared, shadow, yes)
    if result is not None and result.approved:
        click.echo(f"Approved: {result.approval_url or f'{owner}/{name}#{pr_number}'}")
