"""review command: run the review agents on a pull request and post their actions."""

from __future__ import annotations

import click
from rich.console import Console

from prcrew_core.actions.executor import build_preview
from prcrew_core.config import ORCHESTRATION_MODES, SUPPORTED_LANGUAGES, load_config
from prcrew_core.gh.pull_request import GitHubHost
from prcrew_core.models import ApprovalThreshold
from prcrew_core.orchestrator import Orchestrator, PreparedRun, get_llm_client
from prcrew_cli.auth import require_credentials

console = Console()


def split_repo(repo: str) -> tuple[str, str]:
    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise click.BadParameter("Expected owner/name.", param_hint="--repo")
    return owner, name


def pr_options(func):
    """--repo/--pr plus the provider overrides every command accepts."""
    func = click.option("--yes", "-y", is_flag=True, help="Post without asking for confirmation.")(func)
    func = click.option(
        "--shadow",
        "-s",
        is_flag=True,
        help="Dry-run mode: print the queued actions without posting to GitHub.",
    )(func)
    func = click.option(
        "--language",
        type=click.Choice(SUPPORTED_LANGUAGES),
        default=None,
        help="Language for review comments. Overrides config file.",
    )(func)
    func = click.option(
        "--model",
        type=click.Choice(["anthropic", "openai"]),
        default=None,
        help="AI model provider. Overrides config file.",
    )(func)
    func = click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")(func)
    func = click.option("--repo", required=True, help="GitHub repository in owner/name format.")(func)
    return func


def build_orchestrator(ctx: click.Context, overrides: dict, needs_llm: bool = True) -> Orchestrator:
    config_path = (ctx.obj or {}).get("config_path", ".prcrew.yml")
    config = require_credentials(load_config(config_path, cli_overrides=overrides), needs_llm=needs_llm)
    host = GitHubHost.from_token(config["github_token"], timeout=config.get("timeout", 120))
    llm = get_llm_client(config) if needs_llm else None
    return Orchestrator(llm, host, config)


def publish(
    orchestrator: Orchestrator,
    owner: str,
    name: str,
    pr_number: int,
    prepared: PreparedRun,
    shadow: bool,
    yes: bool,
):
    """Show the queued actions, then post them unless in shadow mode or declined."""
    console.print(build_preview(prepared.buffer, pr_number), markup=False)
    if shadow:
        console.print("[bold]Shadow run complete. Nothing was posted.[/bold]")
        return None
    if prepared.buffer.is_empty:
        console.print("[yellow]No actions were queued. Nothing to post.[/yellow]")
        return None
    if not yes and not click.confirm(f"Post these actions to {owner}/{name}#{pr_number}?", default=False):
        console.print("[yellow]Aborted. Nothing was posted.[/yellow]")
        return None

    result = orchestrator.post(owner, name, pr_number, prepared)
    if result.action_result is not None and not result.action_result.success:
        raise click.ClickException(result.action_result.message)
    return result


@click.command("review")
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
def review_cmd(
    ctx,
    repo: str,
    pr_number: int,
    model: str | None,
    language: str | None,
    shadow: bool,
    yes: bool,
    mode: str | None,
    threshold: str | None,
):
    """Review a pull request with the reviewer, summarizer and approver agents.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub personal access token (or use gh CLI)
      ANTHROPIC_API_KEY    Required when using --model anthropic
      OPENAI_API_KEY       Required when using --model openai
    """
    owner, name = split_repo(repo)
    overrides = {
        "model": model,
        "language": language,
        "orchestration_mode": mode,
        "approval_threshold": threshold,
    }
    orchestrator = build_orchestrator(ctx, overrides)
    prepared = orchestrator.prepare(owner, name, pr_number, mode)
    publish(orchestrator, owner, name, pr_number, prepared, shadow, yes)
