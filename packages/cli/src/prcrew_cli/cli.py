"""CLI entry point for prcrew.

Commands:
  review    run the reviewer, summarizer and approver agents on a pull request
  summary   post a PR summary only
  approve   review, decide, and approve when nothing blocks
  comment   post a hand-written line comment, optionally approving
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.logging import RichHandler

from prcrew_cli.commands.approve import approve_cmd
from prcrew_cli.commands.comment import comment_cmd
from prcrew_cli.commands.review import review_cmd
from prcrew_cli.commands.summary import summary_cmd


def _version() -> str:
    try:
        return importlib.metadata.version("prcrew")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"


@click.group()
@click.version_option(version=_version(), prog_name="prcrew")
@click.option(
    "--config",
    "config_path",
    default=".prcrew.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRCREW_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Multi-agent GitHub pull request reviewer."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(review_cmd)
main.add_command(summary_cmd)
main.add_command(approve_cmd)
main.add_command(comment_cmd)
