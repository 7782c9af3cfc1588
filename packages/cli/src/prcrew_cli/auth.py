"""Credential resolution shared by every prcrew command.

GitHub token order (first hit wins):
  1. GITHUB_TOKEN environment variable
  2. `gh auth token` from an existing GitHub CLI login

LLM keys only come from the environment; ``require_credentials`` turns a
missing key into a UsageError naming the variable to set.
"""

from __future__ import annotations

import logging
import os
import subprocess

import click

logger = logging.getLogger(__name__)

_PROVIDER_KEYS = {
    "anthropic": ("anthropic_api_key", "ANTHROPIC_API_KEY"),
    "openai": ("openai_api_key", "OPENAI_API_KEY"),
}


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None when neither source has one. Never raises."""
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    gh_token = result.stdout.strip()
    if gh_token:
        logger.debug("Using GitHub token from gh CLI session.")
    return gh_token or None


def require_credentials(config: dict, needs_llm: bool = True) -> dict:
    """Fill in the GitHub token and, when ``needs_llm``, check the selected provider has an API key."""
    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    config["github_token"] = token
    if not needs_llm:
        return config

    key_field, env_var = _PROVIDER_KEYS.get(config["model"], (None, None))
    if key_field is None:
        raise click.UsageError(f"Unknown model provider: {config['model']!r}. Choose 'anthropic' or 'openai'.")
    if not config.get(key_field):
        raise click.UsageError(f"{env_var} environment variable is not set.")
    return config
