import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "model_name": None,  # None = provider default
    "language": "en",
    "approval_threshold": "minor",  # critical | major | minor | none
    "orchestration_mode": "sequential",  # sequential | collaborative | parallel | agent_chat
    "selection_strategy": "approval_workflow",
    "max_turns": 10,
    "auto_approve": False,
    "max_chars_per_file": 20000,
    "exclude": [],  # fnmatch patterns or directory names to leave out of the prompt diff
    "timeout": 120,  # seconds, applied to every LLM and GitHub call
    "system_prompt": None,  # overrides the reviewer's built-in system prompt
}

ORCHESTRATION_MODES = ("sequential", "collaborative", "parallel", "agent_chat")
SUPPORTED_LANGUAGES = ("en", "ja")


def load_config(config_path: str = ".prcrew.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prcrew.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "exclude": list(DEFAULT_CONFIG["exclude"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["exclude"] = list(config.get("exclude") or [])
    config["language"] = normalize_language(config.get("language"))

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

    return config


def normalize_language(value: Optional[str]) -> str:
    language = (value or "").strip().lower()
    return language if language in SUPPORTED_LANGUAGES else "en"
