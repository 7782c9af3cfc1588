from __future__ import annotations

from prcrew_core.providers.base import BaseLLMClient


class AnthropicClient(BaseLLMClient):
    MODEL = "claude-sonnet-4-20250514"
    # Slightly warmer than OpenAI so review comments read naturally while the
    # section markers the extractor relies on stay stable.
    TEMPERATURE = 0.3

    def __init__(self, api_key: str, timeout: float = 120, model: str | None = None):
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install 'prcrew[anthropic]'"
            )
        self.client = Anthropic(api_key=api_key, timeout=timeout)
        if model:
            self.MODEL = model

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        # anthropic is optional; __init__ already validated it is installed.
        from anthropic.types import TextBlock

        response = self.client.messages.create(
            model=self.MODEL,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        text_blocks = [block.text for block in response.content if isinstance(block, TextBlock)]
        return "".join(text_blocks).strip()
