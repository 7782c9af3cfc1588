from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from prcrew_core.providers.base import BaseLLMClient


class OpenAIClient(BaseLLMClient):
    MODEL = "gpt-4o"
    # Lower than Anthropic's 0.3 to keep DECISION: lines and section markers terse.
    TEMPERATURE = 0.2

    def __init__(self, api_key: str, timeout: float = 120, model: str | None = None):
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. " "Install it with: pip install 'prcrew[openai]'"
            )
        self.client = _OpenAI(api_key=api_key, timeout=timeout)
        if model:
            self.MODEL = model

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.MODEL,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        return response.choices[0].message.content or ""
