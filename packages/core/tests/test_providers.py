"""Tests for LLM client implementations.

Shared behaviour (complete, _call_with_retry) lives in BaseLLMClient and is
tested once via a lightweight stub, not duplicated per provider.
Provider-specific tests cover only what differs between implementations: the
SDK client setup and _call_api.
"""

from unittest.mock import MagicMock, patch

import pytest

from prcrew_core.providers.anthropic import AnthropicClient
from prcrew_core.providers.base import BaseLLMClient
from prcrew_core.providers.openai import OpenAIClient


class _StubClient(BaseLLMClient):
    def __init__(self):
        self.calls = []

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        return "reply"


# ---------------------------------------------------------------------------
# Shared behaviour
# ---------------------------------------------------------------------------


class TestBaseLLMClient:
    def test_complete_passes_prompts_through(self):
        client = _StubClient()
        assert client.complete("review this", system="be strict") == "reply"
        assert client.calls == [("be strict", "review this")]

    def test_default_system_prompt(self):
        client = _StubClient()
        client.complete("hi")
        assert client.calls[0][0]

    def test_none_reply_becomes_empty_string(self):
        class _NoneClient(BaseLLMClient):
            def _call_api(self, system_prompt, user_prompt):
                return None

        assert _NoneClient().complete("x") == ""


class TestBaseLLMClientRetry:
    def test_raises_after_max_retries(self):
        """When _call_api raises on every attempt, the last error propagates."""
        attempts = 0

        class _AlwaysFail(BaseLLMClient):
            def _call_api(self, system_prompt: str, user_prompt: str) -> str:
                nonlocal attempts
                attempts += 1
                raise RuntimeError("network error")

        with patch("prcrew_core.providers.base.time.sleep") as sleep:
            with pytest.raises(RuntimeError, match="network error"):
                _AlwaysFail().complete("x")
        assert attempts == BaseLLMClient.MAX_RETRIES
        assert [c.args[0] for c in sleep.call_args_list] == [1, 2]

    def test_retries_on_transient_failure(self):
        call_count = 0

        class _FailOnceThenSucceed(BaseLLMClient):
            def _call_api(self, system_prompt: str, user_prompt: str) -> str:
                nonlocal call_count
                call_count += 1
                if call_count == 1:
                    raise RuntimeError("transient")
                return "ok"

        with patch("prcrew_core.providers.base.time.sleep"):
            assert _FailOnceThenSucceed().complete("x") == "ok"
        assert call_count == 2


# ---------------------------------------------------------------------------
# Provider-specific
# ---------------------------------------------------------------------------


class TestAnthropicClient:
    def test_raises_import_error_without_sdk(self):
        with patch.dict("sys.modules", {"anthropic": None}):
            with pytest.raises(ImportError, match="prcrew\\[anthropic\\]"):
                AnthropicClient(api_key="key")

    def test_model_is_claude(self):
        assert "claude" in AnthropicClient.MODEL

    def test_temperature_is_set(self):
        assert AnthropicClient.TEMPERATURE == 0.3

    def test_timeout_and_model_override(self, mocker):
        sdk = mocker.patch("anthropic.Anthropic")
        client = AnthropicClient(api_key="key", timeout=30, model="claude-custom")
        sdk.assert_called_once_with(api_key="key", timeout=30)
        assert client.MODEL == "claude-custom"
        assert AnthropicClient.MODEL != "claude-custom"

    def test_call_api_joins_text_blocks(self, mocker):
        from anthropic.types import TextBlock

        sdk = mocker.patch("anthropic.Anthropic")
        sdk.return_value.messages.create.return_value.content = [
            TextBlock(type="text", text="### [MINOR] "),
            TextBlock(type="text", text="Naming"),
        ]
        assert AnthropicClient(api_key="key").complete("p", system="s") == "### [MINOR] Naming"
        kwargs = sdk.return_value.messages.create.call_args.kwargs
        assert kwargs["system"] == "s"
        assert kwargs["messages"] == [{"role": "user", "content": "p"}]


class TestOpenAIClient:
    def test_raises_import_error_without_sdk(self):
        import prcrew_core.providers.openai as openai_mod

        real_openai = openai_mod._OpenAI
        openai_mod._OpenAI = None
        try:
            with pytest.raises(ImportError):
                OpenAIClient(api_key="key")
        finally:
            openai_mod._OpenAI = real_openai

    def test_model_is_gpt(self):
        assert "gpt" in OpenAIClient.MODEL

    def test_temperature_is_set(self):
        assert OpenAIClient.TEMPERATURE == 0.2

    def test_call_api_sends_system_and_user_messages(self, mocker):
        sdk = mocker.patch("prcrew_core.providers.openai._OpenAI")
        response = MagicMock()
        response.choices[0].message.content = "DECISION: APPROVE"
        sdk.return_value.chat.completions.create.return_value = response

        assert OpenAIClient(api_key="key", timeout=45).complete("p", system="s") == "DECISION: APPROVE"
        sdk.assert_called_once_with(api_key="key", timeout=45)
        messages = sdk.return_value.chat.completions.create.call_args.kwargs["messages"]
        assert messages == [{"role": "system", "content": "s"}, {"role": "user", "content": "p"}]
