"""Tests for LLM request and response models."""

import pytest
from pydantic import ValidationError

from ambient.llm.models import LLMMessage, LLMRequest, PromptPair


class TestPromptPair:
    def test_system_and_user(self):
        messages = PromptPair(system="You are a SQL expert.", user="Count users").to_messages()

        assert [m.role for m in messages] == ["system", "user"]
        assert messages[1].content == "Count users"

    def test_user_only(self):
        messages = PromptPair(user="Count users").to_messages()

        assert len(messages) == 1
        assert messages[0].role == "user"

    def test_user_is_required(self):
        with pytest.raises(ValidationError):
            PromptPair(system="x", user="")


class TestLLMRequest:
    def test_defaults(self):
        request = LLMRequest(messages=[LLMMessage(role="user", content="hi")])

        assert request.response_format == "text"
        assert request.temperature is None
        assert request.metadata == {}

    def test_needs_a_message(self):
        with pytest.raises(ValidationError):
            LLMRequest(messages=[])

    def test_temperature_range(self):
        with pytest.raises(ValidationError):
            LLMRequest(messages=[LLMMessage(role="user", content="hi")], temperature=3.0)
