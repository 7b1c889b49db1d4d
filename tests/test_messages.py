"""Tests for the message helpers."""
from __future__ import annotations

from mcp_prompt_registry import assistant_message, to_prompt_result, user_message


class TestMessages:
    """Tests for user_message(), assistant_message() and to_prompt_result()."""

    def test_roles_and_text(self):
        message = user_message("hi")
        assert message.role == "user"
        assert message.content.type == "text"
        assert message.content.text == "hi"
        assert assistant_message("ok").role == "assistant"

    def test_result_keeps_order(self):
        messages = (user_message("one"), assistant_message("two"), user_message("three"))
        result = to_prompt_result(messages)
        assert [m.content.text for m in result.messages] == ["one", "two", "three"]
        assert result.description is None

    def test_result_accepts_generators(self):
        result = to_prompt_result((user_message(str(i)) for i in range(2)), description="counted")
        assert len(result.messages) == 2
        assert result.description == "counted"
