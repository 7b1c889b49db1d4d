"""Tests for PromptDispatcher and argument binding."""
from __future__ import annotations

import asyncio

import pytest

from mcp.types import GetPromptResult, PromptMessage

from mcp_prompt_registry import (
    ArgumentConversionError,
    CancellationToken,
    InvalidRequestError,
    MissingArgumentError,
    Prompt,
    PromptDispatcher,
    PromptError,
    PromptExecutionError,
    PromptRegistryBuilder,
    UnknownPromptError,
    assistant_message,
    bind_arguments,
    user_message,
)

from .helpers import roles, run, texts


class TestListPrompts:
    """Tests for PromptDispatcher.list_prompts()."""

    def test_greeting_only_registry(self):
        """A lone greeting prompt lists with an empty argument schema."""

        @Prompt("greeting", "A friendly greeting prompt")
        async def greeting() -> list[PromptMessage]:
            return [assistant_message("Hello! How can I assist you today?")]

        dispatcher = PromptDispatcher(PromptRegistryBuilder().add_function(greeting).build())
        descriptors = dispatcher.list_prompts()
        assert len(descriptors) == 1
        assert descriptors[0].name == "greeting"
        assert descriptors[0].arguments == ()

        result = run(dispatcher.get_prompt("greeting", {}))
        assert roles(result) == ["assistant"]
        assert texts(result) == ["Hello! How can I assist you today?"]

    def test_requires_a_registry(self):
        with pytest.raises(TypeError):
            PromptDispatcher(None)  # type: ignore[arg-type]


class TestGetPrompt:
    """Tests for PromptDispatcher.get_prompt()."""

    def test_summary_uses_default_sentences(self, dispatcher, example):
        """Omitting sentences binds the default of 3."""
        result = run(dispatcher.get_prompt("summary", {"text": "hello world"}))
        assert example.calls == ["summary:3"]
        assert texts(result) == ["Please summarize the following text in 3 sentence(s):\n\nhello world"]

    def test_summary_converts_text_sentences(self, dispatcher, example):
        """sentences='2' binds the integer 2."""
        run(dispatcher.get_prompt("summary", {"text": "hello world", "sentences": "2"}))
        assert example.calls == ["summary:2"]

    def test_message_sequence_is_wrapped_in_order(self, dispatcher):
        """Two returned messages come back in the same order."""
        result = run(dispatcher.get_prompt("chatPrompt", {"topic": "tea"}))
        assert isinstance(result, GetPromptResult)
        assert roles(result) == ["user", "assistant"]
        assert texts(result)[0] == "I'd like to have a friendly conversation about tea."

    def test_name_lookup_is_case_insensitive(self, dispatcher):
        result = run(dispatcher.get_prompt("GREETING"))
        assert texts(result) == ["Hello! How can I assist you today?"]

    def test_sync_static_and_class_handlers(self, dispatcher):
        review = run(dispatcher.get_prompt("code_review", {"code": "x = 1", "strict": "true"}))
        assert texts(review) == ["Please strictly review:\nx = 1"]
        prefixed = run(dispatcher.get_prompt("class_prefix", {"subject": "docs"}))
        assert texts(prefixed) == ["Review: docs"]

    def test_extra_arguments_are_ignored(self, dispatcher):
        result = run(dispatcher.get_prompt("echo", {"text": "a", "unused": "x"}))
        assert texts(result) == ["a"]

    @pytest.mark.parametrize("name", ["", None, 42])
    def test_empty_name_is_invalid(self, dispatcher, name):
        with pytest.raises(InvalidRequestError):
            run(dispatcher.get_prompt(name))

    def test_unknown_prompt_calls_no_handler(self, dispatcher, example):
        with pytest.raises(UnknownPromptError) as exc_info:
            run(dispatcher.get_prompt("missing", {"text": "x"}))
        assert exc_info.value.name == "missing"
        assert example.calls == []

    def test_missing_required_argument(self, dispatcher, example):
        """text has no default, so the handler is never called."""
        with pytest.raises(MissingArgumentError) as exc_info:
            run(dispatcher.get_prompt("summary", {"sentences": "2"}))
        assert exc_info.value.name == "text"
        assert example.calls == []

    def test_conversion_failure(self, dispatcher, example):
        with pytest.raises(ArgumentConversionError):
            run(dispatcher.get_prompt("summary", {"text": "x", "sentences": "abc"}))
        assert example.calls == []

    def test_handler_exception_is_wrapped(self, dispatcher):
        """Handler crashes surface as PromptExecutionError with the inner message."""
        with pytest.raises(PromptExecutionError) as exc_info:
            run(dispatcher.get_prompt("broken"))
        assert exc_info.value.name == "broken"
        assert exc_info.value.inner_message == "template file missing"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_prompt_errors_are_not_double_wrapped(self, dispatcher):
        with pytest.raises(PromptError) as exc_info:
            run(dispatcher.get_prompt("refuses", {"topic": "secrets"}))
        assert type(exc_info.value) is PromptError
        assert exc_info.value.message == "Topic not allowed: secrets"

    def test_wrong_result_shape_is_an_execution_error(self):
        @Prompt("liar")
        def liar() -> list[PromptMessage]:
            return None  # type: ignore[return-value]

        dispatcher = PromptDispatcher(PromptRegistryBuilder().add_function(liar).build())
        with pytest.raises(PromptExecutionError):
            run(dispatcher.get_prompt("liar"))

    @pytest.mark.parametrize("value", [None, [user_message("x")], "text"])
    def test_declared_result_is_checked(self, value):
        """A handler declaring GetPromptResult must return one."""

        @Prompt("lazy")
        def lazy() -> GetPromptResult:
            return value

        dispatcher = PromptDispatcher(PromptRegistryBuilder().add_function(lazy).build())
        with pytest.raises(PromptExecutionError) as exc_info:
            run(dispatcher.get_prompt("lazy"))
        assert "expected GetPromptResult" in exc_info.value.inner_message
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_concurrent_invocations_are_independent(self, dispatcher, example):
        async def many():
            return await asyncio.gather(*(
                dispatcher.get_prompt("summary", {"text": f"t{i}", "sentences": str(i)})
                for i in range(1, 6)
            ))

        results = run(many())
        assert [texts(r)[0].endswith(f"t{i}") for i, r in enumerate(results, start=1)] == [True] * 5
        assert sorted(example.calls) == [f"summary:{i}" for i in range(1, 6)]


class TestCancellation:
    """Tests for threading the cancellation token to handlers."""

    def test_token_reaches_handler(self):
        seen: list[CancellationToken] = []

        @Prompt("watch")
        async def watch(topic: str, token: CancellationToken) -> list[PromptMessage]:
            seen.append(token)
            return [user_message(topic)]

        dispatcher = PromptDispatcher(PromptRegistryBuilder().add_function(watch).build())
        token = CancellationToken()
        run(dispatcher.get_prompt("watch", {"topic": "x", "token": "ignored"}, token))
        assert seen == [token]

    def test_fresh_token_when_none_given(self):
        seen: list[CancellationToken] = []

        @Prompt("watch")
        def watch(token: CancellationToken) -> list[PromptMessage]:
            seen.append(token)
            return []

        dispatcher = PromptDispatcher(PromptRegistryBuilder().add_function(watch).build())
        run(dispatcher.get_prompt("watch"))
        assert isinstance(seen[0], CancellationToken)
        assert not seen[0].cancelled

    def test_cancelled_token_stops_cooperative_handler(self):
        @Prompt("cooperative")
        async def cooperative(token: CancellationToken) -> list[PromptMessage]:
            token.raise_if_cancelled()
            return []

        dispatcher = PromptDispatcher(PromptRegistryBuilder().add_function(cooperative).build())
        token = CancellationToken()
        token.cancel()
        with pytest.raises(asyncio.CancelledError):
            run(dispatcher.get_prompt("cooperative", None, token))

    def test_callbacks_run_once(self):
        token = CancellationToken()
        calls: list[int] = []
        token.add_callback(lambda: calls.append(1))
        token.cancel()
        token.cancel()
        token.add_callback(lambda: calls.append(2))
        assert calls == [1, 2]


class TestBindArguments:
    """Tests for bind_arguments() directly."""

    def test_keyword_only_parameters_go_to_kwargs(self):
        @Prompt("kw")
        def kw(topic: str, *, tone: str = "neutral") -> list[PromptMessage]:
            return []

        _, binding = PromptRegistryBuilder().add_function(kw).build().resolve("kw")
        args, kwargs = bind_arguments(binding.parameters, {"topic": "t", "tone": "dry"}, CancellationToken())
        assert args == ["t"]
        assert kwargs == {"tone": "dry"}

    def test_defaults_fill_positional_gaps(self, registry):
        _, binding = registry.resolve("echo")
        args, kwargs = bind_arguments(binding.parameters, {"text": "a"}, CancellationToken())
        assert args == ["a", None]
        assert kwargs == {}

    def test_none_arguments_mean_empty(self, registry):
        _, binding = registry.resolve("greeting")
        assert bind_arguments(binding.parameters, None, CancellationToken()) == ([], {})
