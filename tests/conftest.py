"""Shared fixtures for the prompt registry tests."""
from __future__ import annotations

import pytest

from mcp_prompt_registry import PromptDispatcher, PromptRegistryBuilder

from . import sample_prompts


@pytest.fixture
def example() -> sample_prompts.PromptsExample:
    """A fresh PromptsExample instance that records its calls."""
    return sample_prompts.PromptsExample()


@pytest.fixture
def registry(example):
    """Registry with instance, static and module-level prompts."""
    return (
        PromptRegistryBuilder()
        .add_instance(example)
        .add_type(sample_prompts.StaticPrompts)
        .add_function(sample_prompts.echo)
        .add_function(sample_prompts.broken)
        .add_function(sample_prompts.refuses)
        .build()
    )


@pytest.fixture
def dispatcher(registry) -> PromptDispatcher:
    return PromptDispatcher(registry)
