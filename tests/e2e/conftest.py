"""E2E test configuration and fixtures."""
from __future__ import annotations

import pytest
from mcp.server.fastmcp import FastMCP

from mcp_prompt_registry import with_prompts

from .. import sample_prompts


@pytest.fixture
def server(example):
    """Low-level server of a FastMCP instance serving the sample prompts."""
    mcp = FastMCP("e2e-prompts")
    with_prompts(mcp, example, sample_prompts.StaticPrompts, sample_prompts.broken, sample_prompts.refuses)
    return mcp._mcp_server
