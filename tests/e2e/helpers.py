"""Helper functions for E2E tests over an in-memory MCP connection."""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from mcp.client.session import ClientSession
from mcp.server.lowlevel import Server
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session


def with_client(server: Server, scenario: Callable[[ClientSession], Awaitable[Any]]) -> Any:
    """Connect a client session to server and run scenario against it.

    Args:
        server: Low-level MCP server with prompt handlers attached
        scenario: Coroutine function receiving the initialized ClientSession

    Returns:
        Whatever scenario returns.
    """

    async def _run() -> Any:
        async with create_connected_server_and_client_session(server) as client:
            return await scenario(client)

    return asyncio.run(_run())


def list_prompts(server: Server) -> list[Any]:
    """Return the prompts advertised by server."""

    async def scenario(client: ClientSession) -> list[Any]:
        return (await client.list_prompts()).prompts

    return with_client(server, scenario)


def get_prompt(server: Server, name: str, args: dict[str, str] | None = None) -> Any:
    """Call prompts/get and return the GetPromptResult."""

    async def scenario(client: ClientSession) -> Any:
        return await client.get_prompt(name, args)

    return with_client(server, scenario)


def get_prompt_error(server: Server, name: str, args: dict[str, str] | None = None) -> McpError:
    """Call prompts/get expecting a protocol error, and return it.

    Raises:
        AssertionError: If the call succeeds.
    """

    async def scenario(client: ClientSession) -> McpError:
        try:
            await client.get_prompt(name, args)
        except McpError as e:
            return e
        raise AssertionError(f"prompts/get {name!r} unexpectedly succeeded")

    return with_client(server, scenario)
