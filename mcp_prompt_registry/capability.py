# capability.py
"""Expose a PromptDispatcher through the MCP server's prompts capability.

The MCP low-level server takes a function pair for prompts/list and
prompts/get. PromptsCapability provides that pair and renders PromptError
into McpError so clients receive a proper JSON-RPC error.
"""

import asyncio
import inspect
import logging
from types import ModuleType
from typing import Any, Union

from mcp import types
from mcp.server.fastmcp import FastMCP
from mcp.server.lowlevel import Server
from mcp.shared.exceptions import McpError

from .cancellation import CancellationToken
from .dispatcher import PromptDispatcher
from .errors import PromptError
from .registry import PromptRegistry, PromptRegistryBuilder

logger = logging.getLogger(__name__)


class PromptsCapability:
    """prompts/list + prompts/get handlers backed by a PromptDispatcher.

    Usage:
        >>> capability = PromptsCapability(PromptDispatcher(registry))
        >>> capability.attach(server)  # lowlevel Server or FastMCP
    """

    def __init__(self, dispatcher: PromptDispatcher) -> None:
        self._dispatcher = dispatcher

    @property
    def dispatcher(self) -> PromptDispatcher:
        return self._dispatcher

    async def list_prompts(self) -> list[types.Prompt]:
        return [descriptor.to_mcp() for descriptor in self._dispatcher.list_prompts()]

    async def get_prompt(self, name: str, arguments: dict[str, str] | None = None) -> types.GetPromptResult:
        """Invoke a prompt for one prompts/get request.

        Each request gets its own CancellationToken. When the MCP server
        cancels the request (client notifications/cancelled or shutdown), the
        token is cancelled before the cancellation propagates, so callbacks
        registered with add_callback() run.
        """
        token = CancellationToken()
        try:
            return await self._dispatcher.get_prompt(name, arguments, token)
        except asyncio.CancelledError:
            token.cancel()
            raise
        except PromptError as e:
            logger.warning("prompts/get %r failed: %s", name, e)
            raise McpError(types.ErrorData(code=e.code, message=str(e), data=e.data or None)) from e

    # --------------------------------------------------------------------------
    # attach - Install both handlers on an MCP server
    # --------------------------------------------------------------------------
    # FastMCP registers its own prompt handlers on its low-level server in
    # __init__. Attaching replaces them, so prompts registered with
    # @mcp.prompt() on the same FastMCP instance are no longer listed.
    # --------------------------------------------------------------------------
    def attach(self, server: Union[Server, FastMCP]) -> Server:
        """Register prompts/list and prompts/get on server.

        Args:
            server: MCP low-level Server or FastMCP instance

        Returns:
            The low-level Server the handlers were installed on
        """
        lowlevel = server._mcp_server if isinstance(server, FastMCP) else server
        lowlevel.list_prompts()(self.list_prompts)
        lowlevel.get_prompt()(self.get_prompt)
        logger.debug("Attached %d prompts to %s", len(self._dispatcher.registry), lowlevel.name)
        return lowlevel


def build_registry(*sources: Any) -> PromptRegistry:
    """Build a registry from functions, classes, instances and modules.

    Classes are added without an instance (staticmethod/classmethod prompts),
    any other object is added as an instance.
    """
    builder = PromptRegistryBuilder()
    for source in sources:
        if isinstance(source, ModuleType):
            builder.add_module(source)
        elif inspect.isclass(source):
            builder.add_type(source)
        elif inspect.isfunction(source) or inspect.ismethod(source):
            builder.add_function(source)
        else:
            builder.add_instance(source)
    return builder.build()


def with_prompts(server: Union[Server, FastMCP], *sources: Any) -> PromptsCapability:
    """Build a registry from sources and attach it to server."""
    capability = PromptsCapability(PromptDispatcher(build_registry(*sources)))
    capability.attach(server)
    return capability

