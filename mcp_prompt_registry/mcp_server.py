"""MCP server host for a prompt registry.

Wraps a frozen PromptRegistry in a FastMCP server and serves it over stdio
or streamable HTTP (starlette app served by uvicorn).

Architecture:
    - FastMCP handles the protocol; PromptsCapability replaces its prompt
      handlers with the registry's dispatcher
    - run() serves in the calling thread
    - start() serves in a daemon thread with its own asyncio event loop,
      for embedding in applications that own the main thread
"""

import argparse
import asyncio
import importlib
import logging
import sys
import threading
from typing import Optional, Sequence

import uvicorn
from mcp.server.fastmcp import FastMCP

from .capability import PromptsCapability
from .config import Config, ConfigManager
from .dispatcher import PromptDispatcher
from .registry import PromptRegistry, PromptRegistryBuilder

logger = logging.getLogger(__name__)


class McpServer:
    """Serves a PromptRegistry over MCP.

    Attributes:
        _registry: Frozen prompt registry to expose
        _config: Server configuration (mode, HTTP host/port, etc.)
        _thread: Background thread when started with start()
        _uvicorn: Running uvicorn server in HTTP mode, used to stop it
    """

    def __init__(self, registry: PromptRegistry, config: Optional[Config] = None) -> None:
        self._registry = registry
        self._config = config or Config()
        self._thread: Optional[threading.Thread] = None
        self._uvicorn: Optional[uvicorn.Server] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def build(self) -> FastMCP:
        """Create the FastMCP instance with the registry's prompts attached."""
        mcp = FastMCP(self._config.server_name, streamable_http_path=self._config.http_path)
        PromptsCapability(PromptDispatcher(self._registry)).attach(mcp)
        return mcp

    def run(self) -> None:
        """Serve in the calling thread until the transport closes."""
        asyncio.run(self._async_main())

    def start(self) -> None:
        """Start serving in a daemon thread.

        Raises:
            RuntimeError: If already running
        """
        if self.is_running:
            raise RuntimeError("MCP server already running")
        self._thread = threading.Thread(target=self.run, name="mcp-prompt-server", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Signal shutdown.

        In HTTP mode uvicorn is asked to exit. In stdio mode the daemon
        thread ends with the process or when stdin closes.
        """
        if self._uvicorn is not None:
            self._uvicorn.should_exit = True

    async def _async_main(self) -> None:
        valid, error = self._config.is_valid_for_mode()
        if not valid:
            raise ValueError(f"Invalid configuration: {error}")

        mcp = self.build()
        logger.info(
            "Serving %d prompts in %s mode", len(self._registry), self._config.mode
        )
        if self._config.mode == "http":
            await self._run_http_mode(mcp)
        else:
            await mcp.run_stdio_async()

    async def _run_http_mode(self, mcp: FastMCP) -> None:
        app = mcp.streamable_http_app()
        config = uvicorn.Config(
            app,
            host=self._config.http_host,
            port=self._config.http_port,
            log_level=self._config.log_level,
        )
        self._uvicorn = uvicorn.Server(config)
        try:
            await self._uvicorn.serve()
        finally:
            self._uvicorn = None


def load_registry(module_names: Sequence[str]) -> PromptRegistry:
    """Import modules by dotted path and register their prompts."""
    builder = PromptRegistryBuilder()
    for module_name in module_names:
        builder.add_module(importlib.import_module(module_name))
    return builder.build()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Console entry point: mcp-prompt-server [--config FILE] [--module NAME ...]."""
    parser = argparse.ArgumentParser(description="Serve @Prompt functions over MCP")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument(
        "--module", action="append", default=[], dest="modules",
        help="module to scan for prompts (repeatable, added to prompt_modules)",
    )
    args = parser.parse_args(argv)

    config = ConfigManager(args.config).load()
    config.prompt_modules = [*config.prompt_modules, *args.modules]

    # stdout carries the protocol in stdio mode
    logging.basicConfig(level=config.log_level.upper(), stream=sys.stderr)

    valid, error = config.is_valid_for_mode()
    if not valid:
        parser.error(error)
    if not config.prompt_modules:
        parser.error("no prompt modules given (use --module or prompt_modules in the config file)")

    McpServer(load_registry(config.prompt_modules), config).run()
    return 0
