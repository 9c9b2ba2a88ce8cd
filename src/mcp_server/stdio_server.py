"""
STDIO MCP server entry point.
Runs the shared low-level MCP server over STDIO transport.
"""

from __future__ import annotations

import builtins
import logging

# --- STDIO-SAFE BOOTSTRAP: Must be at the very top ---
import os
import sys
import warnings

# Unbuffered, UTF-8 (avoids partial writes / encoding surprises)
os.environ.setdefault("PYTHONUNBUFFERED", "1")

# Read into Settings.stdio_mode; setup_logging() then keeps every renderer on stderr
os.environ.setdefault("DOCS_ROUTER_STDIO_MODE", "1")

# 1) Route all Python logging to STDERR (never STDOUT)
root = logging.getLogger()
# Remove any handlers installed during module import
for h in list(root.handlers):
    root.removeHandler(h)

stderr_handler = logging.StreamHandler(sys.stderr)
stderr_handler.setFormatter(
    logging.Formatter(fmt="%(asctime)s %(levelname)s %(name)s: %(message)s")
)
root.addHandler(stderr_handler)
root.setLevel(logging.INFO)

# Silence noisy libraries that might spam
for noisy in ("opentelemetry", "asyncio", "markdown_it"):
    logging.getLogger(noisy).setLevel(logging.WARNING)

# 2) Redirect accidental print() calls to STDERR
_builtin_print = builtins.print


def _stderr_print(*args, **kwargs):
    kwargs.setdefault("file", sys.stderr)
    return _builtin_print(*args, **kwargs)


builtins.print = _stderr_print

# Optional: demote Deprecation/Runtime warnings to STDERR (default)
warnings.simplefilter("default")
# --- END STDIO-SAFE BOOTSTRAP ---

import anyio  # noqa: E402
from mcp.server.lowlevel.server import NotificationOptions  # noqa: E402
from mcp.server.stdio import stdio_server  # noqa: E402

from src.mcp_server.mcp_app import build_mcp_server  # noqa: E402
from src.shared.config import init_config  # noqa: E402
from src.shared.observability import get_logger, setup_logging  # noqa: E402

logger = get_logger(__name__)


async def run_stdio_server() -> None:
    server = build_mcp_server()
    init_options = server.create_initialization_options(
        notification_options=NotificationOptions()
    )
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, init_options)


def main() -> None:
    config, settings = init_config()
    setup_logging(config.app.log_level, stdio_mode=settings.stdio_mode)
    logger.info(
        "Starting documentation router MCP server with STDIO transport",
        server=config.server.name,
        env=settings.env,
    )
    anyio.run(run_stdio_server)


if __name__ == "__main__":
    main()
