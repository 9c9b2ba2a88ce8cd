"""
Shared MCP server factory: documentation tools, resources and prompts.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Optional

import mcp.types as types
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.lowlevel.server import Server, request_ctx

from src.mcp_server.prompts import list_prompts, render_prompt
from src.routing import RoutingEngine
from src.routing.errors import RouterError
from src.routing.registry import MappingRegistry
from src.routing.tool_args import ARGUMENT_MODELS, input_schema
from src.routing.types import CategorySpec, RouteFault
from src.shared.config import Config, get_config
from src.shared.observability import (
    get_logger,
    new_correlation_id,
    setup_metrics,
    trace_mcp_tool,
    trace_resource_read,
)

logger = get_logger(__name__)

MARKDOWN = "text/markdown"

DEFAULT_INSTRUCTIONS = (
    "You are connected to the Mvp24Hours .NET documentation router. "
    "Start with mvp24h_get_started for an overview, use the advisor tools to pick an "
    "architecture or database, then fetch focused documentation with the topic tools. "
    "If a request cannot be resolved the response lists every valid category and topic; "
    "retry with one of the listed values."
)


def _get_request_context() -> Optional[Any]:
    try:
        return request_ctx.get()
    except LookupError:
        return None


def _get_deps() -> Deps:
    request_context = _get_request_context()
    if request_context is None:
        raise RuntimeError("MCP request context is required")
    return request_context.lifespan_context


@dataclass
class Deps:
    """Dependencies shared across MCP requests via lifespan context."""

    engine: Optional[RoutingEngine] = None
    config: Optional[Config] = None


@asynccontextmanager
async def lifespan(server: Server) -> AsyncIterator[Deps]:
    """
    Build the registry, store and engine once and share them with every request.

    A bad routing table or a missing routes file fails here, before the
    server accepts its first request.
    """
    config = get_config()
    deps = Deps(config=config)
    logger.info("server_lifespan_starting", server=config.server.name)
    setup_metrics(config)
    deps.engine = RoutingEngine.from_config(config)
    try:
        yield deps
    finally:
        logger.info("server_lifespan_stopped")


_READONLY = types.ToolAnnotations(
    readOnlyHint=True,
    openWorldHint=False,
    idempotentHint=True,
    destructiveHint=False,
)


def _tool_list(registry: MappingRegistry) -> list[types.Tool]:
    tools: list[types.Tool] = []
    for spec in registry.tools:
        model = ARGUMENT_MODELS.get(spec.name)
        if model is None:
            logger.warning("tool_without_argument_model", tool=spec.name)
            continue
        tools.append(
            types.Tool(
                name=spec.name,
                title=spec.title,
                description=spec.description.strip(),
                inputSchema=input_schema(model, registry),
                annotations=_READONLY,
            )
        )
    return tools


def _first_line(text: str) -> str:
    stripped = text.strip()
    return stripped.splitlines()[0] if stripped else ""


def _resource_list(registry: MappingRegistry) -> list[types.Resource]:
    resources: list[types.Resource] = []
    for path, static in registry.static_resources.items():
        entry = registry.entry(static.category, static.topic)
        resources.append(
            types.Resource(
                uri=f"{registry.scheme}://docs/{path}",
                name=path,
                title=static.title or (entry.display_name if entry else path),
                description=static.description or (entry.description if entry else None),
                mimeType=MARKDOWN,
            )
        )

    for spec in registry.category_specs():
        if spec.resource_param is None:
            continue
        for key, entry in spec.topics.items():
            resources.append(
                types.Resource(
                    uri=registry.uri_for(spec.name, key),
                    name=f"{spec.name}/{key}",
                    title=f"{spec.title}: {entry.display_name}",
                    description=entry.description,
                    mimeType=MARKDOWN,
                )
            )
    return resources


def _template_description(spec: CategorySpec) -> str:
    values = ", ".join(spec.keys)
    summary = _first_line(spec.description) or f"{spec.title} documentation."
    return f"{summary} Values for {{{spec.resource_param}}}: {values}"


def _template_list(registry: MappingRegistry) -> list[types.ResourceTemplate]:
    return [
        types.ResourceTemplate(
            uriTemplate=f"{registry.scheme}://docs/{spec.name}/{{{spec.resource_param}}}",
            name=spec.name,
            title=spec.title,
            description=_template_description(spec),
            mimeType=MARKDOWN,
        )
        for spec in registry.category_specs()
        if spec.resource_param is not None
    ]


def build_mcp_server(
    engine: Optional[RoutingEngine] = None, config: Optional[Config] = None
) -> Server:
    """
    Create the low-level MCP server.

    Args:
        engine: Prebuilt engine; when omitted the lifespan builds one from config
        config: Application config; loaded from disk when neither is given
    """
    if config is None:
        config = get_config() if engine is None else Config()

    if engine is None:
        server_lifespan = lifespan
    else:

        @asynccontextmanager
        async def server_lifespan(server: Server) -> AsyncIterator[Deps]:
            yield Deps(engine=engine, config=config)

    server = Server(
        config.server.name,
        version=config.app.version,
        instructions=config.server.instructions or DEFAULT_INSTRUCTIONS,
        lifespan=server_lifespan,
    )

    def _engine() -> RoutingEngine:
        if engine is not None:
            return engine
        deps = _get_deps()
        if deps.engine is None:
            raise RuntimeError("Routing engine is not initialized")
        return deps.engine

    @server.list_tools()
    async def _list_tools():
        return _tool_list(_engine().registry)

    # Argument values are checked by the router so unknown ones reach the fallback listing
    @server.call_tool(validate_input=False)
    async def _call_tool(name: str, arguments: dict | None):
        new_correlation_id()
        with trace_mcp_tool(name, arguments or {}) as span:
            result = await _engine().resolve_tool(name, arguments or {})
            span.set_attribute("docs_router.outcome", result.kind)
            # The SDK turns a raised error into a CallToolResult with isError set
            if isinstance(result, RouteFault):
                raise RouterError(result.message)

        return [types.TextContent(type="text", text=result.text)]

    @server.list_resources()
    async def _list_resources():
        return _resource_list(_engine().registry)

    @server.list_resource_templates()
    async def _list_resource_templates():
        return _template_list(_engine().registry)

    @server.read_resource()
    async def _read_resource(uri):
        uri = str(uri)
        new_correlation_id()
        with trace_resource_read(uri):
            result = await _engine().resolve_uri(uri)
            if isinstance(result, RouteFault):
                raise RouterError(result.message)
        return [ReadResourceContents(content=result.text, mime_type=MARKDOWN)]

    @server.list_prompts()
    async def _list_prompts():
        return list_prompts()

    @server.get_prompt()
    async def _get_prompt(name: str, arguments: dict[str, str] | None):
        return render_prompt(name, arguments)

    return server
