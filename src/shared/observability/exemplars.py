# OpenTelemetry spans paired with Prometheus metrics for MCP handlers

import time
from contextlib import contextmanager
from typing import Any, Dict

from opentelemetry import trace
from opentelemetry.trace import SpanKind

from .logging import get_logger
from .metrics import (
    mcp_resource_reads_total,
    mcp_tool_calls_total,
    mcp_tool_duration_seconds,
)

logger = get_logger(__name__)


def get_trace_context() -> Dict[str, str]:
    """
    Get current trace context for exemplar linking.

    Returns:
        Dictionary with trace_id and span_id
    """
    span = trace.get_current_span()
    if span and span.is_recording():
        ctx = span.get_span_context()
        return {
            "trace_id": format(ctx.trace_id, "032x"),
            "span_id": format(ctx.span_id, "016x"),
        }
    return {}


@contextmanager
def trace_mcp_tool(tool_name: str, arguments: Dict[str, Any]):
    """
    Context manager to trace MCP tool execution with metrics and exemplars.

    The duration is observed with the span's trace context as exemplar, so a
    slow bucket links back to its trace when an SDK is installed.

    Args:
        tool_name: Name of the MCP tool
        arguments: Tool arguments

    Yields:
        Span object
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span(
        f"mcp.tool.{tool_name}",
        kind=SpanKind.INTERNAL,
        attributes={
            "mcp.tool.name": tool_name,
            "mcp.tool.args": str(arguments),
        },
    ) as span:
        trace_ctx = get_trace_context()
        start = time.perf_counter()
        try:
            yield span
            mcp_tool_calls_total.labels(tool_name=tool_name, status="success").inc()
            span.set_attribute("mcp.tool.status", "success")
        except Exception as e:
            mcp_tool_calls_total.labels(tool_name=tool_name, status="error").inc()
            span.set_attribute("mcp.tool.status", "error")
            span.set_attribute("mcp.tool.error", str(e))
            span.record_exception(e)
            raise
        finally:
            mcp_tool_duration_seconds.labels(tool_name=tool_name).observe(
                time.perf_counter() - start, exemplar=trace_ctx or None
            )


@contextmanager
def trace_resource_read(uri: str):
    """
    Context manager to trace an MCP resource read.

    Args:
        uri: Requested resource URI

    Yields:
        Span object
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span(
        "mcp.resource.read",
        kind=SpanKind.INTERNAL,
        attributes={"mcp.resource.uri": uri},
    ) as span:
        try:
            yield span
            mcp_resource_reads_total.labels(status="success").inc()
        except Exception as e:
            mcp_resource_reads_total.labels(status="error").inc()
            span.set_attribute("mcp.resource.error", str(e))
            span.record_exception(e)
            raise
