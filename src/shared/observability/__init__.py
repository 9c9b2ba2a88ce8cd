# Observability package
from .exemplars import trace_mcp_tool, trace_resource_read
from .logging import (
    get_correlation_id,
    get_logger,
    new_correlation_id,
    set_correlation_id,
    setup_logging,
)
from .metrics import setup_metrics

__all__ = [
    "get_logger",
    "setup_logging",
    "get_correlation_id",
    "set_correlation_id",
    "new_correlation_id",
    "setup_metrics",
    "trace_mcp_tool",
    "trace_resource_read",
]
