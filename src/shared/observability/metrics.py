# Prometheus metrics for the documentation router

from prometheus_client import Counter, Histogram, Info

from ..config import Config
from .logging import get_logger

logger = get_logger(__name__)

# ===== MCP tool metrics =====
mcp_tool_calls_total = Counter(
    "mcp_tool_calls_total",
    "Total MCP tool calls",
    ["tool_name", "status"],
)

mcp_tool_duration_seconds = Histogram(
    "mcp_tool_duration_seconds",
    "MCP tool execution duration in seconds",
    ["tool_name"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

mcp_resource_reads_total = Counter(
    "mcp_resource_reads_total",
    "Total MCP resource reads",
    ["status"],
)

# ===== Routing metrics =====
docs_router_requests_total = Counter(
    "docs_router_requests_total",
    "Routed documentation requests by request kind and outcome",
    ["kind", "outcome"],  # kind: tool, uri, pair; outcome: ok, recovered, fault
)

docs_router_fallbacks_total = Counter(
    "docs_router_fallbacks_total",
    "Requests answered with the fallback listing",
    ["reason"],  # reason: unrecognized, unmatched
)

docs_router_missing_documents_total = Counter(
    "docs_router_missing_documents_total",
    "Document refs replaced by a missing-document placeholder",
)

docs_router_resolve_duration_seconds = Histogram(
    "docs_router_resolve_duration_seconds",
    "End-to-end resolution time (classify, lookup, load, compose, augment)",
    ["kind"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

docs_router_composed_bytes = Histogram(
    "docs_router_composed_bytes",
    "Size of composed responses in bytes",
    buckets=(256, 1024, 4096, 16384, 65536, 262144, 1048576),
)

# ===== Service info =====
service_info = Info("docs_router_service", "Documentation router service information")


def setup_metrics(config: Config) -> None:
    """
    Setup Prometheus metrics collection.

    Args:
        config: Application configuration
    """
    logger.info("Setting up Prometheus metrics")

    service_info.info(
        {
            "version": config.app.version,
            "environment": config.app.environment,
            "service_name": config.app.name,
        }
    )

    logger.info("Prometheus metrics enabled")
