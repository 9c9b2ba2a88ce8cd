# Documentation routing: registry, classifier, composer and fallback
from .engine import RoutingEngine
from .errors import DocumentNotFound, RegistryConfigurationError, RouterError
from .registry import MappingRegistry, build_registry, load_registry
from .store import DocumentStore, FileSystemDocumentStore
from .types import (
    DocumentRef,
    PairRequest,
    RouteFault,
    RouteOk,
    RouteRecovered,
    RouteResult,
    ToolRequest,
    UriRequest,
)

__all__ = [
    "RoutingEngine",
    "MappingRegistry",
    "build_registry",
    "load_registry",
    "DocumentStore",
    "FileSystemDocumentStore",
    "DocumentRef",
    "ToolRequest",
    "UriRequest",
    "PairRequest",
    "RouteOk",
    "RouteRecovered",
    "RouteFault",
    "RouteResult",
    "RouterError",
    "DocumentNotFound",
    "RegistryConfigurationError",
]
