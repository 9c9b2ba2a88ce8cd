"""
Routing engine: classify, look up, compose, augment, or fall back.

Every request ends in exactly one ``RouteResult``. Recoverable conditions
(unrecognized request, unknown topic, missing document) become ordinary
content; only unexpected faults become ``RouteFault``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from src.shared.config import Config, DocsConfig, RoutingConfig, get_routes_path, resolve_path
from src.shared.observability import get_logger
from src.shared.observability.metrics import (
    docs_router_composed_bytes,
    docs_router_fallbacks_total,
    docs_router_requests_total,
    docs_router_resolve_duration_seconds,
)

from .augmenter import CrossReferenceAugmenter
from .classifier import RequestClassifier
from .composer import DocumentComposer
from .fallback import FallbackSynthesizer
from .registry import MappingRegistry, load_registry
from .store import DocumentStore, FileSystemDocumentStore
from .types import (
    Classification,
    DocumentRef,
    PairRequest,
    Recognized,
    RegistryMatch,
    RouteFault,
    RouteOk,
    RouteRecovered,
    RouteRequest,
    RouteResult,
    ToolRequest,
    UriRequest,
)

logger = get_logger(__name__)


class RoutingEngine:
    """
    Resolves documentation requests against an immutable registry.

    The engine holds no per-request state, so one instance serves
    concurrent requests without locking.
    """

    def __init__(
        self,
        registry: MappingRegistry,
        store: DocumentStore,
        config: Optional[Config] = None,
    ):
        docs = config.docs if config is not None else DocsConfig()
        routing = config.routing if config is not None else RoutingConfig()

        self.registry = registry
        self.store = store
        self.classifier = RequestClassifier(registry)
        self.composer = DocumentComposer(
            store,
            separator=docs.separator,
            missing_marker=docs.missing_marker,
            concurrent_reads=docs.concurrent_reads,
        )
        self.augmenter = CrossReferenceAugmenter(registry)
        self.fallback = FallbackSynthesizer(
            registry, examples_per_listing=routing.examples_per_listing
        )

    @classmethod
    def from_config(
        cls, config: Config, config_path: Optional[Path] = None
    ) -> "RoutingEngine":
        """
        Build registry, store and engine from application config.

        Raises:
            FileNotFoundError: routes.yaml is missing
            RegistryConfigurationError: routes.yaml is inconsistent
        """
        routes_path = get_routes_path(config, config_path)
        registry = load_registry(routes_path, scheme=config.routing.uri_scheme)
        store = FileSystemDocumentStore(
            resolve_path(config.docs.base_path), encoding=config.docs.encoding
        )
        logger.info(
            "routing_engine_ready",
            routes_path=str(routes_path),
            docs_path=str(store.base_path),
            scheme=registry.scheme,
        )
        return cls(registry, store, config)

    # ===== Entry points =====

    async def resolve(self, request: RouteRequest) -> RouteResult:
        if isinstance(request, ToolRequest):
            return await self.resolve_tool(request.name, request.arguments)
        if isinstance(request, UriRequest):
            return await self.resolve_uri(request.uri)
        if isinstance(request, PairRequest):
            return await self.resolve_pair(request.category, request.topic)
        return RouteFault(f"Unsupported request type: {type(request).__name__}")

    async def resolve_tool(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> RouteResult:
        return await self._run(
            "tool", lambda: self.classifier.classify_tool(name, arguments)
        )

    async def resolve_uri(self, uri: str) -> RouteResult:
        return await self._run("uri", lambda: self.classifier.classify_uri(uri))

    async def resolve_pair(self, category: str, topic: str) -> RouteResult:
        return await self._run(
            "pair", lambda: Recognized(category, topic, source="pair")
        )

    # ===== Pipeline =====

    async def _run(self, kind: str, classify) -> RouteResult:
        with docs_router_resolve_duration_seconds.labels(kind=kind).time():
            try:
                result = await self._route(classify())
            except Exception as e:
                logger.error("route_fault", kind=kind, error=str(e), exc_info=True)
                result = RouteFault(str(e) or type(e).__name__)

        docs_router_requests_total.labels(kind=kind, outcome=result.kind).inc()
        if isinstance(result, RouteOk):
            docs_router_composed_bytes.observe(len(result.text.encode("utf-8")))
        return result

    async def _route(self, classification: Classification) -> RouteResult:
        logger.debug("request_classified", classification=repr(classification))

        if not isinstance(classification, Recognized):
            return self._recover(classification)

        match = self.registry.lookup(classification.category, classification.topic)
        if match is None:
            return self._recover(classification)

        logger.debug(
            "registry_matched",
            category=match.category,
            topic=match.topic,
            kind=match.kind.value,
            refs=len(match.refs),
        )

        refs = self._collect_refs(classification, match)
        response = await self.composer.compose(match.category, match.topic, refs)
        self.augmenter.augment(response)

        logger.info(
            "route_resolved",
            category=match.category,
            topic=match.topic,
            documents=len(response.documents),
            missing=len(response.missing),
            related=bool(response.related),
        )
        return RouteOk(response.text, response)

    def _collect_refs(
        self, classification: Recognized, match: RegistryMatch
    ) -> List[DocumentRef]:
        """Primary refs, then each extra topic's refs; first occurrence wins."""
        refs: List[DocumentRef] = list(dict.fromkeys(match.refs))
        for extra in classification.extras:
            if extra == match.topic:
                continue
            extra_match = self.registry.lookup(match.category, extra)
            if extra_match is None:
                logger.info(
                    "extra_topic_dropped", category=match.category, topic=extra
                )
                continue
            refs.extend(ref for ref in extra_match.refs if ref not in refs)
        return refs

    def _recover(self, classification: Classification) -> RouteRecovered:
        reason = self.fallback.reason_for(classification)
        docs_router_fallbacks_total.labels(reason=reason.value).inc()
        logger.info(
            "route_fallback",
            reason=reason.value,
            classification=repr(classification),
        )
        return RouteRecovered(
            self.fallback.synthesize(classification), reason, classification
        )
