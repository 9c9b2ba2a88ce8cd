"""
Document composition.

Loads every ref of a matched entry and joins the contents in declared order.
A missing document becomes a visible placeholder; it never aborts the
composite. Reads may run concurrently, but results are placed by input
index so the output never depends on completion order.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import anyio
import anyio.to_thread

from src.shared.config import DEFAULT_MISSING_MARKER, DEFAULT_SEPARATOR
from src.shared.observability import get_logger
from src.shared.observability.metrics import docs_router_missing_documents_total

from .errors import DocumentNotFound
from .store import DocumentStore
from .types import CompositeResponse, DocumentRef, ResolvedDocument

logger = get_logger(__name__)


class DocumentComposer:
    def __init__(
        self,
        store: DocumentStore,
        separator: str = DEFAULT_SEPARATOR,
        missing_marker: str = DEFAULT_MISSING_MARKER,
        concurrent_reads: bool = True,
    ):
        self.store = store
        self.separator = separator
        self.missing_marker = missing_marker
        self.concurrent_reads = concurrent_reads

    def _load_one(self, ref: DocumentRef) -> ResolvedDocument:
        try:
            return ResolvedDocument(ref, self.store.load(ref))
        except DocumentNotFound as exc:
            docs_router_missing_documents_total.inc()
            logger.warning("document_missing", ref=str(ref), error=str(exc))
            return ResolvedDocument(ref, None)

    async def load_all(self, refs: Sequence[DocumentRef]) -> List[ResolvedDocument]:
        """
        Load every ref, preserving input order.

        Raises:
            OSError: Storage failure other than a missing document
        """
        if not self.concurrent_reads or len(refs) < 2:
            return [await anyio.to_thread.run_sync(self._load_one, ref) for ref in refs]

        results: List[Optional[ResolvedDocument]] = [None] * len(refs)
        failures: List[Optional[BaseException]] = [None] * len(refs)

        async def load_at(index: int, ref: DocumentRef) -> None:
            try:
                results[index] = await anyio.to_thread.run_sync(self._load_one, ref)
            except Exception as exc:
                failures[index] = exc

        async with anyio.create_task_group() as tg:
            for index, ref in enumerate(refs):
                tg.start_soon(load_at, index, ref)

        # Surface the first fault in input order, not as an exception group
        for exc in failures:
            if exc is not None:
                raise exc

        return [doc for doc in results if doc is not None]

    def placeholder(self, ref: DocumentRef) -> str:
        return self.missing_marker.format(ref=ref)

    def render(self, documents: Sequence[ResolvedDocument]) -> str:
        blocks = [
            doc.content if doc.content is not None else self.placeholder(doc.ref)
            for doc in documents
        ]
        return self.separator.join(blocks)

    async def compose(
        self, category: str, topic: str, refs: Sequence[DocumentRef]
    ) -> CompositeResponse:
        documents = await self.load_all(refs)
        response = CompositeResponse(
            category=category,
            topic=topic,
            documents=documents,
            body=self.render(documents),
        )
        logger.debug(
            "composite_built",
            category=category,
            topic=topic,
            documents=len(documents),
            missing=len(response.missing),
        )
        return response
