"""
Read-only access to the documentation corpus.

The store is the only component that touches storage. It performs a plain
read per call: no retries, no caching, no transformation beyond the optional
section extraction requested through a ``#Heading`` fragment.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol, Tuple, Union

from markdown_it import MarkdownIt

from src.shared.observability import get_logger

from .errors import DocumentNotFound
from .types import DocumentRef

logger = get_logger(__name__)


class DocumentStore(Protocol):
    def load(self, ref: DocumentRef) -> str: ...

    def exists(self, ref: DocumentRef) -> bool: ...


def create_parser() -> MarkdownIt:
    """Markdown parser used only to locate headings and their source lines."""
    return MarkdownIt("commonmark")


def _heading_spans(raw_text: str) -> List[Tuple[int, str, int]]:
    """
    Collect (level, text, start_line) for every heading in the document.

    Uses the token line maps so fenced code containing ``#`` lines is never
    mistaken for a heading.
    """
    tokens = create_parser().parse(raw_text)
    spans: List[Tuple[int, str, int]] = []
    for idx, token in enumerate(tokens):
        if token.type != "heading_open" or not token.map:
            continue
        level = int(token.tag[1]) if token.tag.startswith("h") else 2
        inline = tokens[idx + 1] if idx + 1 < len(tokens) else None
        text = inline.content.strip() if inline is not None else ""
        spans.append((level, text, token.map[0]))
    return spans


def extract_section(raw_text: str, title: str) -> Optional[str]:
    """
    Extract the first section whose heading contains ``title``.

    The section runs from its heading through the line before the next
    heading of the same or a higher level (or end of document).

    Args:
        raw_text: Markdown content
        title: Case-insensitive substring of the wanted heading

    Returns:
        Section text, or None when no heading matches
    """
    needle = title.lower()
    spans = _heading_spans(raw_text)
    lines = raw_text.splitlines()

    for pos, (level, text, start) in enumerate(spans):
        if needle not in text.lower():
            continue
        end = len(lines)
        for next_level, _, next_start in spans[pos + 1 :]:
            if next_level <= level:
                end = next_start
                break
        return "\n".join(lines[start:end]).rstrip()
    return None


class FileSystemDocumentStore:
    """Loads documentation files relative to a base directory."""

    def __init__(self, base_path: Union[str, Path], encoding: str = "utf-8"):
        self._base_path = Path(base_path).resolve()
        self._encoding = encoding

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _resolve(self, ref: DocumentRef) -> Path:
        relative = ref.path.strip()
        if not relative:
            raise DocumentNotFound(str(ref), "empty path")
        candidate = (self._base_path / relative).resolve()
        # Refs are confined to the corpus directory
        if not candidate.is_relative_to(self._base_path):
            raise DocumentNotFound(str(ref), "outside documentation root")
        return candidate

    def exists(self, ref: DocumentRef) -> bool:
        try:
            return self._resolve(ref).is_file()
        except DocumentNotFound:
            return False

    def load(self, ref: DocumentRef) -> str:
        """
        Load a document (or one of its sections).

        Raises:
            DocumentNotFound: The file, or the requested section, does not exist
            OSError: Any other storage failure
        """
        path = self._resolve(ref)
        try:
            content = path.read_text(encoding=self._encoding)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise DocumentNotFound(str(ref)) from exc

        logger.debug("document_loaded", ref=str(ref), chars=len(content))

        section = ref.section
        if section is None:
            return content

        extracted = extract_section(content, section)
        if extracted is None:
            raise DocumentNotFound(str(ref), f'section "{section}" not found')
        return extracted
