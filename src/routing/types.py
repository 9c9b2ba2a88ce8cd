"""
Core data structures for documentation routing.

Registry-side types (categories, topic entries, document refs) are frozen and
built once at startup. Request-side types (classifications, resolved documents,
composites, route results) are created per request and discarded afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Literal, Mapping, Optional, Tuple, Union

SECTION_SEPARATOR = "#"


@dataclass(frozen=True)
class DocumentRef:
    """Logical identifier of one content blob.

    The value is a corpus-relative path, optionally followed by
    ``#Heading`` to select a single markdown section of that file.
    """

    value: str

    @property
    def path(self) -> str:
        return self.value.split(SECTION_SEPARATOR, 1)[0]

    @property
    def section(self) -> Optional[str]:
        if SECTION_SEPARATOR not in self.value:
            return None
        section = self.value.split(SECTION_SEPARATOR, 1)[1].strip()
        return section or None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TopicLink:
    """Pointer from one registry entry to another (same or other category)."""

    category: str
    topic: str

    @property
    def qualified(self) -> str:
        return f"{self.category}/{self.topic}"


@dataclass(frozen=True)
class ToolSpec:
    """A documentation tool advertised to clients."""

    name: str
    description: str = ""
    title: Optional[str] = None


@dataclass(frozen=True)
class ToolBinding:
    """How a category is reached through a tool: tool name and argument."""

    name: str
    argument: str


@dataclass(frozen=True)
class TopicEntry:
    key: str
    docs: Tuple[DocumentRef, ...]
    title: Optional[str] = None
    description: Optional[str] = None
    related: Tuple[TopicLink, ...] = ()

    @property
    def display_name(self) -> str:
        return self.title or self.key


@dataclass(frozen=True)
class CategorySpec:
    """One partition of the documentation space with its two lookup tables."""

    name: str
    title: str
    description: str
    topics: Mapping[str, TopicEntry]
    params: Mapping[str, TopicEntry]
    tool: Optional[ToolBinding] = None
    resource_param: Optional[str] = None

    @property
    def keys(self) -> Tuple[str, ...]:
        """Every exact topic key followed by every template param value."""
        return tuple(self.topics) + tuple(self.params)


@dataclass(frozen=True)
class StaticResource:
    path: str
    category: str
    topic: str
    title: Optional[str] = None
    description: Optional[str] = None


class MatchKind(str, Enum):
    EXACT = "exact"
    TEMPLATE = "template"


class FallbackReason(str, Enum):
    UNRECOGNIZED = "unrecognized"
    UNMATCHED = "unmatched"


# ===== Requests =====


@dataclass(frozen=True)
class ToolRequest:
    kind: ClassVar[str] = "tool"

    name: str
    arguments: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class UriRequest:
    kind: ClassVar[str] = "uri"

    uri: str


@dataclass(frozen=True)
class PairRequest:
    kind: ClassVar[str] = "pair"

    category: str
    topic: str


RouteRequest = Union[ToolRequest, UriRequest, PairRequest]


# ===== Classification =====


@dataclass(frozen=True)
class Recognized:
    category: str
    topic: str
    extras: Tuple[str, ...] = ()
    source: Literal["tool", "uri", "pair"] = "pair"


@dataclass(frozen=True)
class Unrecognized:
    raw: str
    reason: str = "no known request shape"
    category: Optional[str] = None  # set when the request named a known category


Classification = Union[Recognized, Unrecognized]


# ===== Composition =====


@dataclass(frozen=True)
class RegistryMatch:
    category: str
    topic: str
    kind: MatchKind
    entry: TopicEntry
    refs: Tuple[DocumentRef, ...]


@dataclass(frozen=True)
class ResolvedDocument:
    ref: DocumentRef
    content: Optional[str]

    @property
    def missing(self) -> bool:
        return self.content is None


@dataclass
class CompositeResponse:
    category: str
    topic: str
    documents: list[ResolvedDocument] = field(default_factory=list)
    body: str = ""
    related: str = ""

    @property
    def missing(self) -> list[DocumentRef]:
        return [doc.ref for doc in self.documents if doc.missing]

    @property
    def text(self) -> str:
        if not self.related:
            return self.body
        return f"{self.body}\n\n{self.related}"


# ===== Route results =====


@dataclass(frozen=True)
class RouteOk:
    kind: ClassVar[str] = "ok"
    is_error: ClassVar[bool] = False

    text: str
    response: CompositeResponse


@dataclass(frozen=True)
class RouteRecovered:
    kind: ClassVar[str] = "recovered"
    is_error: ClassVar[bool] = False

    text: str
    reason: FallbackReason
    classification: Classification


@dataclass(frozen=True)
class RouteFault:
    kind: ClassVar[str] = "fault"
    is_error: ClassVar[bool] = True

    message: str

    @property
    def text(self) -> str:
        return f"Error: {self.message}"


RouteResult = Union[RouteOk, RouteRecovered, RouteFault]
