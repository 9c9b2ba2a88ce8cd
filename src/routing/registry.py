"""
Mapping registry: the immutable routing table.

The registry is built once at startup from ``routes.yaml`` and holds, per
category, an exact-key table (``topic -> [DocumentRef, ...]``), a template
table (``param -> [DocumentRef, ...]``) and the curated topic graph. Every
consistency problem is collected and reported in one
``RegistryConfigurationError`` so a bad routing table fails at startup,
never at request time.
"""

from __future__ import annotations

import re
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import Field, ValidationError, field_validator

from src.shared.models import StrictModel
from src.shared.observability import get_logger

from .errors import RegistryConfigurationError
from .types import (
    CategorySpec,
    DocumentRef,
    MatchKind,
    RegistryMatch,
    StaticResource,
    ToolBinding,
    ToolSpec,
    TopicEntry,
    TopicLink,
)

logger = get_logger(__name__)

# One URI path segment: category names, topic keys, template params
SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


# ===== routes.yaml schema =====


class ToolDefinition(StrictModel):
    title: Optional[str] = None
    description: str = ""


class ToolBindingDefinition(StrictModel):
    name: str
    argument: str = "topic"


class EntryDefinition(StrictModel):
    title: Optional[str] = None
    description: Optional[str] = None
    docs: List[str] = Field(default_factory=list)
    related: List[str] = Field(default_factory=list)

    @field_validator("docs", mode="before")
    @classmethod
    def _single_doc_as_list(cls, v):
        if isinstance(v, str):
            return [v]
        return v


class CategoryDefinition(StrictModel):
    title: Optional[str] = None
    description: str = ""
    tool: Optional[ToolBindingDefinition] = None
    resource_param: Optional[str] = None
    topics: Dict[str, EntryDefinition] = Field(default_factory=dict)
    params: Dict[str, EntryDefinition] = Field(default_factory=dict)


class StaticResourceDefinition(StrictModel):
    category: str
    topic: str
    title: Optional[str] = None
    description: Optional[str] = None


class RoutesDefinition(StrictModel):
    scheme: str = "docs"
    tools: Dict[str, ToolDefinition] = Field(default_factory=dict)
    categories: Dict[str, CategoryDefinition]
    static_resources: Dict[str, StaticResourceDefinition] = Field(
        default_factory=dict
    )

    @field_validator("scheme")
    @classmethod
    def _scheme_is_plain(cls, v):
        if not re.match(r"^[A-Za-z][A-Za-z0-9+.-]*$", v):
            raise ValueError(f"invalid URI scheme: {v!r}")
        return v


# ===== Registry =====


class MappingRegistry:
    """Read-only lookup service over the routing tables."""

    def __init__(
        self,
        scheme: str,
        categories: Mapping[str, CategorySpec],
        static_resources: Mapping[str, StaticResource],
        tools: Optional[Mapping[str, ToolSpec]] = None,
    ):
        self._scheme = scheme
        self._categories = MappingProxyType(dict(categories))
        self._static = MappingProxyType(dict(static_resources))
        self._tools = MappingProxyType(dict(tools or {}))

    @property
    def scheme(self) -> str:
        return self._scheme

    @property
    def categories(self) -> Tuple[str, ...]:
        return tuple(self._categories)

    @property
    def static_resources(self) -> Mapping[str, StaticResource]:
        return self._static

    def category(self, name: str) -> Optional[CategorySpec]:
        return self._categories.get(name)

    def category_specs(self) -> Tuple[CategorySpec, ...]:
        return tuple(self._categories.values())

    @property
    def tools(self) -> Tuple[ToolSpec, ...]:
        return tuple(self._tools.values())

    def tool(self, name: str) -> Optional[ToolSpec]:
        return self._tools.get(name)

    def categories_for_tool(self, tool_name: str) -> Tuple[str, ...]:
        """Categories whose invocation binding names ``tool_name``."""
        return tuple(
            spec.name
            for spec in self._categories.values()
            if spec.tool is not None and spec.tool.name == tool_name
        )

    def lookup_exact(
        self, category: str, topic: str
    ) -> Optional[Tuple[DocumentRef, ...]]:
        spec = self._categories.get(category)
        if spec is None or topic not in spec.topics:
            return None
        return spec.topics[topic].docs

    def lookup_template(
        self, category: str, param: str
    ) -> Optional[Tuple[DocumentRef, ...]]:
        spec = self._categories.get(category)
        if spec is None or param not in spec.params:
            return None
        return spec.params[param].docs

    def lookup(self, category: str, topic: str) -> Optional[RegistryMatch]:
        """Exact table first; the template table only on an exact miss."""
        spec = self._categories.get(category)
        if spec is None:
            return None
        refs = self.lookup_exact(category, topic)
        if refs is not None:
            return RegistryMatch(
                category, topic, MatchKind.EXACT, spec.topics[topic], refs
            )
        refs = self.lookup_template(category, topic)
        if refs is not None:
            return RegistryMatch(
                category, topic, MatchKind.TEMPLATE, spec.params[topic], refs
            )
        return None

    def entry(self, category: str, topic: str) -> Optional[TopicEntry]:
        match = self.lookup(category, topic)
        return match.entry if match else None

    def contains(self, category: str, topic: str) -> bool:
        return self.lookup(category, topic) is not None

    def related_topics(self, category: str, topic: str) -> Tuple[TopicLink, ...]:
        entry = self.entry(category, topic)
        if entry is None:
            return ()
        return entry.related

    def all_entries(self, category: Optional[str] = None) -> List[Tuple[str, str]]:
        """Every (category, key) pair in registry order, topics before params."""
        if category is not None:
            spec = self._categories.get(category)
            specs = [spec] if spec is not None else []
        else:
            specs = list(self._categories.values())
        return [(spec.name, key) for spec in specs for key in spec.keys]

    def resolve_static(self, path: str) -> Optional[StaticResource]:
        return self._static.get(path)

    def uri_for(self, category: str, topic: str) -> Optional[str]:
        """Canonical resource URI of an entry, if its category is addressable."""
        spec = self._categories.get(category)
        if spec is None or spec.resource_param is None:
            return None
        return f"{self._scheme}://docs/{category}/{topic}"


# ===== Construction =====


def _parse_link(raw: str, category: str) -> TopicLink:
    if "/" in raw:
        other, topic = raw.split("/", 1)
        return TopicLink(other.strip(), topic.strip())
    return TopicLink(category, raw.strip())


def _build_entry(
    category: str, key: str, definition: EntryDefinition, errors: List[str]
) -> TopicEntry:
    if not SEGMENT_PATTERN.match(key):
        errors.append(f"{category}: key {key!r} is not a valid URI segment")
    if not definition.docs:
        errors.append(f"{category}/{key}: no documents mapped")
    if any(not doc.strip() for doc in definition.docs):
        errors.append(f"{category}/{key}: empty document ref")

    links: List[TopicLink] = []
    for raw in definition.related:
        link = _parse_link(raw, category)
        if link.category == category and link.topic == key:
            errors.append(f"{category}/{key}: topic lists itself as related")
            continue
        if link not in links:
            links.append(link)

    return TopicEntry(
        key=key,
        docs=tuple(DocumentRef(doc.strip()) for doc in definition.docs),
        title=definition.title,
        description=definition.description,
        related=tuple(links),
    )


def build_registry(
    definition: Union[RoutesDefinition, dict], scheme: Optional[str] = None
) -> MappingRegistry:
    """
    Build the immutable registry, validating the whole routing table.

    Args:
        definition: Parsed routes definition (or the raw mapping from YAML)
        scheme: Optional URI scheme override

    Raises:
        RegistryConfigurationError: If any consistency check fails
    """
    if not isinstance(definition, RoutesDefinition):
        try:
            definition = RoutesDefinition.model_validate(definition)
        except ValidationError as exc:
            raise RegistryConfigurationError(
                [f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()]
            ) from exc

    errors: List[str] = []
    categories: Dict[str, CategorySpec] = {}
    tools = {
        name: ToolSpec(name=name, description=tool.description, title=tool.title)
        for name, tool in definition.tools.items()
    }

    if not definition.categories:
        errors.append("at least one category is required")

    for name, cat in definition.categories.items():
        if not SEGMENT_PATTERN.match(name):
            errors.append(f"category {name!r} is not a valid URI segment")

        overlap = sorted(set(cat.topics) & set(cat.params))
        for key in overlap:
            errors.append(
                f"{name}: {key!r} is registered as both an exact topic and a "
                f"template param"
            )

        if not cat.topics and not cat.params:
            errors.append(f"{name}: category has no topics or params")

        if cat.resource_param is not None and not re.match(
            r"^[A-Za-z_][A-Za-z0-9_]*$", cat.resource_param
        ):
            errors.append(f"{name}: invalid resource_param {cat.resource_param!r}")

        tool = None
        if cat.tool is not None:
            if cat.tool.name not in tools:
                errors.append(f"{name}: bound to undeclared tool {cat.tool.name!r}")
            tool = ToolBinding(cat.tool.name, cat.tool.argument)

        topics = {
            key: _build_entry(name, key, entry, errors)
            for key, entry in cat.topics.items()
        }
        params = {
            key: _build_entry(name, key, entry, errors)
            for key, entry in cat.params.items()
        }

        categories[name] = CategorySpec(
            name=name,
            title=cat.title or name,
            description=cat.description,
            topics=MappingProxyType(topics),
            params=MappingProxyType(params),
            tool=tool,
            resource_param=cat.resource_param,
        )

    # Topic graph edges must land on registered entries
    for spec in categories.values():
        for entry in list(spec.topics.values()) + list(spec.params.values()):
            for link in entry.related:
                target = categories.get(link.category)
                if target is None or link.topic not in target.keys:
                    errors.append(
                        f"{spec.name}/{entry.key}: related entry "
                        f"{link.qualified!r} is not registered"
                    )

    static: Dict[str, StaticResource] = {}
    for path, res in definition.static_resources.items():
        segments = path.split("/")
        if not all(SEGMENT_PATTERN.match(seg) for seg in segments):
            errors.append(f"static resource {path!r} is not a valid docs path")
        target = categories.get(res.category)
        if target is None or res.topic not in target.keys:
            errors.append(
                f"static resource {path!r} points at unregistered entry "
                f"{res.category}/{res.topic}"
            )
        static[path] = StaticResource(
            path=path,
            category=res.category,
            topic=res.topic,
            title=res.title,
            description=res.description,
        )

    if errors:
        raise RegistryConfigurationError(errors)

    registry = MappingRegistry(scheme or definition.scheme, categories, static, tools)
    logger.info(
        "mapping_registry_built",
        scheme=registry.scheme,
        tools=len(tools),
        categories=len(categories),
        entries=len(registry.all_entries()),
        static_resources=len(static),
    )
    return registry


def load_registry(path: Union[str, Path], scheme: Optional[str] = None) -> MappingRegistry:
    """
    Load and build the registry from a routes YAML file.

    Raises:
        FileNotFoundError: If the routes file does not exist
        RegistryConfigurationError: If the routing table is inconsistent
    """
    routes_path = Path(path)
    if not routes_path.exists():
        raise FileNotFoundError(f"Routes file not found: {routes_path}")

    logger.info("loading_routes", path=str(routes_path))
    with open(routes_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return build_registry(raw, scheme=scheme)
