"""
Cross-reference augmentation.

Appends a "Related Topics" block built from the curated topic graph, with
the invocation needed to fetch each related entry.
"""

from __future__ import annotations

import json
from typing import List, Optional

from src.shared.observability import get_logger

from .registry import MappingRegistry
from .types import CompositeResponse, TopicLink

logger = get_logger(__name__)

RELATED_HEADING = "## Related Topics"


def tool_invocation(registry: MappingRegistry, category: str, topic: str) -> Optional[str]:
    """Render ``tool({"arg": "topic"})`` for an entry, if its category has a tool."""
    spec = registry.category(category)
    if spec is None or spec.tool is None:
        return None
    args = json.dumps({spec.tool.argument: topic})
    return f"{spec.tool.name}({args})"


class CrossReferenceAugmenter:
    def __init__(self, registry: MappingRegistry):
        self.registry = registry

    def links_for(self, category: str, topic: str) -> List[TopicLink]:
        """Related links in curated order, without duplicates or the topic itself."""
        links: List[TopicLink] = []
        for link in self.registry.related_topics(category, topic):
            if link.category == category and link.topic == topic:
                logger.warning("related_self_reference_skipped", category=category, topic=topic)
                continue
            if link in links:
                continue
            links.append(link)
        return links

    def _bullet(self, origin: str, link: TopicLink) -> str:
        entry = self.registry.entry(link.category, link.topic)
        key = link.topic if link.category == origin else link.qualified
        name = entry.display_name if entry is not None else link.topic

        line = f"- **{name}** (`{key}`)"
        if entry is not None and entry.description:
            line = f"{line}: {entry.description}"

        lines = [line]
        invocation = tool_invocation(self.registry, link.category, link.topic)
        if invocation:
            lines.append(f"  - Tool: `{invocation}`")
        uri = self.registry.uri_for(link.category, link.topic)
        if uri:
            lines.append(f"  - Resource: `{uri}`")
        return "\n".join(lines)

    def render(self, category: str, topic: str) -> str:
        links = self.links_for(category, topic)
        if not links:
            return ""
        bullets = "\n".join(self._bullet(category, link) for link in links)
        return f"{RELATED_HEADING}\n\n{bullets}"

    def augment(self, response: CompositeResponse) -> CompositeResponse:
        response.related = self.render(response.category, response.topic)
        return response
