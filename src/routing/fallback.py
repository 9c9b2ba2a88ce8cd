"""
Fallback listing for requests that cannot be resolved.

The listing is ordinary content: it tells the caller what exists and how
to ask for it, so a wrong topic name is corrected by retrying rather than
by error handling.
"""

from __future__ import annotations

from typing import List, Optional

from src.shared.observability import get_logger

from .augmenter import tool_invocation
from .registry import MappingRegistry
from .types import CategorySpec, Classification, FallbackReason, Recognized, Unrecognized

logger = get_logger(__name__)

NOT_FOUND_HEADING = "# Documentation Not Found"


def _code_list(values) -> str:
    return ", ".join(f"`{value}`" for value in values) or "_none_"


class FallbackSynthesizer:
    def __init__(self, registry: MappingRegistry, examples_per_listing: int = 2):
        self.registry = registry
        self.examples_per_listing = examples_per_listing

    def reason_line(self, classification: Classification) -> str:
        if isinstance(classification, Recognized):
            if self.registry.category(classification.category) is None:
                return f'Unknown category "{classification.category}".'
            return (
                f'Unknown topic "{classification.topic}" in category '
                f'"{classification.category}".'
            )
        return f"Unrecognized request: `{classification.raw}` ({classification.reason})."

    def _valid_values(self, spec: CategorySpec) -> str:
        lines = [f"## Valid values for `{spec.name}`", ""]
        if spec.tool is not None:
            lines.append(f"Argument `{spec.tool.argument}` of `{spec.tool.name}` accepts:")
            lines.append("")
        lines.extend(f"- `{key}`" for key in spec.keys)
        return "\n".join(lines)

    def _category_block(self, spec: CategorySpec) -> str:
        lines = [f"### {spec.name}: {spec.title}"]
        if spec.description:
            lines.append(spec.description.strip().splitlines()[0])
        lines.append("")
        if spec.tool is not None:
            lines.append(f"- Tool: `{spec.tool.name}` (argument `{spec.tool.argument}`)")
        if spec.resource_param is not None:
            lines.append(
                f"- Resource: `{self.registry.scheme}://docs/{spec.name}/{{{spec.resource_param}}}`"
            )
        if spec.topics:
            lines.append(f"- Topics: {_code_list(spec.topics)}")
        if spec.params:
            lines.append(f"- Values: {_code_list(spec.params)}")
        return "\n".join(lines)

    def examples(self) -> List[str]:
        """One tool-style and one URI-style example, from registered entries only."""
        tool_example: Optional[str] = None
        uri_example: Optional[str] = None
        for category, topic in self.registry.all_entries():
            if tool_example is None:
                invocation = tool_invocation(self.registry, category, topic)
                if invocation:
                    tool_example = f"Tool: `{invocation}`"
            if uri_example is None:
                uri = self.registry.uri_for(category, topic)
                if uri:
                    uri_example = f"Resource: `{uri}`"
            if tool_example and uri_example:
                break

        if uri_example is None:
            for path in self.registry.static_resources:
                uri_example = f"Resource: `{self.registry.scheme}://docs/{path}`"
                break

        found = [example for example in (tool_example, uri_example) if example]
        return found[: self.examples_per_listing]

    def known_category(self, classification: Classification) -> Optional[CategorySpec]:
        name = classification.category
        return self.registry.category(name) if name else None

    def synthesize(self, classification: Classification) -> str:
        sections = [NOT_FOUND_HEADING, self.reason_line(classification)]

        spec = self.known_category(classification)
        if spec is not None:
            sections.append(self._valid_values(spec))

        sections.append("## Available Categories")
        sections.extend(
            self._category_block(category) for category in self.registry.category_specs()
        )

        examples = self.examples()
        if examples:
            sections.append(
                "## Example Invocations\n\n" + "\n".join(f"- {example}" for example in examples)
            )

        return "\n\n".join(sections)

    @staticmethod
    def reason_for(classification: Classification) -> FallbackReason:
        if isinstance(classification, Unrecognized):
            return FallbackReason.UNRECOGNIZED
        return FallbackReason.UNMATCHED
