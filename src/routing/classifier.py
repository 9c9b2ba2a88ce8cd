"""
Request classification.

Turns a tool call or a resource URI into a canonical ``(category, topic)``
pair. Classification is structural only: a well-formed request naming an
unregistered topic is still ``Recognized``; the registry decides whether it
exists. Nothing in here raises.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple

from pydantic import ValidationError

from src.shared.observability import get_logger

from .registry import SEGMENT_PATTERN, MappingRegistry
from .tool_args import (
    AiImplementationArgs,
    ArchitectureAdvisorArgs,
    DatabaseAdvisorArgs,
    GetStartedArgs,
    GetTemplateArgs,
    MessagingPatternsArgs,
    ModernizationGuideArgs,
    ObservabilitySetupArgs,
    ToolArgs,
    enum_violation,
    parse_tool_arguments,
)
from .types import Classification, Recognized, Unrecognized

logger = get_logger(__name__)

OVERVIEW = "overview"

# use_case -> ai-template key
AI_RECOMMENDATIONS: Dict[str, str] = {
    "chatbot": "sk-chat-completion",
    "qa-documents": "sk-rag",
    "tool-augmented": "sk-plugins",
    "complex-reasoning": "skg-chain-of-thought",
    "multi-agent": "skg-multi-agent",
    "workflow": "skg-graph-executor",
    "human-oversight": "skg-human-in-loop",
    "enterprise": "agent-framework-basic",
}

# Checked in order; first requirement present wins
ARCHITECTURE_REQUIREMENT_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("microservices",), "microservices"),
    (("domain-driven", "event-sourcing"), "ddd"),
    (("cqrs",), "cqrs"),
    (("external-integrations",), "hexagonal"),
    (("audit-trail",), "event-driven"),
    (("rapid-prototype",), "minimal-api"),
]

# Listing shown for an out-of-set advisor value; other tools use their first bound category
HOME_CATEGORIES: Dict[str, str] = {
    "mvp24h_architecture_advisor": "template",
    "mvp24h_database_advisor": "database",
    "mvp24h_ai_implementation": "ai-template",
    "mvp24h_observability_setup": "observability",
}


def _raw(tool_name: str, arguments: Optional[Dict[str, Any]]) -> str:
    try:
        rendered = json.dumps(arguments or {}, sort_keys=True)
    except (TypeError, ValueError):
        rendered = repr(arguments)
    return f"{tool_name}({rendered})"


# ===== Per-tool rules =====


def recommend_architecture(args: ArchitectureAdvisorArgs) -> str:
    """Pick an architecture template from requirements, then from sizing."""
    for triggers, template in ARCHITECTURE_REQUIREMENT_RULES:
        if any(req in args.requirements for req in triggers):
            return template

    template = "simple-nlayers"
    if args.complexity == "low" or (
        args.entity_count == "few" and args.business_rules == "simple"
    ):
        template = "minimal-api"
    elif args.complexity == "medium" or args.business_rules == "moderate":
        template = "simple-nlayers"
    elif args.complexity == "high" or args.business_rules == "complex":
        template = "complex-nlayers"
    elif args.complexity == "very-high":
        template = "clean-architecture"

    if args.team_size == "large" and template == "complex-nlayers":
        template = "clean-architecture"
    if args.entity_count == "many" and template == "simple-nlayers":
        template = "complex-nlayers"
    return template


def recommend_database_provider(args: DatabaseAdvisorArgs) -> str:
    if "caching" in args.requirements:
        return "redis"
    if "flexible-schema" in args.requirements:
        return "mongodb"
    if "high-write-throughput" in args.requirements:
        return "postgresql"
    if args.data_type == "document":
        return "mongodb"
    if args.data_type == "key-value":
        return "redis"
    return "postgresql"


def recommend_database_patterns(args: DatabaseAdvisorArgs) -> List[str]:
    if args.patterns:
        return list(args.patterns)
    patterns = ["repository", "unit-of-work"]
    if "complex-queries" in args.requirements:
        patterns.append("specification")
    if "high-write-throughput" in args.requirements:
        patterns.append("dapper")
    return patterns


def _topic_rule(category: str, argument: str = "topic", required: bool = False):
    def rule(args: ToolArgs, registry: MappingRegistry, raw: str) -> Classification:
        value = getattr(args, argument)
        if value:
            return Recognized(category, value, source="tool")
        if required:
            return Unrecognized(
                raw, reason=f'missing required argument "{argument}"', category=category
            )
        return Recognized(category, OVERVIEW, source="tool")

    return rule


def _get_started(args: GetStartedArgs, registry: MappingRegistry, raw: str) -> Classification:
    return Recognized("getting-started", args.focus or OVERVIEW, source="tool")


def _architecture_advisor(
    args: ArchitectureAdvisorArgs, registry: MappingRegistry, raw: str
) -> Classification:
    return Recognized(
        "template",
        recommend_architecture(args),
        extras=("decision-matrix",),
        source="tool",
    )


def _database_advisor(
    args: DatabaseAdvisorArgs, registry: MappingRegistry, raw: str
) -> Classification:
    if args.topic:
        return Recognized("database", args.topic, source="tool")
    if not (args.data_type or args.provider or args.requirements or args.patterns):
        return Recognized("database", OVERVIEW, source="tool")

    provider = args.provider or recommend_database_provider(args)
    extras = tuple(p for p in recommend_database_patterns(args) if p != provider)
    return Recognized("database", provider, extras=extras, source="tool")


def _ai_implementation(
    args: AiImplementationArgs, registry: MappingRegistry, raw: str
) -> Classification:
    if args.template:
        return Recognized("ai-template", args.template, source="tool")
    if args.approach:
        return Recognized("ai", args.approach, source="tool")
    if args.use_case:
        return Recognized("ai-template", AI_RECOMMENDATIONS[args.use_case], source="tool")
    return Recognized("ai", OVERVIEW, source="tool")


def _modernization_guide(
    args: ModernizationGuideArgs, registry: MappingRegistry, raw: str
) -> Classification:
    topic = args.feature or args.category or OVERVIEW
    return Recognized("modernization", topic, source="tool")


def _observability_setup(
    args: ObservabilitySetupArgs, registry: MappingRegistry, raw: str
) -> Classification:
    component = args.component or OVERVIEW
    extras: Tuple[str, ...] = ()
    if args.exporter and component != "exporters":
        extras = ("exporters",)
    return Recognized("observability", component, extras=extras, source="tool")


def _messaging_patterns(
    args: MessagingPatternsArgs, registry: MappingRegistry, raw: str
) -> Classification:
    return Recognized("messaging", args.pattern or OVERVIEW, source="tool")


def _get_template(args: GetTemplateArgs, registry: MappingRegistry, raw: str) -> Classification:
    name = args.template_name
    if not name:
        return Unrecognized(
            raw, reason='missing required argument "template_name"', category="template"
        )
    # Architecture templates first; AI templates only when the name is theirs alone
    if not registry.contains("template", name) and registry.contains("ai-template", name):
        return Recognized("ai-template", name, source="tool")
    return Recognized("template", name, source="tool")


ToolRule = Callable[[Any, MappingRegistry, str], Classification]

TOOL_RULES: Dict[str, ToolRule] = {
    "mvp24h_get_started": _get_started,
    "mvp24h_architecture_advisor": _architecture_advisor,
    "mvp24h_database_advisor": _database_advisor,
    "mvp24h_cqrs_guide": _topic_rule("cqrs", required=True),
    "mvp24h_ai_implementation": _ai_implementation,
    "mvp24h_modernization_guide": _modernization_guide,
    "mvp24h_observability_setup": _observability_setup,
    "mvp24h_messaging_patterns": _messaging_patterns,
    "mvp24h_get_template": _get_template,
    "mvp24h_core_patterns": _topic_rule("core"),
    "mvp24h_infrastructure_guide": _topic_rule("infrastructure"),
    "mvp24h_reference_guide": _topic_rule("reference"),
    "mvp24h_testing_patterns": _topic_rule("testing"),
    "mvp24h_security_patterns": _topic_rule("security"),
    "mvp24h_containerization_patterns": _topic_rule("containerization"),
}


# ===== Classifier =====


class RequestClassifier:
    """
    Maps tool calls and resource URIs onto canonical pairs.

    The URI template table is compiled once from the registry: one pattern
    per category that declares a ``resource_param``.
    """

    def __init__(self, registry: MappingRegistry):
        self._registry = registry
        self._uri_prefix = f"{registry.scheme}://docs/"
        self._templates: List[Tuple[str, Pattern[str]]] = [
            (
                spec.name,
                re.compile(
                    rf"^{re.escape(spec.name)}/(?P<{spec.resource_param}>[^/]+)$"
                ),
            )
            for spec in registry.category_specs()
            if spec.resource_param is not None
        ]

    @property
    def template_categories(self) -> List[str]:
        return [category for category, _ in self._templates]

    def classify_tool(
        self, tool_name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> Classification:
        raw = _raw(tool_name, arguments)

        rule = TOOL_RULES.get(tool_name)
        if rule is None or self._registry.tool(tool_name) is None:
            return Unrecognized(raw, reason=f'unknown tool "{tool_name}"')

        if arguments is not None and not isinstance(arguments, dict):
            return Unrecognized(raw, reason="arguments must be an object")

        try:
            args = parse_tool_arguments(tool_name, arguments)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'][1:]) or err['loc'][0]}: {err['msg']}"
                for err in exc.errors()
            )
            logger.debug("tool_arguments_invalid", tool=tool_name, errors=problems)
            return Unrecognized(
                raw,
                reason=f"invalid arguments ({problems})",
                category=self._home_category(tool_name),
            )

        violation = enum_violation(args)
        if violation is not None:
            logger.debug("tool_argument_out_of_set", tool=tool_name, reason=violation)
            return Unrecognized(raw, reason=violation, category=self._home_category(tool_name))

        return rule(args, self._registry, raw)

    def _home_category(self, tool_name: str) -> Optional[str]:
        if tool_name in HOME_CATEGORIES:
            return HOME_CATEGORIES[tool_name]
        bound = self._registry.categories_for_tool(tool_name)
        return bound[0] if bound else None

    def classify_uri(self, uri: str) -> Classification:
        if not isinstance(uri, str):
            return Unrecognized(repr(uri), reason="resource URI must be a string")
        if not uri.startswith(self._uri_prefix):
            return Unrecognized(
                uri, reason=f'expected a URI starting with "{self._uri_prefix}"'
            )

        path = uri[len(self._uri_prefix):]

        static = self._registry.resolve_static(path)
        if static is not None:
            return Recognized(static.category, static.topic, source="uri")

        for category, pattern in self._templates:
            match = pattern.match(path)
            if match is None:
                continue
            param = match.group(1)
            if not SEGMENT_PATTERN.match(param):
                break
            return Recognized(category, param, source="uri")

        first_segment = path.split("/", 1)[0]
        known = first_segment if first_segment in self._registry.categories else None
        return Unrecognized(uri, reason="no known resource shape", category=known)
