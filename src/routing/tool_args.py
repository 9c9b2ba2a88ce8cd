"""
Per-tool argument models.

Every documentation tool owns one model; together they form a tagged union
discriminated on ``tool``. Values are plain strings (or string lists) and
never fail validation for being unknown, so they reach the fallback listing.
Registry-backed values are checked by the registry lookup; fixed
enumerations (``_choice``/``_choices``) are checked by ``enum_violation``.
Wrong *shapes* (a number where a string is expected) fail validation.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Sequence, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .registry import MappingRegistry

ARCHITECTURE_REQUIREMENTS = [
    "cqrs",
    "event-sourcing",
    "audit-trail",
    "external-integrations",
    "microservices",
    "domain-driven",
    "rapid-prototype",
    "high-performance",
    "multiple-databases",
]
DATABASE_PROVIDERS = ["sqlserver", "postgresql", "mysql", "mongodb", "redis"]
DATABASE_REQUIREMENTS = [
    "transactions",
    "complex-queries",
    "high-write-throughput",
    "horizontal-scaling",
    "flexible-schema",
    "caching",
    "full-text-search",
    "relationships",
]
DATABASE_PATTERNS = ["repository", "unit-of-work", "specification", "dapper", "hybrid"]
AI_USE_CASES = [
    "chatbot",
    "qa-documents",
    "tool-augmented",
    "complex-reasoning",
    "multi-agent",
    "workflow",
    "human-oversight",
    "enterprise",
]
OBSERVABILITY_EXPORTERS = [
    "console",
    "jaeger",
    "zipkin",
    "otlp",
    "prometheus",
    "application-insights",
]


def _choice(description: str, values: Sequence[str]) -> Any:
    return Field(default=None, description=description, json_schema_extra={"enum": list(values)})


def _registry_choice(description: str, *sources: str) -> Any:
    """Field whose enumerated values come from registry tables.

    Each source is ``category`` (all keys), ``category:topics`` or
    ``category:params``.
    """
    return Field(default=None, description=description, json_schema_extra={"registry": list(sources)})


def _choices(description: str, values: Sequence[str]) -> Any:
    return Field(default_factory=list, description=description, json_schema_extra={"enum": list(values)})


class ToolArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GetStartedArgs(ToolArgs):
    tool: Literal["mvp24h_get_started"] = "mvp24h_get_started"
    focus: Optional[str] = _registry_choice(
        "What aspect to focus on (framework intro, minimal setup, package reference, or all)",
        "getting-started",
    )


class ArchitectureAdvisorArgs(ToolArgs):
    tool: Literal["mvp24h_architecture_advisor"] = "mvp24h_architecture_advisor"
    complexity: Optional[str] = _choice(
        "Project complexity level", ["low", "medium", "high", "very-high"]
    )
    entity_count: Optional[str] = _choice(
        "Number of entities: few (1-5), medium (5-15), many (15+)",
        ["few", "medium", "many"],
    )
    business_rules: Optional[str] = _choice(
        "Complexity of business rules", ["simple", "moderate", "complex"]
    )
    team_size: Optional[str] = _choice(
        "Team size: solo (1), small (2-5), large (5+)", ["solo", "small", "large"]
    )
    requirements: List[str] = _choices(
        "Specific requirements for the project", ARCHITECTURE_REQUIREMENTS
    )


class DatabaseAdvisorArgs(ToolArgs):
    tool: Literal["mvp24h_database_advisor"] = "mvp24h_database_advisor"
    data_type: Optional[str] = _choice(
        "Type of data to store", ["relational", "document", "key-value", "mixed"]
    )
    provider: Optional[str] = _choice(
        "Specific database provider (optional)", DATABASE_PROVIDERS
    )
    requirements: List[str] = _choices(
        "Specific database requirements", DATABASE_REQUIREMENTS
    )
    patterns: List[str] = _choices("Patterns to implement", DATABASE_PATTERNS)
    topic: Optional[str] = _registry_choice(
        "Specific topic to get documentation for", "database:topics"
    )


class CqrsGuideArgs(ToolArgs):
    tool: Literal["mvp24h_cqrs_guide"] = "mvp24h_cqrs_guide"
    topic: Optional[str] = _registry_choice(
        "CQRS topic to get documentation for", "cqrs"
    )


class AiImplementationArgs(ToolArgs):
    tool: Literal["mvp24h_ai_implementation"] = "mvp24h_ai_implementation"
    use_case: Optional[str] = _choice("Primary AI use case", AI_USE_CASES)
    approach: Optional[str] = _registry_choice(
        "Specific approach to get documentation for (optional)", "ai"
    )
    template: Optional[str] = _registry_choice(
        "Specific template to retrieve", "ai-template"
    )


class ModernizationGuideArgs(ToolArgs):
    tool: Literal["mvp24h_modernization_guide"] = "mvp24h_modernization_guide"
    category: Optional[str] = _registry_choice(
        "Modernization category", "modernization:topics"
    )
    feature: Optional[str] = _registry_choice(
        "Specific feature to get documentation for", "modernization:params"
    )


class ObservabilitySetupArgs(ToolArgs):
    tool: Literal["mvp24h_observability_setup"] = "mvp24h_observability_setup"
    component: Optional[str] = _registry_choice(
        "Observability component to configure", "observability"
    )
    exporter: Optional[str] = _choice(
        "Specific exporter to configure", OBSERVABILITY_EXPORTERS
    )


class MessagingPatternsArgs(ToolArgs):
    tool: Literal["mvp24h_messaging_patterns"] = "mvp24h_messaging_patterns"
    pattern: Optional[str] = _registry_choice(
        "Messaging pattern to implement", "messaging"
    )


class GetTemplateArgs(ToolArgs):
    tool: Literal["mvp24h_get_template"] = "mvp24h_get_template"
    template_name: Optional[str] = _registry_choice(
        "Template name to retrieve", "template:params", "ai-template"
    )


class CorePatternsArgs(ToolArgs):
    tool: Literal["mvp24h_core_patterns"] = "mvp24h_core_patterns"
    topic: Optional[str] = _registry_choice(
        "Core module topic to get documentation for", "core"
    )


class InfrastructureGuideArgs(ToolArgs):
    tool: Literal["mvp24h_infrastructure_guide"] = "mvp24h_infrastructure_guide"
    topic: Optional[str] = _registry_choice(
        "Infrastructure topic to get documentation for", "infrastructure"
    )


class ReferenceGuideArgs(ToolArgs):
    tool: Literal["mvp24h_reference_guide"] = "mvp24h_reference_guide"
    topic: Optional[str] = _registry_choice(
        "Reference topic to get documentation for", "reference"
    )


class TestingPatternsArgs(ToolArgs):
    tool: Literal["mvp24h_testing_patterns"] = "mvp24h_testing_patterns"
    topic: Optional[str] = _registry_choice(
        "Testing topic to get documentation for", "testing"
    )


class SecurityPatternsArgs(ToolArgs):
    tool: Literal["mvp24h_security_patterns"] = "mvp24h_security_patterns"
    topic: Optional[str] = _registry_choice(
        "Security topic to get documentation for", "security"
    )


class ContainerizationPatternsArgs(ToolArgs):
    tool: Literal["mvp24h_containerization_patterns"] = "mvp24h_containerization_patterns"
    topic: Optional[str] = _registry_choice(
        "Containerization topic to get documentation for", "containerization"
    )


ToolArguments = Annotated[
    Union[
        GetStartedArgs,
        ArchitectureAdvisorArgs,
        DatabaseAdvisorArgs,
        CqrsGuideArgs,
        AiImplementationArgs,
        ModernizationGuideArgs,
        ObservabilitySetupArgs,
        MessagingPatternsArgs,
        GetTemplateArgs,
        CorePatternsArgs,
        InfrastructureGuideArgs,
        ReferenceGuideArgs,
        TestingPatternsArgs,
        SecurityPatternsArgs,
        ContainerizationPatternsArgs,
    ],
    Field(discriminator="tool"),
]

TOOL_ARGUMENTS_ADAPTER: TypeAdapter = TypeAdapter(ToolArguments)

ARGUMENT_MODELS: Dict[str, type] = {
    model.model_fields["tool"].default: model
    for model in get_args(get_args(ToolArguments)[0])
}

REQUIRED_ARGUMENTS: Dict[str, List[str]] = {
    "mvp24h_cqrs_guide": ["topic"],
    "mvp24h_get_template": ["template_name"],
}


def parse_tool_arguments(tool_name: str, arguments: Optional[Dict[str, Any]]) -> ToolArgs:
    """
    Validate raw tool arguments into the tool's variant of the union.

    Raises:
        pydantic.ValidationError: Unknown tool or malformed argument shape
    """
    payload = dict(arguments or {})
    payload["tool"] = tool_name
    return TOOL_ARGUMENTS_ADAPTER.validate_python(payload)


def enum_violation(args: ToolArgs) -> Optional[str]:
    """Describe the first value outside a fixed enumeration, or None."""
    for name, field in type(args).model_fields.items():
        allowed = (field.json_schema_extra or {}).get("enum")
        if not allowed:
            continue
        value = getattr(args, name)
        for item in value if isinstance(value, list) else [value]:
            if item and item not in allowed:
                return f'unknown {name} "{item}"; expected one of: ' + ", ".join(allowed)
    return None


def _registry_values(registry: MappingRegistry, sources: Sequence[str]) -> List[str]:
    values: List[str] = []
    for source in sources:
        category, _, table = source.partition(":")
        spec = registry.category(category)
        if spec is None:
            continue
        if table == "topics":
            keys = tuple(spec.topics)
        elif table == "params":
            keys = tuple(spec.params)
        else:
            keys = spec.keys
        values.extend(key for key in keys if key not in values)
    return values


def input_schema(model: type, registry: MappingRegistry) -> Dict[str, Any]:
    """
    Build the JSON schema advertised for a tool.

    Enumerations are filled from the registry at build time so the
    advertised values always equal the registered keys.
    """
    properties: Dict[str, Any] = {}
    for name, field in model.model_fields.items():
        if name == "tool":
            continue
        extra = field.json_schema_extra or {}
        if "registry" in extra:
            enum = _registry_values(registry, extra["registry"])
        else:
            enum = list(extra.get("enum", []))

        is_list = field.default_factory is list
        item: Dict[str, Any] = {"type": "string"}
        if enum:
            item["enum"] = enum
        if is_list:
            prop: Dict[str, Any] = {"type": "array", "items": item}
        else:
            prop = dict(item)
        if field.description:
            prop["description"] = field.description
        properties[name] = prop

    return {"type": "object", "properties": properties, "required": required_arguments(model)}


def required_arguments(model: type) -> List[str]:
    """Arguments the classifier cannot do without."""
    return list(REQUIRED_ARGUMENTS.get(model.model_fields["tool"].default, []))
