"""
Workflow prompts exposed over MCP.

Each prompt is a user message that walks an assistant through one task and
names the documentation tools to call for it. Missing arguments fall back
to the defaults declared with the prompt.
"""

from __future__ import annotations

from typing import Any, Optional

import mcp.types as types

from src.shared.observability import get_logger

logger = get_logger(__name__)

PROMPT_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": "create-dotnet-project",
        "description": "Guide to create a new .NET project with Mvp24Hours framework",
        "arguments": [
            {
                "name": "project_type",
                "description": "Type of project: api, webapp, console, worker",
                "required": True,
                "default": "api",
            },
            {
                "name": "architecture",
                "description": (
                    "Architecture pattern: minimal-api, simple-nlayers, complex-nlayers, "
                    "cqrs, hexagonal, clean-architecture, ddd, microservices"
                ),
                "required": False,
                "default": "simple-nlayers",
            },
        ],
        "summary": "Create a new .NET {project_type} project with {architecture} architecture",
        "content": (
            "I want to create a new .NET {project_type} project using the {architecture} "
            "architecture pattern with Mvp24Hours framework.\n\n"
            "Please help me:\n"
            "1. Set up the project structure\n"
            "2. Configure the necessary NuGet packages\n"
            "3. Implement the base architecture\n"
            "4. Add common patterns (repository, validation, logging)\n\n"
            "Use the mvp24h_get_started and mvp24h_architecture_advisor tools to get the "
            "relevant documentation."
        ),
    },
    {
        "name": "implement-cqrs",
        "description": "Guide to implement CQRS pattern with MediatR",
        "arguments": [
            {
                "name": "component",
                "description": (
                    "CQRS component: command, query, notification, domain-event, "
                    "pipeline-behavior"
                ),
                "required": True,
                "default": "command",
            },
        ],
        "summary": "Implement CQRS {component} pattern",
        "content": (
            "I want to implement the CQRS {component} pattern in my .NET application.\n\n"
            "Please help me:\n"
            "1. Understand the {component} pattern\n"
            "2. Create the necessary classes and interfaces\n"
            "3. Configure MediatR pipeline\n"
            "4. Add validation and error handling\n\n"
            'Use the mvp24h_cqrs_guide tool with topic "{component}" to get the '
            "implementation details."
        ),
    },
    {
        "name": "setup-database",
        "description": "Guide to setup database with repository pattern",
        "arguments": [
            {
                "name": "database",
                "description": "Database type: sqlserver, postgresql, mysql, mongodb, redis",
                "required": True,
                "default": "sqlserver",
            },
            {
                "name": "orm",
                "description": "ORM choice: efcore, dapper, hybrid",
                "required": False,
                "default": "efcore",
            },
        ],
        "summary": "Setup {database} database with {orm}",
        "content": (
            "I want to setup {database} database using {orm} in my .NET application.\n\n"
            "Please help me:\n"
            "1. Configure the database connection\n"
            "2. Implement the repository pattern\n"
            "3. Setup Unit of Work\n"
            "4. Add migrations (if applicable)\n\n"
            "Use the mvp24h_database_advisor tool to get the configuration and "
            "implementation details."
        ),
    },
    {
        "name": "add-ai-capabilities",
        "description": "Guide to add AI capabilities using Semantic Kernel or Agent Framework",
        "arguments": [
            {
                "name": "approach",
                "description": "AI approach: semantic-kernel, sk-graph, agent-framework",
                "required": True,
                "default": "semantic-kernel",
            },
            {
                "name": "use_case",
                "description": "Use case: chatbot, rag, multi-agent, workflow",
                "required": False,
                "default": "chatbot",
            },
        ],
        "summary": "Add AI capabilities using {approach} for {use_case}",
        "content": (
            "I want to add AI capabilities to my .NET application using {approach} for a "
            "{use_case} use case.\n\n"
            "Please help me:\n"
            "1. Choose the right AI approach\n"
            "2. Configure the necessary packages\n"
            "3. Implement the AI integration\n"
            "4. Add proper error handling and observability\n\n"
            "Use the mvp24h_ai_implementation tool to get the implementation template and "
            "guidance."
        ),
    },
    {
        "name": "setup-observability",
        "description": "Guide to setup logging, tracing, and metrics",
        "arguments": [
            {
                "name": "component",
                "description": "Component: logging, tracing, metrics, all",
                "required": True,
                "default": "all",
            },
            {
                "name": "exporter",
                "description": "Exporter: jaeger, zipkin, prometheus, application-insights",
                "required": False,
                "default": "jaeger",
            },
        ],
        "summary": "Setup {component} observability with {exporter}",
        "content": (
            "I want to setup {component} observability in my .NET application using "
            "{exporter} as the exporter.\n\n"
            "Please help me:\n"
            "1. Configure OpenTelemetry\n"
            "2. Setup {components}\n"
            "3. Configure the {exporter} exporter\n"
            "4. Add proper instrumentation\n\n"
            "Use the mvp24h_observability_setup tool to get the configuration details."
        ),
    },
    {
        "name": "modernize-dotnet",
        "description": "Guide to modernize .NET application with .NET 9 features",
        "arguments": [
            {
                "name": "feature",
                "description": "Feature: resilience, caching, keyed-services, minimal-apis, aspire",
                "required": True,
                "default": "resilience",
            },
        ],
        "summary": "Modernize .NET app with {feature}",
        "content": (
            "I want to modernize my .NET application using the {feature} feature from "
            ".NET 9.\n\n"
            "Please help me:\n"
            "1. Understand the {feature} feature\n"
            "2. Configure the necessary packages\n"
            "3. Implement the pattern\n"
            "4. Add best practices\n\n"
            "Use the mvp24h_modernization_guide tool to get the implementation details."
        ),
    },
    {
        "name": "containerize-app",
        "description": "Guide to containerize .NET application with Docker and Kubernetes",
        "arguments": [
            {
                "name": "target",
                "description": "Target: dockerfile, docker-compose, kubernetes",
                "required": True,
                "default": "dockerfile",
            },
        ],
        "summary": "Containerize app with {target}",
        "content": (
            "I want to containerize my .NET application using {target}.\n\n"
            "Please help me:\n"
            "1. Create an optimized {target} configuration\n"
            "2. Setup multi-stage builds (if applicable)\n"
            "3. Configure health checks\n"
            "4. Add production best practices\n\n"
            "Use the mvp24h_containerization_patterns tool to get the configuration "
            "templates."
        ),
    },
]

_PROMPTS_BY_NAME = {item["name"]: item for item in PROMPT_DEFINITIONS}


def list_prompts() -> list[types.Prompt]:
    return [
        types.Prompt(
            name=item["name"],
            description=item["description"],
            arguments=[
                types.PromptArgument(
                    name=arg["name"],
                    description=arg["description"],
                    required=arg["required"],
                )
                for arg in item["arguments"]
            ],
        )
        for item in PROMPT_DEFINITIONS
    ]


def _prompt_values(item: dict[str, Any], arguments: Optional[dict[str, str]]) -> dict[str, str]:
    provided = arguments or {}
    values = {
        arg["name"]: provided.get(arg["name"]) or arg["default"]
        for arg in item["arguments"]
    }
    if item["name"] == "setup-observability":
        component = values["component"]
        values["components"] = (
            "logging, tracing, and metrics" if component == "all" else component
        )
    return values


def render_prompt(name: str, arguments: Optional[dict[str, str]] = None) -> types.GetPromptResult:
    """
    Render a prompt with its arguments, defaults filling the gaps.

    Raises:
        ValueError: Unknown prompt name
    """
    item = _PROMPTS_BY_NAME.get(name)
    if item is None:
        raise ValueError(f"Unknown prompt: {name}")

    values = _prompt_values(item, arguments)
    logger.debug("prompt_rendered", prompt=name, arguments=values)
    return types.GetPromptResult(
        description=item["summary"].format(**values),
        messages=[
            types.PromptMessage(
                role="user",
                content=types.TextContent(type="text", text=item["content"].format(**values)),
            )
        ],
    )
