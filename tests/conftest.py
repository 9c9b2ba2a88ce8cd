# Shared fixtures: a small documentation corpus and routing table on disk

import copy
import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

os.environ.setdefault("ENV", "development")

CORPUS = {
    "home.md": "# Mvp24Hours\n\nFramework home.\n",
    "core/home.md": "# Core Module\n\nCore building blocks.\n",
    "core/guard-clauses.md": (
        "# Guard Clauses\n\nUse Guard.Against.Null(value) before touching arguments.\n"
    ),
    "core/value-objects.md": "# Value Objects\n\nImmutable primitives compared by value.\n",
    "core/exceptions.md": "# Exceptions\n\nBusinessException and friends.\n",
    "core/infrastructure-abstractions.md": "# Infrastructure Abstractions\n\nIClock.\n",
    "database/relational.md": "# Relational\n\nSQL Server, PostgreSQL, MySQL.\n",
    "database/nosql.md": "# NoSQL\n\nMongoDB and Redis.\n",
    "database/use-repository.md": "# Repository\n\nIRepository<T>.\n",
    "database/use-unitofwork.md": "# Unit of Work\n\nIUnitOfWork.SaveChanges().\n",
    "database/efcore-advanced.md": (
        "# EF Core Advanced\n\nInterceptors.\n\n"
        "## Specification\n\nISpecification<T> filters.\n\n"
        "## Bulk Operations\n\nBulkInsert.\n"
    ),
    "database/patterns.md": "# Database Patterns\n\nPick a provider.\n",
    "cqrs/home.md": "# CQRS\n\nMediator overview.\n",
    "cqrs/commands.md": "# Commands\n\nICommand<TResponse>.\n",
    "cqrs/queries.md": "# Queries\n\nIQuery<TResponse>.\n",
    "ai-context/decision-matrix.md": "# Decision Matrix\n\nChoose by complexity.\n",
    "ai-context/template-cqrs.md": "# CQRS Template\n\nCommands and queries in separate models.\n",
    "ai-context/structure-minimal-api.md": "# Minimal API\n\nOne project.\n",
    "ai-context/structure-simple-nlayers.md": "# Simple N-Layers\n\nCore, Infrastructure, WebAPI.\n",
    "ai-context/structure-complex-nlayers.md": "# Complex N-Layers\n\nApplication layer.\n",
    "ai-context/template-microservices.md": "# Microservices\n\nDistributed services.\n",
    "ai-context/template-sk-rag-basic.md": "# SK RAG\n\nRetrieval augmented generation.\n",
    "ai-context/template-sk-chat-completion.md": "# SK Chat\n\nChat completion.\n",
    "ai-context/ai-decision-matrix.md": "# AI Decision Matrix\n\nPick an approach.\n",
    "ai-context/testing-patterns.md": (
        "# Testing Patterns\n\nIntro.\n\n"
        "## Unit Testing\n\nxUnit facts.\n\n"
        "```bash\n# not a heading\ndotnet test\n```\n\n"
        "### Assertions\n\nFluentAssertions.\n\n"
        "## Mocking\n\nMoq setups.\n"
    ),
    "observability/home.md": "# Observability\n\nOpenTelemetry.\n",
    "observability/tracing.md": "# Tracing\n\nActivitySource.\n",
    "observability/exporters.md": "# Exporters\n\nJaeger, OTLP.\n",
    "mapping.md": "# Mapping\n\nAutoMapper profiles.\n",
}


def routes_definition() -> dict:
    """Routing table used across the test suite (a fresh copy per call)."""
    return copy.deepcopy(
        {
            "scheme": "mvp24hours",
            "tools": {
                name: {"title": name, "description": f"{name} documentation"}
                for name in (
                    "mvp24h_get_started",
                    "mvp24h_architecture_advisor",
                    "mvp24h_core_patterns",
                    "mvp24h_database_advisor",
                    "mvp24h_cqrs_guide",
                    "mvp24h_get_template",
                    "mvp24h_ai_implementation",
                    "mvp24h_observability_setup",
                    "mvp24h_testing_patterns",
                    "mvp24h_reference_guide",
                )
            },
            "categories": {
                "getting-started": {
                    "title": "Getting Started",
                    "tool": {"name": "mvp24h_get_started", "argument": "focus"},
                    "topics": {"overview": {"docs": ["home.md"]}},
                },
                "core": {
                    "title": "Core Patterns",
                    "description": "Core module building blocks.\nSecond line.",
                    "tool": {"name": "mvp24h_core_patterns", "argument": "topic"},
                    "resource_param": "topic",
                    "topics": {
                        "overview": {"docs": ["core/home.md"]},
                        "guard-clauses": {
                            "title": "Guard Clauses",
                            "description": "Argument validation",
                            "docs": ["core/guard-clauses.md"],
                            "related": ["value-objects", "exceptions", "database/repository"],
                        },
                        "value-objects": {
                            "title": "Value Objects",
                            "description": "Immutable domain primitives",
                            "docs": ["core/value-objects.md"],
                            "related": ["guard-clauses"],
                        },
                        "exceptions": {
                            "title": "Exceptions",
                            "docs": ["core/exceptions.md", "core/legacy-exceptions.md"],
                        },
                    },
                    "params": {
                        "infrastructure": {"docs": "core/infrastructure-abstractions.md"},
                    },
                },
                "database": {
                    "title": "Database",
                    "tool": {"name": "mvp24h_database_advisor", "argument": "topic"},
                    "resource_param": "topic",
                    "topics": {
                        "overview": {"docs": ["database/patterns.md"]},
                        "relational": {"docs": ["database/relational.md"]},
                        "nosql": {"docs": ["database/nosql.md"]},
                        "repository": {
                            "title": "Repository Pattern",
                            "docs": ["database/use-repository.md"],
                        },
                        "unit-of-work": {"docs": ["database/use-unitofwork.md"]},
                    },
                    "params": {
                        "postgresql": {
                            "docs": ["database/relational.md", "database/efcore-advanced.md"]
                        },
                        "mongodb": {"docs": ["database/nosql.md"]},
                        "redis": {"docs": ["database/nosql.md"]},
                        "specification": {
                            "docs": ["database/efcore-advanced.md#Specification"]
                        },
                    },
                },
                "cqrs": {
                    "title": "CQRS",
                    "tool": {"name": "mvp24h_cqrs_guide", "argument": "topic"},
                    "resource_param": "topic",
                    "topics": {
                        "overview": {"docs": ["cqrs/home.md"]},
                        "commands": {"docs": ["cqrs/commands.md"], "related": ["queries"]},
                        "queries": {"docs": ["cqrs/queries.md"], "related": ["commands"]},
                    },
                },
                "template": {
                    "title": "Architecture Templates",
                    "tool": {"name": "mvp24h_get_template", "argument": "template_name"},
                    "resource_param": "templateName",
                    "topics": {
                        "decision-matrix": {"docs": ["ai-context/decision-matrix.md"]},
                    },
                    "params": {
                        "minimal-api": {"docs": ["ai-context/structure-minimal-api.md"]},
                        "simple-nlayers": {"docs": ["ai-context/structure-simple-nlayers.md"]},
                        "complex-nlayers": {"docs": ["ai-context/structure-complex-nlayers.md"]},
                        "cqrs": {
                            "title": "CQRS",
                            "docs": ["ai-context/template-cqrs.md"],
                            "related": ["cqrs/commands"],
                        },
                        "microservices": {"docs": ["ai-context/template-microservices.md"]},
                    },
                },
                "ai-template": {
                    "title": "AI Templates",
                    "tool": {"name": "mvp24h_ai_implementation", "argument": "template"},
                    "resource_param": "templateName",
                    "params": {
                        "sk-rag": {"docs": ["ai-context/template-sk-rag-basic.md"]},
                        "sk-chat-completion": {
                            "docs": ["ai-context/template-sk-chat-completion.md"]
                        },
                    },
                },
                "ai": {
                    "title": "AI Approaches",
                    "tool": {"name": "mvp24h_ai_implementation", "argument": "approach"},
                    "topics": {"overview": {"docs": ["ai-context/ai-decision-matrix.md"]}},
                },
                "observability": {
                    "title": "Observability",
                    "tool": {"name": "mvp24h_observability_setup", "argument": "component"},
                    "resource_param": "component",
                    "topics": {
                        "overview": {"docs": ["observability/home.md"]},
                        "tracing": {"docs": ["observability/tracing.md"]},
                        "exporters": {"docs": ["observability/exporters.md"]},
                    },
                },
                "testing": {
                    "title": "Testing",
                    "tool": {"name": "mvp24h_testing_patterns", "argument": "topic"},
                    "resource_param": "topic",
                    "topics": {
                        "overview": {"docs": ["ai-context/testing-patterns.md"]},
                        "unit-testing": {
                            "docs": ["ai-context/testing-patterns.md#Unit Testing"]
                        },
                        "mocking": {"docs": ["ai-context/testing-patterns.md#mocking"]},
                    },
                },
                "reference": {
                    "title": "Reference",
                    "tool": {"name": "mvp24h_reference_guide", "argument": "topic"},
                    "topics": {"mapping": {"docs": ["mapping.md"]}},
                },
            },
            "static_resources": {
                "overview": {"category": "getting-started", "topic": "overview"},
                "decision-matrix": {"category": "template", "topic": "decision-matrix"},
                "mapping": {"category": "reference", "topic": "mapping"},
            },
        }
    )


def write_corpus(base: Path) -> Path:
    for relative, content in CORPUS.items():
        path = base / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return base


@pytest.fixture
def docs_dir(tmp_path) -> Path:
    return write_corpus(tmp_path / "docs")


@pytest.fixture
def routes():
    return routes_definition()


@pytest.fixture
def registry(routes):
    from src.routing.registry import build_registry

    return build_registry(routes)


@pytest.fixture
def store(docs_dir):
    from src.routing.store import FileSystemDocumentStore

    return FileSystemDocumentStore(docs_dir)


@pytest.fixture
def engine(registry, store):
    from src.routing.engine import RoutingEngine

    return RoutingEngine(registry, store)
