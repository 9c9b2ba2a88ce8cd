"""Request classification: tool calls and resource URIs to canonical pairs."""

import pytest

from src.routing.classifier import (
    RequestClassifier,
    recommend_architecture,
    recommend_database_patterns,
    recommend_database_provider,
)
from src.routing.tool_args import ArchitectureAdvisorArgs, DatabaseAdvisorArgs
from src.routing.types import Recognized, Unrecognized


@pytest.fixture
def classifier(registry):
    return RequestClassifier(registry)


class TestToolClassification:
    def test_topic_tool(self, classifier):
        result = classifier.classify_tool("mvp24h_core_patterns", {"topic": "guard-clauses"})

        assert result == Recognized("core", "guard-clauses", source="tool")

    def test_topic_defaults_to_overview(self, classifier):
        assert classifier.classify_tool("mvp24h_core_patterns", {}) == Recognized(
            "core", "overview", source="tool"
        )
        assert classifier.classify_tool("mvp24h_core_patterns", None).topic == "overview"

    def test_unknown_value_is_still_recognized(self, classifier):
        """Membership is the registry's job, not the classifier's."""
        result = classifier.classify_tool("mvp24h_core_patterns", {"topic": "not-a-topic"})

        assert result == Recognized("core", "not-a-topic", source="tool")

    def test_required_argument_missing(self, classifier):
        result = classifier.classify_tool("mvp24h_cqrs_guide", {})

        assert isinstance(result, Unrecognized)
        assert result.category == "cqrs"
        assert "topic" in result.reason

    def test_unknown_tool(self, classifier):
        result = classifier.classify_tool("mvp24h_does_not_exist", {"topic": "x"})

        assert isinstance(result, Unrecognized)
        assert "unknown tool" in result.reason

    def test_tool_missing_from_catalog_is_unknown(self, classifier):
        # A rule exists but the routing table does not declare the tool
        result = classifier.classify_tool("mvp24h_security_patterns", {"topic": "jwt"})

        assert isinstance(result, Unrecognized)

    def test_wrong_argument_shape(self, classifier):
        result = classifier.classify_tool("mvp24h_core_patterns", {"topic": 42})

        assert isinstance(result, Unrecognized)
        assert result.category == "core"
        assert "invalid arguments" in result.reason

    def test_non_object_arguments(self, classifier):
        result = classifier.classify_tool("mvp24h_core_patterns", ["guard-clauses"])

        assert isinstance(result, Unrecognized)

    def test_extra_arguments_are_ignored(self, classifier):
        result = classifier.classify_tool(
            "mvp24h_core_patterns", {"topic": "value-objects", "verbose": True}
        )

        assert result == Recognized("core", "value-objects", source="tool")

    def test_get_template_prefers_architecture_templates(self, classifier):
        assert classifier.classify_tool(
            "mvp24h_get_template", {"template_name": "cqrs"}
        ) == Recognized("template", "cqrs", source="tool")

    def test_get_template_falls_through_to_ai_templates(self, classifier):
        assert classifier.classify_tool(
            "mvp24h_get_template", {"template_name": "sk-rag"}
        ) == Recognized("ai-template", "sk-rag", source="tool")

    def test_architecture_advisor_adds_decision_matrix(self, classifier):
        result = classifier.classify_tool(
            "mvp24h_architecture_advisor", {"requirements": ["microservices", "cqrs"]}
        )

        assert result == Recognized(
            "template", "microservices", extras=("decision-matrix",), source="tool"
        )

    def test_database_advisor_recommendation(self, classifier):
        result = classifier.classify_tool(
            "mvp24h_database_advisor", {"requirements": ["complex-queries"]}
        )

        assert result.category == "database"
        assert result.topic == "postgresql"
        assert result.extras == ("repository", "unit-of-work", "specification")

    def test_database_advisor_topic_wins(self, classifier):
        result = classifier.classify_tool(
            "mvp24h_database_advisor", {"topic": "nosql", "provider": "redis"}
        )

        assert result == Recognized("database", "nosql", source="tool")

    def test_database_advisor_without_arguments(self, classifier):
        assert classifier.classify_tool("mvp24h_database_advisor", {}).topic == "overview"

    def test_ai_use_case_maps_to_template(self, classifier):
        result = classifier.classify_tool("mvp24h_ai_implementation", {"use_case": "qa-documents"})

        assert result == Recognized("ai-template", "sk-rag", source="tool")

    def test_ai_unknown_use_case(self, classifier):
        result = classifier.classify_tool("mvp24h_ai_implementation", {"use_case": "poetry"})

        assert isinstance(result, Unrecognized)
        assert "chatbot" in result.reason
        assert result.category == "ai-template"

    @pytest.mark.parametrize(
        "tool, arguments, reason, category",
        [
            ("mvp24h_architecture_advisor", {"complexity": "extreme"}, 'unknown complexity "extreme"', "template"),
            ("mvp24h_architecture_advisor", {"requirements": ["cqrs", "blockchain"]}, 'unknown requirements "blockchain"', "template"),
            ("mvp24h_database_advisor", {"data_type": "graph"}, 'unknown data_type "graph"', "database"),
            ("mvp24h_database_advisor", {"provider": "oracle"}, 'unknown provider "oracle"', "database"),
            ("mvp24h_database_advisor", {"patterns": ["active-record"]}, 'unknown patterns "active-record"', "database"),
            ("mvp24h_observability_setup", {"exporter": "datadog"}, 'unknown exporter "datadog"', "observability"),
        ],
    )
    def test_value_outside_fixed_enumeration(self, classifier, tool, arguments, reason, category):
        result = classifier.classify_tool(tool, arguments)

        assert isinstance(result, Unrecognized)
        assert result.reason.startswith(reason + "; expected one of: ")
        assert result.category == category

    def test_empty_enumerated_value_counts_as_absent(self, classifier):
        result = classifier.classify_tool("mvp24h_observability_setup", {"exporter": ""})

        assert result == Recognized("observability", "overview", source="tool")

    def test_ai_approach(self, classifier):
        result = classifier.classify_tool("mvp24h_ai_implementation", {"approach": "sk-graph"})

        assert result == Recognized("ai", "sk-graph", source="tool")

    def test_observability_exporter_adds_exporters_topic(self, classifier):
        result = classifier.classify_tool(
            "mvp24h_observability_setup", {"component": "tracing", "exporter": "jaeger"}
        )

        assert result == Recognized(
            "observability", "tracing", extras=("exporters",), source="tool"
        )


class TestUriClassification:
    def test_template_shape(self, classifier):
        result = classifier.classify_uri("mvp24hours://docs/template/cqrs")

        assert result == Recognized("template", "cqrs", source="uri")

    def test_static_resource(self, classifier):
        result = classifier.classify_uri("mvp24hours://docs/overview")

        assert result == Recognized("getting-started", "overview", source="uri")

    def test_unknown_topic_in_known_category_is_recognized(self, classifier):
        result = classifier.classify_uri("mvp24hours://docs/core/nope")

        assert result == Recognized("core", "nope", source="uri")

    @pytest.mark.parametrize(
        "uri",
        [
            "mvp24hours://docs/core/guard-clauses/extra",
            "mvp24hours://docs/core/",
            "mvp24hours://docs/core/guard-clauses?x=1",
            "mvp24hours://docs/core/guard-clauses#top",
        ],
    )
    def test_malformed_paths_are_unrecognized(self, classifier, uri):
        result = classifier.classify_uri(uri)

        assert isinstance(result, Unrecognized)
        assert result.category == "core"

    def test_wrong_scheme(self, classifier):
        result = classifier.classify_uri("file:///etc/passwd")

        assert isinstance(result, Unrecognized)
        assert result.category is None

    def test_category_without_resource_param(self, classifier):
        # reference has no URI template; only its static resource resolves
        assert isinstance(classifier.classify_uri("mvp24hours://docs/reference/mapping"), Unrecognized)
        assert classifier.classify_uri("mvp24hours://docs/mapping") == Recognized(
            "reference", "mapping", source="uri"
        )

    def test_unknown_category(self, classifier):
        result = classifier.classify_uri("mvp24hours://docs/foo/bar")

        assert isinstance(result, Unrecognized)
        assert result.category is None

    def test_template_categories(self, classifier):
        assert "template" in classifier.template_categories
        assert "reference" not in classifier.template_categories


class TestRecommendations:
    @pytest.mark.parametrize(
        "arguments, expected",
        [
            ({"requirements": ["domain-driven"]}, "ddd"),
            ({"requirements": ["external-integrations"]}, "hexagonal"),
            ({"requirements": ["audit-trail"]}, "event-driven"),
            ({"requirements": ["rapid-prototype"]}, "minimal-api"),
            ({"complexity": "low"}, "minimal-api"),
            ({"entity_count": "few", "business_rules": "simple"}, "minimal-api"),
            ({"complexity": "high"}, "complex-nlayers"),
            ({"complexity": "high", "team_size": "large"}, "clean-architecture"),
            ({"complexity": "very-high"}, "clean-architecture"),
            ({"complexity": "medium", "entity_count": "many"}, "complex-nlayers"),
            ({}, "simple-nlayers"),
        ],
    )
    def test_architecture(self, arguments, expected):
        assert recommend_architecture(ArchitectureAdvisorArgs(**arguments)) == expected

    @pytest.mark.parametrize(
        "arguments, expected",
        [
            ({"requirements": ["caching"]}, "redis"),
            ({"requirements": ["flexible-schema"]}, "mongodb"),
            ({"data_type": "document"}, "mongodb"),
            ({"data_type": "key-value"}, "redis"),
            ({"data_type": "relational"}, "postgresql"),
        ],
    )
    def test_database_provider(self, arguments, expected):
        assert recommend_database_provider(DatabaseAdvisorArgs(**arguments)) == expected

    def test_database_patterns_explicit_list_wins(self):
        args = DatabaseAdvisorArgs(patterns=["dapper"], requirements=["complex-queries"])

        assert recommend_database_patterns(args) == ["dapper"]
