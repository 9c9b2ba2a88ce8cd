import pytest

from src.mcp_server.prompts import PROMPT_DEFINITIONS, list_prompts, render_prompt


def test_every_prompt_is_listed_with_arguments():
    prompts = list_prompts()

    assert [p.name for p in prompts] == [item["name"] for item in PROMPT_DEFINITIONS]
    create = prompts[0]
    assert [a.name for a in create.arguments] == ["project_type", "architecture"]
    assert create.arguments[0].required is True


def test_arguments_fill_the_template():
    result = render_prompt("setup-database", {"database": "postgresql", "orm": "dapper"})

    assert result.description == "Setup postgresql database with dapper"
    assert result.messages[0].role == "user"
    assert "setup postgresql database using dapper" in result.messages[0].content.text


def test_defaults_fill_missing_and_empty_arguments():
    result = render_prompt("create-dotnet-project", {"project_type": ""})

    assert result.description == "Create a new .NET api project with simple-nlayers architecture"


def test_observability_all_expands_components():
    text = render_prompt("setup-observability").messages[0].content.text

    assert "2. Setup logging, tracing, and metrics" in text
    assert "using jaeger as the exporter" in text


def test_unknown_prompt():
    with pytest.raises(ValueError, match="Unknown prompt: nope"):
        render_prompt("nope")
