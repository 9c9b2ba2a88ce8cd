"""Fallback listing content."""

import pytest

from src.routing.fallback import NOT_FOUND_HEADING, FallbackSynthesizer
from src.routing.types import FallbackReason, Recognized, Unrecognized


@pytest.fixture
def fallback(registry):
    return FallbackSynthesizer(registry)


def test_listing_names_every_category(fallback, registry):
    text = fallback.synthesize(Recognized("foo", "bar"))

    assert text.startswith(NOT_FOUND_HEADING)
    assert 'Unknown category "foo".' in text
    for name in registry.categories:
        assert f"### {name}:" in text


def test_unknown_topic_lists_valid_values_first(fallback, registry):
    text = fallback.synthesize(Recognized("core", "nope"))

    assert 'Unknown topic "nope" in category "core".' in text
    valid = text.index("## Valid values for `core`")
    assert valid < text.index("## Available Categories")
    for key in registry.category("core").keys:
        assert f"- `{key}`" in text
    assert "Argument `topic` of `mvp24h_core_patterns` accepts:" in text


def test_unrecognized_without_category_skips_valid_values(fallback):
    text = fallback.synthesize(Unrecognized("mvp24h_x({})", reason='unknown tool "mvp24h_x"'))

    assert "Unrecognized request: `mvp24h_x({})`" in text
    assert "## Valid values" not in text


def test_category_block_contents(fallback):
    text = fallback.synthesize(Recognized("foo", "bar"))

    assert "### core: Core Patterns\nCore module building blocks." in text
    assert "Second line." not in text
    assert "- Tool: `mvp24h_core_patterns` (argument `topic`)" in text
    assert "- Resource: `mvp24hours://docs/core/{topic}`" in text
    assert "- Topics: `overview`, `guard-clauses`, `value-objects`, `exceptions`" in text
    assert "- Values: `infrastructure`" in text


def test_examples_come_from_registered_entries(fallback):
    assert fallback.examples() == [
        'Tool: `mvp24h_get_started({"focus": "overview"})`',
        "Resource: `mvp24hours://docs/core/overview`",
    ]


def test_examples_respect_limit(registry):
    assert len(FallbackSynthesizer(registry, examples_per_listing=1).examples()) == 1


def test_listing_is_deterministic(fallback):
    first = fallback.synthesize(Recognized("core", "nope"))
    second = fallback.synthesize(Recognized("core", "nope"))

    assert first == second


def test_reason_for():
    assert FallbackSynthesizer.reason_for(Unrecognized("x")) == FallbackReason.UNRECOGNIZED
    assert FallbackSynthesizer.reason_for(Recognized("a", "b")) == FallbackReason.UNMATCHED
