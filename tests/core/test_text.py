"""Tests for Handlebars text rendering."""

import pytest

from memory_lane.text import TextTemplateError, build_context, render_text


def test_placeholders_rendered():
    ctx = build_context("Aria", "Kai", day=3, scene_name="The Cafe")
    text = render_text("{{character}} waves at {{player}} on day {{day}} in {{scene}}.", ctx)
    assert text == "Aria waves at Kai on day 3 in The Cafe."


def test_player_defaults_to_you():
    assert render_text("Hi {{player}}", build_context("Aria")) == "Hi you"


def test_plain_text_untouched():
    assert render_text("No placeholders here {", {}) == "No placeholders here {"


def test_unknown_placeholder_renders_empty():
    assert render_text("[{{nobody}}]", build_context("Aria")) == "[]"


def test_broken_template_raises():
    with pytest.raises(TextTemplateError):
        render_text("{{#if character}}mismatched{{/each}}", build_context("Aria"))
