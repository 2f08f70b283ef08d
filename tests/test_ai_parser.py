"""Tests for the Gemini-backed recipe parser."""
import json
from types import SimpleNamespace

import pytest
from google.api_core.exceptions import ServiceUnavailable

from recipe_feeder.exceptions import (
    AIResponseError,
    AIServiceError,
    ConfigurationError,
    InvalidSourceError,
    NotARecipeError,
)
from recipe_feeder.parsers.ai_parser import AIRecipeParser, strip_code_fence


class BlockedResponse:

    @property
    def text(self):
        raise ValueError("response was blocked")


class FakeModel:
    """Stands in for genai.GenerativeModel and records each request."""

    def __init__(self, answer):
        self.answer = answer
        self.requests = []

    def generate_content(self, contents, **kwargs):
        self.requests.append({"contents": contents, **kwargs})
        if isinstance(self.answer, Exception):
            raise self.answer
        if isinstance(self.answer, str):
            return SimpleNamespace(text=self.answer)
        return self.answer


def parser_for(answer):
    if isinstance(answer, (dict, list)):
        answer = json.dumps(answer)
    model = FakeModel(answer)
    return AIRecipeParser("test-key", client=model), model


RECIPE = {
    "title": "Lemon Cake",
    "source_name": None,
    "total_time": "1 hr",
    "servings": "8 slices",
    "ingredients": ["2 cups flour", "  ", 3, "1 lemon"],
    "instructions": ["Mix.", "Bake."],
    "notes": None,
    "unexpected": "ignored",
}


@pytest.mark.parametrize("api_key", [None, "", "   "])
def test_missing_key_is_a_configuration_error(api_key):
    with pytest.raises(ConfigurationError):
        AIRecipeParser(api_key, client=FakeModel("{}"))


def test_strip_code_fence():
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('Here you go:\n```\n[1]\n```') == "[1]"
    assert strip_code_fence(' {"a": 1} ') == '{"a": 1}'


class TestExtractRecipePayload:

    def test_payload_is_cleaned(self):
        parser, model = parser_for(RECIPE)
        payload = parser.parse_text("Lemon cake: flour, lemon...")

        assert payload.title == "Lemon Cake"
        assert payload.servings == 8
        assert payload.ingredients == ["2 cups flour", "1 lemon"]
        assert payload.instructions == ["Mix.", "Bake."]
        assert not payload.is_empty
        request = model.requests[0]
        assert request["contents"][-1].endswith("Text to parse:\nLemon cake: flour, lemon...")
        assert request["request_options"] == {"retry": None, "timeout": 60}
        assert request["generation_config"] == {"max_output_tokens": 4096}

    def test_fenced_json_is_accepted(self):
        parser, _ = parser_for("```json\n" + json.dumps(RECIPE) + "\n```")
        assert parser.parse_text("cake").title == "Lemon Cake"

    def test_no_recipe_marker(self):
        parser, _ = parser_for({"error": "no_recipe"})
        with pytest.raises(NotARecipeError):
            parser.parse_text("my shopping list")

    def test_invalid_json(self):
        parser, _ = parser_for("Sorry, I can't help with that.")
        with pytest.raises(AIResponseError) as excinfo:
            parser.parse_text("cake")
        assert excinfo.value.message == "Failed to parse AI response."

    def test_wrong_top_level_type(self):
        parser, _ = parser_for(["2 cups flour"])
        with pytest.raises(AIResponseError):
            parser.parse_text("cake")

    def test_wrong_field_type(self):
        parser, _ = parser_for({"title": "Cake", "ingredients": "flour, sugar"})
        with pytest.raises(AIResponseError):
            parser.parse_text("cake")

    def test_service_failure(self):
        parser, _ = parser_for(ServiceUnavailable("model overloaded"))
        with pytest.raises(AIServiceError) as excinfo:
            parser.parse_text("cake")
        assert isinstance(excinfo.value.__cause__, ServiceUnavailable)

    def test_unavailable_model_is_called_once_without_client_retry(self):
        parser, model = parser_for(ServiceUnavailable("503"))
        with pytest.raises(AIServiceError):
            parser.parse_text("cake")
        assert len(model.requests) == 1
        assert model.requests[0]["request_options"]["retry"] is None
        assert model.requests[0]["request_options"]["timeout"] == 60

    def test_blocked_response(self):
        parser, _ = parser_for(BlockedResponse())
        with pytest.raises(AIServiceError):
            parser.parse_text("cake")

    def test_empty_response(self):
        parser, _ = parser_for("   ")
        with pytest.raises(AIServiceError):
            parser.parse_text("cake")


def test_document_blobs_precede_prompt():
    parser, model = parser_for(RECIPE)
    blobs = [
        {"mime_type": "image/jpeg", "data": b"page-1"},
        {"mime_type": "image/jpeg", "data": b"page-2"},
    ]
    parser.parse_document(blobs)

    contents = model.requests[0]["contents"]
    assert contents[:2] == blobs
    assert isinstance(contents[2], str)
    assert '"no_recipe"' in contents[2]


def test_video_text_is_truncated():
    parser, model = parser_for(RECIPE)
    parser.parse_video_text("Lemon Cake Video", "a" * 20000, "transcript")

    prompt = model.requests[0]["contents"][-1]
    assert 'Video title: "Lemon Cake Video"' in prompt
    assert "Transcript:\n" in prompt
    assert "a" * 15000 in prompt
    assert "a" * 15001 not in prompt
    assert '{"error": "no_recipe"}' in prompt


def test_video_description_labels():
    parser, model = parser_for(RECIPE)
    parser.parse_video_text("Cake", "Mix flour and bake it.", "description")
    prompt = model.requests[0]["contents"][-1]
    assert "description of a YouTube cooking video" in prompt
    assert "Description:\nMix flour and bake it." in prompt


class TestFormatLines:

    def test_lines_are_filtered(self):
        parser, model = parser_for(["Preheat oven", "", 4, "  Bake  "])
        assert parser.format_lines("Preheat oven. Bake.", "instructions") == \
            ["Preheat oven", "Bake"]
        assert model.requests[0]["contents"][-1].endswith("Text to format:\nPreheat oven. Bake.")

    def test_unknown_field(self):
        parser, model = parser_for([])
        with pytest.raises(InvalidSourceError):
            parser.format_lines("text", "notes")
        assert model.requests == []

    def test_non_list_answer(self):
        parser, _ = parser_for({"lines": ["a"]})
        with pytest.raises(AIResponseError):
            parser.format_lines("a", "ingredients")
