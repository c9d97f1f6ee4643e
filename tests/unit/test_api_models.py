"""Tests for dreambig.api.models — Pydantic request validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dreambig.api.models import CompilePromptRequest, MissionRequest, PosterRequest


class TestPosterRequest:
    """Validation of the poster generation body."""

    def test_minimal(self):
        req = PosterRequest.model_validate({"prompt": "a poster"})
        assert req.aspect == "4:3"
        assert req.selected_model == "detailed"
        assert req.selfie_data_url is None
        assert req.career is None

    def test_camel_case_aliases(self):
        req = PosterRequest.model_validate(
            {
                "prompt": "p",
                "selfieDataUrl": "data:image/png;base64,AAAA",
                "selectedModel": "face-match",
                "bgHint": "merlion-park",
            }
        )
        assert req.selfie_data_url == "data:image/png;base64,AAAA"
        assert req.selected_model == "face-match"
        assert req.bg_hint == "merlion-park"

    def test_snake_case_names_accepted(self):
        req = PosterRequest(prompt="p", selfie_data_url="data:image/png;base64,AAAA")
        assert req.selfie_data_url.endswith("AAAA")

    @pytest.mark.parametrize("aspect", ["1:1", "4:3", "3:4", "16:9"])
    def test_supported_aspects(self, aspect):
        assert PosterRequest(prompt="p", aspect=aspect).aspect == aspect

    def test_unsupported_aspect(self):
        with pytest.raises(ValidationError):
            PosterRequest(prompt="p", aspect="21:9")

    def test_unknown_model(self):
        with pytest.raises(ValidationError):
            PosterRequest.model_validate({"prompt": "p", "selectedModel": "imagen-2"})

    def test_prompt_optional(self):
        req = PosterRequest.model_validate({"career": "doctor"})
        assert req.prompt == ""
        assert req.career == "doctor"

    def test_non_integer_seed(self):
        with pytest.raises(ValidationError):
            PosterRequest(prompt="p", seed="lucky")


class TestSupportRequests:
    def test_compile_defaults(self):
        req = CompilePromptRequest()
        assert req.selected_model == "detailed"
        assert req.subject_description is None

    def test_compile_aliases(self):
        req = CompilePromptRequest.model_validate(
            {"selectedModel": "face-match", "subjectDescription": "A child."}
        )
        assert req.selected_model == "face-match"
        assert req.subject_description == "A child."

    def test_mission_requires_all_slots(self):
        with pytest.raises(ValidationError):
            MissionRequest.model_validate({"action": "rescue", "who": "animals"})
