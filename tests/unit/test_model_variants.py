"""Tests for dreambig.core.model_variants — payload shaping and registry."""

from __future__ import annotations

import pytest

from dreambig.core.config import DreamBigConfig
from dreambig.core.model_variants import (
    DetailedVariant,
    FaceMatchVariant,
    VariantRegistry,
    variant_registry,
)
from dreambig.core.security import PhotoPayload

PHOTO = PhotoPayload(subtype="jpeg", data="AAAA")


class TestDetailedVariant:
    """Text-to-image payloads."""

    def test_model_id_from_config(self, test_config: DreamBigConfig):
        assert DetailedVariant().model_id(test_config) == "imagen-4.0-ultra-generate-001"

    def test_instance_is_prompt_only(self, test_config: DreamBigConfig):
        payload = DetailedVariant().build_payload("draw a hero", PHOTO, "4:3", test_config)
        assert payload["instances"] == [{"prompt": "draw a hero"}]

    def test_parameters(self, test_config: DreamBigConfig):
        params = DetailedVariant().build_parameters("16:9", test_config)
        assert params == {
            "sampleCount": 1,
            "aspectRatio": "16:9",
            "safetyFilterLevel": "block_few",
            "outputDimension": {"widthPixels": 4096, "heightPixels": 4096},
        }

    def test_output_dimension_omitted_when_zero(self):
        cfg = DreamBigConfig(output_dimension=0, _env_file=None)
        assert "outputDimension" not in DetailedVariant().build_parameters("1:1", cfg)

    def test_photo_never_sent(self, test_config: DreamBigConfig):
        payload = DetailedVariant().build_payload("p", PHOTO, "1:1", test_config)
        assert "AAAA" not in str(payload)


class TestFaceMatchVariant:
    """Reference-image payloads."""

    def test_model_id_from_config(self, test_config: DreamBigConfig):
        assert FaceMatchVariant().model_id(test_config) == "imagen-3.0-capability-001"

    def test_reference_image(self, test_config: DreamBigConfig):
        payload = FaceMatchVariant().build_payload("Transform [1]", PHOTO, "3:4", test_config)
        instance = payload["instances"][0]
        assert instance["prompt"] == "Transform [1]"
        reference = instance["referenceImages"][0]
        assert reference["referenceType"] == "REFERENCE_TYPE_SUBJECT"
        assert reference["referenceId"] == 1
        assert reference["referenceImage"] == {"bytesBase64Encoded": "AAAA"}
        assert reference["subjectImageConfig"]["subjectType"] == "SUBJECT_TYPE_PERSON"

    def test_allows_person_generation(self, test_config: DreamBigConfig):
        params = FaceMatchVariant().build_parameters("3:4", test_config)
        assert params["personGeneration"] == "ALLOW_ALL"
        assert params["aspectRatio"] == "3:4"


class TestVariantRegistry:
    """Registration, lookup, and round-robin order."""

    def test_global_registry_contents(self):
        assert variant_registry.list_available() == ["detailed", "face-match"]

    def test_get(self):
        assert isinstance(variant_registry.get("face-match"), FaceMatchVariant)

    def test_get_unknown(self):
        with pytest.raises(KeyError, match="not found"):
            variant_registry.get("imagen-2")

    def test_variant_info(self):
        info = variant_registry.get_variant_info("detailed")
        assert info["id"] == "detailed"
        assert info["generation_type"] == "text-to-image-superhero-creation"
        assert variant_registry.get_variant_info("missing") is None

    def test_next_variant_cycles(self):
        assert variant_registry.next_variant("detailed") == "face-match"
        assert variant_registry.next_variant("face-match") == "detailed"

    def test_next_variant_unknown_starts_over(self):
        assert variant_registry.next_variant(None) == "detailed"

    def test_register_overwrites(self):
        registry = VariantRegistry()
        registry.register(DetailedVariant())
        replacement = DetailedVariant()
        registry.register(replacement)
        assert registry.get("detailed") is replacement
        assert registry.list_available() == ["detailed"]
