# tests/test_prompts.py
import pytest

from app.schemas.analysis import AnalysisMode
from app.services.prompts import (
    IMAGE_INSTRUCTION,
    SYSTEM_PROMPT,
    build_user_message,
    looks_like_product_name,
    split_data_url,
)


@pytest.mark.parametrize(
    "content",
    [
        "CeraVe Moisturizing Cream",
        "The Ordinary Niacinamide 10% + Zinc 1%",
        "Water, Glycerin, Niacinamide",
        "Water, Glycerin,",
        "x" * 79,
    ],
)
def test_short_inputs_read_as_product_names(content):
    assert looks_like_product_name(content) is True


@pytest.mark.parametrize(
    "content",
    [
        "Water, Glycerin, Niacinamide, Phenoxyethanol, Fragrance",
        "Water\nGlycerin\nNiacinamide\nFragrance",
        "x" * 80,
        "Aqua, Glycerin, Cetearyl Alcohol - a long description of a product that goes past the limit",
    ],
)
def test_long_or_segmented_inputs_read_as_ingredient_lists(content):
    assert looks_like_product_name(content) is False


def test_system_prompt_describes_full_schema_and_scales():
    for key in (
        "productName", "extractedIngredientText", "ingredients", "inci", "safety", "category",
        "benefits", "concerns", "comedogenic", "pregnancySafe", "bannedRegions", "ewgScore",
        "overallSafety", "safeCount", "cautionCount", "flagCount", "topConcerns",
        "skinTypeNotes", "pregnancyNote",
    ):
        assert f'"{key}"' in SYSTEM_PROMPT
    assert '"safe"' in SYSTEM_PROMPT and '"caution"' in SYSTEM_PROMPT and '"flag"' in SYSTEM_PROMPT
    assert "0 (will not clog pores) to 5" in SYSTEM_PROMPT
    assert "1 (lowest hazard) to 10" in SYSTEM_PROMPT


def test_product_mode_message():
    msg = build_user_message(AnalysisMode.product, "  CeraVe Moisturizing Cream ")
    assert msg["role"] == "user"
    assert '"CeraVe Moisturizing Cream"' in msg["content"]
    assert "known ingredient list" in msg["content"]
    assert "typical ingredients" in msg["content"]


def test_text_mode_short_input_uses_product_wording():
    msg = build_user_message(AnalysisMode.text, "CeraVe Moisturizing Cream")
    assert "looks like a product or brand name" in msg["content"]
    assert "<<<" not in msg["content"]


def test_text_mode_ingredient_dump_uses_list_wording():
    content = "Water, Glycerin, Niacinamide, Phenoxyethanol, Fragrance"
    msg = build_user_message(AnalysisMode.text, content)
    assert "ingredient list:\n<<<\n" + content + "\n>>>" in msg["content"]
    assert "looks like a product or brand name" not in msg["content"]
    # 模型仍被要求自行再判斷
    assert "actually a product or brand name" in msg["content"]


def test_image_mode_defaults_to_jpeg():
    msg = build_user_message(AnalysisMode.image, "aGVsbG8=")
    image_block, text_block = msg["content"]
    assert image_block == {
        "type": "image",
        "source": {"type": "base64", "media_type": "image/jpeg", "data": "aGVsbG8="},
    }
    assert text_block == {"type": "text", "text": IMAGE_INSTRUCTION}


def test_image_mode_uses_given_mime_type():
    msg = build_user_message("image", "aGVsbG8=", "image/png")
    assert msg["content"][0]["source"]["media_type"] == "image/png"


def test_split_data_url():
    assert split_data_url("data:image/webp;base64,AAAA") == ("image/webp", "AAAA")
    # 明確指定的 mimeType 優先
    assert split_data_url("data:image/webp;base64,AAAA", "image/png") == ("image/png", "AAAA")
    assert split_data_url("AAAA") == ("image/jpeg", "AAAA")


def test_image_content_is_not_validated_locally():
    msg = build_user_message(AnalysisMode.image, "not base64 at all")
    assert msg["content"][0]["source"]["data"] == "not base64 at all"
