# app/services/prompts.py
"""
Prompt 建構層（純函式，無副作用）：
- SYSTEM_PROMPT：固定的系統指令，描述回傳 JSON schema 與評分規則。
- build_user_message(mode, content, mime_type) -> dict：依 mode 產生單一 user message。

text 模式會先用 looks_like_product_name() 粗略判斷「產品名稱 or 成分表」，
只影響措辭；兩種措辭都要求模型自行再判斷一次。
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

from app.schemas.analysis import DEFAULT_IMAGE_MIME, AnalysisMode

SYSTEM_PROMPT = """You are an experienced cosmetic chemist and dermatology safety reviewer. You assess skincare \
ingredient lists and give evidence-based safety assessments.

Grade every ingredient with one of three safety tiers:
- "safe": well tolerated, low concern, supported by solid safety data
- "caution": use with care; may irritate sensitive skin, is a possible sensitizer, has mixed evidence, \
or needs precautions (for example daily SPF)
- "flag": serious concern; a known allergen, suspected endocrine disruptor, carcinogen, strong irritant, \
or banned/restricted in a major market (EU, UK, Japan)

Reply with a single valid JSON object and nothing else: no markdown, no commentary, no code fences. \
Use exactly this structure:
{
  "productName": "string or null",
  "extractedIngredientText": "the ingredient list exactly as read or assumed",
  "ingredients": [
    {
      "name": "common name",
      "inci": "INCI / scientific name",
      "safety": "safe | caution | flag",
      "category": ["e.g. Humectant, Emollient, Occlusive, Preservative, Fragrance, Sunscreen, Exfoliant, \
Antioxidant, Retinoid, Surfactant, Emulsifier, Colorant, Anti-acne, Brightener, Soothing, Anti-aging, Vitamin, Mineral"],
      "description": "2-3 sentences on what the ingredient is and what it does in skincare",
      "benefits": ["specific benefits"],
      "concerns": ["specific concerns, or an empty array"],
      "comedogenic": 0,
      "pregnancySafe": true,
      "bannedRegions": ["regions where it is banned or restricted, e.g. EU, UK, Japan, Hawaii, California"],
      "ewgScore": 1
    }
  ],
  "summary": {
    "overallSafety": "safe | caution | flag",
    "safeCount": 0,
    "cautionCount": 0,
    "flagCount": 0,
    "topConcerns": ["the 2-3 most important concerns, short"],
    "skinTypeNotes": "1-2 sentences on suitability for different skin types",
    "pregnancyNote": "1 sentence on pregnancy safety"
  }
}

List ingredients in the order they appear in the source.
comedogenic: integer 0 (will not clog pores) to 5 (highly comedogenic)
ewgScore: integer 1 (lowest hazard) to 10 (highest hazard), following EWG Skin Deep database norms
pregnancySafe: true, false, or null when unknown"""

IMAGE_INSTRUCTION = """Read the product label in this image and extract the complete ingredient list.
Then analyze EVERY ingredient you found for safety, benefits and concerns.
If the product name or brand is visible, put it in "productName".
Return the full JSON analysis in the required structure."""

PRODUCT_TEMPLATE = """Analyze this skincare product: "{content}"

If you recognize it as a specific product (e.g. "CeraVe Moisturizing Cream"), use its known ingredient list.
If it is a product type instead (e.g. "basic moisturizer"), analyze the typical ingredients for that category.
Set "productName" to the product name if you can identify it, otherwise null.
Return the full JSON analysis in the required structure."""

TEXT_AS_PRODUCT_TEMPLATE = """Analyze this skincare input: "{content}"

It looks like a product or brand name. If you recognize the product (e.g. "The Ordinary Niacinamide 10%"), \
use its known ingredient list and set "productName" accordingly.
If it is actually an ingredient list, parse and analyze those exact ingredients and set "productName" to null.
Analyze EVERY ingredient and return the full JSON analysis in the required structure."""

INGREDIENT_LIST_TEMPLATE = """Analyze this skincare ingredient list:
<<<
{content}
>>>

Parse and analyze those exact ingredients (they may be separated by commas, newlines, slashes or bullets) \
and set "productName" to null.
If the input is actually a product or brand name, identify it, use its known ingredient list and set \
"productName" accordingly.
Analyze EVERY ingredient and return the full JSON analysis in the required structure."""

# 粗略判斷門檻：段數 <= 3 且長度 < 80
PRODUCT_NAME_MAX_SEGMENTS = 3
PRODUCT_NAME_MAX_LENGTH = 80

_SEGMENT_SPLIT_RE = re.compile(r"[,\n]")
_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?;base64,", re.IGNORECASE)


def looks_like_product_name(content: str) -> bool:
    """Cheap shape guess: a short string with few comma/newline segments reads as a product name."""
    text = (content or "").strip()
    segments = [s for s in _SEGMENT_SPLIT_RE.split(text) if s.strip()]
    return len(segments) <= PRODUCT_NAME_MAX_SEGMENTS and len(text) < PRODUCT_NAME_MAX_LENGTH


def split_data_url(content: str, mime_type: Optional[str] = None) -> Tuple[str, str]:
    """
    回傳 (media_type, base64_data)。
    瀏覽器常送 data:image/png;base64,... 形式；去掉前綴即可，不在本地驗證 base64。
    明確給定的 mime_type 優先於 data URL 內的型別。
    """
    data = content.strip()
    m = _DATA_URL_RE.match(data)
    if m:
        data = data[m.end():]
        mime_type = mime_type or m.group("mime")
    return mime_type or DEFAULT_IMAGE_MIME, data


def build_user_message(mode: AnalysisMode, content: str, mime_type: Optional[str] = None) -> Dict[str, Any]:
    mode = AnalysisMode(mode)

    if mode is AnalysisMode.image:
        media_type, data = split_data_url(content, mime_type)
        return {
            "role": "user",
            "content": [
                {
                    "type": "image",
                    "source": {"type": "base64", "media_type": media_type, "data": data},
                },
                {"type": "text", "text": IMAGE_INSTRUCTION},
            ],
        }

    text = content.strip()
    if mode is AnalysisMode.product:
        prompt = PRODUCT_TEMPLATE.format(content=text)
    elif looks_like_product_name(text):
        prompt = TEXT_AS_PRODUCT_TEMPLATE.format(content=text)
    else:
        prompt = INGREDIENT_LIST_TEMPLATE.format(content=text)
    return {"role": "user", "content": prompt}
