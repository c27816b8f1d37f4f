# app/schemas/analysis.py
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_IMAGE_MIME = "image/jpeg"

SafetyTier = Literal["safe", "caution", "flag"]


class AnalysisMode(str, Enum):
    text = "text"
    product = "product"
    image = "image"


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mode: AnalysisMode = Field(..., description="text | product | image")
    content: str = Field(
        ...,
        description="Free text, a product name, or base64 image bytes (a data: URL is accepted too)",
    )
    # 只有 mode=image 時有意義
    mime_type: Optional[str] = Field(None, alias="mimeType", description="Image media type, default image/jpeg")

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, v: str) -> str:
        # 只檢查是否為空白；不改動內容（base64 需原樣轉送）
        if not v.strip():
            raise ValueError("content must not be empty")
        return v


# ---- 以下模型僅用於 OpenAPI 文件；成功回應會原樣轉送，不經過這些模型 ----

class IngredientRecord(BaseModel):
    name: str
    inci: str
    safety: SafetyTier
    category: List[str] = []
    description: str = ""
    benefits: List[str] = []
    concerns: List[str] = []
    comedogenic: int = Field(0, ge=0, le=5)
    pregnancySafe: Optional[bool] = None
    bannedRegions: List[str] = []
    ewgScore: int = Field(1, ge=1, le=10)


class AnalysisSummary(BaseModel):
    overallSafety: SafetyTier
    safeCount: int = 0
    cautionCount: int = 0
    flagCount: int = 0
    topConcerns: List[str] = []
    skinTypeNotes: str = ""
    pregnancyNote: str = ""


class AnalysisResult(BaseModel):
    productName: Optional[str] = None
    extractedIngredientText: str = ""
    ingredients: List[IngredientRecord] = []
    summary: AnalysisSummary


class ErrorOut(BaseModel):
    error: str
    kind: Optional[str] = None
    details: Optional[Any] = None
