# app/api/v1/endpoints/analyze.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.core.errors import invalid_request_from_validation
from app.schemas.analysis import AnalysisRequest, AnalysisResult, ErrorOut
from app.services.relay import AnalysisRelay, get_analysis_relay

router = APIRouter()


async def read_analysis_request(request: Request) -> AnalysisRequest:
    """
    不看 Content-Type，直接把 body 當 JSON 解析：
    瀏覽器 fetch 送字串 body 時預設是 text/plain。
    """
    body = await request.body()
    try:
        return AnalysisRequest.model_validate_json(body)
    except ValidationError as e:
        raise invalid_request_from_validation(e.errors()) from e


@router.post(
    "/analyze",
    summary="Analyze skincare ingredients (text, product name or label image)",
    responses={
        200: {"model": AnalysisResult},
        400: {"model": ErrorOut},
        500: {"model": ErrorOut},
        502: {"model": ErrorOut},
    },
)
async def analyze(
    payload: AnalysisRequest = Depends(read_analysis_request),
    relay: AnalysisRelay = Depends(get_analysis_relay),
):
    """
    Body（JSON，任何 Content-Type 皆可）：
    - **mode**: `text` | `product` | `image`
    - **content**: 文字、產品名稱或 base64 圖片
    - **mimeType**: 圖片型別（僅 image 模式，預設 image/jpeg）

    成功時原樣回傳模型的 JSON（不做欄位層級驗證）。
    """
    result = await relay.analyze(payload)
    return JSONResponse(content=result)
