# app/api/v1/endpoints/health.py
from fastapi import APIRouter

from app.core.config import settings

router = APIRouter()


@router.get("/", summary="Health check")
async def health_root():
    # 不呼叫 completion service，只回報設定狀態
    return {
        "status": "ok",
        "model": settings.ANTHROPIC_MODEL,
        "completion_configured": bool(settings.ANTHROPIC_API_KEY),
    }
