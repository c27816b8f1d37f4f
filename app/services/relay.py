# app/services/relay.py
from __future__ import annotations

from typing import Any, Callable, Dict

from loguru import logger

from app.core.config import settings
from app.schemas.analysis import AnalysisRequest
from app.services.completion import CompletionClient, build_completion_client
from app.services.normalizer import DEFAULT_PREVIEW_CHARS, normalize_reply
from app.services.prompts import SYSTEM_PROMPT, build_user_message


class AnalysisRelay:
    """
    一次請求 = 一次 prompt 建構 + 一次模型呼叫 + 一次回覆正規化。
    無快取、無重試、無跨請求狀態。
    """

    def __init__(self, client_factory: Callable[[], CompletionClient], preview_chars: int = DEFAULT_PREVIEW_CHARS):
        self._client_factory = client_factory
        self.preview_chars = preview_chars

    async def analyze(self, request: AnalysisRequest) -> Dict[str, Any]:
        # 先確認金鑰（ConfigurationError），再組 prompt 與呼叫
        client = self._client_factory()
        message = build_user_message(request.mode, request.content, request.mime_type)

        logger.info("Analysis started: mode={} content_chars={}", request.mode.value, len(request.content))
        raw_text = await client.complete(SYSTEM_PROMPT, [message])
        result = normalize_reply(raw_text, preview_chars=self.preview_chars)
        logger.info(
            "Analysis done: mode={} ingredients={}",
            request.mode.value,
            len(result.get("ingredients") or []),
        )
        return result


def get_analysis_relay() -> AnalysisRelay:
    """FastAPI 依賴：測試時以 app.dependency_overrides 換成假的 client。"""
    return AnalysisRelay(
        lambda: build_completion_client(settings),
        preview_chars=settings.RAW_PREVIEW_CHARS,
    )
