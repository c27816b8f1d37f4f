# app/services/completion.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import anthropic
from anthropic import AsyncAnthropic
from loguru import logger

from app.core.config import Settings
from app.core.errors import ConfigurationError, MalformedUpstreamResponse, UpstreamError


class CompletionClient:
    """
    單輪、非串流呼叫 Anthropic Messages API。
    - 不重試（max_retries=0），失敗一律轉成 UpstreamError
    - 回傳模型回覆的純文字（所有 text block 串接）
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int,
        sdk_client: Optional[Any] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self._sdk = sdk_client or AsyncAnthropic(api_key=api_key, max_retries=0)

    async def complete(self, system: str, messages: List[Dict[str, Any]]) -> str:
        try:
            resp = await self._sdk.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=messages,
            )
        except anthropic.APIStatusError as e:
            raise UpstreamError(
                "Completion service returned an error",
                upstream_status=e.status_code,
                details=str(e),
            ) from e
        except anthropic.APIConnectionError as e:
            raise UpstreamError("Could not reach completion service", details=str(e)) from e
        except anthropic.APIError as e:
            raise UpstreamError("Completion service call failed", details=str(e)) from e

        usage = getattr(resp, "usage", None)
        if usage is not None:
            logger.info(
                "Completion usage: model={} input_tokens={} output_tokens={}",
                self.model,
                getattr(usage, "input_tokens", None),
                getattr(usage, "output_tokens", None),
            )
        if getattr(resp, "stop_reason", None) == "max_tokens":
            logger.warning("Completion hit max_tokens={}; reply is likely truncated", self.max_tokens)

        text = "".join(
            getattr(block, "text", "") or ""
            for block in (getattr(resp, "content", None) or [])
            if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise MalformedUpstreamResponse("Completion service returned no text", raw="")
        return text


def build_completion_client(settings: Settings) -> CompletionClient:
    """每次請求時讀取金鑰；未設定就在發出任何網路請求前失敗。"""
    api_key = settings.ANTHROPIC_API_KEY
    if not api_key:
        raise ConfigurationError("API key not configured")
    return CompletionClient(
        api_key=api_key,
        model=settings.ANTHROPIC_MODEL,
        max_tokens=settings.ANTHROPIC_MAX_TOKENS,
    )
