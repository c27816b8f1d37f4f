# app/services/normalizer.py
"""
模型回覆正規化：
1. 去除前後空白
2. 去除包住整段回覆的 ``` / ```json 圍欄
3. 從第一個 "{" 起解出一個完整 JSON 物件（容忍前後多餘文字；前綴含 "{" 時往後再試）
4. 失敗 -> MalformedUpstreamResponse（不做修補、不重呼叫模型）
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict

from app.core.errors import MalformedUpstreamResponse

DEFAULT_PREVIEW_CHARS = 500

_FENCE_OPEN_RE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```$")


def _reject_constant(name: str):
    # NaN / Infinity 不是合法 JSON，回應時也無法序列化
    raise ValueError(f"non-JSON constant {name!r} in completion reply")


_decoder = json.JSONDecoder(parse_constant=_reject_constant)


def strip_code_fences(text: str) -> str:
    s = (text or "").strip()
    s = _FENCE_OPEN_RE.sub("", s, count=1)
    s = _FENCE_CLOSE_RE.sub("", s, count=1)
    return s.strip()


def _preview(raw: str, limit: int) -> str:
    return raw if len(raw) <= limit else raw[:limit] + "..."


def normalize_reply(raw: str, preview_chars: int = DEFAULT_PREVIEW_CHARS) -> Dict[str, Any]:
    cleaned = strip_code_fences(raw)

    start = cleaned.find("{")
    if start == -1:
        raise MalformedUpstreamResponse(
            "Could not extract JSON from completion reply",
            raw=_preview(raw or "", preview_chars),
        )

    while True:
        try:
            obj, _end = _decoder.raw_decode(cleaned, start)
            break
        except json.JSONDecodeError as e:
            # 前綴文字內的 "{"：從錯誤位置之後的下一個 "{" 再試（不會退回已失敗物件的內部）
            start = cleaned.find("{", max(start + 1, e.pos))
            if start == -1:
                raise MalformedUpstreamResponse(
                    "Completion reply is not valid JSON",
                    raw=_preview(raw or "", preview_chars),
                    details=str(e),
                ) from e
        except ValueError as e:
            raise MalformedUpstreamResponse(
                "Completion reply is not valid JSON",
                raw=_preview(raw or "", preview_chars),
                details=str(e),
            ) from e

    if "ingredients" in obj and not isinstance(obj["ingredients"], list):
        raise MalformedUpstreamResponse(
            '"ingredients" must be an array',
            raw=_preview(raw or "", preview_chars),
        )
    return obj
