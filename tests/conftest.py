# tests/conftest.py
import json
import os
from typing import Any, Dict, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport

# ---- 測試期環境變數（先於 app 載入）----
os.environ.setdefault("ENV", "test")
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-placeholder")

from app.main import app  # noqa: E402
from app.services.relay import AnalysisRelay, get_analysis_relay  # noqa: E402

SAMPLE_RESULT: Dict[str, Any] = {
    "productName": "CeraVe Moisturizing Cream",
    "extractedIngredientText": "Water, Glycerin, Ceramide NP",
    "ingredients": [
        {
            "name": "Water",
            "inci": "Aqua",
            "safety": "safe",
            "category": ["Solvent"],
            "description": "The base of most creams.",
            "benefits": ["Hydration vehicle"],
            "concerns": [],
            "comedogenic": 0,
            "pregnancySafe": True,
            "bannedRegions": [],
            "ewgScore": 1,
        },
        {
            "name": "Glycerin",
            "inci": "Glycerin",
            "safety": "safe",
            "category": ["Humectant"],
            "description": "Draws water into the skin.",
            "benefits": ["Hydration"],
            "concerns": [],
            "comedogenic": 0,
            "pregnancySafe": True,
            "bannedRegions": [],
            "ewgScore": 1,
        },
    ],
    "summary": {
        "overallSafety": "safe",
        "safeCount": 2,
        "cautionCount": 0,
        "flagCount": 0,
        "topConcerns": [],
        "skinTypeNotes": "Suitable for all skin types.",
        "pregnancyNote": "No known pregnancy concerns.",
    },
}


class FakeCompletionClient:
    """假的 completion client：記錄每次呼叫，回傳固定文字或拋出指定例外。"""

    def __init__(self, reply: str = "", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, system: str, messages: List[Dict[str, Any]]) -> str:
        self.calls.append({"system": system, "messages": messages})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture(scope="session")
def anyio_backend():
    """讓 pytest 使用 asyncio event loop。"""
    return "asyncio"


@pytest.fixture
async def client():
    """使用 ASGITransport 直接掛載 app，不需啟動伺服器。"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def fake_completion():
    """以 dependency_overrides 換掉真正的 Anthropic client。"""
    fake = FakeCompletionClient(reply=json.dumps(SAMPLE_RESULT))
    app.dependency_overrides[get_analysis_relay] = lambda: AnalysisRelay(lambda: fake)
    try:
        yield fake
    finally:
        app.dependency_overrides.pop(get_analysis_relay, None)


@pytest.fixture
def sample_result() -> Dict[str, Any]:
    return json.loads(json.dumps(SAMPLE_RESULT))
