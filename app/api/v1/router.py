# app/api/v1/router.py
from fastapi import APIRouter

from .endpoints import analyze, health, ping

# === API v1 主路由 ===
api_router = APIRouter()

# 系統健康檢查
api_router.include_router(health.router, prefix="/health", tags=["health"])

# ping 用於連線測試
api_router.include_router(ping.router, prefix="/ping", tags=["ping"])

# 成分分析（轉送至 completion service）
api_router.include_router(analyze.router, tags=["analysis"])
