# app/api/v1/endpoints/ping.py
from fastapi import APIRouter

from app.core.config import settings

router = APIRouter()


@router.get("/", summary="Ping service")
async def ping():
    return {"message": "pong", "app": settings.APP_NAME}
