"""
Home, ping and health check API routes
"""

from datetime import datetime, timezone
from pathlib import Path
from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import HTMLResponse

from api.dependencies import get_user_repository
from config import settings
from database.user_repository import UserRepository

router = APIRouter()

INDEX_PAGE = Path(__file__).resolve().parent.parent / "static" / "index.html"


@router.get("/", response_class=HTMLResponse)
async def index():
    return HTMLResponse(INDEX_PAGE.read_text(encoding="utf-8"))


@router.get("/ping")
async def ping():
    return {"PONG": f"{settings.SERVICE_NAME} is running fine!"}


@router.get("/health")
async def health_check(repository: UserRepository = Depends(get_user_repository)):
    """Health check - reports healthy only when the store answers"""
    try:
        await repository.check_connection()
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Health check failed: {str(e)}")

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected"
    }
