# File: api/routers/utility_routes.py

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import RedirectResponse, PlainTextResponse

router = APIRouter()


@router.get("/", response_class=RedirectResponse, include_in_schema=False)
async def root():
    return RedirectResponse(url="/docs")


@router.get("/favicon.ico", response_class=PlainTextResponse, include_in_schema=False)
async def favicon():
    return ""


@router.get("/health", status_code=200, tags=["Utility"])
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
