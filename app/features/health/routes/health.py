from fastapi import APIRouter, status

from app.platform.config import settings
from app.platform.response import api_response


router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check():
    """Liveness only; no browser is started."""
    return api_response(
        data={
            "status": "ok",
            "service": settings.APP_NAME,
            "environment": settings.ENVIRONMENT,
        },
        message=f"{settings.APP_NAME} is up",
        status_code=status.HTTP_200_OK,
    )
