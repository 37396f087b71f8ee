from fastapi import APIRouter

from .misc import router as misc_router
from .summaries import router as summaries_router

router = APIRouter()
router.include_router(misc_router)
router.include_router(summaries_router, prefix="/summaries", tags=["summaries"])

__all__ = ["router"]
