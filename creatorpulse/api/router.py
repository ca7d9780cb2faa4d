from __future__ import annotations

from fastapi import APIRouter

from creatorpulse.api.auth_api import router as auth_router
from creatorpulse.api.feedback_api import router as feedback_router
from creatorpulse.api.meta_api import router as meta_router
from creatorpulse.api.newsletters_api import router as newsletters_router
from creatorpulse.api.sources_api import router as sources_router
from creatorpulse.api.trends_api import router as trends_router
from creatorpulse.api.writing_samples_api import router as writing_samples_router

router = APIRouter()

# Include sub-routers
router.include_router(meta_router, tags=["meta"])
router.include_router(auth_router, prefix="/auth", tags=["auth"])
router.include_router(sources_router, prefix="/sources", tags=["sources"])
router.include_router(trends_router, prefix="/trends", tags=["trends"])
router.include_router(newsletters_router, prefix="/newsletters", tags=["newsletters"])
router.include_router(feedback_router, prefix="/feedback", tags=["feedback"])
router.include_router(
    writing_samples_router, prefix="/writing-samples", tags=["writing-samples"]
)
