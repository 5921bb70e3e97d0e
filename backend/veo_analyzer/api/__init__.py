from fastapi import APIRouter
from veo_analyzer.api.routers.sessions import router as sessions_router


router = APIRouter()
router.include_router(sessions_router, tags=["sessions"])
