"""Route aggregation for the Tubely web application."""

from fastapi import APIRouter

from . import auth, video

router = APIRouter()
router.include_router(auth.router)
router.include_router(video.router)
