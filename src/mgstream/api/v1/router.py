"""Aggregate v1 routers."""

from fastapi import APIRouter

from mgstream.api.v1.annotation import router as annotation_router

router = APIRouter(prefix="/api/v1")
router.include_router(annotation_router)
