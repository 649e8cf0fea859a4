"""API routes mounted under API_PREFIX."""

from fastapi import APIRouter

from app.api import health, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(users.router, tags=["users"])
