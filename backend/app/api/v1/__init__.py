"""Exam Practice Coach - API v1 Router."""
from fastapi import APIRouter

from app.api.v1.practice import router as practice_router

api_router = APIRouter()

api_router.include_router(practice_router)
