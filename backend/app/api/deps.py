"""
Exam Practice Coach - API Dependencies
FastAPI dependencies resolving the services created at startup
"""
from typing import Annotated

from fastapi import Depends, Request

from app.services.practice import PracticeService
from app.services.session_store import PracticeSessionStore


def get_practice_service(request: Request) -> PracticeService:
    """Practice service built once by create_app()."""
    return request.app.state.practice_service


def get_session_store(request: Request) -> PracticeSessionStore:
    """In-memory session store shared by all requests."""
    return request.app.state.session_store


# Type aliases for common dependencies
Practice = Annotated[PracticeService, Depends(get_practice_service)]
SessionStore = Annotated[PracticeSessionStore, Depends(get_session_store)]
