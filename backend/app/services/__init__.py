"""Exam Practice Coach - Services initialization."""
from app.services.practice import PracticeService
from app.services.session_store import PracticeSession, PracticeSessionStore
from app.services.style_summary import UploadedPaper, summarize_papers

__all__ = [
    "PracticeService",
    "PracticeSession",
    "PracticeSessionStore",
    "UploadedPaper",
    "summarize_papers",
]
