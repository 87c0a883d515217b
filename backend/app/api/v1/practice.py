"""
Exam Practice Coach - Practice Session API
Endpoints for question generation, answer evaluation and paper uploads
"""
from typing import Optional

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from app.api.deps import Practice, SessionStore
from app.core.errors import ValidationError, handle_api_error
from app.schemas.practice import (
    BatchEvaluateRequest,
    BatchEvaluateResponse,
    EvaluateAnswerRequest,
    EvaluateAnswerResponse,
    GenerateQuestionsResponse,
    PracticeRequest,
    PracticeSessionResponse,
    UploadPapersResponse,
)
from app.services.style_summary import UploadedPaper, summarize_papers

router = APIRouter(prefix="/practice", tags=["Practice"])


@router.post("/generate-questions", response_model=GenerateQuestionsResponse)
async def generate_questions(request: PracticeRequest, practice: Practice):
    """
    Generate practice questions and open an in-memory practice session.
    """
    try:
        session, questions = await practice.generate_questions(request)
    except ValidationError:
        raise
    except Exception as e:
        return handle_api_error(e, "Error generating questions", "Failed to generate questions")

    return GenerateQuestionsResponse(questions=questions, session_id=session.session_id)


@router.post("/evaluate-answer", response_model=EvaluateAnswerResponse)
async def evaluate_answer(request: EvaluateAnswerRequest, practice: Practice):
    """
    Evaluate a single free-text answer.
    """
    try:
        evaluation = await practice.evaluate_answer(request)
    except ValidationError:
        raise
    except Exception as e:
        return handle_api_error(e, "Error evaluating answer", "Failed to evaluate answer")

    return EvaluateAnswerResponse(
        question_id=request.question_id,
        **evaluation.model_dump(),
    )


@router.post("/evaluate-answers", response_model=BatchEvaluateResponse)
async def evaluate_answers(request: BatchEvaluateRequest, practice: Practice):
    """
    Evaluate every answer of a session at once.

    Each item reports its own evaluation or a generic error with a correlation id.
    """
    results = await practice.evaluate_batch(request.items)
    return BatchEvaluateResponse(results=results)


@router.post("/upload-papers", response_model=UploadPapersResponse)
async def upload_papers(files: Optional[list[UploadFile]] = File(default=None)):
    """
    Summarize the style of uploaded exam papers.

    The files are not parsed; the summary is a placeholder derived from
    their count and size.
    """
    uploads = [upload for upload in (files or []) if upload.filename]
    if not uploads:
        raise ValidationError("No files provided")

    papers = []
    for upload in uploads:
        size = upload.size
        if size is None:
            size = len(await upload.read())
        papers.append(UploadedPaper(file_name=upload.filename, size_bytes=size))

    return UploadPapersResponse(
        style_summary=summarize_papers(papers),
        file_count=len(papers),
        file_names=[paper.file_name for paper in papers],
    )


@router.get("/sessions/{session_id}", response_model=PracticeSessionResponse)
async def get_session(session_id: str, store: SessionStore):
    """
    Get the questions and evaluated answers of a practice session.
    """
    session = store.get(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Practice session not found",
        )

    return PracticeSessionResponse(
        session_id=session.session_id,
        request=session.request,
        questions=session.questions,
        answers=list(session.answers.values()),
    )
