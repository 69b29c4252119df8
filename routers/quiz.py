# routers/quiz.py

import logging

from fastapi import APIRouter, Depends, HTTPException

from schemas.quiz import (
    AnswerRequest,
    AnswerResult,
    CreateSessionRequest,
    Question,
    QuizResults,
    QuizSession,
    TimeUpdateRequest,
)
from services import quiz as engine
from services.gemini import GeneratorFactory, get_generator_factory
from storage import QuizStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


def _raise_http(e: engine.QuizError) -> None:
    raise HTTPException(status_code=e.status_code, detail=str(e)) from e


@router.post("/session", response_model=QuizSession)
def create_session(req: CreateSessionRequest, storage: QuizStorage = Depends(get_storage)):
    session = storage.create_session(req.api_key)
    logger.info("Created quiz session %d", session.id)
    return session


@router.get("/session/{session_id}", response_model=QuizSession)
def get_session(session_id: int, storage: QuizStorage = Depends(get_storage)):
    session = storage.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Quiz session not found")
    return session


@router.post("/session/{session_id}/question", response_model=Question)
def generate_question(
    session_id: int,
    storage: QuizStorage = Depends(get_storage),
    generator_factory: GeneratorFactory = Depends(get_generator_factory),
):
    try:
        return engine.next_question(storage, session_id, generator_factory)
    except engine.QuizError as e:
        _raise_http(e)
    except Exception as e:
        logger.exception("Fallback question creation failed")
        raise HTTPException(status_code=500, detail=f"Unable to generate question: {e}")


@router.post("/answer", response_model=AnswerResult)
def submit_answer(req: AnswerRequest, storage: QuizStorage = Depends(get_storage)):
    try:
        return engine.submit_answer(storage, req.question_id, req.answer_index, req.time_spent)
    except engine.QuizError as e:
        _raise_http(e)


@router.get("/session/{session_id}/results", response_model=QuizResults)
def get_results(session_id: int, storage: QuizStorage = Depends(get_storage)):
    try:
        return engine.session_results(storage, session_id)
    except engine.QuizError as e:
        _raise_http(e)


@router.patch("/session/{session_id}/time", response_model=QuizSession)
def update_time(
    session_id: int, req: TimeUpdateRequest, storage: QuizStorage = Depends(get_storage)
):
    try:
        return engine.update_time(storage, session_id, req.time_remaining)
    except engine.QuizError as e:
        _raise_http(e)


@router.post("/session/{session_id}/complete", response_model=QuizSession)
def complete_session(session_id: int, storage: QuizStorage = Depends(get_storage)):
    try:
        return engine.complete_session(storage, session_id)
    except engine.QuizError as e:
        _raise_http(e)
