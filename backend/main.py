"""
Timed Interview - FastAPI Backend

Drives a single candidate through a six-question timed technical interview:
- Resume upload with contact extraction
- Chat-style collection of missing profile fields
- Per-question countdown with automatic submission on expiry
- LLM evaluation with fixed fallbacks
- Pause / resume / restart and a completed-interview log

Compatible with DeepSeek / llama.cpp REST API.
"""
import sys
import os
import asyncio
import logging

from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, UploadFile, File, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from utils.config import config
from models.schemas import (
    DraftRequest,
    ProfileMessageRequest,
    ReviewSort,
    ScoreBand,
    SubmitAnswerRequest,
)
from interview.controller import StageController
from interview.scoring import ScoreAggregator
from llm.client import llm_client
from resume import UnsupportedResumeError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# ================================================================
# FastAPI App Initialization
# ================================================================

app = FastAPI(
    title="Timed Interview API",
    description="Six-question timed technical interview with LLM evaluation",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ================================================================
# Controller
# ================================================================

# Single controller for the process; one candidate interviews at a time
_controller: StageController = StageController()


def get_controller() -> StageController:
    """Dependency returning the process-wide controller."""
    return _controller


def require_session(controller: StageController):
    if controller.session is None:
        raise HTTPException(
            status_code=400,
            detail="No active interview session. Please start an interview first."
        )
    return controller.session


@app.on_event("shutdown")
async def shutdown():
    _controller.shutdown()


# ================================================================
# API Endpoints
# ================================================================

@app.get("/")
async def root(controller: StageController = Depends(get_controller)):
    """Health check endpoint."""
    return {
        "status": "running",
        "version": "1.0.0",
        "service": "Timed Interview",
        "stage": controller.stage.stage.value,
    }


@app.get("/health/llm")
async def llm_health():
    """Check whether the LLM server answers."""
    available = await asyncio.to_thread(llm_client.health_check)
    return {"llm_available": available, "url": llm_client.completion_url}


@app.post("/upload-resume")
async def upload_resume(
    file: UploadFile = File(...),
    controller: StageController = Depends(get_controller)
):
    """
    Upload a resume (PDF or DOCX) and register the candidate.

    Returns:
        Extracted profile, fields still missing and the first prompt
    """
    data = await file.read()
    try:
        profile = controller.upload_resume(data, file.filename or "")
    except UnsupportedResumeError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if profile is None:
        raise HTTPException(
            status_code=400,
            detail="An interview is still in progress. Resume or restart it first."
        )

    return {
        "candidate": profile,
        "missing_fields": profile.missing_fields(),
        "interviewer_message": controller.messages[-1].content if controller.messages else None,
        "stage": controller.stage,
    }


@app.post("/profile-message")
async def profile_message(
    request: ProfileMessageRequest,
    controller: StageController = Depends(get_controller)
):
    """
    Answer the current profile prompt, or type "ready" to start.

    Returns:
        Updated status; includes the session once the interview starts
    """
    if controller.candidate is None:
        raise HTTPException(status_code=400, detail="No candidate. Please upload a resume first.")

    await controller.handle_profile_message(request.message)
    return controller.status()


@app.post("/start-interview")
async def start_interview(controller: StageController = Depends(get_controller)):
    """
    Generate questions for the current candidate and start the countdown.
    """
    candidate = controller.candidate
    if candidate is None:
        raise HTTPException(status_code=400, detail="No candidate. Please upload a resume first.")
    if candidate.missing_fields():
        raise HTTPException(
            status_code=400,
            detail=f"Profile incomplete. Missing: {', '.join(candidate.missing_fields())}"
        )

    session = await controller.begin_interview()
    if session is None:
        raise HTTPException(status_code=400, detail="Interview could not be started.")
    return controller.status()


@app.put("/draft")
async def update_draft(
    request: DraftRequest,
    controller: StageController = Depends(get_controller)
):
    """Save the in-progress answer text so it survives an expiry."""
    require_session(controller)
    controller.update_draft(request.text)
    return {"status": "saved"}


@app.post("/submit-answer")
async def submit_answer(
    request: SubmitAnswerRequest,
    controller: StageController = Depends(get_controller)
):
    """
    Submit the answer for the current question.

    Returns:
        Evaluation (if applied) and the updated status
    """
    require_session(controller)
    evaluation = await controller.submit_answer(request.answer, index=request.question_index)
    return {
        "accepted": evaluation is not None,
        "evaluation": evaluation,
        "status": controller.status(),
    }


@app.post("/pause")
async def pause_interview(controller: StageController = Depends(get_controller)):
    require_session(controller)
    if not controller.pause():
        raise HTTPException(status_code=400, detail="Interview is not in progress.")
    return controller.status()


@app.post("/resume")
async def resume_interview(controller: StageController = Depends(get_controller)):
    """Continue a paused interview at the same question with a fresh countdown."""
    require_session(controller)
    if not controller.resume():
        raise HTTPException(status_code=400, detail="Interview is not paused.")
    return controller.status()


@app.post("/restart")
async def restart_interview(controller: StageController = Depends(get_controller)):
    """
    Discard the current candidate and unfinished session.
    Completed interviews stay in the log.
    """
    controller.restart()
    return {"status": "Interview reset successfully", "stage": controller.stage}


@app.post("/end-interview")
async def end_interview(controller: StageController = Depends(get_controller)):
    """
    End the interview early; unanswered questions score 0.
    """
    require_session(controller)
    session = await controller.end_interview()
    if session is None:
        raise HTTPException(status_code=400, detail="Interview is not running.")
    return {
        "status": "Interview ended",
        "total_score": session.total_score,
        "summary": session.summary,
    }


@app.get("/interview-status")
async def get_interview_status(controller: StageController = Depends(get_controller)):
    """
    Current stage, candidate, session, countdown and transcript.
    """
    return controller.status()


@app.get("/interview-report")
async def get_interview_report(controller: StageController = Depends(get_controller)):
    """
    Score report for the current session.

    Returns:
        Totals, pass/fail, performance tier and per-question breakdown
    """
    session = require_session(controller)
    return {
        "session_id": session.session_id,
        "candidate": controller.candidate,
        "status": session.status,
        "summary": session.summary,
        "report": controller.report(),
        "questions": session.questions,
    }


def _review_entry(controller: StageController, entry) -> Dict[str, Any]:
    return {
        "session_id": entry.session_id,
        "candidate": controller.candidates.get(entry.candidate_id),
        "total_score": entry.total_score,
        "percentage": ScoreAggregator.percentage(entry.total_score),
        "passed": ScoreAggregator.is_passed(entry.total_score),
        "band": ScoreAggregator.score_band(entry.total_score),
        "summary": entry.summary,
        "end_time": entry.end_time,
    }


@app.get("/completed-interviews")
async def completed_interviews(
    search: Optional[str] = Query(None, description="Match candidate name or email"),
    sort_by: ReviewSort = Query(ReviewSort.SCORE),
    band: Optional[ScoreBand] = Query(None, description="high >= 80%, medium 60-79%, low < 60%"),
    controller: StageController = Depends(get_controller)
):
    """
    Completed interviews for operator review.

    Returns:
        Matching interviews, best score first unless sort_by says otherwise
    """
    entries = controller.review_completed(search=search, sort_by=sort_by, band=band)
    return [_review_entry(controller, entry) for entry in entries]


@app.get("/completed-interviews/{session_id}")
async def completed_interview_detail(
    session_id: str,
    controller: StageController = Depends(get_controller)
):
    """
    Full results of one logged interview.

    Returns:
        Candidate, summary, score report and every question with its answer
    """
    entry = controller.completed.get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No completed interview {session_id}")

    return {
        **_review_entry(controller, entry),
        "report": controller.report(session_id),
        "questions": entry.questions,
    }


@app.get("/candidates/{candidate_id}/interviews")
async def candidate_interviews(
    candidate_id: str,
    controller: StageController = Depends(get_controller)
):
    """
    Every logged interview of one candidate, newest first.
    """
    if candidate_id not in controller.candidates:
        raise HTTPException(status_code=404, detail=f"Unknown candidate {candidate_id}")
    return [_review_entry(controller, entry) for entry in controller.candidate_results(candidate_id)]


# ================================================================
# Main Entry Point
# ================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.server.host, port=config.server.port)
