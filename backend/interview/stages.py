"""
Stage resolution for the interview flow.
"""
from typing import Optional

from models.schemas import (
    CandidateProfile,
    InterviewSession,
    SessionStatus,
    Stage,
    StageView,
)


def resolve_stage(
    candidate: Optional[CandidateProfile],
    session: Optional[InterviewSession],
) -> StageView:
    """
    Map candidate and session state to the stage to show.

    Checked as a priority list, first match wins:
        paused session      -> interview, waiting on resume-or-restart
        in-progress session -> interview, even if profile fields are blank
        completed session   -> completed
        candidate present   -> profile
        otherwise           -> upload
    """
    if session is not None:
        if session.status == SessionStatus.PAUSED:
            return StageView(stage=Stage.INTERVIEW, awaiting_resume_decision=True)
        if session.status == SessionStatus.IN_PROGRESS:
            return StageView(stage=Stage.INTERVIEW)
        if session.status == SessionStatus.COMPLETED:
            return StageView(stage=Stage.COMPLETED)

    if candidate is not None:
        return StageView(stage=Stage.PROFILE)

    return StageView(stage=Stage.UPLOAD)
