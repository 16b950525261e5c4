"""
Pydantic models for the timed interview backend.
Covers candidates, questions, sessions, timer state and API payloads.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import List, Dict, Optional

from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


# Fixed per-tier time limits in seconds
TIME_LIMITS: Dict[Difficulty, int] = {
    Difficulty.EASY: 20,
    Difficulty.MEDIUM: 60,
    Difficulty.HARD: 120,
}

# Question order every session must follow
DIFFICULTY_PLAN: List[Difficulty] = [
    Difficulty.EASY,
    Difficulty.EASY,
    Difficulty.MEDIUM,
    Difficulty.MEDIUM,
    Difficulty.HARD,
    Difficulty.HARD,
]

QUESTION_COUNT = len(DIFFICULTY_PLAN)
MAX_QUESTION_SCORE = 100


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"


class Stage(str, Enum):
    """Coarse flow phase derived from candidate and session state."""
    UPLOAD = "upload"
    PROFILE = "profile"
    INTERVIEW = "interview"
    COMPLETED = "completed"


class ReviewSort(str, Enum):
    """Orderings for the completed-interview review list."""
    SCORE = "score"
    DATE = "date"
    NAME = "name"


class ScoreBand(str, Enum):
    """Coarse score filter: high >= 80%, medium 60-79%, low < 60%."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


REQUIRED_PROFILE_FIELDS = ["name", "email", "phone"]


# ========================================
# Candidate
# ========================================

class CandidateProfile(BaseModel):
    id: str = Field(default_factory=lambda: f"candidate-{uuid.uuid4().hex[:12]}")
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    resume_file_name: Optional[str] = None
    resume_content: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)

    def missing_fields(self) -> List[str]:
        """Required contact fields still blank, in fixed priority order."""
        return [f for f in REQUIRED_PROFILE_FIELDS if not getattr(self, f)]


class ParsedResume(BaseModel):
    """Best-effort fields pulled out of an uploaded resume."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    content: str = ""


class ResumeValidation(BaseModel):
    is_valid: bool
    missing_fields: List[str] = []


# ========================================
# Questions and sessions
# ========================================

class Question(BaseModel):
    id: str
    question: str
    difficulty: Difficulty
    time_limit: int  # seconds
    category: Optional[str] = None

    # Result fields, written when answered or expired
    answer: Optional[str] = None
    time_spent: Optional[int] = None
    score: Optional[int] = None

    @property
    def is_answered(self) -> bool:
        return self.answer is not None


class InterviewSession(BaseModel):
    session_id: str = Field(default_factory=lambda: f"session-{uuid.uuid4().hex[:12]}")
    candidate_id: str
    status: SessionStatus = SessionStatus.NOT_STARTED
    questions: List[Question]
    current_question_index: int = 0
    start_time: datetime = Field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    total_score: Optional[int] = None
    summary: Optional[str] = None

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None


class CompletedInterview(InterviewSession):
    """A session frozen at completion, as stored in the append-only log."""
    status: SessionStatus = SessionStatus.COMPLETED
    total_score: int
    summary: str
    end_time: datetime


class TimerState(BaseModel):
    question_index: Optional[int] = None
    time_limit: int = 0
    remaining: int = 0
    running: bool = False
    warning: bool = False
    expired: bool = False


class ChatMessage(BaseModel):
    role: str  # "ai" or "user"
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)


# ========================================
# Evaluation and scoring
# ========================================

class Evaluation(BaseModel):
    score: int = Field(ge=0, le=MAX_QUESTION_SCORE)
    feedback: str
    is_fallback: bool = False


class QuestionScore(BaseModel):
    question_id: str
    difficulty: Difficulty
    score: int
    time_spent: Optional[int] = None
    answered: bool


class ScoreReport(BaseModel):
    total_score: int
    max_score: int
    percentage: int
    passed: bool
    performance: str
    breakdown: List[QuestionScore] = []


# ========================================
# Persistence surface
# ========================================

class InterviewSnapshot(BaseModel):
    """Everything needed to resume after the consuming app restarts."""
    candidates: List[CandidateProfile] = []
    current_candidate_id: Optional[str] = None
    current_session: Optional[InterviewSession] = None
    current_answer: str = ""
    completed_interviews: List[CompletedInterview] = []


# ========================================
# API payloads
# ========================================

class StageView(BaseModel):
    stage: Stage
    awaiting_resume_decision: bool = False


class InterviewStatus(BaseModel):
    stage: StageView
    candidate: Optional[CandidateProfile] = None
    session: Optional[InterviewSession] = None
    timer: TimerState
    missing_fields: List[str] = []
    messages: List[ChatMessage] = []


class ProfileMessageRequest(BaseModel):
    message: str


class DraftRequest(BaseModel):
    text: str = ""


class SubmitAnswerRequest(BaseModel):
    answer: str
    question_index: Optional[int] = None
