"""
In-process stores for candidates and completed interviews.
Both are keyed by candidate id; the completed log is append-only.
"""
import logging
from typing import Dict, List, Optional, Tuple

from models.schemas import CandidateProfile, CompletedInterview, InterviewSession, SessionStatus

logger = logging.getLogger(__name__)


class CandidateRegistry:
    """
    Candidate profiles by id. Profiles are updated field by field and never deleted.
    """

    def __init__(self):
        self._candidates: Dict[str, CandidateProfile] = {}

    def add(self, profile: CandidateProfile) -> CandidateProfile:
        """Insert or replace a profile under its id."""
        self._candidates[profile.id] = profile
        logger.info(f"Registered candidate {profile.id}")
        return profile

    def get(self, candidate_id: str) -> Optional[CandidateProfile]:
        return self._candidates.get(candidate_id)

    def update(self, candidate_id: str, **fields) -> Optional[CandidateProfile]:
        """
        Set fields on an existing profile.

        Returns:
            The updated profile, or None if the id is unknown
        """
        profile = self._candidates.get(candidate_id)
        if profile is None:
            logger.debug(f"update ignored: unknown candidate {candidate_id}")
            return None

        fields.pop("id", None)
        for key, value in fields.items():
            setattr(profile, key, value)
        return profile

    def all(self) -> List[CandidateProfile]:
        return list(self._candidates.values())

    def __contains__(self, candidate_id: str) -> bool:
        return candidate_id in self._candidates

    def __len__(self) -> int:
        return len(self._candidates)


class CompletedInterviewLog:
    """
    Append-only record of finished sessions. Entries are never edited or removed.
    """

    def __init__(self):
        self._entries: List[CompletedInterview] = []

    def record(self, session: InterviewSession) -> Optional[CompletedInterview]:
        """
        Freeze a completed session into the log, once per session.

        Returns:
            The stored entry, or None if the session is not finalized
        """
        if session.status != SessionStatus.COMPLETED or session.total_score is None \
                or session.summary is None or session.end_time is None:
            logger.debug(f"record ignored: {session.session_id} is not finalized")
            return None

        existing = self.get(session.session_id)
        if existing is not None:
            return existing

        entry = CompletedInterview(**session.model_copy(deep=True).model_dump())
        self._entries.append(entry)
        logger.info(f"Logged completed interview {entry.session_id} ({entry.total_score}/600)")
        return entry

    def get(self, session_id: str) -> Optional[CompletedInterview]:
        for entry in self._entries:
            if entry.session_id == session_id:
                return entry
        return None

    def for_candidate(self, candidate_id: str) -> List[CompletedInterview]:
        return [e for e in self._entries if e.candidate_id == candidate_id]

    def all(self) -> Tuple[CompletedInterview, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
