"""
Collects the contact fields a resume did not provide, one message at a time.
"""
import logging
from typing import Callable, List, Optional

from models.schemas import CandidateProfile, REQUIRED_PROFILE_FIELDS

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "name": "full name",
    "email": "email address",
    "phone": "phone number",
}


class ProfileCollector:
    """
    Fills missing required fields in fixed order: name, email, phone.

    The missing list is computed once, when the collector is created. Each
    accepted message fills the field at the head of the list verbatim.
    """

    def __init__(
        self,
        profile: CandidateProfile,
        missing_fields: Optional[List[str]] = None,
        on_field: Optional[Callable[[str, str], None]] = None,
        on_complete: Optional[Callable[[CandidateProfile], None]] = None,
    ):
        """
        Args:
            profile: Candidate being completed
            missing_fields: Fields reported missing by resume validation;
                computed from the profile when omitted
            on_field: Called with (field, value) for each accepted answer
            on_complete: Called once when no fields remain
        """
        self.profile = profile
        source = missing_fields if missing_fields is not None else profile.missing_fields()
        self.missing_fields: List[str] = [f for f in REQUIRED_PROFILE_FIELDS if f in source]
        self.on_field = on_field
        self.on_complete = on_complete
        self._completion_signalled = False

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields

    @property
    def current_field(self) -> Optional[str]:
        return self.missing_fields[0] if self.missing_fields else None

    def opening_prompt(self) -> str:
        if self.is_complete:
            return (
                f"Hello {self.profile.name}! I have all your information. "
                "Are you ready to begin the technical interview? This will consist of "
                "6 questions with increasing difficulty. Type \"ready\" when you're prepared to start."
            )
        needed = ", ".join(FIELD_LABELS[f] for f in self.missing_fields)
        return (
            "Hello! I've processed your resume, but I need to collect some missing "
            f"information before we begin the interview. I need your {needed}. "
            f"Let's start with your {FIELD_LABELS[self.current_field]}:"
        )

    def accept(self, message: str) -> Optional[str]:
        """
        Fill the next missing field with the message text.

        Returns:
            The next prompt, or None once the profile is complete
        """
        if self.is_complete:
            return None

        value = message.strip()
        if not value:
            logger.debug(f"Blank answer for {self.current_field} ignored")
            return f"Please provide your {FIELD_LABELS[self.current_field]}:"

        field_name = self.missing_fields.pop(0)
        setattr(self.profile, field_name, value)
        logger.info(f"Collected {field_name} for {self.profile.id}")
        if self.on_field:
            self.on_field(field_name, value)

        if self.missing_fields:
            return f"Thank you! Now I need your {FIELD_LABELS[self.current_field]}:"

        self._signal_complete()
        return None

    def ready_prompt(self) -> str:
        return (
            "Perfect! I now have all your information. Are you ready to begin the "
            "technical interview? This will consist of 6 questions with increasing "
            "difficulty. Type \"ready\" when you're prepared to start."
        )

    def _signal_complete(self):
        if self._completion_signalled:
            return
        self._completion_signalled = True
        logger.info(f"Profile complete for {self.profile.id}")
        if self.on_complete:
            self.on_complete(self.profile)
