"""
Contact detail extraction from resume text.
Regex based and best effort; anything not found is left for the profile
collector to ask about.
"""
import re
import logging
from typing import Optional

from models.schemas import ParsedResume, ResumeValidation, REQUIRED_PROFILE_FIELDS

logger = logging.getLogger(__name__)


class ContactExtractor:
    """
    Pulls name, email and phone out of plain resume text.
    """

    EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')
    PHONE_PATTERN = re.compile(
        r'(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}'
        r'|(?:\+91[-.\s]?)?[6-9]\d{9}'
    )

    # Tried in order; the first capture wins
    NAME_PATTERNS = [
        re.compile(r'Name[ \t]*:[ \t]*([A-Za-z][A-Za-z \t.]*?)[ \t]*(?:\n|$)', re.IGNORECASE),
        re.compile(r'^[ \t]*([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)+)[ \t]*$', re.MULTILINE),
        re.compile(r'^[ \t]*([A-Z]{2,}(?:[ \t]+[A-Z]{2,})+)[ \t]*$', re.MULTILINE),
    ]

    def extract(self, text: str) -> ParsedResume:
        """
        Extract contact fields from resume text.

        Args:
            text: Plain text of the resume

        Returns:
            ParsedResume with whatever could be found
        """
        parsed = ParsedResume(
            name=self._extract_name(text),
            email=self._extract_email(text),
            phone=self._extract_phone(text),
            content=text,
        )
        found = [f for f in REQUIRED_PROFILE_FIELDS if getattr(parsed, f)]
        logger.info(f"Extracted contact fields: {found or 'none'}")
        return parsed

    def _extract_email(self, text: str) -> Optional[str]:
        match = self.EMAIL_PATTERN.search(text)
        return match.group() if match else None

    def _extract_phone(self, text: str) -> Optional[str]:
        match = self.PHONE_PATTERN.search(text)
        if not match:
            return None
        return re.sub(r'[^\d+]', '', match.group())

    def _extract_name(self, text: str) -> Optional[str]:
        for pattern in self.NAME_PATTERNS:
            match = pattern.search(text)
            if match:
                name = re.sub(r'[^\w\s]', '', match.group(1)).strip()
                name = re.sub(r'\s+', ' ', name)
                if name:
                    return name
        return None

    @staticmethod
    def validate(parsed: ParsedResume) -> ResumeValidation:
        """Which required fields are still missing, in priority order."""
        missing = [f for f in REQUIRED_PROFILE_FIELDS if not getattr(parsed, f)]
        return ResumeValidation(is_valid=not missing, missing_fields=missing)


# Global instance
contact_extractor = ContactExtractor()
