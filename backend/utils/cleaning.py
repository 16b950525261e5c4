"""
Response cleaning utilities for LLM outputs.
Strips reasoning blocks and pulls JSON payloads out of free-form text.
"""
import re
from typing import Optional


class ResponseCleaner:
    """
    Cleans raw completions before they are parsed or shown to a candidate.
    """

    @classmethod
    def strip_reasoning(cls, text: str) -> str:
        """Remove <think> style blocks and partial tags left by reasoning models."""
        if not text:
            return ""

        cleaned = re.sub(r'<think>.*?</think>', '', text, flags=re.DOTALL | re.IGNORECASE)
        cleaned = re.sub(r'<thought>.*?</thought>', '', cleaned, flags=re.DOTALL | re.IGNORECASE)
        # Unterminated block: drop everything up to the closing tag
        cleaned = re.sub(r'^.*?</think>', '', cleaned, flags=re.DOTALL | re.IGNORECASE)
        cleaned = re.sub(r'</?\s*think\s*>?', '', cleaned, flags=re.IGNORECASE)

        return cleaned.strip()

    @classmethod
    def _fix_trailing_commas(cls, payload: str) -> str:
        return re.sub(r',\s*([}\]])', r'\1', payload)

    @classmethod
    def extract_json_object(cls, text: str) -> Optional[str]:
        """Return the outermost {...} span, or None when there is none."""
        cleaned = cls.strip_reasoning(text)
        match = re.search(r'\{[\s\S]*\}', cleaned)
        if not match:
            return None
        return cls._fix_trailing_commas(match.group())

    @classmethod
    def extract_json_array(cls, text: str) -> Optional[str]:
        """Return the outermost [...] span, or None when there is none."""
        cleaned = cls.strip_reasoning(text)
        match = re.search(r'\[[\s\S]*\]', cleaned)
        if not match:
            return None
        return cls._fix_trailing_commas(match.group())

    @classmethod
    def clean_summary(cls, text: str) -> str:
        """Tidy a prose summary: no reasoning, no code fences, collapsed blank lines."""
        cleaned = cls.strip_reasoning(text)
        cleaned = re.sub(r'^```\w*\s*|```$', '', cleaned, flags=re.MULTILINE)
        cleaned = re.sub(r'\n{3,}', '\n\n', cleaned)
        return cleaned.strip()
