"""
LLM Client wrapper for llama.cpp REST API.
Handles communication with the local LLM server, response cleaning, and retries.
"""
import json
import time
import logging
from typing import Dict, Any, Optional, Tuple, Union
from dataclasses import dataclass

import requests

from utils.config import config
from utils.cleaning import ResponseCleaner

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Raised when the LLM server cannot be reached after all retries."""


@dataclass
class LLMResponse:
    """Structured response from LLM."""
    content: str
    is_valid: bool
    raw_response: Dict[str, Any]
    tokens_used: int = 0


class LLMClient:
    """
    Client for interacting with the llama.cpp /completion endpoint.
    """

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url or config.llm.base_url
        self.completion_url = f"{self.base_url}{config.llm.completion_endpoint}"
        self.timeout = config.llm.timeout
        self.max_retries = config.llm.max_retries
        logger.info(f"LLM Client initialized: {self.completion_url} (timeout={self.timeout}s)")

    def _make_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Make HTTP request to LLM server with retries."""
        last_error = None

        for attempt in range(self.max_retries + 1):
            try:
                response = requests.post(
                    self.completion_url,
                    json=payload,
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.json()
            except requests.exceptions.Timeout as e:
                last_error = e
                if attempt < self.max_retries:
                    time.sleep(1 * (attempt + 1))
            except requests.exceptions.RequestException as e:
                last_error = e
                if attempt < self.max_retries:
                    time.sleep(0.5 * (attempt + 1))

        raise LLMError(f"Failed to reach LLM server after {self.max_retries + 1} attempts: {last_error}")

    def generate(
        self,
        prompt: str,
        max_tokens: int = 400,
        temperature: Optional[float] = None,
        stop_sequences: Optional[list] = None,
    ) -> LLMResponse:
        """
        Generate completion from LLM.

        Args:
            prompt: The input prompt
            max_tokens: Maximum tokens to generate (n_predict)
            temperature: Sampling temperature (None uses default)
            stop_sequences: List of strings that stop generation

        Returns:
            LLMResponse with the raw content

        Raises:
            LLMError: the server could not be reached
        """
        payload = {
            "prompt": prompt,
            "n_predict": max_tokens,
            "temperature": temperature if temperature is not None else config.llm.default_temperature,
            "top_p": config.llm.default_top_p,
            "repeat_penalty": config.llm.default_repeat_penalty,
        }

        if stop_sequences:
            payload["stop"] = stop_sequences

        response = self._make_request(payload)
        content = response.get("content", "")

        return LLMResponse(
            content=content,
            is_valid=bool(content.strip()),
            raw_response=response,
            tokens_used=response.get("tokens_predicted", 0)
        )

    def generate_json(
        self,
        prompt: str,
        max_tokens: int = 400,
        temperature: float = 0.3,
        expect: str = "object",
    ) -> Tuple[Optional[Union[Dict, list]], bool]:
        """
        Generate a JSON response from LLM.

        Args:
            expect: "object" for {...} payloads, "array" for [...] payloads

        Returns:
            Tuple of (parsed_json, is_valid)
        """
        response = self.generate(prompt=prompt, max_tokens=max_tokens, temperature=temperature)

        if not response.is_valid:
            return None, False

        if expect == "array":
            cleaned = ResponseCleaner.extract_json_array(response.content)
        else:
            cleaned = ResponseCleaner.extract_json_object(response.content)

        if cleaned is None:
            logger.warning(f"No JSON {expect} in LLM response: {response.content[:120]}")
            return None, False

        try:
            return json.loads(cleaned), True
        except json.JSONDecodeError:
            logger.warning(f"Unparseable JSON from LLM: {cleaned[:120]}")
            return None, False

    def generate_text(self, prompt: str, max_tokens: int = 400) -> Tuple[str, bool]:
        """
        Generate free-form prose (summaries).

        Returns:
            Tuple of (cleaned_text, is_valid)
        """
        response = self.generate(prompt=prompt, max_tokens=max_tokens, temperature=0.5)
        cleaned = ResponseCleaner.clean_summary(response.content)
        return cleaned, bool(cleaned)

    def health_check(self) -> bool:
        """Check if LLM server is responding."""
        try:
            return self.generate("Hello", max_tokens=5).is_valid
        except LLMError:
            return False


# Global client instance
llm_client = LLMClient()
