"""
Configuration settings for the timed interview backend.
All settings can be overridden via environment variables.
"""
import os
from typing import List
from dataclasses import dataclass, field


@dataclass
class LLMConfig:
    """LLM server configuration."""
    base_url: str = field(default_factory=lambda: os.getenv("LLM_URL", "http://localhost:9000"))
    completion_endpoint: str = "/completion"
    timeout: int = field(default_factory=lambda: int(os.getenv("LLM_TIMEOUT", "60")))
    max_retries: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_RETRIES", "2")))

    # Default generation parameters
    default_temperature: float = 0.7
    default_top_p: float = 0.9
    default_repeat_penalty: float = 1.1

    @property
    def completion_url(self) -> str:
        return f"{self.base_url}{self.completion_endpoint}"


@dataclass
class InterviewConfig:
    """Interview flow configuration."""
    job_role: str = field(default_factory=lambda: os.getenv(
        "INTERVIEW_JOB_ROLE", "Full Stack Developer (React/Node.js)"
    ))

    # Upper bound on any single evaluator call before the fallback kicks in
    evaluator_timeout: float = field(default_factory=lambda: float(os.getenv("EVALUATOR_TIMEOUT", "30")))

    # Seconds per countdown tick; tests shrink this
    tick_interval: float = field(default_factory=lambda: float(os.getenv("TIMER_TICK_SECONDS", "1.0")))


@dataclass
class ServerConfig:
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    cors_origins: List[str] = field(default_factory=lambda: [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ])


class Config:
    """Main configuration class combining all config sections."""

    def __init__(self):
        self.llm = LLMConfig()
        self.interview = InterviewConfig()
        self.server = ServerConfig()

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        return cls()


# Global config instance
config = Config()
