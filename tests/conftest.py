import time

import pytest

from interview.agents import Evaluator
from interview.controller import StageController
from llm.client import LLMError
from models.schemas import Difficulty, ParsedResume, Question, TIME_LIMITS, DIFFICULTY_PLAN


GENERATED = [
    {"id": "g1", "question": "What is a closure?", "difficulty": "Easy", "category": "JavaScript"},
    {"id": "g2", "question": "What does JSX compile to?", "difficulty": "Easy", "category": "React"},
    {"id": "g3", "question": "Explain the Node.js event loop.", "difficulty": "Medium", "category": "Node.js"},
    {"id": "g4", "question": "When would you use useMemo?", "difficulty": "Medium", "category": "React"},
    {"id": "g5", "question": "Design a rate limiter.", "difficulty": "Hard", "category": "System Design"},
    {"id": "g6", "question": "Scale a websocket chat service.", "difficulty": "Hard", "category": "System Design"},
]


class FakeLLM:
    """Stands in for LLMClient; records prompts and returns canned payloads."""

    def __init__(
        self,
        questions=GENERATED,
        evaluation=None,
        summary="Strong fundamentals with room to grow on system design.",
        fail=False,
        delay=0.0,
        summary_delay=0.0,
    ):
        self.questions = questions
        self.evaluation = evaluation if evaluation is not None else {"score": 80, "feedback": "Good answer."}
        self.summary = summary
        self.fail = fail
        self.delay = delay
        self.summary_delay = summary_delay
        self.calls = []

    def generate_json(self, prompt, max_tokens=400, temperature=0.3, expect="object"):
        self.calls.append(expect)
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise LLMError("server unavailable")
        if expect == "array":
            return self.questions, self.questions is not None
        return self.evaluation, isinstance(self.evaluation, dict)

    def generate_text(self, prompt, max_tokens=400):
        self.calls.append("text")
        if self.summary_delay:
            time.sleep(self.summary_delay)
        if self.fail:
            raise LLMError("server unavailable")
        return self.summary, bool(self.summary)


def make_questions():
    return [
        Question(id=f"q{i}", question=f"Question {i}", difficulty=d, time_limit=TIME_LIMITS[d])
        for i, d in enumerate(DIFFICULTY_PLAN, start=1)
    ]


def make_controller(llm=None, tick_interval=60.0, timeout=2.0):
    evaluator = Evaluator(llm if llm is not None else FakeLLM(), timeout=timeout)
    return StageController(evaluator=evaluator, tick_interval=tick_interval)


async def start_interview(controller, name="Jane Doe", email="jane@example.com", phone="5551234567"):
    parsed = ParsedResume(name=name, email=email, phone=phone, content="Jane Doe resume")
    controller.register_candidate(parsed, [])
    return await controller.begin_interview()


@pytest.fixture
def questions():
    return make_questions()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def hard_question():
    return Question(id="h1", question="Design a cache.", difficulty=Difficulty.HARD, time_limit=120)
