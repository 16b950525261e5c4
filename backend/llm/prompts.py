"""
Prompt templates for the interview evaluator.
Each prompt asks for a strict output shape so the response can be parsed
without guesswork.
"""
from typing import List, Optional

from models.schemas import Question


class Prompts:
    """Collection of all evaluator prompts."""

    # ============================================================
    # QUESTION GENERATION
    # ============================================================

    @staticmethod
    def generate_questions(
        job_role: str,
        name: Optional[str],
        email: Optional[str],
        resume_content: Optional[str] = None,
    ) -> str:
        """Prompt for the full six-question set."""
        resume_line = f"- Resume Content: {resume_content[:2000]}" if resume_content else ""

        return f"""Based on the candidate profile below, generate 6 interview questions for a {job_role} position.

Candidate Profile:
- Name: {name or 'Unknown'}
- Email: {email or 'Unknown'}
{resume_line}

Requirements:
- Generate exactly 6 questions
- 2 Easy questions (20 seconds each)
- 2 Medium questions (60 seconds each)
- 2 Hard questions (120 seconds each)
- Order: Easy, Easy, Medium, Medium, Hard, Hard

Focus areas:
- React fundamentals and hooks
- Node.js and Express
- Database concepts
- System design (for hard questions)
- Problem-solving abilities

Respond with ONLY a JSON array in this exact format:
[
  {{
    "id": "q1",
    "question": "Question text here",
    "difficulty": "Easy",
    "timeLimit": 20,
    "category": "React"
  }}
]"""

    # ============================================================
    # ANSWER EVALUATION
    # ============================================================

    @staticmethod
    def evaluate_answer(question: str, answer: str, time_spent: int, time_limit: int) -> str:
        """Prompt for scoring a single answer."""
        return f"""Evaluate this interview answer on a scale of 0-100.

Question: {question}
Answer: {answer}
Time Spent: {time_spent} seconds (out of {time_limit} seconds allowed)

Evaluation Criteria:
- Technical accuracy (40%)
- Completeness of answer (30%)
- Communication clarity (20%)
- Time management (10%)

Respond with ONLY this JSON:
{{
  "score": <0-100>,
  "feedback": "<2-3 sentences of feedback>"
}}"""

    # ============================================================
    # FINAL SUMMARY
    # ============================================================

    @staticmethod
    def generate_summary(questions: List[Question], total_score: int) -> str:
        """Prompt for the end-of-interview summary."""
        qa_lines = []
        for i, q in enumerate(questions, start=1):
            qa_lines.append(
                f"Q{i} ({q.difficulty.value}): {q.question}\n"
                f"Answer: {q.answer or 'No answer provided'}\n"
                f"Score: {q.score or 0}/100"
            )
        transcript = "\n\n".join(qa_lines)

        return f"""Generate a concise interview summary for this candidate.

Total Score: {total_score}/600

Questions and Answers:
{transcript}

Provide:
1. Overall performance assessment
2. Strengths identified
3. Areas for improvement
4. Recommendation (Hire/Consider/Reject)

Keep it professional and constructive. Maximum 200 words. Plain text only."""


# ============================================================
# FALLBACK QUESTIONS (used when generation fails)
# ============================================================

FALLBACK_QUESTIONS = [
    {
        "id": "q1",
        "question": "What is the difference between useState and useEffect hooks in React?",
        "difficulty": "Easy",
        "time_limit": 20,
        "category": "React",
    },
    {
        "id": "q2",
        "question": "How do you handle asynchronous operations in JavaScript?",
        "difficulty": "Easy",
        "time_limit": 20,
        "category": "JavaScript",
    },
    {
        "id": "q3",
        "question": "Explain the concept of middleware in Express.js and provide an example.",
        "difficulty": "Medium",
        "time_limit": 60,
        "category": "Node.js",
    },
    {
        "id": "q4",
        "question": "How would you implement authentication in a React application?",
        "difficulty": "Medium",
        "time_limit": 60,
        "category": "React",
    },
    {
        "id": "q5",
        "question": "Design a REST API for a blog application. Include endpoints for users, posts, and comments.",
        "difficulty": "Hard",
        "time_limit": 120,
        "category": "System Design",
    },
    {
        "id": "q6",
        "question": "How would you optimize the performance of a React application that handles large datasets?",
        "difficulty": "Hard",
        "time_limit": 120,
        "category": "Performance",
    },
]
