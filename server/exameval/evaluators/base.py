"""
Base Evaluator Classes.

An essay evaluator maps (question, answer) to a score out of 100 with
feedback; a file evaluator produces a marks/grade result for an upload.
"""
import math
import random
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Protocol


NO_ANSWER_FEEDBACK = "No answer provided. Please submit a response to receive a score."
NO_ANSWER_IMPROVEMENTS = ["Provide a complete answer to the question"]


class QuestionLike(Protocol):
    id: Any
    text: str
    marks: int
    word_limit: int


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values."""
    return int(math.floor(value + 0.5))


def count_words(text: Optional[str]) -> int:
    if not text:
        return 0
    return len(text.split())


def is_unanswered(answer: Optional[str]) -> bool:
    return answer is None or not answer.strip()


def unanswered_evaluation(max_score: int) -> Dict[str, Any]:
    return {
        "score": 0,
        "max_score": max_score,
        "feedback": NO_ANSWER_FEEDBACK,
        "strengths": [],
        "improvements": list(NO_ANSWER_IMPROVEMENTS),
    }


class BaseEssayEvaluator(ABC):
    """Abstract base class for essay scoring strategies."""

    # Strategy identifier - must be overridden
    name: str = "base"

    @abstractmethod
    def evaluate(self, question: QuestionLike, answer: Optional[str]) -> Dict[str, Any]:
        """
        Score a single answer.

        Returns:
            Dict with score (0-100), max_score, feedback, strengths, improvements
        """


class BaseFileEvaluator(ABC):
    """Abstract base class for uploaded file scoring strategies."""

    name: str = "base"

    @abstractmethod
    def evaluate(self, files: List[Dict[str, Any]], student_info: Dict[str, Any]) -> Dict[str, Any]:
        """Produce a result with total_marks, max_marks, grade, feedback, strengths, improvements."""


def evaluate_test(
    questions: Iterable[QuestionLike],
    answers: Dict[str, str],
    evaluator: BaseEssayEvaluator,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Evaluate every question of a test attempt.

    Each question scores out of 100; the marks it awards are that fraction of
    its max score. The final score is the awarded share of all max scores,
    as a rounded percentage.
    """
    rng = rng or random.Random()
    evaluation: Dict[str, Dict[str, Any]] = {}
    weighted = 0
    total_possible = 0

    for question in questions:
        key = str(question.id)
        result = evaluator.evaluate(question, answers.get(key))
        evaluation[key] = result
        weighted += result["score"] * result["max_score"]
        total_possible += result["max_score"]

    score = round_half_up(weighted / total_possible) if total_possible > 0 else 0
    return {
        "score": score,
        "evaluation": evaluation,
        "time_spent": rng.randrange(10, 30),
    }
