"""
Mock Evaluators.

Stand-ins for real grading: essays are scored from their length relative to
the word limit plus a random quality component, uploads receive one of a
few canned results. Content is never analysed.
"""
import random
from typing import Any, Dict, List, Optional

from exameval.evaluators.base import (
    BaseEssayEvaluator,
    BaseFileEvaluator,
    QuestionLike,
    count_words,
    is_unanswered,
    unanswered_evaluation,
)


DEFAULT_WORD_LIMIT = 200

# (threshold, feedback, strengths, improvements), highest threshold first
FEEDBACK_TIERS = [
    (
        80,
        "Excellent response! Comprehensive and well-structured.",
        ["Clear explanation", "Good examples provided", "Well-organized thoughts"],
        ["Consider adding more real-world applications"],
    ),
    (
        60,
        "Good attempt. Covers the main points but could use more detail.",
        ["Correct concepts identified", "Relevant points mentioned"],
        ["Add more specific examples", "Expand on key concepts"],
    ),
    (
        40,
        "Basic understanding shown. Needs more depth and clarity.",
        ["Attempted to address the question"],
        ["Provide more detailed explanations", "Include specific examples", "Structure your answer better"],
    ),
    (
        0,
        "Needs significant improvement. Please review the topic.",
        [],
        [
            "Study the fundamental concepts",
            "Practice with simpler questions first",
            "Focus on understanding before writing",
        ],
    ),
]

SAMPLE_FILE_RESULTS = [
    {
        "total_marks": 85,
        "max_marks": 100,
        "grade": "A",
        "feedback": "Excellent understanding of core concepts. Strong analytical skills demonstrated throughout.",
        "strengths": ["Clear explanations", "Good use of examples", "Logical structure"],
        "improvements": ["Could expand on theoretical foundations"],
    },
    {
        "total_marks": 92,
        "max_marks": 100,
        "grade": "A+",
        "feedback": "Outstanding performance with comprehensive answers and innovative thinking.",
        "strengths": ["Exceptional depth", "Creative problem-solving", "Perfect formatting"],
        "improvements": ["Minor grammatical errors"],
    },
    {
        "total_marks": 78,
        "max_marks": 100,
        "grade": "B+",
        "feedback": "Good grasp of fundamentals with room for deeper analysis in complex topics.",
        "strengths": ["Clear methodology", "Good examples", "Neat presentation"],
        "improvements": ["Need more detailed explanations", "Could improve time management"],
    },
]


def word_count_score(word_count: int, word_limit: int) -> int:
    """Up to 60 points for length relative to the word limit."""
    return min(60, int(word_count / word_limit * 60))


def feedback_for(score: int) -> Dict[str, Any]:
    for threshold, feedback, strengths, improvements in FEEDBACK_TIERS:
        if score >= threshold:
            return {
                "feedback": feedback,
                "strengths": list(strengths),
                "improvements": list(improvements),
            }
    raise ValueError(f"Negative score: {score}")


class MockEssayEvaluator(BaseEssayEvaluator):
    name = "mock"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def evaluate(self, question: QuestionLike, answer: Optional[str]) -> Dict[str, Any]:
        max_score = question.marks or 100
        if is_unanswered(answer):
            return unanswered_evaluation(max_score)

        word_limit = question.word_limit or DEFAULT_WORD_LIMIT
        quality = self.rng.randrange(0, 40)
        score = min(100, word_count_score(count_words(answer), word_limit) + quality)

        return {"score": score, "max_score": max_score, **feedback_for(score)}


class MockFileEvaluator(BaseFileEvaluator):
    name = "mock"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def evaluate(self, files: List[Dict[str, Any]], student_info: Dict[str, Any]) -> Dict[str, Any]:
        result = dict(self.rng.choice(SAMPLE_FILE_RESULTS))
        result["strengths"] = list(result["strengths"])
        result["improvements"] = list(result["improvements"])
        result.update({
            "student_name": student_info.get("name"),
            "student_class": student_info.get("class"),
            "subject": student_info.get("subject"),
        })
        return result
