"""
OpenAI Essay Evaluator.

Grades essay answers with a structured LLM call. Any failure falls back to
the mock strategy so a submission is always scored.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from exameval.evaluators.base import (
    BaseEssayEvaluator,
    QuestionLike,
    count_words,
    is_unanswered,
    unanswered_evaluation,
)
from exameval.evaluators.mock import DEFAULT_WORD_LIMIT, MockEssayEvaluator
from exameval.services.llm_service import StructuredLLMService
from exameval.services.prompt_management import get_prompt

logger = logging.getLogger(__name__)


class EssayGrade(BaseModel):
    score: int = Field(..., ge=0, le=100)
    feedback: str
    strengths: List[str] = []
    improvements: List[str] = []


class OpenAIEssayEvaluator(BaseEssayEvaluator):
    name = "openai"

    def __init__(
        self,
        llm: Optional[StructuredLLMService] = None,
        fallback: Optional[BaseEssayEvaluator] = None,
    ):
        self.llm = llm or StructuredLLMService()
        self.fallback = fallback or MockEssayEvaluator()

    def evaluate(self, question: QuestionLike, answer: Optional[str]) -> Dict[str, Any]:
        max_score = question.marks or 100
        if is_unanswered(answer):
            return unanswered_evaluation(max_score)

        prompt = get_prompt(
            "essay_evaluation",
            question=question.text,
            answer=answer,
            max_score=max_score,
            word_limit=question.word_limit or DEFAULT_WORD_LIMIT,
            word_count=count_words(answer),
        )
        grade = self.llm.generate_response(
            response_model=EssayGrade,
            system_prompt=prompt["system_prompt"],
            user_prompt=prompt["human_prompt"],
        )
        if grade is None:
            logger.warning("LLM grading unavailable for question %s, using %s", question.id, self.fallback.name)
            return self.fallback.evaluate(question, answer)

        return {
            "score": grade.score,
            "max_score": max_score,
            "feedback": grade.feedback,
            "strengths": grade.strengths[:3],
            "improvements": grade.improvements[:3],
        }
