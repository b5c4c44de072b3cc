"""
Evaluator Factory.

Provides centralized access to all scoring strategies.
"""
from typing import Optional
from exameval.config import settings
from exameval.evaluators import EvaluatorName
from exameval.evaluators.base import BaseEssayEvaluator, BaseFileEvaluator
from exameval.evaluators.mock import MockEssayEvaluator, MockFileEvaluator


def get_essay_evaluator(name: Optional[EvaluatorName] = None) -> BaseEssayEvaluator:
    """Get the essay evaluator for a strategy name (defaults to settings)."""
    name = name or settings.evaluator
    if name == "openai":
        # Imported lazily so the mock path never needs the OpenAI client
        from exameval.evaluators.openai_essay import OpenAIEssayEvaluator
        return OpenAIEssayEvaluator()
    if name == "mock":
        return MockEssayEvaluator()
    raise ValueError(f"Unknown evaluator: {name}")


def get_file_evaluator(name: Optional[EvaluatorName] = None) -> BaseFileEvaluator:
    """Uploaded files are only ever mock evaluated."""
    name = name or settings.evaluator
    if name not in ("mock", "openai"):
        raise ValueError(f"Unknown evaluator: {name}")
    return MockFileEvaluator()
