"""
Evaluation Strategies Package.

Scoring strategies for submitted work:
- mock: word-count plus random quality score for essays, canned results for files
- openai: structured LLM grading for essays (falls back to mock on failure)
"""
from typing import List, Literal

# Supported strategies
EvaluatorName = Literal["mock", "openai"]

AVAILABLE_EVALUATORS: List[EvaluatorName] = ["mock", "openai"]
