"""
Structured LLM Service.

Encapsulates OpenAI's structured output capabilities.
"""
import logging
from typing import Type, TypeVar, Optional
from pydantic import BaseModel
from openai import OpenAI
from exameval.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class StructuredLLMService:
    """Service for generating structured outputs from LLMs."""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.openai_model

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not settings.openai_api_key:
                raise RuntimeError("OPENAI_API_KEY not configured")
            self._client = OpenAI(api_key=settings.openai_api_key)
        return self._client

    def generate_response(
        self,
        response_model: Type[T],
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 1000
    ) -> Optional[T]:
        """
        Generate a structured response ensuring it matches the Pydantic model.
        Returns None when the call fails or the model refuses.
        """
        try:
            completion = self.client.chat.completions.parse(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format=response_model,
                temperature=temperature,
                max_tokens=max_tokens
            )
            return completion.choices[0].message.parsed

        except Exception as e:
            logger.error("Structured LLM generation failed: %s", e)
            return None
