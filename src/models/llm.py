"""
Claude client used for query expansion.

Wraps the Anthropic messages API with:
- retries with exponential backoff on transient API failures
- extraction of a JSON object from the model's text answer
- optional validation of that object against a pydantic model
"""

import json
import logging
import re
import time
from typing import Any, Optional

from anthropic import (
    Anthropic,
    APIConnectionError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)
from pydantic import BaseModel, ValidationError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_settings

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (RateLimitError, APITimeoutError, APIConnectionError, InternalServerError)

# ```json ... ``` or ``` ... ``` around the answer
CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class LLMCompletion(BaseModel):
    """Text answer plus usage metadata."""

    text: str
    model: str
    stop_reason: Optional[str] = None
    input_tokens: int = 0
    output_tokens: int = 0


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Parse the JSON object in a model answer.

    Accepts a bare object, an object inside a markdown code fence, or an
    object surrounded by prose.

    Raises:
        ValueError: If no JSON object can be parsed
    """
    candidate = text.strip()
    fenced = CODE_FENCE_PATTERN.match(candidate)
    if fenced:
        candidate = fenced.group(1)

    start, end = candidate.find("{"), candidate.rfind("}")
    if start == -1 or end < start:
        raise ValueError("Invalid JSON in response: no object found")

    try:
        parsed = json.loads(candidate[start:end + 1])
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in response: {e}") from e

    if not isinstance(parsed, dict):
        raise ValueError("Invalid JSON in response: expected an object")
    return parsed


class ClaudeClient:
    """
    Synchronous Claude client; callers in async code run it in a thread.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> None:
        """
        Args:
            api_key: Anthropic API key (defaults to settings)
            model: Model name (defaults to settings)
            max_tokens: Completion token limit (defaults to settings)
            temperature: Sampling temperature (defaults to settings)

        Raises:
            ValueError: If no API key is configured
        """
        settings = get_settings()

        self.api_key = api_key or settings.anthropic_api_key
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY not found in environment or settings")

        self.model = model or settings.claude_model
        self.max_tokens = max_tokens or settings.claude_max_tokens
        self.temperature = settings.claude_temperature if temperature is None else temperature
        self.client = Anthropic(api_key=self.api_key)

        logger.info(f"Claude client ready (model={self.model})")

    @retry(
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        stop=stop_after_attempt(3),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMCompletion:
        """
        Send one user message and return the text answer.

        Raises:
            anthropic.APIError: If the call fails (after retries for
                transient errors)
        """
        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens or self.max_tokens,
            "temperature": self.temperature if temperature is None else temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            request["system"] = system_prompt

        started = time.time()
        response = self.client.messages.create(**request)
        logger.debug(f"Claude answered in {time.time() - started:.2f}s")

        text = "".join(
            getattr(block, "text", "") for block in response.content or []
        )
        return LLMCompletion(
            text=text,
            model=response.model,
            stop_reason=response.stop_reason,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )

    def complete_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        schema: Optional[type[BaseModel]] = None,
    ) -> dict[str, Any]:
        """
        Ask for a JSON object and parse it.

        Args:
            prompt: User prompt requesting JSON output
            system_prompt: Optional system prompt
            schema: Pydantic model the object must satisfy

        Returns:
            dict: Parsed object (normalized through ``schema`` when given)

        Raises:
            ValueError: If the answer holds no JSON object or fails validation
        """
        completion = self.complete(prompt, system_prompt)

        try:
            parsed = extract_json_object(completion.text)
        except ValueError:
            logger.error(f"Unparsable Claude answer: {completion.text[:300]}")
            raise

        if schema is None:
            return parsed

        try:
            return schema.model_validate(parsed).model_dump()
        except ValidationError as e:
            logger.error(f"Claude answer does not match {schema.__name__}: {e}")
            raise ValueError(f"Response validation failed: {e}") from e
