"""
OpenAI sentiment analyzer with rate-limit aware retries
"""

import asyncio
import json
import time
from typing import Any, Literal, Optional

import openai
from pydantic import BaseModel, Field, ValidationError, field_validator
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import get_config
from services.logging_utils import get_logger, log_extra
from services.observability import record_external_call
from services.sentiment import DEFAULT_LANGUAGE, SentimentResult

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a sentiment analysis expert. Analyze the sentiment of the text and respond with a JSON "
    "object containing: sentiment (positive, negative, or neutral), score (a number between 0 and 1 "
    "representing confidence), and a brief explanation. Also detect the language of the text."
)

# Failures worth another attempt; APITimeoutError is a subclass of APIConnectionError.
RETRYABLE_ERRORS = (openai.RateLimitError, openai.APIConnectionError)


class SentimentAPIError(Exception):
    """The hosted model could not produce an analysis."""


class SentimentRateLimitError(SentimentAPIError):
    """The hosted model kept answering with rate-limit responses."""


class LLMSentimentPayload(BaseModel):
    """Shape of the JSON object the model is asked to return."""

    sentiment: Literal["positive", "neutral", "negative"]
    score: float = Field(ge=0.0, le=1.0)
    explanation: str = ""
    language: Optional[str] = None

    @field_validator("sentiment", "language", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


def retry_after_seconds(exc: Optional[BaseException]) -> Optional[float]:
    """Read a numeric ``retry-after`` header from an OpenAI status error."""
    response = getattr(exc, "response", None)
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    raw = headers.get("retry-after")
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return max(value, 0.0)


class LLMSentimentAnalyzer:
    """OpenAI chat-completion analyzer with exponential backoff on rate limits"""

    name = "openai"

    def __init__(self, client: Optional[Any] = None, sleep=asyncio.sleep):
        self.config = get_config()
        self.client = client or openai.AsyncOpenAI(
            api_key=self.config.OPENAI_API_KEY,
            timeout=self.config.LLM_TIMEOUT_SECONDS,
            max_retries=0,
        )
        self._sleep = sleep
        self._backoff = wait_exponential(
            multiplier=self.config.LLM_BACKOFF_SECONDS,
            max=self.config.LLM_MAX_BACKOFF_SECONDS,
        )

    def _wait(self, retry_state: RetryCallState) -> float:
        """Prefer the server's retry-after hint, else double the delay per attempt"""
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        hinted = retry_after_seconds(exc)
        if hinted is not None:
            return min(hinted, self.config.LLM_MAX_BACKOFF_SECONDS)
        return self._backoff(retry_state)

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        if isinstance(exc, openai.RateLimitError):
            logger.warning(
                f"Rate limit exceeded. Retrying after {delay:.2f}s...",
                extra=log_extra(attempt=retry_state.attempt_number),
            )
        else:
            logger.warning(
                f"API request failed. Retrying after {delay:.2f}s...",
                extra=log_extra(attempt=retry_state.attempt_number, error=str(exc)),
            )

    async def _complete(self, text: str) -> str:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.LLM_MAX_RETRIES),
            wait=self._wait,
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=self._before_sleep,
            sleep=self._sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self.client.chat.completions.create(
                    model=self.config.OPENAI_MODEL,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": text},
                    ],
                    response_format={"type": "json_object"},
                )
        return response.choices[0].message.content

    async def analyze(self, text: str) -> SentimentResult:
        """
        Ask the hosted model for a sentiment analysis of ``text``

        Raises:
            SentimentRateLimitError: rate limited on every attempt
            SentimentAPIError: any other API failure or an unusable response
        """
        start_time = time.time()
        try:
            content = await self._complete(text)
        except openai.RateLimitError as e:
            logger.error(f"Rate limit error: {e}")
            record_external_call("openai", "rate_limited")
            raise SentimentRateLimitError("OpenAI API rate limit exceeded. Please try again later.") from e
        except openai.APIStatusError as e:
            logger.error(f"API status error: {e}")
            record_external_call("openai", "error")
            raise SentimentAPIError(f"API request failed with status {e.status_code}") from e
        except openai.OpenAIError as e:
            logger.error(f"Unexpected LLM error: {e}")
            record_external_call("openai", "error")
            raise SentimentAPIError(f"API request failed: {e}") from e

        try:
            payload = LLMSentimentPayload.model_validate(json.loads(content or ""))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Unusable LLM response: {e}")
            record_external_call("openai", "invalid_response")
            raise SentimentAPIError("Model returned an invalid sentiment payload") from e

        duration = time.time() - start_time
        logger.info(f"LLM analysis completed in {duration:.2f}s", extra=log_extra(sentiment=payload.sentiment))
        record_external_call("openai", "success")

        return SentimentResult(
            sentiment=payload.sentiment,
            score=payload.score,
            explanation=payload.explanation,
            language=payload.language or DEFAULT_LANGUAGE,
        )


__all__ = [
    "LLMSentimentAnalyzer",
    "LLMSentimentPayload",
    "SentimentAPIError",
    "SentimentRateLimitError",
    "retry_after_seconds",
]
