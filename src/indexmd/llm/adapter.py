"""
LiteLLM client for summary requests.

Every request the indexer makes is the same shape: one system prompt,
one user message, a plain-text reply. LLMAdapter.summarize() sends that
pair and returns the stripped reply, raising SummarizationError when
the model answers with nothing.

Transient provider errors (rate limit, service unavailable, connection,
timeout) are retried with exponential backoff, config.retries times.
Everything else, authentication errors included, propagates on the
first attempt.
"""

import os
from typing import Any

import litellm
import structlog
from pydantic import BaseModel
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config.schema import LLMConfig
from ..indexer.errors import SummarizationError
from .cache import LocalLLMCache

logger = structlog.get_logger()

RETRYABLE_ERRORS = (
    litellm.RateLimitError,
    litellm.ServiceUnavailableError,
    litellm.APIConnectionError,
    litellm.Timeout,
)


class LLMResponse(BaseModel):
    """Reply text of one completion, plus what the provider said about it."""

    content: str | None = None
    finish_reason: str = "stop"
    usage: dict[str, int] | None = None

    model_config = {"extra": "forbid"}

    @classmethod
    def from_litellm(cls, raw: Any) -> "LLMResponse":
        choice = raw.choices[0]
        usage = getattr(raw, "usage", None)
        return cls(
            content=getattr(choice.message, "content", None),
            finish_reason=choice.finish_reason or "stop",
            usage=None if not usage else {
                key: getattr(usage, key, 0) or 0
                for key in ("prompt_tokens", "completion_tokens", "total_tokens")
            },
        )


class LLMAdapter:
    """Sends summary requests through LiteLLM.

    Args:
        config: Model, endpoint, timeout and retry settings
        local_cache: Optional on-disk response cache, consulted before
            the provider and filled after each successful call
    """

    def __init__(self, config: LLMConfig, local_cache: LocalLLMCache | None = None):
        self.config = config
        self.cache = local_cache
        self.retry_wait = wait_exponential(multiplier=1, min=2, max=60)
        self.log = logger.bind(component="llm", model=config.model)

        self.api_key = os.environ.get(config.api_key_env) if config.api_key_env else None
        if config.api_key_env and not self.api_key:
            self.log.warning("llm.api_key_missing", env_var=config.api_key_env)
        litellm.suppress_debug_info = True

    def summarize(self, system_prompt: str, user_content: str, subject: str) -> str:
        """Ask the model for a summary and return the stripped reply.

        Args:
            system_prompt: Instructions for this kind of summary
            user_content: The text to summarize
            subject: What is being summarized, for logs and errors

        Raises:
            SummarizationError: If the reply is empty
            litellm exceptions: Once retries are exhausted, or at once for
                non-transient errors
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ]
        reply = self.complete(messages)
        text = (reply.content or "").strip()
        if not text:
            raise SummarizationError(
                f"Model returned an empty summary for {subject} "
                f"(finish_reason={reply.finish_reason})"
            )
        self.log.info("llm.summary.done", subject=subject, chars=len(text), usage=reply.usage)
        return text

    def complete(self, messages: list[dict[str, str]]) -> LLMResponse:
        """One completion for *messages*, served from the cache when possible."""
        if self.cache is not None:
            cached = self.cache.get(self.config.model, messages)
            if cached is not None:
                self.log.debug("llm.summary.cached")
                return cached

        reply = LLMResponse.from_litellm(self._request(messages))
        if self.cache is not None:
            self.cache.set(self.config.model, messages, reply)
        return reply

    def _request(self, messages: list[dict[str, str]]) -> Any:
        kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "timeout": self.config.timeout,
            "temperature": self.config.temperature,
            "stream": False,
        }
        if self.config.api_base:
            kwargs["api_base"] = self.config.api_base
        if self.api_key:
            kwargs["api_key"] = self.api_key

        retrying = Retrying(
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            stop=stop_after_attempt(self.config.retries + 1),
            wait=self.retry_wait,
            before_sleep=self._log_retry,
            reraise=True,
        )
        self.log.debug("llm.summary.request", messages=len(messages))
        return retrying(litellm.completion, **kwargs)

    def _log_retry(self, state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        self.log.warning(
            "llm.summary.retry",
            attempt=state.attempt_number,
            wait_seconds=round(state.next_action.sleep, 1) if state.next_action else 0,
            error_type=type(exc).__name__ if exc else None,
            error=str(exc) if exc else None,
        )

    def __repr__(self) -> str:
        return f"<LLMAdapter(model='{self.config.model}')>"
