"""Client for an OpenAI-compatible chat-completions endpoint.

Used by the ask_docs tool to turn a question plus retrieved documentation
context into a free-text answer. Retries its own endpoint a bounded number of
times; authentication failures (401/403) are not retried.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from llmsdocs.errors import DocsError, ErrorCode

if TYPE_CHECKING:
    from llmsdocs.config import CompletionSettings

log = structlog.get_logger()

_NON_RETRYABLE_STATUSES = frozenset({401, 403})


def build_system_prompt(product_name: str) -> str:
    return (
        f"You are an expert assistant for {product_name} documentation. "
        f"You help developers understand and use {product_name} effectively. "
        "Your responses should be accurate, helpful, and based on the provided "
        "documentation context when available. If you're unsure about something, "
        "acknowledge it and suggest where to find more information."
    )


def build_user_prompt(question: str, context: str = "") -> str:
    if not context:
        return question
    return f"Based on the following documentation context:\n\n{context}\n\nQuestion: {question}"


class CompletionClient:
    """Asks a chat-completions endpoint a question with optional context."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: CompletionSettings,
        product_name: str,
    ) -> None:
        self._client = client
        self._settings = settings
        self._system_prompt = build_system_prompt(product_name)

    async def ask(self, question: str, context: str = "") -> str:
        if not self._settings.api_key:
            raise DocsError(
                code=ErrorCode.COMPLETION_NOT_CONFIGURED,
                message="Completion API key is not configured.",
                suggestion="Set LLMSDOCS__COMPLETION__API_KEY and restart the server.",
                recoverable=False,
            )

        payload = {
            "model": self._settings.model,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": build_user_prompt(question, context)},
            ],
            "temperature": self._settings.temperature,
            "max_tokens": self._settings.max_tokens,
            "top_p": self._settings.top_p,
        }

        attempts = max(1, self._settings.max_retries)
        attempt = 0

        while True:
            attempt += 1
            try:
                return await self._call_endpoint(payload)
            except DocsError as exc:
                if not exc.recoverable or attempt >= attempts:
                    raise
                log.warning(
                    "completion_attempt_failed",
                    attempt=attempt,
                    max_attempts=attempts,
                    message=exc.message,
                )
            await asyncio.sleep(self._settings.retry_delay_seconds * attempt)

    async def _call_endpoint(self, payload: dict[str, Any]) -> str:
        try:
            response = await self._client.post(
                self._settings.endpoint,
                json=payload,
                headers={"Authorization": f"Bearer {self._settings.api_key}"},
                timeout=self._settings.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise DocsError(
                code=ErrorCode.COMPLETION_FAILED,
                message=f"Network error calling completion endpoint: {exc}",
                suggestion="The completion service may be temporarily unavailable.",
                recoverable=True,
            ) from exc

        if not response.is_success:
            non_retryable = response.status_code in _NON_RETRYABLE_STATUSES
            raise DocsError(
                code=ErrorCode.COMPLETION_FAILED,
                message=f"Completion API error ({response.status_code}): {response.text}",
                suggestion=(
                    "Check the configured completion API key."
                    if non_retryable
                    else "The completion service may be temporarily unavailable."
                ),
                recoverable=not non_retryable,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise DocsError(
                code=ErrorCode.COMPLETION_FAILED,
                message="Completion endpoint returned invalid JSON.",
                suggestion="Check that the completion endpoint is OpenAI-compatible.",
                recoverable=True,
            ) from exc

        answer = _extract_answer(data)
        if answer is None:
            raise DocsError(
                code=ErrorCode.COMPLETION_FAILED,
                message="Unexpected completion API response format.",
                suggestion="Check that the completion endpoint is OpenAI-compatible.",
                recoverable=True,
            )

        log.info("completion_complete", answer_length=len(answer))
        return answer


def _extract_answer(data: Any) -> str | None:
    """Pull the answer from ``choices[0].message.content`` or a bare ``response``."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if isinstance(choices, list) and choices:
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if content:
            return content
    response = data.get("response")
    if response:
        return response
    return None
