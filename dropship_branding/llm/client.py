from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError

from dropship_branding.config import Settings, resolve_model, settings
from dropship_branding.llm.parsing import ModelResponseError

logger = logging.getLogger(__name__)

JSON_RESPONSE_FORMAT: dict[str, Any] = {"type": "json_object"}

_STRUCTURED_MODE_UNSUPPORTED_MARKERS = (
    "response_format",
    "json mode",
    "json_object",
    "not supported",
)

BRANDING_TEMPERATURE = 0.8
BRANDING_MAX_TOKENS = 1000
SEGMENTS_TEMPERATURE = 0.2
SEGMENTS_MAX_TOKENS = 600
MARKETING_PLAN_TEMPERATURE = 0.4
MARKETING_PLAN_MAX_TOKENS = 4000


class EmptyResponseError(ModelResponseError):
    def __init__(self, model: str) -> None:
        super().__init__(f"OpenAI chat completion returned no content for model {model}")
        self.model = model


@dataclass
class CompletionParams:
    temperature: float
    max_tokens: Optional[int] = None
    model: Optional[str] = None
    json_mode: bool = True


def branding_params() -> CompletionParams:
    return CompletionParams(temperature=BRANDING_TEMPERATURE, max_tokens=BRANDING_MAX_TOKENS)


def segment_params() -> CompletionParams:
    return CompletionParams(temperature=SEGMENTS_TEMPERATURE, max_tokens=SEGMENTS_MAX_TOKENS)


def marketing_plan_params() -> CompletionParams:
    # The plan starts with a prose summary, so structured mode stays off.
    return CompletionParams(
        temperature=MARKETING_PLAN_TEMPERATURE,
        max_tokens=MARKETING_PLAN_MAX_TOKENS,
        json_mode=False,
    )


def is_structured_mode_unsupported(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _STRUCTURED_MODE_UNSUPPORTED_MARKERS)


class CompletionClient:
    """
    Thin async wrapper around OpenAI chat completions.

    Environment overrides (model, temperature, max tokens) win over the
    per-use-case defaults carried by `CompletionParams`.
    """

    def __init__(self, config: Settings | None = None, openai_client: AsyncOpenAI | None = None) -> None:
        self._settings = config or settings
        self._openai_client = openai_client

    def _client(self) -> AsyncOpenAI:
        if not self._openai_client:
            client_kwargs: dict[str, Any] = {
                "api_key": self._settings.require_openai_api_key(),
                "timeout": float(self._settings.OPENAI_REQUEST_TIMEOUT_SECONDS),
                "max_retries": 0,
            }
            if self._settings.OPENAI_BASE_URL:
                client_kwargs["base_url"] = self._settings.OPENAI_BASE_URL
            self._openai_client = AsyncOpenAI(**client_kwargs)
        return self._openai_client

    def _resolve_request(self, params: CompletionParams) -> tuple[str, float, Optional[int]]:
        model = resolve_model(params.model or self._settings.OPENAI_MODEL)
        temperature = (
            self._settings.OPENAI_TEMPERATURE
            if self._settings.OPENAI_TEMPERATURE is not None
            else params.temperature
        )
        max_tokens = self._settings.OPENAI_MAX_TOKENS or params.max_tokens
        return model, temperature, max_tokens

    async def complete(self, prompt: str, *, system_prompt: str, params: CompletionParams) -> str:
        model, temperature, max_tokens = self._resolve_request(params)
        completion_kwargs: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
        }
        if max_tokens:
            completion_kwargs["max_tokens"] = max_tokens

        client = self._client()
        if not params.json_mode:
            completion = await self._create(client, completion_kwargs, json_mode=False)
            return self._extract_text(completion, model)

        try:
            completion = await self._create(
                client,
                {**completion_kwargs, "response_format": JSON_RESPONSE_FORMAT},
                json_mode=True,
            )
        except OpenAIError as exc:
            if not is_structured_mode_unsupported(exc):
                raise
            logger.warning(
                "Structured output not supported; retrying without response_format",
                extra={"model": model, "error": str(exc)},
            )
            completion = await self._create(client, completion_kwargs, json_mode=False)

        return self._extract_text(completion, model)

    async def _create(self, client: AsyncOpenAI, completion_kwargs: dict[str, Any], *, json_mode: bool) -> Any:
        logger.info(
            "OpenAI chat completion request",
            extra={
                "model": completion_kwargs["model"],
                "json_mode": json_mode,
                "temperature": completion_kwargs.get("temperature"),
                "max_tokens": completion_kwargs.get("max_tokens"),
            },
        )
        try:
            return await client.chat.completions.create(**completion_kwargs)
        except OpenAIError:
            logger.exception(
                "OpenAI chat completion failed",
                extra={"model": completion_kwargs["model"], "json_mode": json_mode},
            )
            raise

    @staticmethod
    def _extract_text(completion: Any, model: str) -> str:
        text = None
        if completion and getattr(completion, "choices", None):
            message = completion.choices[0].message
            text = getattr(message, "content", None)
        if not text or not text.strip():
            raise EmptyResponseError(model)
        return text
