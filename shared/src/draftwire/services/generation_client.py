"""OpenAI-compatible text generation client for the rewrite pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from draftwire.errors import ConfigurationError, GenerationError, GenerationErrorKind

logger = logging.getLogger(__name__)

DEFAULT_CHAT_MODELS = (
    "gpt-4o",
    "gpt-4o-mini",
    "gpt-4.1",
    "gpt-4.1-mini",
    "o1",
    "o1-mini",
    "o3-mini",
)

SUMMARY_INSTRUCTION = (
    "You're a professional editor with the expertise to condense lengthy articles "
    "into clear, concise summaries. Your task is to extract the key points, main "
    "arguments, and essential facts from the original content. This summary will "
    "serve as the foundation for crafting a completely new article. Please ensure "
    "that the summary is comprehensive enough to capture the essence of the article, "
    "yet concise enough to serve as an effective guide for writing new content."
)

ARTICLE_SYSTEM_PROMPT = (
    "The assistant is an experienced writer who produces detailed and informative "
    "(2000+ words) articles about the topic. The assistant uses a human-like writing "
    "style that is always formal and professional, utilizing active voice, "
    "personification and varied sentence structures to create an engaging flow and "
    "pace. The assistant must organize the content using Markdown formatting, "
    "specifically the CommonMark syntax. Always start the content with '# [Title]' "
    "where [Title] is a compelling and descriptive title for the article."
)

TITLE_SYSTEM_PROMPT = (
    "You are a headline editor. Given an article title, reply with exactly one "
    "alternative title that keeps the same topic and tone. Reply with the title "
    "only, without quotes, numbering or commentary."
)

_QUOTE_CHARS = "\"'`“”‘’«»"


class GenerationConfig(BaseModel):
    """Immutable per-run generation parameters, validated once at construction."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_key: SecretStr
    api_base: str = "https://api.openai.com/v1"
    model: str = Field(default="gpt-4o", min_length=1)
    max_tokens: int = Field(default=10000, ge=1, le=32000, strict=True)
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    top_p: float = Field(default=1.0, ge=0.0, le=1.0)
    frequency_penalty: float = Field(default=0.0, ge=-2.0, le=2.0)
    presence_penalty: float = Field(default=0.0, ge=-2.0, le=2.0)
    timeout: float = Field(default=200.0, gt=0)
    chat_models: tuple[str, ...] = DEFAULT_CHAT_MODELS

    @field_validator("api_key")
    @classmethod
    def _api_key_present(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("API key is required")
        return value

    @field_validator("model")
    @classmethod
    def _model_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("model identifier is required")
        return value

    @classmethod
    def create(cls, **values: Any) -> GenerationConfig:
        """Validate values, reporting every problem as one ConfigurationError."""
        try:
            return cls(**values)
        except ValidationError as exc:
            problems = []
            for error in exc.errors():
                field = ".".join(str(part) for part in error["loc"]) or "config"
                problems.append(f"{field}: {error['msg']}")
            raise ConfigurationError(problems) from exc

    @property
    def is_chat_model(self) -> bool:
        return self.model in self.chat_models

    def request_defaults(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
            "n": 1,
        }


@dataclass(frozen=True)
class GenerationPrompts:
    """System instructions used for each kind of request."""

    summary_instruction: str = SUMMARY_INSTRUCTION
    article_system: str = ARTICLE_SYSTEM_PROMPT
    title_system: str = TITLE_SYSTEM_PROMPT


@dataclass(frozen=True)
class CompletionChoice:
    """Legacy completions shape: ``{"choices": [{"text": ...}]}``."""

    text: str


@dataclass(frozen=True)
class ChatChoice:
    """Chat completions shape: ``{"choices": [{"message": {"content": ...}}]}``."""

    content: str


ResponseShape = CompletionChoice | ChatChoice


def decode_response(body: Any) -> ResponseShape:
    """Decode a response body into one of the two supported shapes.

    Raises:
        GenerationError: ``service`` when the body carries an ``error`` field,
            ``unexpected_response_shape`` when neither shape matches.
    """
    if isinstance(body, dict) and body.get("error"):
        raise GenerationError(GenerationErrorKind.SERVICE, _error_detail(body) or "Unknown API error")

    choices = body.get("choices") if isinstance(body, dict) else None
    first = choices[0] if isinstance(choices, list) and choices else None
    if isinstance(first, dict):
        if isinstance(first.get("text"), str):
            return CompletionChoice(text=first["text"])
        message = first.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return ChatChoice(content=message["content"])

    raise GenerationError(
        GenerationErrorKind.UNEXPECTED_RESPONSE_SHAPE,
        "Unexpected API response structure",
    )


def response_text(shape: ResponseShape) -> str:
    if isinstance(shape, CompletionChoice):
        return shape.text
    return shape.content


def normalize_title(raw: str) -> str:
    """Strip wrapping quotes, capitalize each word and drop a trailing period."""
    lines = [line for line in raw.splitlines() if line.strip()]
    title = lines[0] if lines else ""
    title = title.lstrip(_QUOTE_CHARS + " \t").rstrip(_QUOTE_CHARS + ". \t")
    return " ".join(word[:1].upper() + word[1:] for word in title.split())


def _error_detail(body: dict[str, Any]) -> str:
    error = body.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or error.get("code") or "")
    if error:
        return str(error)
    if body.get("message"):
        return str(body["message"])
    return ""


class GenerationClient:
    """Client for an OpenAI-compatible completions/chat completions API."""

    def __init__(
        self,
        config: GenerationConfig,
        *,
        prompts: GenerationPrompts | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._prompts = prompts or GenerationPrompts()
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout)

    @property
    def config(self) -> GenerationConfig:
        return self._config

    def build_payload(
        self,
        system: str,
        content: str,
        overrides: dict[str, Any] | None = None,
    ) -> tuple[str, dict[str, Any]]:
        """Return ``(url, payload)`` for a request; overrides win over config defaults."""
        params = self._config.request_defaults()
        params.update(overrides or {})

        base = self._config.api_base.rstrip("/")
        if self._config.is_chat_model:
            messages = [
                {"role": "system", "content": system},
                {"role": "user", "content": content},
            ]
            return f"{base}/chat/completions", {"messages": messages, **params}
        return f"{base}/completions", {"prompt": f"{system}\n\n{content}", **params}

    async def complete(
        self,
        system: str,
        content: str,
        **overrides: Any,
    ) -> str:
        """Submit one system/user exchange and return the generated text."""
        url, payload = self.build_payload(system, content, overrides)
        headers = {
            "Authorization": f"Bearer {self._config.api_key.get_secret_value()}",
            "Content-Type": "application/json",
        }

        logger.info("Generation request to %s model=%s", url, payload.get("model"))
        try:
            response = await self._client.post(url, json=payload, headers=headers)
        except httpx.TransportError as exc:
            raise GenerationError(
                GenerationErrorKind.TRANSPORT,
                f"Generation request to {url} failed: {exc!s}",
            ) from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            detail = _error_detail(body) if isinstance(body, dict) else ""
            detail = detail or response.text.strip()
            if len(detail) > 400:
                detail = detail[:400]
            raise GenerationError(
                GenerationErrorKind.SERVICE,
                f"Generation API request failed ({response.status_code}): {detail}",
                status_code=response.status_code,
            )

        text = response_text(decode_response(body))
        logger.info("Generation response model=%s usage=%s", payload.get("model"), body.get("usage", {}))
        return text

    async def generate_summary(self, text: str, **overrides: Any) -> str:
        summary = await self.complete(self._prompts.summary_instruction, text, **overrides)
        if not summary.strip():
            raise GenerationError(GenerationErrorKind.EMPTY_CONTENT, "Generated summary is empty")
        return summary.strip()

    async def generate_article(self, prompt: str, **overrides: Any) -> str:
        article = await self.complete(self._prompts.article_system, prompt, **overrides)
        if not article.strip():
            raise GenerationError(GenerationErrorKind.EMPTY_CONTENT, "Generated article is empty")
        return article

    async def generate_title_variant(self, original_title: str, **overrides: Any) -> str:
        overrides.setdefault("max_tokens", 60)
        raw = await self.complete(
            self._prompts.title_system,
            f"Provide a unique title similar to: {original_title}",
            **overrides,
        )
        title = normalize_title(raw)
        if not title:
            raise GenerationError(GenerationErrorKind.EMPTY_CONTENT, "Generated title is empty")
        return title

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
