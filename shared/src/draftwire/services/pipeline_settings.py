"""Pipeline settings service -- typed Pydantic models backed by site_settings table."""
from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from draftwire.config import Settings
from draftwire.models.site_setting import SiteSetting
from draftwire.schemas.documents import DocumentStatus, ProcessingOrder
from draftwire.services.generation_client import GenerationConfig, GenerationPrompts

logger = logging.getLogger(__name__)


class SelectionSettings(BaseModel):
    # "pending": draft -> pending -> publish; "draft": draft -> publish
    status_flow: Literal["pending", "draft"] = "pending"
    categories: list[str] = Field(default_factory=list)
    order: ProcessingOrder = ProcessingOrder.OLDEST
    batch_size: int = Field(default=1, ge=1, le=50)

    @property
    def candidate_status(self) -> DocumentStatus:
        return DocumentStatus(self.status_flow)


class FormattingSettings(BaseModel):
    article_format: Literal["markdown", "plain"] = "markdown"
    rewrite_title: bool = False


class GenerationOverrides(BaseModel):
    """Optional per-site overrides of the environment generation defaults."""

    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None


class PromptSettings(BaseModel):
    summary_instruction: str | None = None
    article_system: str | None = None
    title_system: str | None = None

    def to_prompts(self) -> GenerationPrompts:
        overrides = {k: v for k, v in self.model_dump().items() if v}
        return GenerationPrompts(**overrides)


class PipelineSettings(BaseModel):
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    formatting: FormattingSettings = Field(default_factory=FormattingSettings)
    generation: GenerationOverrides = Field(default_factory=GenerationOverrides)
    prompts: PromptSettings = Field(default_factory=PromptSettings)


async def load_pipeline_settings(session: AsyncSession) -> PipelineSettings:
    """Load pipeline settings from site_settings table, merged with defaults.

    Keys use dotted paths like ``pipeline.selection.batch_size``.
    """
    result = await session.execute(
        select(SiteSetting).where(SiteSetting.category == "pipeline")
    )
    rows = result.scalars().all()

    overrides: dict[str, Any] = {}
    for row in rows:
        # Keys stored as "pipeline.selection.batch_size" -> nested dict
        key = row.key
        if key.startswith("pipeline."):
            key = key[len("pipeline."):]
        parts = key.split(".")
        if len(parts) == 2:
            group, field = parts
            value = row.value
            # Scalars are stored wrapped as {"value": ...}
            if isinstance(value, dict) and set(value) == {"value"}:
                value = value["value"]
            overrides.setdefault(group, {})[field] = value
        elif len(parts) == 1 and isinstance(row.value, dict):
            overrides.setdefault(parts[0], {}).update(row.value)

    defaults = PipelineSettings()
    merged = defaults.model_dump()
    for group, fields in overrides.items():
        if group in merged and isinstance(fields, dict):
            merged[group].update(fields)
        else:
            logger.warning("Ignoring unknown pipeline settings group '%s'", group)

    return PipelineSettings(**merged)


def build_generation_config(
    settings: Settings,
    overrides: GenerationOverrides | None = None,
) -> GenerationConfig:
    """Merge site overrides over environment defaults and validate.

    Raises:
        ConfigurationError: listing every invalid value.
    """
    values: dict[str, Any] = {
        "api_key": settings.generation_api_key,
        "api_base": settings.generation_api_base,
        "model": settings.generation_model,
        "max_tokens": settings.generation_max_tokens,
        "temperature": settings.generation_temperature,
        "top_p": settings.generation_top_p,
        "frequency_penalty": settings.generation_frequency_penalty,
        "presence_penalty": settings.generation_presence_penalty,
        "timeout": settings.generation_timeout,
    }
    if overrides is not None:
        values.update(overrides.model_dump(exclude_none=True))
    return GenerationConfig.create(**values)


def pipeline_settings_schema() -> dict[str, Any]:
    """Return the full JSON Schema for PipelineSettings with defaults."""
    return PipelineSettings.model_json_schema()
