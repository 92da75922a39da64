"""Typed pipeline and transformer options, validated once at configure time."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pkm_sync.config import get_settings
from pkm_sync.pipeline_config import ErrorStrategy, ThreadMode
from pkm_sync.transform.base import ConfigurationError

DEFAULT_SUMMARY_LENGTH = 5


class OptionsModel(BaseModel):
    """Base for option models built from loosely typed config mappings."""

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None, *, owner: str = "") -> Self:
        """Validate a raw options mapping.

        Raises:
            ConfigurationError: If any option has the wrong type or value.
        """
        try:
            return cls.model_validate(dict(options or {}))
        except ValidationError as exc:
            raise ConfigurationError(
                f"invalid options for '{owner or cls.__name__}': {exc}"
            ) from exc


class ContentCleanupOptions(OptionsModel):
    html_to_markdown: bool = True
    strip_quoted_text: bool = True
    remove_extra_whitespace: bool = True
    extract_signatures: bool = False
    signature_detection_threshold: int = Field(
        default_factory=lambda: get_settings().signature_detection_threshold, gt=0
    )

    @field_validator("signature_detection_threshold", mode="before")
    @classmethod
    def _truncate_float(cls, value: Any) -> Any:
        # Floats are truncated toward zero.
        if isinstance(value, float):
            return int(value)
        return value


class LinkExtractionOptions(OptionsModel):
    extract_markdown_links: bool = True
    extract_plain_urls: bool = True
    deduplicate_links: bool = True
    always_process: bool = False


class ThreadOptions(OptionsModel):
    include_threads: bool = True
    thread_mode: ThreadMode = Field(default_factory=lambda: get_settings().thread_mode)
    thread_summary_length: int = Field(
        default_factory=lambda: get_settings().thread_summary_length
    )
    source_type: str = "gmail"

    @field_validator("thread_mode", mode="before")
    @classmethod
    def _normalise_mode(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, ThreadMode):
            return value.strip().lower() or ThreadMode.INDIVIDUAL
        return value

    @field_validator("thread_summary_length", mode="before")
    @classmethod
    def _default_summary_length(cls, value: Any) -> Any:
        if isinstance(value, float):
            value = int(value)
        if isinstance(value, int) and value <= 0:
            return DEFAULT_SUMMARY_LENGTH
        return value


class TaggingRule(BaseModel):
    """Add ``tags`` to any item whose title or content contains ``pattern``."""

    pattern: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)


class AutoTaggingOptions(OptionsModel):
    rules: list[TaggingRule] = Field(default_factory=list)


class FilterOptions(OptionsModel):
    min_content_length: int = Field(default=0, ge=0)
    exclude_source_types: list[str] = Field(default_factory=list)
    required_tags: list[str] = Field(default_factory=list)


class TransformConfig(OptionsModel):
    """Pipeline-level configuration.

    ``transformers`` maps a transformer name to its raw options; each
    transformer validates its own entry when the pipeline is configured.
    """

    enabled: bool = True
    pipeline_order: list[str] = Field(default_factory=list)
    error_strategy: ErrorStrategy = Field(default_factory=lambda: get_settings().error_strategy)
    transformers: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @field_validator("error_strategy", mode="before")
    @classmethod
    def _normalise_strategy(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, ErrorStrategy):
            return value.strip().lower()
        return value
