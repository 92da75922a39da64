"""Transformer interface and the errors raised by the transform layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from pkm_sync.items.models import Item


class ConfigurationError(ValueError):
    """Raised for invalid pipeline or transformer configuration."""


class TransformerError(RuntimeError):
    """Raised when a transformer fails while processing a batch."""

    def __init__(self, transformer_name: str, cause: BaseException | str) -> None:
        self.transformer_name = transformer_name
        self.cause = cause
        super().__init__(f"transformer '{transformer_name}' failed: {cause}")


class Transformer(ABC):
    """A named, configurable stage that maps a batch of items to a new batch.

    Implementations must not mutate their input items. A stage may drop
    items, add items or replace items with modified copies.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name used to reference the transformer in ``pipeline_order``."""

    @abstractmethod
    def configure(self, options: Mapping[str, Any]) -> None:
        """Apply transformer options.

        Raises:
            ConfigurationError: If the options are invalid.
        """

    @abstractmethod
    def transform(self, items: list[Item]) -> list[Item]:
        """Process a batch of items and return the resulting batch."""
