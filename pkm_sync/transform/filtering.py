"""Filter transformer dropping items that fail simple quality checks."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pkm_sync.items.models import Item
from pkm_sync.pipeline_config import TransformerKind
from pkm_sync.transform.base import Transformer
from pkm_sync.transform.options import FilterOptions

logger = logging.getLogger(__name__)


class FilterTransformer(Transformer):
    def __init__(self, options: FilterOptions | None = None) -> None:
        self.options = options or FilterOptions()

    @property
    def name(self) -> str:
        return TransformerKind.FILTER.value

    def configure(self, options: Mapping[str, Any]) -> None:
        self.options = FilterOptions.from_mapping(options, owner=self.name)

    def transform(self, items: list[Item]) -> list[Item]:
        kept = [item for item in items if item is not None and self.accepts(item)]
        dropped = len(items) - len(kept)
        if dropped:
            logger.info("Filtered out %d of %d items", dropped, len(items))
        return kept

    def accepts(self, item: Item) -> bool:
        if len(item.content) < self.options.min_content_length:
            return False
        if item.source_type in self.options.exclude_source_types:
            return False
        return all(tag in item.tags for tag in self.options.required_tags)
