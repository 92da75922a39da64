"""Rule-based auto-tagging transformer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pkm_sync.items.models import Item, ItemBuilder
from pkm_sync.pipeline_config import TransformerKind
from pkm_sync.transform.base import Transformer
from pkm_sync.transform.options import AutoTaggingOptions


class AutoTaggingTransformer(Transformer):
    """Tags items by keyword rules plus their source and item type.

    A rule matches when its pattern occurs, case-insensitively, in the
    item's title or content. Every item also receives ``source:<type>``
    and ``type:<kind>`` tags when those fields are set.
    """

    def __init__(self, options: AutoTaggingOptions | None = None) -> None:
        self.options = options or AutoTaggingOptions()

    @property
    def name(self) -> str:
        return TransformerKind.AUTO_TAGGING.value

    def configure(self, options: Mapping[str, Any]) -> None:
        self.options = AutoTaggingOptions.from_mapping(options, owner=self.name)

    def transform(self, items: list[Item]) -> list[Item]:
        return [self._tag(item) for item in items if item is not None]

    def _tag(self, item: Item) -> Item:
        haystack = f"{item.title} {item.content}".lower()
        tags: list[str] = []
        for rule in self.options.rules:
            if rule.pattern.lower() in haystack:
                tags.extend(rule.tags)
        if item.source_type:
            tags.append(f"source:{item.source_type}")
        if item.item_type:
            tags.append(f"type:{item.item_type}")
        return ItemBuilder(item).add_tags(tags).build()
