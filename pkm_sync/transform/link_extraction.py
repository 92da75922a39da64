"""Link extraction transformer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pkm_sync.items.models import Item, ItemBuilder
from pkm_sync.pipeline_config import TransformerKind
from pkm_sync.transform.base import Transformer
from pkm_sync.transform.links import extract_links, merge_links
from pkm_sync.transform.options import LinkExtractionOptions


class LinkExtractionTransformer(Transformer):
    """Adds links found in each item's content to the item's link list."""

    def __init__(self, options: LinkExtractionOptions | None = None) -> None:
        self.options = options or LinkExtractionOptions()

    @property
    def name(self) -> str:
        return TransformerKind.LINK_EXTRACTION.value

    def configure(self, options: Mapping[str, Any]) -> None:
        self.options = LinkExtractionOptions.from_mapping(options, owner=self.name)

    def transform(self, items: list[Item]) -> list[Item]:
        return [self._process(item) for item in items if item is not None]

    def _process(self, item: Item) -> Item:
        links = extract_links(
            item.content,
            markdown_links=self.options.extract_markdown_links,
            plain_urls=self.options.extract_plain_urls,
            deduplicate=self.options.deduplicate_links,
        )
        if not links and not self.options.always_process:
            return item
        return ItemBuilder(item).set_links(merge_links(item.links, links)).build()
