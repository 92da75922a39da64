"""Content cleanup transformer: HTML conversion, whitespace, quotes, titles."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pkm_sync.items.models import Item, ItemBuilder
from pkm_sync.pipeline_config import TransformerKind
from pkm_sync.transform.base import Transformer
from pkm_sync.transform.heuristics import (
    clean_title,
    cleanup_whitespace,
    extract_signature,
    strip_quoted_text,
)
from pkm_sync.transform.html_markdown import contains_html, html_to_markdown
from pkm_sync.transform.options import ContentCleanupOptions

logger = logging.getLogger(__name__)


class ContentCleanupTransformer(Transformer):
    """Normalises item bodies and titles.

    Steps run in a fixed order: HTML to Markdown, whitespace cleanup,
    quoted-text stripping, optional signature removal, and finally title
    cleanup, which always runs.
    """

    def __init__(self, options: ContentCleanupOptions | None = None) -> None:
        self.options = options or ContentCleanupOptions()

    @property
    def name(self) -> str:
        return TransformerKind.CONTENT_CLEANUP.value

    def configure(self, options: Mapping[str, Any]) -> None:
        self.options = ContentCleanupOptions.from_mapping(options, owner=self.name)

    def transform(self, items: list[Item]) -> list[Item]:
        return [self.clean_item(item) for item in items if item is not None]

    def clean_item(self, item: Item) -> Item:
        """Return a cleaned copy of *item*, or *item* itself if nothing changed."""
        opts = self.options
        builder = ItemBuilder(item)
        content = item.content

        if opts.html_to_markdown and contains_html(content):
            content = html_to_markdown(content)
        if opts.remove_extra_whitespace:
            content = cleanup_whitespace(content)
        if opts.strip_quoted_text:
            content = strip_quoted_text(content, opts.signature_detection_threshold)
        if opts.extract_signatures:
            content = extract_signature(content)

        builder.set_content(content)
        builder.set_title(clean_title(item.title))
        if builder.changed:
            logger.debug("Cleaned item %s", item.id)
        return builder.build()
