"""Thread grouping transformer wrapping :class:`ThreadProcessor`."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pkm_sync.items.models import Item
from pkm_sync.pipeline_config import TransformerKind
from pkm_sync.threads.processor import ThreadProcessor
from pkm_sync.transform.base import Transformer
from pkm_sync.transform.options import ThreadOptions


class ThreadGroupingTransformer(Transformer):
    def __init__(self, options: ThreadOptions | None = None) -> None:
        self.processor = ThreadProcessor(options)

    @property
    def name(self) -> str:
        return TransformerKind.THREAD_GROUPING.value

    def configure(self, options: Mapping[str, Any]) -> None:
        self.processor = ThreadProcessor(ThreadOptions.from_mapping(options, owner=self.name))

    def transform(self, items: list[Item]) -> list[Item]:
        return self.processor.process_threads([item for item in items if item is not None])
