"""Sync orchestration: fetch from a source, transform, export to a target."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pkm_sync.items.models import Item
from pkm_sync.transform.pipeline import TransformPipeline
from pkm_sync.utils.filename import sanitize_filename

logger = logging.getLogger(__name__)

DEFAULT_FETCH_LIMIT = 100


class SyncError(RuntimeError):
    """Raised when a sync run fails at fetch, transform or export."""


class Source(ABC):
    """Where items come from (mail, calendar, drive...)."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    def configure(self, options: Mapping[str, Any]) -> None:
        return None

    @abstractmethod
    def fetch(self, since: datetime | None, limit: int) -> list[Item]: ...

    def supports_realtime(self) -> bool:
        return False


class Target(ABC):
    """Where items are written (a notes vault, a directory of files...)."""

    file_extension = ".md"

    @property
    @abstractmethod
    def name(self) -> str: ...

    def configure(self, options: Mapping[str, Any]) -> None:
        return None

    @abstractmethod
    def export(self, items: list[Item], output_dir: str) -> None: ...

    def format_filename(self, title: str) -> str:
        return sanitize_filename(title) + self.file_extension


@dataclass
class SyncOptions:
    since: datetime | None = None
    output_dir: str = ""
    limit: int = DEFAULT_FETCH_LIMIT
    dry_run: bool = False
    overwrite: bool = False


class Syncer:
    """Runs one fetch -> transform -> export cycle."""

    def __init__(self, pipeline: TransformPipeline | None = None) -> None:
        self.pipeline = pipeline

    def sync(self, source: Source, target: Target, options: SyncOptions | None = None) -> list[Item]:
        """Sync items from *source* to *target*.

        Returns:
            The items that were (or, in a dry run, would have been) exported.

        Raises:
            SyncError: If fetching, transforming or exporting fails.
        """
        options = options or SyncOptions()

        try:
            items = source.fetch(options.since, options.limit)
        except Exception as exc:
            raise SyncError(f"failed to fetch from {source.name}: {exc}") from exc
        logger.info("Fetched %d items from %s", len(items), source.name)

        if self.pipeline is not None:
            try:
                items = self.pipeline.transform(items)
            except Exception as exc:
                raise SyncError(f"failed to transform items: {exc}") from exc

        if options.dry_run:
            logger.info("Dry run: would export %d items to %s", len(items), target.name)
            return items

        try:
            target.export(items, options.output_dir)
        except Exception as exc:
            raise SyncError(f"failed to export to {target.name}: {exc}") from exc
        logger.info("Exported %d items to %s", len(items), target.name)
        return items
