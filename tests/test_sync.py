"""Tests for the sync orchestration: fetch, transform, export."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import pytest

from pkm_sync.items.models import Item
from pkm_sync.sync import Source, SyncError, Syncer, SyncOptions, Target
from pkm_sync.transform.base import Transformer
from pkm_sync.transform.pipeline import TransformPipeline, build_default_pipeline


class FakeSource(Source):
    def __init__(self, items: list[Item] | None = None, error: Exception | None = None) -> None:
        self.items = items or []
        self.error = error
        self.calls: list[tuple[datetime | None, int]] = []

    @property
    def name(self) -> str:
        return "fake_source"

    def fetch(self, since: datetime | None, limit: int) -> list[Item]:
        self.calls.append((since, limit))
        if self.error:
            raise self.error
        return list(self.items)


class FakeTarget(Target):
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.exported: list[Item] | None = None
        self.output_dir: str | None = None

    @property
    def name(self) -> str:
        return "fake_target"

    def export(self, items: list[Item], output_dir: str) -> None:
        if self.error:
            raise self.error
        self.exported = items
        self.output_dir = output_dir


class ExplodingTransformer(Transformer):
    name = "exploding"

    def configure(self, options: Mapping[str, Any]) -> None:
        return None

    def transform(self, items: list[Item]) -> list[Item]:
        raise ValueError("bad batch")


def _integration_pipeline() -> TransformPipeline:
    return build_default_pipeline(
        {
            "enabled": True,
            "pipeline_order": ["content_cleanup", "auto_tagging", "filter"],
            "error_strategy": "log_and_continue",
            "transformers": {
                "auto_tagging": {
                    "rules": [
                        {"pattern": "meeting", "tags": ["work", "meeting"]},
                        {"pattern": "urgent", "tags": ["priority"]},
                    ]
                },
                "filter": {"min_content_length": 15},
            },
        }
    )


def _source_items() -> list[Item]:
    return [
        Item(
            id="1",
            title="  Re: Important Meeting  ",
            content="  This is about a meeting\n\n\n\nwith urgent details  ",
            source_type="test_source",
            item_type="email",
            tags=["existing"],
        ),
        Item(id="2", title="Short", content="Too short", source_type="test_source", item_type="email"),
    ]


class TestSyncer:
    def test_full_pipeline(self) -> None:
        source = FakeSource(_source_items())
        target = FakeTarget()
        Syncer(_integration_pipeline()).sync(source, target, SyncOptions(output_dir="/vault"))

        assert target.output_dir == "/vault"
        assert target.exported is not None
        [item] = target.exported
        assert item.title == "Important Meeting"
        assert item.content == "This is about a meeting\n\nwith urgent details"
        for tag in ["existing", "work", "meeting", "priority", "source:test_source", "type:email"]:
            assert tag in item.tags

    def test_default_limit(self) -> None:
        source = FakeSource()
        since = datetime(2024, 1, 1, tzinfo=timezone.utc)
        Syncer().sync(source, FakeTarget(), SyncOptions(since=since))
        assert source.calls == [(since, 100)]

    def test_without_pipeline_items_pass_through(self) -> None:
        items = _source_items()
        target = FakeTarget()
        Syncer().sync(FakeSource(items), target)
        assert target.exported == items

    def test_dry_run_skips_export(self) -> None:
        target = FakeTarget()
        result = Syncer(_integration_pipeline()).sync(
            FakeSource(_source_items()), target, SyncOptions(dry_run=True)
        )
        assert target.exported is None
        assert [item.id for item in result] == ["1"]

    def test_fetch_error_wrapped(self) -> None:
        with pytest.raises(SyncError, match="fake_source") as exc_info:
            Syncer().sync(FakeSource(error=ConnectionError("down")), FakeTarget())
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_export_error_wrapped(self) -> None:
        with pytest.raises(SyncError, match="fake_target"):
            Syncer().sync(FakeSource(_source_items()), FakeTarget(error=OSError("disk full")))

    def test_transform_error_wrapped(self) -> None:
        pipeline = TransformPipeline()
        pipeline.add_transformer(ExplodingTransformer())
        pipeline.configure({"pipeline_order": ["exploding"], "error_strategy": "fail_fast"})
        target = FakeTarget()
        with pytest.raises(SyncError, match="transform"):
            Syncer(pipeline).sync(FakeSource(_source_items()), target)
        assert target.exported is None


class TestTarget:
    def test_format_filename(self) -> None:
        assert FakeTarget().format_filename("Re: Q3 / Plan") == "Re-Q3-Plan.md"

    def test_source_defaults(self) -> None:
        assert FakeSource().supports_realtime() is False
