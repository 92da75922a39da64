"""Tests for the auto_tagging and filter transformers."""

from __future__ import annotations

import pytest

from pkm_sync.items.models import Item
from pkm_sync.transform.base import ConfigurationError
from pkm_sync.transform.filtering import FilterTransformer
from pkm_sync.transform.tagging import AutoTaggingTransformer


class TestAutoTagging:
    @pytest.fixture()
    def tagger(self) -> AutoTaggingTransformer:
        transformer = AutoTaggingTransformer()
        transformer.configure(
            {
                "rules": [
                    {"pattern": "meeting", "tags": ["work", "meeting"]},
                    {"pattern": "URGENT", "tags": ["priority"]},
                ]
            }
        )
        return transformer

    def test_name(self) -> None:
        assert AutoTaggingTransformer().name == "auto_tagging"

    def test_rules_and_source_tags(self, tagger: AutoTaggingTransformer) -> None:
        item = Item(
            id="1",
            title="Team Meeting",
            content="nothing urgent",
            source_type="gmail",
            item_type="email",
            tags=["existing", "work"],
        )
        [result] = tagger.transform([item])
        assert result.tags == [
            "existing",
            "work",
            "meeting",
            "priority",
            "source:gmail",
            "type:email",
        ]
        assert item.tags == ["existing", "work"]

    def test_no_match_still_tags_source(self, tagger: AutoTaggingTransformer) -> None:
        [result] = tagger.transform([Item(id="1", content="lunch", source_type="slack")])
        assert result.tags == ["source:slack"]

    def test_already_tagged_item_unchanged(self) -> None:
        item = Item(id="1", content="x", source_type="gmail", tags=["source:gmail"])
        assert AutoTaggingTransformer().transform([item])[0] is item

    def test_invalid_rules(self) -> None:
        with pytest.raises(ConfigurationError, match="auto_tagging"):
            AutoTaggingTransformer().configure({"rules": [{"tags": ["x"]}]})


class TestFilter:
    def test_name(self) -> None:
        assert FilterTransformer().name == "filter"

    def test_min_content_length(self) -> None:
        transformer = FilterTransformer()
        transformer.configure({"min_content_length": 15})
        long_item = Item(id="1", content="long enough content")
        result = transformer.transform([long_item, Item(id="2", content="Too short")])
        assert result == [long_item]

    def test_excluded_source_types(self) -> None:
        transformer = FilterTransformer()
        transformer.configure({"exclude_source_types": ["spam"]})
        keep = Item(id="1", source_type="gmail")
        assert transformer.transform([keep, Item(id="2", source_type="spam")]) == [keep]

    def test_required_tags(self) -> None:
        transformer = FilterTransformer()
        transformer.configure({"required_tags": ["work", "meeting"]})
        keep = Item(id="1", tags=["meeting", "work", "x"])
        drop = Item(id="2", tags=["work"])
        assert transformer.transform([keep, drop]) == [keep]

    def test_default_keeps_everything(self) -> None:
        items = [Item(id="1"), Item(id="2", content="x")]
        assert FilterTransformer().transform(items) == items
