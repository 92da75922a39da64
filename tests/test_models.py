"""Tests for items, senders, copy-on-write building and calendar conversion."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from pkm_sync.items.models import (
    EPOCH,
    Attendee,
    CalendarEvent,
    DriveFile,
    Item,
    ItemBuilder,
    Link,
    LinkType,
    Sender,
    SenderKind,
    item_from_calendar_event,
)


class TestSender:
    def test_plain(self) -> None:
        sender = Sender.from_metadata("alice@example.com")
        assert sender is not None
        assert sender.kind is SenderKind.PLAIN
        assert sender.identifier == "alice@example.com"
        assert sender.display == "alice@example.com"

    def test_structured(self) -> None:
        sender = Sender.from_metadata({"name": "Alice", "email": "alice@example.com"})
        assert sender is not None
        assert sender.kind is SenderKind.STRUCTURED
        assert sender.identifier == "alice@example.com"
        assert sender.display == "Alice <alice@example.com>"

    def test_structured_name_only(self) -> None:
        sender = Sender.from_metadata({"name": "Alice", "email": ""})
        assert sender is not None
        assert sender.identifier == "Alice"
        assert sender.display == "Alice"

    @pytest.mark.parametrize("raw", [None, "", {}, {"email": 42}, 17])
    def test_unrecognised(self, raw: object) -> None:
        assert Sender.from_metadata(raw) is None


class TestItem:
    def test_defaults(self) -> None:
        item = Item(id="1")
        assert item.created_at == EPOCH
        assert item.tags == []
        assert item.sender is None
        assert item.thread_id == "1"

    def test_sender_resolved_from_metadata(self) -> None:
        item = Item(id="1", metadata={"from": "bob@example.com", "thread_id": "t"})
        assert item.sender == Sender.plain("bob@example.com")
        assert item.thread_id == "t"

    def test_explicit_sender_wins(self) -> None:
        sender = Sender.structured(name="Carol")
        assert Item(id="1", sender=sender, metadata={"from": "x@y.z"}).sender is sender

    def test_non_string_thread_id_ignored(self) -> None:
        assert Item(id="1", metadata={"thread_id": 42}).thread_id == "1"

    def test_add_tags(self) -> None:
        item = Item(id="1", tags=["a"])
        item.add_tags("b", "a", "c", "b")
        assert item.tags == ["a", "b", "c"]


class TestItemBuilder:
    def test_no_change_returns_same_object(self) -> None:
        item = Item(id="1", title="T", content="C", tags=["x"])
        builder = ItemBuilder(item).set_title("T").set_content("C").add_tags(["x"])
        assert not builder.changed
        assert builder.build() is item

    def test_change_produces_copy(self) -> None:
        item = Item(id="1", title="T", tags=["x"], metadata={"k": 1}, links=[Link(url="u")])
        result = ItemBuilder(item).set_title("New").build()
        assert result is not item
        assert result.title == "New"
        assert item.title == "T"
        assert result.tags == item.tags and result.tags is not item.tags
        assert result.metadata == item.metadata and result.metadata is not item.metadata
        assert result.links is not item.links

    def test_reverting_a_change(self) -> None:
        item = Item(id="1", title="T")
        assert ItemBuilder(item).set_title("X").set_title("T").build() is item

    def test_tags_accumulate(self) -> None:
        item = Item(id="1")
        result = ItemBuilder(item).add_tags(["a"]).add_tags(["b", "a"]).build()
        assert result.tags == ["a", "b"]


class TestCalendarEvent:
    def test_conversion(self) -> None:
        start = datetime(2024, 3, 1, 14, 0, tzinfo=timezone.utc)
        end = datetime(2024, 3, 1, 15, 0, tzinfo=timezone.utc)
        event = CalendarEvent(
            id="evt1",
            summary="Planning",
            description="<p>Agenda</p>",
            location="Room 4",
            start=start,
            end=end,
            attendees=[Attendee(email="a@x.com"), Attendee(email="b@x.com", display_name="B")],
            meeting_url="https://meet.example.com/abc",
            attached_docs=[
                DriveFile(id="d1", name="Notes", web_view_link="https://docs.google.com/d/1")
            ],
        )
        item = item_from_calendar_event(event)
        assert item.id == "evt1"
        assert item.title == "Planning"
        assert item.source_type == "google_calendar"
        assert item.item_type == "event"
        assert item.created_at == start
        assert item.metadata["attendees"] == ["a@x.com", "b@x.com"]
        assert item.metadata["location"] == "Room 4"
        assert item.links == [
            Link(url="https://meet.example.com/abc", title="Meeting Link", type=LinkType.MEETING_URL),
            Link(url="https://docs.google.com/d/1", title="Notes", type=LinkType.DOCUMENT),
        ]
        assert [a.name for a in item.attachments] == ["Notes"]

    def test_minimal_event(self) -> None:
        item = item_from_calendar_event(CalendarEvent(id="e"))
        assert item.links == []
        assert "location" not in item.metadata
        assert "attendees" not in item.metadata
