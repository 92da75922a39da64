"""Thread grouping data model."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pkm_sync.items.models import Item
from pkm_sync.transform.heuristics import clean_title


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so mixed inputs stay comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def sender_identifier(item: Item) -> str:
    return item.sender.identifier if item.sender is not None else ""


@dataclass
class ThreadGroup:
    """Messages sharing a thread key, kept in chronological order."""

    thread_id: str
    subject: str
    start_time: datetime
    end_time: datetime
    messages: list[Item] = field(default_factory=list)
    participants: list[str] = field(default_factory=list)

    @classmethod
    def start(cls, thread_id: str, first: Item) -> ThreadGroup:
        group = cls(
            thread_id=thread_id,
            subject=clean_title(first.title),
            start_time=first.created_at,
            end_time=first.created_at,
        )
        group.add_message(first)
        return group

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def duration_hours(self) -> float:
        return (as_utc(self.end_time) - as_utc(self.start_time)).total_seconds() / 3600

    def add_message(self, item: Item) -> None:
        self.messages.append(item)
        if as_utc(item.created_at) < as_utc(self.start_time):
            self.start_time = item.created_at
        if as_utc(item.created_at) > as_utc(self.end_time):
            self.end_time = item.created_at
        sender = sender_identifier(item)
        if sender and sender not in self.participants:
            self.participants.append(sender)

    def sort_messages(self) -> None:
        self.messages.sort(key=lambda item: as_utc(item.created_at))


def group_messages_by_thread(items: Iterable[Item | None] | None) -> dict[str, ThreadGroup]:
    """Group items by thread key, in order of first appearance.

    ``None`` entries are skipped and a ``None`` batch yields no groups.
    """
    groups: dict[str, ThreadGroup] = {}
    for item in items or ():
        if item is None:
            continue
        key = item.thread_id
        if key in groups:
            groups[key].add_message(item)
        else:
            groups[key] = ThreadGroup.start(key, item)
    for group in groups.values():
        group.sort_messages()
    return groups


def build_thread_metadata(group: ThreadGroup | None) -> dict[str, Any]:
    if group is None:
        return {}
    return {
        "thread_id": group.thread_id,
        "message_count": group.message_count,
        "participants": list(group.participants),
        "start_time": group.start_time,
        "end_time": group.end_time,
        "duration_hours": group.duration_hours,
    }
