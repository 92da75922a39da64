"""Data models for items flowing through the sync pipeline."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _epoch() -> datetime:
    return EPOCH


class LinkType(str, Enum):
    INTERNAL = "internal"
    DOCUMENT = "document"
    EXTERNAL = "external"
    MEETING_URL = "meeting_url"


@dataclass(frozen=True)
class Link:
    """A hyperlink found in (or attached to) an item."""

    url: str
    title: str = ""
    type: LinkType = LinkType.EXTERNAL


@dataclass
class Attachment:
    id: str
    name: str
    mime_type: str = ""
    size: int = 0
    data: bytes | None = None
    url: str = ""
    local_path: str = ""


class SenderKind(str, Enum):
    PLAIN = "plain"
    STRUCTURED = "structured"


@dataclass(frozen=True)
class Sender:
    """Who sent an email: either a bare string or a name/email pair.

    Email sources report the sender in two shapes, a plain string such as
    ``"alice@example.com"`` or a record with ``name`` and ``email`` keys.
    ``identifier`` gives the value used for participant tracking.
    """

    kind: SenderKind
    value: str = ""
    name: str = ""
    email: str = ""

    @classmethod
    def plain(cls, value: str) -> Sender:
        return cls(kind=SenderKind.PLAIN, value=value)

    @classmethod
    def structured(cls, name: str = "", email: str = "") -> Sender:
        return cls(kind=SenderKind.STRUCTURED, name=name, email=email)

    @classmethod
    def from_metadata(cls, raw: Any) -> Sender | None:
        """Build a Sender from a raw ``from`` metadata value.

        Returns None for missing, empty or unrecognised values.
        """
        if isinstance(raw, Sender):
            return raw
        if isinstance(raw, str):
            return cls.plain(raw) if raw else None
        if isinstance(raw, Mapping):
            name = raw.get("name")
            email = raw.get("email")
            name = name if isinstance(name, str) else ""
            email = email if isinstance(email, str) else ""
            if not name and not email:
                return None
            return cls.structured(name=name, email=email)
        return None

    @property
    def identifier(self) -> str:
        if self.kind is SenderKind.PLAIN:
            return self.value
        return self.email or self.name

    @property
    def display(self) -> str:
        if self.kind is SenderKind.PLAIN:
            return self.value
        if self.name and self.email:
            return f"{self.name} <{self.email}>"
        return self.email or self.name


@dataclass
class Item:
    """Uniform representation of a synced unit of content.

    Transformers never mutate an Item in place; they build a modified copy
    with :class:`ItemBuilder` and return the original when nothing changed.
    """

    id: str
    title: str = ""
    content: str = ""
    source_type: str = ""
    item_type: str = ""
    created_at: datetime = field(default_factory=_epoch)
    updated_at: datetime = field(default_factory=_epoch)
    tags: list[str] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    links: list[Link] = field(default_factory=list)
    sender: Sender | None = None

    def __post_init__(self) -> None:
        if self.tags is None:
            self.tags = []
        if self.attachments is None:
            self.attachments = []
        if self.metadata is None:
            self.metadata = {}
        if self.links is None:
            self.links = []
        if self.sender is None:
            self.sender = Sender.from_metadata(self.metadata.get("from"))

    @property
    def thread_id(self) -> str:
        """Thread key: the ``thread_id`` metadata string, else the item id."""
        value = self.metadata.get("thread_id")
        if isinstance(value, str) and value:
            return value
        return self.id

    def add_tags(self, *tags: str) -> None:
        """Append tags not already present. Sources use this while building items."""
        self.tags = merge_tags(self.tags, tags)


def merge_tags(existing: Iterable[str], new: Iterable[str]) -> list[str]:
    """Append *new* tags to *existing*, skipping duplicates, keeping order."""
    merged = list(existing)
    seen = set(merged)
    for tag in new:
        if tag and tag not in seen:
            merged.append(tag)
            seen.add(tag)
    return merged


class ItemBuilder:
    """Collects field changes for an Item and produces a copy on demand.

    ``build()`` returns the original object when no field actually changed,
    so callers can rely on identity to detect a no-op.
    """

    def __init__(self, item: Item) -> None:
        self._item = item
        self._changes: dict[str, Any] = {}

    @property
    def title(self) -> str:
        return self._changes.get("title", self._item.title)

    @property
    def content(self) -> str:
        return self._changes.get("content", self._item.content)

    @property
    def tags(self) -> list[str]:
        return self._changes.get("tags", self._item.tags)

    @property
    def changed(self) -> bool:
        return bool(self._changes)

    def set_title(self, title: str) -> ItemBuilder:
        return self._set("title", title)

    def set_content(self, content: str) -> ItemBuilder:
        return self._set("content", content)

    def set_links(self, links: list[Link]) -> ItemBuilder:
        return self._set("links", list(links))

    def add_tags(self, tags: Iterable[str]) -> ItemBuilder:
        return self._set("tags", merge_tags(self.tags, tags))

    def _set(self, name: str, value: Any) -> ItemBuilder:
        if value == getattr(self._item, name):
            self._changes.pop(name, None)
        else:
            self._changes[name] = value
        return self

    def build(self) -> Item:
        if not self._changes:
            return self._item
        item = self._item
        return dataclasses.replace(
            item,
            tags=list(item.tags),
            attachments=list(item.attachments),
            metadata=dict(item.metadata),
            links=list(item.links),
            **self._changes,
        )


@dataclass
class DriveFile:
    id: str
    name: str = ""
    mime_type: str = ""
    web_view_link: str = ""


@dataclass
class Attendee:
    email: str
    display_name: str = ""


@dataclass
class CalendarEvent:
    """A calendar event as delivered by a calendar source."""

    id: str
    summary: str = ""
    description: str = ""
    location: str = ""
    start: datetime = field(default_factory=_epoch)
    end: datetime = field(default_factory=_epoch)
    all_day: bool = False
    attendees: list[Attendee] = field(default_factory=list)
    meeting_url: str = ""
    attached_docs: list[DriveFile] = field(default_factory=list)


def item_from_calendar_event(event: CalendarEvent) -> Item:
    """Convert a calendar event into an Item.

    Attendee emails, location and time range go into metadata; a meeting
    URL becomes a link of type ``meeting_url`` and attached Drive files
    become document links and attachments.
    """
    metadata: dict[str, Any] = {
        "start_time": event.start,
        "end_time": event.end,
        "all_day": event.all_day,
    }
    if event.location:
        metadata["location"] = event.location
    if event.attendees:
        metadata["attendees"] = [a.email for a in event.attendees]

    links: list[Link] = []
    if event.meeting_url:
        links.append(Link(url=event.meeting_url, title="Meeting Link", type=LinkType.MEETING_URL))

    attachments: list[Attachment] = []
    for doc in event.attached_docs:
        attachments.append(
            Attachment(id=doc.id, name=doc.name, mime_type=doc.mime_type, url=doc.web_view_link)
        )
        if doc.web_view_link:
            links.append(Link(url=doc.web_view_link, title=doc.name, type=LinkType.DOCUMENT))

    return Item(
        id=event.id,
        title=event.summary,
        content=event.description,
        source_type="google_calendar",
        item_type="event",
        created_at=event.start,
        updated_at=event.end,
        attachments=attachments,
        metadata=metadata,
        links=links,
    )
