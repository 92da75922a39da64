"""Thread processing: emit email threads as individual, consolidated or summary items."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pkm_sync.items.models import Item, merge_tags
from pkm_sync.pipeline_config import ThreadMode
from pkm_sync.threads.models import (
    ThreadGroup,
    as_utc,
    build_thread_metadata,
    group_messages_by_thread,
    sender_identifier,
)
from pkm_sync.transform.options import DEFAULT_SUMMARY_LENGTH, ThreadOptions
from pkm_sync.utils.filename import sanitize_thread_subject

logger = logging.getLogger(__name__)

LONG_THREAD_MESSAGES = 5
MULTI_PARTICIPANT_COUNT = 2
LONG_MESSAGE_CHARS = 500

_DATE_FORMAT = "%Y-%m-%d %H:%M"
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def select_key_messages(messages: Sequence[Item] | None, max_messages: int) -> list[Item]:
    """Pick up to *max_messages* representative messages from a thread.

    The first and last messages are always kept when the budget allows.
    Remaining slots go to middle messages scored by: a sender not seen in
    the first or last message (+3), content over 500 characters (+2) and
    attachments (+1). Ties keep chronological order, and the selection is
    returned chronologically.

    Args:
        messages: Thread messages in chronological order.
        max_messages: Selection budget.

    Returns:
        ``min(max_messages, len(messages))`` messages.
    """
    if not messages:
        return []
    if len(messages) <= max_messages:
        return list(messages)
    if max_messages <= 0:
        return []

    first, last = messages[0], messages[-1]
    selected = [first]
    budget = max_messages - 1
    if budget > 0:
        selected.append(last)
        budget -= 1

    if budget > 0:
        known_senders = {sender_identifier(first), sender_identifier(last)}

        def score(item: Item) -> int:
            points = 0
            sender = sender_identifier(item)
            if sender and sender not in known_senders:
                points += 3
            if len(item.content) > LONG_MESSAGE_CHARS:
                points += 2
            if item.attachments:
                points += 1
            return points

        ranked = sorted(messages[1:-1], key=score, reverse=True)
        selected.extend(ranked[:budget])

    selected.sort(key=lambda item: as_utc(item.created_at))
    return selected


class ThreadProcessor:
    """Groups email messages into threads and renders them per ``thread_mode``."""

    def __init__(self, options: ThreadOptions | None = None) -> None:
        self.options = options or ThreadOptions()

    def process_threads(self, items: list[Item] | None) -> list[Item]:
        if items is None:
            return []
        if not self.options.include_threads:
            return items

        mode = self.options.thread_mode
        if mode is ThreadMode.INDIVIDUAL:
            return items

        groups = group_messages_by_thread(items)
        logger.info("Grouped %d messages into %d threads", len(items), len(groups))
        if mode is ThreadMode.CONSOLIDATED:
            return self.consolidate_threads(groups)
        return self.summarize_threads(groups)

    def consolidate_threads(self, groups: dict[str, ThreadGroup]) -> list[Item]:
        result: list[Item] = []
        for group in groups.values():
            if group.message_count == 1:
                result.append(group.messages[0])
            else:
                result.append(self.build_consolidated_item(group))
        return result

    def summarize_threads(self, groups: dict[str, ThreadGroup]) -> list[Item]:
        result: list[Item] = []
        for group in groups.values():
            if group.message_count == 1:
                result.append(group.messages[0])
            else:
                result.append(self.build_summary_item(group))
        return result

    @property
    def summary_length(self) -> int:
        length = self.options.thread_summary_length
        return length if length > 0 else DEFAULT_SUMMARY_LENGTH

    def build_consolidated_item(self, group: ThreadGroup) -> Item:
        parts = [
            f"# Thread: {group.subject}\n\n",
            self._header(group),
            self._duration(group, "  \n\n"),
            "---\n\n",
        ]
        for i, message in enumerate(group.messages, start=1):
            parts.append(self._message_section(f"Message {i}", message))

        return self._thread_item(
            group,
            item_id=f"thread_{group.thread_id}",
            title_prefix="Thread",
            item_type="email_thread",
            content="".join(parts),
        )

    def build_summary_item(self, group: ThreadGroup) -> Item:
        max_messages = self.summary_length
        key_messages = select_key_messages(group.messages, max_messages)
        parts = [
            f"# Thread Summary: {group.subject}\n\n",
            f"**Thread ID:** {group.thread_id}  \n",
            f"**Total Messages:** {group.message_count}  \n",
            f"**Participants:** {', '.join(group.participants)}  \n",
            self._duration(group, "  \n"),
            f"**Showing:** {len(key_messages)} key messages  \n\n",
            "---\n\n",
        ]
        for i, message in enumerate(key_messages, start=1):
            parts.append(self._message_section(f"Key Message {i}", message))
        if group.message_count > max_messages:
            parts.append(f"*{group.message_count - max_messages} additional messages not shown*\n")

        return self._thread_item(
            group,
            item_id=f"thread_summary_{group.thread_id}",
            title_prefix="Thread-Summary",
            item_type="email_thread_summary",
            content="".join(parts),
        )

    @staticmethod
    def _header(group: ThreadGroup) -> str:
        return (
            f"**Thread ID:** {group.thread_id}  \n"
            f"**Messages:** {group.message_count}  \n"
            f"**Participants:** {', '.join(group.participants)}  \n"
        )

    @staticmethod
    def _duration(group: ThreadGroup, end: str) -> str:
        return (
            f"**Duration:** {group.start_time.strftime(_DATE_FORMAT)} to "
            f"{group.end_time.strftime(_DATE_FORMAT)}{end}"
        )

    @staticmethod
    def _message_section(heading: str, message: Item) -> str:
        section = (
            f"## {heading}: {message.title}\n\n"
            f"**Date:** {message.created_at.strftime(_TIMESTAMP_FORMAT)}  \n"
        )
        if message.sender is not None and message.sender.display:
            section += f"**From:** {message.sender.display}  \n"
        return section + f"\n{message.content}\n\n---\n\n"

    def _thread_item(
        self,
        group: ThreadGroup,
        *,
        item_id: str,
        title_prefix: str,
        item_type: str,
        content: str,
    ) -> Item:
        subject = sanitize_thread_subject(group.subject, group.thread_id)
        tags = [self.options.source_type, "thread"]
        if group.message_count > LONG_THREAD_MESSAGES:
            tags.append("long-thread")
        if len(group.participants) > MULTI_PARTICIPANT_COUNT:
            tags.append("multi-participant")
        return Item(
            id=item_id,
            title=f"{title_prefix}_{subject}_{group.message_count}-messages",
            content=content,
            source_type=self.options.source_type,
            item_type=item_type,
            created_at=group.start_time,
            updated_at=group.end_time,
            tags=merge_tags([], tags),
            metadata=build_thread_metadata(group),
        )
