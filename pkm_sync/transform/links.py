"""Link discovery and classification in plain-text and Markdown content."""

from __future__ import annotations

import re
from collections.abc import Iterable

from pkm_sync.items.models import Link, LinkType

URL_PATTERN = re.compile(r'https?://[^\s<>")\]]+')
MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]*)\]\(([^)]+)\)")

_TRAILING_PUNCTUATION = ".,!?;:)"

_INTERNAL_PREFIXES = ("/", "#", "./", "../")
_DOCUMENT_EXTENSIONS = (
    ".pdf",
    ".doc",
    ".docx",
    ".xls",
    ".xlsx",
    ".ppt",
    ".pptx",
    ".txt",
    ".md",
    ".jpg",
    ".png",
    ".gif",
)
_DOCUMENT_HOSTS = (
    "docs.google.com",
    "drive.google.com",
    "dropbox.com",
    "onedrive.com",
)


def _trim_url(url: str) -> str:
    return url.strip().rstrip(_TRAILING_PUNCTUATION).lstrip("(")


def classify_link(url: str) -> LinkType:
    """Classify a URL as internal, document or external."""
    if url.startswith(_INTERNAL_PREFIXES):
        return LinkType.INTERNAL
    lowered = url.lower()
    if any(marker in lowered for marker in _DOCUMENT_EXTENSIONS + _DOCUMENT_HOSTS):
        return LinkType.DOCUMENT
    return LinkType.EXTERNAL


def extract_links(
    content: str,
    *,
    markdown_links: bool = True,
    plain_urls: bool = True,
    deduplicate: bool = True,
) -> list[Link]:
    """Find links in *content*, in document order.

    Markdown links keep their bracketed text as the title. Bare URLs that
    fall inside a Markdown link are not reported a second time.

    Args:
        content: Text to scan.
        markdown_links: Report ``[title](url)`` links.
        plain_urls: Report bare ``http(s)://`` URLs.
        deduplicate: Keep only the first occurrence of each URL.

    Returns:
        The links found, ordered by where they start in *content*.
    """
    found: list[tuple[int, str, str]] = []
    markdown_spans = [m.span() for m in MARKDOWN_LINK_PATTERN.finditer(content)]

    if markdown_links:
        for match in MARKDOWN_LINK_PATTERN.finditer(content):
            found.append((match.start(), _trim_url(match.group(2)), match.group(1)))

    if plain_urls:
        for match in URL_PATTERN.finditer(content):
            start, end = match.span()
            if any(s <= start and end <= e for s, e in markdown_spans):
                continue
            found.append((start, _trim_url(match.group(0)), ""))

    found.sort(key=lambda entry: entry[0])

    links: list[Link] = []
    seen: set[str] = set()
    for _, url, title in found:
        if not url:
            continue
        if deduplicate:
            if url in seen:
                continue
            seen.add(url)
        links.append(Link(url=url, title=title, type=classify_link(url)))
    return links


def merge_links(existing: Iterable[Link], new: Iterable[Link]) -> list[Link]:
    """Existing links first, then new links whose URL is not already present."""
    merged = list(existing)
    urls = {link.url for link in merged}
    for link in new:
        if link.url not in urls:
            merged.append(link)
            urls.add(link.url)
    return merged
