"""Filename-safe renderings of arbitrary titles and thread subjects."""

from __future__ import annotations

import re

from pkm_sync.transform.heuristics import clean_title

MAX_FILENAME_LENGTH = 80
DEFAULT_FILENAME = "default-filename"
SAFE_FILENAME = "safe-filename"
THREAD_FALLBACK = "email-thread"

# Applied in a single left-to-right pass; at any position the first entry
# that matches wins, so "../" is consumed before "." can be.
_REPLACEMENTS: list[tuple[str, str]] = [
    ("../", ""),
    ("./", ""),
    ("..", ""),
    ("~", ""),
    ("\n", ""),
    ("\r", ""),
    ("\t", ""),
    ("\x00", ""),
    (" ", "-"),
    ("/", "-"),
    ("\\", "-"),
    (":", "-"),
    ("*", ""),
    ("?", ""),
    ('"', ""),
    ("<", ""),
    (">", ""),
    ("|", "-"),
    ("[", ""),
    ("]", ""),
    ("(", ""),
    (")", ""),
    ("@", "-at-"),
    ("#", "-"),
    ("!", ""),
    ("&", "-and-"),
    (".", ""),
]
_REPLACEMENT_MAP = dict(_REPLACEMENTS)
_REPLACEMENT_PATTERN = re.compile("|".join(re.escape(old) for old, _ in _REPLACEMENTS))
_DASH_RUN = re.compile(r"-+")

_PLACEHOLDERS = frozenset({SAFE_FILENAME, DEFAULT_FILENAME, THREAD_FALLBACK})


def sanitize_filename(name: str) -> str:
    """Turn *name* into a single safe path component.

    Path traversal sequences, separators, control characters and shell
    metacharacters are removed or replaced with dashes. The result is at
    most 80 characters and never empty.
    """
    if not name:
        return DEFAULT_FILENAME

    result = _REPLACEMENT_PATTERN.sub(lambda m: _REPLACEMENT_MAP[m.group(0)], name)
    result = _DASH_RUN.sub("-", result).strip("-")

    if len(result) > MAX_FILENAME_LENGTH:
        result = result[:MAX_FILENAME_LENGTH].strip("-")

    if result in ("", "-", ".", "..") or "/" in result or "\\" in result:
        return SAFE_FILENAME
    return result


def sanitize_thread_subject(subject: str, thread_id: str = "") -> str:
    """Build a filename fragment for an email thread.

    Reply prefixes are removed before sanitizing. When the subject yields
    nothing useful, the sanitized thread id is appended so that distinct
    threads do not collide.
    """
    if not subject:
        if thread_id:
            return f"{THREAD_FALLBACK}-{sanitize_filename(thread_id)}"
        return THREAD_FALLBACK

    cleaned = clean_title(subject) or subject
    result = sanitize_filename(cleaned)
    if result in _PLACEHOLDERS and thread_id:
        result = f"{result}-{sanitize_filename(thread_id)}"
    return result
