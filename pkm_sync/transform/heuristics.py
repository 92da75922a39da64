"""Line-oriented text heuristics for email bodies and subjects."""

from __future__ import annotations

import re

DEFAULT_SIGNATURE_THRESHOLD = 10
# Only this many trailing lines are inspected for closing phrases.
SIGNATURE_TAIL_LINES = 8
MAX_TITLE_PASSES = 10

_REPLY_PREFIX = re.compile(r"^(?:re|fwd|fw)\s*:\s*", re.IGNORECASE)
_BLANK_RUN = re.compile(r"\n{3,}")

_SIGNATURE_PATTERNS = [
    re.compile(r"^Best regards?,?"),
    re.compile(r"^Sincerely,?"),
    re.compile(r"^Thanks?,?"),
    re.compile(r"^Cheers,?"),
    re.compile(r"^Sent from my"),
    re.compile(r"^Get Outlook for"),
    re.compile(r"@\w+\.\w+"),
    re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b"),
    re.compile(r"^[A-Z][a-z]+ [A-Z][a-z]+$"),
]


def _is_signature_separator(line: str) -> bool:
    return line == "--" or line.startswith("-- ")


def _is_quote_boundary(line: str) -> bool:
    return (
        line.startswith(">")
        or (line.startswith("On ") and " wrote:" in line)
        or (line.startswith("From: ") and "@" in line)
        or "original message" in line.lower()
        or line.startswith("---------- Forwarded message")
    )


def strip_quoted_text(content: str, signature_threshold: int = DEFAULT_SIGNATURE_THRESHOLD) -> str:
    """Cut an email body at the first quoted-reply or forward marker.

    A signature separator (``--``) also ends the body, but only when it
    sits within the last ``signature_threshold`` lines.

    Args:
        content: Plain-text email body.
        signature_threshold: How close to the end a ``--`` line must be.

    Returns:
        The kept lines, joined and stripped.
    """
    lines = content.split("\n")
    kept: list[str] = []
    for i, raw in enumerate(lines):
        line = raw.strip()
        if _is_quote_boundary(line):
            break
        if _is_signature_separator(line) and len(lines) - i <= signature_threshold:
            break
        kept.append(raw)
    return "\n".join(kept).strip()


def looks_like_signature(line: str) -> bool:
    return any(pattern.search(line) for pattern in _SIGNATURE_PATTERNS)


def split_signature(content: str) -> tuple[str, str]:
    """Split an email body into ``(body, signature)``.

    The signature starts at a ``--`` separator or, within the last few
    lines, at the first line that looks like a closing or contact line.
    """
    lines = content.split("\n")
    body: list[str] = []
    signature: list[str] = []
    in_signature = False
    for i, raw in enumerate(lines):
        line = raw.strip()
        if _is_signature_separator(line):
            in_signature = True
        elif (
            not in_signature
            and len(lines) - i <= SIGNATURE_TAIL_LINES
            and looks_like_signature(line)
        ):
            in_signature = True
        (signature if in_signature else body).append(raw)
    return "\n".join(body).strip(), "\n".join(signature).strip()


def extract_signature(content: str) -> str:
    """Return *content* with any trailing signature block removed."""
    body, _ = split_signature(content)
    return body


def clean_title(title: str) -> str:
    """Strip stacked ``Re:``/``Fwd:``/``Fw:`` prefixes from a subject line."""
    title = title.strip()
    for _ in range(MAX_TITLE_PASSES):
        stripped = _REPLY_PREFIX.sub("", title, count=1).strip()
        if stripped == title:
            break
        title = stripped
    return title


def cleanup_whitespace(content: str) -> str:
    """Drop carriage returns, collapse blank-line runs and trim."""
    content = content.replace("\r", "")
    return _BLANK_RUN.sub("\n\n", content).strip()
