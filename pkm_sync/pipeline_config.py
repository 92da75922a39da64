"""Pipeline configuration: strategy enums shared by settings and transformers."""

from __future__ import annotations

from enum import Enum


class ErrorStrategy(str, Enum):
    """How the pipeline reacts when a transformer fails."""

    FAIL_FAST = "fail_fast"
    LOG_AND_CONTINUE = "log_and_continue"
    SKIP_ITEM = "skip_item"


class ThreadMode(str, Enum):
    """How email messages sharing a thread are emitted."""

    INDIVIDUAL = "individual"
    CONSOLIDATED = "consolidated"
    SUMMARY = "summary"


class TransformerKind(str, Enum):
    """Names of the built-in transformers, as used in ``pipeline_order``."""

    CONTENT_CLEANUP = "content_cleanup"
    LINK_EXTRACTION = "link_extraction"
    AUTO_TAGGING = "auto_tagging"
    FILTER = "filter"
    THREAD_GROUPING = "thread_grouping"
