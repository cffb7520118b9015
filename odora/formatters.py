"""View-based rendering of memories for tool results."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import Memory

__all__ = [
    "ResultView",
    "format_memory",
    "format_memories",
    "format_relative_time",
    "format_content_preview",
]


class ResultView(str, Enum):
    """Available result view formats."""

    COMPACT = "compact"
    SUMMARY = "summary"
    FULL = "full"


DESCRIPTION_PREVIEW_LENGTH = 150
RESULT_VIEWS = {
    "compact": {"fields": ["id", "tags", "reminderRating", "relativeTime"]},
    "summary": {
        "fields": [
            "id",
            "photoUri",
            "descriptionPreview",
            "tags",
            "reminderRating",
            "familyVoiceCount",
            "relativeTime",
        ]
    },
    "full": {
        "fields": [
            "id",
            "photoUri",
            "audioUri",
            "scentDescription",
            "customDescription",
            "displayDescription",
            "tags",
            "timestamp",
            "relativeTime",
            "familyVoices",
            "reminderRating",
        ]
    },
}


def format_memories(
    memories: list[Memory], view_name: str, now: datetime | None = None
) -> list[dict[str, Any]]:
    """Format memories according to view configuration."""
    if view_name not in RESULT_VIEWS:
        raise ValueError(
            f"Unknown view: {view_name}. Available: {list(RESULT_VIEWS.keys())}"
        )
    return [format_memory(memory, view_name, now) for memory in memories]


def format_memory(
    memory: Memory, view_name: str = "full", now: datetime | None = None
) -> dict[str, Any]:
    view_config = RESULT_VIEWS.get(view_name)
    if not view_config:
        raise ValueError(
            f"Unknown view: {view_name}. Available: {list(RESULT_VIEWS.keys())}"
        )
    record = memory.to_storage()
    return {
        field: _get_field_value(memory, record, field, now)
        for field in view_config["fields"]
    }


def _get_field_value(
    memory: Memory, record: dict[str, Any], field: str, now: datetime | None
) -> Any:
    """Get formatted value for a specific field."""
    field_processors = {
        "descriptionPreview": lambda: format_content_preview(
            memory.display_description, DESCRIPTION_PREVIEW_LENGTH
        ),
        "displayDescription": lambda: memory.display_description,
        "familyVoiceCount": lambda: len(memory.family_voices),
        "relativeTime": lambda: format_relative_time(
            datetime.fromtimestamp(memory.timestamp / 1000, UTC), now
        ),
    }

    if field in field_processors:
        return field_processors[field]()
    return record.get(field)


def format_relative_time(timestamp: datetime, now: datetime | None = None) -> str:
    """Convert timestamp to human-readable relative time."""
    now = now or datetime.now(UTC)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    diff = now - timestamp
    if diff.total_seconds() < 0:
        return "just now"

    if diff.days > 0:
        if diff.days == 1:
            return "1 day ago"
        elif diff.days < 7:
            return f"{diff.days} days ago"
        elif diff.days < 30:
            weeks = diff.days // 7
            return f"{weeks} week{'s' if weeks > 1 else ''} ago"
        else:
            months = diff.days // 30
            return f"{months} month{'s' if months > 1 else ''} ago"

    hours = diff.seconds // 3600
    minutes = (diff.seconds % 3600) // 60

    if hours > 0:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    elif minutes > 0:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    else:
        return "just now"


def extract_summary(content: str, max_sentences: int = 1) -> str:
    """Extract the first sentence(s) of a description."""
    if not content:
        return ""

    sentences = re.split(r"(?<=[.!?])\s+", content)
    sentences = [s.strip() for s in sentences if s.strip()]
    summary = " ".join(sentences[:max_sentences])

    if summary and summary[-1] not in ".!?":
        summary += "."

    return summary


def format_content_preview(content: str, max_length: int = 150) -> str:
    """Create a preview of a description suitable for list results."""
    if not content:
        return ""

    cleaned_content = " ".join(content.split())
    if len(cleaned_content) <= max_length:
        return cleaned_content

    preview = extract_summary(cleaned_content, max_sentences=2)
    if len(preview) <= max_length:
        return preview

    return preview[: max_length - 3] + "..."
