"""Near-duplicate collapsing for titled and free-text items.

All helpers are pure: they return new lists (and, for action items, new
objects) and are idempotent on already-deduplicated input.
"""

from dataclasses import replace
from typing import Any

from src.aggregation.models import ActionItem

SOURCE_SEPARATOR = ", "


def normalize_title(title: str | None) -> str:
    """Casefold and collapse internal whitespace."""
    if not title:
        return ""
    return " ".join(title.split()).casefold()


def content_fingerprint(text: str | None, width: int = 50) -> str:
    """Casefolded first ``width`` characters of ``text``."""
    if not text:
        return ""
    return text[:width].casefold()


def dedupe_by_title(items: list[dict[str, Any]], key: str = "title") -> list[dict[str, Any]]:
    """Keep the first item for each normalized title."""
    seen: set[str] = set()
    unique = []
    for item in items:
        normalized = normalize_title(item.get(key))
        if normalized in seen:
            continue
        seen.add(normalized)
        unique.append(item)
    return unique


def dedupe_by_content(
    items: list[dict[str, Any]], key: str = "content", width: int = 50
) -> list[dict[str, Any]]:
    """Keep the first item for each content fingerprint."""
    seen: set[str] = set()
    unique = []
    for item in items:
        fingerprint = content_fingerprint(item.get(key), width)
        if fingerprint in seen:
            continue
        seen.add(fingerprint)
        unique.append(item)
    return unique


def merge_action_items(items: list[ActionItem]) -> list[ActionItem]:
    """Collapse action items sharing a normalized title.

    The first occurrence is kept; attributions of later duplicates are
    appended to its ``source`` instead of being dropped.
    """
    merged: dict[str, ActionItem] = {}
    for item in items:
        key = normalize_title(item.title)
        existing = merged.get(key)
        if existing is None:
            merged[key] = replace(item)
            continue
        existing.source = _join_sources(existing.source, item.source)
    return list(merged.values())


def _join_sources(current: str, incoming: str) -> str:
    present = [s for s in current.split(SOURCE_SEPARATOR) if s] if current else []
    for code in incoming.split(SOURCE_SEPARATOR) if incoming else []:
        if code and code not in present:
            present.append(code)
    return SOURCE_SEPARATOR.join(present)
