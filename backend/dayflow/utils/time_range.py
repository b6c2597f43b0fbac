"""
Time window codec for task notes.

A task's time window lives inside its free-text description as a marker line
``@time HH:MM-HH:MM`` followed by a human-readable ``Time: ...`` line. Minutes
are raw (non-modular) offsets from the start of the day, so a window that
crosses midnight has ``end_minutes > 1440``.

All helpers here are total: malformed input yields ``None`` or an empty
string, never an exception.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

TIME_META_PREFIX = "@time"
FRIENDLY_PREFIX = "time:"
MINUTES_IN_DAY = 24 * 60
# Longest text inject_time_metadata() appends, line breaks included.
TIME_METADATA_MAX_LENGTH = len("\n@time 00:00-00:00\nTime: 12:00 AM–12:00 PM")

_TIME_LINE_RE = re.compile(
    r"^@time\s+(\d{1,2}):(\d{2})-(\d{1,2}):(\d{2})$", re.IGNORECASE
)


@dataclass(frozen=True)
class TimeRange:
    """Start/end minute pair; ``end_minutes`` may exceed one day."""

    start_minutes: int
    end_minutes: int

    @property
    def duration(self) -> int:
        return self.end_minutes - self.start_minutes


def _is_time_metadata_line(line: str) -> bool:
    lower = line.strip().lower()
    return lower.startswith(TIME_META_PREFIX) or lower.startswith(FRIENDLY_PREFIX)


def _to_minutes(hours: str, minutes: str) -> Optional[int]:
    h, m = int(hours), int(minutes)
    if h > 23 or m > 59:
        return None
    return h * 60 + m


def normalize_range(time_range: TimeRange) -> TimeRange:
    """Push the end forward by whole days until it is after the start."""
    start = time_range.start_minutes
    end = time_range.end_minutes
    while end <= start:
        end += MINUTES_IN_DAY
    return TimeRange(start, end)


def minutes_to_time_key(minutes: int) -> str:
    """Format raw minutes as a zero-padded ``HH:MM`` key (modulo one day)."""
    normalized = minutes % MINUTES_IN_DAY
    return f"{normalized // 60:02d}:{normalized % 60:02d}"


def format_minutes(minutes: int) -> str:
    """Human-readable 12-hour clock label, e.g. ``8:05 PM``."""
    normalized = minutes % MINUTES_IN_DAY
    hours, mins = divmod(normalized, 60)
    suffix = "AM" if hours < 12 else "PM"
    display_hour = hours % 12 or 12
    return f"{display_hour}:{mins:02d} {suffix}"


def time_range_to_friendly(time_range: TimeRange) -> str:
    normalized = normalize_range(time_range)
    return f"{format_minutes(normalized.start_minutes)}–{format_minutes(normalized.end_minutes)}"


def parse_time_range(text: Optional[str]) -> Optional[TimeRange]:
    """
    Decode the first well-formed marker line in ``text``.

    Lines that start with the marker prefix but do not match the strict
    grammar are skipped. An end at or before the start is read as crossing
    midnight.
    """
    if not text:
        return None
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line.lower().startswith(TIME_META_PREFIX):
            continue
        match = _TIME_LINE_RE.match(line)
        if not match:
            continue
        start = _to_minutes(match.group(1), match.group(2))
        end = _to_minutes(match.group(3), match.group(4))
        if start is None or end is None:
            continue
        if end <= start:
            end += MINUTES_IN_DAY
        return TimeRange(start, end)
    return None


def strip_time_metadata(text: Optional[str]) -> str:
    """Remove marker and ``Time:`` lines, keeping the rest in order."""
    if not text:
        return ""
    lines = [
        line.rstrip()
        for line in text.splitlines()
        if not _is_time_metadata_line(line)
    ]
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


def inject_time_metadata(text: Optional[str], time_range: TimeRange) -> str:
    """Append a normalized marker line and its friendly line to ``text``."""
    normalized = normalize_range(time_range)
    meta_line = (
        f"{TIME_META_PREFIX} {minutes_to_time_key(normalized.start_minutes)}"
        f"-{minutes_to_time_key(normalized.end_minutes)}"
    )
    friendly_line = f"Time: {time_range_to_friendly(normalized)}"
    base = strip_time_metadata(text)
    lines = [base] if base else []
    lines.extend([meta_line, friendly_line])
    return "\n".join(lines)


def ranges_overlap(a: TimeRange, b: TimeRange) -> bool:
    """Half-open overlap test."""
    range_a = normalize_range(a)
    range_b = normalize_range(b)
    return range_a.start_minutes < range_b.end_minutes and range_b.start_minutes < range_a.end_minutes


def clamp_range_to_bounds(time_range: TimeRange, bounds: TimeRange) -> Optional[TimeRange]:
    """Intersection of ``time_range`` and ``bounds``; ``None`` when empty."""
    normalized = normalize_range(time_range)
    normalized_bounds = normalize_range(bounds)
    start = max(normalized.start_minutes, normalized_bounds.start_minutes)
    end = min(normalized.end_minutes, normalized_bounds.end_minutes)
    if end <= start:
        return None
    return TimeRange(start, end)


def range_duration(time_range: TimeRange) -> int:
    return normalize_range(time_range).duration
