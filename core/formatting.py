"""
Formatting — Unit-Aware Property Formatters

Pure functions that turn raw backend strings into display text. Values are
stored as strings everywhere else; units are applied here, at presentation
time only.

Every formatter is total: missing or non-numeric input returns "".

Usage:
    from core.formatting import format_size, format_time
    format_size("1536")                   # "1.5KB"
    format_time({"Duration": "90061234"}) # "1d 01:01:01.234"
"""

import re
from typing import Mapping, Optional

_NUMBER_RE = re.compile(r"^\s*([+-]?\d+)(\.\d*)?")
_DECIMAL_RE = re.compile(r"^\s*\d+(\.\d+)?\s*$")

KB = 1 << 10
MB = 1 << 20
GB = 1 << 30


def trim_fraction_zeros(value: str) -> str:
    """
    Strip trailing zeros after the decimal point, then a dangling dot.
    Strings without a decimal point are returned untouched.
    """
    if "." not in value:
        return value
    value = value.rstrip("0")
    if value.endswith("."):
        value = value[:-1]
    return value


def _parse_int(value: Optional[str]) -> Optional[int]:
    """Leading-integer parse (like parseInt). None when there is no number."""
    if not value:
        return None
    match = _NUMBER_RE.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def _scaled(value: int, divisor: int, digits: int) -> str:
    return trim_fraction_zeros(f"{value / divisor:.{digits}f}")


# =============================================================================
# VALUE FORMATTERS
# =============================================================================

def format_default(value: Optional[str]) -> str:
    return value if value else ""


def format_size(value: Optional[str]) -> str:
    """Byte count -> GB / MB / KB / B (binary thresholds)."""
    size = _parse_int(value)
    if size is None:
        return ""
    if size >= GB:
        return f"{_scaled(size, GB, 2)}GB"
    if size >= MB:
        return f"{_scaled(size, MB, 2)}MB"
    if size >= KB:
        return f"{_scaled(size, KB, 2)}KB"
    return f"{size}B"


def format_bit_rate(value: Optional[str]) -> str:
    """Bits per second -> Mbps / Kbps / bps (decimal thresholds)."""
    rate = _parse_int(value)
    if rate is None:
        return ""
    if rate >= 1_000_000:
        return f"{_scaled(rate, 1_000_000, 2)}Mbps"
    if rate >= 1_000:
        return f"{_scaled(rate, 1_000, 2)}Kbps"
    return f"{rate}bps"


def format_sampling_rate(value: Optional[str]) -> str:
    rate = _parse_int(value)
    if rate is None:
        return ""
    return f"{_scaled(rate, 1000, 3)}kHz"


def format_duration(value: Optional[str]) -> str:
    """Milliseconds -> seconds as a trimmed decimal, no unit."""
    duration = _parse_int(value)
    if duration is None:
        return ""
    return _scaled(duration, 1000, 3)


def format_fps(value: Optional[str]) -> str:
    if not value or not _DECIMAL_RE.match(str(value)):
        return ""
    return trim_fraction_zeros(str(value).strip())


# =============================================================================
# ROW FORMATTERS (derived properties)
# =============================================================================

def format_time(row: Mapping[str, str]) -> str:
    """
    Duration (ms) of the row -> "[Nd ]HH:MM:SS.mmm".

    Reads "Duration" (instance rows) or "General:Duration" (list rows).
    Days are not reduced any further.
    """
    raw = row.get("Duration") or row.get("General:Duration")
    duration = _parse_int(raw)
    if duration is None:
        return ""
    negative = duration < 0
    duration = abs(duration)

    total_seconds = duration // 1000
    total_minutes = total_seconds // 60
    total_hours = total_minutes // 60
    days = total_hours // 24

    text = (
        f"{total_hours % 24:02d}:{total_minutes % 60:02d}:"
        f"{total_seconds % 60:02d}.{duration % 1000:03d}"
    )
    if days > 0:
        text = f"{days}d {text}"
    return f"-{text}" if negative else text


def format_resolution(row: Mapping[str, str]) -> str:
    if row.get("Width") and row.get("Height"):
        return f"{row['Width']}x{row['Height']}"
    if row.get("Video:Width") and row.get("Video:Height"):
        return f"{row['Video:Width']}x{row['Video:Height']}"
    return ""


# =============================================================================
# MISC
# =============================================================================

def format_stream_counts(stream_counts) -> str:
    """{StreamKind: count} -> "Video: 1, Audio: 2" (nonzero counts only)."""
    if not stream_counts:
        return ""
    parts = []
    for kind in sorted(stream_counts):
        count = stream_counts[kind]
        if count > 0:
            label = kind.label if hasattr(kind, "label") else str(kind)
            parts.append(f"{label}: {count}")
    return ", ".join(parts)


def shrink_file_name(file_name: str, max_length: int) -> str:
    """Keep the tail of a long path: "...tail" of exactly max_length chars."""
    if len(file_name) > max_length:
        return "..." + file_name[len(file_name) - max_length + 3:]
    return file_name
