"""
ViewComposer — Pure Projections of the Property Cache

Turns cache snapshots into what the views render: list rows, card
sections, details instances and the parameter catalog page. Nothing here
touches Qt or the backend; every function returns a new structure and
never mutates its inputs.

Features:
- List row projection ({Kind}:{property} of instance 0 + stream counts)
- Case-insensitive substring filters (list, card, details, catalog)
- Typed, stable sorting (numeric / locale-aware lexicographic)
- Stream kind group toggle for the details view
- Offset/limit pagination with reset on filter or page size change
- LastResultMemo: recompute only when an input object is replaced

Usage:
    memo = LastResultMemo(build_list_rows)
    rows = memo(files, cache.stream_counts_map, cache.common_properties_map)
    rows = sort_rows(filter_rows(rows, "hevc"), "Video:BitRate", False, SortClass.NUMERIC)
"""

import locale
import re
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.streams import (
    COMMON_PROPERTIES,
    STREAM_KIND_COLORS,
    STREAM_KIND_ORDER,
    PropertyDefinition,
    SortClass,
    StreamKind,
    StreamPropertyMap,
)

Row = Dict[str, str]

_FLOAT_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


# =============================================================================
# MEMOIZATION
# =============================================================================

class LastResultMemo:
    """
    Caches the last result of func, keyed on the identity of its arguments.

    The cache swaps whole maps on every change, so an unchanged object
    means unchanged content.
    """

    def __init__(self, func: Callable):
        self._func = func
        self._args: Optional[tuple] = None
        self._result = None
        self.hits = 0
        self.misses = 0

    def __call__(self, *args):
        if self._args is not None and len(args) == len(self._args) and all(
            a is b or (_is_scalar(a) and a == b) for a, b in zip(args, self._args)
        ):
            self.hits += 1
            return self._result
        self.misses += 1
        self._result = self._func(*args)
        self._args = args
        return self._result


def _is_scalar(value) -> bool:
    return value is None or isinstance(value, (str, int, float, bool, frozenset))


# =============================================================================
# LIST / CARD PROJECTION
# =============================================================================

def build_list_rows(
    files: Sequence[str],
    stream_counts: Mapping[str, Mapping[StreamKind, int]],
    common_properties: Mapping[str, Sequence[StreamPropertyMap]],
) -> List[Row]:
    """
    One flat row per file whose counts and common properties are PRESENT,
    in session order. Keys: "file", "{Kind}:{property}" of instance 0 and
    "General:{Kind}:Count".
    """
    rows: List[Row] = []
    for file in files:
        counts = stream_counts.get(file)
        maps = common_properties.get(file)
        if counts is None or maps is None:
            continue

        row: Row = {"file": file}
        for item in maps:
            if item.num != 0:
                continue
            for name, value in item.property_map.items():
                row[f"{item.stream.label}:{name}"] = value
        for kind, count in counts.items():
            row[f"General:{kind.label}:Count"] = str(count)
        rows.append(row)
    return rows


def pending_files(
    files: Sequence[str],
    stream_counts: Mapping[str, object],
    common_properties: Mapping[str, object],
) -> List[str]:
    """Files still waiting for counts or common properties (placeholders)."""
    return [f for f in files if f not in stream_counts or f not in common_properties]


@dataclass(frozen=True)
class ListColumn:
    stream: StreamKind
    definition: PropertyDefinition
    column_id: str


def list_view_columns(
    table: Mapping[StreamKind, List[PropertyDefinition]] = COMMON_PROPERTIES,
) -> List[ListColumn]:
    return [
        ListColumn(kind, definition, f"{kind.label}:{definition.name}")
        for kind, definitions in table.items()
        for definition in definitions
        if definition.in_list_view
    ]


def format_cell(definition: PropertyDefinition, row: Mapping[str, str], key: str) -> str:
    return definition.format(row.get(key), row)


@dataclass(frozen=True)
class CardSection:
    stream: StreamKind
    color: str
    definitions: Tuple[PropertyDefinition, ...]
    rows: Tuple[Tuple[str, ...], ...]

    @property
    def headers(self) -> List[str]:
        return [d.title for d in self.definitions]


def card_sections(
    maps: Sequence[StreamPropertyMap],
    table: Mapping[StreamKind, List[PropertyDefinition]] = COMMON_PROPERTIES,
) -> List[CardSection]:
    """Per kind of the table, the file's instances formatted for the card view."""
    sections = []
    for kind, definitions in table.items():
        instances = [m for m in maps if m.stream == kind]
        if not instances:
            continue
        shown = tuple(d for d in definitions if d.in_card_view)
        rows = tuple(
            tuple(format_cell(d, m.property_map, d.name) for d in shown)
            for m in instances
        )
        sections.append(CardSection(kind, STREAM_KIND_COLORS[kind], shown, rows))
    return sections


# =============================================================================
# FILTERING
# =============================================================================

def filter_rows(rows: List[Row], query: str) -> List[Row]:
    """Keep rows where any cell contains query (case-insensitive)."""
    if not query:
        return rows
    needle = query.lower()
    return [
        row for row in rows
        if any(isinstance(v, str) and needle in v.lower() for v in row.values())
    ]


def filter_file_properties(
    file_to_maps: Mapping[str, Sequence[StreamPropertyMap]],
    query: str,
) -> Dict[str, Sequence[StreamPropertyMap]]:
    """Card view filter: a file matches if any value of any instance does."""
    if not query:
        return dict(file_to_maps)
    needle = query.lower()
    return {
        file: maps
        for file, maps in file_to_maps.items()
        if any(needle in value.lower() for m in maps for value in m.property_map.values())
    }


def filter_instances(maps: Sequence[StreamPropertyMap], query: str) -> List[StreamPropertyMap]:
    """
    Details filter: keep entries whose key or value contains query.
    Instances left without entries are dropped.
    """
    if not query:
        return [m for m in maps if m.property_map]
    needle = query.lower()
    result = []
    for m in maps:
        kept = {
            key: value
            for key, value in m.property_map.items()
            if needle in key.lower() or needle in value.lower()
        }
        if kept:
            result.append(StreamPropertyMap(m.stream, m.num, kept))
    return result


def visible_instances(
    maps: Sequence[StreamPropertyMap],
    query: str,
    selected: Iterable[StreamKind],
) -> List[StreamPropertyMap]:
    """Details view content: kind selection AND text filter."""
    kinds = frozenset(selected)
    return filter_instances([m for m in maps if m.stream in kinds], query)


def sorted_entries(property_map: Mapping[str, str]) -> List[Tuple[str, str]]:
    return sorted(property_map.items(), key=lambda item: item[0].lower())


# =============================================================================
# SORTING
# =============================================================================

def _parse_float(value: Optional[str]) -> float:
    if not value:
        return 0.0
    match = _FLOAT_RE.match(value)
    if match is None:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def sort_rows(rows: List[Row], column: Optional[str], ascending: bool,
              sort_class: SortClass) -> List[Row]:
    """
    Stable sort of rows by column.

    Descending is the exact reverse of ascending, ties included.
    NONE columns and a missing column return rows unchanged.
    """
    if not column or sort_class is SortClass.NONE:
        return rows

    if sort_class is SortClass.NUMERIC:
        key = lambda row: _parse_float(row.get(column))
    else:
        key = lambda row: locale.strxfrm(row.get(column) or "")

    result = sorted(rows, key=key)
    if not ascending:
        result.reverse()
    return result


@dataclass(frozen=True)
class SortState:
    column: Optional[str] = None
    ascending: bool = True

    def toggle(self, column: str, sort_class: SortClass) -> "SortState":
        """Header click: flip the active column, activate another ascending."""
        if sort_class is SortClass.NONE:
            return self
        if column == self.column:
            return SortState(column, not self.ascending)
        return SortState(column, True)


# =============================================================================
# DETAILS: STREAM GROUP SELECTION
# =============================================================================

class StreamGroupSelection:
    """Which stream kinds the details view shows. Defaults to all present kinds."""

    def __init__(self, available: Iterable[StreamKind] = ()):
        available_set = set(available)
        self._available: Tuple[StreamKind, ...] = tuple(
            k for k in STREAM_KIND_ORDER if k in available_set
        )
        self._selected: FrozenSet[StreamKind] = frozenset(self._available)

    @classmethod
    def from_counts(cls, counts: Optional[Mapping[StreamKind, int]]) -> "StreamGroupSelection":
        return cls(kind for kind, count in (counts or {}).items() if count > 0)

    @property
    def available(self) -> Tuple[StreamKind, ...]:
        return self._available

    @property
    def selected(self) -> FrozenSet[StreamKind]:
        return self._selected

    def is_selected(self, kind: StreamKind) -> bool:
        return kind in self._selected

    def toggle(self, kind: StreamKind) -> None:
        if kind in self._selected:
            self._selected = self._selected - {kind}
        elif kind in self._available:
            self._selected = self._selected | {kind}

    def select_all(self) -> None:
        self._selected = frozenset(self._available)

    def select_none(self) -> None:
        self._selected = frozenset()

    @property
    def can_select_all(self) -> bool:
        return len(self._selected) != len(self._available)

    @property
    def can_select_none(self) -> bool:
        return bool(self._selected)


# =============================================================================
# ABOUT: PARAMETER CATALOG
# =============================================================================

def parameter_streams(parameters) -> List[str]:
    """Distinct stream names in first-seen order."""
    seen: Dict[str, None] = {}
    for parameter in parameters:
        seen.setdefault(parameter.stream, None)
    return list(seen)


def filter_parameters(parameters, stream: Optional[str], query: str) -> list:
    needle = query.lower() if query else ""
    return [
        p for p in parameters
        if (stream is None or p.stream == stream)
        and (not needle or needle in p.property.lower())
    ]


class Paginator:
    """Offset/limit slicing. Changing the page size or the source resets to page 0."""

    def __init__(self, rows_per_page: int = 10, options: Tuple[int, ...] = (10, 15, 20)):
        self.options = tuple(options)
        self._rows_per_page = rows_per_page
        self._page = 0
        self._items: Sequence = ()

    @property
    def page(self) -> int:
        return self._page

    @property
    def rows_per_page(self) -> int:
        return self._rows_per_page

    @property
    def total(self) -> int:
        return len(self._items)

    @property
    def page_count(self) -> int:
        if not self._items:
            return 0
        return (len(self._items) + self._rows_per_page - 1) // self._rows_per_page

    def set_items(self, items: Sequence) -> None:
        """New upstream result (e.g. a filter changed): back to the first page."""
        self._items = items
        self._page = 0

    def set_rows_per_page(self, rows: int) -> None:
        if rows <= 0:
            return
        self._rows_per_page = rows
        self._page = 0

    def set_page(self, page: int) -> None:
        last = max(self.page_count - 1, 0)
        self._page = min(max(page, 0), last)

    def items(self) -> List:
        start = self._page * self._rows_per_page
        return list(self._items[start:start + self._rows_per_page])

    def range_label(self) -> str:
        if not self._items:
            return "0-0 of 0"
        start = self._page * self._rows_per_page
        end = min(start + self._rows_per_page, len(self._items))
        return f"{start + 1}-{end} of {len(self._items)}"
