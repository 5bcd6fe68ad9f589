"""
Streams — Stream Kinds and Property Definitions

Single source of truth for the stream model shared by the backend adapter,
the property cache and the view composer.

Features:
- StreamKind enum with the backend's numbering (General=0 ... Max=7)
- Stored vs derived property definitions (derived ones are never requested)
- Per-kind common property tables for the card and list views

Usage:
    from core.streams import StreamKind, common_property_requests

    requests = common_property_requests({StreamKind.GENERAL: 1, StreamKind.VIDEO: 1})
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Dict, List, Mapping, Optional

from core import formatting


class StreamKind(IntEnum):
    """Media stream categories. MAX is a sentinel, never real data."""
    GENERAL = 0
    VIDEO = 1
    AUDIO = 2
    TEXT = 3
    OTHER = 4
    IMAGE = 5
    MENU = 6
    MAX = 7

    @property
    def label(self) -> str:
        """Display / wire name ("General", "Video", ...)."""
        return self.name.capitalize()

    @classmethod
    def parse(cls, text: str) -> "StreamKind":
        """Parse a wire name. Unknown names map to MAX."""
        try:
            kind = cls[str(text).strip().upper()]
        except KeyError:
            return cls.MAX
        return kind

    @classmethod
    def real_kinds(cls) -> List["StreamKind"]:
        return [kind for kind in cls if kind is not cls.MAX]


# Display order used by the details view check boxes
STREAM_KIND_ORDER = [
    StreamKind.GENERAL,
    StreamKind.VIDEO,
    StreamKind.AUDIO,
    StreamKind.TEXT,
    StreamKind.IMAGE,
    StreamKind.MENU,
    StreamKind.OTHER,
]

STREAM_KIND_COLORS: Dict[StreamKind, str] = {
    StreamKind.GENERAL: "#84cc16",
    StreamKind.VIDEO: "#f97316",
    StreamKind.AUDIO: "#f59e0b",
    StreamKind.TEXT: "#10b981",
    StreamKind.OTHER: "#a3a3a3",
    StreamKind.IMAGE: "#0ea5e9",
    StreamKind.MENU: "#6366f1",
    StreamKind.MAX: "#84cc16",
}


# =============================================================================
# WIRE RECORDS
# =============================================================================

@dataclass(frozen=True)
class StreamCount:
    stream: StreamKind
    count: int


@dataclass(frozen=True)
class StreamProperty:
    """A (stream kind, property name) pair requested from the backend."""
    stream: StreamKind
    property: str


@dataclass
class StreamPropertyMap:
    """All requested properties of one stream instance."""
    stream: StreamKind
    num: int
    property_map: Dict[str, str] = field(default_factory=dict)

    def to_json(self) -> dict:
        return {
            "stream": self.stream.label,
            "num": self.num,
            "propertyMap": dict(self.property_map),
        }


# =============================================================================
# PROPERTY DEFINITIONS
# =============================================================================

class SortClass(Enum):
    NONE = 0
    NUMERIC = 1
    LEXICOGRAPHIC = 2


class Align(Enum):
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


@dataclass(frozen=True)
class PropertyDefinition:
    """
    Base definition of a displayed column.

    Subclassed by StoredProperty (fetched from the backend) and
    DerivedProperty (computed from the row, never fetched).
    """
    name: str
    header: Optional[str] = None
    align: Align = Align.LEFT
    sort_class: SortClass = SortClass.LEXICOGRAPHIC
    in_card_view: bool = False
    in_list_view: bool = False

    @property
    def title(self) -> str:
        return self.header or self.name

    @property
    def sortable(self) -> bool:
        return self.sort_class is not SortClass.NONE

    def format(self, value: Optional[str], row: Mapping[str, str]) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class StoredProperty(PropertyDefinition):
    formatter: Callable[[Optional[str]], str] = formatting.format_default

    def format(self, value: Optional[str], row: Mapping[str, str]) -> str:
        return self.formatter(value)


@dataclass(frozen=True)
class DerivedProperty(PropertyDefinition):
    compute: Callable[[Mapping[str, str]], str] = lambda row: ""

    def format(self, value: Optional[str], row: Mapping[str, str]) -> str:
        # Count columns are filled by the composer; fall back to the cell value
        result = self.compute(row)
        if not result and value is not None:
            return formatting.format_default(value)
        return result


def _count_column(kind: StreamKind, header: str) -> DerivedProperty:
    return DerivedProperty(
        name=f"{kind.label}:Count",
        header=header,
        sort_class=SortClass.NUMERIC,
        align=Align.RIGHT,
        in_list_view=True,
    )


_NUMERIC_RIGHT = dict(sort_class=SortClass.NUMERIC, align=Align.RIGHT)

COMMON_PROPERTIES_GENERAL: List[PropertyDefinition] = [
    StoredProperty("CompleteName", header="File Path", in_list_view=True),
    StoredProperty("Format", in_card_view=True, in_list_view=True),
    StoredProperty("FileSize", header="Size", formatter=formatting.format_size,
                   in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
    StoredProperty("Duration", formatter=formatting.format_duration,
                   in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
    DerivedProperty("Time", compute=formatting.format_time, sort_class=SortClass.NONE,
                    align=Align.RIGHT, in_card_view=True, in_list_view=True),
    StoredProperty("Title", in_card_view=True, in_list_view=True),
    StoredProperty("Encoded_Date", header="Encoded Date", in_card_view=True, in_list_view=True),
    _count_column(StreamKind.VIDEO, "V"),
    _count_column(StreamKind.AUDIO, "A"),
    _count_column(StreamKind.TEXT, "T"),
    _count_column(StreamKind.IMAGE, "I"),
    _count_column(StreamKind.MENU, "M"),
]

COMMON_PROPERTIES_VIDEO: List[PropertyDefinition] = [
    StoredProperty("ID", in_card_view=True),
    StoredProperty("Format", in_card_view=True, in_list_view=True),
    StoredProperty("Language", in_card_view=True, in_list_view=True),
    StoredProperty("Title", in_card_view=True, in_list_view=True),
    DerivedProperty("Resolution", compute=formatting.format_resolution,
                    sort_class=SortClass.NONE, in_card_view=True, in_list_view=True),
    StoredProperty("HDR_Format_Compatibility", header="HDR", in_card_view=True, in_list_view=True),
    StoredProperty("ScanType", header="Scan Type", in_card_view=True, in_list_view=True),
    StoredProperty("Default", header="D", in_card_view=True),
    StoredProperty("Forced", header="F", in_card_view=True),
    StoredProperty("BitDepth", header="Depth", in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
    StoredProperty("FrameRate", header="FPS", formatter=formatting.format_fps,
                   in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
    StoredProperty("BitRate", header="Bit Rate", formatter=formatting.format_bit_rate,
                   in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
    StoredProperty("StreamSize", header="Size", formatter=formatting.format_size,
                   in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
    StoredProperty("Width"),
    StoredProperty("Height"),
]

COMMON_PROPERTIES_AUDIO: List[PropertyDefinition] = [
    StoredProperty("ID", in_card_view=True),
    StoredProperty("Format_Commercial", header="Format", in_card_view=True, in_list_view=True),
    StoredProperty("Language", in_card_view=True, in_list_view=True),
    StoredProperty("Title", in_card_view=True, in_list_view=True),
    StoredProperty("Channel(s)", header="CH", in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
    StoredProperty("BitDepth", header="Depth", in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
    StoredProperty("SamplingRate", header="Sampling", formatter=formatting.format_sampling_rate,
                   in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
    StoredProperty("Default", header="D", in_card_view=True),
    StoredProperty("Forced", header="F", in_card_view=True),
    StoredProperty("BitRate_Mode", header="Mode", in_card_view=True, in_list_view=True),
    StoredProperty("BitRate", header="Bit Rate", formatter=formatting.format_bit_rate,
                   in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
    StoredProperty("StreamSize", header="Size", formatter=formatting.format_size,
                   in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
]

COMMON_PROPERTIES_TEXT: List[PropertyDefinition] = [
    StoredProperty("ID", in_card_view=True),
    StoredProperty("Format", in_card_view=True, in_list_view=True),
    StoredProperty("Language", in_card_view=True, in_list_view=True),
    StoredProperty("Title", in_card_view=True, in_list_view=True),
    StoredProperty("Default", header="D", in_card_view=True),
    StoredProperty("Forced", header="F", in_card_view=True),
    StoredProperty("BitRate", header="Bit Rate", formatter=formatting.format_bit_rate,
                   in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
    StoredProperty("StreamSize", header="Size", formatter=formatting.format_size,
                   in_card_view=True, in_list_view=True, **_NUMERIC_RIGHT),
]

COMMON_PROPERTIES: Dict[StreamKind, List[PropertyDefinition]] = {
    StreamKind.GENERAL: COMMON_PROPERTIES_GENERAL,
    StreamKind.VIDEO: COMMON_PROPERTIES_VIDEO,
    StreamKind.AUDIO: COMMON_PROPERTIES_AUDIO,
    StreamKind.TEXT: COMMON_PROPERTIES_TEXT,
}


def common_property_requests(
    stream_counts: Mapping[StreamKind, int],
    table: Mapping[StreamKind, List[PropertyDefinition]] = COMMON_PROPERTIES,
) -> List[StreamProperty]:
    """
    Build the backend request list for the common properties of a file.

    Only kinds with a nonzero count are included, and derived definitions
    are skipped.
    """
    requests: List[StreamProperty] = []
    for kind, definitions in table.items():
        if stream_counts.get(kind, 0) <= 0:
            continue
        for definition in definitions:
            if isinstance(definition, StoredProperty):
                requests.append(StreamProperty(kind, definition.name))
    return requests
