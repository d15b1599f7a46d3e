"""
DexMap Data Models
===================

Pydantic models for the DEX structure map: the parsed header, the coloured
regions emitted by the walker, and the aggregate result the engine hands to
the output layer.

The colour palette is the one published with droidcolors, so images made
by either tool can be compared side by side.

References:
    - Google. (2024). DEX Format. Android Open Source Project.
      https://source.android.com/docs/core/runtime/dex-format
    - Jain, A., Gonzalez, H., & Stakhanova, N. (2015). Enriching Reverse
      Engineering through Visual Exploration of Android Binaries. PPREW-5.
"""

from __future__ import annotations

import enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from shared.models import Finding

RGB = tuple[int, int, int]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class RegionCategory(str, enum.Enum):
    """Semantic category of a painted byte range."""
    HEADER = "header"
    LINK = "link"
    MAP_LIST = "map_list"
    STRING_IDS = "string_ids"
    TYPE_IDS = "type_ids"
    PROTO_IDS = "proto_ids"
    FIELD_IDS = "field_ids"
    METHOD_IDS = "method_ids"
    CLASS_DEFS = "class_defs"
    STRING_LENGTH = "string_length"
    STRING_DATA = "string_data"
    STRING_DATA_ORDERED = "string_data_ordered"
    PROTO_PARAMETERS = "proto_parameters"
    CLASS_INTERFACES = "class_interfaces"
    ANNOTATIONS_DIRECTORY = "annotations_directory"
    DIRECT_METHOD_HEAD = "direct_method_head"
    DIRECT_METHOD_CODE = "direct_method_code"
    DIRECT_DEBUG_INFO = "direct_debug_info"
    VIRTUAL_METHOD_HEAD = "virtual_method_head"
    VIRTUAL_METHOD_CODE = "virtual_method_code"
    VIRTUAL_DEBUG_INFO = "virtual_debug_info"
    TRY_ITEMS = "try_items"
    CLASS_DATA = "class_data"
    STATIC_VALUES = "static_values"


class HeaderWarning(str, enum.Enum):
    """Non-fatal header anomalies; the map is still produced."""
    VERSION = "version"
    ENDIAN = "endian"
    HEADER_SIZE = "header_size"
    MAP_OFFSET = "map_offset"


CATEGORY_COLOURS: dict[RegionCategory, RGB] = {
    RegionCategory.HEADER: (255, 0, 0),
    RegionCategory.LINK: (255, 255, 0),
    RegionCategory.MAP_LIST: (0, 0, 255),
    RegionCategory.STRING_IDS: (0, 109, 44),
    RegionCategory.TYPE_IDS: (44, 162, 95),
    RegionCategory.PROTO_IDS: (102, 194, 164),
    RegionCategory.FIELD_IDS: (153, 216, 201),
    RegionCategory.METHOD_IDS: (204, 236, 230),
    RegionCategory.CLASS_DEFS: (237, 248, 251),
    RegionCategory.STRING_LENGTH: (240, 0, 0),
    RegionCategory.STRING_DATA: (0, 109, 44),
    RegionCategory.STRING_DATA_ORDERED: (100, 109, 44),
    RegionCategory.PROTO_PARAMETERS: (0, 100, 255),
    RegionCategory.CLASS_INTERFACES: (0, 150, 255),
    RegionCategory.ANNOTATIONS_DIRECTORY: (155, 0, 175),
    RegionCategory.DIRECT_METHOD_HEAD: (84, 39, 136),
    RegionCategory.DIRECT_METHOD_CODE: (153, 142, 195),
    RegionCategory.DIRECT_DEBUG_INFO: (255, 10, 235),
    RegionCategory.VIRTUAL_METHOD_HEAD: (179, 88, 6),
    RegionCategory.VIRTUAL_METHOD_CODE: (241, 163, 64),
    RegionCategory.VIRTUAL_DEBUG_INFO: (235, 0, 255),
    RegionCategory.TRY_ITEMS: (153, 142, 0),
    RegionCategory.CLASS_DATA: (0, 150, 0),
    RegionCategory.STATIC_VALUES: (155, 150, 0),
}


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------

class SectionDescriptor(NamedTuple):
    """A fixed-stride index table located by the header."""
    name: str
    offset: int
    stride: int
    count: int
    category: RegionCategory

    @property
    def byte_size(self) -> int:
        return self.stride * self.count


class DexHeader(BaseModel):
    """The 0x70-byte ``header_item`` at offset 0.

    Every ``*_size`` / ``*_off`` pair is copied verbatim; nothing here is
    validated beyond what :func:`dexmap.parsers.header.parse_header` checks.

    Attributes:
        version: Three-character version string, e.g. ``"035"``.
        checksum: Adler-32 checksum field.
        signature: 20-byte SHA-1 signature field, hex encoded.
        file_size: Declared size of the whole file.
        header_size: Declared header size (0x70 for every known version).
        endian_tag: Endianness marker.
    """
    model_config = ConfigDict(frozen=True)

    version: str = ""
    checksum: int = 0
    signature: str = ""
    file_size: int = 0
    header_size: int = 0
    endian_tag: int = 0
    link_size: int = 0
    link_off: int = 0
    map_off: int = 0
    string_ids_size: int = 0
    string_ids_off: int = 0
    type_ids_size: int = 0
    type_ids_off: int = 0
    proto_ids_size: int = 0
    proto_ids_off: int = 0
    field_ids_size: int = 0
    field_ids_off: int = 0
    method_ids_size: int = 0
    method_ids_off: int = 0
    class_defs_size: int = 0
    class_defs_off: int = 0
    data_size: int = 0
    data_off: int = 0

    def sections(self) -> list[SectionDescriptor]:
        """Return the six fixed-stride index tables in file order."""
        return [
            SectionDescriptor("string_ids", self.string_ids_off, 4,
                              self.string_ids_size, RegionCategory.STRING_IDS),
            SectionDescriptor("type_ids", self.type_ids_off, 4,
                              self.type_ids_size, RegionCategory.TYPE_IDS),
            SectionDescriptor("proto_ids", self.proto_ids_off, 12,
                              self.proto_ids_size, RegionCategory.PROTO_IDS),
            SectionDescriptor("field_ids", self.field_ids_off, 8,
                              self.field_ids_size, RegionCategory.FIELD_IDS),
            SectionDescriptor("method_ids", self.method_ids_off, 8,
                              self.method_ids_size, RegionCategory.METHOD_IDS),
            SectionDescriptor("class_defs", self.class_defs_off, 32,
                              self.class_defs_size, RegionCategory.CLASS_DEFS),
        ]


class HeaderParseResult(NamedTuple):
    header: DexHeader
    warnings: list[HeaderWarning]


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------

class Region(BaseModel):
    """A contiguous byte range tagged with its structural category.

    Attributes:
        start: File offset of the first byte.
        length: Number of bytes covered.
        category: What occupies the range.
        colour: RGB colour painted for the range.
    """
    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0)
    length: int = Field(ge=0)
    category: RegionCategory
    colour: RGB

    @classmethod
    def of(cls, start: int, length: int, category: RegionCategory) -> Region:
        """Build a region coloured from :data:`CATEGORY_COLOURS`."""
        return cls(
            start=start,
            length=length,
            category=category,
            colour=CATEGORY_COLOURS[category],
        )

    @property
    def end(self) -> int:
        return self.start + self.length


class DecodeIssue(NamedTuple):
    """A substructure whose decode was abandoned; its regions were dropped."""
    structure: str
    offset: int
    message: str


# ---------------------------------------------------------------------------
# Aggregate result
# ---------------------------------------------------------------------------

class DexMapResult(BaseModel):
    """Everything the engine produced for one DEX file.

    The pixel buffer itself stays on the :class:`~dexmap.output.canvas.Canvas`
    and is not part of the serialised model.

    Attributes:
        path: Input path (or ``"<memory>"``).
        header: Parsed header.
        header_warnings: Non-fatal header anomalies.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        regions: Regions in paint order.
        coverage: Painted pixel count per category (last write wins).
        findings: Header warnings and locally aborted substructures.
    """
    path: str = ""
    header: DexHeader = Field(default_factory=DexHeader)
    header_warnings: list[HeaderWarning] = Field(default_factory=list)
    width: int = 0
    height: int = 0
    regions: list[Region] = Field(default_factory=list)
    coverage: dict[RegionCategory, int] = Field(default_factory=dict)
    findings: list[Finding] = Field(default_factory=list)

    @property
    def painted_pixels(self) -> int:
        return sum(self.coverage.values())
