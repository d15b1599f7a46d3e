"""
DEX Header Parser
==================

Parses and validates the 112-byte ``header_item`` at the start of every
DEX file.

Fatal problems raise: a bad magic or a buffer too short to hold a header
is a :class:`MalformedHeaderError`, and a declared ``file_size`` that does
not match the buffer is a :class:`SizeMismatchError`.  Everything else the
header can get wrong (unknown version, swapped endian tag, odd header
size, a map list outside the data section) is reported as a
:class:`HeaderWarning` and parsing continues.

References:
    - Google. (2024). DEX Format -- header_item.
      https://source.android.com/docs/core/runtime/dex-format#header-item
"""

from __future__ import annotations

import struct

from dexmap.core.errors import MalformedHeaderError, SizeMismatchError
from dexmap.core.models import DexHeader, HeaderParseResult, HeaderWarning


# ---------------------------------------------------------------------------
# DEX Constants
# ---------------------------------------------------------------------------

DEX_MAGIC_PREFIX: bytes = b"dex\n"
DEX_SUPPORTED_VERSIONS: frozenset[str] = frozenset(
    {"035", "036", "037", "038", "039"}
)
HEADER_SIZE: int = 0x70
ENDIAN_CONSTANT: int = 0x12345678
REVERSE_ENDIAN_CONSTANT: int = 0x78563412

_FILE_SIZE_OFFSET: int = 32

# Layout after the 8-byte magic: checksum, 20-byte signature, then 20 u4s.
_HEADER_STRUCT = struct.Struct("<I20s20I")
_U4_FIELDS: tuple[str, ...] = (
    "file_size", "header_size", "endian_tag",
    "link_size", "link_off",
    "map_off",
    "string_ids_size", "string_ids_off",
    "type_ids_size", "type_ids_off",
    "proto_ids_size", "proto_ids_off",
    "field_ids_size", "field_ids_off",
    "method_ids_size", "method_ids_off",
    "class_defs_size", "class_defs_off",
    "data_size", "data_off",
)


def parse_header(data: bytes) -> HeaderParseResult:
    """Parse and validate the DEX header at the start of *data*.

    Checks run in this order: magic, declared file size, header length.
    A size mismatch is therefore reported even for a file truncated inside
    its own header, as long as the ``file_size`` field is still readable.

    Args:
        data: Complete file contents.

    Returns:
        The frozen :class:`DexHeader` and the list of non-fatal warnings.

    Raises:
        MalformedHeaderError: Magic bytes are wrong or the header is cut short.
        SizeMismatchError: Declared ``file_size`` differs from ``len(data)``.
    """
    if len(data) < 8 or data[:4] != DEX_MAGIC_PREFIX or data[7] != 0:
        raise MalformedHeaderError(
            f"Not a DEX file: magic is {bytes(data[:8])!r}"
        )

    if len(data) < _FILE_SIZE_OFFSET + 4:
        raise MalformedHeaderError(
            f"File is {len(data)} bytes, too short to hold a DEX header"
        )

    declared = struct.unpack_from("<I", data, _FILE_SIZE_OFFSET)[0]
    if declared != len(data):
        raise SizeMismatchError(declared, len(data))

    if len(data) < HEADER_SIZE:
        raise MalformedHeaderError(
            f"File is {len(data)} bytes, shorter than the {HEADER_SIZE}-byte header"
        )

    checksum, signature, *u4_values = _HEADER_STRUCT.unpack_from(data, 8)
    header = DexHeader(
        version=data[4:7].decode("ascii", errors="replace"),
        checksum=checksum,
        signature=signature.hex(),
        **dict(zip(_U4_FIELDS, u4_values)),
    )

    return HeaderParseResult(header, header_warnings(header))


def header_warnings(header: DexHeader) -> list[HeaderWarning]:
    """Return the non-fatal anomalies present in *header*."""
    warnings: list[HeaderWarning] = []
    if header.version not in DEX_SUPPORTED_VERSIONS:
        warnings.append(HeaderWarning.VERSION)
    if header.endian_tag != ENDIAN_CONSTANT:
        warnings.append(HeaderWarning.ENDIAN)
    if header.header_size != HEADER_SIZE:
        warnings.append(HeaderWarning.HEADER_SIZE)
    if header.map_off != 0 and header.map_off < header.data_off:
        warnings.append(HeaderWarning.MAP_OFFSET)
    return warnings


def describe_warning(warning: HeaderWarning, header: DexHeader) -> str:
    """Human-readable message for a header warning."""
    if warning is HeaderWarning.VERSION:
        return f"DEX version {header.version!r} is not one of 035-039"
    if warning is HeaderWarning.ENDIAN:
        return f"Endian tag 0x{header.endian_tag:08x} != 0x{ENDIAN_CONSTANT:08x}"
    if warning is HeaderWarning.HEADER_SIZE:
        return f"Header size 0x{header.header_size:x} != 0x{HEADER_SIZE:x}"
    return (
        f"Map offset 0x{header.map_off:x} is not in the data section "
        f"(data_off 0x{header.data_off:x})"
    )
