"""
DexMap Errors
==============

Exception hierarchy raised while decoding a DEX container.

Header errors and :class:`FileTooLargeError` are fatal: the run stops
before anything is painted.  :class:`TruncatedStreamError`,
:class:`OffsetOutOfRangeError` and :class:`NestingTooDeepError` abort only
the substructure being decoded; the walker catches them, drops that
substructure's regions and carries on.
"""

from __future__ import annotations


class DexMapError(Exception):
    """Base class for every DexMap decoding error."""

    pass


class MalformedHeaderError(DexMapError):
    """The buffer does not start with a usable DEX header (bad magic, too short)."""

    pass


class SizeMismatchError(DexMapError):
    """The header's declared ``file_size`` differs from the actual buffer length."""

    def __init__(self, declared: int, actual: int) -> None:
        super().__init__(
            f"Declared file size {declared:,} bytes does not match "
            f"actual size {actual:,} bytes"
        )
        self.declared = declared
        self.actual = actual


class TruncatedStreamError(DexMapError):
    """A read would run past the end of the buffer."""

    def __init__(self, offset: int, wanted: int, limit: int) -> None:
        super().__init__(
            f"Read of {wanted} byte(s) at 0x{offset:x} exceeds buffer end 0x{limit:x}"
        )
        self.offset = offset
        self.wanted = wanted
        self.limit = limit


class OffsetOutOfRangeError(DexMapError):
    """An offset field decoded from the file points outside the buffer."""

    def __init__(self, field: str, offset: int, limit: int) -> None:
        super().__init__(f"{field} 0x{offset:x} is outside the buffer (size 0x{limit:x})")
        self.field = field
        self.offset = offset
        self.limit = limit


class FileTooLargeError(DexMapError):
    """The input exceeds the configured ``max_file_size``."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"File too large: {size:,} bytes (max: {limit:,} bytes)")
        self.size = size
        self.limit = limit


class NestingTooDeepError(DexMapError):
    """Nested encoded arrays or annotations exceed the supported depth."""

    def __init__(self, offset: int, limit: int) -> None:
        super().__init__(
            f"Encoded value at 0x{offset:x} is nested deeper than {limit} levels"
        )
        self.offset = offset
        self.limit = limit
