"""
DexMap Core Module
===================

Data models and the exception hierarchy.  The engine lives in
:mod:`dexmap.core.engine`.
"""

from dexmap.core.errors import (
    DexMapError,
    FileTooLargeError,
    MalformedHeaderError,
    NestingTooDeepError,
    OffsetOutOfRangeError,
    SizeMismatchError,
    TruncatedStreamError,
)
from dexmap.core.models import (
    CATEGORY_COLOURS,
    DecodeIssue,
    DexHeader,
    DexMapResult,
    HeaderWarning,
    Region,
    RegionCategory,
    SectionDescriptor,
)

__all__ = [
    "CATEGORY_COLOURS",
    "DecodeIssue",
    "DexHeader",
    "DexMapError",
    "DexMapResult",
    "FileTooLargeError",
    "HeaderWarning",
    "MalformedHeaderError",
    "NestingTooDeepError",
    "OffsetOutOfRangeError",
    "Region",
    "RegionCategory",
    "SectionDescriptor",
    "SizeMismatchError",
    "TruncatedStreamError",
]
