"""
DexMap Parsers
===============

Bounds-checked byte access and header parsing.
"""

from dexmap.parsers.cursor import DexCursor, encode_uleb128, read_uleb128
from dexmap.parsers.header import parse_header

__all__ = ["DexCursor", "encode_uleb128", "parse_header", "read_uleb128"]
