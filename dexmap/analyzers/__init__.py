"""
DexMap Analyzers
=================

Structure walkers that turn a DEX file into coloured regions.
"""

from dexmap.analyzers.class_data import ClassDataDecoder
from dexmap.analyzers.encoded_array import EncodedArrayDecoder
from dexmap.analyzers.sections import SectionWalker

__all__ = ["ClassDataDecoder", "EncodedArrayDecoder", "SectionWalker"]
