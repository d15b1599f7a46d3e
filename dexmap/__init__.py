"""
Prism DexMap -- DEX Structure Visualiser
=========================================

Paints every byte of an Android DEX file with the colour of the structure
that occupies it, producing an image whose pixels follow the file's byte
order.

Modules:
    - dexmap.core.engine: Pipeline orchestrator
    - dexmap.core.models: Pydantic data models and the colour palette
    - dexmap.parsers: Byte cursor, ULEB128 and header parsing
    - dexmap.analyzers: Section walker and substructure decoders
    - dexmap.output: Canvas, image/JSON reports and console display
    - dexmap.cli: Click-based command-line interface

References:
    - Google. (2024). DEX Format.
    - Jain, A., Gonzalez, H., & Stakhanova, N. (2015). Enriching Reverse
      Engineering through Visual Exploration of Android Binaries. PPREW-5.
"""

__version__ = "0.9.0"
__tool_name__ = "dexmap"
