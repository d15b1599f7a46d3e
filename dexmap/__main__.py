"""
DexMap Module Entry Point
==========================

Allows running the DexMap CLI via: python -m dexmap
"""

from dexmap.cli import main

if __name__ == "__main__":
    main()
