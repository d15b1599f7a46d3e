"""
Prism Shared Module
===================

Configuration, console, logging and result models shared by every Prism
tool.
"""

from shared.config import PrismConfig

__all__ = ["PrismConfig"]
