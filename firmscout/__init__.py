"""
Firmscout - investor firm discovery and enrichment backend.
"""

__version__ = "0.1.0"
