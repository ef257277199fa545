"""
healthmem - hierarchical memory and adaptive retrieval for personal health records.
"""

__version__ = "0.1.0"
