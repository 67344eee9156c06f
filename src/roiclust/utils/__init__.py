"""
Utility functions for converting distance inputs.
"""

__all__ = []
