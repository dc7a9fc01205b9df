"""
Image codec integration (Pillow).
"""

from .encoder import ImageEncodingError, PillowWebPEncoder

__all__ = ["ImageEncodingError", "PillowWebPEncoder"]
