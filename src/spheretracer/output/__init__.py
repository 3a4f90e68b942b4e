"""Output module for writing rendered images.

Components:
    ppm: Plain-text P3 writer and the radiance-to-8-bit conversion
    png: PNG writer (Pillow)
"""

from .png import save_png
from .ppm import format_header, format_pixel, resolve_pixels, write_ppm

__all__ = [
    "resolve_pixels",
    "format_header",
    "format_pixel",
    "write_ppm",
    "save_png",
]
