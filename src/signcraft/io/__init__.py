"""I/O layer for signcraft.

This module handles everything that touches files or external formats:

- Load TTF/OTF fonts and turn glyph outlines into path commands (fonttools)
- Decode images into grayscale or RGB buffers and fill outlines into rasters (Pillow)
- Serialize meshes to binary or ASCII STL and read them back

Key classes and functions:
- FontReader: Load fonts and extract glyph outlines
- load_grayscale / load_rgb: Image adapters
- fill_rings: Even-odd polygon fill into a binary raster
- write_stl / read_stl: STL codec
"""

from signcraft.io.fonts import FontReader, recording_to_commands
from signcraft.io.images import GrayscaleImage, fill_rings, load_grayscale, load_rgb
from signcraft.io.stl import (
    STLFormat,
    read_ascii_stl,
    read_binary_stl,
    read_stl,
    read_triangle_count,
    save_stl,
    write_stl,
)

__all__ = [
    "FontReader",
    "GrayscaleImage",
    "STLFormat",
    "fill_rings",
    "load_grayscale",
    "load_rgb",
    "read_ascii_stl",
    "read_binary_stl",
    "read_stl",
    "read_triangle_count",
    "recording_to_commands",
    "save_stl",
    "write_stl",
]
