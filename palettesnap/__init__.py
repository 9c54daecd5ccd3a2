"""
PaletteSnap

Extracts small representative color palettes from raster images.
"""

__version__ = "1.0.0"
