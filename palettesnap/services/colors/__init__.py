"""
PaletteSnap Colors Module

Provides downsampling, pixel filtering, histogram counting and k-means
quantization for extracting representative palettes from images.
"""

__version__ = "1.0.0"
