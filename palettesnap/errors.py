"""
PaletteSnap error types.
"""


class DecodeFailure(Exception):
    """The image could not be read, fetched or decoded."""

    def __init__(self, message: str, source: str = None):
        super().__init__(message)
        self.source = source
