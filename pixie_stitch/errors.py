"""Exceptions raised for conditions the user can fix (bad input, missing resources)."""

from pathlib import Path


class PixieStitchError(Exception):
    """Base class for all fatal, user-facing errors."""


class InputError(PixieStitchError):
    """An input image could not be read or decoded."""

    def __init__(self, image_path: str | Path, reason: str):
        self.image_path = str(image_path)
        self.reason = reason
        super().__init__(f"Cannot use image '{self.image_path}': {reason}")


class ResourceError(PixieStitchError):
    """A required resource file, directory or glyph is missing."""


class InsufficientSymbolsError(PixieStitchError):
    """The image has more colors than there are symbols in a pool."""

    def __init__(self, color_count: int, symbol_count: int, image_path: str | Path, pool: str):
        self.color_count = color_count
        self.symbol_count = symbol_count
        self.image_path = str(image_path)
        self.pool = pool
        super().__init__(
            f"Not enough symbols to map {color_count} colors found in given image "
            f"'{self.image_path}' for {pool} (only {symbol_count} available)"
        )


class OutputError(PixieStitchError):
    """An output directory could not be (re)created."""
