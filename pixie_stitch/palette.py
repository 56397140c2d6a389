"""
Color palette of an image: distinct opaque colors, their stitch counts, and the
symbols and stitch textures each color is drawn with.
"""

import colorsys
from collections import Counter
from dataclasses import dataclass, replace
from pathlib import Path

import numpy as np

from .bitmap import Bitmap, BlendMode, Color
from .config import COLOR_STITCH_SCREEN
from .errors import InsufficientSymbolsError


@dataclass(frozen=True)
class ColorEntry:
    color: Color
    count: int
    symbol: Bitmap | None = None
    symbol_alphanum: Bitmap | None = None
    stitches: tuple[Bitmap, ...] = ()  # premultiplied alpha


class Palette:
    """Read-only, perceptually ordered mapping from color to ColorEntry."""

    def __init__(self, entries: list[ColorEntry]):
        self.entries = tuple(entries)
        self._index = {entry.color: i for i, entry in enumerate(self.entries)}

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __contains__(self, color) -> bool:
        return tuple(color) in self._index

    def __getitem__(self, color) -> ColorEntry:
        return self.entries[self._index[tuple(color)]]

    @property
    def colors(self) -> list[Color]:
        return [entry.color for entry in self.entries]

    @property
    def stitch_count(self) -> int:
        return sum(entry.count for entry in self.entries)


def hue_luminosity_saturation(color: Color) -> tuple[float, float, float]:
    """Sort key that groups similar hues and ramps them from dark to light."""
    hue, lightness, saturation = colorsys.rgb_to_hls(color[0] / 255, color[1] / 255, color[2] / 255)
    return hue, lightness, saturation


def count_colors(image: Bitmap) -> Counter:
    """Occurrences of every color with nonzero alpha, keyed in first-seen order."""
    pixels = image.data.reshape(-1, 4)
    opaque = pixels[pixels[:, 3] != 0]
    return Counter(map(tuple, opaque.tolist()))


def extract_palette(image: Bitmap) -> Palette:
    """
    Collect the image's colors (transparent pixels are not stitched) and sort
    them by hue, then luminosity, then saturation. The sort is stable, so
    colors with equal keys keep the order they first appear in.
    """
    counts = count_colors(image)
    entries = [ColorEntry(color=color, count=count) for color, count in counts.items()]
    # This makes color ramps on the legend look nice
    entries.sort(key=lambda entry: hue_luminosity_saturation(entry.color))
    return Palette(entries)


def assign_symbols(
    palette: Palette,
    symbols: list[Bitmap],
    symbols_alphanum: list[Bitmap],
    image_path: str | Path = "",
) -> Palette:
    """Give the n-th palette color the n-th symbol of each pool."""
    if len(symbols) < len(palette):
        raise InsufficientSymbolsError(len(palette), len(symbols), image_path, "cross stitch")
    if len(symbols_alphanum) < len(palette):
        raise InsufficientSymbolsError(len(palette), len(symbols_alphanum), image_path, "paint by numbers")

    return Palette([
        replace(entry, symbol=symbol, symbol_alphanum=symbol_alphanum)
        for entry, symbol, symbol_alphanum in zip(palette, symbols, symbols_alphanum)
    ])


def luminosity_divisor(color: Color) -> int:
    """Brighter threads get flatter shading."""
    percent = (color[0] + color[1] + color[2]) / (3.0 * 255.0)
    return 6 + int(8.0 * percent * percent)


def tint_stitch(color: Color, stitch: Bitmap, stitch_luminance: Bitmap) -> Bitmap:
    """
    Color a premultiplied stitch texture: screen a gray highlight onto it,
    multiply the thread color in, add shading from the luminance texture, and
    cut the result back to the stitch's silhouette.
    """
    tinted = stitch.copy()

    screen_layer = Bitmap.new(stitch.width, stitch.height, COLOR_STITCH_SCREEN).to_premultiplied()
    screen_layer.blit(tinted, (0, 0), BlendMode.SCREEN)

    color_layer = Bitmap.new(stitch.width, stitch.height, color).to_premultiplied()
    color_layer.blit(tinted, (0, 0), BlendMode.MULTIPLY)

    luminosity_layer = stitch_luminance.copy()
    luminosity_layer.data //= np.uint8(luminosity_divisor(color))
    luminosity_layer.blit(tinted, (0, 0), BlendMode.LUMINOSITY)

    return tinted.masked_by_premultiplied_alpha(stitch)


def assign_stitches(palette: Palette, stitches: list[Bitmap], stitches_luminance: list[Bitmap]) -> Palette:
    """Attach a tinted copy of every stitch texture variant to each palette color."""
    if len(stitches) != len(stitches_luminance):
        raise ValueError("Every stitch texture needs a matching luminance texture")
    return Palette([
        replace(entry, stitches=tuple(
            tint_stitch(entry.color, stitch, stitch_luminance)
            for stitch, stitch_luminance in zip(stitches, stitches_luminance)
        ))
        for entry in palette
    ])
