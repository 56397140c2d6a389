"""
Bitmap fonts: glyphs rasterized once by Pillow, then stamped as plain pixels.

Text on a printed pattern must stay crisp, so every glyph is thresholded to a
black-on-transparent bitmap instead of being drawn anti-aliased.
"""

import string
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .bitmap import BLACK, TRANSPARENT, WHITE, Bitmap, Color
from .errors import ResourceError

ALPHANUMERIC_SYMBOL_CHARS = "123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
REQUIRED_GLYPHS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ-"


@dataclass(frozen=True)
class Glyph:
    bitmap: Bitmap | None  # None for blank glyphs like space
    offset: tuple[int, int]  # from the pen position at the top of the line
    advance: int


class BitmapFont:
    """Pre-rendered glyphs plus the metrics needed to lay out text."""

    def __init__(self, name: str, glyphs: dict[str, Glyph], line_height: int):
        self.name = name
        self.glyphs = glyphs
        self.line_height = line_height
        self.horizontal_advance_max = max((g.advance for g in glyphs.values()), default=0)

    @classmethod
    def from_pil_font(cls, font: ImageFont.ImageFont | ImageFont.FreeTypeFont, name: str) -> "BitmapFont":
        glyphs = {}
        for char in string.digits + string.ascii_letters + string.punctuation + " ":
            glyphs[char] = _rasterize_glyph(font, char)

        missing = [c for c in REQUIRED_GLYPHS if glyphs[c].bitmap is None]
        if missing:
            raise ResourceError(f"Font '{name}' is missing glyphs: {''.join(missing)}")

        bottoms = [g.offset[1] + g.bitmap.height for g in glyphs.values() if g.bitmap is not None]
        line_height = max(bottoms) + 1

        result = cls(name, glyphs, line_height)
        # A zero looks like an eight on bad printers, use the letter O instead
        result.glyphs["0"] = result.glyphs["O"]
        return result

    def glyph(self, char: str) -> Glyph:
        return self.glyphs.get(char) or self.glyphs["?"]

    def line_width(self, line: str) -> int:
        return sum(self.glyph(c).advance for c in line)

    def text_size(self, text: str) -> tuple[int, int]:
        lines = text.split("\n")
        return max(self.line_width(line) for line in lines), self.line_height * len(lines)

    def draw_text(self, bitmap: Bitmap, text: str, pos: tuple[int, int], color: Color = BLACK) -> None:
        """Draw text with its top-left corner at pos. Glyphs are clipped to the bitmap."""
        x0, y = pos
        for line in text.split("\n"):
            x = x0
            for char in line:
                glyph = self.glyph(char)
                if glyph.bitmap is not None:
                    _draw_glyph(bitmap, glyph, x + glyph.offset[0], y + glyph.offset[1], color)
                x += glyph.advance
            y += self.line_height

    def draw_text_centered(self, bitmap: Bitmap, text: str, point: tuple[int, int], color: Color = BLACK) -> None:
        """Draw text centered horizontally and vertically on point."""
        width, height = self.text_size(text)
        self.draw_text(bitmap, text, (point[0] - width // 2, point[1] - height // 2), color)

    def render_text(self, text: str, background: Color = WHITE) -> Bitmap:
        """Create a bitmap just large enough for text."""
        width, height = self.text_size(text)
        bitmap = Bitmap.new(width, height, background)
        self.draw_text(bitmap, text, (0, 0))
        return bitmap


def _rasterize_glyph(font, char: str) -> Glyph:
    left, top, right, bottom = font.getbbox(char)
    advance = int(round(font.getlength(char)))
    if right <= left or bottom <= top:
        return Glyph(None, (0, 0), advance)

    mask = Image.new("L", (right - left, bottom - top), 0)
    ImageDraw.Draw(mask).text((-left, -top), char, font=font, fill=255)
    ink = np.array(mask) >= 128
    if not ink.any():
        return Glyph(None, (0, 0), advance)

    bitmap = Bitmap.new(mask.width, mask.height, TRANSPARENT)
    bitmap.data[ink] = BLACK
    return Glyph(bitmap, (left, top), advance)


def _draw_glyph(bitmap: Bitmap, glyph: Glyph, x: int, y: int, color: Color) -> None:
    source = glyph.bitmap
    x0, y0 = max(x, 0), max(y, 0)
    x1, y1 = min(x + source.width, bitmap.width), min(y + source.height, bitmap.height)
    if x0 >= x1 or y0 >= y1:
        return
    ink = source.data[y0 - y:y1 - y, x0 - x:x1 - x, 3] != 0
    bitmap.data[y0:y1, x0:x1][ink] = color


def load_font(size: int, font_path: str | Path | None = None) -> BitmapFont:
    """Load a TrueType font from font_path, or Pillow's built-in font, at a pixel size."""
    if font_path is None:
        return BitmapFont.from_pil_font(ImageFont.load_default(size), f"default-{size}")
    try:
        font = ImageFont.truetype(str(font_path), size)
    except OSError as e:
        raise ResourceError(f"Cannot load font '{font_path}': {e}") from e
    return BitmapFont.from_pil_font(font, f"{Path(font_path).stem}-{size}")


def load_fonts(font_size: int, font_path: str | Path | None = None) -> tuple[BitmapFont, BitmapFont]:
    """The regular font for labels and legends, and a font twice as big for headings."""
    return load_font(font_size, font_path), load_font(2 * font_size, font_path)


def create_alphanumeric_symbols(font: BitmapFont, tile_size: int) -> list[Bitmap]:
    """One tile per character of 1-9 and A-Z with the glyph centered in it."""
    symbols = []
    for char in ALPHANUMERIC_SYMBOL_CHARS:
        glyph = font.glyphs[char].bitmap
        if glyph.width > tile_size or glyph.height > tile_size:
            raise ResourceError(
                f"Glyph '{char}' of font '{font.name}' is larger than a {tile_size}px tile"
            )
        tile = Bitmap.new(tile_size, tile_size, TRANSPARENT)
        pos = ((tile_size - glyph.width) // 2, (tile_size - glyph.height) // 2)
        tile.stamp_symbol(glyph, pos, TRANSPARENT)
        symbols.append(tile)
    return symbols
