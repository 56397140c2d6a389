"""
Rendering of the printable pattern pages.

Each source pixel becomes a tile_size x tile_size cell. On top of the cells go
the thin grid (one line per stitch), the thick grid (every 10 stitches in
logical coordinates), optional origin bars for centered patterns, and the
coordinate labels around the border.

Logical coordinates are the stitch coordinates the user sees. They differ from
bitmap coordinates when a page is only a part of the whole pattern or when the
pattern is centered on its middle stitch.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np

from .bitmap import BLACK, TRANSPARENT, WHITE, Bitmap, Color, GluePosition, glue
from .config import COLOR_GRID_THICK, COLOR_GRID_THIN, TILE_SIZE
from .fonts import BitmapFont
from .palette import Palette


class PatternType(Enum):
    """The value doubles as the file name part of the pattern."""

    COLORIZED = "cross_stitch_colorized"
    BLACK_AND_WHITE = "cross_stitch"
    COLORIZED_NO_SYMBOLS = "cross_stitch_colorized_no_symbols"
    PAINT_BY_NUMBERS = "paint_by_numbers"

    @property
    def colorize(self) -> bool:
        return self in (PatternType.COLORIZED, PatternType.COLORIZED_NO_SYMBOLS)

    @property
    def add_symbol(self) -> bool:
        return self is not PatternType.COLORIZED_NO_SYMBOLS

    @property
    def use_alphanum(self) -> bool:
        return self is PatternType.PAINT_BY_NUMBERS


# Rendered for every page; paint by numbers only for the complete pattern
PAGE_PATTERN_TYPES = (
    PatternType.COLORIZED,
    PatternType.BLACK_AND_WHITE,
    PatternType.COLORIZED_NO_SYMBOLS,
)


@dataclass(frozen=True)
class RenderOptions:
    tile_size: int = TILE_SIZE
    thick_ten_grid: bool = True  # also enables the coordinate labels
    origin_bars: bool = False
    flip_vertical_labels: bool = True  # show y-up coordinates
    symbol_mask_color: Color = WHITE


def render_options(pattern_type: PatternType, tile_size: int = TILE_SIZE, centered: bool = False) -> RenderOptions:
    if pattern_type is PatternType.PAINT_BY_NUMBERS:
        # Alphanumeric symbols are drawn on a transparent background
        return RenderOptions(tile_size, False, False, True, TRANSPARENT)
    return RenderOptions(tile_size, True, centered, True, WHITE)


@dataclass
class Canvas:
    bitmap: Bitmap
    label_padding: int = 0
    origin_padding: tuple[int, int, int, int] = (0, 0, 0, 0)  # left, top, right, bottom
    closes_ten_grid: tuple[bool, bool] = (False, False)  # thick line on the right / bottom edge


def _draw_origin_line_vertical(bitmap: Bitmap, pos_x: int) -> None:
    bitmap.fill_rect_clipped(pos_x - 2, 0, 4, bitmap.height, BLACK)
    bitmap.fill_rect_clipped(pos_x - 1, 0, 2, bitmap.height, WHITE)


def _draw_origin_line_horizontal(bitmap: Bitmap, pos_y: int) -> None:
    bitmap.fill_rect_clipped(0, pos_y - 2, bitmap.width, 4, BLACK)
    bitmap.fill_rect_clipped(0, pos_y - 1, bitmap.width, 2, WHITE)


def _ceil_to_ten(value: int) -> int:
    return -((-value) // 10) * 10


def _floor_to_ten(value: int) -> int:
    return (value // 10) * 10


def axis_label_positions(first: int, cell_count: int) -> list[tuple[int, int]]:
    """(grid line index, logical coordinate) of every labelled line along one axis."""
    last = first + cell_count
    result = [(i, first + i) for i in range(cell_count + 1) if (first + i) % 10 == 0]

    # Label the first and last line too, so that a remaining 7, 8 or 9 stitch
    # block is not mistaken for a 10 block
    if abs(_ceil_to_ten(first) - first) > 3:
        result.append((0, first))
    if abs(_floor_to_ten(last) - last) > 3:
        result.append((cell_count, last))

    return result


def vertical_label_text(logical_y: int, flip: bool) -> str:
    # Bitmap y points down; flipped labels present a cartesian y-up view
    return str(-logical_y if flip else logical_y)


def place_grid_labels(
    bitmap: Bitmap,
    font: BitmapFont,
    tile_size: int,
    logical_first: tuple[int, int],
    cell_counts: tuple[int, int],
    grid_offset: tuple[int, int] = (0, 0),
    flip_vertical: bool = False,
) -> tuple[Bitmap, int]:
    """
    Extend the bitmap on all sides and write the coordinates of the labelled
    grid lines into the new border. grid_offset is where cell (0, 0) sits in
    the bitmap. Returns the new bitmap and the padding used.
    """
    labels_x = [(i, str(x)) for i, x in axis_label_positions(logical_first[0], cell_counts[0])]
    labels_y = [
        (i, vertical_label_text(y, flip_vertical))
        for i, y in axis_label_positions(logical_first[1], cell_counts[1])
    ]

    longest = max((len(text) for _, text in labels_x + labels_y), default=1)
    padding = font.horizontal_advance_max * (longest + 4)
    result = bitmap.extended(padding, padding, padding, padding, WHITE)

    for i, text in labels_x:
        draw_x = padding + grid_offset[0] + tile_size * i
        font.draw_text_centered(result, text, (draw_x, padding // 2))
        font.draw_text_centered(result, text, (draw_x, result.height - padding // 2))

    for i, text in labels_y:
        draw_y = padding + grid_offset[1] + tile_size * i
        font.draw_text_centered(result, text, (padding // 2, draw_y))
        font.draw_text_centered(result, text, (result.width - padding // 2, draw_y))

    return result, padding


def render_canvas(
    pixels: Bitmap,
    palette: Palette,
    pattern_type: PatternType,
    logical_origin: tuple[int, int] = (0, 0),
    options: RenderOptions | None = None,
    font: BitmapFont | None = None,
) -> Canvas:
    """
    Draw one pattern page. logical_origin is the logical coordinate of the
    page's top-left stitch; the thick grid and the labels follow it.
    """
    options = options or render_options(pattern_type)
    tile = options.tile_size
    width, height = pixels.size
    first_x, first_y = logical_origin

    # Cells
    colors = pixels.data
    if pattern_type.colorize:
        fills = colors.copy()
        fills[colors[:, :, 3] == 0] = WHITE
    else:
        fills = np.empty_like(colors)
        fills[:] = WHITE
    bitmap = Bitmap(np.repeat(np.repeat(fills, tile, axis=0), tile, axis=1))
    scaled_w, scaled_h = bitmap.size

    # Symbols, only where something gets stitched
    if pattern_type.add_symbol:
        for y, x in zip(*np.nonzero(colors[:, :, 3])):
            entry = palette[tuple(colors[y, x].tolist())]
            symbol = entry.symbol_alphanum if pattern_type.use_alphanum else entry.symbol
            bitmap.stamp_symbol(symbol, (tile * int(x), tile * int(y)), options.symbol_mask_color)

    if width == 0 or height == 0:
        return Canvas(bitmap)

    # 1x1 grid. Line n is the left/top border of cell n, so the right/bottom
    # border of the last cell needs a line of its own
    for x in range(width):
        bitmap.fill_rect(tile * x, 0, 1, scaled_h, COLOR_GRID_THIN)
    for y in range(height):
        bitmap.fill_rect(0, tile * y, scaled_w, 1, COLOR_GRID_THIN)
    bitmap.fill_rect(scaled_w - 1, 0, 1, scaled_h, COLOR_GRID_THIN)
    bitmap.fill_rect(0, scaled_h - 1, scaled_w, 1, COLOR_GRID_THIN)

    # 10x10 grid
    closes_ten_grid = (False, False)
    if options.thick_ten_grid:
        for x in range(width):
            if (first_x + x) % 10 == 0:
                bitmap.fill_rect(tile * x, 0, 2, scaled_h, COLOR_GRID_THICK)
        for y in range(height):
            if (first_y + y) % 10 == 0:
                bitmap.fill_rect(0, tile * y, scaled_w, 2, COLOR_GRID_THICK)

        closes_ten_grid = ((first_x + width) % 10 == 0, (first_y + height) % 10 == 0)
        if closes_ten_grid[0]:
            bitmap.fill_rect(scaled_w - 2, 0, 2, scaled_h, COLOR_GRID_THICK)
        if closes_ten_grid[1]:
            bitmap.fill_rect(0, scaled_h - 2, scaled_w, 2, COLOR_GRID_THICK)

    # Origin bars
    origin_padding = (0, 0, 0, 0)
    if options.origin_bars:
        origin_x = -first_x
        if 0 < origin_x < width:
            _draw_origin_line_vertical(bitmap, tile * origin_x)
        origin_y = -first_y
        if 0 < origin_y < height:
            _draw_origin_line_horizontal(bitmap, tile * origin_y)

        # An origin line on the border of the page would be cut in half, so
        # make room for it first
        left = 2 if first_x == 0 else 0
        top = 2 if first_y == 0 else 0
        right = 2 if first_x + width == 0 else 0
        bottom = 2 if first_y + height == 0 else 0
        origin_padding = (left, top, right, bottom)

        if any(origin_padding):
            bitmap = bitmap.extended(left, top, right, bottom, WHITE)
        if left:
            _draw_origin_line_vertical(bitmap, 2)
        if right:
            _draw_origin_line_vertical(bitmap, left + scaled_w)
        if top:
            _draw_origin_line_horizontal(bitmap, 2)
        if bottom:
            _draw_origin_line_horizontal(bitmap, top + scaled_h)

    # Coordinate labels
    label_padding = 0
    if options.thick_ten_grid:
        if font is None:
            raise ValueError("Coordinate labels need a font")
        bitmap, label_padding = place_grid_labels(
            bitmap,
            font,
            tile,
            logical_origin,
            (width, height),
            grid_offset=(origin_padding[0], origin_padding[1]),
            flip_vertical=options.flip_vertical_labels,
        )

    return Canvas(bitmap, label_padding, origin_padding, closes_ten_grid)


def create_pattern_image(
    pixels: Bitmap,
    palette: Palette,
    pattern_type: PatternType,
    font: BitmapFont,
    font_big: BitmapFont,
    logical_origin: tuple[int, int] = (0, 0),
    options: RenderOptions | None = None,
    segment_index: int | None = None,
) -> Bitmap:
    """A finished pattern page, with a "Pattern Part N" banner for individual pages."""
    canvas = render_canvas(pixels, palette, pattern_type, logical_origin, options, font)
    if segment_index is None:
        return canvas.bitmap

    banner = font_big.render_text(f"\n Pattern Part {segment_index} \n")
    return glue(banner, canvas.bitmap, GluePosition.TOP_CENTER)


def pattern_filename(image_stem: str, pattern_type: PatternType, segment_index: int | None = None) -> str:
    suffix = "" if segment_index is None else f"_segment_{segment_index}"
    return f"{image_stem}_{pattern_type.value}{suffix}.png"
