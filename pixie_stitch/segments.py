"""Splitting big patterns into printable pages, and the page overview diagram."""

from dataclasses import dataclass

from .bitmap import BLACK, WHITE, Bitmap, GluePosition, glue
from .fonts import BitmapFont


@dataclass(frozen=True)
class Segment:
    index: int  # 1-based page number
    grid_position: tuple[int, int]  # (column, row) of the page
    bitmap: Bitmap
    logical_origin: tuple[int, int]  # logical coordinate of the top-left stitch


def split_into_segments(
    image: Bitmap,
    max_width: int,
    max_height: int,
    logical_origin: tuple[int, int] = (0, 0),
) -> list[Segment]:
    """
    Tile the image row by row into pages of at most max_width x max_height
    stitches. Pages on the right and bottom edge may be smaller.
    """
    bitmaps, positions = image.to_segments(max_width, max_height)
    return [
        Segment(
            index=i + 1,
            grid_position=(col, row),
            bitmap=bitmap,
            logical_origin=(logical_origin[0] + max_width * col, logical_origin[1] + max_height * row),
        )
        for i, (bitmap, (col, row)) in enumerate(zip(bitmaps, positions))
    ]


def page_tile_size(font: BitmapFont, page_count: int) -> tuple[int, int]:
    # The extra pixel leaves a visual gap between neighbouring pages
    width = 1 + font.text_size(f" {page_count} ")[0]
    height = 1 + int(width * (9.0 / 6.0))
    return width, height


def create_page_layout(font: BitmapFont, grid_positions: list[tuple[int, int]]) -> Bitmap:
    """A numbered box per page, arranged like the pages of the pattern."""
    caption = font.render_text("\n\nPattern parts overview:\n")

    num_columns = 1 + max(col for col, _ in grid_positions)
    num_rows = 1 + max(row for _, row in grid_positions)
    tile_w, tile_h = page_tile_size(font, len(grid_positions))

    layout = Bitmap.new(num_columns * tile_w, num_rows * tile_h, WHITE)
    for page_index, (col, row) in enumerate(grid_positions):
        x, y = col * tile_w, row * tile_h
        layout.draw_rect(x, y, tile_w - 1, tile_h - 1, BLACK)
        font.draw_text_centered(layout, str(page_index + 1), (x + tile_w // 2, y + tile_h // 2))

    return glue(caption, layout, GluePosition.TOP_LEFT)
