"""The legend page: which symbol is which color, how many stitches, and the page layout."""

from .bitmap import BLACK, WHITE, Bitmap, GluePosition, glue, glue_together
from .config import LEGEND_BLOCK_ENTRY_COUNT, LEGEND_MIN_COLUMNS, TILE_SIZE
from .fonts import BitmapFont
from .palette import ColorEntry, Palette
from .segments import create_page_layout


def legend_statistics(image_size: tuple[int, int], palette: Palette) -> dict[str, str]:
    return {
        "Size": f"{image_size[0]}x{image_size[1]}",
        "Colors": str(len(palette)),
        "Stitches": str(palette.stitch_count),
    }


def legend_statistics_text(image_size: tuple[int, int], palette: Palette) -> str:
    stats = legend_statistics(image_size, palette)
    return (
        f"Size:     {stats['Size']}\n\n"
        f"Colors:   {stats['Colors']}\n\n"
        f"Stitches: {stats['Stitches']}\n\n\n"
    )


def create_legend_entry(font: BitmapFont, entry: ColorEntry, tile_size: int = TILE_SIZE) -> Bitmap:
    """Color swatch and symbol side by side, followed by the stitch count."""
    swatch = Bitmap.new(2 * tile_size, tile_size, WHITE)
    swatch.fill_rect(0, 0, tile_size, tile_size, entry.color)
    swatch.draw_rect(0, 0, tile_size, tile_size, BLACK)
    swatch.stamp_symbol(entry.symbol, (tile_size, 0), WHITE)
    swatch.draw_rect(tile_size, 0, tile_size, tile_size, BLACK)

    stitches_info = font.render_text(f" {entry.count} stitches      ")
    return glue(stitches_info, swatch, GluePosition.RIGHT_CENTER)


def create_legend_block(font: BitmapFont, entries: list[ColorEntry], tile_size: int = TILE_SIZE) -> Bitmap:
    rows = [create_legend_entry(font, entry, tile_size) for entry in entries]
    return glue_together(rows, GluePosition.BOTTOM_LEFT, tile_size)


def create_legend(
    image_size: tuple[int, int],
    palette: Palette,
    font: BitmapFont,
    grid_positions: list[tuple[int, int]],
    tile_size: int = TILE_SIZE,
) -> Bitmap:
    """
    Statistics on top, then the color entries in blocks of five, then (for
    patterns split into pages) the page overview below a separating line.
    """
    stats = font.render_text(legend_statistics_text(image_size, palette))

    entries = list(palette)
    blocks = [
        create_legend_block(font, entries[i:i + LEGEND_BLOCK_ENTRY_COUNT], tile_size)
        for i in range(0, len(entries), LEGEND_BLOCK_ENTRY_COUNT)
    ]
    num_columns = max(len(blocks), LEGEND_MIN_COLUMNS)
    block_rows = [
        glue_together(blocks[i:i + num_columns], GluePosition.RIGHT_TOP, tile_size)
        for i in range(0, len(blocks), num_columns)
    ]
    grid = glue_together(block_rows, GluePosition.BOTTOM_LEFT, tile_size)
    grid = grid.extended(0, 0, 0, int(1.5 * tile_size), WHITE)

    legend = glue(stats, grid, GluePosition.TOP_LEFT)

    if len(grid_positions) > 1:
        page_layout = create_page_layout(font, grid_positions)
        legend = glue(legend, page_layout, GluePosition.TOP_LEFT)
        legend.fill_rect(0, legend.height - page_layout.height, legend.width, 1, BLACK)

    return legend.extended(tile_size, tile_size, tile_size, tile_size, WHITE)
