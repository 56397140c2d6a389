"""Photo-like preview of the finished embroidery: tinted stitch textures on aida fabric."""

from dataclasses import dataclass

import numpy as np

from .bitmap import TRANSPARENT, Bitmap, BlendMode
from .config import PREVIEW_BORDER, PREVIEW_SEED
from .palette import Palette

# The background texture covers this many stitches in each direction
BACKGROUND_TILE_CELLS = 8


@dataclass
class Preview:
    background: Bitmap
    stitches: Bitmap  # premultiplied
    combined: Bitmap


def create_background_layer(cells_x: int, cells_y: int, background_tile: Bitmap) -> Bitmap:
    """Repeat the premultiplied fabric texture to cover cells_x x cells_y stitches."""
    tile_w = background_tile.width // BACKGROUND_TILE_CELLS
    tile_h = background_tile.height // BACKGROUND_TILE_CELLS
    layer = Bitmap.new(tile_w * cells_x, tile_h * cells_y, TRANSPARENT, premultiplied=True)
    for y in range(cells_y // BACKGROUND_TILE_CELLS + 1):
        for x in range(cells_x // BACKGROUND_TILE_CELLS + 1):
            background_tile.copy_to(layer, (background_tile.width * x, background_tile.height * y))
    return layer


def create_stitches_layer(
    image: Bitmap,
    palette: Palette,
    tile_size: tuple[int, int],
    seed: int = PREVIEW_SEED,
) -> Bitmap:
    """
    Put one stitch texture on the center of every stitched cell. Which of a
    color's texture variants is used is picked by a generator seeded with
    seed, so the same seed gives the same preview.
    """
    tile_w, tile_h = tile_size
    layer = Bitmap.new(tile_w * image.width, tile_h * image.height, TRANSPARENT, premultiplied=True)
    rng = np.random.default_rng(seed)

    for y in range(image.height):
        for x in range(image.width):
            color = image.get(x, y)
            if color[3] == 0:
                continue
            stitches = palette[color].stitches
            stitch = stitches[int(rng.integers(len(stitches)))]
            center_x = tile_w * x + tile_w // 2
            center_y = tile_h * y + tile_h // 2
            stitch.blit(layer, (center_x - stitch.width // 2, center_y - stitch.height // 2), BlendMode.NORMAL)

    return layer


def create_preview(
    image: Bitmap,
    palette: Palette,
    background_tile: Bitmap,
    seed: int = PREVIEW_SEED,
) -> Preview:
    """Background, stitches and both combined, with an empty border around the image."""
    image = image.extended(PREVIEW_BORDER, PREVIEW_BORDER, PREVIEW_BORDER, PREVIEW_BORDER, TRANSPARENT)
    tile_size = (background_tile.width // BACKGROUND_TILE_CELLS, background_tile.height // BACKGROUND_TILE_CELLS)

    background = create_background_layer(image.width, image.height, background_tile)
    stitches = create_stitches_layer(image, palette, tile_size, seed)

    combined = background.copy()
    stitches.blit(combined, (0, 0), BlendMode.NORMAL)
    return Preview(background, stitches, combined)
