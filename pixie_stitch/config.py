"""Constants and per-run settings for pattern generation."""

from dataclasses import dataclass
from pathlib import Path

TILE_SIZE = 16  # pixels per stitch cell in the printed pattern
LEGEND_BLOCK_ENTRY_COUNT = 5
LEGEND_MIN_COLUMNS = 4
SPLIT_SEGMENT_WIDTH = 60  # stitches per page
SPLIT_SEGMENT_HEIGHT = 80

COLOR_GRID_THIN = (128, 128, 128, 255)
COLOR_GRID_THICK = (64, 64, 64, 255)
COLOR_STITCH_SCREEN = (105, 109, 128, 255)

PREVIEW_SEED = 1234
PREVIEW_BORDER = 10  # empty cells around the stitched preview

FONT_SIZE = 11
FONT_SIZE_BIG = 2 * FONT_SIZE

RESOURCE_DIR_NAME = "resources"
STITCH_FILENAMES = ("stitch1.png", "stitch2.png", "stitch3.png")
STITCH_LUMINANCE_FILENAMES = ("stitch1_lum.png", "stitch2_lum.png", "stitch3_lum.png")
BACKGROUND_FILENAME = "aida_8x8.png"

SUPPORTED_EXTENSIONS = (".png", ".gif")


@dataclass
class PatternConfig:
    """Settings for one run over a batch of images."""

    # Where per-image output directories go (None: next to each input image)
    output_root: Path | None = None

    # Resource lookup
    resource_dir: Path | None = None  # None: ./resources, then next to the package
    font_path: Path | None = None  # None: Pillow's built-in font

    # Page splitting
    segment_width: int = SPLIT_SEGMENT_WIDTH
    segment_height: int = SPLIT_SEGMENT_HEIGHT

    tile_size: int = TILE_SIZE

    # Which output directories to produce
    centered: bool = True
    preview: bool = True
    preview_seed: int = PREVIEW_SEED

    max_workers: int | None = None  # None: ThreadPoolExecutor default
    verbose: bool = True
