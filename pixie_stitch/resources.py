"""Fonts, symbol images and stitch textures, loaded once per run."""

from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from .bitmap import Bitmap
from .config import (
    BACKGROUND_FILENAME,
    FONT_SIZE,
    RESOURCE_DIR_NAME,
    STITCH_FILENAMES,
    STITCH_LUMINANCE_FILENAMES,
    PatternConfig,
)
from .errors import ResourceError
from .fonts import BitmapFont, create_alphanumeric_symbols, load_fonts


@dataclass(frozen=True)
class Resources:
    font: BitmapFont
    font_big: BitmapFont
    symbols: list[Bitmap]
    symbols_alphanum: list[Bitmap]
    # Premultiplied textures, only loaded when previews are enabled
    stitches: list[Bitmap]
    stitches_luminance: list[Bitmap]
    background: Bitmap | None


def find_resource_dir(resource_dir: str | Path | None = None) -> Path:
    """The given directory, or `resources` in the working directory or next to the package."""
    if resource_dir is not None:
        candidates = [Path(resource_dir)]
    else:
        candidates = [Path.cwd() / RESOURCE_DIR_NAME, Path(__file__).parent / RESOURCE_DIR_NAME]

    for candidate in candidates:
        if candidate.is_dir():
            return candidate

    raise ResourceError(
        "Missing `resources` directory, looked in: " + ", ".join(f"'{c}'" for c in candidates)
    )


def load_png(path: Path) -> Bitmap:
    try:
        return Bitmap.from_png_file(path)
    except (OSError, Image.DecompressionBombError) as e:
        raise ResourceError(f"Cannot load resource image '{path}': {e}") from e


def collect_symbols(resource_dir: Path, tile_size: int) -> list[Bitmap]:
    """All PNGs named like `12.png` below resource_dir, in numeric order."""
    paths = [p for p in resource_dir.rglob("*.png") if p.stem.isdigit()]
    paths.sort(key=lambda p: (int(p.stem), str(p)))

    symbols = []
    for path in paths:
        symbol = load_png(path)
        if symbol.width > tile_size or symbol.height > tile_size:
            raise ResourceError(
                f"Symbol '{path}' is {symbol.width}x{symbol.height}, larger than a {tile_size}px tile"
            )
        symbols.append(symbol)
    return symbols


def load_stitch_textures(resource_dir: Path) -> tuple[list[Bitmap], list[Bitmap], Bitmap]:
    """Stitch textures, their luminance maps and the fabric background, all premultiplied."""
    stitches = [load_png(resource_dir / name).to_premultiplied() for name in STITCH_FILENAMES]
    stitches_luminance = [
        load_png(resource_dir / name).to_premultiplied() for name in STITCH_LUMINANCE_FILENAMES
    ]
    background = load_png(resource_dir / BACKGROUND_FILENAME).to_premultiplied()

    for stitch, luminance in zip(stitches, stitches_luminance):
        if stitch.size != luminance.size:
            raise ResourceError(
                f"Stitch texture of size {stitch.size} has a luminance map of size {luminance.size}"
            )
    return stitches, stitches_luminance, background


def load_resources(config: PatternConfig, font_size: int = FONT_SIZE) -> Resources:
    resource_dir = find_resource_dir(config.resource_dir)
    if config.verbose:
        print(f"Loading resources from: {resource_dir}")

    font, font_big = load_fonts(font_size, config.font_path)
    symbols = collect_symbols(resource_dir, config.tile_size)
    symbols_alphanum = create_alphanumeric_symbols(font, config.tile_size)

    stitches, stitches_luminance, background = [], [], None
    if config.preview:
        stitches, stitches_luminance, background = load_stitch_textures(resource_dir)

    if config.verbose:
        print(f"  {len(symbols)} symbols, {len(symbols_alphanum)} alphanumeric symbols")

    return Resources(font, font_big, symbols, symbols_alphanum, stitches, stitches_luminance, background)
