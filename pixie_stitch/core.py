"""
Create printable cross stitch patterns from pixel art images.

For every input image the palette is extracted once. After that every output
file (each pattern type for the whole image and for each page, the legend and
the stitched preview) only reads the image and the palette, so all of them are
rendered concurrently. Per image three directories are written:

    <image>/           patterns with the origin in the top-left corner
    <image>_centered/  patterns with the origin in the middle of the image
    <image>_preview/   a photo-like preview of the finished embroidery
"""

import shutil
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path

from PIL import Image

from .bitmap import Bitmap
from .config import SUPPORTED_EXTENSIONS, PatternConfig
from .errors import InputError, OutputError
from .fonts import BitmapFont
from .legend import create_legend
from .palette import Palette, assign_stitches, assign_symbols, extract_palette
from .pattern import (
    PAGE_PATTERN_TYPES,
    PatternType,
    create_pattern_image,
    pattern_filename,
    render_options,
)
from .preview import create_preview
from .resources import Resources, load_resources
from .segments import split_into_segments

Job = Callable[[], list[Path]]


def open_image(image_path: str | Path) -> Bitmap:
    """Decode a PNG, or the first frame of a GIF."""
    image_path = Path(image_path)
    if image_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise InputError(image_path, "only GIF or PNG images are supported")

    try:
        with Image.open(image_path) as img:
            img.seek(0)
            bitmap = Bitmap.from_image(img)
    except (OSError, Image.DecompressionBombError) as e:
        raise InputError(image_path, str(e)) from e

    if bitmap.width == 0 or bitmap.height == 0:
        raise InputError(image_path, "image is empty")
    return bitmap


def image_output_dir(image_path: str | Path, output_root: str | Path, suffix: str = "") -> Path:
    stem = Path(image_path).stem
    return Path(output_root) / (f"{stem}_{suffix}" if suffix else stem)


def remove_dir(path: Path) -> None:
    """Delete a directory tree if it exists."""
    try:
        if path.exists():
            shutil.rmtree(path)
    except OSError as e:
        raise OutputError(f"Cannot remove directory '{path}': is a file from it still open? ({e})") from e


def recreate_dir(path: Path) -> None:
    """Delete a previous output directory and start with an empty one."""
    remove_dir(path)
    try:
        path.mkdir(parents=True)
    except OSError as e:
        raise OutputError(f"Cannot create directory '{path}': {e}") from e


def centered_origin(width: int, height: int) -> tuple[int, int]:
    """Logical coordinate of the top-left stitch when (0, 0) is the image center."""
    # Odd sizes are rounded up so that the center lands on a stitch border
    return -((width + width % 2) // 2), -((height + height % 2) // 2)


def build_palette(image: Bitmap, image_path: str | Path, resources: Resources, with_stitches: bool) -> Palette:
    palette = extract_palette(image)
    palette = assign_symbols(palette, resources.symbols, resources.symbols_alphanum, image_path)
    if with_stitches:
        palette = assign_stitches(palette, resources.stitches, resources.stitches_luminance)
    return palette


# --- Jobs ------------------------------------------------------------------------


def _save(bitmap: Bitmap, path: Path, verbose: bool) -> Path:
    bitmap.write_png(path)
    if verbose:
        print(f"Saved to: {path}")
    return path


def _pattern_job(
    pixels: Bitmap,
    palette: Palette,
    pattern_type: PatternType,
    font: BitmapFont,
    font_big: BitmapFont,
    logical_origin: tuple[int, int],
    tile_size: int,
    centered: bool,
    segment_index: int | None,
    path: Path,
    verbose: bool,
) -> list[Path]:
    options = render_options(pattern_type, tile_size, centered)
    bitmap = create_pattern_image(
        pixels, palette, pattern_type, font, font_big, logical_origin, options, segment_index
    )
    return [_save(bitmap, path, verbose)]


def _legend_job(
    image_size: tuple[int, int],
    palette: Palette,
    font: BitmapFont,
    grid_positions: list[tuple[int, int]],
    tile_size: int,
    path: Path,
    verbose: bool,
) -> list[Path]:
    legend = create_legend(image_size, palette, font, grid_positions, tile_size)
    return [_save(legend, path, verbose)]


def _preview_job(
    image: Bitmap,
    palette: Palette,
    background_tile: Bitmap,
    seed: int,
    output_dir: Path,
    stem: str,
    verbose: bool,
) -> list[Path]:
    preview = create_preview(image, palette, background_tile, seed)
    return [
        _save(preview.background, output_dir / f"{stem}_background.png", verbose),
        _save(preview.stitches, output_dir / f"{stem}_stitches.png", verbose),
        _save(preview.combined, output_dir / f"{stem}_complete.png", verbose),
    ]


def pattern_dir_jobs(
    image: Bitmap,
    stem: str,
    palette: Palette,
    resources: Resources,
    config: PatternConfig,
    output_dir: Path,
    centered: bool,
) -> list[Job]:
    """Legend, the complete pattern set and (for big images) one set per page."""
    origin = centered_origin(image.width, image.height) if centered else (0, 0)
    segments = split_into_segments(image, config.segment_width, config.segment_height, origin)
    grid_positions = [segment.grid_position for segment in segments]

    pattern_job = partial(
        _pattern_job,
        palette=palette,
        font=resources.font,
        font_big=resources.font_big,
        tile_size=config.tile_size,
        centered=centered,
        verbose=config.verbose,
    )

    jobs = [
        partial(
            _legend_job,
            image.size,
            palette,
            resources.font,
            grid_positions,
            config.tile_size,
            output_dir / f"{stem}_legend.png",
            config.verbose,
        )
    ]

    for pattern_type in PAGE_PATTERN_TYPES + (PatternType.PAINT_BY_NUMBERS,):
        jobs.append(partial(
            pattern_job,
            image,
            pattern_type=pattern_type,
            logical_origin=origin,
            segment_index=None,
            path=output_dir / pattern_filename(stem, pattern_type),
        ))

    if len(segments) > 1:
        for segment in segments:
            for pattern_type in PAGE_PATTERN_TYPES:
                jobs.append(partial(
                    pattern_job,
                    segment.bitmap,
                    pattern_type=pattern_type,
                    logical_origin=segment.logical_origin,
                    segment_index=segment.index,
                    path=output_dir / pattern_filename(stem, pattern_type, segment.index),
                ))

    return jobs


def run_jobs(jobs: list[Job], max_workers: int | None = None) -> list[Path]:
    """Run independent jobs concurrently. The first failure is re-raised."""
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(job) for job in jobs]
        try:
            return [path for future in futures for path in future.result()]
        except BaseException:
            for future in futures:
                future.cancel()
            raise


# --- Entry points ----------------------------------------------------------------


def create_patterns(
    image_path: str | Path,
    resources: Resources,
    config: PatternConfig | None = None,
) -> list[Path]:
    """
    Create all pattern files for one image.

    Args:
        image_path: PNG or GIF image, one pixel per stitch
        resources: Fonts, symbols and stitch textures from load_resources
        config: Run settings; output goes next to the image by default

    Returns:
        Paths of all written files
    """
    config = config or PatternConfig()
    image_path = Path(image_path)
    stem = image_path.stem
    output_root = Path(config.output_root) if config.output_root else image_path.parent

    image = open_image(image_path)
    if config.verbose:
        print(f"Input image: {image_path} ({image.width}x{image.height})")

    palette = build_palette(image, image_path, resources, with_stitches=config.preview)
    if config.verbose:
        hex_colors = ['#' + ''.join(f'{c:02x}' for c in color[:3]) for color in palette.colors]
        print(f"Palette: {len(palette)} colors, {palette.stitch_count} stitches")
        print(f"  Colors: {', '.join(hex_colors)}")

    jobs = []

    output_dir = image_output_dir(image_path, output_root)
    recreate_dir(output_dir)
    jobs += pattern_dir_jobs(image, stem, palette, resources, config, output_dir, centered=False)

    if config.centered:
        output_dir = image_output_dir(image_path, output_root, "centered")
        recreate_dir(output_dir)
        jobs += pattern_dir_jobs(image, stem, palette, resources, config, output_dir, centered=True)
    else:
        remove_dir(image_output_dir(image_path, output_root, "centered"))

    if config.preview:
        output_dir = image_output_dir(image_path, output_root, "preview")
        recreate_dir(output_dir)
        jobs.append(partial(
            _preview_job, image, palette, resources.background, config.preview_seed, output_dir, stem, config.verbose
        ))
    else:
        remove_dir(image_output_dir(image_path, output_root, "preview"))

    if config.verbose:
        print(f"Rendering {len(jobs)} jobs...")
    return run_jobs(jobs, config.max_workers)


def create_all_patterns(image_paths: list[str | Path], config: PatternConfig | None = None) -> dict[Path, list[Path]]:
    """Load resources once, then create patterns for each image in turn."""
    config = config or PatternConfig()
    resources = load_resources(config)
    return {Path(path): create_patterns(path, resources, config) for path in image_paths}
