"""Shared test fixtures."""

from pathlib import Path

import pytest

from pixie_stitch.bitmap import BLACK, TRANSPARENT, WHITE, Bitmap
from pixie_stitch.config import PatternConfig
from pixie_stitch.fonts import create_alphanumeric_symbols, load_fonts

TILE = 16

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


def make_symbol(index: int, tile: int = TILE) -> Bitmap:
    """Black-on-white symbol with a different bar layout per index."""
    symbol = Bitmap.new(tile, tile, WHITE)
    symbol.fill_rect(2 + index % 12, 2, 2, 12, BLACK)
    symbol.fill_rect(2, 2 + (index // 12) % 12, 12, 1, BLACK)
    return symbol


def make_image(rows: list[list[tuple[int, int, int, int]]]) -> Bitmap:
    """Bitmap from rows of RGBA tuples."""
    bitmap = Bitmap.new(len(rows[0]), len(rows), TRANSPARENT)
    for y, row in enumerate(rows):
        for x, color in enumerate(row):
            bitmap.set(x, y, color)
    return bitmap


def write_resources(resource_dir: Path, symbol_count: int) -> Path:
    resource_dir.mkdir(parents=True, exist_ok=True)
    symbols_dir = resource_dir / "symbols"
    symbols_dir.mkdir(exist_ok=True)
    for i in range(symbol_count):
        make_symbol(i).write_png(symbols_dir / f"{i + 1}.png")

    stitch = Bitmap.new(10, 10, TRANSPARENT)
    stitch.fill_rect(2, 2, 6, 6, (220, 220, 220, 255))
    luminance = Bitmap.new(10, 10, (128, 128, 128, 255))
    for i in range(1, 4):
        stitch.write_png(resource_dir / f"stitch{i}.png")
        luminance.write_png(resource_dir / f"stitch{i}_lum.png")
    Bitmap.new(64, 64, (240, 235, 220, 255)).write_png(resource_dir / "aida_8x8.png")
    return resource_dir


@pytest.fixture(scope="session")
def fonts():
    return load_fonts(11)


@pytest.fixture(scope="session")
def font(fonts):
    return fonts[0]


@pytest.fixture(scope="session")
def font_big(fonts):
    return fonts[1]


@pytest.fixture
def symbols() -> list[Bitmap]:
    return [make_symbol(i) for i in range(40)]


@pytest.fixture(scope="session")
def symbols_alphanum(font) -> list[Bitmap]:
    return create_alphanumeric_symbols(font, TILE)


@pytest.fixture
def resource_dir(tmp_path) -> Path:
    return write_resources(tmp_path / "resources", 6)


@pytest.fixture
def config(tmp_path, resource_dir) -> PatternConfig:
    return PatternConfig(
        output_root=tmp_path / "out",
        resource_dir=resource_dir,
        max_workers=4,
        verbose=False,
    )
