"""Tests for pattern page rendering."""

import numpy as np
import pytest

from pixie_stitch.bitmap import BLACK, TRANSPARENT, WHITE, Bitmap
from pixie_stitch.config import COLOR_GRID_THICK, COLOR_GRID_THIN
from pixie_stitch.palette import assign_symbols, extract_palette
from pixie_stitch.pattern import (
    PatternType,
    RenderOptions,
    axis_label_positions,
    create_pattern_image,
    pattern_filename,
    render_canvas,
    render_options,
    vertical_label_text,
)

from conftest import RED, TILE, make_image

NO_TEN_GRID = RenderOptions(TILE, thick_ten_grid=False)


def colors_in(bitmap: Bitmap) -> set:
    return set(map(tuple, bitmap.data.reshape(-1, 4).tolist()))


def column_colors(bitmap: Bitmap, row: int) -> list:
    return [tuple(c) for c in bitmap.data[row].tolist()]


@pytest.fixture
def red_palette(symbols, symbols_alphanum):
    return assign_symbols(extract_palette(make_image([[RED]])), symbols, symbols_alphanum)


class TestGrid:
    @pytest.mark.parametrize("pattern_type", list(PatternType))
    def test_transparent_image_only_has_grid(self, pattern_type):
        image = Bitmap.new(4, 3, TRANSPARENT)
        canvas = render_canvas(image, extract_palette(image), pattern_type, options=NO_TEN_GRID)
        assert canvas.bitmap.size == (4 * TILE, 3 * TILE)
        assert colors_in(canvas.bitmap) <= {WHITE, COLOR_GRID_THIN}

    def test_thin_grid_closes_last_cell(self):
        image = Bitmap.new(5, 4, TRANSPARENT)
        bitmap = render_canvas(image, extract_palette(image), PatternType.BLACK_AND_WHITE, options=NO_TEN_GRID).bitmap
        vertical = [x for x, c in enumerate(column_colors(bitmap, 8)) if c == COLOR_GRID_THIN]
        assert vertical == [0, 16, 32, 48, 64, 79]
        horizontal = [y for y in range(bitmap.height) if bitmap.get(8, y) == COLOR_GRID_THIN]
        assert horizontal == [0, 16, 32, 48, 63]

    @pytest.mark.parametrize(
        "origin_x, expected",
        [(0, [0, 10, 20]), (10, [0, 10, 20]), (-20, [0, 10, 20]), (3, [7, 17]), (-4, [4, 14, 24])],
    )
    def test_ten_grid_follows_logical_coordinates(self, font, origin_x, expected):
        image = Bitmap.new(25, 3, TRANSPARENT)
        canvas = render_canvas(
            image, extract_palette(image), PatternType.BLACK_AND_WHITE, (origin_x, 0), RenderOptions(TILE), font
        )
        pad = canvas.label_padding
        row = column_colors(canvas.bitmap, pad + 24)[pad:pad + 25 * TILE]
        thick_cells = [x // TILE for x, c in enumerate(row) if c == COLOR_GRID_THICK and x % TILE == 0]
        assert thick_cells == expected

    def test_ten_grid_closing_line(self, font):
        image = Bitmap.new(5, 10, TRANSPARENT)
        canvas = render_canvas(image, extract_palette(image), PatternType.BLACK_AND_WHITE, (5, 0), RenderOptions(TILE), font)
        assert canvas.closes_ten_grid == (True, True)
        pad = canvas.label_padding
        assert canvas.bitmap.get(pad + 5 * TILE - 1, pad + 8) == COLOR_GRID_THICK
        assert canvas.bitmap.get(pad + 5 * TILE - 2, pad + 8) == COLOR_GRID_THICK

    def test_labels_need_a_font(self):
        image = Bitmap.new(2, 2, TRANSPARENT)
        with pytest.raises(ValueError):
            render_canvas(image, extract_palette(image), PatternType.COLORIZED, options=RenderOptions(TILE))

    def test_labels_add_padding(self, font):
        image = Bitmap.new(2, 2, TRANSPARENT)
        canvas = render_canvas(image, extract_palette(image), PatternType.COLORIZED, options=RenderOptions(TILE), font=font)
        assert canvas.label_padding > 0
        assert canvas.bitmap.width == 2 * TILE + 2 * canvas.label_padding
        assert BLACK in colors_in(canvas.bitmap)


class TestCells:
    def test_colorized_fill_and_symbol(self, red_palette):
        image = make_image([[RED]])
        bitmap = render_canvas(image, red_palette, PatternType.COLORIZED, options=NO_TEN_GRID).bitmap
        assert bitmap.get(8, 10) == RED
        assert bitmap.get(2, 5) == BLACK

    def test_colorized_without_symbols(self, red_palette):
        image = make_image([[RED]])
        bitmap = render_canvas(image, red_palette, PatternType.COLORIZED_NO_SYMBOLS, options=NO_TEN_GRID).bitmap
        assert colors_in(bitmap) == {RED, COLOR_GRID_THIN}

    def test_black_and_white(self, red_palette):
        image = make_image([[RED]])
        bitmap = render_canvas(image, red_palette, PatternType.BLACK_AND_WHITE, options=NO_TEN_GRID).bitmap
        assert colors_in(bitmap) == {WHITE, BLACK, COLOR_GRID_THIN}

    def test_paint_by_numbers(self, red_palette):
        image = make_image([[RED, TRANSPARENT]])
        options = render_options(PatternType.PAINT_BY_NUMBERS, TILE)
        bitmap = render_canvas(image, red_palette, PatternType.PAINT_BY_NUMBERS, options=options).bitmap
        assert bitmap.size == (2 * TILE, TILE)
        left = Bitmap(np.ascontiguousarray(bitmap.data[:, :TILE]))
        right = Bitmap(np.ascontiguousarray(bitmap.data[1:-1, TILE + 1:-1]))
        assert BLACK in colors_in(left)
        assert RED not in colors_in(bitmap)
        assert colors_in(right) == {WHITE}


class TestOriginBars:
    def test_bars_through_the_middle(self):
        image = Bitmap.new(4, 4, TRANSPARENT)
        options = RenderOptions(TILE, thick_ten_grid=False, origin_bars=True)
        canvas = render_canvas(image, extract_palette(image), PatternType.BLACK_AND_WHITE, (-2, -2), options)
        assert canvas.origin_padding == (0, 0, 0, 0)
        row = column_colors(canvas.bitmap, 8)
        assert row[30:34] == [BLACK, WHITE, WHITE, BLACK]

    def test_bars_on_the_border_get_room(self):
        image = Bitmap.new(2, 2, TRANSPARENT)
        options = RenderOptions(TILE, thick_ten_grid=False, origin_bars=True)
        canvas = render_canvas(image, extract_palette(image), PatternType.BLACK_AND_WHITE, (0, 0), options)
        assert canvas.origin_padding == (2, 2, 0, 0)
        assert canvas.bitmap.size == (2 * TILE + 2, 2 * TILE + 2)
        assert canvas.bitmap.get(0, 10) == BLACK
        assert canvas.bitmap.get(1, 10) == WHITE


class TestLabels:
    def test_vertical_labels(self):
        assert vertical_label_text(7, flip=True) == "-7"
        assert vertical_label_text(7, flip=False) == "7"

    def test_positions_include_far_edges(self):
        positions = axis_label_positions(-3, 10)
        assert (3, 0) in positions
        assert (10, 7) in positions
        assert (0, -3) not in positions

    def test_short_remainder_is_not_labelled(self):
        assert axis_label_positions(0, 3) == [(0, 0)]

    def test_options_always_flip_labels(self):
        for centered in (True, False):
            assert render_options(PatternType.COLORIZED, TILE, centered=centered).flip_vertical_labels
        assert render_options(PatternType.COLORIZED, TILE, centered=True).origin_bars
        assert not render_options(PatternType.COLORIZED, TILE, centered=False).origin_bars
        options = render_options(PatternType.PAINT_BY_NUMBERS, TILE, centered=True)
        assert not options.thick_ten_grid
        assert not options.origin_bars

    def test_top_left_pattern_labels_rows_upwards(self, font):
        image = Bitmap.new(1, 11, TRANSPARENT)
        options = render_options(PatternType.BLACK_AND_WHITE, TILE, centered=False)
        canvas = render_canvas(image, extract_palette(image), PatternType.BLACK_AND_WHITE, (0, 0), options, font)
        pad = canvas.label_padding
        assert pad == font.horizontal_advance_max * (len("-10") + 4)

        label_y = pad + 10 * TILE
        expected = Bitmap.new(pad, canvas.bitmap.height, WHITE)
        font.draw_text_centered(expected, "-10", (pad // 2, label_y))
        rows = slice(label_y - TILE, label_y + TILE)
        assert np.array_equal(canvas.bitmap.data[rows, :pad], expected.data[rows])
        assert BLACK in colors_in(Bitmap(expected.data[rows]))


class TestPatternImage:
    def test_page_banner(self, red_palette, font, font_big):
        image = make_image([[RED]])
        whole = create_pattern_image(image, red_palette, PatternType.COLORIZED, font, font_big)
        page = create_pattern_image(image, red_palette, PatternType.COLORIZED, font, font_big, segment_index=2)
        assert page.height > whole.height
        assert page.width >= whole.width

    def test_filenames(self):
        assert pattern_filename("cat", PatternType.COLORIZED) == "cat_cross_stitch_colorized.png"
        assert pattern_filename("cat", PatternType.BLACK_AND_WHITE, 3) == "cat_cross_stitch_segment_3.png"
        assert pattern_filename("cat", PatternType.PAINT_BY_NUMBERS) == "cat_paint_by_numbers.png"
