"""
RGBA pixel buffers and the compositing primitives the patterns are built from.

A Bitmap wraps a (height, width, 4) uint8 numpy array. Every bitmap is tagged
as either straight or premultiplied alpha; conversions between the two are
explicit, and blitting between bitmaps with different tags is refused since it
silently darkens (or brightens) edge pixels.
"""

from enum import Enum
from pathlib import Path

import numpy as np
from PIL import Image

Color = tuple[int, int, int, int]

BLACK: Color = (0, 0, 0, 255)
WHITE: Color = (255, 255, 255, 255)
TRANSPARENT: Color = (0, 0, 0, 0)

# Stamped symbols switch from white to black ink above this background luminance
INK_LUMINANCE_THRESHOLD = 0.2


class BlendMode(Enum):
    NORMAL = "normal"
    MULTIPLY = "multiply"
    SCREEN = "screen"
    LUMINOSITY = "luminosity"


class GluePosition(Enum):
    """Where the glued bitmap ends up relative to the one it is glued to."""

    TOP_LEFT = "top_left"
    TOP_CENTER = "top_center"
    BOTTOM_LEFT = "bottom_left"
    RIGHT_TOP = "right_top"
    RIGHT_CENTER = "right_center"


def relative_luminance(color: Color) -> float:
    """Rec. 709 weighted sum of the color channels, 0..1."""
    return (0.2126 * color[0] + 0.7152 * color[1] + 0.0722 * color[2]) / 255.0


class Bitmap:
    """A mutable RGBA8 pixel buffer with an explicit alpha convention."""

    def __init__(self, data: np.ndarray, premultiplied: bool = False):
        if data.ndim != 3 or data.shape[2] != 4:
            raise ValueError(f"Expected an (H, W, 4) array, got shape {data.shape}")
        self.data = np.ascontiguousarray(data, dtype=np.uint8)
        self.premultiplied = premultiplied

    @classmethod
    def new(cls, width: int, height: int, color: Color = TRANSPARENT, premultiplied: bool = False) -> "Bitmap":
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[:] = color
        return cls(data, premultiplied)

    @classmethod
    def from_image(cls, img: Image.Image) -> "Bitmap":
        return cls(np.array(img.convert("RGBA")))

    @classmethod
    def from_png_file(cls, path: str | Path) -> "Bitmap":
        with Image.open(path) as img:
            return cls.from_image(img)

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def __repr__(self) -> str:
        kind = "premultiplied" if self.premultiplied else "straight"
        return f"Bitmap({self.width}x{self.height}, {kind})"

    def copy(self) -> "Bitmap":
        return Bitmap(self.data.copy(), self.premultiplied)

    def to_image(self) -> Image.Image:
        bitmap = self.to_unpremultiplied() if self.premultiplied else self
        return Image.fromarray(bitmap.data)

    def write_png(self, path: str | Path) -> None:
        self.to_image().save(path, format="PNG")

    # --- Pixel access -----------------------------------------------------------

    def _check_point(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) is outside of {self.width}x{self.height} bitmap")

    def _check_rect(self, x: int, y: int, w: int, h: int) -> None:
        if x < 0 or y < 0 or w < 0 or h < 0 or x + w > self.width or y + h > self.height:
            raise IndexError(f"Rect ({x}, {y}, {w}, {h}) is outside of {self.width}x{self.height} bitmap")

    def get(self, x: int, y: int) -> Color:
        self._check_point(x, y)
        r, g, b, a = self.data[y, x]
        return int(r), int(g), int(b), int(a)

    def set(self, x: int, y: int, color: Color) -> None:
        self._check_point(x, y)
        self.data[y, x] = color

    def fill_rect(self, x: int, y: int, w: int, h: int, color: Color) -> None:
        self._check_rect(x, y, w, h)
        self.data[y:y + h, x:x + w] = color

    def fill_rect_clipped(self, x: int, y: int, w: int, h: int, color: Color) -> None:
        """Like fill_rect, but silently drops whatever lies outside the bitmap."""
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + w, self.width), min(y + h, self.height)
        if x0 < x1 and y0 < y1:
            self.data[y0:y1, x0:x1] = color

    def draw_rect(self, x: int, y: int, w: int, h: int, color: Color) -> None:
        """Draw a 1px rectangle outline."""
        if w <= 0 or h <= 0:
            return
        self.fill_rect_clipped(x, y, w, 1, color)
        self.fill_rect_clipped(x, y + h - 1, w, 1, color)
        self.fill_rect_clipped(x, y, 1, h, color)
        self.fill_rect_clipped(x + w - 1, y, 1, h, color)

    # --- Reshaping ------------------------------------------------------------

    def extended(self, left: int, top: int, right: int, bottom: int, fill: Color) -> "Bitmap":
        """Return a larger bitmap with this one's content translated by (left, top)."""
        if min(left, top, right, bottom) < 0:
            raise ValueError("Extension amounts must not be negative")
        result = Bitmap.new(
            self.width + left + right, self.height + top + bottom, fill, self.premultiplied
        )
        result.data[top:top + self.height, left:left + self.width] = self.data
        return result

    def crop(self, x: int, y: int, w: int, h: int) -> "Bitmap":
        self._check_rect(x, y, w, h)
        return Bitmap(self.data[y:y + h, x:x + w].copy(), self.premultiplied)

    def to_segments(self, max_width: int, max_height: int) -> tuple[list["Bitmap"], list[tuple[int, int]]]:
        """
        Split into tiles of at most max_width x max_height in row-major order.
        Returns the tiles and each tile's (column, row) index.
        """
        if max_width <= 0 or max_height <= 0:
            raise ValueError("Segment dimensions must be positive")
        segments = []
        positions = []
        for row, y in enumerate(range(0, self.height, max_height)):
            for col, x in enumerate(range(0, self.width, max_width)):
                w = min(max_width, self.width - x)
                h = min(max_height, self.height - y)
                segments.append(self.crop(x, y, w, h))
                positions.append((col, row))
        return segments, positions

    # --- Alpha conventions ----------------------------------------------------

    def to_premultiplied(self) -> "Bitmap":
        if self.premultiplied:
            raise ValueError("Bitmap is already premultiplied")
        data = self.data.astype(np.uint16)
        alpha = data[:, :, 3:4]
        data[:, :, :3] = (data[:, :, :3] * alpha + 127) // 255
        return Bitmap(data.astype(np.uint8), premultiplied=True)

    def to_unpremultiplied(self) -> "Bitmap":
        if not self.premultiplied:
            raise ValueError("Bitmap is not premultiplied")
        data = self.data.astype(np.uint32)
        alpha = data[:, :, 3:4]
        rgb = (data[:, :, :3] * 255 + alpha // 2) // np.maximum(alpha, 1)
        data[:, :, :3] = np.where(alpha > 0, np.minimum(rgb, 255), 0)
        return Bitmap(data.astype(np.uint8), premultiplied=False)

    def masked_by_premultiplied_alpha(self, mask: "Bitmap") -> "Bitmap":
        """Scale every channel by the mask's alpha, cutting this bitmap to the mask's shape."""
        if not (self.premultiplied and mask.premultiplied):
            raise ValueError("Masking requires premultiplied bitmaps")
        if self.size != mask.size:
            raise ValueError(f"Mask size {mask.size} differs from bitmap size {self.size}")
        data = (self.data.astype(np.uint16) * mask.data[:, :, 3:4] + 127) // 255
        return Bitmap(data.astype(np.uint8), premultiplied=True)

    # --- Blitting -------------------------------------------------------------

    def _check_same_convention(self, dst: "Bitmap") -> None:
        if self.premultiplied != dst.premultiplied:
            raise ValueError(
                "Cannot blit between straight and premultiplied alpha bitmaps "
                f"({self!r} -> {dst!r})"
            )

    def _overlap(self, dst: "Bitmap", pos: tuple[int, int]):
        """Source and destination slices of the visible part of a blit, or None."""
        x, y = pos
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + self.width, dst.width), min(y + self.height, dst.height)
        if x0 >= x1 or y0 >= y1:
            return None
        src = (slice(y0 - y, y1 - y), slice(x0 - x, x1 - x))
        target = (slice(y0, y1), slice(x0, x1))
        return src, target

    def copy_to(self, dst: "Bitmap", pos: tuple[int, int]) -> None:
        """Copy pixels verbatim (no blending), clipped to the destination."""
        self._check_same_convention(dst)
        overlap = self._overlap(dst, pos)
        if overlap is None:
            return
        src, target = overlap
        dst.data[target] = self.data[src]

    def blit(self, dst: "Bitmap", pos: tuple[int, int], mode: BlendMode = BlendMode.NORMAL) -> None:
        """Alpha-composite this bitmap onto dst at pos using a blend mode."""
        self._check_same_convention(dst)
        overlap = self._overlap(dst, pos)
        if overlap is None:
            return
        src, target = overlap
        source = self.data[src].astype(np.float64) / 255.0
        backdrop = dst.data[target].astype(np.float64) / 255.0

        if self.premultiplied:
            result = _composite(source, backdrop, mode)
        else:
            result = _composite(_premultiply(source), _premultiply(backdrop), mode)
            result = _unpremultiply_pixels(result)

        dst.data[target] = np.clip(np.rint(result * 255.0), 0, 255).astype(np.uint8)

    def stamp_symbol(self, symbol: "Bitmap", pos: tuple[int, int], mask_color: Color) -> None:
        """
        Stamp a symbol in black or white ink, whichever contrasts with the pixel
        under the symbol's origin. Symbol pixels equal to mask_color are skipped;
        the symbol's own colors are otherwise ignored.
        """
        x, y = pos
        if x < 0 or y < 0 or x + symbol.width > self.width or y + symbol.height > self.height:
            raise IndexError(
                f"Symbol of size {symbol.size} at {pos} does not fit into {self.width}x{self.height} bitmap"
            )
        if symbol.width == 0 or symbol.height == 0:
            return

        ink = BLACK if relative_luminance(self.get(x, y)) > INK_LUMINANCE_THRESHOLD else WHITE
        ink_mask = np.any(symbol.data != np.array(mask_color, dtype=np.uint8), axis=2)
        self.data[y:y + symbol.height, x:x + symbol.width][ink_mask] = ink


# --- Blend arithmetic (float arrays, channels 0..1) --------------------------------


def _premultiply(pixels: np.ndarray) -> np.ndarray:
    result = pixels.copy()
    result[..., :3] *= pixels[..., 3:4]
    return result


def _unpremultiply(color: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    return np.divide(color, alpha, out=np.zeros_like(color), where=alpha > 0)


def _unpremultiply_pixels(pixels: np.ndarray) -> np.ndarray:
    result = pixels.copy()
    result[..., :3] = _unpremultiply(pixels[..., :3], pixels[..., 3:4])
    return result


def _lum(color: np.ndarray) -> np.ndarray:
    return 0.3 * color[..., 0:1] + 0.59 * color[..., 1:2] + 0.11 * color[..., 2:3]


def _clip_color(color: np.ndarray) -> np.ndarray:
    lum = _lum(color)
    lowest = color.min(axis=-1, keepdims=True)
    highest = color.max(axis=-1, keepdims=True)
    with np.errstate(divide="ignore", invalid="ignore"):
        color = np.where(lowest < 0.0, lum + (color - lum) * lum / (lum - lowest), color)
        color = np.where(highest > 1.0, lum + (color - lum) * (1.0 - lum) / (highest - lum), color)
    return np.clip(color, 0.0, 1.0)


def _set_lum(color: np.ndarray, lum: np.ndarray) -> np.ndarray:
    return _clip_color(color + (lum - _lum(color)))


def _blend(mode: BlendMode, source: np.ndarray, backdrop: np.ndarray) -> np.ndarray:
    """Blend function B(cs, cb) on straight colors."""
    if mode is BlendMode.MULTIPLY:
        return source * backdrop
    if mode is BlendMode.SCREEN:
        return source + backdrop - source * backdrop
    if mode is BlendMode.LUMINOSITY:
        return _set_lum(backdrop, _lum(source))
    return source


def _composite(source: np.ndarray, backdrop: np.ndarray, mode: BlendMode) -> np.ndarray:
    """Composite premultiplied source over premultiplied backdrop."""
    sa = source[..., 3:4]
    ba = backdrop[..., 3:4]
    sc = source[..., :3]
    bc = backdrop[..., :3]

    if mode is BlendMode.NORMAL:
        color = sc + bc * (1.0 - sa)
    else:
        blended = _blend(mode, _unpremultiply(sc, sa), _unpremultiply(bc, ba))
        color = sc * (1.0 - ba) + bc * (1.0 - sa) + sa * ba * blended

    alpha = sa + ba * (1.0 - sa)
    return np.concatenate([color, alpha], axis=-1)


# --- Gluing ----------------------------------------------------------------------


def glue(a: Bitmap, b: Bitmap, position: GluePosition, gap: int = 0, fill: Color = WHITE) -> Bitmap:
    """Return a new bitmap with `a` placed at `position` of `b`, `gap` pixels apart."""
    if a.premultiplied != b.premultiplied:
        raise ValueError("Cannot glue straight and premultiplied alpha bitmaps")

    if position in (GluePosition.TOP_LEFT, GluePosition.TOP_CENTER, GluePosition.BOTTOM_LEFT):
        width = max(a.width, b.width)
        height = a.height + gap + b.height
        if position is GluePosition.BOTTOM_LEFT:
            pos_b, pos_a = (0, 0), (0, b.height + gap)
        elif position is GluePosition.TOP_LEFT:
            pos_a, pos_b = (0, 0), (0, a.height + gap)
        else:
            pos_a = ((width - a.width) // 2, 0)
            pos_b = ((width - b.width) // 2, a.height + gap)
    else:
        width = b.width + gap + a.width
        height = max(a.height, b.height)
        if position is GluePosition.RIGHT_TOP:
            pos_b, pos_a = (0, 0), (b.width + gap, 0)
        else:
            pos_b = (0, (height - b.height) // 2)
            pos_a = (b.width + gap, (height - a.height) // 2)

    result = Bitmap.new(width, height, fill, a.premultiplied)
    b.copy_to(result, pos_b)
    a.copy_to(result, pos_a)
    return result


def glue_together(bitmaps: list[Bitmap], position: GluePosition, gap: int = 0, fill: Color = WHITE) -> Bitmap:
    """Glue each bitmap onto the accumulated result of the ones before it."""
    if not bitmaps:
        return Bitmap.new(0, 0, fill)
    result = bitmaps[0]
    for bitmap in bitmaps[1:]:
        result = glue(bitmap, result, position, gap, fill)
    return result
