"""
Background fill strategies

Each panel background is resolved once into a strategy object; the
compositor only ever calls paint(). Pattern sizes are given at 72 ppi and
multiplied by the target's dpi scale so a pattern looks the same in the
preview and in print.
"""

import logging
import math
from typing import Callable, Dict, Tuple

from kdp_cover.models.design import FlatFill, GradientFill, ImageFill, PatternFill
from kdp_cover.renderer.surface import CoverCanvas

logger = logging.getLogger(__name__)

# Smallest tile edge in px at 72 ppi.
MIN_PATTERN_SCALE = 5.0

Rect = Tuple[float, float, float, float]


def draw_stripes(c: CoverCanvas, x: float, y: float, w: float, h: float, size: float, color1: str, color2: str,
                 direction: str = "vertical"):
    extent = w if direction == "vertical" else h
    i = 0
    while i * size < extent:
        color = color1 if i % 2 == 0 else color2
        if direction == "vertical":
            c.fill_rect(x + i * size, y, size, h, color)
        else:
            c.fill_rect(x, y + i * size, w, size, color)
        i += 1


def draw_dots(c: CoverCanvas, x: float, y: float, w: float, h: float, size: float, color1: str, color2: str,
              direction: str = "vertical"):
    radius = size / 2
    step = size * 1.5
    py = radius
    while py < h:
        px = radius
        while px < w:
            c.fill_circle(x + px, y + py, radius, color2)
            px += step
        py += step


def draw_checkerboard(c: CoverCanvas, x: float, y: float, w: float, h: float, size: float, color1: str, color2: str,
                      direction: str = "vertical"):
    row = 0
    while row * size < h:
        col = 0
        while col * size < w:
            color = color1 if (col + row) % 2 == 0 else color2
            c.fill_rect(x + col * size, y + row * size, size, size, color)
            col += 1
        row += 1


def draw_diagonal(c: CoverCanvas, x: float, y: float, w: float, h: float, size: float, color1: str, color2: str,
                  direction: str = "vertical"):
    i = -h
    while i < w + h:
        c.stroke_polyline([(x + i, y), (x + i + h, y + h)], color2, size / 4)
        i += size


def draw_grid(c: CoverCanvas, x: float, y: float, w: float, h: float, size: float, color1: str, color2: str,
              direction: str = "vertical", line_width: float = 1.0):
    px = 0.0
    while px <= w:
        c.stroke_polyline([(x + px, y), (x + px, y + h)], color2, line_width)
        px += size
    py = 0.0
    while py <= h:
        c.stroke_polyline([(x, y + py), (x + w, y + py)], color2, line_width)
        py += size


def draw_circles(c: CoverCanvas, x: float, y: float, w: float, h: float, size: float, color1: str, color2: str,
                 direction: str = "vertical"):
    radius = size / 3
    py = size
    while py < h:
        px = size
        while px < w:
            c.fill_circle(x + px, y + py, radius, color2)
            px += size
        py += size


def draw_triangles(c: CoverCanvas, x: float, y: float, w: float, h: float, size: float, color1: str, color2: str,
                   direction: str = "vertical"):
    tri_h = size * 0.866
    row = 0
    while row * tri_h < h:
        py = row * tri_h
        offset = 0 if row % 2 == 0 else size / 2
        px = 0.0
        while px < w:
            apex = x + px + offset
            c.fill_polygon([(apex, y + py), (apex + size / 2, y + py + tri_h), (apex - size / 2, y + py + tri_h)], color2)
            px += size
        row += 1


def draw_hexagons(c: CoverCanvas, x: float, y: float, w: float, h: float, size: float, color1: str, color2: str,
                  direction: str = "vertical"):
    hex_h = size * 0.866
    hex_w = size * 1.5
    row = 0
    while row * hex_h * 1.5 < h + hex_h:
        py = row * hex_h * 1.5
        offset = 0 if row % 2 == 0 else hex_w / 2
        px = 0.0
        while px < w + hex_w:
            cx = x + px + offset
            cy = y + py + hex_h / 2
            points = [
                (cx + math.cos(i * math.pi / 3) * size / 2, cy + math.sin(i * math.pi / 3) * size / 2)
                for i in range(6)
            ]
            c.fill_polygon(points, color2)
            px += hex_w
        row += 1


def draw_waves(c: CoverCanvas, x: float, y: float, w: float, h: float, size: float, color1: str, color2: str,
               direction: str = "vertical", x_step: float = 5.0):
    wave_len = size * 2
    amplitude = size / 4
    py = size
    while py < h:
        points = [(x, y + py)]
        px = 0.0
        while px <= w:
            points.append((x + px, y + py + math.sin(px / wave_len * 2 * math.pi) * amplitude))
            px += x_step
        c.stroke_polyline(points, color2, size / 6)
        py += size * 2


def draw_diamonds(c: CoverCanvas, x: float, y: float, w: float, h: float, size: float, color1: str, color2: str,
                  direction: str = "vertical"):
    half = size / 2
    row = 0
    while row * size < h:
        py = row * size
        offset = 0 if row % 2 == 0 else half
        px = 0.0
        while px < w:
            cx = x + px + offset + half
            cy = y + py + half
            c.fill_polygon([(cx, cy - half), (cx + half, cy), (cx, cy + half), (cx - half, cy)], color2)
            px += size
        row += 1


PATTERNS: Dict[str, Callable] = {
    "stripes": draw_stripes,
    "dots": draw_dots,
    "checkerboard": draw_checkerboard,
    "diagonal": draw_diagonal,
    "grid": draw_grid,
    "circles": draw_circles,
    "triangles": draw_triangles,
    "hexagons": draw_hexagons,
    "waves": draw_waves,
    "diamonds": draw_diamonds,
}


def cover_fit_source_box(img_w: float, img_h: float, dst_w: float, dst_h: float) -> Rect:
    """
    Source rectangle that fills dst_w x dst_h without distortion.

    The overlong axis is cropped symmetrically; the other axis is used in
    full. Returns (sx, sy, sw, sh) in image pixels.
    """
    if img_w <= 0 or img_h <= 0 or dst_w <= 0 or dst_h <= 0:
        return (0.0, 0.0, float(max(img_w, 0)), float(max(img_h, 0)))
    img_aspect = img_w / img_h
    dst_aspect = dst_w / dst_h
    if img_aspect > dst_aspect:
        sh = float(img_h)
        sw = img_h * dst_aspect
        return ((img_w - sw) / 2, 0.0, sw, sh)
    sw = float(img_w)
    sh = img_w / dst_aspect
    return (0.0, (img_h - sh) / 2, sw, sh)


class FlatStrategy:
    def __init__(self, fill: FlatFill):
        self.fill = fill

    def paint(self, canvas: CoverCanvas, rect: Rect, dpi_scale: float = 1.0, images=None) -> bool:
        canvas.fill_rect(*rect, self.fill.color)
        return True


class GradientStrategy:
    def __init__(self, fill: GradientFill):
        self.fill = fill

    def paint(self, canvas: CoverCanvas, rect: Rect, dpi_scale: float = 1.0, images=None) -> bool:
        canvas.fill_linear_gradient(*rect, self.fill.start, self.fill.end, self.fill.direction)
        return True


class PatternStrategy:
    def __init__(self, fill: PatternFill):
        self.fill = fill
        self.draw = PATTERNS.get(fill.kind)
        if self.draw is None:
            logger.warning("Unknown pattern %r, using stripes", fill.kind)
            self.draw = draw_stripes

    def paint(self, canvas: CoverCanvas, rect: Rect, dpi_scale: float = 1.0, images=None) -> bool:
        x, y, w, h = rect
        size = max(MIN_PATTERN_SCALE, self.fill.scale) * dpi_scale
        canvas.fill_rect(x, y, w, h, self.fill.color1)
        if self.draw is draw_grid:
            draw_grid(canvas, x, y, w, h, size, self.fill.color1, self.fill.color2, self.fill.direction,
                      line_width=dpi_scale)
        elif self.draw is draw_waves:
            draw_waves(canvas, x, y, w, h, size, self.fill.color1, self.fill.color2, self.fill.direction,
                       x_step=5.0 * dpi_scale)
        else:
            self.draw(canvas, x, y, w, h, size, self.fill.color1, self.fill.color2, self.fill.direction)
        return True


class ImageStrategy:
    """Cover-fit a decoded image; paints the fallback colour when it is missing."""

    def __init__(self, fill: ImageFill):
        self.fill = fill

    def paint(self, canvas: CoverCanvas, rect: Rect, dpi_scale: float = 1.0, images=None) -> bool:
        image = getattr(images, self.fill.role, None) if images is not None else None
        if image is None:
            canvas.fill_rect(*rect, self.fill.fallback_color)
            return False
        x, y, w, h = rect
        sx, sy, sw, sh = cover_fit_source_box(image.width, image.height, w, h)
        canvas.draw_image(image, sx, sy, sw, sh, x, y, w, h)
        return True


def fill_strategy_for(fill):
    if isinstance(fill, FlatFill):
        return FlatStrategy(fill)
    if isinstance(fill, GradientFill):
        return GradientStrategy(fill)
    if isinstance(fill, PatternFill):
        return PatternStrategy(fill)
    if isinstance(fill, ImageFill):
        return ImageStrategy(fill)
    raise TypeError(f"Unsupported fill {fill!r}")
