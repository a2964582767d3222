"""
Pillow-backed drawing surface

A small canvas with a save/restore state stack, a uniform scale + translate
transform and rectangular clipping. Clipping works on a cropped copy of the
current layer that is pasted back when the state is restored, so nothing
drawn inside a clip can leak outside it.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageColor, ImageDraw

logger = logging.getLogger(__name__)

Color = Union[str, Tuple[int, ...]]
Point = Tuple[float, float]


def to_rgba(color: Color, opacity: float = 1.0) -> Tuple[int, int, int, int]:
    """Parse a CSS-ish colour into RGBA; unreadable colours become black."""
    if isinstance(color, tuple):
        rgba = tuple(color) + (255,) * (4 - len(color))
    else:
        try:
            rgba = ImageColor.getcolor(color, "RGBA")
        except (ValueError, AttributeError):
            logger.warning("Invalid colour %r, using black", color)
            rgba = (0, 0, 0, 255)
    r, g, b, a = rgba[:4]
    return (r, g, b, int(round(a * max(0.0, min(1.0, opacity)))))


@dataclass
class _State:
    scale: float
    tx: float
    ty: float
    target: Image.Image
    origin: Tuple[int, int]
    clips: List[Tuple[Image.Image, Optional[Tuple[int, int]], Image.Image]] = field(default_factory=list)


class CoverCanvas:
    def __init__(self, width: int, height: int, background: Color = "#FFFFFF"):
        self.width = int(width)
        self.height = int(height)
        self.image = Image.new("RGB", (self.width, self.height), to_rgba(background)[:3])
        self._scale = 1.0
        self._tx = 0.0
        self._ty = 0.0
        self._target = self.image
        self._origin = (0, 0)
        self._clips: List[Tuple[Image.Image, Optional[Tuple[int, int]], Image.Image]] = []
        self._stack: List[_State] = []

    # -- state -------------------------------------------------------------

    @property
    def current_scale(self) -> float:
        return self._scale

    def save(self) -> None:
        self._stack.append(_State(self._scale, self._tx, self._ty, self._target, self._origin, self._clips))
        self._clips = []

    def restore(self) -> None:
        if not self._stack:
            raise RuntimeError("restore() without matching save()")
        for parent, box, layer in reversed(self._clips):
            if box is not None:
                parent.paste(layer, box)
        state = self._stack.pop()
        self._scale, self._tx, self._ty = state.scale, state.tx, state.ty
        self._target, self._origin, self._clips = state.target, state.origin, state.clips

    def translate(self, dx: float, dy: float) -> None:
        self._tx += dx * self._scale
        self._ty += dy * self._scale

    def scale(self, factor: float) -> None:
        self._scale *= factor

    def clip_rect(self, x: float, y: float, w: float, h: float) -> None:
        """Restrict drawing to a rectangle until the enclosing restore()."""
        left, top, right, bottom = self._device_box(x, y, w, h)
        tw, th = self._target.size
        left, top = max(0, left), max(0, top)
        right, bottom = min(tw, right), min(th, bottom)
        parent = self._target
        if right <= left or bottom <= top:
            # Empty clip: draw into a scratch pixel that is never pasted back.
            layer = Image.new(parent.mode, (1, 1))
            self._clips.append((parent, None, layer))
            self._origin = (self._origin[0] + tw + 1, self._origin[1] + th + 1)
        else:
            layer = parent.crop((left, top, right, bottom))
            self._clips.append((parent, (left, top), layer))
            self._origin = (self._origin[0] + left, self._origin[1] + top)
        self._target = layer

    def to_image(self) -> Image.Image:
        while self._stack:
            self.restore()
        return self.image

    # -- coordinates -------------------------------------------------------

    def _pt(self, x: float, y: float) -> Point:
        return (x * self._scale + self._tx - self._origin[0], y * self._scale + self._ty - self._origin[1])

    def _device_box(self, x: float, y: float, w: float, h: float) -> Tuple[int, int, int, int]:
        x0, y0 = self._pt(x, y)
        x1, y1 = self._pt(x + w, y + h)
        return (int(round(min(x0, x1))), int(round(min(y0, y1))), int(round(max(x0, x1))), int(round(max(y0, y1))))

    def _width(self, width: float) -> int:
        return max(1, int(round(width * self._scale)))

    def _draw(self) -> ImageDraw.ImageDraw:
        return ImageDraw.Draw(self._target, "RGBA")

    # -- primitives --------------------------------------------------------

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Color, opacity: float = 1.0) -> None:
        left, top, right, bottom = self._device_box(x, y, w, h)
        if right <= left or bottom <= top:
            return
        self._draw().rectangle([left, top, right - 1, bottom - 1], fill=to_rgba(color, opacity))

    def fill_linear_gradient(self, x: float, y: float, w: float, h: float, start: Color, end: Color,
                             direction: str = "vertical") -> None:
        left, top, right, bottom = self._device_box(x, y, w, h)
        width, height = right - left, bottom - top
        if width <= 0 or height <= 0:
            return
        c0 = np.array(to_rgba(start)[:3], dtype=np.float64)
        c1 = np.array(to_rgba(end)[:3], dtype=np.float64)
        steps = height if direction == "vertical" else width
        t = np.linspace(0.0, 1.0, steps) if steps > 1 else np.zeros(1)
        ramp = c0 + (c1 - c0) * t[:, None]
        if direction == "vertical":
            pixels = np.broadcast_to(ramp[:, None, :], (height, width, 3))
        else:
            pixels = np.broadcast_to(ramp[None, :, :], (height, width, 3))
        tile = Image.fromarray(np.ascontiguousarray(np.rint(pixels).astype(np.uint8)), "RGB")
        self._target.paste(tile, (left, top))

    def fill_polygon(self, points: Sequence[Point], color: Color) -> None:
        if len(points) < 3:
            return
        self._draw().polygon([self._pt(px, py) for px, py in points], fill=to_rgba(color))

    def fill_circle(self, cx: float, cy: float, radius: float, color: Color) -> None:
        x, y = self._pt(cx, cy)
        r = radius * self._scale
        if r <= 0:
            return
        self._draw().ellipse([x - r, y - r, x + r, y + r], fill=to_rgba(color))

    def stroke_polyline(self, points: Sequence[Point], color: Color, width: float = 1.0) -> None:
        if len(points) < 2:
            return
        self._draw().line([self._pt(px, py) for px, py in points], fill=to_rgba(color), width=self._width(width))

    def stroke_line(self, x0: float, y0: float, x1: float, y1: float, color: Color, width: float = 1.0,
                    dash: Optional[Tuple[float, float]] = None) -> None:
        if not dash or dash[0] <= 0 or dash[0] + dash[1] <= 0:
            self.stroke_polyline([(x0, y0), (x1, y1)], color, width)
            return
        on, off = dash
        length = math.hypot(x1 - x0, y1 - y0)
        if length == 0:
            return
        ux, uy = (x1 - x0) / length, (y1 - y0) / length
        pos = 0.0
        while pos < length:
            seg = min(on, length - pos)
            self.stroke_polyline([(x0 + ux * pos, y0 + uy * pos), (x0 + ux * (pos + seg), y0 + uy * (pos + seg))],
                                 color, width)
            pos += on + off

    def stroke_rect(self, x: float, y: float, w: float, h: float, color: Color, width: float = 1.0,
                    dash: Optional[Tuple[float, float]] = None) -> None:
        corners = [(x, y), (x + w, y), (x + w, y + h), (x, y + h), (x, y)]
        if not dash:
            self.stroke_polyline(corners, color, width)
            return
        for (ax, ay), (bx, by) in zip(corners, corners[1:]):
            self.stroke_line(ax, ay, bx, by, color, width, dash)

    def fill_rounded_rect(self, x: float, y: float, w: float, h: float, radius: float, color: Color,
                          opacity: float = 1.0) -> None:
        left, top, right, bottom = self._device_box(x, y, w, h)
        if right <= left or bottom <= top:
            return
        r = max(0, int(round(min(radius * self._scale, (right - left) / 2, (bottom - top) / 2))))
        self._draw().rounded_rectangle([left, top, right - 1, bottom - 1], radius=r, fill=to_rgba(color, opacity))

    def draw_text(self, text: str, x: float, y: float, font, color: Color, anchor: str = "la") -> None:
        """Draw text with (x, y) at the anchor point; "la" is top-left, "mm" is centred."""
        if not text:
            return
        device_font = font.scaled(self._scale)
        self._draw().text(self._pt(x, y), text, fill=to_rgba(color), font=device_font.pil, anchor=anchor)

    def draw_text_rotated(self, text: str, cx: float, cy: float, font, color: Color) -> None:
        """Draw text centred on (cx, cy), rotated 90 degrees clockwise."""
        if not text:
            return
        device_font = font.scaled(self._scale)
        try:
            ascent, descent = device_font.pil.getmetrics()
        except AttributeError:
            ascent, descent = int(device_font.size), 0
        width = max(1, int(math.ceil(device_font.measure(text))))
        height = max(1, ascent + descent)
        strip = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        ImageDraw.Draw(strip).text((0, 0), text, fill=to_rgba(color), font=device_font.pil, anchor="la")
        rotated = strip.transpose(Image.Transpose.ROTATE_270)
        dx, dy = self._pt(cx, cy)
        self._target.paste(rotated, (int(round(dx - rotated.width / 2)), int(round(dy - rotated.height / 2))), rotated)

    def draw_image(self, src: Image.Image, sx: float, sy: float, sw: float, sh: float,
                   dx: float, dy: float, dw: float, dh: float) -> None:
        """Copy the source box (sx, sy, sw, sh) of src onto the destination box, resampled."""
        left, top, right, bottom = self._device_box(dx, dy, dw, dh)
        if right <= left or bottom <= top or sw <= 0 or sh <= 0:
            return
        region = src.crop((int(round(sx)), int(round(sy)), int(round(sx + sw)), int(round(sy + sh))))
        region = region.convert("RGBA").resize((right - left, bottom - top), Image.Resampling.LANCZOS)
        self._target.paste(region, (left, top), region)
