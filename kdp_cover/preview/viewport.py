"""
Preview pan/zoom state

The view transform is plain data outside the compositor; every input event
produces a new transform and the session re-renders synchronously.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from PIL import Image, ImageDraw

from kdp_cover.config.profiles import SpineProfile, load_settings
from kdp_cover.cover.geometry import compute_geometry
from kdp_cover.cover.images import CoverImages
from kdp_cover.models.design import BookMetadata, DesignOptions
from kdp_cover.models.target import MAX_SCALE, MIN_SCALE, Interactive
from kdp_cover.renderer.compositor import render_cover
from kdp_cover.renderer.fonts import FontReadinessGate, FontRegistry, default_registry

logger = logging.getLogger(__name__)

WHEEL_ZOOM_FACTOR = 0.001
BUTTON_ZOOM_STEP = 0.1


def _clamp_scale(scale: float) -> float:
    return min(MAX_SCALE, max(MIN_SCALE, scale))


@dataclass(frozen=True)
class ViewTransform:
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def zoom_at(self, mouse_x: float, mouse_y: float, delta_y: float) -> "ViewTransform":
        """Wheel zoom that keeps the cover point under the cursor in place."""
        new_scale = _clamp_scale(self.scale - delta_y * WHEEL_ZOOM_FACTOR)
        world_x = (mouse_x - self.offset_x) / self.scale
        world_y = (mouse_y - self.offset_y) / self.scale
        return ViewTransform(new_scale, mouse_x - world_x * new_scale, mouse_y - world_y * new_scale)

    def zoom_in(self) -> "ViewTransform":
        return replace(self, scale=_clamp_scale(self.scale + BUTTON_ZOOM_STEP))

    def zoom_out(self) -> "ViewTransform":
        return replace(self, scale=_clamp_scale(self.scale - BUTTON_ZOOM_STEP))

    def reset(self) -> "ViewTransform":
        return ViewTransform()

    def to_target(self) -> Interactive:
        return Interactive(self.scale, self.offset_x, self.offset_y)


class PanGesture:
    """Drag-to-pan: press records the grab point, move follows it, release ends it."""

    def __init__(self):
        self._start: Optional[Tuple[float, float]] = None

    @property
    def active(self) -> bool:
        return self._start is not None

    def press(self, client_x: float, client_y: float, view: ViewTransform) -> None:
        self._start = (client_x - view.offset_x, client_y - view.offset_y)

    def move(self, client_x: float, client_y: float, view: ViewTransform) -> ViewTransform:
        if self._start is None:
            return view
        return replace(view, offset_x=client_x - self._start[0], offset_y=client_y - self._start[1])

    def release(self) -> None:
        self._start = None


class PreviewSession:
    """Holds everything the on-screen preview needs and re-renders on demand."""

    def __init__(
        self,
        book: BookMetadata,
        design: Optional[DesignOptions] = None,
        images: Optional[CoverImages] = None,
        fonts: Optional[FontRegistry] = None,
        gate: Optional[FontReadinessGate] = None,
        profile: Optional[SpineProfile] = None,
        show_guides: bool = True,
    ):
        self.book = book
        self.design = design or DesignOptions()
        self.images = images or CoverImages()
        self.fonts = fonts or default_registry()
        self.gate = gate
        self.profile = profile or load_settings().profile
        self.show_guides = show_guides
        self.view = ViewTransform()
        self.pan = PanGesture()

    def update(self, book: Optional[BookMetadata] = None, design: Optional[DesignOptions] = None,
               images: Optional[CoverImages] = None) -> Image.Image:
        if book is not None:
            self.book = book
        if design is not None:
            self.design = design
        if images is not None:
            self.images = images
        return self.render()

    def wheel(self, mouse_x: float, mouse_y: float, delta_y: float) -> Image.Image:
        self.view = self.view.zoom_at(mouse_x, mouse_y, delta_y)
        return self.render()

    def zoom_in(self) -> Image.Image:
        self.view = self.view.zoom_in()
        return self.render()

    def zoom_out(self) -> Image.Image:
        self.view = self.view.zoom_out()
        return self.render()

    def reset_view(self) -> Image.Image:
        self.view = self.view.reset()
        return self.render()

    def mouse_down(self, x: float, y: float) -> None:
        self.pan.press(x, y, self.view)

    def mouse_move(self, x: float, y: float) -> Optional[Image.Image]:
        if not self.pan.active:
            return None
        self.view = self.pan.move(x, y, self.view)
        return self.render()

    def mouse_up(self) -> None:
        self.pan.release()

    def render(self) -> Image.Image:
        if self.gate is not None and not self.gate.is_open:
            return self._loading_placeholder()
        return render_cover(
            self.book, self.design, self.images,
            target=self.view.to_target(),
            draw_guidelines=self.show_guides,
            fonts=self.fonts,
            profile=self.profile,
        )

    def _loading_placeholder(self) -> Image.Image:
        geometry = compute_geometry(self.book, Interactive().ppi, self.profile)
        img = Image.new("RGB", geometry.canvas_size, "#F3F4F6")
        draw = ImageDraw.Draw(img)
        label = "Loading fonts..."
        draw.text(((img.width - draw.textlength(label)) / 2, img.height / 2), label, fill="#6B7280")
        return img
