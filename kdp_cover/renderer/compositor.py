"""
Cover compositor

Draws back cover, spine and front cover onto one canvas in a fixed order.
The same code path serves the interactive preview (72 ppi geometry under a
pan/zoom transform) and print export (geometry at the export dpi, with
every size from the design multiplied by dpi / 72).
"""

import logging
from typing import Optional, Union

from PIL import Image

from kdp_cover.config.profiles import SpineProfile, load_settings
from kdp_cover.config.sizes import SAFE_MARGIN_COVER_INCHES, SAFE_MARGIN_SPINE_INCHES
from kdp_cover.cover.blurb import place_blurb_box
from kdp_cover.cover.geometry import CoverGeometry, barcode_region, compute_geometry, inch_to_px
from kdp_cover.cover.images import CoverImages
from kdp_cover.models.design import BackCoverStyle, BookMetadata, DesignOptions, ImageFill, ResolvedDesign, SpineStyle
from kdp_cover.models.target import Export, Interactive, RenderTarget
from kdp_cover.renderer.fills import fill_strategy_for
from kdp_cover.renderer.fonts import FontRegistry, default_registry
from kdp_cover.renderer.spine import autofit_spine_font, spine_placements
from kdp_cover.renderer.surface import CoverCanvas
from kdp_cover.renderer.text_layout import LINE_HEIGHT_FACTOR, draw_text_block

logger = logging.getLogger(__name__)

BARCODE_FILL = "#FFFFFF"
BARCODE_OUTLINE = (100, 100, 100, 204)
GUIDE_COLOR = (0, 255, 255, 178)
SAFE_AREA_COLOR = (255, 0, 0, 128)
PLACEHOLDER_COLOR = "#AAAAAA"
PLACEHOLDER_FONT = "Arial"
PLACEHOLDER_FONT_SIZE = 10.0
FRONT_PLACEHOLDER = "Front Cover Area"
BACK_IMAGE_PLACEHOLDER = "Back Cover Image Unavailable"
FREE_TEXT_PADDING_INCHES = 0.5


def render_cover(
    book: BookMetadata,
    design: Union[DesignOptions, ResolvedDesign],
    images: Optional[CoverImages] = None,
    target: Optional[RenderTarget] = None,
    draw_guidelines: bool = False,
    fonts: Optional[FontRegistry] = None,
    profile: Optional[SpineProfile] = None,
) -> Image.Image:
    """Render the full wrap-around cover and return it as an RGB image."""
    resolved = design.resolve() if isinstance(design, DesignOptions) else design
    images = images or CoverImages()
    target = target or Interactive()
    fonts = fonts or default_registry()
    profile = profile or load_settings().profile

    geometry = compute_geometry(book, target.ppi, profile)
    width, height = geometry.canvas_size
    canvas = CoverCanvas(width, height)
    dpi_scale = target.dpi_scale

    canvas.save()
    if isinstance(target, Interactive):
        canvas.translate(target.offset_x, target.offset_y)
        canvas.scale(target.scale)

    _draw_back(canvas, geometry, resolved.back, images, fonts, dpi_scale)
    _draw_spine(canvas, geometry, book, resolved.spine, fonts, dpi_scale)
    _draw_front(canvas, geometry, images, fonts, dpi_scale)

    if draw_guidelines and not isinstance(target, Export):
        _draw_guidelines(canvas, geometry)
    canvas.restore()

    if isinstance(target, Export):
        logger.info("Rendered cover %dx%d px at %d dpi (spine %.3f mm)", width, height, target.dpi, geometry.spine_mm)
    return canvas.to_image()


def _draw_back(canvas: CoverCanvas, geometry: CoverGeometry, back: BackCoverStyle, images: CoverImages,
               fonts: FontRegistry, dpi_scale: float):
    panel = geometry.back_panel
    trim_x, trim_y, trim_w, trim_h = geometry.back_trim

    canvas.save()
    canvas.clip_rect(*panel)
    painted = fill_strategy_for(back.background).paint(canvas, panel, dpi_scale, images)
    if not painted and isinstance(back.background, ImageFill):
        label_font = fonts.get_font(PLACEHOLDER_FONT, PLACEHOLDER_FONT_SIZE * dpi_scale)
        canvas.draw_text(BACK_IMAGE_PLACEHOLDER, trim_x + trim_w / 2, trim_y + trim_h / 2, label_font,
                         PLACEHOLDER_COLOR, anchor="mm")
    canvas.restore()

    bx, by, bw, bh = barcode_region(geometry)
    canvas.fill_rect(bx, by, bw, bh, BARCODE_FILL)
    canvas.stroke_rect(bx, by, bw, bh, BARCODE_OUTLINE, width=dpi_scale, dash=(2 * dpi_scale, 2 * dpi_scale))

    font_size = back.font_size * dpi_scale
    font = fonts.get_font(back.font, font_size)
    line_height = font_size * LINE_HEIGHT_FACTOR

    if back.blurb.enabled:
        base_font = fonts.get_font(back.font, back.font_size)
        placement = place_blurb_box(back.blurb, back.text, back.font_size, geometry, base_font.measure, dpi_scale)
        if placement is None:
            return
        canvas.fill_rounded_rect(placement.x, placement.y, placement.width, placement.height,
                                 placement.corner_radius, back.blurb.fill_color, back.blurb.opacity)
        if back.text:
            draw_text_block(canvas, back.text, font, back.color, placement.text_x, placement.text_y,
                            placement.text_width, line_height, back.align)
    elif back.text:
        padding = inch_to_px(FREE_TEXT_PADDING_INCHES, geometry.ppi)
        draw_text_block(canvas, back.text, font, back.color, trim_x + padding, trim_y + padding,
                        trim_w - 2 * padding, line_height, back.align)


def _draw_spine(canvas: CoverCanvas, geometry: CoverGeometry, book: BookMetadata, spine: SpineStyle,
                fonts: FontRegistry, dpi_scale: float):
    panel = geometry.spine_panel
    fill_strategy_for(spine.background).paint(canvas, panel, dpi_scale)

    override = spine.text or None
    placements = spine_placements(book.title, book.author, geometry.spine_trim, override)
    if not placements:
        return

    size = autofit_spine_font(
        book.title, book.author, spine.font_size * dpi_scale,
        geometry.spine_px, geometry.trim_height_px, geometry.ppi,
        lambda text, px: fonts.get_font(spine.font, px).measure(text),
        label=override,
    )
    font = fonts.get_font(spine.font, size)

    canvas.save()
    canvas.clip_rect(*geometry.spine_trim)
    for text, cx, cy in placements:
        canvas.draw_text_rotated(text, cx, cy, font, spine.color)
    canvas.restore()


def _draw_front(canvas: CoverCanvas, geometry: CoverGeometry, images: CoverImages, fonts: FontRegistry,
                dpi_scale: float):
    panel = geometry.front_panel
    canvas.fill_rect(*panel, "#FFFFFF")

    if images.front is not None:
        canvas.save()
        canvas.clip_rect(*panel)
        fill_strategy_for(ImageFill(role="front")).paint(canvas, panel, dpi_scale, images)
        canvas.restore()
        return

    trim_x, trim_y, trim_w, trim_h = geometry.front_trim
    label_font = fonts.get_font(PLACEHOLDER_FONT, PLACEHOLDER_FONT_SIZE * dpi_scale)
    canvas.draw_text(FRONT_PLACEHOLDER, trim_x + trim_w / 2, trim_y + trim_h / 2, label_font,
                     PLACEHOLDER_COLOR, anchor="mm")


def _draw_guidelines(canvas: CoverCanvas, geometry: CoverGeometry):
    width, height = geometry.total_width, geometry.total_height
    bleed = geometry.bleed_px
    spine_x, _, spine_w, _ = geometry.spine_panel
    dash = (3, 3)

    for x in (bleed, spine_x, spine_x + spine_w, width - bleed):
        canvas.stroke_line(x, 0, x, height, GUIDE_COLOR, 0.5, dash)
    for y in (bleed, height - bleed):
        canvas.stroke_line(0, y, width, y, GUIDE_COLOR, 0.5, dash)

    cover_margin = inch_to_px(SAFE_MARGIN_COVER_INCHES, geometry.ppi)
    spine_margin = inch_to_px(SAFE_MARGIN_SPINE_INCHES, geometry.ppi)
    for x, y, w, h in (geometry.back_trim, geometry.front_trim):
        canvas.stroke_rect(x + cover_margin, y + cover_margin, w - 2 * cover_margin, h - 2 * cover_margin,
                           SAFE_AREA_COLOR, 0.5, dash)
    x, y, w, h = geometry.spine_trim
    canvas.stroke_rect(x + spine_margin, y + cover_margin, w - 2 * spine_margin, h - 2 * cover_margin,
                       SAFE_AREA_COLOR, 0.5, dash)
