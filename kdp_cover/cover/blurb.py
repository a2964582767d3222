"""
Blurb box solver

Keeps the back-cover text box clear of the barcode area. Positions are
percentages of the back cover trim height: the box centre sits at
50 + 50 * offset / 100, and its bottom edge (centre + height / 2) must stay
at or above the safe line, which is the barcode's top edge less a
10 point buffer.

Percentages are computed from 72 ppi measurements so a saved design lays
out the same in the preview and in a 300 dpi export.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

from kdp_cover.config.sizes import (
    RENDER_PPI,
    BARCODE_AREA_WIDTH_INCHES,
    BARCODE_AREA_HEIGHT_INCHES,
    BARCODE_MARGIN_FROM_TRIM_EDGE_INCHES,
    BARCODE_SAFETY_BUFFER_PERCENT,
)
from kdp_cover.cover.geometry import CoverGeometry
from kdp_cover.models.design import BlurbBoxStyle
from kdp_cover.renderer.text_layout import LINE_HEIGHT_FACTOR, measure_text_height

logger = logging.getLogger(__name__)

MIN_HEIGHT_PERCENT = 10
MIN_OFFSET_PERCENT = -50
DEFAULT_HEIGHT_PERCENT = 30


@dataclass(frozen=True)
class BarcodeConstraints:
    barcode_width_percent: float
    barcode_height_percent: float
    margin_percent: float
    top_boundary_percent: float
    max_safe_vertical_percent: float
    safety_buffer_percent: float = BARCODE_SAFETY_BUFFER_PERCENT

    @classmethod
    def for_trim(cls, trim_width_in: float, trim_height_in: float) -> "BarcodeConstraints":
        width_pct = BARCODE_AREA_WIDTH_INCHES / trim_width_in * 100
        height_pct = BARCODE_AREA_HEIGHT_INCHES / trim_height_in * 100
        margin_pct = BARCODE_MARGIN_FROM_TRIM_EDGE_INCHES / trim_height_in * 100
        top = 100 - margin_pct - height_pct
        return cls(
            barcode_width_percent=width_pct,
            barcode_height_percent=height_pct,
            margin_percent=margin_pct,
            top_boundary_percent=top,
            max_safe_vertical_percent=top - BARCODE_SAFETY_BUFFER_PERCENT,
        )

    def would_overlap(self, height_percent: float, y_offset_percent: float) -> bool:
        return box_center_percent(y_offset_percent) + height_percent / 2 > self.max_safe_vertical_percent


def box_center_percent(y_offset_percent: float) -> float:
    return 50 + 50 * y_offset_percent / 100


@dataclass(frozen=True)
class BlurbProposal:
    height_percent: float
    y_offset_percent: float


@dataclass(frozen=True)
class BlurbSolution:
    height_percent: float
    y_offset_percent: float
    corrected: bool = False
    feasible: bool = True


def auto_height_percent(text: str, measure: Callable[[str], float], font_size: float, trim_width_px: float,
                        trim_height_px: float, padding: float, left_margin_percent: float) -> int:
    """Box height (% of trim height) that fits the text at the box's draw width, never below 10."""
    if not text or not text.strip():
        return DEFAULT_HEIGHT_PERCENT
    margin = trim_width_px * left_margin_percent / 100
    text_width = trim_width_px - 2 * margin - 2 * padding
    text_height = measure_text_height(text, measure, text_width, font_size * LINE_HEIGHT_FACTOR)
    percent = (text_height + 2 * padding) / trim_height_px * 100
    return max(MIN_HEIGHT_PERCENT, int(round(percent)))


def optimal_y_offset(height_percent: float, constraints: BarcodeConstraints) -> int:
    """Offset closest to centred (0) that keeps the box bottom on the safe side, clamped to [-50, 0]."""
    max_center = constraints.max_safe_vertical_percent - height_percent / 2
    max_offset = (max_center - 50) * 100 / 50
    return int(min(0, max(MIN_OFFSET_PERCENT, math.floor(max_offset))))


def solve(proposal: BlurbProposal, constraints: BarcodeConstraints) -> BlurbSolution:
    """
    Return the nearest safe (height, offset) for a proposed box.

    Searches in whole percent steps: shrink the height first (not below 10),
    then raise the box (offset down to -50). If neither alone is enough the
    box is raised fully and the height cut to what still fits.
    """
    height = proposal.height_percent
    offset = proposal.y_offset_percent
    if not constraints.would_overlap(height, offset):
        return BlurbSolution(height, offset)

    candidate = height
    while candidate >= MIN_HEIGHT_PERCENT:
        if not constraints.would_overlap(candidate, offset):
            return BlurbSolution(candidate, offset, corrected=True)
        candidate -= 1

    candidate = offset
    while candidate >= MIN_OFFSET_PERCENT:
        if not constraints.would_overlap(height, candidate):
            return BlurbSolution(height, candidate, corrected=True)
        candidate -= 1

    room = 2 * (constraints.max_safe_vertical_percent - box_center_percent(MIN_OFFSET_PERCENT))
    fitted = math.floor(room)
    if fitted <= 0:
        logger.warning("Trim too short for a blurb box above the barcode area")
        return BlurbSolution(0, MIN_OFFSET_PERCENT, corrected=True, feasible=False)
    return BlurbSolution(fitted, MIN_OFFSET_PERCENT, corrected=True)


@dataclass(frozen=True)
class BlurbPlacement:
    x: float
    y: float
    width: float
    height: float
    padding: float
    corner_radius: float
    solution: BlurbSolution

    @property
    def text_x(self) -> float:
        return self.x + self.padding

    @property
    def text_y(self) -> float:
        return self.y + self.padding

    @property
    def text_width(self) -> float:
        return self.width - 2 * self.padding


def solve_for_style(style: BlurbBoxStyle, text: str, font_size: float, geometry: CoverGeometry,
                    measure: Callable[[str], float]) -> BlurbSolution:
    """
    Height and offset for the box described by style.

    With auto layout the height comes from the text and the offset from
    optimal_y_offset(); otherwise the stored values are corrected by solve().
    measure must be for the unscaled (72 ppi) font.
    """
    constraints = BarcodeConstraints.for_trim(geometry.trim_width_in, geometry.trim_height_in)
    if style.auto_layout:
        height = auto_height_percent(
            text, measure, font_size,
            geometry.trim_width_in * RENDER_PPI, geometry.trim_height_in * RENDER_PPI,
            style.padding, style.left_margin_percent,
        )
        proposal = BlurbProposal(height, optimal_y_offset(height, constraints))
    else:
        proposal = BlurbProposal(style.height_percent, style.y_offset_percent)
    return solve(proposal, constraints)


def place_blurb_box(style: BlurbBoxStyle, text: str, font_size: float, geometry: CoverGeometry,
                    measure: Callable[[str], float], dpi_scale: float = 1.0) -> Optional[BlurbPlacement]:
    """Box rectangle in target pixels, or None when no safe box exists."""
    solution = solve_for_style(style, text, font_size, geometry, measure)
    if not solution.feasible:
        return None
    if solution.corrected and not style.auto_layout:
        logger.info("Blurb box moved clear of the barcode area: height %s%%, offset %s%%",
                    solution.height_percent, solution.y_offset_percent)

    trim_x, trim_y, trim_w, trim_h = geometry.back_trim
    height = trim_h * solution.height_percent / 100
    center_y = trim_y + trim_h / 2 + trim_h / 2 * solution.y_offset_percent / 100

    if not style.auto_layout and style.width_percent is not None:
        width = trim_w * style.width_percent / 100
        center_x = trim_x + trim_w / 2 + trim_w / 2 * style.x_offset_percent / 100
        x = center_x - width / 2
    else:
        margin = trim_w * style.left_margin_percent / 100
        width = trim_w - 2 * margin
        x = trim_x + margin

    return BlurbPlacement(
        x=x,
        y=center_y - height / 2,
        width=width,
        height=height,
        padding=style.padding * dpi_scale,
        corner_radius=style.corner_radius * dpi_scale,
        solution=solution,
    )
