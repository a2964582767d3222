import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from kdp_cover.config.profiles import SpineProfile, get_profile
from kdp_cover.config.sizes import (
    INCH,
    MM_PER_INCH,
    BLEED_INCHES,
    BARCODE_AREA_WIDTH_INCHES,
    BARCODE_AREA_HEIGHT_INCHES,
    BARCODE_MARGIN_FROM_TRIM_EDGE_INCHES,
    DEFAULT_PAGE_COUNT,
    parse_trim_size,
)
from kdp_cover.models.design import BookMetadata

logger = logging.getLogger(__name__)

Rect = Tuple[float, float, float, float]  # x, y, width, height


def inch_to_px(inches: float, ppi: float) -> float:
    return inches * ppi


def mm_to_px(mm: float, ppi: float) -> float:
    return (mm / MM_PER_INCH) * ppi


def normalize_page_count(page_count: int) -> int:
    try:
        count = int(page_count)
    except (TypeError, ValueError):
        count = 0
    if count <= 0:
        logger.warning("Non-positive page count %r, using %d", page_count, DEFAULT_PAGE_COUNT)
        return DEFAULT_PAGE_COUNT
    return count


def compute_spine_width_mm(page_count: int, paper: str, profile: Optional[SpineProfile] = None) -> float:
    profile = profile or get_profile()
    pages = normalize_page_count(page_count)
    if paper not in profile.per_page_mm:
        logger.warning("Unknown paper type %r, using %s", paper, profile.default_paper)
        paper = profile.default_paper
    per_page = profile.per_page_mm[paper]
    return max(pages * per_page + profile.cover_mm, profile.min_mm)


@dataclass(frozen=True)
class CoverGeometry:
    ppi: float
    trim_width_in: float
    trim_height_in: float
    spine_mm: float
    trim_width_px: float
    trim_height_px: float
    spine_px: float
    bleed_px: float

    @property
    def spine_in(self) -> float:
        return self.spine_mm / MM_PER_INCH

    @property
    def total_width(self) -> float:
        return 2 * self.trim_width_px + self.spine_px + 2 * self.bleed_px

    @property
    def total_height(self) -> float:
        return self.trim_height_px + 2 * self.bleed_px

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return math.ceil(self.total_width - 1e-9), math.ceil(self.total_height - 1e-9)

    # Panels span the bleed; the back panel ends on the first spine fold.
    @property
    def back_panel(self) -> Rect:
        return (0.0, 0.0, self.trim_width_px + self.bleed_px, self.total_height)

    @property
    def spine_panel(self) -> Rect:
        return (self.trim_width_px + self.bleed_px, 0.0, self.spine_px, self.total_height)

    @property
    def front_panel(self) -> Rect:
        x = self.trim_width_px + self.bleed_px + self.spine_px
        return (x, 0.0, self.trim_width_px + self.bleed_px, self.total_height)

    @property
    def back_trim(self) -> Rect:
        return (self.bleed_px, self.bleed_px, self.trim_width_px, self.trim_height_px)

    @property
    def spine_trim(self) -> Rect:
        return (self.spine_panel[0], self.bleed_px, self.spine_px, self.trim_height_px)

    @property
    def front_trim(self) -> Rect:
        return (self.front_panel[0], self.bleed_px, self.trim_width_px, self.trim_height_px)


def compute_geometry(book: BookMetadata, ppi: float, profile: Optional[SpineProfile] = None) -> CoverGeometry:
    trim_w, trim_h = parse_trim_size(book.trim_size)
    spine_mm = compute_spine_width_mm(book.page_count, book.paper_type, profile)
    return CoverGeometry(
        ppi=ppi,
        trim_width_in=trim_w,
        trim_height_in=trim_h,
        spine_mm=spine_mm,
        trim_width_px=inch_to_px(trim_w, ppi),
        trim_height_px=inch_to_px(trim_h, ppi),
        spine_px=mm_to_px(spine_mm, ppi),
        bleed_px=inch_to_px(BLEED_INCHES, ppi),
    )


def barcode_region(geometry: CoverGeometry) -> Rect:
    """Protected barcode rectangle anchored to the back cover's bottom-right trim corner."""
    ppi = geometry.ppi
    width = inch_to_px(BARCODE_AREA_WIDTH_INCHES, ppi)
    height = inch_to_px(BARCODE_AREA_HEIGHT_INCHES, ppi)
    margin = inch_to_px(BARCODE_MARGIN_FROM_TRIM_EDGE_INCHES, ppi)
    x = geometry.bleed_px + geometry.trim_width_px - margin - width
    y = geometry.bleed_px + geometry.trim_height_px - margin - height
    return (x, y, width, height)


@dataclass
class CoverDims:
    width_pt: float
    height_pt: float
    spine_pt: float
    bleed_pt: float


def compute_cover_dims(trim_size: str, page_count: int, paper: str, bleed_pt: float = BLEED_INCHES * INCH,
                       profile: Optional[SpineProfile] = None) -> CoverDims:
    trim_w, trim_h = parse_trim_size(trim_size)
    spine_pt = compute_spine_width_mm(page_count, paper, profile) / MM_PER_INCH * INCH

    # Full cover including bleed on all outer edges: +bleed top/bottom and on left/right outer edges
    width_pt = (2 * trim_w * INCH) + spine_pt + 2 * bleed_pt
    height_pt = trim_h * INCH + 2 * bleed_pt

    return CoverDims(width_pt=width_pt, height_pt=height_pt, spine_pt=spine_pt, bleed_pt=bleed_pt)
