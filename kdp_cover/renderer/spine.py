import logging
from typing import Callable, List, Optional, Tuple

from kdp_cover.config.sizes import SAFE_MARGIN_SPINE_INCHES, SPINE_TEXT_INSET_INCHES
from kdp_cover.cover.geometry import inch_to_px

logger = logging.getLogger(__name__)

MIN_SPINE_FONT_PX = 5.0
AUTHOR_TITLE_OFFSET = 0.25  # fraction of trim height either side of centre

SizedMeasure = Callable[[str, float], float]
SpinePlacement = Tuple[str, float, float]  # text, centre x, centre y


def spine_label(title: str, author: str) -> str:
    title = (title or "").strip()
    author = (author or "").strip()
    if title and author:
        return f"{title} - {author}"
    if title or author:
        return title or author
    return "Title - Author"


def spine_text_limits(spine_w: float, trim_h: float, ppi: float) -> Tuple[float, float]:
    """(length available along the spine, thickness available across it) in px."""
    margin = inch_to_px(SAFE_MARGIN_SPINE_INCHES, ppi)
    inset = inch_to_px(SPINE_TEXT_INSET_INCHES, ppi)
    available_length = max(1.0, trim_h - 2 * margin - 2 * inset)
    available_thickness = spine_w - 2 * margin
    return available_length, available_thickness


def autofit_spine_font(title: str, author: str, requested_size: float, spine_w: float, trim_h: float, ppi: float,
                       measure: SizedMeasure, label: Optional[str] = None) -> float:
    """
    Largest font size (px) at which the spine label fits along the spine.

    Steps down 1px at a time from the requested size, never below 5px, then
    caps the result at the spine thickness. The cap is kept at 1px or more
    so a font can always be built, even for spines thinner than the margins.
    """
    text = label or spine_label(title, author)
    available_length, available_thickness = spine_text_limits(spine_w, trim_h, ppi)

    size = float(requested_size)
    if measure(text, size) > available_length:
        candidate = size
        while candidate > MIN_SPINE_FONT_PX:
            if measure(text, candidate) <= available_length:
                break
            candidate -= 1
        size = max(candidate, MIN_SPINE_FONT_PX) if size > MIN_SPINE_FONT_PX else size
        logger.debug("Spine text %r shrunk from %.1fpx to %.1fpx", text, requested_size, size)

    if size > available_thickness:
        size = max(1.0, available_thickness)
    return size


def spine_placements(title: str, author: str, spine_trim: Tuple[float, float, float, float],
                     override: Optional[str] = None) -> List[SpinePlacement]:
    """
    Centre points for the rotated spine labels.

    With both title and author they are drawn separately: the title a quarter
    of the trim height above centre, the author a quarter below.
    """
    x, y, w, h = spine_trim
    cx = x + w / 2
    cy = y + h / 2
    if override:
        return [(override, cx, cy)]
    title = (title or "").strip()
    author = (author or "").strip()
    if title and author:
        return [
            (title, cx, cy - h * AUTHOR_TITLE_OFFSET),
            (author, cx, cy + h * AUTHOR_TITLE_OFFSET),
        ]
    if title or author:
        return [(title or author, cx, cy)]
    return []
