# KDP paperback cover constants. Linear sizes are in inches unless noted.
# 72 points = 1 inch; the interactive preview renders at 72 px per inch.

import logging
from typing import Dict, Tuple

logger = logging.getLogger(__name__)

INCH = 72.0
RENDER_PPI = 72
MM_PER_INCH = 25.4

BLEED_INCHES = 0.125
SAFE_MARGIN_COVER_INCHES = 0.25  # critical content on front/back
SAFE_MARGIN_SPINE_INCHES = 0.0625  # from each spine fold
SPINE_TEXT_INSET_INCHES = 0.125  # extra inset at both spine ends

BARCODE_AREA_WIDTH_INCHES = 2.0
BARCODE_AREA_HEIGHT_INCHES = 1.2
BARCODE_MARGIN_FROM_TRIM_EDGE_INCHES = 0.25
BARCODE_SAFETY_BUFFER_PERCENT = 10.0

DEFAULT_TRIM_SIZE = "6x9"
DEFAULT_PAGE_COUNT = 100

# Trim sizes offered by the editor (width x height).
SIZES: Dict[str, Dict[str, float]] = {
    "5x8": {"width": 5.0, "height": 8.0},
    "5.25x8": {"width": 5.25, "height": 8.0},
    "5.5x8.5": {"width": 5.5, "height": 8.5},
    "6x9": {"width": 6.0, "height": 9.0},
}


def parse_trim_size(trim_size: str) -> Tuple[float, float]:
    """Parse "WxH" into inches, falling back to 6x9 for anything unusable."""
    try:
        parts = str(trim_size).lower().split("x")
        if len(parts) == 2:
            width, height = float(parts[0]), float(parts[1])
            if width > 0 and height > 0:
                return width, height
    except ValueError:
        pass
    logger.warning("Unparseable trim size %r, using %s", trim_size, DEFAULT_TRIM_SIZE)
    conf = SIZES[DEFAULT_TRIM_SIZE]
    return conf["width"], conf["height"]
