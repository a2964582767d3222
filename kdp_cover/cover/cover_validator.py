from dataclasses import dataclass
from typing import List, Optional

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from kdp_cover.config.profiles import SpineProfile
from kdp_cover.config.sizes import BLEED_INCHES, INCH
from kdp_cover.cover.geometry import compute_cover_dims

SIZE_TOLERANCE_PT = 0.5


@dataclass
class CoverIssue:
    level: str  # "error" | "warning" | "info"
    message: str


@dataclass
class CoverReport:
    ok: bool
    width_pt: float
    height_pt: float
    expected_width_pt: float
    expected_height_pt: float
    expected_spine_pt: float
    issues: List[CoverIssue]


def _box_inset_ok(page, box_name: str, inset: float) -> Optional[bool]:
    """None when the box is absent, else whether it sits `inset` inside the MediaBox."""
    if f"/{box_name}" not in page:
        return None
    media = page.mediabox
    box = getattr(page, box_name.lower())
    return all(
        abs(a - b) <= SIZE_TOLERANCE_PT
        for a, b in (
            (float(box.left), float(media.left) + inset),
            (float(box.bottom), float(media.bottom) + inset),
            (float(box.right), float(media.right) - inset),
            (float(box.top), float(media.top) - inset),
        )
    )


def validate_cover(pdf_path, trim_size: str, page_count: int, paper: str,
                   bleed_pt: float = BLEED_INCHES * INCH, profile: Optional[SpineProfile] = None) -> CoverReport:
    """Check a cover PDF against the wrap-around size computed for the book."""
    issues: List[CoverIssue] = []
    dims = compute_cover_dims(trim_size, page_count, paper, bleed_pt, profile)

    try:
        reader = PdfReader(pdf_path)
        pages = reader.pages
        page_total = len(pages)
    except (PdfReadError, OSError) as e:
        issues.append(CoverIssue("error", f"Cannot read PDF: {e}"))
        return CoverReport(False, 0.0, 0.0, dims.width_pt, dims.height_pt, dims.spine_pt, issues)

    if page_total == 0:
        issues.append(CoverIssue("error", "PDF has no pages."))
        return CoverReport(False, 0.0, 0.0, dims.width_pt, dims.height_pt, dims.spine_pt, issues)
    if page_total != 1:
        issues.append(CoverIssue("error", f"Cover must be a single-page PDF. Found {page_total} page(s)."))

    page = pages[0]
    media = page.mediabox
    w = float(media.width)
    h = float(media.height)

    if abs(w - dims.width_pt) > SIZE_TOLERANCE_PT or abs(h - dims.height_pt) > SIZE_TOLERANCE_PT:
        issues.append(CoverIssue(
            "error",
            f"Page size {w:.2f}x{h:.2f} pt does not match expected cover {dims.width_pt:.2f}x{dims.height_pt:.2f} pt."
        ))

    trim_ok = _box_inset_ok(page, "TrimBox", bleed_pt)
    if trim_ok is None:
        issues.append(CoverIssue("warning", "No TrimBox set."))
    elif not trim_ok:
        issues.append(CoverIssue("error", f"TrimBox is not inset by the {bleed_pt:.2f} pt bleed."))

    bleed_ok = _box_inset_ok(page, "BleedBox", 0.0)
    if bleed_ok is None:
        issues.append(CoverIssue("info", "No BleedBox set."))
    elif not bleed_ok:
        issues.append(CoverIssue("warning", "BleedBox does not match the MediaBox."))

    if reader.is_encrypted:
        issues.append(CoverIssue("error", "PDF is encrypted. Covers must be unencrypted."))

    ok = not any(i.level == "error" for i in issues)
    return CoverReport(
        ok=ok,
        width_pt=w,
        height_pt=h,
        expected_width_pt=dims.width_pt,
        expected_height_pt=dims.height_pt,
        expected_spine_pt=dims.spine_pt,
        issues=issues,
    )
