"""
Export API endpoints

Render covers to print-ready PNG or PDF and check blurb box placement.
"""

import logging
import re
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from kdp_cover.config.profiles import get_profile, load_settings
from kdp_cover.config.sizes import RENDER_PPI
from kdp_cover.cover.blurb import BarcodeConstraints, solve_for_style
from kdp_cover.cover.cover_renderer import cover_pdf_bytes, export_png_bytes
from kdp_cover.cover.geometry import compute_geometry
from kdp_cover.cover.images import load_cover_images
from kdp_cover.renderer.fonts import FontRegistry, default_registry
from web.backend.models.export import BlurbSolveRequest, BlurbSolveResponse, ExportRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def get_fonts() -> FontRegistry:
    return default_registry()


def _filename(title: str, ext: str) -> str:
    stem = re.sub(r"[^A-Za-z0-9_-]+", "_", title.strip()) or "cover"
    return f"{stem}_cover.{ext}"


def _profile(name):
    try:
        return get_profile(name) if name else load_settings().profile
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _images(request: ExportRequest):
    return load_cover_images(
        request.front_image or request.design.front_cover_image_url,
        request.back_image or request.design.back_cover_ai_image_url,
    )


@router.post("/png")
def export_png(request: ExportRequest, fonts: FontRegistry = Depends(get_fonts)):
    """
    Export the cover as a print-resolution PNG.

    Args:
        request: Book, design and render options
    """
    profile = _profile(request.spine_profile)
    try:
        data = export_png_bytes(request.book, request.design, _images(request), request.dpi, fonts, profile)
    except Exception as e:
        logger.exception("PNG export failed")
        raise HTTPException(status_code=500, detail=str(e))
    return Response(
        content=data,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{_filename(request.book.title, "png")}"'},
    )


@router.post("/pdf")
def export_pdf(request: ExportRequest, fonts: FontRegistry = Depends(get_fonts)):
    """
    Export the cover as a single-page PDF with TrimBox and BleedBox.

    Args:
        request: Book, design and render options
    """
    profile = _profile(request.spine_profile)
    try:
        data = cover_pdf_bytes(request.book, request.design, _images(request), request.dpi, fonts, profile)
    except Exception as e:
        logger.exception("PDF export failed")
        raise HTTPException(status_code=500, detail=str(e))
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{_filename(request.book.title, "pdf")}"'},
    )


@router.post("/blurb/solve", response_model=BlurbSolveResponse)
def solve_blurb(request: BlurbSolveRequest, fonts: FontRegistry = Depends(get_fonts)):
    """Return the blurb box height/offset that keeps clear of the barcode area."""
    back = request.design.resolve().back
    geometry = compute_geometry(request.book, RENDER_PPI)
    font = fonts.get_font(back.font, back.font_size)
    solution = solve_for_style(back.blurb, back.text, back.font_size, geometry, font.measure)
    constraints = BarcodeConstraints.for_trim(geometry.trim_width_in, geometry.trim_height_in)
    return BlurbSolveResponse(
        height_percent=solution.height_percent,
        y_offset_percent=solution.y_offset_percent,
        corrected=solution.corrected,
        feasible=solution.feasible,
        max_safe_vertical_percent=constraints.max_safe_vertical_percent,
    )
