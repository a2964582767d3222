import io
import logging
from typing import Optional, Union

from PIL import Image
from pypdf import PdfReader, PdfWriter
from pypdf.generic import RectangleObject
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from kdp_cover.config.profiles import SpineProfile, load_settings
from kdp_cover.cover.geometry import CoverDims, compute_cover_dims
from kdp_cover.cover.images import CoverImages
from kdp_cover.models.design import BookMetadata, DesignOptions, ResolvedDesign
from kdp_cover.models.target import Export
from kdp_cover.renderer.compositor import render_cover
from kdp_cover.renderer.fonts import FontRegistry

logger = logging.getLogger(__name__)

Design = Union[DesignOptions, ResolvedDesign]


def render_export(
    book: BookMetadata,
    design: Design,
    images: Optional[CoverImages] = None,
    dpi: Optional[int] = None,
    fonts: Optional[FontRegistry] = None,
    profile: Optional[SpineProfile] = None,
) -> Image.Image:
    settings = load_settings()
    return render_cover(
        book, design, images,
        target=Export(dpi or settings.export_dpi),
        fonts=fonts,
        profile=profile or settings.profile,
    )


def export_png_bytes(
    book: BookMetadata,
    design: Design,
    images: Optional[CoverImages] = None,
    dpi: Optional[int] = None,
    fonts: Optional[FontRegistry] = None,
    profile: Optional[SpineProfile] = None,
) -> bytes:
    """Print-resolution PNG with its dpi recorded in the file."""
    dpi = dpi or load_settings().export_dpi
    img = render_export(book, design, images, dpi, fonts, profile)
    buf = io.BytesIO()
    img.save(buf, format="PNG", dpi=(dpi, dpi))
    return buf.getvalue()


def _set_print_boxes(pdf_bytes: bytes, dims: CoverDims) -> bytes:
    reader = PdfReader(io.BytesIO(pdf_bytes))
    writer = PdfWriter()
    for page in reader.pages:
        media = page.mediabox
        # Trim is inset by the bleed on every outer edge; bleed covers the whole page.
        page.trimbox = RectangleObject([
            float(media.left) + dims.bleed_pt,
            float(media.bottom) + dims.bleed_pt,
            float(media.right) - dims.bleed_pt,
            float(media.top) - dims.bleed_pt,
        ])
        page.bleedbox = RectangleObject([media.left, media.bottom, media.right, media.top])
        writer.add_page(page)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


def cover_pdf_bytes(
    book: BookMetadata,
    design: Design,
    images: Optional[CoverImages] = None,
    dpi: Optional[int] = None,
    fonts: Optional[FontRegistry] = None,
    profile: Optional[SpineProfile] = None,
) -> bytes:
    """
    Single-page print PDF: the export raster placed edge to edge on a page of
    the full physical cover size (bleed included), with TrimBox and BleedBox set.
    """
    settings = load_settings()
    profile = profile or settings.profile
    dims = compute_cover_dims(book.trim_size, book.page_count, book.paper_type, profile=profile)
    img = render_export(book, design, images, dpi or settings.export_dpi, fonts, profile)

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(dims.width_pt, dims.height_pt))
    c.setTitle(book.title or "Cover")
    c.setAuthor(book.author or "")
    c.drawImage(ImageReader(img), 0, 0, width=dims.width_pt, height=dims.height_pt)
    c.showPage()
    c.save()

    logger.info("Cover PDF %.2fx%.2f pt (spine %.2f pt)", dims.width_pt, dims.height_pt, dims.spine_pt)
    return _set_print_boxes(buf.getvalue(), dims)


def generate_cover_pdf(
    book: BookMetadata,
    design: Design,
    out_path: str,
    images: Optional[CoverImages] = None,
    dpi: Optional[int] = None,
    fonts: Optional[FontRegistry] = None,
    profile: Optional[SpineProfile] = None,
) -> str:
    data = cover_pdf_bytes(book, design, images, dpi, fonts, profile)
    with open(out_path, "wb") as f:
        f.write(data)
    return out_path
