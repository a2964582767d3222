import json
import logging
import os

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from kdp_cover.config.profiles import get_profile, load_settings
from kdp_cover.cover.cover_renderer import export_png_bytes, generate_cover_pdf
from kdp_cover.cover.cover_validator import validate_cover
from kdp_cover.cover.geometry import compute_cover_dims, compute_geometry
from kdp_cover.cover.images import load_cover_images
from kdp_cover.models.design import BookMetadata, DesignOptions
from kdp_cover.models.target import Interactive
from kdp_cover.renderer.compositor import render_cover


def _book(title: str, author: str, pages: int, trim: str, paper: str) -> BookMetadata:
    return BookMetadata(title=title, author=author, page_count=pages, trim_size=trim, paper_type=paper.lower())


def _design(design_path: str | None) -> DesignOptions:
    if not design_path:
        return DesignOptions()
    try:
        with open(design_path, "r", encoding="utf-8") as f:
            return DesignOptions.model_validate(json.load(f))
    except (OSError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Cannot read design file {design_path}: {e}")
    except ValidationError as e:
        raise click.ClickException(f"Invalid design file {design_path}: {e}")


def _profile(name: str | None):
    try:
        return get_profile(name) if name else load_settings().profile
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--spine-profile")


def _ensure_parent(out_path: str):
    parent = os.path.dirname(out_path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def book_options(f):
    f = click.option("--paper", type=click.Choice(["white", "cream"], case_sensitive=False), default="white", show_default=True, help="Interior paper type for spine width")(f)
    f = click.option("--pages", type=int, default=100, show_default=True, help="Interior page count used to compute spine width")(f)
    f = click.option("--trim", type=str, default="6x9", show_default=True, help="Trim size in inches, e.g., 6x9")(f)
    f = click.option("--author", type=str, default="", show_default=True, help="Author name")(f)
    f = click.option("--title", type=str, default="", show_default=True, help="Book title")(f)
    return f


@click.group(help="Lay out and render KDP paperback covers (back, spine, front).")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def main(verbose: bool):
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@main.command(help="Print the spine width and full cover size for a book.")
@click.option("--trim", type=str, default="6x9", show_default=True, help="Trim size in inches, e.g., 6x9")
@click.option("--pages", type=int, default=100, show_default=True, help="Interior page count")
@click.option("--paper", type=click.Choice(["white", "cream"], case_sensitive=False), default="white", show_default=True, help="Interior paper type")
@click.option("--spine-profile", "spine_profile", type=str, default=None, help="Spine thickness table (kdp | legacy)")
def spine(trim: str, pages: int, paper: str, spine_profile: str | None):
    profile = _profile(spine_profile)
    geometry = compute_geometry(_book("", "", pages, trim, paper), 72, profile)
    dims = compute_cover_dims(trim, pages, paper.lower(), profile=profile)
    click.echo(f"📏 Spine: {geometry.spine_mm:.3f} mm ({geometry.spine_in:.4f} in) using '{profile.name}' table")
    click.echo(f"Cover size: {dims.width_pt:.2f} x {dims.height_pt:.2f} pt (bleed {dims.bleed_pt:.2f} pt)")


@main.command(help="Render the cover to PNG, either as a 72 ppi preview or at print resolution.")
@book_options
@click.option("--design", "design_path", type=str, default=None, help="Design options JSON file (camelCase keys)")
@click.option("--front-image", "front_image", type=str, default=None, help="Front cover image (URL, data: URL or file)")
@click.option("--back-image", "back_image", type=str, default=None, help="Back cover AI image (URL, data: URL or file)")
@click.option("--dpi", type=click.IntRange(min=1), default=None, help="Export DPI (defaults to KDP_COVER_DPI or 300)")
@click.option("--preview", is_flag=True, default=False, help="Render the on-screen preview instead of the print export")
@click.option("--guides", is_flag=True, default=False, help="Draw trim/fold and safe-area guides (preview only)")
@click.option("--spine-profile", "spine_profile", type=str, default=None, help="Spine thickness table (kdp | legacy)")
@click.option("--out", "out_path", type=str, default="outputs/cover.png", show_default=True, help="Output PNG path")
def render(title: str, author: str, trim: str, pages: int, paper: str, design_path: str | None, front_image: str | None,
           back_image: str | None, dpi: int | None, preview: bool, guides: bool, spine_profile: str | None, out_path: str):
    book = _book(title, author, pages, trim, paper)
    design = _design(design_path)
    profile = _profile(spine_profile)
    images = load_cover_images(front_image or design.front_cover_image_url, back_image or design.back_cover_ai_image_url)
    _ensure_parent(out_path)

    if preview:
        img = render_cover(book, design, images, Interactive(), draw_guidelines=guides, profile=profile)
        img.save(out_path, format="PNG")
        click.echo(f"✅ Generated preview {out_path} ({img.width}x{img.height} px)")
        return

    data = export_png_bytes(book, design, images, dpi, profile=profile)
    with open(out_path, "wb") as f:
        f.write(data)
    click.echo(f"✅ Generated print cover {out_path} at {dpi or load_settings().export_dpi} dpi")


@main.command(help="Render the cover and wrap it in a print-ready single-page PDF.")
@book_options
@click.option("--design", "design_path", type=str, default=None, help="Design options JSON file (camelCase keys)")
@click.option("--front-image", "front_image", type=str, default=None, help="Front cover image (URL, data: URL or file)")
@click.option("--back-image", "back_image", type=str, default=None, help="Back cover AI image (URL, data: URL or file)")
@click.option("--dpi", type=click.IntRange(min=1), default=None, help="Export DPI (defaults to KDP_COVER_DPI or 300)")
@click.option("--spine-profile", "spine_profile", type=str, default=None, help="Spine thickness table (kdp | legacy)")
@click.option("--out", "out_path", type=str, default="outputs/cover.pdf", show_default=True, help="Output PDF path")
def pdf(title: str, author: str, trim: str, pages: int, paper: str, design_path: str | None, front_image: str | None,
        back_image: str | None, dpi: int | None, spine_profile: str | None, out_path: str):
    book = _book(title, author, pages, trim, paper)
    design = _design(design_path)
    profile = _profile(spine_profile)
    images = load_cover_images(front_image or design.front_cover_image_url, back_image or design.back_cover_ai_image_url)
    _ensure_parent(out_path)
    generate_cover_pdf(book, design, out_path, images, dpi, profile=profile)
    click.echo(f"✅ Generated cover {out_path} for trim {trim}, pages {pages}, paper {paper}")


@main.command(help="Validate a cover PDF against the expected wrap-around size.")
@click.argument("pdf_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--trim", type=str, default="6x9", show_default=True, help="Trim size in inches, e.g., 6x9")
@click.option("--pages", type=int, default=100, show_default=True, help="Interior page count")
@click.option("--paper", type=click.Choice(["white", "cream"], case_sensitive=False), default="white", show_default=True, help="Interior paper type")
@click.option("--bleed-pt", "bleed_pt", type=float, default=9.0, show_default=True, help="Bleed in points (9pt = 0.125 inch)")
@click.option("--spine-profile", "spine_profile", type=str, default=None, help="Spine thickness table (kdp | legacy)")
def validate(pdf_path: str, trim: str, pages: int, paper: str, bleed_pt: float, spine_profile: str | None):
    report = validate_cover(pdf_path, trim, pages, paper.lower(), bleed_pt, _profile(spine_profile))
    click.echo(f"Cover validation for {pdf_path}")
    click.echo(f"Expected size: {report.expected_width_pt:.2f} x {report.expected_height_pt:.2f} pt (spine {report.expected_spine_pt:.2f} pt)")
    click.echo(f"Actual size:   {report.width_pt:.2f} x {report.height_pt:.2f} pt")
    if not report.issues:
        click.echo("✅ No issues found.")
    else:
        for iss in report.issues:
            click.echo(f"{iss.level.upper()}: {iss.message}")
    if not report.ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
