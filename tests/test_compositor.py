import math
import time

import pytest
from PIL import Image

from kdp_cover.config.profiles import KDP
from kdp_cover.cover.geometry import barcode_region, compute_geometry
from kdp_cover.cover.images import CoverImages
from kdp_cover.models.design import BookMetadata, DesignOptions
from kdp_cover.models.target import Export, Interactive
from kdp_cover.renderer.compositor import render_cover

BACK = "#123456"
BACK_RGB = (0x12, 0x34, 0x56)
SPINE = "#AA0000"
SPINE_RGB = (0xAA, 0, 0)


@pytest.fixture
def design():
    return DesignOptions(backCoverBackgroundColor=BACK, spineBackgroundColor=SPINE)


def render(book, design, fonts, **kwargs):
    return render_cover(book, design, fonts=fonts, profile=KDP, **kwargs)


def test_interactive_canvas_matches_72_ppi_geometry(book, design, fonts):
    img = render(book, design, fonts)
    assert img.size == compute_geometry(book, 72, KDP).canvas_size
    assert img.mode == "RGB"


def test_export_canvas_is_dpi_scaled(book, design, fonts):
    img = render(book, design, fonts, target=Export(150))
    preview = compute_geometry(book, 72, KDP)
    assert abs(img.width - preview.total_width * 150 / 72) <= 1
    assert abs(img.height - preview.total_height * 150 / 72) <= 1


def test_panels_are_painted(book, design, fonts):
    img = render(book, design, fonts)
    g = compute_geometry(book, 72, KDP)
    spine_x, _, spine_w, _ = g.spine_panel
    assert img.getpixel((20, 20)) == BACK_RGB
    assert img.getpixel((int(spine_x + spine_w / 2), 2)) == SPINE_RGB
    assert img.getpixel((int(g.front_panel[0]) + 5, 5)) == (255, 255, 255)


def test_barcode_box_is_white_over_background(book, design, fonts):
    for target in (Interactive(), Export(100)):
        img = render(book, design, fonts, target=target)
        x, y, w, h = barcode_region(compute_geometry(book, target.ppi, KDP))
        assert img.getpixel((int(x + w / 2), int(y + h / 2))) == (255, 255, 255)


def test_back_fill_does_not_bleed_into_spine(fonts):
    # No title or author, so the spine panel holds nothing but its own fill.
    book = BookMetadata(page_count=200, trim_size="6x9", paper_type="white")
    design = DesignOptions(backCoverBackgroundType="pattern", backCoverPatternType="checkerboard",
                           backCoverPatternColor1="#000000", backCoverPatternColor2="#00FF00",
                           spineBackgroundColor=SPINE)
    img = render(book, design, fonts)
    g = compute_geometry(book, 72, KDP)
    back_x, _, back_w, _ = g.back_panel
    spine_x, _, spine_w, spine_h = g.spine_panel
    xs = range(math.ceil(spine_x), math.floor(spine_x + spine_w))
    spine_pixels = {img.getpixel((x, y)) for x in xs for y in range(0, int(spine_h), 7)}
    assert spine_pixels == {SPINE_RGB}
    last_back_column = {img.getpixel((math.floor(back_x + back_w) - 1, y)) for y in range(0, 60)}
    assert last_back_column <= {(0, 0, 0), (0, 255, 0)}


def test_spine_text_is_drawn(book, design, fonts):
    img = render(book, DesignOptions(spineBackgroundColor="#FFFFFF", spineColor="#000000"), fonts)
    g = compute_geometry(book, 72, KDP)
    x, y, w, h = g.spine_trim
    strip = img.crop((int(x), int(y), int(x + w), int(y + h))).convert("L")
    assert strip.getextrema()[0] < 128


def test_front_image_fills_front_panel(book, design, fonts):
    images = CoverImages(front=Image.new("RGB", (60, 90), (255, 0, 0)))
    img = render(book, design, fonts, images=images)
    g = compute_geometry(book, 72, KDP)
    fx, _, fw, fh = g.front_panel
    assert img.getpixel((int(fx + fw / 2), int(fh / 2))) == (255, 0, 0)
    assert img.getpixel((img.width - 2, img.height - 2)) == (255, 0, 0)


def test_missing_ai_image_uses_fallback_colour(book, fonts):
    design = DesignOptions(backCoverBackgroundType="ai", backCoverBackgroundColor="#336699")
    img = render(book, design, fonts)
    assert img.getpixel((20, 20)) == (0x33, 0x66, 0x99)


def test_ai_back_image_is_drawn(book, fonts):
    design = DesignOptions(backCoverBackgroundType="ai")
    images = CoverImages(ai_back=Image.new("RGB", (100, 150), (0, 128, 0)))
    img = render(book, design, fonts, images=images)
    assert img.getpixel((20, 20)) == (0, 128, 0)


def test_blurb_box_is_drawn_centred(book, fonts):
    design = DesignOptions(backCoverBlurbEnableBox=True, backCoverBlurbBoxFillColor="#FF0000",
                           backCoverBackgroundColor=BACK)
    img = render(book, design, fonts)
    g = compute_geometry(book, 72, KDP)
    x, y, w, h = g.back_trim
    assert img.getpixel((int(x + w / 2), int(y + h / 2))) == (255, 0, 0)
    assert img.getpixel((int(x + 5), int(y + h / 2))) == BACK_RGB


def test_free_flow_text_is_drawn(book, fonts):
    design = DesignOptions(backCoverText="A storm. A light. A secret.", backCoverTextColor="#000000",
                           backCoverFontSize=14)
    img = render(book, design, fonts)
    region = img.crop((45, 45, 441, 120)).convert("L")
    assert region.getextrema()[0] < 128


def test_guidelines_only_in_interactive(book, design, fonts):
    plain = render(book, design, fonts)
    guided = render(book, design, fonts, draw_guidelines=True)
    assert plain.tobytes() != guided.tobytes()

    export_plain = render(book, design, fonts, target=Export(80))
    export_guided = render(book, design, fonts, target=Export(80), draw_guidelines=True)
    assert export_plain.tobytes() == export_guided.tobytes()


def test_render_is_deterministic(book, fonts):
    design = DesignOptions(backCoverBackgroundType="pattern", backCoverPatternType="hexagons",
                           backCoverText="Same input, same pixels.", spineBackgroundType="gradient",
                           spineGradientStartColor="#000000", spineGradientEndColor="#FFFFFF")
    first = render(book, design, fonts)
    second = render(book, design, fonts)
    assert first.tobytes() == second.tobytes()


def test_view_offset_translates_cover(book, design, fonts):
    img = render(book, design, fonts, target=Interactive(scale=1.0, offset_x=50, offset_y=0))
    assert img.getpixel((10, 100)) == (255, 255, 255)
    assert img.getpixel((60, 100)) == BACK_RGB


def test_zoom_scales_cover(book, design, fonts):
    img = render(book, design, fonts, target=Interactive(scale=0.5))
    g = compute_geometry(book, 72, KDP)
    assert img.size == g.canvas_size
    assert img.getpixel((20, 20)) == BACK_RGB
    assert img.getpixel((img.width - 5, img.height - 5)) == (255, 255, 255)
    assert img.getpixel((int(g.back_panel[2] / 2) - 5, 5)) == BACK_RGB


def test_tiny_pattern_scale_renders_promptly(book, fonts):
    design = DesignOptions(backCoverBackgroundType="pattern", backCoverPatternType="checkerboard",
                           backCoverPatternScale=0.01)
    start = time.perf_counter()
    img = render(book, design, fonts)
    assert time.perf_counter() - start < 5.0
    assert img.size == compute_geometry(book, 72, KDP).canvas_size
