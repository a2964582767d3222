import pytest

from kdp_cover.renderer.surface import CoverCanvas, to_rgba


def test_to_rgba_parses_hex_and_applies_opacity():
    assert to_rgba("#FF0000") == (255, 0, 0, 255)
    assert to_rgba("#FF0000", 0.5) == (255, 0, 0, 128)
    assert to_rgba((1, 2, 3)) == (1, 2, 3, 255)


def test_invalid_colour_becomes_black():
    assert to_rgba("not-a-colour") == (0, 0, 0, 255)


def test_clip_contains_drawing():
    canvas = CoverCanvas(40, 40)
    canvas.save()
    canvas.clip_rect(10, 10, 10, 10)
    canvas.fill_rect(0, 0, 40, 40, "#000000")
    canvas.restore()
    img = canvas.to_image()
    assert img.getpixel((15, 15)) == (0, 0, 0)
    assert img.getpixel((5, 5)) == (255, 255, 255)
    assert img.getpixel((25, 15)) == (255, 255, 255)


def test_nested_clips_intersect():
    canvas = CoverCanvas(40, 40)
    canvas.save()
    canvas.clip_rect(0, 0, 20, 40)
    canvas.save()
    canvas.clip_rect(10, 0, 30, 40)
    canvas.fill_rect(0, 0, 40, 40, "#000000")
    canvas.restore()
    canvas.restore()
    img = canvas.to_image()
    assert img.getpixel((15, 5)) == (0, 0, 0)
    assert img.getpixel((5, 5)) == (255, 255, 255)
    assert img.getpixel((25, 5)) == (255, 255, 255)


def test_empty_clip_draws_nothing():
    canvas = CoverCanvas(20, 20)
    canvas.save()
    canvas.clip_rect(5, 5, 0, 10)
    canvas.fill_rect(0, 0, 20, 20, "#000000")
    canvas.restore()
    assert canvas.to_image().getcolors() == [(400, (255, 255, 255))]


def test_transform_applies_translate_then_scale():
    canvas = CoverCanvas(100, 100)
    canvas.save()
    canvas.translate(10, 20)
    canvas.scale(2)
    canvas.fill_rect(0, 0, 5, 5, "#000000")
    canvas.restore()
    canvas.fill_rect(90, 90, 5, 5, "#FF0000")
    img = canvas.to_image()
    assert img.getpixel((10, 20)) == (0, 0, 0)
    assert img.getpixel((19, 29)) == (0, 0, 0)
    assert img.getpixel((21, 31)) == (255, 255, 255)
    assert img.getpixel((92, 92)) == (255, 0, 0)


def test_restore_without_save_raises():
    with pytest.raises(RuntimeError):
        CoverCanvas(10, 10).restore()


def test_rounded_rect_opacity_blends():
    canvas = CoverCanvas(40, 40, background="#000000")
    canvas.fill_rounded_rect(0, 0, 40, 40, 5, "#FFFFFF", opacity=0.5)
    r, g, b = canvas.to_image().getpixel((20, 20))
    assert 120 <= r <= 135


def test_dashed_rect_leaves_gaps():
    canvas = CoverCanvas(50, 50)
    canvas.stroke_rect(5, 5, 40, 40, "#000000", width=1, dash=(4, 4))
    img = canvas.to_image()
    top_row = [img.getpixel((x, 5)) for x in range(5, 45)]
    assert (0, 0, 0) in top_row
    assert (255, 255, 255) in top_row


def test_rotated_text_is_taller_than_wide(fonts):
    canvas = CoverCanvas(200, 400)
    font = fonts.get_font("Arial", 20)
    canvas.draw_text_rotated("Lighthouse", 100, 200, font, "#000000")
    bbox = canvas.to_image().convert("L").point(lambda v: 255 if v < 128 else 0).getbbox()
    assert bbox is not None
    left, top, right, bottom = bbox
    assert bottom - top > right - left
