import pytest

from kdp_cover.config.profiles import KDP
from kdp_cover.cover.geometry import compute_geometry
from kdp_cover.models.target import MAX_SCALE, MIN_SCALE
from kdp_cover.preview.viewport import PanGesture, PreviewSession, ViewTransform
from kdp_cover.renderer.fonts import FontReadinessGate, FontRegistry


def test_wheel_zoom_keeps_point_under_cursor():
    view = ViewTransform(1.0, 10.0, 20.0)
    world = ((200 - view.offset_x) / view.scale, (150 - view.offset_y) / view.scale)
    zoomed = view.zoom_at(200, 150, -500)
    assert zoomed.scale == pytest.approx(1.5)
    assert zoomed.offset_x + world[0] * zoomed.scale == pytest.approx(200)
    assert zoomed.offset_y + world[1] * zoomed.scale == pytest.approx(150)


def test_zoom_is_clamped():
    assert ViewTransform(4.9).zoom_at(0, 0, -10000).scale == MAX_SCALE
    assert ViewTransform(0.3).zoom_at(0, 0, 10000).scale == MIN_SCALE
    assert ViewTransform(MAX_SCALE).zoom_in().scale == MAX_SCALE
    assert ViewTransform(MIN_SCALE).zoom_out().scale == MIN_SCALE


def test_buttons_and_reset():
    view = ViewTransform(1.0, 5, 5).zoom_in().zoom_in()
    assert view.scale == pytest.approx(1.2)
    assert view.offset_x == 5
    assert view.zoom_out().scale == pytest.approx(1.1)
    assert view.reset() == ViewTransform(1.0, 0.0, 0.0)


def test_pan_gesture():
    pan = PanGesture()
    view = ViewTransform(1.0, 10, 10)
    assert pan.move(50, 50, view) is view
    pan.press(100, 100, view)
    assert pan.active
    moved = pan.move(130, 90, view)
    assert (moved.offset_x, moved.offset_y) == (40, 0)
    pan.release()
    assert not pan.active


def test_to_target():
    target = ViewTransform(2.0, 3.0, 4.0).to_target()
    assert (target.scale, target.offset_x, target.offset_y) == (2.0, 3.0, 4.0)


def test_session_shows_placeholder_until_fonts_ready(book, fonts):
    gate = FontReadinessGate()
    session = PreviewSession(book, fonts=fonts, gate=gate, profile=KDP)
    size = compute_geometry(book, 72, KDP).canvas_size
    placeholder = session.render()
    assert placeholder.size == size
    assert placeholder.getpixel((0, 0)) == (0xF3, 0xF4, 0xF6)
    gate.open()
    rendered = session.render()
    assert rendered.size == size
    assert rendered.getpixel((0, 0)) != (0xF3, 0xF4, 0xF6)


def test_session_pan_only_while_pressed(book, fonts):
    session = PreviewSession(book, fonts=fonts, profile=KDP, show_guides=False)
    assert session.mouse_move(10, 10) is None
    session.mouse_down(0, 0)
    assert session.mouse_move(25, 5) is not None
    assert (session.view.offset_x, session.view.offset_y) == (25, 5)
    session.mouse_up()
    assert session.mouse_move(40, 40) is None
    session.reset_view()
    assert session.view == ViewTransform()


def test_session_wheel_updates_view(book, fonts):
    session = PreviewSession(book, fonts=fonts, profile=KDP)
    session.wheel(100, 100, -1000)
    assert session.view.scale == pytest.approx(2.0)


def test_zooming_does_not_grow_font_cache(book):
    fonts = FontRegistry(max_cached_fonts=16)
    session = PreviewSession(book, fonts=fonts, profile=KDP, show_guides=False)
    for _ in range(20):
        session.wheel(100, 100, -20)
    assert len(fonts._fonts) <= 16
