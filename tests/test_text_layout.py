import pytest

from kdp_cover.renderer.text_layout import (
    layout_text,
    measure_text_height,
    split_paragraphs,
    wrap_paragraph,
)

TEXT = (
    "On a rock at the edge of the world a keeper tends the last light. "
    "Every night the lamp is lit and every morning the glass is cleaned."
)


def test_wrap_is_idempotent(measure):
    lines = wrap_paragraph(TEXT.split(" "), measure, 120)
    assert len(lines) > 1
    for line in lines:
        assert wrap_paragraph(line.split(" "), measure, 120) == [line]


def test_wrapped_lines_fit_unless_single_word(measure):
    for line in wrap_paragraph(TEXT.split(" "), measure, 90):
        assert measure(line) <= 90 or " " not in line


def test_overlong_word_sits_alone(measure):
    lines = wrap_paragraph(["a", "incomprehensibilities", "b"], measure, 30)
    assert lines == ["a", "incomprehensibilities", "b"]


def test_split_handles_crlf():
    assert split_paragraphs("one\r\ntwo\nthree") == ["one", "two", "three"]


def test_justify_exempts_last_line_and_single_words(measure):
    lines = list(layout_text(TEXT + "\nEnd", measure, 150, 12, align="justify"))
    by_paragraph_end = [line for line in lines if line.last_in_paragraph]
    assert by_paragraph_end
    for line in by_paragraph_end:
        assert not line.justified
    for line in lines:
        if " " not in line.text:
            assert not line.justified


def test_justified_lines_span_full_width(measure):
    lines = list(layout_text(TEXT, measure, 150, 12, align="justify", x=10))
    justified = [line for line in lines if line.justified]
    assert justified
    for line in justified:
        first_word, first_x = line.fragments[0]
        last_word, last_x = line.fragments[-1]
        assert first_x == pytest.approx(10)
        assert last_x + measure(last_word) == pytest.approx(160)


def test_center_and_right_alignment(measure):
    (centered,) = layout_text("abc", measure, 100, 12, align="center")
    (right,) = layout_text("abc", measure, 100, 12, align="right", x=5)
    assert centered.x == pytest.approx((100 - 18) / 2)
    assert right.x == pytest.approx(5 + 100 - 18)


def test_unknown_alignment_is_left(measure):
    (line,) = layout_text("abc", measure, 100, 12, align="diagonal", x=3)
    assert line.x == 3


def test_blank_lines_and_paragraph_gap(measure):
    lines = list(layout_text("a\n\nb", measure, 100, 10))
    assert [line.text for line in lines] == ["a", "b"]
    # "a" (1 line) + half-line gap + blank line (1 line)
    assert lines[1].y == pytest.approx(25)
    assert measure_text_height("a\n\nb", measure, 100, 10) == pytest.approx(35)


def test_height_matches_layout(measure):
    text = TEXT + "\n" + TEXT
    lines = list(layout_text(text, measure, 140, 12))
    height = measure_text_height(text, measure, 140, 12)
    assert height == pytest.approx(lines[-1].y + 12)


def test_empty_text_has_no_height(measure):
    assert measure_text_height("", measure, 100, 12) == 0
    assert measure_text_height("   ", measure, 100, 12) == 0
