import pytest

from kdp_cover.config.profiles import KDP
from kdp_cover.cover.blurb import (
    BarcodeConstraints,
    BlurbProposal,
    auto_height_percent,
    box_center_percent,
    optimal_y_offset,
    place_blurb_box,
    solve,
    solve_for_style,
)
from kdp_cover.cover.geometry import compute_geometry
from kdp_cover.models.design import BlurbBoxStyle

SIX_BY_NINE = BarcodeConstraints.for_trim(6, 9)


def satisfies_invariant(height, offset, constraints):
    return box_center_percent(offset) + height / 2 <= constraints.max_safe_vertical_percent + 1e-9


def test_constraints_for_6x9():
    assert SIX_BY_NINE.barcode_height_percent == pytest.approx(1.2 / 9 * 100)
    assert SIX_BY_NINE.top_boundary_percent == pytest.approx(100 - 0.25 / 9 * 100 - 1.2 / 9 * 100)
    assert SIX_BY_NINE.max_safe_vertical_percent == pytest.approx(SIX_BY_NINE.top_boundary_percent - 10)


def test_box_center_percent():
    assert box_center_percent(0) == 50
    assert box_center_percent(-50) == 25
    assert box_center_percent(100) == 100


@pytest.mark.parametrize("trim", [(5, 8), (5.25, 8), (5.5, 8.5), (6, 9), (8.5, 11)])
def test_solver_output_never_overlaps_barcode(trim):
    constraints = BarcodeConstraints.for_trim(*trim)
    for height in range(10, 101, 7):
        for offset in range(-50, 101, 9):
            solution = solve(BlurbProposal(height, offset), constraints)
            assert solution.feasible
            assert satisfies_invariant(solution.height_percent, solution.y_offset_percent, constraints)
            assert solution.corrected == constraints.would_overlap(height, offset)


def test_optimal_offset_is_safe_and_centred_when_possible():
    for height in range(10, 96):
        offset = optimal_y_offset(height, SIX_BY_NINE)
        assert -50 <= offset <= 0
        if offset > -50:
            assert satisfies_invariant(height, offset, SIX_BY_NINE)
    assert optimal_y_offset(30, SIX_BY_NINE) == 0


def test_safe_proposal_is_untouched():
    solution = solve(BlurbProposal(30, 0), SIX_BY_NINE)
    assert (solution.height_percent, solution.y_offset_percent, solution.corrected) == (30, 0, False)


def test_height_is_reduced_first():
    solution = solve(BlurbProposal(60, 20), SIX_BY_NINE)
    assert solution.corrected
    assert solution.y_offset_percent == 20
    assert solution.height_percent == 27


def test_offset_is_raised_when_height_cannot_shrink():
    solution = solve(BlurbProposal(10, 60), SIX_BY_NINE)
    assert solution.height_percent == 10
    assert solution.y_offset_percent == 37


def test_last_resort_shrinks_height_at_top():
    solution = solve(BlurbProposal(99, 90), SIX_BY_NINE)
    assert solution.y_offset_percent == -50
    assert solution.height_percent == 97
    assert satisfies_invariant(97, -50, SIX_BY_NINE)


def test_trim_too_short_is_infeasible():
    solution = solve(BlurbProposal(30, 0), BarcodeConstraints.for_trim(6, 2))
    assert not solution.feasible


def test_auto_height_floor_and_empty_text(measure):
    assert auto_height_percent("Hello", measure, 10, 432, 648, 15, 10) == 10
    assert auto_height_percent("", measure, 10, 432, 648, 15, 10) == 30


def test_auto_height_counts_paragraphs(measure):
    text = "\n".join(["line"] * 40)
    # 40 lines + 39 half-line gaps at 12px, plus 2 x 15px padding, of 648px
    assert auto_height_percent(text, measure, 10, 432, 648, 15, 10) == round((59.5 * 12 + 30) / 648 * 100)


def test_auto_layout_solution_matches_optimal_offset(book, measure):
    geometry = compute_geometry(book, 72, KDP)
    style = BlurbBoxStyle(enabled=True)
    text = " ".join(["word"] * 200)
    solution = solve_for_style(style, text, 10, geometry, measure)
    expected_height = auto_height_percent(text, measure, 10, 432, 648, 15, 10)
    assert solution.height_percent == expected_height
    assert solution.y_offset_percent == optimal_y_offset(expected_height, SIX_BY_NINE)


def test_placement_is_dpi_independent(book, measure):
    style = BlurbBoxStyle(enabled=True)
    text = " ".join(["word"] * 120)
    preview = place_blurb_box(style, text, 10, compute_geometry(book, 72, KDP), measure)
    export = place_blurb_box(style, text, 10, compute_geometry(book, 300, KDP), measure, dpi_scale=300 / 72)
    factor = 300 / 72
    assert export.solution == preview.solution
    assert export.y == pytest.approx(preview.y * factor)
    assert export.height == pytest.approx(preview.height * factor)
    assert export.width == pytest.approx(preview.width * factor)
    assert export.padding == pytest.approx(15 * factor)


def test_margins_define_box_width(book, measure):
    geometry = compute_geometry(book, 72, KDP)
    placement = place_blurb_box(BlurbBoxStyle(enabled=True, left_margin_percent=20), "x", 10, geometry, measure)
    assert placement.x == pytest.approx(9 + 432 * 0.2)
    assert placement.width == pytest.approx(432 * 0.6)
    assert placement.text_width == pytest.approx(432 * 0.6 - 30)


def test_manual_legacy_width_and_x_offset(book, measure):
    geometry = compute_geometry(book, 72, KDP)
    style = BlurbBoxStyle(enabled=True, auto_layout=False, width_percent=80, x_offset_percent=10,
                          height_percent=30, y_offset_percent=10)
    placement = place_blurb_box(style, "x", 10, geometry, measure)
    assert placement.width == pytest.approx(432 * 0.8)
    assert placement.x == pytest.approx(9 + 216 + 216 * 0.1 - 432 * 0.4)
    assert placement.solution.height_percent == 30
    assert placement.solution.y_offset_percent == 10


def test_manual_unsafe_values_are_corrected(book, measure):
    geometry = compute_geometry(book, 72, KDP)
    style = BlurbBoxStyle(enabled=True, auto_layout=False, height_percent=60, y_offset_percent=20)
    placement = place_blurb_box(style, "x", 10, geometry, measure)
    assert placement.solution.corrected
    bottom_percent = (placement.y + placement.height - 9) / 648 * 100
    assert bottom_percent <= SIX_BY_NINE.max_safe_vertical_percent + 1e-6
