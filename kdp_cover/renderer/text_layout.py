"""
Paragraph-aware word wrapping

Lines are produced lazily as PlacedLine records; each carries the text
fragments to draw and their x positions, so the same layout drives both
drawing and height measurement.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterator, List, Tuple

Measure = Callable[[str], float]

ALIGNMENTS = ("left", "center", "right", "justify")
LINE_HEIGHT_FACTOR = 1.2
PARAGRAPH_GAP = 0.5  # in line heights

_LINE_BREAK = re.compile(r"\r?\n")


@dataclass(frozen=True)
class PlacedLine:
    text: str
    x: float
    y: float
    fragments: Tuple[Tuple[str, float], ...]
    justified: bool = False
    last_in_paragraph: bool = False


def split_paragraphs(text: str) -> List[str]:
    return _LINE_BREAK.split(text)


def wrap_paragraph(words: List[str], measure: Measure, max_width: float) -> List[str]:
    """Greedy wrap; a word wider than max_width stays alone on its line."""
    lines: List[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if current and measure(candidate) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def _justify(line: str, measure: Measure, x: float, max_width: float) -> Tuple[Tuple[str, float], ...]:
    words = line.split(" ")
    words_width = sum(measure(w) for w in words)
    gap = (max_width - words_width) / (len(words) - 1)
    fragments = []
    cursor = x
    for word in words:
        fragments.append((word, cursor))
        cursor += measure(word) + gap
    return tuple(fragments)


def layout_text(
    text: str,
    measure: Measure,
    max_width: float,
    line_height: float,
    align: str = "left",
    x: float = 0.0,
    y: float = 0.0,
) -> Iterator[PlacedLine]:
    if align not in ALIGNMENTS:
        align = "left"
    cursor_y = y
    paragraphs = split_paragraphs(text)
    for index, paragraph in enumerate(paragraphs):
        if paragraph.strip() == "":
            cursor_y += line_height
            continue

        words = [w for w in paragraph.split(" ") if w]
        lines = wrap_paragraph(words, measure, max_width)
        for line_index, line in enumerate(lines):
            last = line_index == len(lines) - 1
            if align == "justify" and not last and " " in line:
                yield PlacedLine(line, x, cursor_y, _justify(line, measure, x, max_width), True, last)
            else:
                line_x = x
                if align == "center":
                    line_x = x + (max_width - measure(line)) / 2
                elif align == "right":
                    line_x = x + max_width - measure(line)
                yield PlacedLine(line, line_x, cursor_y, ((line, line_x),), False, last)
            cursor_y += line_height

        if index < len(paragraphs) - 1:
            cursor_y += line_height * PARAGRAPH_GAP


def measure_text_height(text: str, measure: Measure, max_width: float, line_height: float) -> float:
    """Height the laid-out text occupies, including blank lines and paragraph gaps."""
    if not text.strip():
        return 0.0
    lines = 0.0
    paragraphs = split_paragraphs(text)
    for index, paragraph in enumerate(paragraphs):
        if paragraph.strip() == "":
            lines += 1
            continue
        words = [w for w in paragraph.split(" ") if w]
        lines += len(wrap_paragraph(words, measure, max_width))
        if index < len(paragraphs) - 1:
            lines += PARAGRAPH_GAP
    return lines * line_height


def draw_text_block(canvas, text: str, font, color: str, x: float, y: float, max_width: float,
                    line_height: float, align: str = "left") -> int:
    """Lay out and draw text with its top-left at (x, y). Returns the number of lines drawn."""
    count = 0
    for line in layout_text(text, font.measure, max_width, line_height, align, x, y):
        for fragment, fragment_x in line.fragments:
            canvas.draw_text(fragment, fragment_x, line.y, font, color)
        count += 1
    return count
