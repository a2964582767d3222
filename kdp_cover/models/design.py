"""
Cover data models

Book metadata and the flat design-options record supplied by the editor,
plus the resolved, per-panel styles the renderer actually draws with.
"""

from dataclasses import dataclass
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

PaperType = Literal["white", "cream"]
Direction = Literal["vertical", "horizontal"]
TextAlign = Literal["left", "center", "right", "justify"]
BackBackgroundType = Literal["flat", "gradient", "pattern", "ai"]
SpineBackgroundType = Literal["flat", "gradient"]
PatternKind = Literal[
    "stripes", "dots", "checkerboard", "diagonal", "grid",
    "circles", "triangles", "hexagons", "waves", "diamonds",
]

PATTERN_KINDS = (
    "stripes", "dots", "checkerboard", "diagonal", "grid",
    "circles", "triangles", "hexagons", "waves", "diamonds",
)

DEFAULT_FLAT_COLOR = "#FFFFFF"
DEFAULT_GRADIENT_START = "#FFFFFF"
DEFAULT_GRADIENT_END = "#E0E0E0"
DEFAULT_PATTERN_COLOR1 = "#FFFFFF"
DEFAULT_PATTERN_COLOR2 = "#DDDDDD"
DEFAULT_PATTERN_SCALE = 20.0
DEFAULT_FONT = "Arial"
DEFAULT_TEXT_COLOR = "#000000"
DEFAULT_SPINE_FONT_SIZE = 12.0
DEFAULT_BACK_FONT_SIZE = 10.0


class BookMetadata(BaseModel):
    """Book facts that drive the cover geometry"""
    title: str = Field(default="", description="Book title")
    author: str = Field(default="", description="Author name")
    page_count: int = Field(default=100, description="Interior page count")
    trim_size: str = Field(default="6x9", description="Trim size in inches, e.g. 6x9")
    paper_type: str = Field(default="white", description="Interior paper: white | cream")

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel
        json_schema_extra = {
            "example": {
                "title": "The Lighthouse Keeper",
                "author": "M. Lane",
                "pageCount": 240,
                "trimSize": "6x9",
                "paperType": "cream",
            }
        }


class DesignOptions(BaseModel):
    """Flat per-panel styling record; every field is optional."""
    spine_text: Optional[str] = None
    spine_font: Optional[str] = None
    spine_font_size: Optional[float] = None
    spine_color: Optional[str] = None
    spine_background_color: Optional[str] = None
    spine_background_type: Optional[SpineBackgroundType] = None
    spine_gradient_start_color: Optional[str] = None
    spine_gradient_end_color: Optional[str] = None
    spine_gradient_direction: Optional[Direction] = None

    back_cover_background_color: Optional[str] = None
    back_cover_background_type: Optional[BackBackgroundType] = None
    back_cover_gradient_start_color: Optional[str] = None
    back_cover_gradient_end_color: Optional[str] = None
    back_cover_gradient_direction: Optional[Direction] = None
    back_cover_pattern_type: Optional[PatternKind] = None
    back_cover_pattern_color1: Optional[str] = None
    back_cover_pattern_color2: Optional[str] = None
    back_cover_pattern_scale: Optional[float] = None
    back_cover_pattern_direction: Optional[Direction] = None

    back_cover_ai_prompt: Optional[str] = Field(default=None, alias="backCoverAIPrompt")
    back_cover_ai_image_url: Optional[str] = Field(default=None, alias="backCoverAIImageURL")
    front_cover_image_url: Optional[str] = None

    back_cover_blurb_enable_box: bool = False
    back_cover_blurb_box_fill_color: Optional[str] = None
    back_cover_blurb_box_corner_radius: Optional[float] = None
    back_cover_blurb_box_padding: Optional[float] = None
    back_cover_blurb_box_x_offset_percent: Optional[float] = None
    back_cover_blurb_box_y_offset_percent: Optional[float] = None
    back_cover_blurb_box_width_percent: Optional[float] = None
    back_cover_blurb_box_height_percent: Optional[float] = None
    back_cover_blurb_box_left_margin_percent: Optional[float] = None
    back_cover_blurb_box_opacity: Optional[float] = None
    back_cover_blurb_box_auto_layout: bool = True

    back_cover_text: str = ""
    back_cover_font: Optional[str] = None
    back_cover_font_size: Optional[float] = None
    back_cover_text_color: Optional[str] = None
    back_cover_text_align: Optional[TextAlign] = None

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel
        extra = "ignore"

    def resolve(self) -> "ResolvedDesign":
        """Apply every default once and group the fields per panel."""
        return ResolvedDesign(
            spine=SpineStyle(
                background=self._spine_fill(),
                text=(self.spine_text or "").strip(),
                font=self.spine_font or DEFAULT_FONT,
                font_size=_positive(self.spine_font_size, DEFAULT_SPINE_FONT_SIZE),
                color=self.spine_color or DEFAULT_TEXT_COLOR,
            ),
            back=BackCoverStyle(
                background=self._back_fill(),
                text=self.back_cover_text or "",
                font=self.back_cover_font or DEFAULT_FONT,
                font_size=_positive(self.back_cover_font_size, DEFAULT_BACK_FONT_SIZE),
                color=self.back_cover_text_color or DEFAULT_TEXT_COLOR,
                align=self.back_cover_text_align or "left",
                blurb=self._blurb_style(),
            ),
        )

    def _spine_fill(self) -> "Fill":
        if self.spine_background_type == "gradient":
            return GradientFill(
                start=self.spine_gradient_start_color or DEFAULT_GRADIENT_START,
                end=self.spine_gradient_end_color or DEFAULT_GRADIENT_END,
                direction=self.spine_gradient_direction or "vertical",
            )
        return FlatFill(self.spine_background_color or DEFAULT_FLAT_COLOR)

    def _back_fill(self) -> "Fill":
        kind = self.back_cover_background_type or "flat"
        if kind == "ai":
            return ImageFill(role="ai_back", fallback_color=self.back_cover_background_color or DEFAULT_FLAT_COLOR)
        if kind == "gradient":
            return GradientFill(
                start=self.back_cover_gradient_start_color or DEFAULT_GRADIENT_START,
                end=self.back_cover_gradient_end_color or DEFAULT_GRADIENT_END,
                direction=self.back_cover_gradient_direction or "vertical",
            )
        if kind == "pattern":
            return PatternFill(
                kind=self.back_cover_pattern_type or "stripes",
                color1=self.back_cover_pattern_color1 or DEFAULT_PATTERN_COLOR1,
                color2=self.back_cover_pattern_color2 or DEFAULT_PATTERN_COLOR2,
                scale=_positive(self.back_cover_pattern_scale, DEFAULT_PATTERN_SCALE),
                direction=self.back_cover_pattern_direction or "vertical",
            )
        return FlatFill(self.back_cover_background_color or DEFAULT_FLAT_COLOR)

    def _blurb_style(self) -> "BlurbBoxStyle":
        opacity = self.back_cover_blurb_box_opacity
        if opacity is None:
            opacity = 1.0
        return BlurbBoxStyle(
            enabled=self.back_cover_blurb_enable_box,
            fill_color=self.back_cover_blurb_box_fill_color or "#FFFFFF",
            opacity=min(1.0, max(0.0, opacity)),
            corner_radius=_positive(self.back_cover_blurb_box_corner_radius, 20.0),
            padding=_positive(self.back_cover_blurb_box_padding, 15.0),
            left_margin_percent=_positive(self.back_cover_blurb_box_left_margin_percent, 10.0),
            auto_layout=self.back_cover_blurb_box_auto_layout,
            height_percent=_positive(self.back_cover_blurb_box_height_percent, 30.0),
            y_offset_percent=_or(self.back_cover_blurb_box_y_offset_percent, 10.0),
            width_percent=self.back_cover_blurb_box_width_percent,
            x_offset_percent=_or(self.back_cover_blurb_box_x_offset_percent, 0.0),
        )


def _or(value, default):
    return default if value is None else value


def _positive(value, default):
    return value if value is not None and value > 0 else default


@dataclass(frozen=True)
class FlatFill:
    color: str = DEFAULT_FLAT_COLOR


@dataclass(frozen=True)
class GradientFill:
    start: str = DEFAULT_GRADIENT_START
    end: str = DEFAULT_GRADIENT_END
    direction: str = "vertical"


@dataclass(frozen=True)
class PatternFill:
    kind: str = "stripes"
    color1: str = DEFAULT_PATTERN_COLOR1
    color2: str = DEFAULT_PATTERN_COLOR2
    scale: float = DEFAULT_PATTERN_SCALE
    direction: str = "vertical"


@dataclass(frozen=True)
class ImageFill:
    role: str  # "front" | "ai_back"
    fallback_color: str = DEFAULT_FLAT_COLOR


Fill = Union[FlatFill, GradientFill, PatternFill, ImageFill]


@dataclass(frozen=True)
class BlurbBoxStyle:
    enabled: bool = False
    fill_color: str = "#FFFFFF"
    opacity: float = 1.0
    corner_radius: float = 20.0
    padding: float = 15.0
    left_margin_percent: float = 10.0
    auto_layout: bool = True
    height_percent: float = 30.0
    y_offset_percent: float = 10.0
    width_percent: Optional[float] = None  # legacy manual width
    x_offset_percent: float = 0.0  # legacy manual horizontal offset


@dataclass(frozen=True)
class SpineStyle:
    background: Fill
    text: str
    font: str
    font_size: float
    color: str


@dataclass(frozen=True)
class BackCoverStyle:
    background: Fill
    text: str
    font: str
    font_size: float
    color: str
    align: str
    blurb: BlurbBoxStyle


@dataclass(frozen=True)
class ResolvedDesign:
    spine: SpineStyle
    back: BackCoverStyle
