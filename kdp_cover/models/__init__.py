"""Data models for cover rendering"""

from kdp_cover.models.design import (
    BookMetadata,
    DesignOptions,
    ResolvedDesign,
    SpineStyle,
    BackCoverStyle,
    BlurbBoxStyle,
    FlatFill,
    GradientFill,
    PatternFill,
    ImageFill,
    PATTERN_KINDS,
)
from kdp_cover.models.target import Interactive, Export, RenderTarget

__all__ = [
    "BookMetadata",
    "DesignOptions",
    "ResolvedDesign",
    "SpineStyle",
    "BackCoverStyle",
    "BlurbBoxStyle",
    "FlatFill",
    "GradientFill",
    "PatternFill",
    "ImageFill",
    "PATTERN_KINDS",
    "Interactive",
    "Export",
    "RenderTarget",
]
