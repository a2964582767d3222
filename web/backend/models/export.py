"""
Export request/response models
"""

from typing import Optional

from pydantic import BaseModel, Field

from kdp_cover.models.design import BookMetadata, DesignOptions


class ExportRequest(BaseModel):
    """Book, design and image sources for one cover render"""
    book: BookMetadata = Field(..., description="Book metadata driving the cover geometry")
    design: DesignOptions = Field(default_factory=DesignOptions, description="Per-panel styling")
    dpi: Optional[int] = Field(default=None, gt=0, description="Export DPI (server default when omitted)")
    spine_profile: Optional[str] = Field(default=None, description="Spine thickness table: kdp | legacy")
    front_image: Optional[str] = Field(default=None, description="Front cover image URL; overrides the design's")
    back_image: Optional[str] = Field(default=None, description="Back cover AI image URL; overrides the design's")

    class Config:
        json_schema_extra = {
            "example": {
                "book": {"title": "The Lighthouse Keeper", "author": "M. Lane", "pageCount": 240,
                         "trimSize": "6x9", "paperType": "cream"},
                "design": {"backCoverText": "A storm. A light. A secret.", "backCoverBlurbEnableBox": True},
                "dpi": 300,
            }
        }


class BlurbSolveRequest(BaseModel):
    """Blurb box settings to check against the barcode area"""
    book: BookMetadata
    design: DesignOptions = Field(default_factory=DesignOptions)


class BlurbSolveResponse(BaseModel):
    """Corrected blurb box values; callers persist them when corrected is true"""
    height_percent: float
    y_offset_percent: float
    corrected: bool
    feasible: bool
    max_safe_vertical_percent: float
