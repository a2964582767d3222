import os
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from kdp_cover.config.sizes import MM_PER_INCH

COVER_THICKNESS_MM = 0.0102 * MM_PER_INCH


class SpineProfile(BaseModel):
    """Paper thickness table used to turn a page count into a spine width."""
    name: str
    per_page_mm: Dict[str, float]
    cover_mm: float = COVER_THICKNESS_MM
    min_mm: float = 0.0
    default_paper: str = "white"

    class Config:
        frozen = True


KDP = SpineProfile(
    name="kdp",
    per_page_mm={"white": 0.0572, "cream": 0.0635},
)
LEGACY = SpineProfile(
    name="legacy",
    per_page_mm={"white": 0.002252 * MM_PER_INCH, "cream": 0.0025 * MM_PER_INCH},
    min_mm=1.0,
)

PROFILES: Dict[str, SpineProfile] = {
    "kdp": KDP,
    "legacy": LEGACY,
}
DEFAULT_PROFILE = "kdp"


class RenderSettings(BaseModel):
    spine_profile: str = DEFAULT_PROFILE
    export_dpi: int = Field(default=300, gt=0)
    font_dirs: List[str] = Field(default_factory=list)
    image_timeout_s: float = 30.0

    @property
    def profile(self) -> SpineProfile:
        return get_profile(self.spine_profile)


def get_profile(name: Optional[str] = None) -> SpineProfile:
    key = (name or DEFAULT_PROFILE).lower()
    if key not in PROFILES:
        raise ValueError(f"Unknown spine profile '{name}'. Available: {list(PROFILES.keys())}")
    return PROFILES[key]


def load_settings() -> RenderSettings:
    """Build settings from KDP_COVER_* environment variables."""
    values = {}
    if os.getenv("KDP_COVER_SPINE_PROFILE"):
        values["spine_profile"] = os.environ["KDP_COVER_SPINE_PROFILE"]
    if os.getenv("KDP_COVER_DPI"):
        values["export_dpi"] = int(os.environ["KDP_COVER_DPI"])
    if os.getenv("KDP_COVER_FONT_DIRS"):
        values["font_dirs"] = [d for d in os.environ["KDP_COVER_FONT_DIRS"].split(os.pathsep) if d]
    if os.getenv("KDP_COVER_IMAGE_TIMEOUT"):
        values["image_timeout_s"] = float(os.environ["KDP_COVER_IMAGE_TIMEOUT"])
    return RenderSettings(**values)
