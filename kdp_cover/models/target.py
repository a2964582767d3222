from dataclasses import dataclass
from typing import Union

from kdp_cover.config.sizes import RENDER_PPI

MIN_SCALE = 0.2
MAX_SCALE = 5.0


@dataclass(frozen=True)
class Interactive:
    """On-screen preview: 72 ppi geometry under a pan/zoom transform."""
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "scale", min(MAX_SCALE, max(MIN_SCALE, float(self.scale))))

    @property
    def ppi(self) -> int:
        return RENDER_PPI

    @property
    def dpi_scale(self) -> float:
        return 1.0


@dataclass(frozen=True)
class Export:
    """Print output at a fixed resolution."""
    dpi: int = 300

    def __post_init__(self):
        if int(self.dpi) <= 0:
            raise ValueError(f"Export dpi must be positive, got {self.dpi}")
        object.__setattr__(self, "dpi", int(self.dpi))

    @property
    def ppi(self) -> int:
        return self.dpi

    @property
    def dpi_scale(self) -> float:
        return self.dpi / RENDER_PPI


RenderTarget = Union[Interactive, Export]
