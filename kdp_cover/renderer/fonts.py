"""
Font registry for cover rendering

Maps the CSS-style family strings stored in designs ("Inter, sans-serif")
to TrueType files and hands out sized Pillow fonts. The registry is passed
into every render call instead of living in module state.
"""

import logging
import threading
from collections import OrderedDict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from PIL import ImageFont

from kdp_cover.config.profiles import load_settings

logger = logging.getLogger(__name__)

# Sized fonts kept per registry; least recently used are dropped first.
MAX_CACHED_FONTS = 64

SYSTEM_FAMILIES = ["Arial", "Verdana", "Times New Roman", "Georgia", "Courier New"]
GOOGLE_FAMILIES = [
    "Inter", "Open Sans", "Montserrat", "Source Sans 3", "Poppins", "Nunito",
    "Playfair Display", "Roboto Slab", "Lora", "Merriweather", "Crimson Text",
    "Libre Baskerville", "PT Serif", "Oswald", "Dancing Script",
]

# Metric-compatible stand-ins commonly present on Linux hosts.
GENERIC_FALLBACKS = {
    "sans": ["LiberationSans-Regular.ttf", "DejaVuSans.ttf", "Arial.ttf", "arial.ttf"],
    "serif": ["LiberationSerif-Regular.ttf", "DejaVuSerif.ttf", "Times New Roman.ttf", "times.ttf"],
    "mono": ["LiberationMono-Regular.ttf", "DejaVuSansMono.ttf", "Courier New.ttf", "cour.ttf"],
}
FAMILY_GENERIC = {
    "Times New Roman": "serif",
    "Georgia": "serif",
    "Courier New": "mono",
    "Playfair Display": "serif",
    "Roboto Slab": "serif",
    "Lora": "serif",
    "Merriweather": "serif",
    "Crimson Text": "serif",
    "Libre Baskerville": "serif",
    "PT Serif": "serif",
}


def canonical_family(font_family: Optional[str]) -> str:
    """Reduce a design's font string to one known family name."""
    if not font_family:
        return "Arial"
    lowered = font_family.lower()
    for family in SYSTEM_FAMILIES:
        if family.lower() in lowered:
            return family
    for family in GOOGLE_FAMILIES:
        name = family.lower()
        if name in lowered or name.replace(" ", "_") in lowered or name.replace(" ", "-") in lowered:
            return family
    if "sans-serif" in lowered:
        return "Arial"
    if "serif" in lowered:
        return "Times New Roman"
    if "monospace" in lowered:
        return "Courier New"
    return "Arial"


def _weight_names(weight: str) -> List[str]:
    names = {"400": ["Regular", "400"], "700": ["Bold", "700"], "600": ["SemiBold", "600"], "500": ["Medium", "500"]}
    return names.get(weight, [weight])


class CoverFont:
    """A family at one pixel size, measured in the caller's coordinate space."""

    def __init__(self, registry: "FontRegistry", family: str, size: float, weight: str, pil_font):
        self.registry = registry
        self.family = family
        self.size = size
        self.weight = weight
        self.pil = pil_font

    def measure(self, text: str) -> float:
        if not text:
            return 0.0
        try:
            width = float(self.pil.getlength(text))
        except (AttributeError, OSError):
            width = 0.0
        if width <= 0:
            # Degenerate metrics: assume an average glyph of half an em.
            width = 0.5 * self.size * len(text)
        return width

    def scaled(self, factor: float) -> "CoverFont":
        if factor == 1:
            return self
        return self.registry.get_font(self.family, self.size * factor, self.weight)


class FontRegistry:
    def __init__(self, search_dirs: Optional[Iterable[str]] = None, max_cached_fonts: int = MAX_CACHED_FONTS):
        self.search_dirs = [Path(d) for d in (search_dirs or [])]
        self._paths: Dict[Tuple[str, str], Optional[str]] = {}
        self.max_cached_fonts = max(1, max_cached_fonts)
        self._fonts: "OrderedDict[Tuple[str, str, float], CoverFont]" = OrderedDict()
        self._lock = threading.Lock()

    def _candidates(self, family: str, weight: str) -> List[str]:
        stems = [family.replace(" ", "-"), family.replace(" ", ""), family]
        names = []
        for stem in stems:
            for suffix in _weight_names(weight):
                names.append(f"{stem}-{suffix}.ttf")
            names.append(f"{stem}.ttf")
        return names

    def _find_file(self, family: str, weight: str) -> Optional[str]:
        for directory in self.search_dirs:
            for name in self._candidates(family, weight):
                path = directory / name
                if path.is_file():
                    return str(path)
        # Pillow also searches the platform font directories for bare file names.
        for name in self._candidates(family, weight) + GENERIC_FALLBACKS[FAMILY_GENERIC.get(family, "sans")]:
            try:
                ImageFont.truetype(name, 12)
                return name
            except OSError:
                continue
        return None

    def ensure_registered(self, family: str, weight: str = "400") -> bool:
        """Resolve the font file for (family, weight) once. Safe to call repeatedly."""
        key = (canonical_family(family), weight)
        with self._lock:
            if key not in self._paths:
                path = self._find_file(*key)
                self._paths[key] = path
                if path:
                    logger.debug("Registered font %s %s -> %s", key[0], weight, path)
                else:
                    logger.warning("No font file for %s %s, using Pillow default", key[0], weight)
            return self._paths[key] is not None

    def is_registered(self, family: str, weight: str = "400") -> bool:
        return self._paths.get((canonical_family(family), weight)) is not None

    def get_font(self, family: str, size: float, weight: str = "400") -> CoverFont:
        canonical = canonical_family(family)
        size = max(1.0, float(size))
        self.ensure_registered(canonical, weight)
        key = (canonical, weight, round(size, 3))
        with self._lock:
            font = self._fonts.get(key)
            if font is not None:
                self._fonts.move_to_end(key)
            else:
                path = self._paths.get((canonical, weight))
                if path:
                    pil_font = ImageFont.truetype(path, size)
                else:
                    pil_font = ImageFont.load_default(size=size)
                font = CoverFont(self, canonical, size, weight, pil_font)
                self._fonts[key] = font
                while len(self._fonts) > self.max_cached_fonts:
                    self._fonts.popitem(last=False)
            return font

    def preload(self, families: Iterable[str], gate: Optional["FontReadinessGate"] = None) -> None:
        for family in families:
            self.ensure_registered(family)
        if gate is not None:
            gate.open()


class FontReadinessGate:
    """
    Synchronous "fonts ready" signal for the preview.

    Rendering is not started until the gate opens or the bounded wait
    expires; the compositor itself never waits on fonts.
    """

    def __init__(self, timeout_s: float = 10.0):
        self.timeout_s = timeout_s
        self._event = threading.Event()
        self.timed_out = False

    @property
    def is_open(self) -> bool:
        return self._event.is_set() or self.timed_out

    def open(self) -> None:
        self._event.set()

    def wait(self, timeout_s: Optional[float] = None) -> bool:
        """Block until ready or timeout. Returns True when fonts signalled ready."""
        ready = self._event.wait(self.timeout_s if timeout_s is None else timeout_s)
        if not ready:
            logger.warning("Font loading timeout - proceeding with available fonts")
            self.timed_out = True
        return ready


def default_registry() -> FontRegistry:
    return FontRegistry(load_settings().font_dirs)
