"""Layouts (colour palettes) and color utilities for the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class Palette:
    background: str
    text: str
    muted: str
    correct: str
    incorrect: str
    cursor: str
    accent: str

    @property
    def panel(self) -> str:
        """Popup fill, a touch lighter than the background."""
        return blend_hex(self.background, self.text, 0.08)


LAYOUTS: Dict[str, Palette] = {
    "iced": Palette(
        background="#14161B",
        text="#E6EDF3",
        muted="#6E7681",
        correct="#805CBF",
        incorrect="#F85149",
        cursor="#E6EDF3",
        accent="#58A6FF",
    ),
    "tealight": Palette(
        background="#E0F7FA",
        text="#1A3A3A",
        muted="#78909C",
        correct="#00838F",
        incorrect="#FF5252",
        cursor="#005662",
        accent="#FF8A65",
    ),
    "amber": Palette(
        background="#1E1A14",
        text="#F2E6D0",
        muted="#8C7B62",
        correct="#FFB74D",
        incorrect="#E53935",
        cursor="#F2E6D0",
        accent="#69F0AE",
    ),
}


def layout_names() -> List[str]:
    return list(LAYOUTS)


def palette_for(name: str) -> Palette:
    """Palette for *name*, falling back to the first layout."""
    return LAYOUTS.get(name) or next(iter(LAYOUTS.values()))


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"
