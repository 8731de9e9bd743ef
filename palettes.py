from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PalettePreset:
    id: str
    name: str
    description: str
    colors: Tuple[str, ...]
    accent_border: Optional[str] = None  # left border on task bars
    accent_color: Optional[str] = None  # task name text color


_REDS = ("#F01840", "#C01830", "#901226", "#600C1C", "#300810")
_PURPLES = ("#705E74", "#402848", "#2A1C30")
_ALTERNATING = ("#F01840", "#402848", "#C01830", "#705E74", "#901226")

_PRESETS = (
    PalettePreset(
        id="alternating",
        name="Alternating (Default)",
        description="Best task differentiation with red/purple mix",
        colors=_ALTERNATING,
    ),
    PalettePreset(
        id="alternating_b",
        name="Alternating + Border",
        description="Alternating with red left border accent",
        colors=_ALTERNATING,
        accent_border="#C01830",
    ),
    PalettePreset(
        id="reds",
        name="Reds",
        description="Warm, energetic red gradient",
        colors=_REDS,
    ),
    PalettePreset(
        id="reds_a",
        name="Reds",
        description="Warm, energetic red gradient",
        colors=_REDS,
    ),
    PalettePreset(
        id="reds_b",
        name="Reds + Purple Border",
        description="Red gradient with purple left border",
        colors=_REDS,
        accent_border="#402848",
    ),
    PalettePreset(
        id="purples_a",
        name="Purples + Burgundy Text",
        description="Purple gradient with burgundy task names",
        colors=_PURPLES,
        accent_color="#901226",
    ),
    PalettePreset(
        id="purples_b",
        name="Purples + Red Border",
        description="Purple gradient with red left border",
        colors=_PURPLES,
        accent_border="#C01830",
    ),
    PalettePreset(
        id="purples_c",
        name="Purples + Both Accents",
        description="Purple with burgundy text and red border",
        colors=_PURPLES,
        accent_border="#C01830",
        accent_color="#901226",
    ),
)

PALETTE_PRESETS: Mapping[str, PalettePreset] = MappingProxyType({p.id: p for p in _PRESETS})

DEFAULT_PRESET = "alternating"
DEFAULT_PALETTE: Tuple[str, ...] = PALETTE_PRESETS[DEFAULT_PRESET].colors


def _normalize_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def resolve(name: Optional[str]) -> PalettePreset:
    """
    Look up a preset by name (case-insensitive, whitespace-trimmed).

    Blank names and unknown names both resolve to the default preset, so the
    result always carries a usable, non-empty color sequence.
    """
    key = _normalize_name(name)
    if not key:
        return PALETTE_PRESETS[DEFAULT_PRESET]
    preset = PALETTE_PRESETS.get(key)
    if preset is None:
        log.warning("Unknown palette '%s', using '%s'", name, DEFAULT_PRESET)
        return PALETTE_PRESETS[DEFAULT_PRESET]
    return preset


def get_palette_by_name(name: Optional[str]) -> Optional[List[str]]:
    """Colors of the named preset, or None when no name was given at all."""
    if not _normalize_name(name):
        return None
    return list(resolve(name).colors)


def palette_info() -> List[Dict[str, Any]]:
    """Preset descriptors for a palette picker (aliases omitted)."""
    out: List[Dict[str, Any]] = []
    for preset in _PRESETS:
        if preset.id == "reds_a":
            continue
        info = asdict(preset)
        info["colors"] = list(preset.colors)
        out.append(info)
    return out
