"""
Named filter presets (approximations of popular photo looks).

A preset replaces the filters and sharpen blocks of a render plan; every
other option is kept as requested.
"""

import logging
from typing import Dict, List, Optional

from schemas.image import PresetInfo
from schemas.render import FilterOptions, RenderPlan, SharpenOptions

logger = logging.getLogger(__name__)

FILTER_PRESETS: Dict[str, PresetInfo] = {
    preset.id: preset
    for preset in [
        PresetInfo(
            id="clarendon",
            label="Clarendon (approx)",
            filters=FilterOptions(contrast=120, saturation=125, brightness=105),
            sharpen=0.4,
        ),
        PresetInfo(
            id="gingham",
            label="Gingham (approx)",
            filters=FilterOptions(contrast=92, saturation=90, brightness=108, grayscale=0.08),
            sharpen=0,
        ),
        PresetInfo(
            id="moon",
            label="Moon (approx)",
            filters=FilterOptions(grayscale=1, contrast=115, brightness=108),
            sharpen=0.2,
        ),
        PresetInfo(
            id="lofi",
            label="Lo-Fi (approx)",
            filters=FilterOptions(contrast=135, saturation=140, brightness=105),
            sharpen=0.6,
        ),
        PresetInfo(
            id="earlybird",
            label="Earlybird (approx)",
            filters=FilterOptions(contrast=112, saturation=90, brightness=110, grayscale=0.06),
            sharpen=0.1,
        ),
        PresetInfo(
            id="inkwell",
            label="Inkwell (approx)",
            filters=FilterOptions(grayscale=1, contrast=120, brightness=102),
            sharpen=0.3,
        ),
    ]
}


def list_presets() -> List[PresetInfo]:
    return list(FILTER_PRESETS.values())


def apply_preset(plan: RenderPlan, preset_id: Optional[str]) -> RenderPlan:
    """
    Return a copy of plan with the preset's filters and sharpen strength.

    Unknown ids (and "custom" or empty) leave the plan untouched.
    """
    key = str(preset_id or "").strip().lower()
    preset = FILTER_PRESETS.get(key)
    if preset is None:
        if key and key != "custom":
            logger.warning(f"Unknown filter preset '{preset_id}', keeping request filters")
        return plan

    return plan.model_copy(
        update={
            "filters": preset.filters,
            "sharpen": SharpenOptions(strength=preset.sharpen),
        }
    )
