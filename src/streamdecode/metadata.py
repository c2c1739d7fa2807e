"""Frame metadata resolution - animation timing per frame.

Formats store frame delays in different places:

    GIF, APNG   per-frame table   {GIF} / {PNG} -> DelayTime, UnclampedDelayTime
    HEICS       container table   {HEICS} -> FrameInfo[index] -> DelayTime

frame_duration() walks that fallback chain and applies the minimum
duration rule to whatever it finds.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from .backend import ImageSourceBackend
from .constants import (
    DELAY_TIME,
    FALLBACK_FRAME_DURATION,
    FRAME_INFO,
    GIF_DICTIONARY,
    HEICS_DICTIONARY,
    MINIMUM_FRAME_DURATION,
    PNG_DICTIONARY,
    UNCLAMPED_DELAY_TIME,
)
from .options import image_source_options
from .properties import PropertyTable, get_list, get_number, get_table


def animation_properties(
    frame_properties: PropertyTable,
    supports_sequence_format: bool = False,
) -> Optional[PropertyTable]:
    """Animation sub-table of a frame: GIF first, then PNG, then HEICS."""
    for key in (GIF_DICTIONARY, PNG_DICTIONARY):
        table = get_table(frame_properties, key)
        if table is not None:
            return table

    if supports_sequence_format:
        return get_table(frame_properties, HEICS_DICTIONARY)
    return None


def heics_animation_properties(
    container_properties: PropertyTable,
    index: int,
    supports_sequence_format: bool = False,
) -> Optional[PropertyTable]:
    """Timing entry for frame index from a HEICS container table.

    HEICS sequences carry no per-frame tables; all frames live in one list:

        {HEICS} = {FrameInfo = ({DelayTime = 0.1}, {DelayTime = 0.1}, ...),
                   LoopCount = 0}
    """
    if not supports_sequence_format:
        return None

    heics = get_table(container_properties, HEICS_DICTIONARY)
    frame_info = get_list(heics, FRAME_INFO)
    if frame_info is None or len(frame_info) <= index:
        return None

    entry = frame_info[index]
    return entry if isinstance(entry, Mapping) else None


def apply_duration_floor(duration: float) -> float:
    """Durations under 11 ms play at 100 ms."""
    return FALLBACK_FRAME_DURATION if duration < MINIMUM_FRAME_DURATION else duration


def delay_time(animation: Optional[PropertyTable]) -> float:
    """Raw delay in seconds: unclamped delay if present, else delay, else 0."""
    for key in (UNCLAMPED_DELAY_TIME, DELAY_TIME):
        value = get_number(animation, key)
        if value is not None:
            return value
    return 0.0


def frame_duration(backend: ImageSourceBackend, source: Any, index: int) -> Optional[float]:
    """Display duration of frame index in seconds.

    Returns None only when the backend has no property table for the frame
    yet; a frame without timing metadata gets the fallback duration.
    """
    options = image_source_options()
    frame_properties = backend.properties_at_index(source, index, options)
    if frame_properties is None:
        return None

    supports_sequence = backend.supports_sequence_format
    animation = animation_properties(frame_properties, supports_sequence)

    if animation is None:
        container_properties = backend.properties(source, options)
        if container_properties is not None:
            animation = heics_animation_properties(
                container_properties, index, supports_sequence)

    return apply_duration_floor(delay_time(animation))
