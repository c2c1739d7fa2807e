"""Decode option builders.

Pure functions: each call returns a fresh read-only mapping, so no option
table is ever shared or mutated between decode calls.

    image_source_options(level)               exact decode / property reads
    image_source_async_options(size, level)   thumbnail decode
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from .constants import (
    CREATE_THUMBNAIL_FROM_IMAGE_ALWAYS,
    SHOULD_CACHE,
    SHOULD_CACHE_IMMEDIATELY,
    SUBSAMPLE_FACTOR,
    THUMBNAIL_MAX_PIXEL_SIZE,
)
from .core.models import Size, SubsamplingLevel

DecodeOptions = Mapping[str, Any]


def _with_subsampling(options: dict, subsampling_level: SubsamplingLevel) -> DecodeOptions:
    # No key at all for the default level
    if subsampling_level != SubsamplingLevel.DEFAULT:
        options[SUBSAMPLE_FACTOR] = int(subsampling_level)
    return MappingProxyType(options)


def image_source_options(
    subsampling_level: SubsamplingLevel = SubsamplingLevel.DEFAULT,
) -> DecodeOptions:
    """Options for exact decodes and per-frame property queries."""
    return _with_subsampling({SHOULD_CACHE: True}, subsampling_level)


def image_source_async_options(
    size_for_drawing: Size,
    subsampling_level: SubsamplingLevel = SubsamplingLevel.DEFAULT,
) -> DecodeOptions:
    """Options for thumbnail decodes bounded by size_for_drawing.

    The thumbnail is always generated from the image data, never taken from
    an embedded preview, so its dimensions match the frame.
    """
    options = {
        SHOULD_CACHE_IMMEDIATELY: True,
        CREATE_THUMBNAIL_FROM_IMAGE_ALWAYS: True,
        THUMBNAIL_MAX_PIXEL_SIZE: int(size_for_drawing.max_dimension),
    }
    return _with_subsampling(options, subsampling_level)
