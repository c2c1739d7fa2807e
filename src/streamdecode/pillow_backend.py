"""Pillow implementation of ImageSourceBackend.

Keeps the received bytes in a buffer and opens a fresh Pillow image over
them for every query, so nothing read from a partial buffer outlives the
call that produced it. Formats: whatever the installed Pillow can open;
animation timing is reported for GIF and APNG.

Pillow raises a range of exceptions for truncated input (OSError,
SyntaxError, EOFError, struct.error, ...). They all mean "cannot decode
this yet" here and come back as None / INCOMPLETE.
"""
from __future__ import annotations

import io
import logging
import struct
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional

from PIL import Image

from .backend import ImageSourceBackend, ImageStatus
from .constants import (
    DELAY_TIME,
    FILE_SIZE,
    FORMAT,
    FRAME_COUNT,
    GIF_DICTIONARY,
    LOOP_COUNT,
    PIXEL_HEIGHT,
    PIXEL_WIDTH,
    PNG_DICTIONARY,
    SUBSAMPLE_FACTOR,
    THUMBNAIL_MAX_PIXEL_SIZE,
    UNCLAMPED_DELAY_TIME,
)
from .options import DecodeOptions
from .properties import PropertyTable, get_int

log = logging.getLogger(__name__)

_DECODE_ERRORS = (OSError, SyntaxError, EOFError, ValueError, IndexError, struct.error)

# Pillow format name -> animation sub-table key
_ANIMATION_KEYS = {
    'GIF': GIF_DICTIONARY,
    'PNG': PNG_DICTIONARY,
}


class PillowSource:
    """Incremental source handle: received bytes, final flag and the most
    frames seen so far.

    Pillow can reach an APNG frame from its fcTL header and then lose it
    again while the following fdAT chunk is partial, so frame_count only
    ever grows.
    """

    __slots__ = ('buffer', 'final', 'frame_count')

    def __init__(self) -> None:
        self.buffer = bytearray()
        self.final = False
        self.frame_count = 0


# =========================================================================
# Pillow helpers
# =========================================================================

def _open_image(source: PillowSource) -> Optional[Image.Image]:
    if not source.buffer:
        return None
    try:
        return Image.open(io.BytesIO(bytes(source.buffer)))
    except Image.DecompressionBombError as e:
        log.warning("Refusing to open image: %s", e)
    except _DECODE_ERRORS as e:
        log.debug("Cannot identify image from %d bytes: %s", len(source.buffer), e)
    return None


@contextmanager
def _opened(source: PillowSource) -> Iterator[Optional[Image.Image]]:
    im = _open_image(source)
    try:
        yield im
    finally:
        if im is not None:
            im.close()


def _seek(im: Image.Image, index: int) -> bool:
    if index < 0:
        return False
    try:
        im.seek(index)
    except _DECODE_ERRORS:
        return False
    return True


def _loads(im: Image.Image) -> bool:
    """Whether the current frame decodes fully from the data present."""
    try:
        im.load()
    except Image.DecompressionBombError as e:
        log.warning("Refusing to decode frame: %s", e)
        return False
    except _DECODE_ERRORS as e:
        log.debug("Frame %d not decodable yet: %s", im.tell(), e)
        return False
    return True


def _count_frames(im: Image.Image) -> int:
    count = 1
    while _seek(im, count):
        count += 1
    return count


def _update_frame_count(source: PillowSource, im: Optional[Image.Image]) -> int:
    if im is not None:
        source.frame_count = max(source.frame_count, _count_frames(im))
    return source.frame_count


def _animation_table(im: Image.Image) -> dict:
    table = {}
    duration = im.info.get('duration')
    if isinstance(duration, (int, float)) and not isinstance(duration, bool):
        seconds = duration / 1000.0
        table[UNCLAMPED_DELAY_TIME] = seconds
        table[DELAY_TIME] = round(seconds, 2)
    return table


def _detached(im: Image.Image) -> Image.Image:
    """Independent copy of the current frame in a mode Image.reduce accepts."""
    if im.mode in ('P', 'PA'):
        return im.convert('RGBA')
    if im.mode == '1':
        return im.convert('L')
    if im.mode.startswith('I;16'):
        return im.convert('I')
    return im.copy()


def _subsample(frame: Image.Image, factor: int) -> Image.Image:
    if factor > 1:
        return frame.reduce(factor)
    return frame


def _render(
    im: Image.Image, factor: int, max_size: Optional[int] = None,
) -> Optional[Image.Image]:
    """Detach, subsample and bound the loaded frame; None if Pillow cannot."""
    try:
        frame = _subsample(_detached(im), factor)
        if max_size is not None:
            frame.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)
    except ValueError as e:
        log.warning("Cannot resample %s frame %d: %s", im.mode, im.tell(), e)
        return None
    return frame


def _subsample_factor(options: DecodeOptions) -> int:
    return get_int(options, SUBSAMPLE_FACTOR) or 1


# =========================================================================
# Backend
# =========================================================================

class PillowBackend(ImageSourceBackend):
    """Incremental decoding on top of Pillow.

    Args:
        max_image_pixels: Overrides Image.MAX_IMAGE_PIXELS (decompression
            bomb limit) when given. The setting is process-wide.
    """

    supports_sequence_format = False

    def __init__(self, max_image_pixels: Optional[int] = None) -> None:
        if max_image_pixels is not None:
            Image.MAX_IMAGE_PIXELS = max_image_pixels

    # ── Ingestion ────────────────────────────────────────────────────

    def create_incremental(self) -> PillowSource:
        return PillowSource()

    def update_data(self, source: PillowSource, data: bytes, final: bool) -> None:
        source.buffer += data
        source.final = final

    def update_data_provider(self, source: PillowSource, provider: BinaryIO, final: bool) -> None:
        self.update_data(source, provider.read() or b'', final)

    # ── Metadata ─────────────────────────────────────────────────────

    def frame_count(self, source: PillowSource) -> int:
        with _opened(source) as im:
            return _update_frame_count(source, im)

    def properties_at_index(
        self, source: PillowSource, index: int, options: DecodeOptions,
    ) -> Optional[PropertyTable]:
        with _opened(source) as im:
            if im is None or not _seek(im, index):
                return None

            factor = _subsample_factor(options)
            width, height = im.size
            properties = {
                PIXEL_WIDTH: -(-width // factor),
                PIXEL_HEIGHT: -(-height // factor),
            }
            key = _ANIMATION_KEYS.get(im.format)
            if key is not None:
                properties[key] = _animation_table(im)
            return properties

    def properties(self, source: PillowSource, options: DecodeOptions) -> Optional[PropertyTable]:
        with _opened(source) as im:
            if im is None:
                return None

            properties = {
                FILE_SIZE: len(source.buffer),
                FORMAT: im.format,
            }
            key = _ANIMATION_KEYS.get(im.format)
            if key is not None:
                container = {}
                loop = im.info.get('loop')
                if isinstance(loop, int):
                    container[LOOP_COUNT] = loop
                properties[key] = container
            properties[FRAME_COUNT] = _update_frame_count(source, im)
            return properties

    def status_at_index(self, source: PillowSource, index: int) -> ImageStatus:
        with _opened(source) as im:
            if im is None:
                return ImageStatus.INVALID if source.final else ImageStatus.UNKNOWN_TYPE
            if not _seek(im, index):
                return ImageStatus.INCOMPLETE
            if source.final:
                return ImageStatus.COMPLETE if _loads(im) else ImageStatus.INVALID
            # A later frame header means this frame's data is all here
            return ImageStatus.COMPLETE if _seek(im, index + 1) else ImageStatus.INCOMPLETE

    def status(self, source: PillowSource) -> ImageStatus:
        with _opened(source) as im:
            if im is None:
                return ImageStatus.INVALID if source.final else ImageStatus.UNKNOWN_TYPE
            if not source.final:
                return ImageStatus.INCOMPLETE
            last = _count_frames(im) - 1
            if _seek(im, last) and _loads(im):
                return ImageStatus.COMPLETE
            return ImageStatus.INVALID

    # ── Decoding ─────────────────────────────────────────────────────

    def create_image_at_index(
        self, source: PillowSource, index: int, options: DecodeOptions,
    ) -> Optional[Image.Image]:
        with _opened(source) as im:
            if im is None or not _seek(im, index) or not _loads(im):
                return None
            return _render(im, _subsample_factor(options))

    def create_thumbnail_at_index(
        self, source: PillowSource, index: int, options: DecodeOptions,
    ) -> Optional[Image.Image]:
        factor = _subsample_factor(options)
        max_size = get_int(options, THUMBNAIL_MAX_PIXEL_SIZE)
        if max_size is not None:
            # Drawing sizes under one pixel still bound the thumbnail
            max_size = max(max_size, 1)

        with _opened(source) as im:
            if im is None or not _seek(im, index):
                return None
            # JPEG can decode straight at a reduced DCT scale
            if im.format == 'JPEG' and factor == 1 and max_size is not None:
                im.draft(im.mode, (max_size, max_size))
            if not _loads(im):
                return None
            return _render(im, factor, max_size)
