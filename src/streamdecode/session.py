"""Incremental image decoder.

ImageDecoder accepts image bytes as they arrive, reports frame metadata
before the whole image is present and produces frames on demand, either
as exact decodes or as thumbnails sized for drawing.

Usage:
    from streamdecode import ImageDecoder, DecodingOptions, Size

    decoder = ImageDecoder()
    for chunk, last in stream:
        decoder.set_data(chunk, all_data_received=last)
        if decoder.frame_count:
            image = decoder.create_frame_image(
                0, decoding_options=DecodingOptions(size_for_drawing=Size(120, 120)))

Nothing is cached here. Every query goes to the backend against the bytes
received so far; call again after feeding more data.
"""
from __future__ import annotations

import logging
from typing import Any, BinaryIO, Optional

from .backend import ImageSourceBackend, ImageStatus
from .constants import PIXEL_HEIGHT, PIXEL_WIDTH
from .core.models import DecoderState, DecodingMode, DecodingOptions, Size, SubsamplingLevel
from .errors import DecoderContractError
from .metadata import frame_duration
from .options import image_source_async_options, image_source_options
from .properties import PropertyTable, get_int

log = logging.getLogger(__name__)


class ImageDecoder:
    """Single-writer incremental decode session over an ImageSourceBackend."""

    def __init__(self, backend: Optional[ImageSourceBackend] = None) -> None:
        if backend is None:
            from .pillow_backend import PillowBackend
            backend = PillowBackend()
        self._backend = backend
        self._source = backend.create_incremental()
        self._all_data_received = False
        self._received_any = False

    # ── Ingestion ────────────────────────────────────────────────────

    @property
    def is_all_data_received(self) -> bool:
        return self._all_data_received

    @property
    def state(self) -> DecoderState:
        if self._all_data_received:
            return DecoderState.COMPLETE
        return DecoderState.RECEIVING if self._received_any else DecoderState.EMPTY

    def set_data(self, data: bytes, all_data_received: bool) -> None:
        """Append data. all_data_received=True marks the final chunk."""
        self._begin_update(all_data_received)
        self._backend.update_data(self._source, data, all_data_received)

    def set_data_provider(self, provider: BinaryIO, all_data_received: bool) -> None:
        """Append the bytes a streaming provider yields."""
        self._begin_update(all_data_received)
        self._backend.update_data_provider(self._source, provider, all_data_received)

    def _begin_update(self, all_data_received: bool) -> None:
        if self._all_data_received:
            raise DecoderContractError("data appended after the final chunk")
        self._all_data_received = all_data_received
        self._received_any = True
        if all_data_received:
            log.debug("Decoder %x: all data received", id(self))

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def frame_count(self) -> int:
        """Frames the backend can see so far. Grows as data arrives."""
        return self._backend.frame_count(self._source)

    def is_frame_complete(self, index: int) -> bool:
        frame_count = self.frame_count
        if not 0 <= index < frame_count:
            raise DecoderContractError(
                f"frame {index} out of range ({frame_count} frames)")

        # Per-index status stays incomplete for the last frame (or the only
        # frame of a still image) until decoding finishes; ask the source.
        if index == frame_count - 1:
            return self._backend.status(self._source) == ImageStatus.COMPLETE

        return self._backend.status_at_index(self._source, index) == ImageStatus.COMPLETE

    def frame_size(
        self, index: int,
        subsampling_level: SubsamplingLevel = SubsamplingLevel.DEFAULT,
    ) -> Optional[Size]:
        """Pixel size of a frame at the given subsampling level, if known."""
        properties = self._backend.properties_at_index(
            self._source, index, image_source_options(subsampling_level))
        width = get_int(properties, PIXEL_WIDTH)
        height = get_int(properties, PIXEL_HEIGHT)
        if width is None or height is None:
            return None
        return Size(width, height)

    def properties(self) -> Optional[PropertyTable]:
        """Container-level property table (format, loop count, ...)."""
        return self._backend.properties(self._source, image_source_options())

    def frame_duration(self, index: int) -> Optional[float]:
        """Display duration in seconds; None while the frame is unreadable."""
        return frame_duration(self._backend, self._source, index)

    # ── Decoding ─────────────────────────────────────────────────────

    def create_frame_image(
        self, index: int,
        subsampling_level: SubsamplingLevel = SubsamplingLevel.DEFAULT,
        decoding_options: DecodingOptions = DecodingOptions.DEFAULT,
    ) -> Optional[Any]:
        """Decode a frame. Returns None when the data cannot produce it yet."""
        if not 0 <= index < self.frame_count:
            return None

        if decoding_options.mode == DecodingMode.SYNCHRONOUS:
            options = image_source_options(subsampling_level)
            return self._backend.create_image_at_index(self._source, index, options)

        # Compare against the native size, not the subsampled one
        size = self.frame_size(index)
        if size is None:
            return None

        size_for_drawing = decoding_options.size_for_drawing
        if size_for_drawing is not None and size_for_drawing.area < size.area:
            size = size_for_drawing

        options = image_source_async_options(size, subsampling_level)
        return self._backend.create_thumbnail_at_index(self._source, index, options)
