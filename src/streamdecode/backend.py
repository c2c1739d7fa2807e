"""
Abstract image-source backend.

ImageDecoder never parses codec bitstreams itself. It drives an
incremental source through this contract and only reads the property
tables and pixel buffers the backend hands back. Any missing value is
returned as None; backends do not raise for data that is incomplete or
malformed.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, BinaryIO, Optional

from .options import DecodeOptions
from .properties import PropertyTable


class ImageStatus(Enum):
    """Decode status of a source or a single frame."""
    UNKNOWN_TYPE = "unknown_type"   # not enough bytes to identify a format
    INVALID = "invalid"
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"


class ImageSourceBackend(ABC):
    """Base class for incremental decode engines"""

    # Whether the engine reports HEICS-style container timing tables.
    supports_sequence_format: bool = False

    @abstractmethod
    def create_incremental(self) -> Any:
        """Create an empty source handle that accepts data incrementally."""

    @abstractmethod
    def update_data(self, source: Any, data: bytes, final: bool) -> None:
        """Append data to the source buffer."""

    @abstractmethod
    def update_data_provider(self, source: Any, provider: BinaryIO, final: bool) -> None:
        """Append everything a readable binary stream currently yields."""

    @abstractmethod
    def frame_count(self, source: Any) -> int:
        """Frames present in the data received so far."""

    @abstractmethod
    def properties_at_index(
        self, source: Any, index: int, options: DecodeOptions,
    ) -> Optional[PropertyTable]:
        """Per-frame property table, or None when it cannot be read yet."""

    @abstractmethod
    def properties(self, source: Any, options: DecodeOptions) -> Optional[PropertyTable]:
        """Container-level property table."""

    @abstractmethod
    def status_at_index(self, source: Any, index: int) -> ImageStatus:
        pass

    @abstractmethod
    def status(self, source: Any) -> ImageStatus:
        pass

    @abstractmethod
    def create_image_at_index(
        self, source: Any, index: int, options: DecodeOptions,
    ) -> Optional[Any]:
        """Exact decode of a frame. None on insufficient data."""

    @abstractmethod
    def create_thumbnail_at_index(
        self, source: Any, index: int, options: DecodeOptions,
    ) -> Optional[Any]:
        """Thumbnail decode bounded by the ThumbnailMaxPixelSize option."""
