"""
streamdecode Models - Pure data classes with no backend dependencies.

These models are shared by ImageDecoder, the option builders and any
ImageSourceBackend implementation.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import ClassVar, Optional

# =============================================================================
# Geometry
# =============================================================================


@dataclass(frozen=True)
class Size:
    """Width/height pair. Backends report integral pixel sizes."""
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def max_dimension(self) -> float:
        """Larger of width and height."""
        return max(self.width, self.height)

    def __str__(self) -> str:
        return f"{self.width:g}x{self.height:g}"


# =============================================================================
# Decode parameters
# =============================================================================


class SubsamplingLevel(IntEnum):
    """Decode every Nth pixel per axis."""
    LEVEL0 = 1
    LEVEL1 = 2
    LEVEL2 = 4
    LEVEL3 = 8

    DEFAULT = 1  # alias of LEVEL0: no subsampling


class DecodingMode(Enum):
    """How create_frame_image() asks the backend for pixels."""
    SYNCHRONOUS = auto()    # exact decode
    ASYNCHRONOUS = auto()   # thumbnail decode bounded by the drawing size


@dataclass(frozen=True)
class DecodingOptions:
    """
    Per-call decode request.

    size_for_drawing is only consulted in ASYNCHRONOUS mode.
    """
    mode: DecodingMode = DecodingMode.ASYNCHRONOUS
    size_for_drawing: Optional[Size] = None

    DEFAULT: ClassVar['DecodingOptions']


DecodingOptions.DEFAULT = DecodingOptions()


# =============================================================================
# Decoder lifecycle
# =============================================================================


class DecoderState(Enum):
    """Ingestion state of an ImageDecoder."""
    EMPTY = auto()      # no bytes yet
    RECEIVING = auto()  # some bytes, more to come
    COMPLETE = auto()   # final chunk received
