"""
streamdecode - incremental image decoding

Feed image bytes as they arrive, query frame metadata before the whole
image is present, and decode frames exactly or as thumbnails.

Features:
- Frame count, size and completeness on partial data
- Animation timing for GIF, APNG and HEICS-style sequences
- Thumbnail decodes bounded by a drawing size, never upscaled
- Subsampled decodes (1/2, 1/4, 1/8 per axis)
- Pluggable backend; Pillow backend included

Usage:
    # As a library
    from streamdecode import ImageDecoder
    decoder = ImageDecoder()
    decoder.set_data(chunk, all_data_received=False)

    # Command line
    streamdecode info anim.gif
    streamdecode extract anim.gif frames/
"""

from streamdecode.__version__ import __version__

# Core exports
from streamdecode.backend import ImageSourceBackend, ImageStatus
from streamdecode.core.models import (
    DecoderState,
    DecodingMode,
    DecodingOptions,
    Size,
    SubsamplingLevel,
)
from streamdecode.errors import DecoderContractError
from streamdecode.session import ImageDecoder

# Pillow backend
from streamdecode.pillow_backend import PillowBackend

__all__ = [
    # Version
    "__version__",
    # Core
    "ImageDecoder",
    "DecodingOptions",
    "DecodingMode",
    "DecoderState",
    "Size",
    "SubsamplingLevel",
    "DecoderContractError",
    # Backends
    "ImageSourceBackend",
    "ImageStatus",
    "PillowBackend",
]
