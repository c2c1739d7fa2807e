"""
streamdecode core - value types shared by the decoder, the option
builders and the backends.

Models: data classes and enums only (Size, DecodingOptions, ...)
"""

from .models import (
    DecoderState,
    DecodingMode,
    DecodingOptions,
    Size,
    SubsamplingLevel,
)

__all__ = [
    'DecoderState',
    'DecodingMode',
    'DecodingOptions',
    'Size',
    'SubsamplingLevel',
]
