"""Shared constants for streamdecode.

Property-table keys follow the names image-source backends use for their
metadata dictionaries, so tables from any backend can be read the same way.
"""

# =========================================================================
# Frame / container property keys
# =========================================================================

PIXEL_WIDTH = "PixelWidth"
PIXEL_HEIGHT = "PixelHeight"

# Format-specific animation sub-tables
GIF_DICTIONARY = "{GIF}"
PNG_DICTIONARY = "{PNG}"
HEICS_DICTIONARY = "{HEICS}"

# Keys inside an animation sub-table
UNCLAMPED_DELAY_TIME = "UnclampedDelayTime"
DELAY_TIME = "DelayTime"
LOOP_COUNT = "LoopCount"
# HEICS keeps every frame's timing at container level, one entry per frame
FRAME_INFO = "FrameInfo"

# Container-level keys reported by the Pillow backend
FILE_SIZE = "FileSize"
FORMAT = "Format"
FRAME_COUNT = "FrameCount"

# =========================================================================
# Decode option keys
# =========================================================================

SHOULD_CACHE = "ShouldCache"
SHOULD_CACHE_IMMEDIATELY = "ShouldCacheImmediately"
CREATE_THUMBNAIL_FROM_IMAGE_ALWAYS = "CreateThumbnailFromImageAlways"
THUMBNAIL_MAX_PIXEL_SIZE = "ThumbnailMaxPixelSize"
SUBSAMPLE_FACTOR = "SubsampleFactor"

# =========================================================================
# Frame duration floor
# =========================================================================
# Frames asking for <= 10 ms are shown for 100 ms instead. Many encoders use
# a zero delay to flash frames as fast as possible; browsers play them at
# 100 ms and so do we.
MINIMUM_FRAME_DURATION = 0.011   # seconds
FALLBACK_FRAME_DURATION = 0.1    # seconds
