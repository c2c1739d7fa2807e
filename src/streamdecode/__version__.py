"""streamdecode version information."""

__version__ = "0.4.2"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history:
# 0.1.0 - Initial release: incremental ImageDecoder over a pluggable backend
# 0.2.0 - Pillow backend (GIF, APNG, PNG, JPEG, WebP), frame completeness
# 0.3.0 - HEICS FrameInfo fallback for sequence-style containers,
#         capability flag on the backend instead of version checks
# 0.4.0 - CLI (info, stream, extract), persisted defaults in config.json
# 0.4.1 - Thumbnail path never upscales past the native frame size
# 0.4.2 - Monotonic APNG frame count, 16-bit subsampling, sub-pixel thumbnail bound
