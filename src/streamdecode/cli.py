#!/usr/bin/env python3
"""
streamdecode - Command Line Interface

Entry point for the streamdecode package. Every command drives an
ImageDecoder the way a streaming client would.
"""

import argparse
import logging
import os
import sys

from streamdecode.__version__ import __version__

log = logging.getLogger(__name__)


def _setup_logging(verbose=0):
    """Configure logging from -v count (filter out noisy PIL)."""
    if verbose >= 2:
        logging.basicConfig(level=logging.DEBUG, format='[%(levelname)s] %(name)s: %(message)s')
        logging.getLogger('PIL').setLevel(logging.WARNING)
    elif verbose == 1:
        logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING)


def _parse_size(text):
    """Parse 'WxH' into a Size. Raises argparse.ArgumentTypeError."""
    from streamdecode.core.models import Size

    try:
        w, h = text.lower().split('x')
        width, height = float(w), float(h)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid size '{text}' (use WxH)")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"Invalid size '{text}' (must be positive)")
    return Size(width, height)


def _make_decoder():
    from streamdecode.conf import settings
    from streamdecode.pillow_backend import PillowBackend
    from streamdecode.session import ImageDecoder

    return ImageDecoder(PillowBackend(max_image_pixels=settings.max_image_pixels))


def _load_decoder(path):
    """Decoder fed with the whole file through the provider path."""
    decoder = _make_decoder()
    with open(path, 'rb') as f:
        decoder.set_data_provider(f, all_data_received=True)
    return decoder


def _format_duration(duration):
    if duration is None:
        return "n/a"
    return f"{duration * 1000:.0f} ms"


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="streamdecode",
        description="Incremental image decoding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    streamdecode info anim.gif                 Frame sizes and durations
    streamdecode stream photo.jpg -c 1024      Feed 1 KiB at a time
    streamdecode extract anim.gif out/         Decode all frames to PNG
    streamdecode extract anim.gif out/ --size 64x64 --subsample 2
    streamdecode config --chunk-size 8192      Save defaults
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    info_parser = subparsers.add_parser("info", help="Show frame metadata")
    info_parser.add_argument("path", help="Image file")

    stream_parser = subparsers.add_parser("stream", help="Decode a file chunk by chunk")
    stream_parser.add_argument("path", help="Image file")
    stream_parser.add_argument("--chunk-size", "-c", type=int, default=None,
                               help="Bytes per chunk (default from config)")

    extract_parser = subparsers.add_parser("extract", help="Decode frames to PNG files")
    extract_parser.add_argument("path", help="Image file")
    extract_parser.add_argument("output_dir", help="Output directory")
    extract_parser.add_argument("--size", "-s", type=_parse_size, default=None,
                                help="Drawing size WxH (thumbnail decode)")
    extract_parser.add_argument("--subsample", type=int, choices=[1, 2, 4, 8], default=None,
                                help="Subsampling factor (default from config)")
    extract_parser.add_argument("--sync", action="store_true",
                                help="Exact decode instead of thumbnail decode")

    config_parser = subparsers.add_parser("config", help="Show or save defaults")
    config_parser.add_argument("--subsample", type=int, choices=[1, 2, 4, 8],
                               help="Default subsampling factor")
    config_parser.add_argument("--chunk-size", type=int, help="Default stream chunk size")
    config_parser.add_argument("--max-pixels", type=int,
                               help="Decompression bomb limit in pixels")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging(args.verbose)

    if args.command == "info":
        return show_info(args.path)
    elif args.command == "stream":
        return stream_file(args.path, chunk_size=args.chunk_size)
    elif args.command == "extract":
        return extract_frames(args.path, args.output_dir, size=args.size,
                              subsample=args.subsample, sync=args.sync)
    elif args.command == "config":
        return configure(subsample=args.subsample, chunk_size=args.chunk_size,
                         max_pixels=args.max_pixels)

    return 0


def show_info(path):
    """Print format, frame count and per-frame size/completeness/duration."""
    from streamdecode.constants import FORMAT

    try:
        decoder = _load_decoder(path)
    except OSError as e:
        print(f"Error: {e}")
        return 1

    frame_count = decoder.frame_count
    if frame_count == 0:
        print(f"Error: {path}: not a decodable image")
        return 1

    container = decoder.properties() or {}
    print(f"{os.path.basename(path)}")
    print("=" * 40)
    print(f"  format: {container.get(FORMAT, 'unknown')}")
    print(f"  frames: {frame_count}")

    for index in range(frame_count):
        size = decoder.frame_size(index)
        complete = decoder.is_frame_complete(index)
        duration = decoder.frame_duration(index)
        print(f"  [{index:4d}] {size or 'n/a'}  "
              f"{'complete' if complete else 'incomplete'}  {_format_duration(duration)}")
    return 0


def stream_file(path, chunk_size=None):
    """Feed a file in chunks, reporting what the decoder sees after each."""
    from streamdecode.conf import settings

    chunk_size = chunk_size or settings.chunk_size
    if chunk_size <= 0:
        print(f"Error: invalid chunk size {chunk_size}")
        return 1

    try:
        total = os.path.getsize(path)
        f = open(path, 'rb')
    except OSError as e:
        print(f"Error: {e}")
        return 1

    decoder = _make_decoder()
    received = 0
    with f:
        while True:
            chunk = f.read(chunk_size)
            received += len(chunk)
            final = not chunk or received >= total
            decoder.set_data(chunk, all_data_received=final)

            frame_count = decoder.frame_count
            if frame_count:
                last = "complete" if decoder.is_frame_complete(frame_count - 1) else "partial"
            else:
                last = "-"
            print(f"  {received:>10d}/{total} bytes  frames={frame_count}  last={last}")
            if final:
                break

    return 0 if decoder.frame_count else 1


def extract_frames(path, output_dir, size=None, subsample=None, sync=False):
    """Decode every frame to output_dir/frame_NNNN.png (+ .txt delay in ms)."""
    from streamdecode.conf import settings
    from streamdecode.core.models import DecodingMode, DecodingOptions, SubsamplingLevel

    level = SubsamplingLevel(subsample) if subsample else settings.subsampling_level
    mode = DecodingMode.SYNCHRONOUS if sync else DecodingMode.ASYNCHRONOUS
    options = DecodingOptions(mode=mode, size_for_drawing=size)

    try:
        decoder = _load_decoder(path)
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        print(f"Error: {e}")
        return 1

    written = 0
    for index in range(decoder.frame_count):
        image = decoder.create_frame_image(index, subsampling_level=level,
                                           decoding_options=options)
        if image is None:
            log.warning("Frame %d could not be decoded", index)
            continue

        base = os.path.join(output_dir, f"frame_{index:04d}")
        image.save(base + '.png')
        duration = decoder.frame_duration(index)
        with open(base + '.txt', 'w') as f:
            f.write(str(int(round((duration or 0) * 1000))))
        written += 1

    print(f"Extracted {written} frames to {output_dir}")
    return 0 if written else 1


def configure(subsample=None, chunk_size=None, max_pixels=None):
    """Persist the given defaults, then print the effective ones."""
    from streamdecode.conf import CONFIG_PATH, settings

    if subsample is not None:
        settings.set_subsampling_level(subsample)
    if chunk_size is not None:
        if chunk_size <= 0:
            print(f"Error: invalid chunk size {chunk_size}")
            return 1
        settings.set_chunk_size(chunk_size)
    if max_pixels is not None:
        if max_pixels <= 0:
            print(f"Error: invalid pixel limit {max_pixels}")
            return 1
        settings.set_max_image_pixels(max_pixels)

    print(f"Config: {CONFIG_PATH}")
    print(f"  subsampling_level: {int(settings.subsampling_level)}")
    print(f"  chunk_size: {settings.chunk_size}")
    print(f"  max_image_pixels: {settings.max_image_pixels}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
