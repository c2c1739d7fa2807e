"""Tests for metadata – animation table lookup and the duration fallback chain."""

import unittest
from unittest.mock import MagicMock

import pytest

from streamdecode.backend import ImageSourceBackend
from streamdecode.constants import (
    DELAY_TIME,
    FRAME_INFO,
    GIF_DICTIONARY,
    HEICS_DICTIONARY,
    PNG_DICTIONARY,
    SHOULD_CACHE,
    UNCLAMPED_DELAY_TIME,
)
from streamdecode.metadata import (
    animation_properties,
    apply_duration_floor,
    delay_time,
    frame_duration,
    heics_animation_properties,
)


def _make_backend(frame_properties=None, container_properties=None, sequence=True):
    """Mock backend returning fixed property tables."""
    backend = MagicMock(spec=ImageSourceBackend)
    backend.supports_sequence_format = sequence
    backend.properties_at_index.return_value = frame_properties
    backend.properties.return_value = container_properties
    return backend


def _heics(*delays):
    return {HEICS_DICTIONARY: {FRAME_INFO: [{DELAY_TIME: d} for d in delays],
                               'LoopCount': 0}}


# ── Duration floor ───────────────────────────────────────────────────────────

@pytest.mark.parametrize("raw,expected", [
    (0.0, 0.1),
    (0.01, 0.1),
    (0.0109, 0.1),
    (0.011, 0.011),
    (0.05, 0.05),
    (0.5, 0.5),
    (-1.0, 0.1),
])
def test_duration_floor(raw, expected):
    assert apply_duration_floor(raw) == expected


# ── animation_properties ─────────────────────────────────────────────────────

class TestAnimationProperties(unittest.TestCase):
    """Per-frame sub-table priority: GIF, PNG, HEICS."""

    def test_gif_wins_over_png(self):
        gif = {DELAY_TIME: 0.2}
        png = {DELAY_TIME: 0.3}
        props = {PNG_DICTIONARY: png, GIF_DICTIONARY: gif}
        self.assertIs(animation_properties(props, True), gif)

    def test_png_when_no_gif(self):
        png = {DELAY_TIME: 0.3}
        self.assertIs(animation_properties({PNG_DICTIONARY: png}), png)

    def test_png_wins_over_heics(self):
        png = {DELAY_TIME: 0.3}
        props = {HEICS_DICTIONARY: {DELAY_TIME: 0.4}, PNG_DICTIONARY: png}
        self.assertIs(animation_properties(props, True), png)

    def test_heics_only_with_sequence_support(self):
        heics = {DELAY_TIME: 0.4}
        props = {HEICS_DICTIONARY: heics}
        self.assertIs(animation_properties(props, True), heics)
        self.assertIsNone(animation_properties(props, False))

    def test_none_when_absent(self):
        self.assertIsNone(animation_properties({'PixelWidth': 10}, True))

    def test_other_formats_ignored(self):
        self.assertIsNone(animation_properties({'{WebP}': {DELAY_TIME: 0.2}}, True))

    def test_non_table_value_skipped(self):
        png = {DELAY_TIME: 0.3}
        props = {GIF_DICTIONARY: 'garbage', PNG_DICTIONARY: png}
        self.assertIs(animation_properties(props), png)


# ── heics_animation_properties ───────────────────────────────────────────────

class TestHeicsAnimationProperties(unittest.TestCase):
    """Container-level FrameInfo lookup."""

    def test_indexes_frame_info(self):
        entry = heics_animation_properties(_heics(0.1, 0.2, 0.3), 1, True)
        self.assertEqual(entry, {DELAY_TIME: 0.2})

    def test_index_past_end(self):
        self.assertIsNone(heics_animation_properties(_heics(0.1, 0.2, 0.3), 3, True))
        self.assertIsNone(heics_animation_properties(_heics(0.1, 0.2, 0.3), 5, True))

    def test_unsupported(self):
        self.assertIsNone(heics_animation_properties(_heics(0.1), 0, False))

    def test_missing_table_or_list(self):
        self.assertIsNone(heics_animation_properties({}, 0, True))
        self.assertIsNone(heics_animation_properties({HEICS_DICTIONARY: {}}, 0, True))
        self.assertIsNone(heics_animation_properties(
            {HEICS_DICTIONARY: {FRAME_INFO: 'x'}}, 0, True))

    def test_non_table_entry(self):
        props = {HEICS_DICTIONARY: {FRAME_INFO: [0.1]}}
        self.assertIsNone(heics_animation_properties(props, 0, True))


# ── delay_time ───────────────────────────────────────────────────────────────

class TestDelayTime(unittest.TestCase):

    def test_unclamped_preferred(self):
        self.assertEqual(delay_time({UNCLAMPED_DELAY_TIME: 0.02, DELAY_TIME: 0.1}), 0.02)

    def test_falls_back_to_delay(self):
        self.assertEqual(delay_time({DELAY_TIME: 0.07}), 0.07)

    def test_zero_when_absent(self):
        self.assertEqual(delay_time({}), 0.0)
        self.assertEqual(delay_time(None), 0.0)

    def test_non_numeric_ignored(self):
        self.assertEqual(delay_time({UNCLAMPED_DELAY_TIME: 'fast', DELAY_TIME: 0.2}), 0.2)


# ── frame_duration (fallback chain) ──────────────────────────────────────────

class TestFrameDuration(unittest.TestCase):

    def test_gif_delay(self):
        backend = _make_backend({GIF_DICTIONARY: {DELAY_TIME: 0.25}})
        self.assertEqual(frame_duration(backend, 'src', 0), 0.25)
        backend.properties.assert_not_called()

    def test_floor_applied_to_per_frame_value(self):
        backend = _make_backend({GIF_DICTIONARY: {UNCLAMPED_DELAY_TIME: 0.0}})
        self.assertEqual(frame_duration(backend, 'src', 0), 0.1)

    def test_per_frame_query_uses_exact_options(self):
        backend = _make_backend({GIF_DICTIONARY: {}})
        frame_duration(backend, 'src', 4)
        source, index, options = backend.properties_at_index.call_args[0]
        self.assertEqual((source, index), ('src', 4))
        self.assertEqual(dict(options), {SHOULD_CACHE: True})

    def test_heics_container_fallback(self):
        backend = _make_backend({'PixelWidth': 8}, _heics(0.04, 0.5, 0.06))
        self.assertEqual(frame_duration(backend, 'src', 1), 0.5)

    def test_heics_index_out_of_range_gets_floor(self):
        backend = _make_backend({'PixelWidth': 8}, _heics(0.2, 0.2, 0.2))
        self.assertEqual(frame_duration(backend, 'src', 5), 0.1)

    def test_heics_ignored_without_sequence_support(self):
        backend = _make_backend({'PixelWidth': 8}, _heics(0.5), sequence=False)
        self.assertEqual(frame_duration(backend, 'src', 0), 0.1)

    def test_container_unavailable(self):
        backend = _make_backend({'PixelWidth': 8}, None)
        self.assertEqual(frame_duration(backend, 'src', 0), 0.1)

    def test_no_frame_properties_is_none(self):
        backend = _make_backend(None)
        self.assertIsNone(frame_duration(backend, 'src', 0))
        backend.properties.assert_not_called()

    def test_idempotent(self):
        backend = _make_backend({PNG_DICTIONARY: {DELAY_TIME: 0.3}})
        self.assertEqual(frame_duration(backend, 'src', 0),
                         frame_duration(backend, 'src', 0))
