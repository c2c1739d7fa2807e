"""Tests for conf – config.json persistence and the Settings singleton."""

import json
import os
import tempfile
import unittest
from unittest.mock import patch

import streamdecode.conf as conf
from streamdecode.core.models import SubsamplingLevel


class _ConfigTestCase(unittest.TestCase):
    """Redirect CONFIG_PATH into a temp dir."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, 'streamdecode', 'config.json')
        self.patcher = patch.object(conf, 'CONFIG_PATH', self.path)
        self.patcher.start()

    def tearDown(self):
        self.patcher.stop()
        self.tmp.cleanup()

    def write(self, data):
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with open(self.path, 'w') as f:
            f.write(data if isinstance(data, str) else json.dumps(data))


class TestLoadSave(_ConfigTestCase):

    def test_missing_file_is_empty(self):
        self.assertEqual(conf.load_config(), {})

    def test_corrupt_file_is_empty(self):
        self.write('{not json')
        self.assertEqual(conf.load_config(), {})

    def test_non_dict_is_empty(self):
        self.write([1, 2, 3])
        self.assertEqual(conf.load_config(), {})

    def test_round_trip_creates_dir(self):
        conf.save_config({'chunk_size': 10})
        self.assertTrue(os.path.exists(self.path))
        self.assertEqual(conf.load_config(), {'chunk_size': 10})


class TestDefaults(_ConfigTestCase):

    def test_defaults_without_config(self):
        self.assertIs(conf.get_default_subsampling_level(), SubsamplingLevel.DEFAULT)
        self.assertEqual(conf.get_chunk_size(), conf.DEFAULT_CHUNK_SIZE)
        self.assertEqual(conf.get_max_image_pixels(), conf.DEFAULT_MAX_IMAGE_PIXELS)

    def test_saved_values(self):
        conf.save_default_subsampling_level(SubsamplingLevel.LEVEL2)
        conf.save_chunk_size(512)
        conf.save_max_image_pixels(1000)
        self.assertIs(conf.get_default_subsampling_level(), SubsamplingLevel.LEVEL2)
        self.assertEqual(conf.get_chunk_size(), 512)
        self.assertEqual(conf.get_max_image_pixels(), 1000)

    def test_invalid_subsampling_falls_back(self):
        self.write({'subsampling_level': 3})
        with self.assertLogs('streamdecode.conf', level='WARNING'):
            self.assertIs(conf.get_default_subsampling_level(), SubsamplingLevel.DEFAULT)

    def test_invalid_numbers_fall_back(self):
        self.write({'chunk_size': -5, 'max_image_pixels': 'lots'})
        self.assertEqual(conf.get_chunk_size(), conf.DEFAULT_CHUNK_SIZE)
        self.assertEqual(conf.get_max_image_pixels(), conf.DEFAULT_MAX_IMAGE_PIXELS)

    def test_saving_keeps_other_keys(self):
        self.write({'custom': True})
        conf.save_chunk_size(64)
        self.assertEqual(conf.load_config(), {'custom': True, 'chunk_size': 64})


class TestSettings(_ConfigTestCase):

    def test_loads_from_config(self):
        self.write({'subsampling_level': 8, 'chunk_size': 100})
        s = conf.Settings()
        self.assertIs(s.subsampling_level, SubsamplingLevel.LEVEL3)
        self.assertEqual(s.chunk_size, 100)

    def test_setters_persist(self):
        s = conf.Settings()
        s.set_subsampling_level(SubsamplingLevel.LEVEL1)
        s.set_chunk_size(2048)
        s.set_max_image_pixels(99)
        self.assertEqual(conf.load_config(), {
            'subsampling_level': 2, 'chunk_size': 2048, 'max_image_pixels': 99,
        })

    def test_set_subsampling_rejects_invalid(self):
        s = conf.Settings()
        with self.assertRaises(ValueError):
            s.set_subsampling_level(5)

    def test_reload(self):
        s = conf.Settings()
        self.write({'chunk_size': 77})
        s.reload()
        self.assertEqual(s.chunk_size, 77)
