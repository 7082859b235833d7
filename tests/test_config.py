"""
Test cases for YAML configuration loading and merging.
"""
import unittest
import sys
import tempfile
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from handcontrol.config import (
    Cfg,
    GestureConfig,
    config_to_dict,
    default_config,
    load_config,
    merge_config,
)
from handcontrol.errors import ConfigError, HandControlError


class TestLoadConfig(unittest.TestCase):
    """Test reading configuration files."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def write(self, text):
        path = Path(self.tmpdir.name) / "config.yaml"
        path.write_text(text)
        return str(path)

    def test_default_file_matches_defaults(self):
        """Test that the shipped YAML file agrees with the dataclass defaults."""
        self.assertEqual(load_config(), default_config())

    def test_partial_file(self):
        path = self.write("position:\n  tracking_mode: index_tip\ngesture:\n  min_duration: 50\n")
        cfg = load_config(path)

        self.assertEqual(cfg.position.tracking_mode, "index_tip")
        self.assertEqual(cfg.gesture.min_duration, 50)
        self.assertEqual(cfg.position.smoothing_factor, 0.7)
        self.assertEqual(cfg.distance, default_config().distance)

    def test_empty_file(self):
        self.assertEqual(load_config(self.write("")), default_config())

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_config(str(Path(self.tmpdir.name) / "nope.yaml"))

    def test_not_a_mapping(self):
        with self.assertRaises(ConfigError):
            load_config(self.write("- 1\n- 2\n"))

    def test_unknown_key(self):
        with self.assertRaises(ConfigError):
            load_config(self.write("distance:\n  smoothness: 0.5\n"))


class TestMergeConfig(unittest.TestCase):
    """Test partial overrides."""

    def test_base_not_mutated(self):
        base = default_config()
        merged = merge_config(base, {"distance": {"normalize_to_hand_size": False}})

        self.assertFalse(merged.distance.normalize_to_hand_size)
        self.assertTrue(base.distance.normalize_to_hand_size)

    def test_none_sections_skipped(self):
        merged = merge_config(default_config(), {"position": None})
        self.assertEqual(merged, default_config())

    def test_dataclass_section(self):
        merged = merge_config(default_config(), {"gesture": GestureConfig(pinch_threshold=0.05)})
        self.assertEqual(merged.gesture.pinch_threshold, 0.05)

    def test_unknown_section(self):
        with self.assertRaises(ConfigError):
            merge_config(default_config(), {"camera": {"fps": 30}})

    def test_section_not_mapping(self):
        with self.assertRaises(ConfigError):
            merge_config(default_config(), {"position": 3})

    def test_unknown_tracking_mode(self):
        with self.assertRaises(ConfigError):
            merge_config(default_config(), {"position": {"tracking_mode": "elbow"}})

    def test_config_error_is_package_error(self):
        self.assertTrue(issubclass(ConfigError, HandControlError))

    def test_to_dict(self):
        data = config_to_dict(Cfg())
        self.assertEqual(set(data), {"position", "gesture", "distance"})
        self.assertEqual(data["gesture"]["min_duration"], 100.0)
        self.assertEqual(merge_config(default_config(), data), default_config())


if __name__ == '__main__':
    unittest.main()
