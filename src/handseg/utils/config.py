"""
Configuration loading.
Reads config/config.yaml, merges it over built-in defaults and gives
dot-path access to the result.
"""

import os
import copy
import logging

import yaml

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
_CONFIG_DIR = os.path.join(_BASE_DIR, "config")

DEFAULTS = {
    "camera": {
        "device_id": 0,
        "width": 640,
        "height": 480,
        "fps": 30,
        "flip_horizontal": True,
    },
    "segmentation": {
        "threshold": 0.15,
        "close_threshold": 5,
        "search_range": 2.0,
        "hull_merge_distance": 50.0,
        "min_blob_area": 1.0,
        "min_value": 0.1,
        "max_saturation": 0.9,
    },
    "calibration": {
        "x": 300,
        "y": 220,
        "width": 40,
        "height": 40,
    },
    "display": {
        "show_segmentation_first": False,
        "show_segmentation_second": False,
        "show_contour": False,
    },
    "finger_test": {
        "target_fingers": 5,
        "duration_s": 60.0,
    },
    "performance": {
        "target_fps": 15,
        "target_latency_ms": 66.0,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
    "visualization": {},
}

# Fields checked on load: section -> {field: expected type}
_CONFIG_SCHEMA = {
    "camera": {
        "device_id": int,
        "width": int,
        "height": int,
        "fps": int,
    },
    "segmentation": {
        "threshold": float,
        "close_threshold": int,
        "hull_merge_distance": float,
    },
    "calibration": {
        "x": int,
        "y": int,
        "width": int,
        "height": int,
    },
    "finger_test": {
        "target_fingers": int,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Singleton configuration store."""

    _instance = None
    _data = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._data = copy.deepcopy(DEFAULTS)
        return cls._instance

    def load(self, config_path=None):
        """
        Load a YAML file over the defaults.

        A missing file is not an error: the defaults stay in effect.
        """
        config_path = config_path or os.path.join(_CONFIG_DIR, "config.yaml")

        try:
            with open(config_path, "r") as f:
                loaded = yaml.safe_load(f) or {}
            logger.info("Loaded config from %s", config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using defaults", config_path)
            loaded = {}

        self._data = _deep_merge(copy.deepcopy(DEFAULTS), loaded)
        self._validate()
        return self

    def _validate(self):
        """Log a warning for every schema mismatch; never raises."""
        warnings = []
        for section_name, fields in _CONFIG_SCHEMA.items():
            section = self._data.get(section_name)
            if not isinstance(section, dict):
                warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
                continue
            for field_name, expected_type in fields.items():
                if field_name not in section:
                    continue
                value = section[field_name]
                # Allow int where float is expected
                if expected_type is float and isinstance(value, (int, float)) and not isinstance(value, bool):
                    continue
                if not isinstance(value, expected_type) or isinstance(value, bool):
                    warnings.append(
                        f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                        f"got {type(value).__name__} ({value!r})"
                    )

        for w in warnings:
            logger.warning("Config validation: %s", w)
        return warnings

    def get(self, key_path: str, default=None):
        """Nested value by dot path, e.g. 'segmentation.threshold'."""
        value = self._data
        for key in key_path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_section(self, section: str) -> dict:
        return self._data.get(section) or {}

    def as_dict(self) -> dict:
        return copy.deepcopy(self._data)

    @property
    def camera(self) -> dict:
        return self.get_section("camera")

    @property
    def segmentation(self) -> dict:
        return self.get_section("segmentation")

    @property
    def calibration(self) -> dict:
        return self.get_section("calibration")

    @property
    def display(self) -> dict:
        return self.get_section("display")

    @property
    def base_dir(self) -> str:
        return _BASE_DIR

    @classmethod
    def reset(cls):
        """Drop the singleton (for testing)."""
        cls._instance = None
        cls._data = {}
