"""
Configuration management for the hand control pipeline.
"""
import copy
import logging
from dataclasses import asdict, dataclass, field, fields, is_dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

TRACKING_MODES = ("palm", "index_tip", "wrist")


@dataclass
class PositionConfig:
    """Position tracking configuration."""
    smoothing_enabled: bool = True
    smoothing_factor: float = 0.7  # weight of the new sample, 1.0 = no smoothing
    tracking_mode: str = "palm"  # "palm", "index_tip" or "wrist"
    calculate_velocity: bool = True
    movement_threshold: float = 0.005  # normalized units


@dataclass
class GestureConfig:
    """Gesture classification configuration."""
    smoothing_enabled: bool = True
    smoothing_factor: float = 0.8
    min_duration: float = 100.0  # ms a raw gesture must hold before it is reported
    pinch_threshold: float = 0.08
    extension_angle_threshold: float = 2.5  # radians, ~143 degrees
    thumb_extension_ratio: float = 1.2
    openness_closed_distance: float = 0.1
    openness_open_distance: float = 0.45
    fist_openness_max: float = 0.3
    open_hand_openness_min: float = 0.5


@dataclass
class DistanceConfig:
    """Distance measurement configuration."""
    smoothing_enabled: bool = True
    smoothing_factor: float = 0.7
    normalize_to_hand_size: bool = True
    default_hand_size: float = 0.3  # used when no hands are present


@dataclass
class Cfg:
    """Main configuration class."""
    position: PositionConfig = field(default_factory=PositionConfig)
    gesture: GestureConfig = field(default_factory=GestureConfig)
    distance: DistanceConfig = field(default_factory=DistanceConfig)


_SECTIONS = {
    "position": PositionConfig,
    "gesture": GestureConfig,
    "distance": DistanceConfig,
}


def default_config() -> Cfg:
    """Built-in defaults, no file access."""
    return Cfg()


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.

    Args:
        path: Path to config file. If None, uses config.default.yaml

    Returns:
        Configuration object with all settings
    """
    if path is None:
        # Use default config file in project root
        project_root = Path(__file__).parent.parent
        path = project_root / "config.default.yaml"

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    logger.debug(f"Loaded configuration from {config_path}")
    return _dict_to_config(data)


def _dict_to_config(data: Mapping[str, Any]) -> Cfg:
    """Convert dictionary to configuration object, filling gaps with defaults."""
    return merge_config(default_config(), data)


def merge_config(base: Cfg, partial: Optional[Mapping[str, Any]]) -> Cfg:
    """
    Return a new Cfg with the partial {position?, gesture?, distance?}
    overrides applied on top of base. base is left untouched.
    """
    merged = copy.deepcopy(base)
    if not partial:
        return merged

    for section_name, overrides in partial.items():
        if section_name not in _SECTIONS:
            raise ConfigError(f"Unknown config section: {section_name}")
        if overrides is None:
            continue
        section = getattr(merged, section_name)
        setattr(merged, section_name, _apply_overrides(section, overrides, section_name))

    return merged


def _apply_overrides(section: Any, overrides: Any, section_name: str) -> Any:
    if is_dataclass(overrides):
        overrides = asdict(overrides)
    if not isinstance(overrides, Mapping):
        raise ConfigError(f"Config section '{section_name}' must be a mapping")

    known = {f.name for f in fields(section)}
    unknown = set(overrides) - known
    if unknown:
        raise ConfigError(f"Unknown keys in '{section_name}': {', '.join(sorted(unknown))}")

    updated = replace(section, **overrides)
    if isinstance(updated, PositionConfig) and updated.tracking_mode not in TRACKING_MODES:
        raise ConfigError(f"Unknown tracking mode: {updated.tracking_mode}")
    return updated


def config_to_dict(cfg: Cfg) -> Dict[str, Dict[str, Any]]:
    """Plain-dict view of a configuration, e.g. for dumping back to YAML."""
    return asdict(cfg)
