"""
Hand Control Pipeline

Interprets a stream of hand landmark frames into a semantic control state:
smoothed position and velocity, finger flags, openness, gestures with
hysteresis, and inter-hand distances.
"""

__version__ = "0.1.0"

from .types import (
    ControlState,
    DistanceSnapshot,
    FingerStates,
    Frame,
    FrameSource,
    GestureState,
    GestureType,
    HandObservation,
    HandOpenness,
    LandmarkPoint,
    Position2D,
    SingleHandState,
    Velocity2D,
    empty_control_state,
    empty_hand_state,
    has_active_hands,
    has_gesture,
    is_hand_tracked,
)
from .config import Cfg, PositionConfig, GestureConfig, DistanceConfig, load_config, default_config, merge_config
from .errors import HandControlError, ConfigError
from .position import PositionTracker
from .gestures import GestureClassifier
from .distance import DistanceMeasurer, get_distances, has_distances
from .pipeline import ControlPipeline, create_pipeline
from .stream import Channel
from .source_mock import MockFrameSource
from .landmarks import HandLandmark, frame_from_results

__all__ = [
    "ControlState",
    "DistanceSnapshot",
    "FingerStates",
    "Frame",
    "FrameSource",
    "GestureState",
    "GestureType",
    "HandObservation",
    "HandOpenness",
    "LandmarkPoint",
    "Position2D",
    "SingleHandState",
    "Velocity2D",
    "empty_control_state",
    "empty_hand_state",
    "has_active_hands",
    "has_gesture",
    "is_hand_tracked",
    "Cfg",
    "PositionConfig",
    "GestureConfig",
    "DistanceConfig",
    "load_config",
    "default_config",
    "merge_config",
    "HandControlError",
    "ConfigError",
    "PositionTracker",
    "GestureClassifier",
    "DistanceMeasurer",
    "get_distances",
    "has_distances",
    "ControlPipeline",
    "create_pipeline",
    "Channel",
    "MockFrameSource",
    "HandLandmark",
    "frame_from_results",
]
