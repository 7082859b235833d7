"""
Type definitions for the hand control pipeline.
"""
import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Literal, Mapping, Optional, Protocol, Sequence, Tuple, runtime_checkable

logger = logging.getLogger(__name__)

LANDMARKS_PER_HAND = 21
MAX_HANDS = 2

Handedness = Literal["Left", "Right"]


@dataclass(frozen=True)
class LandmarkPoint:
    """A single landmark in normalized image coordinates."""
    x: float
    y: float
    z: float = 0.0  # relative depth, negative = towards camera

    @classmethod
    def from_any(cls, value: Any) -> Optional["LandmarkPoint"]:
        """
        Build a point from a LandmarkPoint, an (x, y[, z]) sequence or any
        object exposing .x/.y/.z attributes (e.g. a MediaPipe landmark).

        Returns None when the value cannot be read as a finite point.
        """
        if isinstance(value, cls):
            coords = (value.x, value.y, value.z)
        elif hasattr(value, "x") and hasattr(value, "y"):
            coords = (value.x, value.y, getattr(value, "z", 0.0))
        elif isinstance(value, (tuple, list)) and len(value) in (2, 3):
            coords = (value[0], value[1], value[2] if len(value) == 3 else 0.0)
        else:
            return None

        try:
            x, y, z = (float(c) for c in coords)
        except (TypeError, ValueError):
            return None
        if not all(math.isfinite(c) for c in (x, y, z)):
            return None
        return cls(x, y, z)


def _is_finite(point: LandmarkPoint) -> bool:
    return math.isfinite(point.x) and math.isfinite(point.y) and math.isfinite(point.z)


def coerce_landmarks(raw: Optional[Sequence[Any]], hand_id: int = -1) -> Tuple[LandmarkPoint, ...]:
    """
    Return exactly 21 landmark points.

    Unreadable or missing points are replaced with the wrist (or the origin
    when the wrist itself is unusable) and surplus points are dropped, so a
    glitching upstream frame still yields a usable hand.
    """
    raw = list(raw) if raw is not None else []
    points = [LandmarkPoint.from_any(p) for p in raw[:LANDMARKS_PER_HAND]]

    wrist = points[0] if points and points[0] is not None else LandmarkPoint(0.0, 0.0, 0.0)
    substituted = LANDMARKS_PER_HAND - len(points) + sum(1 for p in points if p is None)
    if substituted or len(raw) > LANDMARKS_PER_HAND:
        logger.warning(
            f"Hand {hand_id}: got {len(raw)} landmarks, substituted {substituted} "
            f"(expected {LANDMARKS_PER_HAND})"
        )

    points = [p if p is not None else wrist for p in points]
    points.extend([wrist] * (LANDMARKS_PER_HAND - len(points)))
    return tuple(points)


@dataclass(frozen=True)
class HandObservation:
    """One detected hand as delivered by the landmark provider."""
    id: int
    handedness: Handedness
    landmarks: Tuple[LandmarkPoint, ...]
    confidence: float = 1.0

    def __post_init__(self):
        points = self.landmarks
        if not (isinstance(points, tuple) and len(points) == LANDMARKS_PER_HAND
                and all(isinstance(p, LandmarkPoint) and _is_finite(p) for p in points)):
            object.__setattr__(self, "landmarks", coerce_landmarks(points, self.id))


@dataclass(frozen=True)
class Frame:
    """All hands observed during one capture tick."""
    hands: Tuple[HandObservation, ...] = ()
    timestamp: float = 0.0  # ms
    processing_duration: float = 0.0  # ms spent by the provider

    def __post_init__(self):
        if not isinstance(self.hands, tuple):
            object.__setattr__(self, "hands", tuple(self.hands))

    @property
    def hand_count(self) -> int:
        return len(self.hands)


@dataclass(frozen=True)
class Position2D:
    """Normalized 2D position."""
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Velocity2D:
    """Velocity in normalized units per second."""
    vx: float = 0.0
    vy: float = 0.0
    magnitude: float = 0.0


class GestureType(str, Enum):
    """Discrete gestures recognized by the classifier."""
    NONE = "none"
    OPEN_HAND = "open_hand"
    CLOSED_FIST = "closed_fist"
    POINTING = "pointing"
    THUMBS_UP = "thumbs_up"
    PEACE = "peace"
    PINCH = "pinch"


@dataclass(frozen=True)
class GestureState:
    """Reported gesture plus how long the raw classification has been held."""
    type: GestureType = GestureType.NONE
    confidence: float = 0.0
    duration: float = 0.0  # ms


@dataclass(frozen=True)
class FingerStates:
    """Per-finger extension flags."""
    thumb: bool = False
    index: bool = False
    middle: bool = False
    ring: bool = False
    pinky: bool = False

    @property
    def extended_count(self) -> int:
        return sum((self.thumb, self.index, self.middle, self.ring, self.pinky))


@dataclass(frozen=True)
class HandOpenness:
    """Openness in [0, 1] and its rate of change per ms."""
    value: float = 0.0
    derivative: float = 0.0


@dataclass(frozen=True)
class SingleHandState:
    """Control state for one tracked hand."""
    hand_id: int
    is_tracked: bool = False
    position: Position2D = Position2D()
    fingertip_position: Position2D = Position2D()
    velocity: Velocity2D = Velocity2D()
    gesture: GestureState = GestureState()
    fingers: FingerStates = FingerStates()
    openness: HandOpenness = HandOpenness()
    depth: float = 0.0
    rotation: float = 0.0  # radians


@dataclass(frozen=True)
class DistanceSnapshot:
    """Distance measurements, normalized to hand size when configured."""
    palm_to_palm: Optional[float] = None
    index_to_index: Optional[float] = None
    thumb_to_thumb: Optional[float] = None
    primary_pinch: Optional[float] = None
    secondary_pinch: Optional[float] = None
    avg_hand_size: float = 0.0


@dataclass(frozen=True)
class ControlState:
    """
    Complete interpreted state for one tick.

    The hands tuple keeps the order established by position tracking;
    primary and secondary hands are derived from it. The auxiliary map is
    read-only; stages build a new one and replace it.
    """
    timestamp: float
    delta_time: float = 0.0  # ms since previous tick
    hands: Tuple[SingleHandState, ...] = ()
    auxiliary: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.hands, tuple):
            object.__setattr__(self, "hands", tuple(self.hands))
        if not isinstance(self.auxiliary, MappingProxyType):
            object.__setattr__(self, "auxiliary", MappingProxyType(dict(self.auxiliary)))

    @property
    def has_active_hand(self) -> bool:
        return len(self.hands) > 0

    @property
    def primary_hand(self) -> Optional[SingleHandState]:
        return self.hands[0] if len(self.hands) > 0 else None

    @property
    def secondary_hand(self) -> Optional[SingleHandState]:
        return self.hands[1] if len(self.hands) > 1 else None

    def find_hand(self, hand_id: int) -> Optional[SingleHandState]:
        for hand in self.hands:
            if hand.hand_id == hand_id:
                return hand
        return None


def empty_hand_state(hand_id: int) -> SingleHandState:
    """Zeroed, untracked state for a hand."""
    return SingleHandState(hand_id=hand_id)


def empty_control_state(timestamp: Optional[float] = None) -> ControlState:
    """Control state with no hands, stamped with wall-clock ms by default."""
    if timestamp is None:
        timestamp = time.time() * 1000.0
    return ControlState(timestamp=timestamp)


def has_active_hands(state: ControlState) -> bool:
    return state.has_active_hand


def is_hand_tracked(hand: SingleHandState) -> bool:
    return hand.is_tracked and hand.position.x >= 0 and hand.position.y >= 0


def has_gesture(hand: SingleHandState, min_confidence: float = 0.7) -> bool:
    """True when a non-NONE gesture is reported with enough confidence."""
    return hand.gesture.type != GestureType.NONE and hand.gesture.confidence >= min_confidence


class Subscription(Protocol):
    """Handle returned by subscribe(); detaches the callback."""

    def unsubscribe(self) -> None:
        ...


@runtime_checkable
class FrameSource(Protocol):
    """Anything that pushes Frame values to subscribed callbacks, in order."""

    def subscribe(self, callback: Callable[[Frame], None]) -> Subscription:
        ...


@runtime_checkable
class Stage(Protocol):
    """A pipeline stage: extends a control state from one frame."""

    name: str

    def process(self, frame: Frame, state: ControlState) -> ControlState:
        ...

    def reset(self) -> None:
        ...
