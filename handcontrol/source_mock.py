"""
Mock frame source and synthetic hand generators for testing the pipeline
without a camera or landmark model.
"""
from typing import Callable, List, Optional, Sequence

from .stream import Channel, ChannelSubscription
from .types import Frame, HandObservation, LandmarkPoint


class MockFrameSource:
    """In-memory frame source; frames pushed here go straight to subscribers."""

    def __init__(self):
        """Initialize the mock source."""
        self._channel: Channel[Frame] = Channel()
        self.push_count = 0

    @property
    def subscriber_count(self) -> int:
        return self._channel.subscriber_count

    def subscribe(self, callback: Callable[[Frame], None]) -> ChannelSubscription:
        return self._channel.subscribe(callback)

    def push(self, frame: Frame) -> None:
        """Deliver a frame to every subscriber."""
        self.push_count += 1
        self._channel.publish(frame)

    def push_all(self, frames: Sequence[Frame]) -> None:
        for frame in frames:
            self.push(frame)

    def reset_counters(self) -> None:
        """Reset push counter for testing."""
        self.push_count = 0


def make_landmarks(center_x: float = 0.5, center_y: float = 0.5,
                   scale: float = 0.1, z: float = 0.0) -> List[LandmarkPoint]:
    """
    Simplified open hand: wrist at the bottom, fingers straight up, thumb
    out to the side, placed so the palm center is exactly (center_x, center_y).
    """
    s = scale

    def p(dx: float, dy: float) -> LandmarkPoint:
        # Offsets are drawn around a palm center of (0.3, 1.2)
        return LandmarkPoint(center_x + (dx - 0.3) * s, center_y + (dy - 1.2) * s, z)

    return [
        # Wrist
        p(0.0, 2.0),
        # Thumb
        p(-1.5, 1.5), p(-2.0, 1.0), p(-2.2, 0.5), p(-2.5, 0.0),
        # Index
        p(-0.75, 1.0), p(-0.75, 0.0), p(-0.75, -1.0), p(-0.75, -2.0),
        # Middle
        p(0.0, 1.0), p(0.0, -0.2), p(0.0, -1.2), p(0.0, -2.2),
        # Ring
        p(0.75, 1.0), p(0.75, 0.0), p(0.75, -1.0), p(0.75, -1.8),
        # Pinky
        p(1.5, 1.0), p(1.5, 0.2), p(1.5, -0.5), p(1.5, -1.2),
    ]


def make_hand(hand_id: int = 0, handedness: str = "Right", center_x: float = 0.5,
              center_y: float = 0.5, scale: float = 0.1, confidence: float = 0.95,
              landmarks: Optional[Sequence[LandmarkPoint]] = None) -> HandObservation:
    if landmarks is None:
        landmarks = make_landmarks(center_x, center_y, scale)
    return HandObservation(
        id=hand_id,
        handedness=handedness,
        landmarks=tuple(landmarks),
        confidence=confidence,
    )


def make_frame(hands: Optional[Sequence[HandObservation]] = None, timestamp: float = 1000.0,
               processing_duration: float = 10.0) -> Frame:
    if hands is None:
        hands = [make_hand()]
    return Frame(hands=tuple(hands), timestamp=timestamp, processing_duration=processing_duration)


def make_moving_frames(frame_count: int, start_x: float = 0.2, end_x: float = 0.8,
                       y: float = 0.5, start_time: float = 1000.0,
                       interval_ms: float = 33.0) -> List[Frame]:
    """Single hand sweeping horizontally at ~30 fps."""
    frames = []
    for i in range(frame_count):
        t = i / (frame_count - 1) if frame_count > 1 else 0.0
        x = start_x + (end_x - start_x) * t
        frames.append(make_frame(
            hands=[make_hand(center_x=x, center_y=y)],
            timestamp=start_time + i * interval_ms,
        ))
    return frames
