"""
Position tracking: palm/fingertip position, velocity, depth and rotation.
"""
import logging
import math
from dataclasses import dataclass, replace
from typing import Dict, Optional

from .config import PositionConfig
from .landmarks import HandLandmark, depth_from_z, hand_rotation, landmark_position, palm_center
from .smoothing import ema_position
from .types import ControlState, Frame, HandObservation, Position2D, SingleHandState, Velocity2D

logger = logging.getLogger(__name__)


@dataclass
class PositionHistory:
    """Per-hand memory between ticks."""
    smoothed_position: Position2D
    reported_position: Position2D
    timestamp: float


class PositionTracker:
    """
    Establishes the tracked hands for a tick and fills in where they are.

    Features:
    - Exponential smoothing per hand, first sample passed through raw
    - Movement threshold that holds the reported position against jitter
    - Velocity from consecutive reported positions over real elapsed time
    """

    name = "position"

    def __init__(self, config: Optional[PositionConfig] = None):
        self._config = replace(config) if config is not None else PositionConfig()
        self._history: Dict[int, PositionHistory] = {}

    @property
    def config(self) -> PositionConfig:
        return replace(self._config)

    def update_config(self, **changes) -> None:
        self._config = replace(self._config, **changes)

    def reset(self) -> None:
        self._history.clear()

    def process(self, frame: Frame, state: ControlState) -> ControlState:
        """
        Build one hand state per hand in the frame, in frame order.

        Args:
            frame: Current landmark frame
            state: Control state to extend

        Returns:
            New control state whose hands match the frame's hands
        """
        hands = tuple(self._process_hand(hand, frame.timestamp, state) for hand in frame.hands)

        active_ids = {hand.id for hand in frame.hands}
        for hand_id in list(self._history):
            if hand_id not in active_ids:
                logger.debug(f"Hand {hand_id} lost, dropping position history")
                del self._history[hand_id]

        return replace(state, hands=hands)

    def _process_hand(self, hand: HandObservation, timestamp: float, state: ControlState) -> SingleHandState:
        hand_state = state.find_hand(hand.id) or SingleHandState(hand_id=hand.id)

        raw_position = self._raw_position(hand)
        history = self._history.get(hand.id)

        if history is None:
            # First sighting: report raw, nothing to smooth against
            logger.debug(f"Hand {hand.id} ({hand.handedness}) appeared at ({raw_position.x:.3f}, {raw_position.y:.3f})")
            position = raw_position
            velocity = Velocity2D()
            self._history[hand.id] = PositionHistory(
                smoothed_position=raw_position,
                reported_position=raw_position,
                timestamp=timestamp,
            )
        else:
            smoothed = raw_position
            if self._config.smoothing_enabled:
                smoothed = ema_position(raw_position, history.smoothed_position, self._config.smoothing_factor)

            position = self._apply_threshold(smoothed, history.reported_position)

            velocity = Velocity2D()
            if self._config.calculate_velocity:
                velocity = self._velocity(position, history.reported_position, timestamp, history.timestamp)

            history.smoothed_position = smoothed
            history.reported_position = position
            history.timestamp = timestamp

        return replace(
            hand_state,
            is_tracked=True,
            position=position,
            fingertip_position=landmark_position(hand.landmarks, HandLandmark.INDEX_TIP),
            velocity=velocity,
            depth=depth_from_z(hand.landmarks),
            rotation=hand_rotation(hand.landmarks),
        )

    def _raw_position(self, hand: HandObservation) -> Position2D:
        mode = self._config.tracking_mode
        if mode == "index_tip":
            return landmark_position(hand.landmarks, HandLandmark.INDEX_TIP)
        if mode == "wrist":
            return landmark_position(hand.landmarks, HandLandmark.WRIST)
        return palm_center(hand.landmarks)

    def _apply_threshold(self, current: Position2D, reported: Position2D) -> Position2D:
        """Hold the last reported position while movement stays under the threshold."""
        if math.hypot(current.x - reported.x, current.y - reported.y) < self._config.movement_threshold:
            return reported
        return current

    @staticmethod
    def _velocity(current: Position2D, previous: Position2D, t_now: float, t_prev: float) -> Velocity2D:
        dt = (t_now - t_prev) / 1000.0  # ms -> s
        if dt <= 0:
            return Velocity2D()
        vx = (current.x - previous.x) / dt
        vy = (current.y - previous.y) / dt
        return Velocity2D(vx=vx, vy=vy, magnitude=math.hypot(vx, vy))
