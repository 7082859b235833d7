"""
Gesture classification: finger flags, openness and hysteresis-gated gestures.
"""
import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional, Sequence

from .config import GestureConfig
from .landmarks import (
    FINGER_JOINTS,
    HandLandmark,
    distance_2d,
    is_finger_extended,
    is_thumb_extended,
    mean_fingertip_distance,
)
from .smoothing import ema
from .types import (
    ControlState,
    FingerStates,
    Frame,
    GestureState,
    GestureType,
    HandObservation,
    HandOpenness,
    LandmarkPoint,
    SingleHandState,
)

logger = logging.getLogger(__name__)


@dataclass
class GestureHistory:
    """Per-hand memory between ticks."""
    smoothed_openness: float
    timestamp: float
    raw_gesture: GestureType
    raw_since: float  # when raw_gesture was first classified
    reported_gesture: GestureType = GestureType.NONE


class GestureClassifier:
    """
    Turns hand geometry into finger flags, an openness metric and a gesture.

    Features:
    - Angle-based extension test for index..pinky, distance test for thumb
    - Smoothed openness with a per-ms derivative
    - Fixed priority order when several gestures match
    - Minimum hold time before a newly classified gesture is reported
    """

    name = "gesture"

    def __init__(self, config: Optional[GestureConfig] = None):
        self._config = replace(config) if config is not None else GestureConfig()
        self._history: Dict[int, GestureHistory] = {}

    @property
    def config(self) -> GestureConfig:
        return replace(self._config)

    def update_config(self, **changes) -> None:
        self._config = replace(self._config, **changes)

    def reset(self) -> None:
        self._history.clear()

    def process(self, frame: Frame, state: ControlState) -> ControlState:
        """Extend every hand already in state; order is preserved."""
        observations = {hand.id: hand for hand in frame.hands}

        hands = []
        for hand_state in state.hands:
            observation = observations.get(hand_state.hand_id)
            if observation is None:
                hands.append(hand_state)
            else:
                hands.append(self._process_hand(observation, frame.timestamp, hand_state))

        for hand_id in list(self._history):
            if hand_id not in observations:
                del self._history[hand_id]

        return replace(state, hands=tuple(hands))

    def _process_hand(self, hand: HandObservation, timestamp: float, hand_state: SingleHandState) -> SingleHandState:
        cfg = self._config
        fingers = self.detect_fingers(hand.landmarks)
        raw_openness = self.calculate_openness(hand.landmarks)

        history = self._history.get(hand.id)
        if history is None:
            smoothed = raw_openness
            derivative = 0.0
        else:
            smoothed = raw_openness
            if cfg.smoothing_enabled:
                smoothed = ema(raw_openness, history.smoothed_openness, cfg.smoothing_factor)
            derivative = (smoothed - history.smoothed_openness) / max(1.0, timestamp - history.timestamp)

        raw_gesture = self.classify(hand.landmarks, fingers, smoothed)

        if history is None:
            history = GestureHistory(
                smoothed_openness=smoothed,
                timestamp=timestamp,
                raw_gesture=raw_gesture,
                raw_since=timestamp,
            )
            self._history[hand.id] = history
        elif raw_gesture != history.raw_gesture:
            history.raw_gesture = raw_gesture
            history.raw_since = timestamp

        duration = timestamp - history.raw_since
        if duration >= cfg.min_duration and history.reported_gesture != raw_gesture:
            logger.debug(
                f"Hand {hand.id}: {history.reported_gesture.value} -> {raw_gesture.value} "
                f"after {duration:.0f}ms"
            )
            history.reported_gesture = raw_gesture

        history.smoothed_openness = smoothed
        history.timestamp = timestamp

        reported = history.reported_gesture
        return replace(
            hand_state,
            fingers=fingers,
            openness=HandOpenness(value=smoothed, derivative=derivative),
            gesture=GestureState(
                type=reported,
                confidence=self.confidence(reported, fingers, smoothed),
                duration=duration,
            ),
        )

    def detect_fingers(self, landmarks: Sequence[LandmarkPoint]) -> FingerStates:
        """Extension flags for all five fingers."""
        threshold = self._config.extension_angle_threshold
        flags = {finger: is_finger_extended(landmarks, finger, threshold) for finger in FINGER_JOINTS}
        return FingerStates(
            thumb=is_thumb_extended(landmarks, self._config.thumb_extension_ratio),
            **flags,
        )

    def calculate_openness(self, landmarks: Sequence[LandmarkPoint]) -> float:
        """Mean fingertip-to-wrist distance mapped onto [0, 1]."""
        closed = self._config.openness_closed_distance
        span = self._config.openness_open_distance - closed
        if span <= 0:
            return 0.0
        normalized = (mean_fingertip_distance(landmarks) - closed) / span
        return max(0.0, min(1.0, normalized))

    def classify(self, landmarks: Sequence[LandmarkPoint], fingers: FingerStates, openness: float) -> GestureType:
        """
        Raw classification for this tick. Earlier checks win, so a pinch is
        reported even when the finger flags would also match another gesture.
        """
        cfg = self._config
        pinch = distance_2d(landmarks[HandLandmark.THUMB_TIP], landmarks[HandLandmark.INDEX_TIP])
        if pinch < cfg.pinch_threshold:
            return GestureType.PINCH

        if fingers.extended_count == 0 and openness < cfg.fist_openness_max:
            return GestureType.CLOSED_FIST

        pattern = (fingers.thumb, fingers.index, fingers.middle, fingers.ring, fingers.pinky)
        if pattern == (True, False, False, False, False):
            return GestureType.THUMBS_UP
        if pattern == (False, True, False, False, False):
            return GestureType.POINTING
        if pattern == (False, True, True, False, False):
            return GestureType.PEACE

        if fingers.extended_count >= 4 and openness > cfg.open_hand_openness_min:
            return GestureType.OPEN_HAND

        return GestureType.NONE

    def confidence(self, gesture: GestureType, fingers: FingerStates, openness: float) -> float:
        count = fingers.extended_count
        if gesture == GestureType.CLOSED_FIST:
            fist_max = self._config.fist_openness_max
            openness_term = (fist_max - openness) / fist_max if fist_max > 0 else 0.0
            value = openness_term + (5 - count) / 5
        elif gesture == GestureType.OPEN_HAND:
            value = openness / 0.7 + count / 5
        elif gesture in (GestureType.POINTING, GestureType.THUMBS_UP, GestureType.PEACE):
            value = 0.9 if count <= 2 else 0.7
        elif gesture == GestureType.PINCH:
            value = 0.95
        else:
            value = 0.5
        return max(0.0, min(1.0, value))
