"""
Distance measurement between fingers and between hands.
"""
import logging
from dataclasses import replace
from typing import Dict, Optional, Sequence, Tuple

from .config import DistanceConfig
from .landmarks import HandLandmark, distance_2d, hand_size, palm_center
from .smoothing import ema, ema_optional
from .types import ControlState, DistanceSnapshot, Frame, LandmarkPoint

logger = logging.getLogger(__name__)

DISTANCES_KEY = "distances"


class DistanceMeasurer:
    """
    Measures pinch and inter-hand distances and stores them in the
    control state's auxiliary map. Per-hand fields are never touched.

    Pinch distances are smoothed per hand id; two-hand distances only
    against the previous tick when the same pair of hands was present.
    """

    name = "distance"

    def __init__(self, config: Optional[DistanceConfig] = None):
        self._config = replace(config) if config is not None else DistanceConfig()
        self._pinch_history: Dict[int, float] = {}
        self._pair: Optional[Tuple[int, int]] = None
        self._last: Optional[DistanceSnapshot] = None

    @property
    def config(self) -> DistanceConfig:
        return replace(self._config)

    @property
    def latest(self) -> Optional[DistanceSnapshot]:
        """Most recent smoothed measurements, None before the first tick."""
        return self._last

    def update_config(self, **changes) -> None:
        self._config = replace(self._config, **changes)

    def reset(self) -> None:
        self._pinch_history.clear()
        self._pair = None
        self._last = None

    def process(self, frame: Frame, state: ControlState) -> ControlState:
        hands = frame.hands
        size = self.average_hand_size([hand.landmarks for hand in hands])

        pinches = [self._normalize(self._pinch(hand.landmarks), size) for hand in hands[:2]]
        palm_to_palm = index_to_index = thumb_to_thumb = None
        pair = None
        if len(hands) == 2:
            first, second = hands[0].landmarks, hands[1].landmarks
            pair = (hands[0].id, hands[1].id)
            palm_to_palm = self._normalize(distance_2d(palm_center(first), palm_center(second)), size)
            index_to_index = self._normalize(
                distance_2d(first[HandLandmark.INDEX_TIP], second[HandLandmark.INDEX_TIP]), size)
            thumb_to_thumb = self._normalize(
                distance_2d(first[HandLandmark.THUMB_TIP], second[HandLandmark.THUMB_TIP]), size)

        if self._config.smoothing_enabled:
            pinches = [self._smooth_pinch(hand.id, value) for hand, value in zip(hands, pinches)]
            factor = self._config.smoothing_factor
            if pair is not None and pair == self._pair and self._last is not None:
                palm_to_palm = ema_optional(palm_to_palm, self._last.palm_to_palm, factor)
                index_to_index = ema_optional(index_to_index, self._last.index_to_index, factor)
                thumb_to_thumb = ema_optional(thumb_to_thumb, self._last.thumb_to_thumb, factor)
            if self._last is not None:
                size = ema(size, self._last.avg_hand_size, factor)

        if pair != self._pair:
            logger.debug(f"Two-hand pair changed: {self._pair} -> {pair}")

        active_ids = {hand.id for hand in hands}
        for hand_id in list(self._pinch_history):
            if hand_id not in active_ids:
                del self._pinch_history[hand_id]
        for hand, value in zip(hands, pinches):
            self._pinch_history[hand.id] = value

        snapshot = DistanceSnapshot(
            palm_to_palm=palm_to_palm,
            index_to_index=index_to_index,
            thumb_to_thumb=thumb_to_thumb,
            primary_pinch=pinches[0] if len(pinches) > 0 else None,
            secondary_pinch=pinches[1] if len(pinches) > 1 else None,
            avg_hand_size=size,
        )
        self._pair = pair
        self._last = snapshot

        auxiliary = dict(state.auxiliary)
        auxiliary[DISTANCES_KEY] = snapshot
        return replace(state, auxiliary=auxiliary)

    def average_hand_size(self, all_landmarks: Sequence[Sequence[LandmarkPoint]]) -> float:
        """Mean wrist to middle fingertip distance, or the configured fallback with no hands."""
        if not all_landmarks:
            return self._config.default_hand_size
        return sum(hand_size(landmarks) for landmarks in all_landmarks) / len(all_landmarks)

    @staticmethod
    def _pinch(landmarks: Sequence[LandmarkPoint]) -> float:
        return distance_2d(landmarks[HandLandmark.THUMB_TIP], landmarks[HandLandmark.INDEX_TIP])

    def _normalize(self, distance: float, size: float) -> float:
        if self._config.normalize_to_hand_size and size > 0:
            return distance / size
        return distance

    def _smooth_pinch(self, hand_id: int, value: float) -> float:
        return ema_optional(value, self._pinch_history.get(hand_id), self._config.smoothing_factor)


def has_distances(state: ControlState) -> bool:
    return state.auxiliary.get(DISTANCES_KEY) is not None


def get_distances(state: ControlState) -> Optional[DistanceSnapshot]:
    """Distance snapshot stored in a control state, if any."""
    return state.auxiliary.get(DISTANCES_KEY)
