"""
ControlPipeline: runs the interpretation stages for every incoming frame.
"""
import logging
from typing import Any, Mapping, Optional, Tuple, Union

from .config import Cfg, default_config, merge_config
from .distance import DistanceMeasurer
from .gestures import GestureClassifier
from .position import PositionTracker
from .stream import Channel
from .types import ControlState, Frame, FrameSource, Stage, Subscription, empty_control_state

logger = logging.getLogger(__name__)


class ControlPipeline:
    """
    Main processor that turns Frames into ControlStates.

    Stages run in a fixed order on a fresh state each tick: position first,
    since it decides which hands exist, then gesture, then distance.
    Results are pushed to `states` subscribers and kept as `current_state`.
    """

    def __init__(self, config: Optional[Union[Cfg, Mapping[str, Any]]] = None):
        """Initialize pipeline with a full Cfg or a partial override mapping."""
        if isinstance(config, Cfg):
            self._config = merge_config(config, None)
        else:
            self._config = merge_config(default_config(), config)

        self._position = PositionTracker(self._config.position)
        self._gesture = GestureClassifier(self._config.gesture)
        self._distance = DistanceMeasurer(self._config.distance)
        self._stages: Tuple[Stage, ...] = (self._position, self._gesture, self._distance)

        self.states: Channel[ControlState] = Channel(initial=empty_control_state())
        self._source_subscription: Optional[Subscription] = None
        self._last_timestamp: Optional[float] = None

    @property
    def config(self) -> Cfg:
        return merge_config(self._config, None)

    @property
    def current_state(self) -> ControlState:
        """Most recently published control state."""
        return self.states.value

    @property
    def is_running(self) -> bool:
        return self._source_subscription is not None

    @property
    def position_tracker(self) -> PositionTracker:
        return self._position

    @property
    def gesture_classifier(self) -> GestureClassifier:
        return self._gesture

    @property
    def distance_measurer(self) -> DistanceMeasurer:
        return self._distance

    def start(self, source: FrameSource) -> None:
        """Attach to a frame source; any previous source is detached first."""
        self.stop()
        self._source_subscription = source.subscribe(self.process_frame)
        logger.info("Control pipeline started")

    def stop(self) -> None:
        if self._source_subscription is not None:
            self._source_subscription.unsubscribe()
            self._source_subscription = None
            logger.info("Control pipeline stopped")

    def reset(self) -> None:
        """Forget every hand and publish an empty state. Running state is unchanged."""
        for stage in self._stages:
            stage.reset()
        # Stay in the source's time base when a frame has been seen
        timestamp = self._last_timestamp
        self._last_timestamp = None
        self.states.publish(empty_control_state(timestamp))
        logger.info("Control pipeline reset")

    def update_config(self, partial: Mapping[str, Any]) -> None:
        """
        Merge a partial {position?, gesture?, distance?} configuration.
        Only the named stages are reconfigured; their histories are kept.
        """
        self._config = merge_config(self._config, partial)

        if partial.get("position") is not None:
            self._position.update_config(**vars(self._config.position))
        if partial.get("gesture") is not None:
            self._gesture.update_config(**vars(self._config.gesture))
        if partial.get("distance") is not None:
            self._distance.update_config(**vars(self._config.distance))

        logger.info(f"Control pipeline reconfigured: {', '.join(k for k, v in partial.items() if v is not None)}")

    def process_frame(self, frame: Frame) -> ControlState:
        """
        Run one tick and publish the result.

        Args:
            frame: Landmark frame for this tick

        Returns:
            The published ControlState
        """
        delta_time = 0.0
        if self._last_timestamp is not None:
            delta_time = frame.timestamp - self._last_timestamp
        self._last_timestamp = frame.timestamp

        state = ControlState(timestamp=frame.timestamp, delta_time=delta_time)
        for stage in self._stages:
            state = stage.process(frame, state)

        self.states.publish(state)
        return state


def create_pipeline(config: Optional[Union[Cfg, Mapping[str, Any]]] = None) -> ControlPipeline:
    """Create a pre-configured ControlPipeline."""
    return ControlPipeline(config)
