"""
Hand landmark topology and geometry helpers.
"""
import math
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .types import Frame, HandObservation, LandmarkPoint, MAX_HANDS, Position2D


class HandLandmark(IntEnum):
    """MediaPipe hand landmark indices."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


# (mcp, pip, dip, tip) for the four non-thumb fingers
FINGER_JOINTS: Dict[str, Tuple[int, int, int, int]] = {
    "index": (5, 6, 7, 8),
    "middle": (9, 10, 11, 12),
    "ring": (13, 14, 15, 16),
    "pinky": (17, 18, 19, 20),
}

FINGERTIPS = (4, 8, 12, 16, 20)

# Wrist plus the four non-thumb base knuckles
PALM_INDICES = (0, 5, 9, 13, 17)


def to_array(landmarks: Sequence[LandmarkPoint]) -> np.ndarray:
    """Stack landmarks into an (N, 3) float array."""
    return np.array([[p.x, p.y, p.z] for p in landmarks], dtype=float)


def palm_center(landmarks: Sequence[LandmarkPoint]) -> Position2D:
    """
    Calculate the center of the palm.

    Args:
        landmarks: 21 hand landmarks

    Returns:
        Mean (x, y) of the wrist and the index/middle/ring/pinky MCP joints
    """
    pts = to_array([landmarks[i] for i in PALM_INDICES])
    x, y = pts[:, :2].mean(axis=0)
    return Position2D(float(x), float(y))


def landmark_position(landmarks: Sequence[LandmarkPoint], index: int) -> Position2D:
    point = landmarks[index]
    return Position2D(point.x, point.y)


def distance_2d(a: Any, b: Any) -> float:
    """Euclidean distance in the image plane (z ignored)."""
    return math.hypot(a.x - b.x, a.y - b.y)


def distance_3d(a: LandmarkPoint, b: LandmarkPoint) -> float:
    return float(np.linalg.norm([a.x - b.x, a.y - b.y, a.z - b.z]))


def joint_angle(a: LandmarkPoint, b: LandmarkPoint, c: LandmarkPoint) -> float:
    """
    Interior angle ABC in radians (vertex at B).
    Returns 0.0 if either arm has zero length.
    """
    ba = np.array([a.x - b.x, a.y - b.y, a.z - b.z])
    bc = np.array([c.x - b.x, c.y - b.y, c.z - b.z])
    mag = np.linalg.norm(ba) * np.linalg.norm(bc)
    if mag == 0:
        return 0.0
    cos_val = np.clip(np.dot(ba, bc) / mag, -1.0, 1.0)
    return float(np.arccos(cos_val))


def depth_from_z(landmarks: Sequence[LandmarkPoint]) -> float:
    """
    Map mean landmark z to [0, 1] where closer to the camera is larger.
    MediaPipe z is roughly within [-0.5, 0.5] relative to the wrist.
    """
    mean_z = float(to_array(landmarks)[:, 2].mean())
    return max(0.0, min(1.0, 0.5 - mean_z))


def hand_rotation(landmarks: Sequence[LandmarkPoint]) -> float:
    """Angle of the wrist -> middle MCP vector, in radians from horizontal."""
    wrist = landmarks[HandLandmark.WRIST]
    middle_mcp = landmarks[HandLandmark.MIDDLE_MCP]
    return math.atan2(middle_mcp.y - wrist.y, middle_mcp.x - wrist.x)


def is_thumb_extended(landmarks: Sequence[LandmarkPoint], mcp_ratio: float = 1.2) -> bool:
    """
    The thumb folds sideways rather than curling, so instead of joint angles
    check that its tip lies further from the wrist than both the IP joint and
    (scaled) the MCP joint.
    """
    wrist = landmarks[HandLandmark.WRIST]
    tip_to_wrist = distance_3d(landmarks[HandLandmark.THUMB_TIP], wrist)
    ip_to_wrist = distance_3d(landmarks[HandLandmark.THUMB_IP], wrist)
    mcp_to_wrist = distance_3d(landmarks[HandLandmark.THUMB_MCP], wrist)
    return tip_to_wrist > ip_to_wrist and tip_to_wrist > mcp_to_wrist * mcp_ratio


def is_finger_extended(landmarks: Sequence[LandmarkPoint], finger: str, angle_threshold: float) -> bool:
    """
    Check if a non-thumb finger is extended.

    Args:
        landmarks: 21 hand landmarks
        finger: "index", "middle", "ring" or "pinky"
        angle_threshold: minimum interior angle (radians) at both PIP and DIP

    Returns:
        True if the finger is nearly straight at both middle joints
    """
    mcp, pip, dip, tip = (landmarks[i] for i in FINGER_JOINTS[finger])
    pip_angle = joint_angle(mcp, pip, dip)
    dip_angle = joint_angle(pip, dip, tip)
    return pip_angle > angle_threshold and dip_angle > angle_threshold


def mean_fingertip_distance(landmarks: Sequence[LandmarkPoint]) -> float:
    """Mean 3D distance from the five fingertips to the wrist."""
    pts = to_array(landmarks)
    return float(np.linalg.norm(pts[list(FINGERTIPS)] - pts[HandLandmark.WRIST], axis=1).mean())


def hand_size(landmarks: Sequence[LandmarkPoint]) -> float:
    """Wrist to middle fingertip distance in the image plane."""
    return distance_2d(landmarks[HandLandmark.WRIST], landmarks[HandLandmark.MIDDLE_TIP])


def frame_from_results(results: Any, timestamp: float, processing_duration: float = 0.0) -> Frame:
    """
    Convert a MediaPipe Hands result object into a Frame.

    Hand ids follow detection order, matching how the tracker reports them.
    Only the already-inferred landmarks are read; no image work happens here.

    Args:
        results: object with multi_hand_landmarks / multi_handedness
        timestamp: capture time in ms
        processing_duration: inference time in ms

    Returns:
        Frame with at most two hands
    """
    multi_landmarks = getattr(results, "multi_hand_landmarks", None) or []
    multi_handedness = getattr(results, "multi_handedness", None) or []

    hands: List[HandObservation] = []
    for i, (hand_landmarks, handedness) in enumerate(zip(multi_landmarks, multi_handedness)):
        if i >= MAX_HANDS:
            break
        label, score = _read_classification(handedness)
        points = getattr(hand_landmarks, "landmark", hand_landmarks)
        hands.append(HandObservation(
            id=i,
            handedness=label,
            landmarks=tuple(points),
            confidence=score,
        ))

    return Frame(hands=tuple(hands), timestamp=timestamp, processing_duration=processing_duration)


def _read_classification(handedness: Any) -> Tuple[str, float]:
    """Pull (label, score) out of a MediaPipe classification list."""
    entry: Optional[Any] = handedness
    classification = getattr(handedness, "classification", None)
    if classification:
        entry = classification[0]
    label = getattr(entry, "label", "Right")
    if label not in ("Left", "Right"):
        label = "Right"
    score = getattr(entry, "score", None)
    return label, float(score) if score is not None else 0.9
