"""
Gesture Logic Module - Gesture to Mode Mapping
==============================================
Turns one frame of hand landmarks into the scene's control state:
hand presence, a normalized hand position and the active shape mode.

Gestures:
- Thumb + index pinch  -> HEART
- Closed fist          -> TREE
- Open hand            -> SCATTER (move to the frame edges to rotate)
- No hand              -> TREE
"""

import numpy as np
from typing import Optional, Sequence, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum

from .hand_tracking import FINGERTIPS, HandData, HandLandmark


# Landmarks the features and the hand position are computed from
REQUIRED_LANDMARKS = (
    HandLandmark.WRIST,
    HandLandmark.MIDDLE_MCP,
    HandLandmark.THUMB_TIP,
) + FINGERTIPS


class Mode(Enum):
    """Target shape the particles morph toward."""
    TREE = 'TREE'
    SCATTER = 'SCATTER'
    HEART = 'HEART'


# Shape shown whenever tracking has nothing to say
DEFAULT_MODE = Mode.TREE


@dataclass(frozen=True)
class HandState:
    """
    Latest hand reading. Replaced as a whole so x and y always come from
    the same frame.

    Attributes:
        detected: Whether a hand is visible
        x: Horizontal position in [-1, 1]
        y: Vertical position in [-1, 1]
    """
    detected: bool = False
    x: float = 0.0
    y: float = 0.0


@dataclass
class Rotation:
    """Accumulated scene rotation in radians (x = pitch, y = yaw)."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class ModeRotationState:
    """
    Shared per-session control record.

    The gesture classifier writes `mode` and `hand`; the rotation controller
    writes `rotation`. Everything else only reads it.
    """
    mode: Mode = DEFAULT_MODE
    hand: HandState = field(default_factory=HandState)
    rotation: Rotation = field(default_factory=Rotation)


@dataclass(frozen=True)
class GestureFeatures:
    """Scalar features derived from one hand."""
    pinch: float
    openness: float


def to_signed_unit(value: float) -> float:
    """Map a normalized image coordinate from [0, 1] to [-1, 1]."""
    return (value - 0.5) * 2.0


def extract_features(hand_data: HandData) -> GestureFeatures:
    """
    Compute pinch distance and openness in the image plane.

    Pinch is the thumb tip to index tip distance; openness is the mean
    distance of the four fingertips to the wrist.
    """
    lm = hand_data.landmarks
    wrist = lm[HandLandmark.WRIST]
    pinch = lm[HandLandmark.THUMB_TIP].planar_distance_to(lm[HandLandmark.INDEX_TIP])
    openness = float(np.mean([lm[tip].planar_distance_to(wrist) for tip in FINGERTIPS]))
    return GestureFeatures(pinch=pinch, openness=openness)


class GestureClassifier:
    """
    Thresholded mode classifier with a hysteresis dead-band.

    Pinch wins over openness. Openness between FIST_THRESHOLD and
    OPEN_THRESHOLD keeps the previous mode so the TREE/SCATTER boundary does
    not flicker. The pinch threshold has no dead-band.
    """

    # Distance thresholds (in normalized coordinates)
    PINCH_THRESHOLD = 0.05
    FIST_THRESHOLD = 0.30
    OPEN_THRESHOLD = 0.35

    # Landmark used for the hand position
    POSITION_LANDMARK = HandLandmark.MIDDLE_MCP

    def __init__(self):
        self.last_features: Optional[GestureFeatures] = None
        self.hint = "Waiting for hand..."

    @classmethod
    def classify_mode(cls, pinch: float, openness: float, previous: Mode) -> Mode:
        """
        Pure mode decision.

        Args:
            pinch: Thumb-index distance
            openness: Mean fingertip-to-wrist distance
            previous: Mode currently active

        Returns:
            The new mode, `previous` inside the dead-band
        """
        if pinch < cls.PINCH_THRESHOLD:
            return Mode.HEART
        if openness < cls.FIST_THRESHOLD:
            return Mode.TREE
        if openness > cls.OPEN_THRESHOLD:
            return Mode.SCATTER
        return previous

    @staticmethod
    def usable_hand(hand_data: Union[HandData, Sequence[HandData], None]) -> Optional[HandData]:
        """
        First hand of a landmark frame, or None when the frame has no hand
        with every required landmark.
        """
        if isinstance(hand_data, (list, tuple)):
            hand_data = hand_data[0] if hand_data else None
        if hand_data is None:
            return None
        if not all(lm in hand_data.landmarks for lm in REQUIRED_LANDMARKS):
            return None
        return hand_data

    def update(
        self,
        state: ModeRotationState,
        hand_data: Union[HandData, Sequence[HandData], None]
    ) -> Mode:
        """
        Classify one frame and write hand and mode into the shared state.

        Args:
            state: Shared control record
            hand_data: Detected hand or list of hands (as returned by
                HandTracker.process); None, an empty list or an incomplete
                hand count as no hand

        Returns:
            The mode now active
        """
        hand_data = self.usable_hand(hand_data)
        if hand_data is None:
            state.hand = HandState()
            state.mode = DEFAULT_MODE
            self.last_features = None
            self.hint = "Waiting for hand..."
            return state.mode

        anchor = hand_data.landmarks[self.POSITION_LANDMARK]
        state.hand = HandState(
            detected=True,
            x=to_signed_unit(anchor.x),
            y=to_signed_unit(anchor.y),
        )

        features = extract_features(hand_data)
        self.last_features = features
        state.mode = self.classify_mode(features.pinch, features.openness, state.mode)
        self.hint = self._describe(features)
        return state.mode

    def _describe(self, features: GestureFeatures) -> str:
        """Human-readable status for the HUD."""
        if features.pinch < self.PINCH_THRESHOLD:
            return f"HEART MODE - Pinch detected ({features.pinch:.3f})"
        if features.openness < self.FIST_THRESHOLD:
            return f"TREE MODE - Auto-rotating ({features.openness:.2f})"
        if features.openness > self.OPEN_THRESHOLD:
            return f"SCATTER MODE - Move to edge to rotate ({features.openness:.2f})"
        return (f"Transitioning... openness: {features.openness:.2f}, "
                f"pinch: {features.pinch:.3f}")


def draw_gesture_ui(
    frame: np.ndarray,
    state: ModeRotationState,
    hint: str,
    origin: Tuple[int, int] = (10, 10)
) -> np.ndarray:
    """
    Draw the mode and gesture hint box on the frame.

    Args:
        frame: Image to draw on
        state: Current control state
        hint: Text from GestureClassifier.hint
        origin: Top-left corner of the box

    Returns:
        Frame with gesture UI overlay
    """
    import cv2

    x, y = origin
    box_w = max(260, 11 * len(hint) + 20)
    cv2.rectangle(frame, (x, y), (x + box_w, y + 64), (0, 0, 0), -1)
    cv2.rectangle(frame, (x, y), (x + box_w, y + 64), (255, 255, 255), 1)

    color = (0, 255, 0) if state.hand.detected else (0, 200, 255)
    cv2.putText(frame, f"Mode: {state.mode.value}", (x + 10, y + 26),
                cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2)
    cv2.putText(frame, hint, (x + 10, y + 52),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, (220, 220, 220), 1)
    return frame
