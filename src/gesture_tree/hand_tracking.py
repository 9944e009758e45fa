"""
Hand Tracking Module - MediaPipe Hand Landmark Detection
=========================================================
Wraps the MediaPipe Hand Landmarker (Tasks API, VIDEO mode) and converts its
results into plain landmark records for the gesture classifier.

Normalized coordinates are clamped to [0, 1] at this boundary so the
classifier never sees geometry outside the image.
"""

import math
import os
import time
import urllib.request
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import cv2
import numpy as np


MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)


class HandLandmark(IntEnum):
    """
    MediaPipe hand landmark indices.
    Reference: https://mediapipe.dev/images/mobile/hand_landmarks.png
    """
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


FINGERTIPS = (
    HandLandmark.INDEX_TIP,
    HandLandmark.MIDDLE_TIP,
    HandLandmark.RING_TIP,
    HandLandmark.PINKY_TIP,
)


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


@dataclass
class Point:
    """Represents a 2D/3D point with normalized and pixel coordinates."""
    x: float  # Normalized x (0-1)
    y: float  # Normalized y (0-1)
    z: float  # Normalized z (depth)
    px: int   # Pixel x coordinate
    py: int   # Pixel y coordinate

    def to_tuple(self) -> Tuple[int, int]:
        """Return pixel coordinates as tuple."""
        return (self.px, self.py)

    def planar_distance_to(self, other: 'Point') -> float:
        """Euclidean distance to another point in the image plane (normalized)."""
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass
class HandData:
    """
    Contains all data for a detected hand.

    Attributes:
        landmarks: Dict mapping HandLandmark to Point
        handedness: 'Left' or 'Right'
        confidence: Detection confidence score
    """
    landmarks: Dict[HandLandmark, Point]
    handedness: str = "Right"
    confidence: float = 1.0

    def get_landmark(self, landmark: HandLandmark) -> Optional[Point]:
        """Get a specific landmark point."""
        return self.landmarks.get(landmark)

    @classmethod
    def from_normalized(
        cls,
        coords: Mapping[int, Sequence[float]],
        frame_size: Tuple[int, int] = (1, 1),
        handedness: str = "Right",
        confidence: float = 1.0
    ) -> 'HandData':
        """
        Build hand data from normalized (x, y[, z]) coordinates.

        Args:
            coords: Landmark index -> (x, y) or (x, y, z)
            frame_size: (width, height) used for the pixel coordinates
            handedness: 'Left' or 'Right'
            confidence: Detection confidence

        Returns:
            HandData with x and y clamped to [0, 1]. Landmarks with a
            non-finite coordinate are left out.
        """
        width, height = frame_size
        landmarks = {}
        for idx, values in coords.items():
            if not all(math.isfinite(float(v)) for v in values):
                continue
            x = _clamp_unit(values[0])
            y = _clamp_unit(values[1])
            z = float(values[2]) if len(values) > 2 else 0.0
            px = min(int(x * width), max(width - 1, 0))
            py = min(int(y * height), max(height - 1, 0))
            landmarks[HandLandmark(idx)] = Point(x=x, y=y, z=z, px=px, py=py)
        return cls(landmarks=landmarks, handedness=handedness, confidence=confidence)


def _download_model(model_path: Path) -> None:
    """Download the hand landmarker model if not present."""
    print("[INFO] Downloading hand landmarker model...")
    model_path.parent.mkdir(parents=True, exist_ok=True)
    urllib.request.urlretrieve(MODEL_URL, model_path)
    print(f"[INFO] Model downloaded to {model_path}")


class HandTracker:
    """
    Hand tracking using MediaPipe Hand Landmarker (Tasks API).

    Uses VIDEO running mode: tracking between sequential frames keeps the
    detection cost low enough for the render loop.
    """

    def __init__(
        self,
        max_hands: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        model_dir: Optional[Path] = None
    ):
        """
        Initialize the hand tracker.

        Args:
            max_hands: Maximum number of hands to detect
            min_detection_confidence: Minimum confidence for detection
            min_tracking_confidence: Minimum confidence for tracking
            model_dir: Where the .task model lives (GESTURE_TREE_MODEL_DIR or ./models)
        """
        # MediaPipe ships as the optional 'tracking' extra
        from mediapipe.tasks import python
        from mediapipe.tasks.python import vision

        self.max_hands = max_hands

        self._model_dir = Path(model_dir or os.environ.get('GESTURE_TREE_MODEL_DIR', 'models'))
        self._model_path = self._model_dir / "hand_landmarker.task"
        if not self._model_path.exists():
            _download_model(self._model_path)

        base_options = python.BaseOptions(model_asset_path=str(self._model_path))
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_hands=max_hands,
            min_hand_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
            min_hand_presence_confidence=min_detection_confidence
        )
        self.detector = vision.HandLandmarker.create_from_options(options)

        # Timestamps must be monotonically increasing in VIDEO mode
        self._start_time = time.time()
        self._last_timestamp_ms = -1

        # Smoothing buffer for landmark positions
        self._smoothing_buffer: Dict[HandLandmark, List[Point]] = {}
        self._smoothing_window = 2

    def process(self, frame: np.ndarray, smooth: bool = True) -> List[HandData]:
        """
        Process a frame and detect hands.

        Args:
            frame: BGR image from camera
            smooth: Whether to apply smoothing to landmark positions

        Returns:
            List of HandData objects, empty when no hand is visible
        """
        import mediapipe as mp

        height, width = frame.shape[:2]
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)

        timestamp_ms = int((time.time() - self._start_time) * 1000)
        timestamp_ms = max(timestamp_ms, self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        results = self.detector.detect_for_video(mp_image, timestamp_ms)

        hands_data = []
        for idx, hand_landmarks in enumerate(results.hand_landmarks or []):
            coords = {
                lm_idx: (lm.x, lm.y, getattr(lm, 'z', 0.0))
                for lm_idx, lm in enumerate(hand_landmarks)
            }
            handedness = "Right"
            confidence = 0.0
            if results.handedness and idx < len(results.handedness) and results.handedness[idx]:
                handedness = results.handedness[idx][0].category_name
                confidence = results.handedness[idx][0].score

            hand = HandData.from_normalized(coords, (width, height), handedness, confidence)
            # Drop hands with undefined geometry instead of passing NaNs on
            if len(hand.landmarks) < len(coords):
                continue
            if smooth:
                hand.landmarks = {
                    lm: self._smooth_point(lm, point) for lm, point in hand.landmarks.items()
                }
            hands_data.append(hand)

        if not hands_data:
            self.reset_smoothing()
        return hands_data

    def _smooth_point(self, landmark: HandLandmark, point: Point) -> Point:
        """
        Apply temporal smoothing to a landmark point.
        Uses a simple moving average filter.
        """
        buffer = self._smoothing_buffer.setdefault(landmark, [])
        buffer.append(point)
        if len(buffer) > self._smoothing_window:
            buffer.pop(0)

        if len(buffer) == 1:
            return point

        n = len(buffer)
        return Point(
            x=sum(p.x for p in buffer) / n,
            y=sum(p.y for p in buffer) / n,
            z=sum(p.z for p in buffer) / n,
            px=int(sum(p.px for p in buffer) / n),
            py=int(sum(p.py for p in buffer) / n),
        )

    def draw_landmarks(
        self,
        frame: np.ndarray,
        hand_data: HandData,
        landmark_color: Tuple[int, int, int] = (0, 255, 0),
        tip_color: Tuple[int, int, int] = (0, 0, 255)
    ) -> np.ndarray:
        """
        Draw hand landmarks on frame, fingertips highlighted.

        Returns:
            Frame with landmarks drawn
        """
        for landmark, point in hand_data.landmarks.items():
            is_tip = landmark in FINGERTIPS or landmark == HandLandmark.THUMB_TIP
            color = tip_color if is_tip else landmark_color
            cv2.circle(frame, point.to_tuple(), 6 if is_tip else 3, color, -1)
        return frame

    def reset_smoothing(self):
        """Reset the smoothing buffer."""
        self._smoothing_buffer.clear()

    def release(self):
        """Release resources."""
        if self.detector:
            self.detector.close()
