"""
Camera Module - Webcam Stream Handler
=====================================
Captures webcam frames on a background thread and keeps only the latest one.
The frame loop reads whatever is newest; a frame older than the staleness
limit counts as a lost feed, which the scene treats as "no hand".
"""

import cv2
import numpy as np
from typing import Optional, Tuple
import threading
import time


class Camera:
    """
    Latest-frame webcam reader.

    Attributes:
        camera_id: Index of the camera device
        width: Frame width in pixels
        height: Frame height in pixels
        fps: Requested frames per second
    """

    # Seconds without a new frame before the feed counts as lost
    STALE_AFTER = 0.5

    def __init__(
        self,
        camera_id: int = 0,
        width: int = 640,
        height: int = 480,
        fps: int = 30,
        backend: int = cv2.CAP_ANY
    ):
        self.camera_id = camera_id
        self.width = width
        self.height = height
        self.fps = fps
        self.backend = backend

        self.cap: Optional[cv2.VideoCapture] = None

        # Latest frame, guarded by the lock
        self._frame: Optional[np.ndarray] = None
        self._frame_time = 0.0
        self._frame_lock = threading.Lock()
        self._running = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> bool:
        """
        Open the device and start the capture thread.

        Returns:
            True if camera started successfully, False otherwise
        """
        self.cap = cv2.VideoCapture(self.camera_id, self.backend)

        if not self.cap.isOpened():
            print(f"[ERROR] Failed to open camera {self.camera_id}")
            self.cap.release()
            self.cap = None
            return False

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.fps)
        self.cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        # Actual resolution may differ from the request
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

        print(f"[INFO] Camera started: {self.width}x{self.height} @ {self.fps}fps")

        self._running = True
        self._thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._thread.start()
        return True

    def _capture_loop(self):
        while self._running:
            ret, frame = self.cap.read()
            if ret:
                # Mirror so moving the hand right moves it right on screen
                frame = cv2.flip(frame, 1)
                with self._frame_lock:
                    self._frame = frame
                    self._frame_time = time.monotonic()
            else:
                time.sleep(0.005)

    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        """
        Read the latest captured frame.

        Returns:
            (False, None) when no frame exists or the feed went stale
        """
        with self._frame_lock:
            if self._frame is None or self._is_stale(time.monotonic()):
                return False, None
            return True, self._frame.copy()

    def get_frame(self) -> Optional[np.ndarray]:
        """Latest fresh frame or None."""
        ret, frame = self.read()
        return frame if ret else None

    def _is_stale(self, now: float) -> bool:
        return now - self._frame_time > self.STALE_AFTER

    def stop(self):
        """Stop the capture thread and release the device."""
        self._running = False

        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

        if self.cap is not None:
            self.cap.release()
            self.cap = None
            print("[INFO] Camera stopped")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
