"""
UI Module - Main Application Interface
======================================
Real-time gesture-controlled particle tree. Combines webcam capture, hand
tracking, gesture classification, the particle scene and the preview
renderer into one frame loop.
"""

import argparse
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

import cv2
import numpy as np
from dotenv import load_dotenv

from .camera import Camera
from .config import SceneConfig
from .gesture_logic import draw_gesture_ui
from .hand_tracking import HandData, HandTracker
from .renderer import PointCloudRenderer, Snowfall
from .scene import ParticleScene
from .themes import ThemePresets


WINDOW_NAME = "Gesture Tree"


class GestureTreeApp:
    """
    Main application class.

    Each frame: read the newest camera frame, detect the hand, classify the
    gesture, advance the scene and draw it. A missing or stale camera frame
    counts as "no hand", which returns the scene to the tree.
    """

    MAIN_WIDTH = 960
    MAIN_HEIGHT = 540

    # Webcam inset (bottom right)
    PREVIEW_WIDTH = 200
    PREVIEW_HEIGHT = 150

    UI_TEXT_COLOR = (255, 255, 255)
    UI_ACCENT_COLOR = (0, 200, 255)

    def __init__(self, config: SceneConfig, camera_id: int = 0, tracking: bool = True):
        """
        Initialize the application.

        Args:
            config: Scene settings
            camera_id: Camera device index
            tracking: Disable to run the scene without a camera
        """
        self.scene = ParticleScene(config, tracking=tracking)
        self.renderer = PointCloudRenderer(self.MAIN_WIDTH, self.MAIN_HEIGHT)
        self.snow = Snowfall(self.MAIN_WIDTH, self.MAIN_HEIGHT)

        self.camera: Optional[Camera] = Camera(camera_id=camera_id) if tracking else None
        self.hand_tracker: Optional[HandTracker] = HandTracker(max_hands=1) if tracking else None

        self._running = False
        self._show_hud = True
        self._last_frame: Optional[np.ndarray] = None
        self._last_hand: Optional[HandData] = None

        self._save_dir = Path("output")

        # Performance tracking
        self._fps_counter = 0
        self._fps_time = time.time()
        self._current_fps = 0.0

    def _update_fps(self):
        self._fps_counter += 1
        now = time.time()
        elapsed = now - self._fps_time
        if elapsed >= 1.0:
            self._current_fps = self._fps_counter / elapsed
            self._fps_counter = 0
            self._fps_time = now

    def _track_hand(self):
        """Classify the newest camera frame; lost feed means no hand."""
        frame = self.camera.get_frame()
        hand = None
        if frame is not None:
            hands = self.hand_tracker.process(frame)
            hand = hands[0] if hands else None
        self._last_frame = frame
        self._last_hand = hand
        self.scene.on_hand(hand)

    def _draw_hud(self, display: np.ndarray) -> np.ndarray:
        h, w = display.shape[:2]
        display = draw_gesture_ui(display, self.scene.state, self.scene.hint)

        cv2.putText(display, f"FPS: {self._current_fps:.1f}", (w - 130, 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, self.UI_ACCENT_COLOR, 2)
        cv2.putText(display, f"Theme: {self.scene.theme.label}", (10, h - 40),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, self.UI_ACCENT_COLOR, 2)
        cv2.putText(display, "[T] Theme | [H] Hide UI | [Space] Save | [Q] Quit",
                    (10, h - 15), cv2.FONT_HERSHEY_SIMPLEX, 0.45, (150, 150, 150), 1)

        if self._last_frame is not None:
            preview = self._last_frame.copy()
            if self._last_hand is not None:
                preview = self.hand_tracker.draw_landmarks(preview, self._last_hand)
            preview = cv2.resize(preview, (self.PREVIEW_WIDTH, self.PREVIEW_HEIGHT))
            y0 = h - self.PREVIEW_HEIGHT - 10
            x0 = w - self.PREVIEW_WIDTH - 10
            display[y0:y0 + self.PREVIEW_HEIGHT, x0:x0 + self.PREVIEW_WIDTH] = preview
            cv2.rectangle(display, (x0, y0), (x0 + self.PREVIEW_WIDTH, y0 + self.PREVIEW_HEIGHT),
                          self.UI_TEXT_COLOR, 1)
        return display

    def _save_screenshot(self, image: np.ndarray):
        self._save_dir.mkdir(exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = self._save_dir / f"tree_{timestamp}.png"
        cv2.imwrite(str(filename), image)
        print(f"[INFO] Saved: {filename}")

    def _handle_keyboard(self, key: int, display: np.ndarray) -> bool:
        """
        Handle keyboard input.

        Returns:
            False if should quit, True otherwise
        """
        if key == ord('q') or key == 27:
            return False
        elif key == ord('t'):
            self.scene.cycle_theme()
        elif key == ord('h'):
            self._show_hud = not self._show_hud
        elif key == ord(' '):
            self._save_screenshot(display)
        return True

    def run(self):
        """Run the main application loop."""
        print("\n" + "=" * 60)
        print("  Gesture Tree - Gesture-Controlled Particle Tree")
        print("=" * 60)
        print("\nGestures:")
        print("  Closed fist          -> Tree")
        print("  Open hand            -> Galaxy (move to the edges to rotate)")
        print("  Thumb + index pinch  -> Heart")
        print("\nKeyboard:")
        print("  [T] Next theme | [H] Toggle UI | [Space] Screenshot | [Q] Quit")
        print("\n" + "=" * 60)
        print(f"[INFO] {self.scene.particle_count()} particles, theme: {self.scene.theme.label}")

        if self.camera is not None and not self.camera.start():
            print("[ERROR] Failed to start camera!")
            return

        self._running = True
        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(WINDOW_NAME, self.MAIN_WIDTH, self.MAIN_HEIGHT)

        prev = time.time()
        try:
            while self._running:
                now = time.time()
                dt = now - prev
                prev = now

                if self.camera is not None:
                    self._track_hand()

                self.scene.tick(dt)
                self.snow.step(dt)
                display = self.renderer.render(self.scene)
                display = self.snow.draw(display)
                if self._show_hud:
                    display = self._draw_hud(display)

                self._update_fps()
                cv2.imshow(WINDOW_NAME, display)

                key = cv2.waitKey(1) & 0xFF
                if not self._handle_keyboard(key, display):
                    break
        finally:
            self._running = False
            if self.camera is not None:
                self.camera.stop()
            if self.hand_tracker is not None:
                self.hand_tracker.release()
            cv2.destroyAllWindows()
            print("\n[INFO] Application closed")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Gesture Tree - morph a particle tree with your hand")
    parser.add_argument('--camera', type=int, default=0, help='Camera device index')
    parser.add_argument('--theme', choices=ThemePresets.get_all_names(), help='Starting color theme')
    parser.add_argument('--seed', type=int, help='Random seed for the particle layout')
    parser.add_argument('--no-tracking', action='store_true', help='Run without camera and hand tracking')
    args = parser.parse_args()

    # No-op for keys main.py already loaded
    load_dotenv()

    try:
        config = SceneConfig.from_env()
    except ValueError as e:
        print(f"[ERROR] {e}")
        raise SystemExit(2)

    if args.theme:
        config.theme = args.theme
    if args.seed is not None:
        config.seed = args.seed

    try:
        app = GestureTreeApp(config, camera_id=args.camera, tracking=not args.no_tracking)
    except ImportError as e:
        print(f"[ERROR] Hand tracking unavailable: {e}")
        print("[NOTE] Install it with: pip install 'gesture-tree[tracking]'")
        print("[NOTE] Or run without a camera: --no-tracking")
        raise SystemExit(1)
    app.run()


if __name__ == "__main__":
    main()
