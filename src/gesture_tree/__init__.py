# Gesture Tree - Gesture-Controlled Morphing Particle Tree
# Version: 1.0.0

"""
Core modules for the gesture-controlled particle tree:
- themes: Named color palettes
- particles: Point-set generation for canopy, ground and ornaments
- interpolator: Per-frame shape morphing
- gesture_logic: Landmarks to mode classification, shared control state
- rotation: Scene rotation control
- scene: Scene state and per-frame tick
- config: Scene settings from defaults, environment and CLI
- hand_tracking: MediaPipe hand landmark detection
- camera: Webcam stream handler
- renderer: OpenCV point cloud preview
- ui: Main application interface
"""

__version__ = "1.0.0"
