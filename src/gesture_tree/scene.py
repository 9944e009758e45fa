"""
Scene Module - Particle Scene State
===================================
Owns the particle groups, the active theme and the shared control state,
and advances everything once per rendered frame. This is the seam the
camera loop, the renderer and the UI talk to.
"""

import numpy as np
from typing import Dict, Optional, Sequence, Tuple, Union
from dataclasses import dataclass

from .config import SceneConfig
from .gesture_logic import GestureClassifier, Mode, ModeRotationState
from .hand_tracking import HandData
from .interpolator import ShapeInterpolator
from .particles import ParticleGroup, generate_groups
from .rotation import RotationController
from .themes import ColorTheme, ThemePresets


@dataclass
class TopperStar:
    """
    Five-pointed star sitting on the tree apex.

    Attributes:
        height: Center height in scene units
        spin: Accumulated rotation about the viewing axis (radians)
    """
    height: float
    spin: float = 0.0

    OUTER_RADIUS = 0.55
    INNER_RADIUS = 0.22
    POINTS = 5
    SPIN_RATE = 0.3  # rad/s

    def outline(self) -> np.ndarray:
        """(2 * POINTS, 3) outline vertices in scene coordinates."""
        n = self.POINTS * 2
        radius = np.where(np.arange(n) % 2 == 0, self.OUTER_RADIUS, self.INNER_RADIUS)
        # First tip points straight up at spin == 0
        angle = np.arange(n) * np.pi / self.POINTS + np.pi / 2 + self.spin
        return np.column_stack([
            np.cos(angle) * radius,
            np.sin(angle) * radius + self.height,
            np.zeros(n),
        ])


class ParticleScene:
    """
    Interactive particle scene: generation, gesture control and animation.

    Attributes:
        config: Scene settings
        theme: Active color theme
        groups: Particle groups by name, in draw order
        state: Shared mode/rotation record
        tracking: False when no hand tracker feeds the scene
    """

    # Whole scene is lowered so the tree sits in the middle of the view
    SCENE_OFFSET = (0.0, -5.5, 0.0)

    def __init__(self, config: Optional[SceneConfig] = None, tracking: bool = True):
        self.config = config or SceneConfig()
        self.tracking = tracking
        self.rng = np.random.default_rng(self.config.seed)

        self.theme: ColorTheme = ThemePresets.get(self.config.theme)
        self.state = ModeRotationState()

        self.classifier = GestureClassifier()
        self.interpolator = ShapeInterpolator(self.config.morph_rate)
        self.rotation = RotationController()
        self.star = TopperStar(height=self.config.tree_height + 0.4)

        self.groups: Dict[str, ParticleGroup] = self._generate()

    def _generate(self) -> Dict[str, ParticleGroup]:
        return generate_groups(
            self.theme,
            self.config.tree_points,
            self.config.ground_points,
            self.config.star_points,
            rng=self.rng,
            height=self.config.tree_height,
        )

    # ========================= Themes =========================

    def set_theme(self, name: str) -> ColorTheme:
        """
        Switch theme and regenerate every group from scratch.

        Raises:
            ValueError: If the theme name is unknown
        """
        self.theme = ThemePresets.get(name)
        self.groups = self._generate()
        print(f"[INFO] Theme: {self.theme.label}")
        return self.theme

    def cycle_theme(self) -> ColorTheme:
        """Advance to the next theme in preset order."""
        return self.set_theme(ThemePresets.next_name(self.theme.key))

    # ========================= Per-frame =========================

    def on_hand(self, hand_data: Union[HandData, Sequence[HandData], None]) -> Mode:
        """Feed one landmark frame (None or empty = no hand) to the classifier."""
        return self.classifier.update(self.state, hand_data)

    def tick(self, dt: float):
        """Advance particles, rotation and the topper star by dt seconds."""
        dt = max(0.0, float(dt))
        self.interpolator.step(self.groups.values(), self.state.mode, dt)
        if self.tracking:
            self.rotation.step(self.state, dt)
        else:
            self.rotation.drift(self.state.rotation, dt)
        self.star.spin += TopperStar.SPIN_RATE * dt

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def hint(self) -> str:
        if not self.tracking:
            return "Hand tracking off"
        return self.classifier.hint

    # ========================= Renderer outputs =========================

    def positions(self) -> np.ndarray:
        """Current positions of all particles, groups concatenated."""
        return np.concatenate([g.current for g in self.groups.values()])

    def colors(self) -> np.ndarray:
        """Colors matching positions()."""
        return np.concatenate([g.colors for g in self.groups.values()])

    def orientation(self) -> Tuple[float, float]:
        """(pitch, yaw) in radians."""
        return self.state.rotation.x, self.state.rotation.y

    def particle_count(self) -> int:
        return sum(len(g) for g in self.groups.values())
