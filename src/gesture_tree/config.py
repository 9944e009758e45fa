"""
Config Module - Scene Settings
==============================
Particle counts, shape and morph tunables. Values come from the dataclass
defaults, overridden by environment variables (a .env file is loaded by
main.py) and finally by command-line flags.

Environment variables:
    GESTURE_TREE_POINTS     canopy particles
    GESTURE_GROUND_POINTS   ground particles
    GESTURE_STAR_POINTS     ornament particles
    GESTURE_TREE_THEME      starting theme name
    GESTURE_TREE_SEED       random seed (unset = different tree every run)
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .themes import ThemePresets


def _env_int(environ: Mapping[str, str], name: str, default: Optional[int]) -> Optional[int]:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class SceneConfig:
    """
    Settings for one scene session.

    Attributes:
        tree_points: Canopy particle count
        ground_points: Ground particle count
        star_points: Ornament particle count
        tree_height: Canopy height in scene units
        morph_rate: Interpolation rate constant (1/s)
        theme: Starting theme name
        seed: Random seed, None for an unseeded draw
    """
    tree_points: int = 50000
    ground_points: int = 4000
    star_points: int = 1200
    tree_height: float = 12.0
    morph_rate: float = 2.0
    theme: str = ThemePresets.DEFAULT
    seed: Optional[int] = None

    def __post_init__(self):
        for name in ('tree_points', 'ground_points', 'star_points'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.morph_rate < 0:
            raise ValueError(f"morph_rate must be >= 0, got {self.morph_rate}")
        # Raises ValueError for unknown names
        ThemePresets.get(self.theme)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'SceneConfig':
        """
        Build a config from environment variables.

        An unknown theme name falls back to the default theme with a warning;
        malformed numbers raise ValueError.
        """
        environ = os.environ if environ is None else environ
        defaults = cls()

        theme = environ.get('GESTURE_TREE_THEME', defaults.theme)
        if theme not in ThemePresets.get_all_names():
            print(f"[WARNING] Unknown theme '{theme}', using '{defaults.theme}'")
            theme = defaults.theme

        return cls(
            tree_points=_env_int(environ, 'GESTURE_TREE_POINTS', defaults.tree_points),
            ground_points=_env_int(environ, 'GESTURE_GROUND_POINTS', defaults.ground_points),
            star_points=_env_int(environ, 'GESTURE_STAR_POINTS', defaults.star_points),
            theme=theme,
            seed=_env_int(environ, 'GESTURE_TREE_SEED', defaults.seed),
        )
