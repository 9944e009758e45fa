"""
Interpolator Module - Shape Morphing
====================================
Moves every particle toward the target of the active mode with exponential
smoothing. Positions converge asymptotically and never overshoot.
"""

import numpy as np
from typing import Iterable

from .gesture_logic import Mode
from .particles import ParticleGroup


def select_targets(group: ParticleGroup, mode: Mode) -> np.ndarray:
    """
    Target positions for every particle of a group.

    TREE uses the base positions and SCATTER the scatter positions. HEART
    uses the heart positions where a particle has one and falls back to the
    base position otherwise.
    """
    if mode is Mode.SCATTER:
        return group.scatter
    if mode is Mode.HEART:
        if group.has_heart.all():
            return group.heart
        return np.where(group.has_heart[:, None], group.heart, group.base)
    return group.base


def blend_factor(rate: float, dt: float) -> float:
    """Fraction of the remaining distance covered in one frame, in [0, 1]."""
    return min(1.0, max(0.0, rate * dt))


class ShapeInterpolator:
    """
    Per-frame integrator: current += (target - current) * clamp(k * dt, 0, 1).

    Attributes:
        rate: Rate constant k in 1/s
    """

    DEFAULT_RATE = 2.0

    def __init__(self, rate: float = DEFAULT_RATE):
        self.rate = float(rate)

    def step_group(self, group: ParticleGroup, mode: Mode, dt: float):
        """Advance one group by dt seconds."""
        alpha = blend_factor(self.rate, dt)
        if alpha == 0.0 or len(group) == 0:
            return
        target = select_targets(group, mode)
        group.current += (target - group.current) * alpha

    def step(self, groups: Iterable[ParticleGroup], mode: Mode, dt: float):
        """Advance every group by dt seconds."""
        for group in groups:
            self.step_group(group, mode, dt)
