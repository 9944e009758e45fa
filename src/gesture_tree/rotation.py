"""
Rotation Module - Scene Orientation Control
===========================================
Accumulates the scene rotation from the control state. In SCATTER mode an
open hand near the frame edges steers the scene; every other mode
auto-rotates and eases the pitch back to level.
"""

from .gesture_logic import Mode, ModeRotationState, Rotation


class RotationController:
    """
    Edge-proportional steering plus auto-rotation.

    Rotation accumulates without wraparound; consumers reduce it with
    periodic functions.
    """

    # Edge steering
    DEAD_ZONE = 0.3
    STEER_SPEED = 1.2

    # Auto-rotation (rad/s) and pitch recentering rate (1/s)
    TREE_YAW_RATE = 0.15
    TREE_PITCH_DECAY = 2.0
    HEART_YAW_RATE = 0.10
    HEART_PITCH_DECAY = 1.5
    IDLE_YAW_RATE = 0.05

    # Used when hand tracking is disabled altogether
    FALLBACK_YAW_RATE = 0.12

    @classmethod
    def edge_excess(cls, value: float) -> float:
        """Part of a [-1, 1] hand coordinate beyond the dead zone, signed."""
        if value > cls.DEAD_ZONE:
            return value - cls.DEAD_ZONE
        if value < -cls.DEAD_ZONE:
            return value + cls.DEAD_ZONE
        return 0.0

    @staticmethod
    def _recenter(angle: float, rate: float, dt: float) -> float:
        return angle - angle * min(1.0, max(0.0, rate * dt))

    def drift(self, rotation: Rotation, dt: float):
        """Slow yaw drift used when no gesture input exists at all."""
        rotation.y += self.FALLBACK_YAW_RATE * dt

    def step(self, state: ModeRotationState, dt: float):
        """
        Advance the rotation by dt seconds.

        Args:
            state: Shared control record, its rotation is updated in place
            dt: Elapsed time in seconds
        """
        rot = state.rotation
        hand = state.hand

        if state.mode is Mode.SCATTER and hand.detected:
            rot.y += self.STEER_SPEED * dt * self.edge_excess(hand.x)
            rot.x += self.STEER_SPEED * dt * self.edge_excess(hand.y)
        elif state.mode is Mode.TREE:
            rot.y += self.TREE_YAW_RATE * dt
            rot.x = self._recenter(rot.x, self.TREE_PITCH_DECAY, dt)
        elif state.mode is Mode.HEART:
            rot.y += self.HEART_YAW_RATE * dt
            rot.x = self._recenter(rot.x, self.HEART_PITCH_DECAY, dt)
        else:
            rot.y += self.IDLE_YAW_RATE * dt
