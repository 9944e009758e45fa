import math

import numpy as np
import pytest

from gesture_tree.config import SceneConfig
from gesture_tree.hand_tracking import HandData, HandLandmark
from gesture_tree.themes import ThemePresets


# Fingertip directions from the wrist, degrees from straight up
_TIP_ANGLES = {
    HandLandmark.INDEX_TIP: -30.0,
    HandLandmark.MIDDLE_TIP: -10.0,
    HandLandmark.RING_TIP: 10.0,
    HandLandmark.PINKY_TIP: 30.0,
}
_WRIST = (0.5, 0.8)


def build_hand(pinch=0.2, openness=0.25, anchor=(0.5, 0.6)):
    """
    Synthesize a hand whose thumb-index distance is `pinch` and whose four
    fingertips all sit `openness` away from the wrist.
    """
    coords = {int(lm): (0.5, 0.7, 0.0) for lm in HandLandmark}
    coords[HandLandmark.WRIST] = (_WRIST[0], _WRIST[1], 0.0)
    coords[HandLandmark.MIDDLE_MCP] = (anchor[0], anchor[1], 0.0)
    for tip, deg in _TIP_ANGLES.items():
        a = math.radians(deg)
        coords[tip] = (_WRIST[0] + openness * math.sin(a), _WRIST[1] - openness * math.cos(a), 0.0)
    ix, iy, _ = coords[HandLandmark.INDEX_TIP]
    coords[HandLandmark.THUMB_TIP] = (ix + pinch, iy, 0.0)
    return HandData.from_normalized(coords, frame_size=(640, 480))


@pytest.fixture
def make_hand():
    return build_hand


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def classic():
    return ThemePresets.get('classic')


@pytest.fixture
def small_config():
    return SceneConfig(tree_points=2000, ground_points=400, star_points=150, seed=7)
