import dataclasses

import pytest

from gesture_tree.gesture_logic import (
    DEFAULT_MODE,
    GestureClassifier,
    HandState,
    Mode,
    ModeRotationState,
    extract_features,
    to_signed_unit,
)
from gesture_tree.hand_tracking import HandData, HandLandmark


classify = GestureClassifier.classify_mode


@pytest.mark.parametrize("previous", list(Mode))
@pytest.mark.parametrize("openness", [0.10, 0.32, 0.60])
def test_pinch_wins_over_openness(previous, openness):
    assert classify(0.02, openness, previous) is Mode.HEART


@pytest.mark.parametrize("previous", list(Mode))
def test_fist_selects_tree(previous):
    assert classify(0.20, 0.20, previous) is Mode.TREE


@pytest.mark.parametrize("previous", list(Mode))
def test_open_hand_selects_scatter(previous):
    assert classify(0.20, 0.50, previous) is Mode.SCATTER


@pytest.mark.parametrize("previous", list(Mode))
@pytest.mark.parametrize("openness", [0.30, 0.32, 0.35])
def test_dead_band_holds_previous_mode(previous, openness):
    assert classify(0.10, openness, previous) is previous


def test_pinch_threshold_has_no_hysteresis():
    assert classify(0.049, 0.50, Mode.SCATTER) is Mode.HEART
    # Just above the threshold the openness rules apply straight away
    assert classify(0.051, 0.50, Mode.HEART) is Mode.SCATTER
    assert classify(0.051, 0.20, Mode.HEART) is Mode.TREE
    # Dead-band openness keeps HEART only because HEART was the previous mode
    assert classify(0.051, 0.32, Mode.HEART) is Mode.HEART


def test_to_signed_unit():
    assert to_signed_unit(0.0) == -1.0
    assert to_signed_unit(0.5) == 0.0
    assert to_signed_unit(1.0) == 1.0
    assert to_signed_unit(0.75) == pytest.approx(0.5)


def test_extract_features(make_hand):
    features = extract_features(make_hand(pinch=0.1, openness=0.4))
    assert features.pinch == pytest.approx(0.1)
    assert features.openness == pytest.approx(0.4)


def test_update_writes_position_and_mode(make_hand):
    classifier = GestureClassifier()
    state = ModeRotationState()

    mode = classifier.update(state, make_hand(pinch=0.2, openness=0.5, anchor=(0.75, 0.25)))

    assert mode is Mode.SCATTER
    assert state.mode is Mode.SCATTER
    assert state.hand.detected
    assert state.hand.x == pytest.approx(0.5)
    assert state.hand.y == pytest.approx(-0.5)
    assert classifier.hint.startswith("SCATTER MODE")


def test_update_pinch_gives_heart_hint(make_hand):
    classifier = GestureClassifier()
    state = ModeRotationState()
    assert classifier.update(state, make_hand(pinch=0.03, openness=0.5)) is Mode.HEART
    assert classifier.hint.startswith("HEART MODE")
    assert classifier.last_features.pinch == pytest.approx(0.03)


def test_update_dead_band_hint(make_hand):
    classifier = GestureClassifier()
    state = ModeRotationState(mode=Mode.SCATTER)
    assert classifier.update(state, make_hand(pinch=0.2, openness=0.32)) is Mode.SCATTER
    assert classifier.hint.startswith("Transitioning")


def test_no_hand_returns_to_default(make_hand):
    classifier = GestureClassifier()
    state = ModeRotationState()
    classifier.update(state, make_hand(pinch=0.2, openness=0.5, anchor=(0.9, 0.1)))
    assert state.mode is Mode.SCATTER

    assert classifier.update(state, None) is DEFAULT_MODE
    assert DEFAULT_MODE is Mode.TREE
    assert state.hand == HandState()
    assert not state.hand.detected
    assert classifier.last_features is None
    assert classifier.hint == "Waiting for hand..."


def test_hand_state_is_replaced_not_mutated(make_hand):
    classifier = GestureClassifier()
    state = ModeRotationState()
    classifier.update(state, make_hand(anchor=(0.6, 0.4)))
    first = state.hand

    classifier.update(state, make_hand(anchor=(0.2, 0.9)))

    assert state.hand is not first
    assert first.x == pytest.approx(0.2)
    assert first.y == pytest.approx(-0.2)
    with pytest.raises(dataclasses.FrozenInstanceError):
        state.hand.x = 0.0


def test_landmarks_are_clamped_to_unit_square():
    hand = HandData.from_normalized({0: (1.4, -0.2), 9: (0.5, 0.5, 0.1)}, frame_size=(640, 480))
    wrist = hand.get_landmark(HandLandmark.WRIST)
    assert (wrist.x, wrist.y) == (1.0, 0.0)
    assert wrist.to_tuple() == (639, 0)
    assert hand.get_landmark(HandLandmark.MIDDLE_MCP).z == pytest.approx(0.1)
    assert hand.get_landmark(HandLandmark.PINKY_TIP) is None


def test_out_of_frame_hand_position_stays_in_range():
    hand = HandData.from_normalized(
        {**{int(lm): (0.5, 0.5) for lm in HandLandmark}, HandLandmark.MIDDLE_MCP: (1.3, -0.4)}
    )
    state = ModeRotationState()
    GestureClassifier().update(state, hand)
    assert state.hand.x == 1.0
    assert state.hand.y == -1.0


@pytest.mark.parametrize("frame", [
    None,
    [],
    HandData(landmarks={}),
    HandData.from_normalized({0: (0.5, 0.8), 9: (0.5, 0.6)}),
], ids=["none", "empty-list", "no-landmarks", "partial-hand"])
def test_missing_hand_falls_back_to_tree(frame):
    state = ModeRotationState(mode=Mode.SCATTER, hand=HandState(detected=True, x=0.5, y=0.5))
    classifier = GestureClassifier()

    assert classifier.update(state, frame) is Mode.TREE
    assert state.hand == HandState()
    assert classifier.last_features is None


def test_hand_list_uses_first_hand(make_hand):
    state = ModeRotationState()
    frame = [make_hand(pinch=0.03), make_hand(pinch=0.2, openness=0.5)]
    assert GestureClassifier().update(state, frame) is Mode.HEART
    assert state.hand.detected


def test_non_finite_landmarks_are_left_out():
    hand = HandData.from_normalized({
        0: (float('nan'), 0.5),
        9: (0.5, 0.5, float('inf')),
        4: (0.2, 0.3),
    })
    assert set(hand.landmarks) == {HandLandmark.THUMB_TIP}


def test_hand_with_nan_landmark_counts_as_no_hand(make_hand):
    coords = {lm: (p.x, p.y, p.z) for lm, p in make_hand(openness=0.5).landmarks.items()}
    coords[HandLandmark.WRIST] = (float('nan'), 0.8, 0.0)
    state = ModeRotationState(mode=Mode.SCATTER)

    assert GestureClassifier().update(state, HandData.from_normalized(coords)) is Mode.TREE
    assert not state.hand.detected


def test_point_distance_ignores_depth():
    hand = HandData.from_normalized({0: (0.1, 0.1, -0.5), 4: (0.4, 0.5, 0.9)})
    wrist = hand.get_landmark(HandLandmark.WRIST)
    thumb = hand.get_landmark(HandLandmark.THUMB_TIP)
    assert wrist.planar_distance_to(thumb) == pytest.approx(0.5)
    assert not hasattr(wrist, 'distance_to')
