import pytest

from airink.geometry import Landmark
from airink.gestures import Gesture, GestureStabilizer, PoseClassifier

OFFSETS = [(0.0, 0.0), (-0.25, -0.3), (0.3, 0.15), (0.1, -0.2), (-0.1, 0.1)]


@pytest.fixture
def classifier(settings):
    return PoseClassifier(settings)


class TestPoseClassifier:

    def test_no_hands_is_none(self, classifier):
        assert classifier.classify([]) == Gesture.NONE
        assert classifier.classify(None) == Gesture.NONE

    def test_degenerate_hand_is_none(self, classifier, hand):
        partial = hand(extended=('index', 'middle', 'ring', 'pinky'), thumb=True)[:12]
        assert classifier.classify([partial]) == Gesture.NONE

    @pytest.mark.parametrize("offset", OFFSETS)
    def test_open_palm_translation_invariant(self, classifier, hand, offset):
        h = hand(extended=('index', 'middle', 'ring', 'pinky'), thumb=True, offset=offset)
        assert classifier.classify([h]) == Gesture.OPEN_PALM

    @pytest.mark.parametrize("thumb", [False, True])
    @pytest.mark.parametrize("offset", OFFSETS)
    def test_peace_sign_never_palm_or_pointing(self, classifier, hand, thumb, offset):
        h = hand(extended=('index', 'middle'), thumb=thumb, offset=offset)
        assert classifier.classify([h]) == Gesture.PEACE_CLEAR
        assert classifier.classify([h], pinch_active=True) == Gesture.PEACE_CLEAR

    def test_four_fingers_without_thumb_is_not_open_palm(self, classifier, hand):
        h = hand(extended=('index', 'middle', 'ring', 'pinky'), thumb=False)
        assert classifier.classify([h]) == Gesture.NONE

    def test_pointing(self, classifier, hand):
        assert classifier.classify([hand(extended=('index',))]) == Gesture.POINTING

    def test_pointing_hand_does_not_pinch_until_fingers_close(self, classifier, hand):
        assert classifier.classify([hand(extended=('index',), pinch=0.08)]) == Gesture.NONE
        assert classifier.classify([hand(extended=('index',), pinch=0.02)]) == Gesture.PINCH_DRAW

    def test_pinch_hysteresis_band(self, classifier, hand):
        h = hand(extended=('index',), pinch=0.05)
        assert classifier.classify([h], pinch_active=False) == Gesture.NONE
        assert classifier.classify([h], pinch_active=True) == Gesture.PINCH_DRAW

        wide = hand(extended=('index',), pinch=0.07)
        assert classifier.classify([wide], pinch_active=True) == Gesture.NONE

    def test_fist_is_outside_the_pinch_exit_band(self, classifier, hand):
        assert classifier.classify([hand()], pinch_active=True) == Gesture.NONE

    def test_two_hand_zoom_wins(self, classifier, hand):
        left = hand(extended=('index',), offset=(-0.25, 0.0))
        right = hand(extended=('index', 'middle', 'ring', 'pinky'), thumb=True, offset=(0.3, 0.0))
        assert classifier.classify([left, right]) == Gesture.TWO_FINGER_ZOOM

    def test_second_hand_without_index_falls_through(self, classifier, hand):
        primary = hand(extended=('index',))
        fist = hand(offset=(0.3, 0.0))
        assert classifier.classify([primary, fist]) == Gesture.POINTING

    def test_degenerate_second_hand_ignored(self, classifier, hand):
        primary = hand(extended=('index',))
        partial = hand(extended=('index',))[:10]
        assert classifier.classify([primary, partial]) == Gesture.POINTING

    def test_rules_are_in_priority_order(self, classifier):
        assert [r.gesture for r in classifier.rules] == [
            Gesture.TWO_FINGER_ZOOM,
            Gesture.OPEN_PALM,
            Gesture.PEACE_CLEAR,
            Gesture.POINTING,
            Gesture.PINCH_DRAW,
        ]

    def test_open_palm_requires_thumb_clear_of_index(self, classifier, hand):
        h = hand(extended=('index', 'middle', 'ring', 'pinky'), thumb=True)
        assert classifier.is_open_palm(h)
        # Thumb swung wide past the index tip so it still clears the palm width
        h[4] = Landmark(0.37, 0.40)
        assert not classifier.is_open_palm(h)

    def test_accepts_objects_with_xy_attributes(self, classifier, hand):
        class Raw:
            def __init__(self, lm):
                self.x, self.y, self.z = lm.x, lm.y, 0.0

        h = [Raw(lm) for lm in hand(extended=('index',))]
        assert classifier.classify([h]) == Gesture.POINTING


class TestGestureStabilizer:

    def test_starts_at_none(self):
        assert GestureStabilizer().active == Gesture.NONE

    def test_needs_majority_before_switching(self):
        stabilizer = GestureStabilizer(6)
        for _ in range(3):
            assert stabilizer.push(Gesture.POINTING) == Gesture.NONE
        assert stabilizer.push(Gesture.POINTING) == Gesture.POINTING

    def test_single_outlier_does_not_change_stable_gesture(self):
        stabilizer = GestureStabilizer(6)
        for _ in range(6):
            stabilizer.push(Gesture.PINCH_DRAW)

        assert stabilizer.push(Gesture.OPEN_PALM) == Gesture.PINCH_DRAW
        for _ in range(6):
            assert stabilizer.push(Gesture.PINCH_DRAW) == Gesture.PINCH_DRAW

    def test_split_buffer_keeps_previous(self):
        stabilizer = GestureStabilizer(6)
        for _ in range(6):
            stabilizer.push(Gesture.POINTING)
        for _ in range(3):
            stabilizer.push(Gesture.PEACE_CLEAR)
        # 3 vs 3: no label exceeds half
        assert stabilizer.active == Gesture.POINTING

    def test_buffer_is_bounded(self):
        stabilizer = GestureStabilizer(6)
        for _ in range(20):
            stabilizer.push(Gesture.NONE)
        assert len(stabilizer) == 6
        assert stabilizer.majority() == (Gesture.NONE, 6)

    def test_pinch_active_follows_active_gesture(self):
        stabilizer = GestureStabilizer(6)
        assert not stabilizer.pinch_active
        for _ in range(4):
            stabilizer.push(Gesture.PINCH_DRAW)
        assert stabilizer.pinch_active

    def test_clear_keeps_active(self):
        stabilizer = GestureStabilizer(6)
        for _ in range(6):
            stabilizer.push(Gesture.OPEN_PALM)
        stabilizer.clear()
        assert len(stabilizer) == 0
        assert stabilizer.active == Gesture.OPEN_PALM

        stabilizer.reset()
        assert stabilizer.active == Gesture.NONE


def test_hysteresis_through_stabilizer(classifier, hand):
    """Loosening the pinch inside the band keeps drawing; past it, drawing stops."""
    stabilizer = GestureStabilizer(6)

    def feed(pinch, frames):
        for _ in range(frames):
            raw = classifier.classify([hand(extended=('index',), pinch=pinch)], stabilizer.pinch_active)
            stabilizer.push(raw)
        return stabilizer.active

    assert feed(0.02, 6) == Gesture.PINCH_DRAW
    assert feed(0.05, 20) == Gesture.PINCH_DRAW
    assert feed(0.064, 20) == Gesture.PINCH_DRAW
    assert feed(0.08, 6) == Gesture.NONE
    # Re-entering needs the tight threshold again
    assert feed(0.05, 20) == Gesture.NONE
