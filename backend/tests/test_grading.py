"""Unit tests for review quality classification."""

import pytest

from recall.srs.grading import Grade, classify, classify_swipe


class TestClassify:
    """Tests for classify function."""

    def test_each_action_maps_to_its_grade(self):
        assert classify("again") is Grade.AGAIN
        assert classify("hard") is Grade.HARD
        assert classify("good") is Grade.GOOD
        assert classify("easy") is Grade.EASY

    def test_grade_values_are_ordered_zero_to_three(self):
        assert [int(g) for g in Grade] == [0, 1, 2, 3]
        assert Grade.AGAIN < Grade.HARD < Grade.GOOD < Grade.EASY

    def test_case_and_whitespace_insensitive(self):
        assert classify(" Good ") is Grade.GOOD
        assert classify("EASY") is Grade.EASY

    def test_grade_passes_through(self):
        for grade in Grade:
            assert classify(grade) is grade

    def test_unknown_action_raises(self):
        with pytest.raises(ValueError):
            classify("perfect")  # type: ignore[arg-type]

    def test_action_round_trip(self):
        for grade in Grade:
            assert classify(grade.action) is grade


class TestGrade:
    """Tests for Grade helpers."""

    def test_only_again_is_a_failure(self):
        assert not Grade.AGAIN.is_success
        assert Grade.HARD.is_success
        assert Grade.GOOD.is_success
        assert Grade.EASY.is_success


class TestClassifySwipe:
    """Tests for swipe gestures."""

    def test_right_is_good(self):
        assert classify_swipe("right") is Grade.GOOD

    def test_left_is_again(self):
        assert classify_swipe("left") is Grade.AGAIN

    def test_unknown_direction_raises(self):
        with pytest.raises(ValueError):
            classify_swipe("up")  # type: ignore[arg-type]
