"""Tests for parent direction inference."""

import pytest

from rootline.family.direction import ParentDirection, infer_parent_direction


class TestInferParentDirection:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Alice is Bob's mother", ParentDirection.PARENT_IS_A),
            ("Bob's father is Alice", ParentDirection.PARENT_IS_A),
            ("Alice’s mother is Bob", ParentDirection.PARENT_IS_B),
            ("Alice, mother of Bob", ParentDirection.PARENT_IS_A),
            ("father: Bob, son Alice", ParentDirection.PARENT_IS_B),
        ],
    )
    def test_direction(self, text, expected):
        assert infer_parent_direction(text, "Alice", "Bob") == expected

    def test_no_parent_words(self):
        assert (
            infer_parent_direction("Alice and Bob", "Alice", "Bob")
            == ParentDirection.UNKNOWN
        )

    def test_both_marked_is_unknown(self):
        text = "Alice's mother and Bob's father"
        assert infer_parent_direction(text, "Alice", "Bob") == ParentDirection.UNKNOWN

    def test_missing_text(self):
        assert infer_parent_direction(None, "Alice", "Bob") == ParentDirection.UNKNOWN
        assert infer_parent_direction("Alice's mother", "", "Bob") == ParentDirection.UNKNOWN

    def test_name_inside_another_word_does_not_count(self):
        text = "Malice's mother met Bob"
        assert infer_parent_direction(text, "Alice", "Bob") == ParentDirection.UNKNOWN
