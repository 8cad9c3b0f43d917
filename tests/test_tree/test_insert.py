"""Tests for growing a tree one example at a time with insert."""

from __future__ import annotations

import pytest
from pytest_check import check

from spamtree.exceptions import MissingFeatureVectorError, UnsavableNameError
from spamtree.features import FeatureVector
from spamtree.tree import DecisionNode, LeafNode, check_label, classify, insert


class TestInsertIntoLeaf:
    """Tests for inserting directly into a single leaf."""

    def test_matching_label_returns_same_tree(self, ham_vector: FeatureVector) -> None:
        """Inserting an example whose label matches the leaf should leave the tree untouched.

        Args:
            ham_vector (FeatureVector): Fixture vector with no spammy words.
        """
        # Arrange
        root = LeafNode(label="ham", block=ham_vector)

        # Act
        result = insert(root, FeatureVector(frequencies={"meeting": 1.0}), "ham")

        # Assert
        assert result is root

    def test_new_example_above_threshold_goes_right(
        self, ham_vector: FeatureVector, spam_vector: FeatureVector
    ) -> None:
        """A differing label should split at the midpoint; the larger-valued new example goes right.

        Args:
            ham_vector (FeatureVector): Fixture vector with no spammy words.
            spam_vector (FeatureVector): Fixture vector dominated by spammy words.
        """
        # Arrange
        old_leaf = LeafNode(label="ham", block=ham_vector)

        # Act
        result = insert(old_leaf, spam_vector, "spam")

        # Assert
        assert isinstance(result, DecisionNode)
        with check:
            assert result.feature == "free"
        with check:
            assert result.threshold == 2.5
        with check:
            assert result.left is old_leaf
        with check:
            assert result.right == LeafNode(label="spam", block=spam_vector)

    def test_new_example_below_threshold_goes_left(
        self, ham_vector: FeatureVector, spam_vector: FeatureVector
    ) -> None:
        """When the new example has the smaller value, its leaf should become the left child.

        Args:
            ham_vector (FeatureVector): Fixture vector with no spammy words.
            spam_vector (FeatureVector): Fixture vector dominated by spammy words.
        """
        # Arrange
        old_leaf = LeafNode(label="spam", block=spam_vector)

        # Act
        result = insert(old_leaf, ham_vector, "ham")

        # Assert
        assert isinstance(result, DecisionNode)
        with check:
            assert result.threshold == 2.5
        with check:
            assert result.left == LeafNode(label="ham", block=ham_vector)
        with check:
            assert result.right is old_leaf

    def test_identical_vectors_put_new_example_right(self) -> None:
        """Equal values sit exactly on the threshold, so the new example should take the right side.

        The threshold equals both values, the new example is not strictly below
        it, and it is later routed right again by classify.
        """
        # Arrange
        vector = FeatureVector(frequencies={"free": 0.4})
        old_leaf = LeafNode(label="ham", block=vector)

        # Act
        result = insert(old_leaf, vector, "spam")

        # Assert
        assert isinstance(result, DecisionNode)
        with check:
            assert result.threshold == 0.4
        with check:
            assert result.left is old_leaf
        with check:
            assert classify(result, vector) == "spam"

    def test_leaf_without_vector_cannot_split(self) -> None:
        """A loaded leaf has no vector, so a differing label should raise MissingFeatureVectorError."""
        # Arrange
        root = LeafNode(label="ham")

        # Act / Assert
        with pytest.raises(MissingFeatureVectorError) as exc_info:
            insert(root, FeatureVector(frequencies={"free": 1.0}), "spam")
        assert exc_info.value.label == "ham"

    def test_leaf_without_vector_absorbs_matching_label(self) -> None:
        """A loaded leaf should still absorb examples carrying its own label."""
        root = LeafNode(label="ham")

        assert insert(root, FeatureVector(frequencies={"free": 1.0}), "ham") is root

    def test_empty_feature_name_cannot_become_split(self) -> None:
        """A split on the empty feature name would read back as a label, so it should be rejected."""
        # Arrange
        root = LeafNode(label="ham", block=FeatureVector(frequencies={"": 0.0}))

        # Act / Assert
        with pytest.raises(UnsavableNameError) as exc_info:
            insert(root, FeatureVector(frequencies={"": 5.0}), "spam")
        assert exc_info.value.kind == "feature"


class TestCheckLabel:
    """Tests for check_label."""

    @pytest.mark.parametrize("label", ["spam", "", "junk mail", "Feature:free"])
    def test_accepts_labels_that_read_back_unchanged(self, label: str) -> None:
        """Single-line labels without outer whitespace should pass.

        Args:
            label (str): Label under test.
        """
        check_label(label)

    @pytest.mark.parametrize("label", ["\tspam", "spam\n", "a\u2028b", "Feature: money"])
    def test_rejects_labels_that_would_change(self, label: str) -> None:
        """Labels that would be split or stripped on reload, or read as a feature line, should fail.

        Args:
            label (str): Label under test.
        """
        with pytest.raises(UnsavableNameError):
            check_label(label)



class TestInsertIntoTree:
    """Tests for inserting through decision nodes."""

    def test_sequence_builds_expected_tree(self, training_set: tuple[list[FeatureVector], list[str]]) -> None:
        """Inserting the training set in order should produce the documented tree.

        Args:
            training_set (tuple[list[FeatureVector], list[str]]): Fixture vectors and labels.
        """
        # Arrange
        vectors, labels = training_set
        root = LeafNode(label=labels[0], block=vectors[0])

        # Act
        for vector, label in zip(vectors[1:], labels[1:], strict=True):
            root = insert(root, vector, label)

        # Assert
        assert isinstance(root, DecisionNode)
        with check:
            assert (root.feature, root.threshold) == ("free", pytest.approx(0.3))
        with check:
            assert root.left == LeafNode(label="ham", block=vectors[0])
        assert isinstance(root.right, DecisionNode)
        with check:
            assert (root.right.feature, root.right.threshold) == ("meeting", pytest.approx(0.15))
        with check:
            assert root.right.left == LeafNode(label="spam", block=vectors[1])
        with check:
            assert root.right.right == LeafNode(label="ham", block=vectors[3])

    def test_insert_shares_untouched_subtree(self, training_set: tuple[list[FeatureVector], list[str]]) -> None:
        """Rebuilding the path to the split leaf should reuse the sibling subtree and leave the old root intact.

        Args:
            training_set (tuple[list[FeatureVector], list[str]]): Fixture vectors and labels.
        """
        # Arrange
        vectors, labels = training_set
        before = insert(LeafNode(label=labels[0], block=vectors[0]), vectors[1], labels[1])
        assert isinstance(before, DecisionNode)

        # Act
        after = insert(before, vectors[3], labels[3])

        # Assert
        assert isinstance(after, DecisionNode)
        with check:
            assert after is not before
        with check:
            assert after.left is before.left
        with check:
            assert isinstance(before.right, LeafNode)
        with check:
            assert isinstance(after.right, DecisionNode)

    def test_matching_label_deep_in_tree_keeps_root(self, training_set: tuple[list[FeatureVector], list[str]]) -> None:
        """An example landing on a leaf with its own label should return the very same root.

        Args:
            training_set (tuple[list[FeatureVector], list[str]]): Fixture vectors and labels.
        """
        # Arrange
        vectors, labels = training_set
        root = insert(LeafNode(label=labels[0], block=vectors[0]), vectors[1], labels[1])

        # Act
        result = insert(root, vectors[2], labels[2])

        # Assert
        assert result is root

    def test_every_training_example_classifies_to_its_label(
        self, training_set: tuple[list[FeatureVector], list[str]]
    ) -> None:
        """After inserting the whole set, each training example should be classified with its own label.

        Args:
            training_set (tuple[list[FeatureVector], list[str]]): Fixture vectors and labels.
        """
        # Arrange
        vectors, labels = training_set
        root = LeafNode(label=labels[0], block=vectors[0])
        for vector, label in zip(vectors[1:], labels[1:], strict=True):
            root = insert(root, vector, label)

        # Act / Assert
        for vector, label in zip(vectors, labels, strict=True):
            with check:
                assert classify(root, vector) == label
