"""Spam/ham classifier backed by an incrementally grown binary decision tree."""

from __future__ import annotations

import io
from collections.abc import Iterable, Sequence
from typing import Final, TextIO

from loguru import logger
from sklearn.metrics import accuracy_score, recall_score

from spamtree.exceptions import (
    DataLabelsMismatchError,
    EmptyTrainingDataError,
    MissingFeatureVectorError,
    TreeFormatError,
    UnsavableNameError,
)
from spamtree.features import FeatureVector
from spamtree.logging import TREE_BUILD_LEVEL
from spamtree.tree import (
    LeafNode,
    Node,
    check_label,
    classify,
    insert,
    iter_lines,
    leaf_labels,
    parse_lines,
    tree_depth,
    tree_leaf_count,
)

__all__ = ["OVERALL_KEY", "Classifier"]

OVERALL_KEY: Final[str] = "Overall"


class Classifier:
    """Predicts a label (e.g. ``"spam"`` or ``"ham"``) for a feature vector.

    Build one either from a serialized tree (`from_lines`, `from_string`) or
    from labeled training examples (`from_training_data`). The classifier owns
    its tree; the tree only changes through `train`, which is also how
    `from_training_data` grows it.

    Not safe for concurrent use: train and query from one caller at a time.

    Examples:
        >>> ham = FeatureVector(frequencies={"free": 0.0, "money": 0.0})
        >>> spam = FeatureVector(frequencies={"free": 5.0, "money": 5.0})
        >>> classifier = Classifier.from_training_data([ham, spam], ["ham", "spam"])
        >>> classifier.classify(spam)
        'spam'
        >>> print(classifier.to_string(), end="")
        Feature: free
        Threshold: 2.5
        ham
        spam
    """

    def __init__(self, root: Node) -> None:
        """Wrap an existing tree.

        Prefer the `from_*` constructors; this one performs no validation.

        Args:
            root (Node): Root of the decision tree.
        """
        self._root: Node = root

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_lines(cls, lines: Iterable[str] | None) -> Classifier:
        """Load a classifier from its serialized, pre-order line form.

        Args:
            lines (Iterable[str] | None): Serialized lines, e.g. an open text
                file or the output of `save`.

        Returns:
            Classifier: A classifier whose leaves carry no feature vectors.

        Raises:
            ValueError: If `lines` is None.
            TreeFormatError: If the lines do not describe a complete tree.
        """
        if lines is None:
            raise ValueError("A source of serialized tree lines is required")

        try:
            root = parse_lines(lines)
        except TreeFormatError as exc:
            logger.warning("Failed to parse serialized tree", line_number=exc.line_number, reason=str(exc))
            raise

        classifier = cls(root)
        logger.log(
            TREE_BUILD_LEVEL,
            "Classifier loaded from serialized tree",
            depth=classifier.depth,
            leaf_count=classifier.leaf_count,
        )
        return classifier

    @classmethod
    def from_string(cls, text: str) -> Classifier:
        """Load a classifier from serialized text (see `from_lines`).

        Args:
            text (str): The full serialized tree.

        Returns:
            Classifier: The loaded classifier.
        """
        return cls.from_lines(text.splitlines())

    @classmethod
    def from_training_data(
        cls,
        data: Sequence[FeatureVector] | None,
        labels: Sequence[str] | None,
    ) -> Classifier:
        """Grow a classifier by inserting labeled examples in order.

        The first example becomes a single leaf. Every later example is routed
        to a leaf; if that leaf's label differs, the leaf is split at the
        midpoint of the feature on which the two examples differ most. The
        resulting shape depends on the order of `data`.

        Args:
            data (Sequence[FeatureVector] | None): Training feature vectors.
            labels (Sequence[str] | None): Label of each vector, same order.

        Returns:
            Classifier: The trained classifier.

        Raises:
            ValueError: If `data` or `labels` is None.
            DataLabelsMismatchError: If `data` and `labels` differ in length.
            EmptyTrainingDataError: If there are no examples.
            UnsavableNameError: If a label, or a feature chosen for a split,
                would not read back unchanged after `save`. Labels are all
                checked before any example is inserted.
        """
        if data is None or labels is None:
            raise ValueError("Both data and labels are required")
        if len(data) != len(labels):
            logger.warning("Training data rejected", data_count=len(data), label_count=len(labels))
            raise DataLabelsMismatchError(data_count=len(data), label_count=len(labels))
        if not data:
            logger.warning("Training data rejected", data_count=0, label_count=0)
            raise EmptyTrainingDataError()
        for label in labels:
            try:
                check_label(label)
            except UnsavableNameError:
                logger.warning("Training data rejected", invalid_label=label)
                raise

        classifier = cls(LeafNode(label=labels[0], block=data[0]))
        for vector, label in zip(data[1:], labels[1:], strict=True):
            classifier.train(vector, label)

        logger.log(
            TREE_BUILD_LEVEL,
            "Classifier trained",
            examples=len(data),
            depth=classifier.depth,
            leaf_count=classifier.leaf_count,
        )
        return classifier

    def train(self, vector: FeatureVector | None, label: str | None) -> None:
        """Insert one more labeled example into the tree.

        Args:
            vector (FeatureVector | None): Features of the example.
            label (str | None): Label of the example.

        Raises:
            ValueError: If `vector` or `label` is None.
            MissingFeatureVectorError: If the example lands on a leaf with a
                different label that was loaded without a feature vector.
            UnsavableNameError: If `label`, or the feature chosen to split on,
                would not read back unchanged after `save`. The tree is left
                as it was.
        """
        if vector is None or label is None:
            raise ValueError("Both a feature vector and a label are required")
        try:
            self._root = insert(self._root, vector, label)
        except MissingFeatureVectorError as exc:
            logger.warning("Cannot split loaded leaf", leaf_label=exc.label, new_label=label)
            raise
        except UnsavableNameError as exc:
            logger.warning("Cannot save name", kind=exc.kind, rejected_name=exc.name)
            raise

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def root(self) -> Node:
        """Root node of the decision tree."""
        return self._root

    @property
    def depth(self) -> int:
        """Edges on the longest root-to-leaf path; 0 for a single leaf."""
        return tree_depth(self._root)

    @property
    def leaf_count(self) -> int:
        """Number of leaves in the tree."""
        return tree_leaf_count(self._root)

    @property
    def labels(self) -> list[str]:
        """Sorted distinct labels this classifier can predict."""
        return sorted(leaf_labels(self._root))

    def classify(self, vector: FeatureVector | None) -> str:
        """Predict the label of a feature vector.

        Args:
            vector (FeatureVector | None): Features of the sample.

        Returns:
            str: Label of the leaf the sample is routed to.

        Raises:
            ValueError: If `vector` is None.
        """
        if vector is None:
            raise ValueError("A feature vector is required")
        return classify(self._root, vector)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def save(self, sink: TextIO | None) -> None:
        """Write the tree in the pre-order line form `from_lines` reads.

        Leaf feature vectors are not written.

        Args:
            sink (TextIO | None): Any object with a ``write(str)`` method, such
                as an open text file or `io.StringIO`.

        Raises:
            ValueError: If `sink` is None.
        """
        if sink is None:
            raise ValueError("An output sink is required")
        for line in iter_lines(self._root):
            sink.write(f"{line}\n")

    def to_string(self) -> str:
        """Return the serialized tree as a single string (see `save`)."""
        buffer = io.StringIO()
        self.save(buffer)
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def calculate_accuracy(
        self,
        data: Sequence[FeatureVector] | None,
        labels: Sequence[str] | None,
    ) -> dict[str, float]:
        """Measure classification accuracy on labeled test data.

        For every label that occurs in `labels`, reports the fraction of its
        examples classified correctly (0.0 when none are). `OVERALL_KEY`
        holds the fraction of all examples classified correctly. Labels that
        are only ever predicted, never expected, are not reported. An expected
        label literally named `OVERALL_KEY` is overwritten by the overall value.

        Args:
            data (Sequence[FeatureVector] | None): Test feature vectors.
            labels (Sequence[str] | None): Expected label of each vector.

        Returns:
            dict[str, float]: Accuracy in [0, 1] per expected label and overall.
                Empty test data yields ``{"Overall": 0.0}``.

        Raises:
            ValueError: If `data` or `labels` is None.
            DataLabelsMismatchError: If `data` and `labels` differ in length.
        """
        if data is None or labels is None:
            raise ValueError("Both data and labels are required")
        if len(data) != len(labels):
            raise DataLabelsMismatchError(data_count=len(data), label_count=len(labels))
        if not data:
            return {OVERALL_KEY: 0.0}

        expected = list(labels)
        predicted = [self.classify(vector) for vector in data]
        expected_labels = sorted(set(labels))

        recalls = recall_score(expected, predicted, labels=expected_labels, average=None, zero_division=0.0)
        accuracy = {label: float(recall) for label, recall in zip(expected_labels, recalls, strict=True)}
        accuracy[OVERALL_KEY] = float(accuracy_score(expected, predicted))

        logger.info("Accuracy calculated", examples=len(data), accuracy=accuracy)
        return accuracy
