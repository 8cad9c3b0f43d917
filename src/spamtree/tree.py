"""Decision tree nodes and the algorithms that grow, walk, write, and read them.

The tree is a tagged union of two frozen node models: `DecisionNode` routes a
sample left when its value for `feature` is strictly below `threshold` and
right otherwise; `LeafNode` holds a label and, for trees grown from training
data, the feature vector that created it. Growing a tree never mutates a node:
`insert` returns a new root that shares every untouched subtree with the old
one.

Serialized form, one line per entry, pre-order::

    Feature: <feature>
    Threshold: <threshold>
    <left subtree>
    <right subtree>

with a leaf written as its bare label.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Annotated, Final, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from spamtree.exceptions import MissingFeatureVectorError, TreeFormatError, UnsavableNameError
from spamtree.features import FeatureVector

__all__ = [
    "FEATURE_PREFIX",
    "THRESHOLD_PREFIX",
    "check_label",
    "DecisionNode",
    "LeafNode",
    "Node",
    "classify",
    "insert",
    "iter_lines",
    "leaf_labels",
    "midpoint",
    "parse_lines",
    "tree_depth",
    "tree_leaf_count",
]

FEATURE_PREFIX: Final[str] = "Feature: "
THRESHOLD_PREFIX: Final[str] = "Threshold: "

# ---------------------------------------------------------------------------
# Node models
# ---------------------------------------------------------------------------


class LeafNode(BaseModel):
    """Terminal node carrying a class label.

    Attributes:
        kind (Literal["leaf"]): Discriminator; always `"leaf"`.
        label (str): Class label returned for samples reaching this leaf.
        block (FeatureVector | None): Training vector that created the leaf,
            kept so the leaf can be split later. `None` for leaves read
            from serialized text.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["leaf"] = "leaf"
    label: str = Field(description="Class label returned for samples reaching this leaf.")
    block: FeatureVector | None = Field(
        default=None,
        description="Training vector retained for future splits; None for loaded trees.",
    )


class DecisionNode(BaseModel):
    """Internal node that routes samples on one feature.

    Attributes:
        kind (Literal["decision"]): Discriminator; always `"decision"`.
        feature (str): Feature compared against `threshold`.
        threshold (float): Samples with ``value < threshold`` go left, others right.
        left (Node): Subtree for values strictly below the threshold.
        right (Node): Subtree for values at or above the threshold.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["decision"] = "decision"
    feature: str = Field(description="Feature compared against the threshold.")
    threshold: float = Field(description="Split point; values strictly below it go left.")
    left: Node = Field(description="Subtree for values strictly below the threshold.")
    right: Node = Field(description="Subtree for values at or above the threshold.")


Node = Annotated[LeafNode | DecisionNode, Field(discriminator="kind")]

DecisionNode.model_rebuild()


# ---------------------------------------------------------------------------
# Growing
# ---------------------------------------------------------------------------


def midpoint(one: float, two: float) -> float:
    """Return the point exactly halfway between two values.

    Args:
        one (float): First value.
        two (float): Second value.

    Returns:
        float: ``min(one, two) + abs(one - two) / 2``.

    Examples:
        >>> midpoint(0.0, 5.0)
        2.5
        >>> midpoint(3.0, 1.0)
        2.0
    """
    return min(one, two) + abs(one - two) / 2.0


def _is_single_clean_line(name: str) -> bool:
    return name == name.strip() and len(name.splitlines()) <= 1


def check_label(label: str) -> None:
    """Reject a label that would read back differently after `iter_lines`.

    Args:
        label (str): Candidate leaf label.

    Raises:
        UnsavableNameError: If `label` is not a single line without outer
            whitespace, or if it starts with `FEATURE_PREFIX`.
    """
    if not _is_single_clean_line(label) or label.startswith(FEATURE_PREFIX):
        raise UnsavableNameError(kind="label", name=label)


def insert(root: Node, vector: FeatureVector, label: str) -> Node:
    """Insert one labeled example and return the resulting tree.

    The example follows the decision path to a leaf. A leaf with the same
    label absorbs it unchanged; otherwise the leaf is replaced by a decision
    node splitting it from the new example (see `_split_leaf`). Every node on
    the path is copied with the new child installed; the rest of the tree is
    shared with `root`.

    Args:
        root (Node): Current tree.
        vector (FeatureVector): Features of the new example.
        label (str): Label of the new example.

    Returns:
        Node: The new root. `root` itself when the tree is unchanged.

    Raises:
        MissingFeatureVectorError: If the reached leaf must be split but was
            loaded without a feature vector.
        UnsavableNameError: If `label` or the chosen split feature could not
            be saved and read back unchanged.
    """
    check_label(label)
    path: list[tuple[DecisionNode, bool]] = []
    node = root
    while isinstance(node, DecisionNode):
        went_left = vector.get(node.feature) < node.threshold
        path.append((node, went_left))
        node = node.left if went_left else node.right

    replacement = _split_leaf(node, vector, label)
    if replacement is node:
        return root

    for parent, went_left in reversed(path):
        replacement = parent.model_copy(update={"left": replacement} if went_left else {"right": replacement})
    return replacement


def _split_leaf(leaf: LeafNode, vector: FeatureVector, label: str) -> Node:
    """Absorb or split a leaf for a new example.

    The split feature is the one on which the leaf's vector and the new vector
    differ most; the threshold is the midpoint of their two values. The new
    example's leaf goes left when its value is below the threshold, and the
    old leaf takes the other side.

    Args:
        leaf (LeafNode): Leaf the new example landed on.
        vector (FeatureVector): Features of the new example.
        label (str): Label of the new example.

    Returns:
        Node: `leaf` when the labels match, otherwise a new decision node.

    Raises:
        MissingFeatureVectorError: If `leaf` has no feature vector.
        UnsavableNameError: If the split feature is empty or not a single
            line without outer whitespace.
    """
    if leaf.label == label:
        return leaf
    if leaf.block is None:
        raise MissingFeatureVectorError(leaf.label)

    feature = leaf.block.find_biggest_difference(vector)
    if not feature or not _is_single_clean_line(feature):
        raise UnsavableNameError(kind="feature", name=feature)
    threshold = midpoint(leaf.block.get(feature), vector.get(feature))
    new_leaf = LeafNode(label=label, block=vector)
    logger.debug("Split leaf", feature=feature, threshold=threshold, old_label=leaf.label, new_label=label)

    if vector.get(feature) < threshold:
        return DecisionNode(feature=feature, threshold=threshold, left=new_leaf, right=leaf)
    return DecisionNode(feature=feature, threshold=threshold, left=leaf, right=new_leaf)


# ---------------------------------------------------------------------------
# Walking
# ---------------------------------------------------------------------------


def classify(root: Node, vector: FeatureVector) -> str:
    """Follow the decision path for `vector` and return the leaf's label.

    Args:
        root (Node): Tree to walk.
        vector (FeatureVector): Features of the sample.

    Returns:
        str: Label of the leaf reached.
    """
    node = root
    while isinstance(node, DecisionNode):
        node = node.left if vector.get(node.feature) < node.threshold else node.right
    return node.label


def tree_depth(root: Node) -> int:
    """Return the number of edges on the longest root-to-leaf path."""
    match root:
        case DecisionNode(left=left, right=right):
            return 1 + max(tree_depth(left), tree_depth(right))
        case _:
            return 0


def tree_leaf_count(root: Node) -> int:
    """Return the number of leaves in the tree."""
    match root:
        case DecisionNode(left=left, right=right):
            return tree_leaf_count(left) + tree_leaf_count(right)
        case _:
            return 1


def leaf_labels(root: Node) -> set[str]:
    """Return the distinct labels found on the tree's leaves."""
    match root:
        case DecisionNode(left=left, right=right):
            return leaf_labels(left) | leaf_labels(right)
        case LeafNode(label=label):
            return {label}
        case _:
            raise TypeError(f"Unexpected node type: {type(root).__name__}")


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def iter_lines(root: Node) -> Iterator[str]:
    """Yield the serialized form of the tree, one line at a time, pre-order.

    Thresholds are written with `repr`, which `float` reads back exactly.

    Args:
        root (Node): Tree to serialize.

    Yields:
        str: Lines without trailing newlines.

    Examples:
        >>> tree = DecisionNode(
        ...     feature="free",
        ...     threshold=2.5,
        ...     left=LeafNode(label="ham"),
        ...     right=LeafNode(label="spam"),
        ... )
        >>> list(iter_lines(tree))
        ['Feature: free', 'Threshold: 2.5', 'ham', 'spam']
    """
    match root:
        case DecisionNode(feature=feature, threshold=threshold, left=left, right=right):
            yield f"{FEATURE_PREFIX}{feature}"
            yield f"{THRESHOLD_PREFIX}{threshold!r}"
            yield from iter_lines(left)
            yield from iter_lines(right)
        case LeafNode(label=label):
            yield label


class _LineReader:
    """Line source that strips lines and remembers how many it has handed out."""

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines = iter(lines)
        self.line_number = 0

    def next_line(self) -> str | None:
        line = next(self._lines, None)
        if line is None:
            return None
        self.line_number += 1
        return line.strip()


def parse_lines(lines: Iterable[str]) -> Node:
    """Rebuild a tree from its serialized lines.

    Leaves come back without feature vectors. Lines left over once the root's
    subtree is complete are not read.

    Args:
        lines (Iterable[str]): Serialized lines, with or without trailing
            newlines (an open text file works).

    Returns:
        Node: Root of the parsed tree.

    Raises:
        TreeFormatError: If the text is empty, a feature line is not followed
            by a threshold line, a threshold is not a number, or the text ends
            before a decision node has both subtrees.
    """
    reader = _LineReader(lines)
    root = _read_node(reader)
    if root is None:
        raise TreeFormatError("Serialized tree is empty", line_number=1)
    return root


def _read_node(reader: _LineReader) -> Node | None:
    """Read one subtree in pre-order; `None` when the lines are exhausted."""
    line = reader.next_line()
    if line is None:
        return None
    if not line.startswith(FEATURE_PREFIX):
        return LeafNode(label=line)

    feature = line.removeprefix(FEATURE_PREFIX)
    threshold = _read_threshold(reader, feature)
    left = _read_node(reader)
    right = _read_node(reader)
    if left is None or right is None:
        raise TreeFormatError(
            f"Serialized tree ended before both subtrees of feature {feature!r} were read",
            line_number=reader.line_number + 1,
        )
    return DecisionNode(feature=feature, threshold=threshold, left=left, right=right)


def _read_threshold(reader: _LineReader, feature: str) -> float:
    """Read the threshold line that must follow a feature line."""
    line = reader.next_line()
    if line is None:
        raise TreeFormatError(
            f"Expected a threshold line after feature {feature!r}, found end of input",
            line_number=reader.line_number + 1,
        )
    if not line.startswith(THRESHOLD_PREFIX):
        raise TreeFormatError(
            f"Expected a line starting with {THRESHOLD_PREFIX!r} after feature {feature!r}",
            line_number=reader.line_number,
            line=line,
        )
    try:
        return float(line.removeprefix(THRESHOLD_PREFIX))
    except ValueError as exc:
        raise TreeFormatError(
            f"Threshold for feature {feature!r} is not a number",
            line_number=reader.line_number,
            line=line,
        ) from exc
