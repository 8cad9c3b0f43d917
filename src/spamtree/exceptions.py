"""Custom exceptions for spamtree.

All exceptions subclass ValueError so callers that only care about "bad input"
can catch that:

- DataLabelsMismatchError: data and labels sequences differ in length.
- EmptyTrainingDataError: a classifier was asked to train on nothing.
- TreeFormatError: serialized tree text is malformed.
- MissingFeatureVectorError: a leaf loaded from text had to be split.
- DatasetColumnsError: a labeled dataset lacks the configured columns.
- UnsavableNameError: a label or feature name would not round-trip through save.
"""

from __future__ import annotations


class DataLabelsMismatchError(ValueError):
    """Raised when the number of feature vectors and labels differ.

    Attributes:
        data_count (int): Number of feature vectors supplied.
        label_count (int): Number of labels supplied.

    Examples:
        >>> err = DataLabelsMismatchError(data_count=3, label_count=2)
        >>> str(err)
        "Length of provided data [3] doesn't match provided labels [2]"
    """

    data_count: int
    label_count: int

    def __init__(self, data_count: int, label_count: int) -> None:
        """Initialize DataLabelsMismatchError.

        Args:
            data_count (int): Number of feature vectors supplied.
            label_count (int): Number of labels supplied.
        """
        super().__init__(f"Length of provided data [{data_count}] doesn't match provided labels [{label_count}]")
        self.data_count = data_count
        self.label_count = label_count


class EmptyTrainingDataError(ValueError):
    """Raised when a classifier is trained from zero examples."""

    def __init__(self) -> None:
        """Initialize EmptyTrainingDataError."""
        super().__init__("Training data must contain at least one example")


class TreeFormatError(ValueError):
    """Raised when serialized tree text cannot be parsed.

    Attributes:
        line_number (int | None): 1-based number of the offending line, or the
            line after the last one when the text ended too early.
        line (str | None): The offending line (stripped), if one was read.

    Examples:
        >>> err = TreeFormatError("Expected a 'Threshold: ' line", line_number=2, line="ham")
        >>> err.line_number
        2
    """

    line_number: int | None
    line: str | None

    def __init__(self, message: str, *, line_number: int | None = None, line: str | None = None) -> None:
        """Initialize TreeFormatError.

        Args:
            message (str): Description of the format problem.
            line_number (int | None): 1-based line number the problem was found at.
            line (str | None): The offending line, if any.
        """
        super().__init__(message if line_number is None else f"{message} (line {line_number})")
        self.line_number = line_number
        self.line = line

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including message, line number, and line.
        """
        return f"{self.__class__.__name__}(message={str(self)!r}, line_number={self.line_number!r}, line={self.line!r})"


class MissingFeatureVectorError(ValueError):
    """Raised when a leaf without a retained feature vector must be split.

    Leaves read from serialized text carry no feature vector, so a tree loaded
    that way can only absorb new examples whose label matches the leaf they
    land on.

    Attributes:
        label (str): Label of the leaf that could not be split.
    """

    label: str

    def __init__(self, label: str) -> None:
        """Initialize MissingFeatureVectorError.

        Args:
            label (str): Label of the leaf that could not be split.
        """
        super().__init__(f"Leaf {label!r} has no feature vector to split on")
        self.label = label


class DatasetColumnsError(ValueError):
    """Raised when a labeled dataset lacks the text or label column.

    Attributes:
        missing_columns (list[str]): Required column names that were not found.
        available_columns (list[str]): Column names present in the dataset.

    Examples:
        >>> err = DatasetColumnsError(missing_columns=["label"], available_columns=["text", "class"])
        >>> err.missing_columns
        ['label']
    """

    missing_columns: list[str]
    available_columns: list[str]

    def __init__(self, missing_columns: list[str], available_columns: list[str]) -> None:
        """Initialize DatasetColumnsError.

        Args:
            missing_columns (list[str]): Required column names that were not found.
            available_columns (list[str]): Column names present in the dataset.
        """
        super().__init__(f"Columns not found in dataset: {sorted(missing_columns)}")
        self.missing_columns = missing_columns
        self.available_columns = available_columns


class UnsavableNameError(ValueError):
    """Raised when a label or split feature would not survive save and reload.

    Serialized trees are read line by line with surrounding whitespace
    stripped, so a name must be a single line without outer whitespace.
    A label must also not start with ``Feature: ``.

    Attributes:
        kind (str): ``"label"`` or ``"feature"``.
        name (str): The rejected name.

    Examples:
        >>> err = UnsavableNameError(kind="label", name=" spam")
        >>> str(err)
        "Label ' spam' cannot be saved and reloaded unchanged"
    """

    kind: str
    name: str

    def __init__(self, kind: str, name: str) -> None:
        """Initialize UnsavableNameError.

        Args:
            kind (str): ``"label"`` or ``"feature"``.
            name (str): The rejected name.
        """
        super().__init__(f"{kind.capitalize()} {name!r} cannot be saved and reloaded unchanged")
        self.kind = kind
        self.name = name
