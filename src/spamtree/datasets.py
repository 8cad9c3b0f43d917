"""Loading labeled text datasets into feature vectors and labels."""

from __future__ import annotations

from pathlib import Path
from typing import IO, NamedTuple

import polars as pl
from loguru import logger

from spamtree.exceptions import DatasetColumnsError
from spamtree.features import FeatureVector
from spamtree.settings import SpamTreeSettings

__all__ = ["LabeledTexts", "labeled_texts_from_frame", "load_labeled_texts"]


class LabeledTexts(NamedTuple):
    """Parallel feature vectors and labels, ready for training or evaluation.

    Attributes:
        vectors (list[FeatureVector]): One feature vector per text.
        labels (list[str]): Label of each vector, same order.
    """

    vectors: list[FeatureVector]
    labels: list[str]


def load_labeled_texts(
    source: str | Path | IO[bytes] | IO[str],
    *,
    settings: SpamTreeSettings | None = None,
) -> LabeledTexts:
    """Read a CSV of labeled texts and featurize every row.

    Args:
        source (str | Path | IO[bytes] | IO[str]): CSV path or open file with a
            header row containing the configured text and label columns.
        settings (SpamTreeSettings | None): Column names and tokenizer
            settings. Loaded from the environment when omitted.

    Returns:
        LabeledTexts: Vectors and labels in file order.

    Raises:
        DatasetColumnsError: If the text or label column is missing.
    """
    settings = settings or SpamTreeSettings()
    frame = pl.read_csv(source, infer_schema=False)
    labeled = labeled_texts_from_frame(frame, settings=settings)
    logger.info("Dataset loaded", source=str(source), rows=len(labeled.labels))
    return labeled


def labeled_texts_from_frame(
    frame: pl.DataFrame,
    *,
    settings: SpamTreeSettings | None = None,
) -> LabeledTexts:
    """Featurize the text column of a DataFrame and pair it with its labels.

    Rows where either the text or the label is null are dropped.

    Args:
        frame (pl.DataFrame): Frame holding the configured text and label columns.
        settings (SpamTreeSettings | None): Column names and tokenizer
            settings. Loaded from the environment when omitted.

    Returns:
        LabeledTexts: Vectors and labels in row order.

    Raises:
        DatasetColumnsError: If the text or label column is missing.

    Examples:
        >>> frame = pl.DataFrame({"text": ["free money", "lunch at noon"], "label": ["spam", "ham"]})
        >>> labeled_texts_from_frame(frame).labels  # doctest: +SKIP
        ['spam', 'ham']
    """
    settings = settings or SpamTreeSettings()
    required = [settings.text_column, settings.label_column]
    missing = [column for column in required if column not in frame.columns]
    if missing:
        logger.warning("Dataset rejected", missing_columns=missing, available_columns=frame.columns)
        raise DatasetColumnsError(missing_columns=missing, available_columns=frame.columns)

    rows = frame.select(
        pl.col(settings.text_column).cast(pl.String).alias("text"),
        pl.col(settings.label_column).cast(pl.String).str.strip_chars().alias("label"),
    ).drop_nulls()

    vectors = [FeatureVector.from_text(text, settings=settings) for text in rows["text"]]
    return LabeledTexts(vectors=vectors, labels=rows["label"].to_list())
