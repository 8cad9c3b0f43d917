"""Shared fixtures for the spamtree test suite."""

from __future__ import annotations

from collections.abc import Generator
from typing import NamedTuple

import loguru
import pytest
from loguru import logger

from spamtree.features import FeatureVector
from spamtree.logging import PACKAGE_NAME


class LogSink(NamedTuple):
    """Log sink with records list and handler ID for cleanup.

    Attributes:
        records (list[loguru.Record]): List that accumulates log record dictionaries.
        handler_id (int): Logger handler ID for cleanup.
    """

    records: list[loguru.Record]
    handler_id: int


class TrainingSet(NamedTuple):
    """Feature vectors and labels used to grow a small, known tree.

    Inserted in order they produce::

        Feature: free
        Threshold: 0.3
        ham
        Feature: meeting
        Threshold: 0.15
        spam
        ham
    """

    vectors: list[FeatureVector]
    labels: list[str]


@pytest.fixture
def log_sink() -> Generator[LogSink]:
    """Capture spamtree log records for the duration of a test.

    Yields:
        Generator[LogSink]: Named tuple with records list and handler_id.
    """
    captured_records: list[loguru.Record] = []

    def sink(message: loguru.Message) -> None:
        """Capture the record dict from each log message.

        Args:
            message (loguru.Message): Log message with record attribute containing log details.
        """
        captured_records.append(message.record)

    handler_id = logger.add(sink, level="TRACE")
    logger.enable(PACKAGE_NAME)

    yield LogSink(records=captured_records, handler_id=handler_id)

    logger.disable(PACKAGE_NAME)
    logger.remove(handler_id)


@pytest.fixture
def ham_vector() -> FeatureVector:
    """Vector with no spammy words."""
    return FeatureVector(frequencies={"free": 0.0, "money": 0.0})


@pytest.fixture
def spam_vector() -> FeatureVector:
    """Vector dominated by spammy words."""
    return FeatureVector(frequencies={"free": 5.0, "money": 5.0})


@pytest.fixture
def training_set() -> TrainingSet:
    """Four examples that grow a depth-2 tree with three leaves."""
    return TrainingSet(
        vectors=[
            FeatureVector(frequencies={"meeting": 0.5, "free": 0.0}),
            FeatureVector(frequencies={"free": 0.6, "meeting": 0.0}),
            FeatureVector(frequencies={"free": 0.4, "winner": 0.2}),
            FeatureVector(frequencies={"free": 0.5, "meeting": 0.3}),
        ],
        labels=["ham", "spam", "spam", "ham"],
    )
