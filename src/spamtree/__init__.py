"""spamtree: spam/ham text classification with an incrementally grown decision tree."""

from loguru import logger

from spamtree.classifier import OVERALL_KEY, Classifier
from spamtree.datasets import LabeledTexts, load_labeled_texts
from spamtree.features import FeatureVector
from spamtree.logging import PACKAGE_NAME, enable_logging

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the spamtree package by default

__all__ = [
    "OVERALL_KEY",
    "Classifier",
    "FeatureVector",
    "LabeledTexts",
    "enable_logging",
    "load_labeled_texts",
]
