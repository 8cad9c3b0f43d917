"""Feature vectors: the numeric view of a text that the decision tree splits on."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from spamtree.settings import SpamTreeSettings

__all__ = ["FeatureVector", "tokenize"]

_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"[a-z0-9]+", re.IGNORECASE)


def tokenize(text: str, *, min_token_length: int = 1, lowercase: bool = True) -> list[str]:
    """Split text into alphanumeric word tokens.

    Args:
        text (str): Raw text, e.g. an email body.
        min_token_length (int): Tokens shorter than this are dropped.
        lowercase (bool): Lowercase every token.

    Returns:
        list[str]: Tokens in order of appearance, duplicates kept.

    Examples:
        >>> tokenize("FREE money, free!")
        ['free', 'money', 'free']
        >>> tokenize("a to be or not", min_token_length=3)
        ['not']
    """
    tokens = _TOKEN_PATTERN.findall(text)
    if lowercase:
        tokens = [token.lower() for token in tokens]
    return [token for token in tokens if len(token) >= min_token_length]


class FeatureVector(BaseModel):
    """Immutable mapping from feature name to numeric value for one sample.

    Features that are not stored have value ``0.0``, so two vectors built
    from different texts are always comparable over the union of their
    features.

    Attributes:
        frequencies (Mapping[str, float]): Stored feature values, read-only.

    Examples:
        >>> ham = FeatureVector(frequencies={"free": 0.0, "money": 0.0})
        >>> spam = FeatureVector(frequencies={"free": 5.0, "money": 5.0})
        >>> spam.get("free")
        5.0
        >>> spam.get("unseen")
        0.0
        >>> ham.find_biggest_difference(spam)
        'free'
    """

    model_config = ConfigDict(frozen=True)

    frequencies: Mapping[str, float] = Field(
        default_factory=dict,
        description="Feature name to numeric value; absent features are 0.0.",
    )

    @field_validator("frequencies", mode="after")
    @classmethod
    def _freeze_frequencies(cls, value: Mapping[str, float]) -> Mapping[str, float]:
        return MappingProxyType(dict(value))

    @field_serializer("frequencies")
    def _serialize_frequencies(self, value: Mapping[str, float]) -> dict[str, float]:
        return dict(value)

    def __hash__(self) -> int:
        """Hash by stored feature values, consistent with equality."""
        return hash(frozenset(self.frequencies.items()))

    @classmethod
    def from_text(cls, text: str, *, settings: SpamTreeSettings | None = None) -> FeatureVector:
        """Build a vector of relative word frequencies from raw text.

        Each token's value is its count divided by the total number of tokens.

        Args:
            text (str): Raw text to featurize.
            settings (SpamTreeSettings | None): Tokenizer settings. Loaded from
                the environment when omitted.

        Returns:
            FeatureVector: Word frequencies of `text`; empty for text without tokens.

        Examples:
            >>> FeatureVector.from_text("free money free").get("free")  # doctest: +SKIP
            0.6666666666666666
        """
        settings = settings or SpamTreeSettings()
        tokens = tokenize(text, min_token_length=settings.min_token_length, lowercase=settings.lowercase)
        total = len(tokens)
        return cls(frequencies={token: count / total for token, count in Counter(tokens).items()})

    @property
    def features(self) -> tuple[str, ...]:
        """Stored feature names in sorted order."""
        return tuple(sorted(self.frequencies))

    def get(self, feature: str) -> float:
        """Return the value of `feature`, or ``0.0`` when it is not stored.

        Args:
            feature (str): Feature name.

        Returns:
            float: The feature's value.
        """
        return self.frequencies.get(feature, 0.0)

    def find_biggest_difference(self, other: FeatureVector) -> str:
        """Return the feature whose values differ most between the two vectors.

        Candidates are the union of both vectors' features, visited in sorted
        order; on a tie the first candidate wins.

        Args:
            other (FeatureVector): The vector to compare against.

        Returns:
            str: Feature name maximizing ``abs(self.get(f) - other.get(f))``.

        Raises:
            ValueError: If neither vector has any features.
        """
        candidates = sorted(self.frequencies.keys() | other.frequencies.keys())
        if not candidates:
            raise ValueError("Cannot compare two feature vectors that have no features")

        best_feature = candidates[0]
        best_difference = abs(self.get(best_feature) - other.get(best_feature))
        for feature in candidates[1:]:
            difference = abs(self.get(feature) - other.get(feature))
            if difference > best_difference:
                best_feature, best_difference = feature, difference
        return best_feature
