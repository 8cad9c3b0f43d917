"""Environment-driven configuration for spamtree."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SpamTreeSettings(BaseSettings):
    """Settings for text feature extraction and dataset loading.

    Values are read from ``SPAMTREE_*`` environment variables or a ``.env``
    file in the working directory, e.g. ``SPAMTREE_TEXT_COLUMN=body``.

    Attributes:
        min_token_length (int): Tokens shorter than this are ignored.
        lowercase (bool): Whether tokens are lowercased before counting.
        text_column (str): Column holding the raw text in labeled datasets.
        label_column (str): Column holding the label in labeled datasets.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPAMTREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    min_token_length: int = Field(default=1, ge=1, description="Tokens shorter than this are ignored.")
    lowercase: bool = Field(default=True, description="Lowercase tokens before counting.")
    text_column: str = Field(default="text", min_length=1, description="Column holding the raw text.")
    label_column: str = Field(default="label", min_length=1, description="Column holding the label.")
