"""Centralized configuration for ja-search-repro using Pydantic Settings."""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


TokenizerName = Literal["japanese", "ngram", "standard"]
WildcardMode = Literal["trailing", "none"]


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every index session receives its tokenizer strategy from here instead of
    reading a process-wide default.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Tokenization
    search_tokenizer: TokenizerName = Field(
        default="japanese", description="Analyzer used for document bodies and queries"
    )
    search_wildcard: WildcardMode = Field(
        default="trailing", description="Match every query token as a prefix ('trailing') or exactly ('none')"
    )
    ngram_min_size: int = Field(default=1, ge=1, description="Smallest gram emitted by the n-gram tokenizer")
    ngram_max_size: int = Field(default=15, ge=1, description="Largest gram emitted by the n-gram tokenizer")

    # Ranking
    bm25_k1: float = Field(default=1.2, ge=0.0, description="BM25 term frequency saturation")
    bm25_b: float = Field(default=0.75, ge=0.0, le=1.0, description="BM25 length normalization")
    max_results: int = Field(default=50, ge=1, description="Maximum results returned per query")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")
    log_file: Path | None = Field(default=None, description="Write logs to this file instead of the console")

    @model_validator(mode="after")
    def _check_ngram_sizes(self) -> "Settings":
        if self.ngram_min_size > self.ngram_max_size:
            raise ValueError(
                f"NGRAM_MIN_SIZE ({self.ngram_min_size}) must not exceed NGRAM_MAX_SIZE ({self.ngram_max_size})"
            )
        return self

    def analyzer_options(self) -> dict[str, Any]:
        """Factory options for the configured tokenizer."""
        if self.search_tokenizer == "ngram":
            return {"min_size": self.ngram_min_size, "max_size": self.ngram_max_size}
        return {}

    def uses_trailing_wildcard(self) -> bool:
        return self.search_wildcard == "trailing"
