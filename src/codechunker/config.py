"""
Configuration Module for CodeChunker.

The configuration follows a hierarchical structure:
    - ChunkingConfig: size budget, overlap, symbol extraction, worker pool
    - Config: Main configuration aggregating all sub-configs

Invalid values (a non-positive chunk size, a negative overlap) are rejected
by pydantic when the configuration is built or assigned, never in the middle
of a chunking call.

Example Usage:
    >>> from codechunker.config import get_config, set_config, Config, ChunkingConfig
    >>> set_config(Config(chunking=ChunkingConfig(max_chunk_size=1000)))
    >>> get_config().chunking.max_chunk_size
    1000

Author: CodeChunker Team
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .constants import (
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_OVERLAP_SIZE,
    MAX_CONCURRENT_FILE_OPERATIONS,
)


class ChunkingConfig(BaseModel):
    """
    Configuration for chunking behavior.

    Attributes:
        max_chunk_size: Maximum characters per chunk before re-splitting
        overlap_size: Trailing characters of the previous chunk prepended to the next
        extract_symbols: Attach symbol metadata for languages with an extractor
        max_workers: Worker threads used by ChunkingService.chunk_many
    """

    model_config = ConfigDict(validate_assignment=True)

    max_chunk_size: int = Field(
        default=DEFAULT_MAX_CHUNK_SIZE,
        ge=1,
        description="Maximum characters per chunk before re-splitting",
    )
    overlap_size: int = Field(
        default=DEFAULT_OVERLAP_SIZE,
        ge=0,
        description="Characters of the previous chunk prepended to each chunk",
    )
    extract_symbols: bool = Field(
        default=True,
        description="Attach symbol metadata where a symbol extractor exists",
    )
    max_workers: int = Field(
        default=MAX_CONCURRENT_FILE_OPERATIONS,
        ge=1,
        description="Worker threads for chunking many files concurrently",
    )


class Config(BaseModel):
    """
    Main configuration for CodeChunker.

    Attributes:
        chunking: Chunking behavior configuration
    """

    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)

    @classmethod
    def load_default(cls) -> "Config":
        """Load default configuration."""
        return cls()


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Creates a default configuration if none has been set.
    """
    global _config
    if _config is None:
        _config = Config.load_default()
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """
    Reset the global configuration to None.

    Useful for testing or reinitializing configuration.
    """
    global _config
    _config = None
