"""
Configuration settings for delegscan

Uses pydantic-settings for type-safe configuration management.
Every field can be overridden with a DELEGSCAN_* environment variable
or a .env file in the working directory.
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # External tools
    cast_bin: str = Field(
        default="cast",
        description="Foundry cast executable used for disassembly"
    )

    forge_bin: str = Field(
        default="forge",
        description="Foundry forge executable used by the single-contract check"
    )

    # Timeouts (seconds)
    disassemble_timeout: float = Field(
        default=60.0,
        description="Upper bound for a single disassembler invocation"
    )

    forge_timeout: float = Field(
        default=300.0,
        description="Upper bound for `forge inspect` (may trigger a compile)"
    )

    # Scan inputs
    artifact_dir: str = Field(
        default="out",
        description="Default build artifact directory"
    )

    source_root: str = Field(
        default=".",
        description="Directory that relative source paths are resolved against"
    )

    rules_file: Optional[str] = Field(
        default=None,
        description="Optional JSON file overriding the heuristic rule tables"
    )

    class Config:
        env_prefix = "DELEGSCAN_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
