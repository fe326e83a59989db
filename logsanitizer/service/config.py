# logsanitizer/service/config.py

"""Application configuration using Pydantic Settings.

Manages environment variables, defaults, and validation rules.
"""

import codecs
from typing import List, Literal, Optional
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings.

    Loads values from environment variables (prefix 'LOGSANITIZER_') or .env
    file. Command-line flags override these values per run.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOGSANITIZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Target Settings
    default_target: str = Field(
        default="latest.log", description="File or folder used when none is given."
    )

    replacement: Optional[str] = Field(
        default=None,
        description="Replacement token for addresses. Unset omits matching lines.",
    )

    # File Handling
    clean_suffix: str = Field(
        default=".clean", description="Suffix appended to sanitized output files."
    )

    skip_suffixes: List[str] = Field(
        default_factory=lambda: [".gz", ".clean", ".zst"],
        description="Files ending with these suffixes are never sanitized.",
    )

    encoding: str = Field(
        default="utf-8", description="Text encoding used to read and write logs."
    )

    # External Tools
    decompress_command: str = Field(
        default="gzip", description="Executable used for recursive decompression."
    )

    compress_command: str = Field(
        default="zstd", description="Executable used to compress outputs."
    )

    compression_level: int = Field(
        default=22, ge=1, le=22, description="zstd compression level."
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root logging level.")

    log_format: Literal["json", "text"] = Field(
        default="json", description="Structured JSON or plain text log lines."
    )

    @field_validator("clean_suffix")
    @classmethod
    def validate_clean_suffix(cls, v: str) -> str:
        """Ensure the output suffix is a non-empty extension."""
        if not v.startswith(".") or len(v) < 2:
            raise ValueError("clean_suffix must start with '.' and name an extension")
        return v

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def include_clean_suffix(self) -> "Settings":
        """Outputs of a previous run must never be sanitized again."""
        if self.clean_suffix not in self.skip_suffixes:
            self.skip_suffixes.append(self.clean_suffix)
        return self


# Singleton settings instance
settings = Settings()
