"""
Configuration schema for the trace archiver.

One validated, immutable object per run. Values normally come from the
environment of the scheduled function (see `ArchiverConfig.from_env`); the
CLI overrides individual fields.
"""

from __future__ import annotations

import os
from typing import Literal, Mapping, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError


class ArchiverConfig(BaseModel):
    """
    Centralized, validated configuration for one archiving run.
    """

    # === Destination ===
    history_base_uri: str = Field(
        description="Base location of the archive, e.g. s3://xray-history/base/path.",
    )
    default_region: str = Field(
        default="us-east-1",
        description="Region assumed when the bucket location lookup returns nothing.",
    )
    key_region: Optional[str] = Field(
        default=None,
        description="Region written into object keys; defaults to the bucket's region.",
    )

    # === Windowing ===
    window_count: int = Field(
        default=3,
        ge=1,
        description="Number of full hours to archive, counting back from the current hour.",
    )

    # === Output ===
    compression: Literal["gzip", "zstd"] = Field(
        default="gzip",
        description="Codec for partition objects.",
    )
    staging_dir: Optional[str] = Field(
        default=None,
        description="Directory for staging files; the system temp dir when unset.",
    )

    # === Logging ===
    log_level: str = Field(default="INFO")

    model_config = {"frozen": True}

    @field_validator("history_base_uri")
    @classmethod
    def _check_base_uri(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme != "s3" or not parts.netloc:
            raise ValueError(f"expected s3://bucket[/path], got {value!r}")
        return value

    # --- loading ---

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ArchiverConfig":
        """
        Build a config from environment variables.

        HISTORY_BASE_URI is required; WINDOW_SIZE, COMPRESSION, STAGING_DIR,
        DEFAULT_REGION, KEY_REGION and LOG_LEVEL are optional. Keyword
        overrides that are not None win over the environment.
        """
        env = os.environ if environ is None else environ
        values = {
            "history_base_uri": env.get("HISTORY_BASE_URI"),
            "window_count": env.get("WINDOW_SIZE"),
            "compression": env.get("COMPRESSION"),
            "staging_dir": env.get("STAGING_DIR"),
            "default_region": env.get("DEFAULT_REGION"),
            "key_region": env.get("KEY_REGION"),
            "log_level": env.get("LOG_LEVEL"),
        }
        values.update(overrides)
        values = {k: v for k, v in values.items() if v not in (None, "")}

        if "history_base_uri" not in values:
            raise ConfigError("HISTORY_BASE_URI is not set")
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
