"""Pydantic models for resource toolkit settings."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_SERIALIZE_GROUP_SIZE = 100


class Settings(BaseModel, frozen=True):
    """Runtime configuration loaded from environment variables."""

    root_path: str = ""
    serialize_group_size: int = DEFAULT_SERIALIZE_GROUP_SIZE
    combine_separator: str = "\n"
    log_level: str = "WARNING"


def load_settings() -> Settings:
    """Load settings from environment variables with defaults."""
    load_dotenv()

    group_size = int(
        os.getenv("RESOURCE_SERIALIZE_GROUP_SIZE", str(DEFAULT_SERIALIZE_GROUP_SIZE))
    )
    if group_size <= 0:
        msg = "RESOURCE_SERIALIZE_GROUP_SIZE must be a positive integer."
        raise ValueError(msg)

    return Settings(
        root_path=os.getenv("RESOURCE_ROOT", ""),
        serialize_group_size=group_size,
        combine_separator=os.getenv("RESOURCE_COMBINE_SEPARATOR", "\n"),
        log_level=os.getenv("RESOURCE_LOG_LEVEL", "WARNING").upper(),
    )
