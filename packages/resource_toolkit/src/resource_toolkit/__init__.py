from resource_toolkit.config import Settings, load_settings
from resource_toolkit.logging_utils import configure_logging
from resource_toolkit.resources import (
    CombineError,
    InvalidResourceError,
    LoadPath,
    Resource,
    ResourceError,
    ResourceResolutionError,
    ResourceSet,
    UnmatchedPatternError,
    deserialize,
)

__all__ = [
    "CombineError",
    "InvalidResourceError",
    "LoadPath",
    "Resource",
    "ResourceError",
    "ResourceResolutionError",
    "ResourceSet",
    "Settings",
    "UnmatchedPatternError",
    "configure_logging",
    "deserialize",
    "load_settings",
]
