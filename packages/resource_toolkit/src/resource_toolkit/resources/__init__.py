"""Resource sets: asynchronous aggregation, caching and delivery order of resources."""

from resource_toolkit.resources.errors import (
    CombineError,
    InvalidResourceError,
    ResourceError,
    ResourceResolutionError,
    UnmatchedPatternError,
)
from resource_toolkit.resources.load_path import LoadPath
from resource_toolkit.resources.models import (
    CacheManifest,
    ResourceSetPayload,
    SerializedAlternative,
    SerializedResource,
)
from resource_toolkit.resources.pending import PendingWork, converge
from resource_toolkit.resources.resource import (
    Resource,
    create,
    is_qualified,
    is_resource,
    normalize_path,
)
from resource_toolkit.resources.resource_set import ResourceSet, deserialize, validate

__all__ = [
    "CacheManifest",
    "CombineError",
    "InvalidResourceError",
    "LoadPath",
    "PendingWork",
    "Resource",
    "ResourceError",
    "ResourceResolutionError",
    "ResourceSet",
    "ResourceSetPayload",
    "SerializedAlternative",
    "SerializedResource",
    "UnmatchedPatternError",
    "converge",
    "create",
    "deserialize",
    "is_qualified",
    "is_resource",
    "normalize_path",
    "validate",
]
