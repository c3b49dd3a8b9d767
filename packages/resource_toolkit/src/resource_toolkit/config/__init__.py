from resource_toolkit.config.settings import DEFAULT_SERIALIZE_GROUP_SIZE, Settings, load_settings

__all__ = [
    "DEFAULT_SERIALIZE_GROUP_SIZE",
    "Settings",
    "load_settings",
]
