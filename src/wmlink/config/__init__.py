from wmlink.config.loader import ConfigError, ConfigLoader, default_config_path
from wmlink.config.schema import ClientConfig

__all__ = [
    "ClientConfig",
    "ConfigError",
    "ConfigLoader",
    "default_config_path",
]
