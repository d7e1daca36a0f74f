"""
Configuration adapters - YAML files on disk plus environment credentials.
"""

from .environment import load_credentials
from .paths import StoragePaths, resolve_storage_paths
from .yaml_store import YamlConfigStore, read_yaml, write_yaml


__all__ = [
    "StoragePaths",
    "YamlConfigStore",
    "load_credentials",
    "read_yaml",
    "resolve_storage_paths",
    "write_yaml",
]
