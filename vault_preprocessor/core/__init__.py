"""Core components for Vault Preprocessor."""

from vault_preprocessor.core.models import (
    ConfigError,
    FileIndex,
    LookupHit,
    LookupMethod,
    NoteError,
    Page,
    PreprocessError,
    PreprocessResult,
    PreprocessStats,
    ProcessedPage,
    PublishableFile,
)
from vault_preprocessor.core.config import PreprocessConfig, load_config, read_vault_config
from vault_preprocessor.core.discovery import VaultDiscovery
from vault_preprocessor.core.index import build_attachment_index, build_file_index
from vault_preprocessor.core.graph import build_graph, load_graph_settings
from vault_preprocessor.core.processor import ContentProcessor
from vault_preprocessor.core.publisher import Publisher, create_publisher_from_config

__all__ = [
    "ConfigError",
    "FileIndex",
    "LookupHit",
    "LookupMethod",
    "NoteError",
    "Page",
    "PreprocessError",
    "PreprocessResult",
    "PreprocessStats",
    "ProcessedPage",
    "PublishableFile",
    "PreprocessConfig",
    "load_config",
    "read_vault_config",
    "VaultDiscovery",
    "build_attachment_index",
    "build_file_index",
    "build_graph",
    "load_graph_settings",
    "ContentProcessor",
    "Publisher",
    "create_publisher_from_config",
]
