"""
Vault Preprocessor - Turn an Obsidian vault into a publish-ready corpus

Takes raw vault notes and produces normalized, link-resolved, tag-indexed
output for a static site generator, with support for:
- Publish filtering (blocklist / allowlist)
- Wiki-link and markdown-link resolution with visible broken links
- Attachment resolution and copying
- Transclusion placeholders
- Tag extraction and a global tag index
- A page/tag link graph
"""

from vault_preprocessor.core.config import PreprocessConfig, load_config
from vault_preprocessor.core.discovery import VaultDiscovery
from vault_preprocessor.core.graph import build_graph
from vault_preprocessor.core.index import build_attachment_index, build_file_index
from vault_preprocessor.core.models import (
    ConfigError,
    FileIndex,
    NoteError,
    Page,
    PreprocessError,
    PreprocessResult,
    PreprocessStats,
    ProcessedPage,
)
from vault_preprocessor.core.processor import ContentProcessor
from vault_preprocessor.core.publisher import Publisher, create_publisher_from_config, preprocess

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "FileIndex",
    "NoteError",
    "Page",
    "PreprocessError",
    "PreprocessResult",
    "PreprocessStats",
    "ProcessedPage",
    "PreprocessConfig",
    "load_config",
    "VaultDiscovery",
    "build_graph",
    "build_attachment_index",
    "build_file_index",
    "ContentProcessor",
    "Publisher",
    "create_publisher_from_config",
    "preprocess",
]
