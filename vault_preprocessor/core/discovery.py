"""Vault discovery module for finding publishable notes."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

from vault_preprocessor.core.config import ALLOWLIST, BLOCKLIST, PreprocessConfig
from vault_preprocessor.core.frontmatter import parse_note_lenient
from vault_preprocessor.core.models import (
    ExcludedFile,
    FilterResult,
    NoteError,
    PreprocessError,
    PublishableFile,
)

logger = logging.getLogger(__name__)

IGNORED_DIRS = {'.obsidian'}


class VaultDiscovery:
    """Discovers and filters notes eligible for publishing from an Obsidian vault."""

    def __init__(
        self,
        vault_path: Path,
        publish_mode: str = BLOCKLIST,
        blocklist_tag: str = "not-for-public",
        allowlist_key: str = "publish",
        allowlist_value: Any = True,
    ):
        """Initialize VaultDiscovery.

        Args:
            vault_path: Path to the Obsidian vault root
            publish_mode: ``blocklist`` (publish unless tagged) or
                ``allowlist`` (publish only when flagged in frontmatter)
            blocklist_tag: Tag that excludes a note in blocklist mode
            allowlist_key: Frontmatter key checked in allowlist mode
            allowlist_value: Value the allowlist key must have
        """
        if publish_mode not in (BLOCKLIST, ALLOWLIST):
            raise ValueError(f"Unknown publish mode: {publish_mode}")
        self.vault_path = Path(vault_path)
        self.publish_mode = publish_mode
        self.blocklist_tag = blocklist_tag.lstrip('#')
        self.allowlist_key = allowlist_key
        self.allowlist_value = allowlist_value
        self.errors: List[NoteError] = []

    @classmethod
    def from_config(cls, config: PreprocessConfig) -> "VaultDiscovery":
        return cls(
            config.vault_path,
            publish_mode=config.publish_mode,
            blocklist_tag=config.blocklist_tag,
            allowlist_key=config.allowlist_key,
            allowlist_value=config.allowlist_value,
        )

    def discover_all(self) -> FilterResult:
        """Classify every markdown file in the vault.

        Returns:
            FilterResult with published and excluded files

        Raises:
            PreprocessError: If the vault directory does not exist or a
                file cannot be read
        """
        if not self.vault_path.is_dir():
            raise PreprocessError(f"Vault not found: {self.vault_path}", path=self.vault_path)

        if self.publish_mode == BLOCKLIST:
            logger.info("Mode: blocklist (#%s)", self.blocklist_tag)
        else:
            logger.info("Mode: allowlist (%s: %s)", self.allowlist_key, self.allowlist_value)

        result = FilterResult()
        for note_path in self.iter_markdown_files():
            relative_path = note_path.relative_to(self.vault_path).as_posix()
            try:
                raw_content = note_path.read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError) as e:
                raise PreprocessError(f"Failed to read {relative_path}: {e}", path=note_path) from e

            frontmatter, body, error = parse_note_lenient(raw_content)
            if error:
                logger.warning("Failed to parse YAML in %s: %s", relative_path, error)
                self.errors.append(NoteError(path=note_path, error=error))

            is_pub, reason = self.is_publishable(frontmatter, body)
            if is_pub:
                result.published.append(
                    PublishableFile(path=note_path, relative_path=relative_path, frontmatter=frontmatter)
                )
            else:
                logger.info("Excluding: %s (%s)", relative_path, reason)
                result.excluded.append(
                    ExcludedFile(path=note_path, relative_path=relative_path, reason=reason)
                )

        logger.info("Publishing: %d files", len(result.published))
        logger.info("Excluding: %d files", len(result.excluded))
        return result

    def iter_markdown_files(self) -> Iterator[Path]:
        """Yield vault markdown files in sorted order, skipping tool folders."""
        for note_path in sorted(self.vault_path.rglob("*.md")):
            parts = note_path.relative_to(self.vault_path).parts
            if any(part in IGNORED_DIRS for part in parts):
                continue
            if note_path.is_file():
                yield note_path

    def is_publishable(self, frontmatter: Dict[str, Any], body: str) -> Tuple[bool, str]:
        """Check if a note meets publishing criteria.

        Args:
            frontmatter: Parsed frontmatter dict
            body: Note body after frontmatter

        Returns:
            Tuple of (is_publishable, reason)
        """
        if self.publish_mode == ALLOWLIST:
            if frontmatter.get(self.allowlist_key) == self.allowlist_value:
                return True, "OK"
            return False, f"missing {self.allowlist_key}: {self.allowlist_value}"

        tag = self.blocklist_tag
        if f"#{tag}" in body:
            return False, f"contains #{tag}"

        fm_tags = self._frontmatter_tags(frontmatter)
        if tag in fm_tags or f"#{tag}" in fm_tags:
            return False, f"contains #{tag}"

        return True, "OK"

    def _frontmatter_tags(self, frontmatter: Dict[str, Any]) -> List[str]:
        """Extract raw tags from frontmatter.

        Handles both list and string formats.
        """
        tag_data = frontmatter.get('tags')
        if isinstance(tag_data, list):
            return [str(tag) for tag in tag_data]
        if isinstance(tag_data, str):
            return [tag_data]
        return []
