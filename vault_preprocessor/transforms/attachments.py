"""Attachment reference resolution and copying."""

import logging
import re
import shutil
from pathlib import Path, PurePosixPath
from typing import List, Optional
from urllib.parse import unquote

from vault_preprocessor.core.index import AttachmentIndex, iter_attachment_files
from vault_preprocessor.core.models import Link, PreprocessError, ResolveResult

logger = logging.getLogger(__name__)

# Standard markdown images: ![alt](path)
MD_IMAGE_PATTERN = re.compile(r'!\[([^\]]*)\]\(([^)]+)\)')

# Wiki-style embeds: ![[path]] or ![[path|alt]]
WIKI_IMAGE_PATTERN = re.compile(r'!\[\[([^\]|]+)(?:\|([^\]]+))?\]\]')


def lookup_attachment(reference: str, attachment_index: AttachmentIndex) -> Optional[str]:
    """Find the served URL for an image reference.

    The reference is URL-decoded and reduced to its filename, then looked
    up as-is and lowercased.
    """
    filename = PurePosixPath(unquote(reference.strip())).name
    if not filename:
        return None
    return attachment_index.get(filename) or attachment_index.get(filename.lower())


def resolve_attachments(content: str, attachment_index: AttachmentIndex) -> ResolveResult:
    """Rewrite image references to resolved media URLs.

    Markdown images that cannot be resolved are left untouched. Wiki
    embeds are always converted to markdown image syntax, keeping the
    original path when unresolved.

    Args:
        content: Note body with image references
        attachment_index: Index from ``build_attachment_index``

    Returns:
        ResolveResult with rewritten content
    """
    resolved: List[Link] = []
    broken: List[Link] = []

    def replace_md_image(match: re.Match) -> str:
        alt, image_path = match.group(1), match.group(2)
        url = lookup_attachment(image_path, attachment_index)
        if url:
            resolved.append(Link(target=image_path, resolved=True, url=url, original=match.group(0)))
            return f"![{alt}]({url})"
        broken.append(Link(target=image_path, resolved=False, original=match.group(0)))
        return match.group(0)

    def replace_wiki_image(match: re.Match) -> str:
        image_path = match.group(1)
        alt = match.group(2) or ""
        url = lookup_attachment(image_path, attachment_index)
        if url:
            resolved.append(Link(target=image_path, resolved=True, url=url, original=match.group(0)))
            return f"![{alt}]({url})"
        broken.append(Link(target=image_path, resolved=False, original=match.group(0)))
        return f"![{alt}]({image_path})"

    result = MD_IMAGE_PATTERN.sub(replace_md_image, content)
    result = WIKI_IMAGE_PATTERN.sub(replace_wiki_image, result)

    for link in broken:
        logger.debug("Unresolved attachment: %s", link.target)

    return ResolveResult(content=result, resolved=resolved, broken=broken)


def copy_attachments(vault_path: Path, attachment_folder: str, output_dir: Path) -> List[str]:
    """Copy attachments into the media output folder.

    Files are copied flat (subfolders dropped) with their names and bytes
    unchanged.

    Args:
        vault_path: Root of the Obsidian vault
        attachment_folder: Attachment folder relative to the vault
        output_dir: Destination folder

    Returns:
        Vault-relative paths of the copied files

    Raises:
        PreprocessError: If a file cannot be copied
    """
    source_dir = Path(vault_path) / attachment_folder
    if not source_dir.is_dir():
        logger.info("No attachment folder found at: %s", source_dir)
        return []

    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PreprocessError(f"Cannot create {output_dir}: {e}", path=output_dir) from e

    copied = []
    for source_path in iter_attachment_files(source_dir):
        relative = source_path.relative_to(source_dir).as_posix()
        try:
            shutil.copy2(source_path, output_dir / source_path.name)
        except OSError as e:
            raise PreprocessError(f"Error copying {relative}: {e}", path=source_path) from e
        copied.append(relative)

    logger.info("Copied %d files to %s", len(copied), output_dir)
    return copied
