"""File and attachment index builders.

Both indexes are built once, before any link resolution, because a page
may link to any other page in the vault regardless of enumeration order.
"""

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional
from urllib.parse import unquote

from vault_preprocessor.core.frontmatter import parse_note_lenient
from vault_preprocessor.core.models import FileIndex, NoteError, Page, PreprocessError, PublishableFile
from vault_preprocessor.core.slugs import slugify

logger = logging.getLogger(__name__)

ATTACHMENT_EXTENSIONS = {
    '.jpg', '.jpeg', '.png', '.gif', '.webp', '.svg', '.pdf', '.html', '.mp4', '.webm',
}

HEADING_PATTERN = re.compile(r'^#{1,2}\s+(.+)$', re.MULTILINE)
HEADING_ID_PATTERN = re.compile(r'\s*\{#[^}]+\}\s*$')

AttachmentIndex = Mapping[str, str]


def extract_title(frontmatter: Mapping[str, Any], body: str, filename: str) -> str:
    """Pick a page title.

    Priority: frontmatter ``title``, then the first ``#`` or ``##``
    heading with any ``{#anchor}`` suffix removed, then the filename.
    """
    title = frontmatter.get('title')
    if title is not None and str(title).strip():
        return str(title).strip()

    match = HEADING_PATTERN.search(body)
    if match:
        heading = HEADING_ID_PATTERN.sub('', match.group(1)).strip()
        if heading:
            return heading

    return filename


def build_page(
    path: Path,
    relative_path: str,
    frontmatter: Mapping[str, Any],
    body: str,
) -> Page:
    """Derive a page's identity from its location and content.

    The slug comes from the filename, never the title, so URLs survive
    title edits.
    """
    rel = PurePosixPath(relative_path)
    filename = rel.stem
    folder = str(rel.parent) if str(rel.parent) not in ('', '.') else None
    slug = slugify(filename)
    url = f"/{folder}/{slug}/" if folder else f"/{slug}/"

    return Page(
        path=Path(path),
        relative_path=rel.as_posix(),
        title=extract_title(frontmatter, body, filename),
        slug=slug,
        folder=folder,
        url=url,
        frontmatter=dict(frontmatter),
    )


def build_file_index(
    files: Iterable[PublishableFile],
    errors: Optional[List[NoteError]] = None,
) -> FileIndex:
    """Build the page index for every publishable file.

    Args:
        files: Files that passed the publish filter
        errors: Optional list that receives recovered frontmatter errors

    Returns:
        FileIndex over all pages

    Raises:
        PreprocessError: If a file cannot be read
    """
    pages: List[Page] = []
    seen: Dict[str, str] = {}

    for file in files:
        try:
            raw_content = file.path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise PreprocessError(f"Failed to read {file.relative_path}: {e}", path=file.path) from e

        frontmatter, body, error = parse_note_lenient(raw_content)
        if error:
            logger.warning("Malformed frontmatter in %s, using filename as title: %s", file.relative_path, error)
            if errors is not None:
                errors.append(NoteError(path=file.path, error=error))
            # Title falls back to the filename; headings are not consulted
            page = build_page(file.path, file.relative_path, {}, "")
        else:
            page = build_page(file.path, file.relative_path, frontmatter, body)

        if not page.slug:
            message = f"empty slug: no URL-safe characters in {PurePosixPath(page.relative_path).name}"
            logger.warning("%s: %s", page.relative_path, message)
            if errors is not None:
                errors.append(NoteError(path=file.path, error=message, title=page.title))

        if page.full_slug in seen:
            message = f"slug collision: overwrites {seen[page.full_slug]} ({page.full_slug})"
            logger.warning("%s: %s", page.relative_path, message)
            if errors is not None:
                errors.append(NoteError(path=file.path, error=message, title=page.title))
        seen[page.full_slug] = page.relative_path
        pages.append(page)

    index = FileIndex.from_pages(pages)
    logger.info("Indexed %d pages", len(index))
    return index


def iter_attachment_files(attachment_dir: Path) -> Iterator[Path]:
    """Yield attachment files under a directory in sorted order."""
    for file_path in sorted(attachment_dir.rglob("*")):
        if '.obsidian' in file_path.relative_to(attachment_dir).parts:
            continue
        if file_path.suffix.lower() in ATTACHMENT_EXTENSIONS and file_path.is_file():
            yield file_path


def build_attachment_index(
    vault_path: Path,
    attachment_folder: str = '.',
    url_prefix: str = "/media",
) -> Dict[str, str]:
    """Build a filename to served-URL map for every attachment.

    Each file is keyed by its name as-is, URL-decoded, and the lowercase
    of both.

    Args:
        vault_path: Root of the Obsidian vault
        attachment_folder: Attachment folder relative to the vault
        url_prefix: URL prefix attachments are served under

    Returns:
        Attachment index (empty if the folder does not exist)
    """
    attachment_dir = Path(vault_path) / attachment_folder
    if not attachment_dir.is_dir():
        logger.info("No attachment folder found at: %s", attachment_folder)
        return {}

    prefix = url_prefix.rstrip('/')
    attachments: Dict[str, str] = {}
    count = 0
    for file_path in iter_attachment_files(attachment_dir):
        filename = file_path.name
        decoded = unquote(filename)
        url = f"{prefix}/{filename}"

        attachments[filename] = url
        attachments[decoded] = url
        attachments[filename.lower()] = url
        attachments[decoded.lower()] = url
        count += 1

    logger.info("Indexed %d attachments", count)
    return attachments
