"""Content processor for transforming Obsidian notes."""

import logging
from typing import Optional

from vault_preprocessor.core.frontmatter import build_output, parse_note_lenient
from vault_preprocessor.core.index import AttachmentIndex, build_page
from vault_preprocessor.core.models import FileIndex, PreprocessError, ProcessedPage, PublishableFile
from vault_preprocessor.transforms.attachments import resolve_attachments
from vault_preprocessor.transforms.comments import strip_comments
from vault_preprocessor.transforms.frontmatter import FrontmatterTransform, publish_frontmatter
from vault_preprocessor.transforms.links import resolve_markdown_links, resolve_wiki_links
from vault_preprocessor.transforms.tags import extract_tags
from vault_preprocessor.transforms.transclusions import handle_transclusions

logger = logging.getLogger(__name__)


class ContentProcessor:
    """Processes Obsidian note content for publishing.

    Each note goes through, in order:
    - Comment stripping
    - Transclusion placeholders (before anything else touches ``![[...]]``)
    - Attachment resolution
    - Wiki-link resolution
    - Markdown-link resolution
    - Tag extraction
    - Frontmatter transformation
    """

    def __init__(
        self,
        file_index: FileIndex,
        attachment_index: AttachmentIndex,
        frontmatter_transform: Optional[FrontmatterTransform] = None,
    ):
        """Initialize ContentProcessor.

        Args:
            file_index: Index over every publishable page
            attachment_index: Filename to media URL map
            frontmatter_transform: Transform producing output frontmatter
                (default: ``publish_frontmatter()``)
        """
        self.file_index = file_index
        self.attachment_index = attachment_index
        self.frontmatter_transform = frontmatter_transform or publish_frontmatter()

    def process(self, file: PublishableFile) -> ProcessedPage:
        """Process a note's content for publishing.

        Args:
            file: A file that passed the publish filter

        Returns:
            ProcessedPage with rewritten content and metadata

        Raises:
            PreprocessError: If the file cannot be read
        """
        try:
            raw_content = file.read_raw()
        except (OSError, UnicodeDecodeError) as e:
            raise PreprocessError(f"Failed to read {file.relative_path}: {e}", path=file.path) from e

        frontmatter, body, _ = parse_note_lenient(raw_content)
        return self.process_text(file, frontmatter, body)

    def process_text(self, file: PublishableFile, frontmatter: dict, body: str) -> ProcessedPage:
        """Run the pipeline over an already-split note."""
        page = self.file_index.page_for(file.relative_path)
        if page is None:
            page = build_page(file.path, file.relative_path, frontmatter, body)

        content = strip_comments(body)

        transclusion_result = handle_transclusions(content)
        content = transclusion_result.content

        attachment_result = resolve_attachments(content, self.attachment_index)
        content = attachment_result.content

        wiki_result = resolve_wiki_links(content, self.file_index)
        content = wiki_result.content

        md_result = resolve_markdown_links(content, self.file_index)
        content = md_result.content

        tags = extract_tags(frontmatter, content)

        processed = ProcessedPage(
            page=page,
            content=content,
            frontmatter=dict(frontmatter),
            tags=tags,
            transclusions=transclusion_result.transclusions,
            attachments=attachment_result,
            wiki_links=wiki_result,
            markdown_links=md_result,
        )
        processed.frontmatter = self.frontmatter_transform(dict(frontmatter), processed)

        broken = len(wiki_result.broken) + len(md_result.broken)
        if broken:
            logger.info("%s: %d broken link(s)", file.relative_path, broken)

        return processed

    def build_output(self, processed: ProcessedPage) -> str:
        """Build final markdown output with frontmatter."""
        return build_output(processed.frontmatter, processed.content)
