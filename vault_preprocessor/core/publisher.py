"""Preprocessing orchestrator: vault in, publish-ready corpus out."""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from vault_preprocessor.core.config import PreprocessConfig, load_config, read_vault_config
from vault_preprocessor.core.discovery import VaultDiscovery
from vault_preprocessor.core.gitdates import get_last_modified_date
from vault_preprocessor.core.graph import build_graph, load_graph_settings
from vault_preprocessor.core.index import build_attachment_index, build_file_index
from vault_preprocessor.core.models import (
    NoteError,
    PreprocessError,
    PreprocessResult,
    PreprocessStats,
    ProcessedPage,
)
from vault_preprocessor.core.processor import ContentProcessor
from vault_preprocessor.transforms.attachments import copy_attachments
from vault_preprocessor.transforms.frontmatter import FrontmatterTransform, publish_frontmatter
from vault_preprocessor.transforms.tags import build_tag_index

logger = logging.getLogger(__name__)

DATA_DIR = "_data"
TAG_INDEX_FILE = "tagIndex.json"
GRAPH_FILE = "graph.json"
GRAPH_SETTINGS_FILE = "graph-settings.json"


class Publisher:
    """Runs the full preprocessing pipeline over a vault.

    The file and attachment indexes are built completely before any page
    is resolved. Pages are then processed and written one at a time; the
    first failure aborts the run.
    """

    def __init__(
        self,
        config: PreprocessConfig,
        frontmatter_transform: Optional[FrontmatterTransform] = None,
    ):
        self.config = config
        self.frontmatter_transform = frontmatter_transform or publish_frontmatter(
            title_case=config.title_case,
            layout=config.layout,
        )

    def run(self) -> PreprocessResult:
        """Preprocess the vault.

        Returns:
            PreprocessResult with stats, tag index, graph and pages

        Raises:
            PreprocessError: On any I/O failure or per-file processing error
        """
        config = self.config
        stats = PreprocessStats()
        errors: List[NoteError] = []

        logger.info("--- Step 1: Reading vault config ---")
        attachment_folder = config.attachment_folder
        if attachment_folder is None:
            attachment_folder = read_vault_config(config.vault_path).attachment_folder

        logger.info("--- Step 2: Filtering publishable files ---")
        discovery = VaultDiscovery.from_config(config)
        filtered = discovery.discover_all()
        errors.extend(discovery.errors)
        stats.files_excluded = len(filtered.excluded)

        logger.info("--- Step 3: Building file index ---")
        file_index = build_file_index(filtered.published, errors=errors)

        logger.info("--- Step 4: Building attachment index ---")
        attachment_index = build_attachment_index(
            config.vault_path,
            attachment_folder,
            url_prefix=config.media_url_prefix,
        )

        logger.info("--- Step 5: Processing markdown files ---")
        processor = ContentProcessor(file_index, attachment_index, self.frontmatter_transform)
        pages: List[ProcessedPage] = []
        for file in filtered.published:
            try:
                processed = processor.process(file)
                self._apply_git_date(processed, stats)
                if not config.dry_run:
                    self._write_page(file.relative_path, processor.build_output(processed))
            except PreprocessError:
                raise
            except Exception as e:
                raise PreprocessError(f"Failed to process {file.relative_path}: {e}", path=file.path) from e

            stats.add_page(processed)
            pages.append(processed)
            logger.debug("Processed %s -> %s", file.relative_path, processed.page.url)

        logger.info("--- Step 6: Building tag index ---")
        tag_index = build_tag_index(
            {
                'title': processed.frontmatter.get('title', processed.page.title),
                'url': processed.page.url,
                'tags': processed.tags,
                'excerpt': processed.excerpt,
            }
            for processed in pages
            if processed.tags
        )
        stats.unique_tags = len(tag_index)

        logger.info("--- Step 7: Building link graph ---")
        per_page_links = {
            processed.page.url: {
                'title': processed.frontmatter.get('title', processed.page.title),
                'outgoing': processed.outgoing,
            }
            for processed in pages
        }
        graph = build_graph(per_page_links, tag_index if config.include_tags_in_graph else None)

        if not config.dry_run:
            data_dir = config.output_dir / DATA_DIR
            self._write_json(data_dir / TAG_INDEX_FILE, tag_index)
            self._write_json(data_dir / GRAPH_FILE, graph)
            self._write_json(config.output_dir / GRAPH_SETTINGS_FILE, load_graph_settings(config.vault_path))

            logger.info("--- Step 8: Copying attachments ---")
            copied = copy_attachments(config.vault_path, attachment_folder, config.media_dir)
            stats.attachments_copied = len(copied)

        self._log_summary(stats)
        return PreprocessResult(
            stats=stats,
            tag_index=tag_index,
            graph=graph,
            pages=pages,
            errors=errors,
            dry_run=config.dry_run,
        )

    def _apply_git_date(self, processed: ProcessedPage, stats: PreprocessStats) -> None:
        if not self.config.use_git_dates or processed.frontmatter.get('date'):
            return
        git_date = get_last_modified_date(processed.page.path, self.config.vault_path)
        if git_date:
            processed.frontmatter['date'] = git_date
            stats.git_dates_found += 1
        else:
            stats.git_dates_missing += 1

    def _write_page(self, relative_path: str, output: str) -> None:
        output_path = self.config.output_dir / relative_path
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(output, encoding='utf-8')
        except OSError as e:
            raise PreprocessError(f"Failed to write {output_path}: {e}", path=output_path) from e

    def _write_json(self, path: Path, data: Any) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write('\n')
        except OSError as e:
            raise PreprocessError(f"Failed to write {path}: {e}", path=path) from e
        logger.info("Wrote %s", path.name)

    def _log_summary(self, stats: PreprocessStats) -> None:
        logger.info("Preprocessing complete%s", " (dry run)" if self.config.dry_run else "")
        logger.info("  Files processed: %d", stats.files_processed)
        logger.info("  Files excluded:  %d", stats.files_excluded)
        logger.info("  Links resolved:  %d", stats.links_resolved)
        logger.info("  Links broken:    %d", stats.links_broken)
        logger.info("  Transclusions:   %d", stats.transclusions)
        logger.info("  Tags extracted:  %d", stats.tags_extracted)
        logger.info("  Unique tags:     %d", stats.unique_tags)
        logger.info("  Attachments:     %d", stats.attachments_copied)
        if self.config.use_git_dates and stats.git_dates_missing:
            logger.warning("  %d files have no git date", stats.git_dates_missing)


def create_publisher_from_config(config_path: Path, **overrides: Any) -> Publisher:
    """Create a Publisher from a YAML site config file.

    Args:
        config_path: Path to the YAML config
        **overrides: PreprocessConfig fields that win over the file

    Returns:
        Configured Publisher
    """
    config = load_config(config_path)
    if overrides:
        config = config.with_overrides(**overrides)
    return Publisher(config)


def preprocess(vault_path: Path, output_dir: Path, **options: Any) -> PreprocessResult:
    """Preprocess a vault with environment defaults and keyword overrides."""
    config = PreprocessConfig.from_env(vault_path, output_dir, **options)
    return Publisher(config).run()

