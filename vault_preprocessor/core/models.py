"""Data models for Vault Preprocessor."""

import enum
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional


class PreprocessError(Exception):
    """Fatal error that aborts a preprocessing run."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class ConfigError(PreprocessError):
    """Invalid or unreadable configuration."""


@dataclass
class PublishableFile:
    """A vault file that passed the publish filter."""
    path: Path
    relative_path: str
    frontmatter: Dict[str, Any] = field(default_factory=dict)

    def read_raw(self) -> str:
        """Read file contents on demand."""
        return self.path.read_text(encoding='utf-8')


@dataclass
class ExcludedFile:
    """A vault file rejected by the publish filter."""
    path: Path
    relative_path: str
    reason: str


@dataclass
class FilterResult:
    """Result of classifying every vault file."""
    published: List[PublishableFile] = field(default_factory=list)
    excluded: List[ExcludedFile] = field(default_factory=list)


@dataclass
class NoteError:
    """A recovered problem with a single note.

    Recorded for malformed frontmatter; never aborts a run.
    """
    path: Path
    error: str
    title: Optional[str] = None


@dataclass(frozen=True)
class Page:
    """Stable identity of one publishable note."""
    path: Path
    relative_path: str
    title: str
    slug: str
    folder: Optional[str]
    url: str
    frontmatter: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @property
    def full_slug(self) -> str:
        """Folder-qualified identity, e.g. ``recipes/challah``."""
        return f"{self.folder}/{self.slug}" if self.folder else self.slug

    @property
    def filename(self) -> str:
        """Filename without the ``.md`` extension."""
        return Path(self.relative_path).stem


class LookupMethod(enum.Enum):
    """Which tier of the lookup chain produced a hit."""
    TITLE = "title"
    FILENAME = "filename"
    NORMALIZED_FILENAME = "normalized_filename"


@dataclass(frozen=True)
class LookupHit:
    """Successful link-target lookup."""
    by: LookupMethod
    full_slug: str
    page: Page

    @property
    def url(self) -> str:
        return self.page.url


class FileIndex:
    """Read-only lookup maps over every publishable page.

    Built once by :func:`vault_preprocessor.core.index.build_file_index`
    and passed to each resolver. The maps are exposed as mapping proxies
    so resolvers cannot mutate them mid-run.
    """

    def __init__(
        self,
        pages: Dict[str, Page],
        title_lookup: Dict[str, str],
        filename_lookup: Dict[str, str],
    ):
        self.pages: Mapping[str, Page] = MappingProxyType(dict(pages))
        self.title_lookup: Mapping[str, str] = MappingProxyType(dict(title_lookup))
        self.filename_lookup: Mapping[str, str] = MappingProxyType(dict(filename_lookup))
        self._by_relative_path = {page.relative_path: page for page in self.pages.values()}

    @classmethod
    def from_pages(cls, pages: List[Page]) -> "FileIndex":
        """Build the three co-maps from pages, last write wins."""
        by_slug: Dict[str, Page] = {}
        title_lookup: Dict[str, str] = {}
        filename_lookup: Dict[str, str] = {}

        for page in pages:
            full_slug = page.full_slug
            by_slug[full_slug] = page
            title_lookup[page.title.lower()] = full_slug

            filename = page.filename.lower()
            filename_lookup[filename] = full_slug
            normalized = normalize_filename(filename)
            if normalized != filename:
                filename_lookup[normalized] = full_slug

        return cls(by_slug, title_lookup, filename_lookup)

    def __len__(self) -> int:
        return len(self.pages)

    def lookup(self, target: str) -> Optional[LookupHit]:
        """Resolve a link target through title, filename, normalized filename.

        Args:
            target: Title or filename, with or without a ``.md`` extension

        Returns:
            LookupHit for the first tier that matches, None otherwise
        """
        key = target.strip().lower()
        if key.endswith('.md'):
            key = key[:-3]

        chain = (
            (LookupMethod.TITLE, self.title_lookup, key),
            (LookupMethod.FILENAME, self.filename_lookup, key),
            (LookupMethod.NORMALIZED_FILENAME, self.filename_lookup, normalize_filename(key)),
        )
        for method, lookup, candidate in chain:
            full_slug = lookup.get(candidate)
            if full_slug is not None and full_slug in self.pages:
                return LookupHit(by=method, full_slug=full_slug, page=self.pages[full_slug])
        return None

    def page_for(self, relative_path: str) -> Optional[Page]:
        """Find the page built from a given vault-relative path."""
        return self._by_relative_path.get(relative_path)


def normalize_filename(name: str) -> str:
    """Lowercase and drop everything outside ``[a-z0-9]``."""
    return ''.join(ch for ch in name.lower() if ch in _ALNUM)


_ALNUM = frozenset('abcdefghijklmnopqrstuvwxyz0123456789')


@dataclass
class Link:
    """One resolved or broken cross-reference."""
    target: str
    resolved: bool
    url: Optional[str] = None
    original: Optional[str] = None


@dataclass
class ResolveResult:
    """Output of a resolver pass over one document."""
    content: str
    resolved: List[Link] = field(default_factory=list)
    broken: List[Link] = field(default_factory=list)


@dataclass
class Transclusion:
    """A page embed replaced with a placeholder."""
    target: str
    original: str


@dataclass
class TransclusionResult:
    content: str
    transclusions: List[Transclusion] = field(default_factory=list)


@dataclass
class ProcessedPage:
    """Result of running the per-file pipeline over one note.

    Contains the rewritten body, the output frontmatter and tags, and the
    resolver results that feed run statistics and the link graph.
    """
    page: Page
    content: str
    frontmatter: Dict[str, Any]
    tags: List[str]
    transclusions: List[Transclusion]
    attachments: ResolveResult
    wiki_links: ResolveResult
    markdown_links: ResolveResult

    @property
    def outgoing(self) -> List[str]:
        """Resolved page URLs, wiki-links before markdown links, anchors kept."""
        return [
            link.url
            for link in self.wiki_links.resolved + self.markdown_links.resolved
            if link.url
        ]

    @property
    def excerpt(self) -> str:
        description = self.page.frontmatter.get('description')
        return str(description) if description else ""


@dataclass
class PreprocessStats:
    """Aggregate counters for one run."""
    files_processed: int = 0
    files_excluded: int = 0
    links_resolved: int = 0
    links_broken: int = 0
    attachments_resolved: int = 0
    attachments_broken: int = 0
    transclusions: int = 0
    tags_extracted: int = 0
    unique_tags: int = 0
    attachments_copied: int = 0
    git_dates_found: int = 0
    git_dates_missing: int = 0

    def add_page(self, processed: ProcessedPage) -> None:
        """Fold one page's resolver results into the counters."""
        self.files_processed += 1
        self.transclusions += len(processed.transclusions)
        self.attachments_resolved += len(processed.attachments.resolved)
        self.attachments_broken += len(processed.attachments.broken)
        for result in (processed.attachments, processed.wiki_links, processed.markdown_links):
            self.links_resolved += len(result.resolved)
            self.links_broken += len(result.broken)
        self.tags_extracted += len(processed.tags)


@dataclass
class PreprocessResult:
    """Result of a full preprocessing run."""
    stats: PreprocessStats
    tag_index: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    graph: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    pages: List[ProcessedPage] = field(default_factory=list)
    errors: List[NoteError] = field(default_factory=list)
    dry_run: bool = False
