"""Wiki-link and markdown-link resolution.

Both resolvers look targets up through :meth:`FileIndex.lookup` and never
drop an unresolvable link: it is rendered as a ``broken-link`` span so
authors can find it in the published site.
"""

import logging
import re
from typing import List, Optional
from urllib.parse import unquote

from vault_preprocessor.core.models import FileIndex, Link, ResolveResult
from vault_preprocessor.core.slugs import slugify_heading

logger = logging.getLogger(__name__)

# [[target]], [[target|display]], [[target#heading]], [[target#heading|display]]
# The lookbehind skips ![[...]] embeds.
WIKILINK_PATTERN = re.compile(r'(?<!!)\[\[([^\]|#]+)(?:#([^\]|]+))?(?:\|([^\]]+))?\]\]')

# [text](file.md) or [text](folder/file.md#heading); not ![alt](...) images
# Targets with a URL scheme (https://, mailto:) are external and skipped.
MD_LINK_PATTERN = re.compile(
    r'(?<!!)\[([^\]]+)\]'
    r'\((?![a-zA-Z][a-zA-Z0-9+.-]*://|mailto:)'
    r'([^)]+?\.md(?:#[^)]*)?)\)'
)


def broken_link(target: str, display: str) -> str:
    """Render an unresolvable link as a flagged inline element."""
    return f'<span class="broken-link" data-target="{target}">{display}</span>'


def with_anchor(url: str, heading: Optional[str]) -> str:
    if heading:
        return f"{url}#{slugify_heading(heading)}"
    return url


def resolve_wiki_links(content: str, index: FileIndex) -> ResolveResult:
    """Convert wiki-links to markdown links with resolved URLs.

    Args:
        content: Note body after transclusion and attachment passes
        index: FileIndex over all publishable pages

    Returns:
        ResolveResult with rewritten content
    """
    resolved: List[Link] = []
    broken: List[Link] = []

    def replace_link(match: re.Match) -> str:
        target = match.group(1).strip()
        heading = match.group(2)
        display = (match.group(3) or "").strip()
        if not display:
            display = f"{target}#{heading}" if heading else target

        hit = index.lookup(target)
        if hit is None:
            broken.append(Link(target=target, resolved=False, original=match.group(0)))
            return broken_link(target, display)

        url = with_anchor(hit.url, heading)
        resolved.append(Link(target=target, resolved=True, url=url, original=match.group(0)))
        return f"[{display}]({url})"

    result = WIKILINK_PATTERN.sub(replace_link, content)

    for link in broken:
        logger.debug("Broken wiki-link: %s", link.target)

    return ResolveResult(content=result, resolved=resolved, broken=broken)


def resolve_markdown_links(content: str, index: FileIndex) -> ResolveResult:
    """Resolve markdown links that point at ``.md`` files.

    Only the filename matters: directory prefixes and the extension are
    dropped before lookup, and URL-encoded paths are decoded. Links to
    anything other than a ``.md`` file are left alone.

    Args:
        content: Note body after wiki-link resolution
        index: FileIndex over all publishable pages

    Returns:
        ResolveResult with rewritten content
    """
    resolved: List[Link] = []
    broken: List[Link] = []

    def replace_link(match: re.Match) -> str:
        display = match.group(1)
        decoded = unquote(match.group(2))

        file_path, _, heading = decoded.partition('#')
        file_path = file_path.strip()
        filename = file_path.rsplit('/', 1)[-1]
        if filename.lower().endswith('.md'):
            filename = filename[:-3]

        hit = index.lookup(filename)
        if hit is None:
            broken.append(Link(target=file_path, resolved=False, original=match.group(0)))
            return broken_link(file_path, display)

        url = with_anchor(hit.url, heading)
        resolved.append(Link(target=file_path, resolved=True, url=url, original=match.group(0)))
        return f"[{display}]({url})"

    result = MD_LINK_PATTERN.sub(replace_link, content)

    for link in broken:
        logger.debug("Broken markdown link: %s", link.target)

    return ResolveResult(content=result, resolved=resolved, broken=broken)
