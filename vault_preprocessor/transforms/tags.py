"""Tag extraction and the global tag index."""

import re
from typing import Any, Dict, Iterable, List, Mapping

# #tag, #multi-word-tag, #nested/tag; must start with a letter so hex
# colours and numbered headings are skipped, and must follow whitespace
# or line start so URL fragments are skipped.
INLINE_TAG_PATTERN = re.compile(r'(?:^|(?<=\s))#([a-zA-Z][\w/-]*)', re.MULTILINE)

# Publishing-logic tags, not content taxonomy
SYSTEM_TAGS = frozenset({
    'not-for-public',
    'gardenentry',
    'all',
    'nav',
})

TagIndex = Dict[str, Dict[str, Any]]


def frontmatter_tags(frontmatter: Mapping[str, Any]) -> List[str]:
    """Coerce frontmatter ``tags`` (list or scalar) to strings."""
    tag_data = frontmatter.get('tags')
    if isinstance(tag_data, (list, tuple)):
        return [str(tag) for tag in tag_data if tag is not None]
    if tag_data is None or isinstance(tag_data, dict):
        return []
    return [str(tag_data)]


def normalize_tag(tag: str) -> str:
    """Strip a leading ``#``, lowercase and trim."""
    tag = tag.strip()
    if tag.startswith('#'):
        tag = tag[1:]
    return tag.lower().strip()


def extract_tags(frontmatter: Mapping[str, Any], body: str) -> List[str]:
    """Extract a page's tags from frontmatter and inline ``#tags``.

    Args:
        frontmatter: Parsed frontmatter
        body: Note body

    Returns:
        Sorted, deduplicated, lowercase tags without ``#`` and without
        system tags
    """
    tags = frontmatter_tags(frontmatter)
    tags.extend(INLINE_TAG_PATTERN.findall(body))

    normalized = {normalize_tag(tag) for tag in tags}
    return sorted(tag for tag in normalized if tag and tag not in SYSTEM_TAGS)


def build_tag_index(pages: Iterable[Mapping[str, Any]]) -> TagIndex:
    """Build the global tag index.

    Args:
        pages: Records with ``title``, ``url``, ``tags`` and optional
            ``excerpt``

    Returns:
        tag -> ``{count, pages: [{title, url, excerpt}]}``, ordered by
        descending count; equal counts keep first-seen order
    """
    tag_index: TagIndex = {}

    for page in pages:
        for tag in page.get('tags') or []:
            entry = tag_index.setdefault(tag, {'count': 0, 'pages': []})
            entry['count'] += 1
            entry['pages'].append({
                'title': page['title'],
                'url': page['url'],
                'excerpt': page.get('excerpt') or '',
            })

    ordered = sorted(tag_index.items(), key=lambda item: item[1]['count'], reverse=True)
    return dict(ordered)
