"""Removal of authoring-only comments."""

import re

OBSIDIAN_COMMENT_PATTERN = re.compile(r'%%.*?%%', re.DOTALL)
HTML_COMMENT_PATTERN = re.compile(r'<!--.*?-->', re.DOTALL)
BLANK_RUN_PATTERN = re.compile(r'\n{3,}')


def strip_comments(content: str) -> str:
    """Remove ``%% ... %%`` and ``<!-- ... -->`` comments.

    Both inline and multiline comments are removed, then runs of blank
    lines left behind are collapsed to a single blank line.

    Args:
        content: Note body

    Returns:
        Body without comments
    """
    content = OBSIDIAN_COMMENT_PATTERN.sub('', content)
    content = HTML_COMMENT_PATTERN.sub('', content)
    return BLANK_RUN_PATTERN.sub('\n\n', content)
