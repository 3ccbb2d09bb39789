"""Frontmatter splitting and output assembly."""

import re
from typing import Any, Dict, Tuple

import yaml

FRONTMATTER_PATTERN = re.compile(r'\A---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)', re.DOTALL | re.MULTILINE)


class FrontmatterError(ValueError):
    """Frontmatter block present but not a valid YAML mapping."""


def split_frontmatter(raw_content: str) -> Tuple[str, str]:
    """Split raw note text into (yaml_text, body).

    A note without a closed ``---`` block has empty yaml_text and the whole
    text as body.
    """
    match = FRONTMATTER_PATTERN.match(raw_content)
    if not match:
        return "", raw_content
    return match.group(1), raw_content[match.end():]


def parse_note(raw_content: str) -> Tuple[Dict[str, Any], str]:
    """Parse a note into its frontmatter dict and body.

    Args:
        raw_content: Full file content including frontmatter

    Returns:
        Tuple of (frontmatter, body)

    Raises:
        FrontmatterError: If the frontmatter block is not a YAML mapping.
            The body is available as ``error.body``.
    """
    yaml_text, body = split_frontmatter(raw_content)
    if not yaml_text.strip():
        return {}, body

    try:
        frontmatter = yaml.safe_load(yaml_text)
    except yaml.YAMLError as e:
        error = FrontmatterError(str(e))
        error.body = body
        raise error from e

    if frontmatter is None:
        return {}, body
    if not isinstance(frontmatter, dict):
        error = FrontmatterError(f"Frontmatter is a {type(frontmatter).__name__}, not a mapping")
        error.body = body
        raise error
    return frontmatter, body


def parse_note_lenient(raw_content: str) -> Tuple[Dict[str, Any], str, str]:
    """Like :func:`parse_note` but never raises.

    Returns:
        Tuple of (frontmatter, body, error message or empty string)
    """
    try:
        frontmatter, body = parse_note(raw_content)
        return frontmatter, body, ""
    except FrontmatterError as e:
        return {}, e.body, str(e)


def build_output(frontmatter: Dict[str, Any], content: str) -> str:
    """Build final markdown output with frontmatter.

    Args:
        frontmatter: Output frontmatter; key order is preserved
        content: Rewritten body

    Returns:
        Complete markdown string with YAML frontmatter
    """
    body = content.lstrip('\n').rstrip('\n')
    if not frontmatter:
        return body + "\n"

    frontmatter_str = yaml.dump(
        frontmatter,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )
    return f"---\n{frontmatter_str}---\n{body}\n"
