"""Page-embed (transclusion) placeholders.

``![[Page]]`` embeds another note's content in Obsidian. Inlining is not
supported, so each page embed becomes a visible placeholder linking to
the target. Media embeds are left for the attachment resolver.
"""

import logging
import re

from vault_preprocessor.core.models import Transclusion, TransclusionResult
from vault_preprocessor.core.slugs import slugify

logger = logging.getLogger(__name__)

MEDIA_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.webp', '.svg', '.pdf', '.mp4', '.webm', '.html')

EMBED_PATTERN = re.compile(r'!\[\[([^\]|]+)(?:\|([^\]]+))?\]\]')

PLACEHOLDER_TEMPLATE = (
    '<div class="transclusion-placeholder">\n'
    '  <p><strong>Embedded content:</strong> {target}</p>\n'
    '  <p class="transclusion-note"><em>Transclusion not yet supported. '
    '<a href="/{slug}/">View "{target}" →</a></em></p>\n'
    '</div>'
)


def is_media_file(target: str) -> bool:
    """Check whether an embed target looks like an image or media file."""
    return target.strip().lower().endswith(MEDIA_EXTENSIONS)


def handle_transclusions(content: str) -> TransclusionResult:
    """Replace page embeds with placeholder blocks.

    The placeholder link uses the slugified target and is not checked
    against the file index, so it can dangle.

    Args:
        content: Comment-stripped note body

    Returns:
        TransclusionResult with the rewritten body and embeds found
    """
    transclusions = []

    def replace_embed(match: re.Match) -> str:
        target = match.group(1)
        if is_media_file(target):
            return match.group(0)

        target = target.strip()
        transclusions.append(Transclusion(target=target, original=match.group(0)))
        return PLACEHOLDER_TEMPLATE.format(target=target, slug=slugify(target))

    result = EMBED_PATTERN.sub(replace_embed, content)

    if transclusions:
        logger.info("Found %d transclusion(s), converted to placeholders", len(transclusions))
        for t in transclusions:
            logger.debug("  - %s", t.target)

    return TransclusionResult(content=result, transclusions=transclusions)
