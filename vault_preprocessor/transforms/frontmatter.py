"""Frontmatter transform for published pages.

A transform takes a note's source frontmatter and its processed page and
returns the frontmatter written to the output file.
"""

import titlecase as tc
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from vault_preprocessor.core.models import ProcessedPage

FrontmatterTransform = Callable[[Dict[str, Any], "ProcessedPage"], Dict[str, Any]]


def publish_frontmatter(title_case: bool = False, layout: Optional[str] = None) -> FrontmatterTransform:
    """Create the transform used for published pages.

    Keeps every source field and overwrites ``title``, ``slug`` and
    ``tags`` with the resolved values. ``title`` comes from the page index,
    so heading-derived titles are written back explicitly.

    Args:
        title_case: Convert titles with the titlecase library
        layout: Optional ``layout`` value added to every page

    Returns:
        A transform function
    """
    def transform(fm: Dict[str, Any], processed: "ProcessedPage") -> Dict[str, Any]:
        page = processed.page
        title = tc.titlecase(page.title) if title_case else page.title

        result = fm.copy()
        result['title'] = title
        result['slug'] = page.slug
        result['tags'] = list(processed.tags)
        if layout:
            result['layout'] = layout
        return result
    return transform
