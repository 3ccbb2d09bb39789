"""Slug helpers shared by the index builder and resolvers."""

import re

import inflection

_HEADING_STRIP = re.compile(r'[^a-z0-9\s-]')
_WHITESPACE = re.compile(r'\s+')
_HYPHENS = re.compile(r'-+')


def slugify(name: str) -> str:
    """Slug for a page filename or transclusion target.

    Transliterates to ASCII, lowercases, and collapses every run of
    characters outside ``[a-z0-9]`` into a single hyphen.

    >>> slugify("Fluffy Millet Quinoa-Cake")
    'fluffy-millet-quinoa-cake'
    """
    return inflection.parameterize(name.replace('_', '-'))


def slugify_heading(heading: str) -> str:
    """Anchor for a ``#heading`` link suffix.

    Characters outside ``[a-z0-9]``, whitespace and hyphens are dropped
    rather than replaced, so ``Step 1: Prep`` becomes ``step-1-prep``.
    """
    anchor = _HEADING_STRIP.sub('', heading.lower().strip())
    anchor = _WHITESPACE.sub('-', anchor)
    return _HYPHENS.sub('-', anchor)
