"""Shared fixtures for Vault Preprocessor tests."""

from pathlib import Path

import pytest

from vault_preprocessor.core.index import build_page
from vault_preprocessor.core.models import FileIndex


def make_page(relative_path: str, title: str = None, body: str = ""):
    """Build a Page as the index builder would, without touching disk."""
    frontmatter = {'title': title} if title else {}
    return build_page(Path("/vault") / relative_path, relative_path, frontmatter, body)


@pytest.fixture
def file_index():
    return FileIndex.from_pages([
        make_page("notes/Cooking Tips.md", "Cooking Tips"),
        make_page("recipes/Fluffy Millet Quinoa-Cake.md", "Fluffy Millet Quinoa-Cake"),
        make_page("recipes/Challah.md", "Braided Challah"),
        make_page("about.md", "About"),
    ])


@pytest.fixture
def attachment_index():
    return {
        "Pasted image 20250315160236.jpg": "/media/Pasted image 20250315160236.jpg",
        "pasted image 20250315160236.jpg": "/media/Pasted image 20250315160236.jpg",
        "diagram.png": "/media/diagram.png",
        "Photo.JPG": "/media/Photo.JPG",
        "photo.jpg": "/media/Photo.JPG",
    }
