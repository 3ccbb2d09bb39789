"""Tests for VaultDiscovery publish filtering."""

import pytest
from pathlib import Path
import tempfile
import shutil

from vault_preprocessor.core.config import PreprocessConfig
from vault_preprocessor.core.discovery import VaultDiscovery
from vault_preprocessor.core.models import PreprocessError


class TestVaultDiscovery:
    """Tests for VaultDiscovery class."""

    @pytest.fixture
    def temp_vault(self):
        """Create a temporary vault with test notes."""
        temp_dir = tempfile.mkdtemp()
        vault_path = Path(temp_dir)

        (vault_path / "public.md").write_text("""---
title: Public Note
publish: true
tags:
  - recipe
---

# Public

Content.
""")

        (vault_path / "inline-private.md").write_text("""---
title: Private Inline
publish: true
---

Secret stuff #not-for-public
""")

        (vault_path / "fm-private.md").write_text("""---
title: Private Frontmatter
tags:
  - "#not-for-public"
---

Content.
""")

        (vault_path / "recipes").mkdir()
        (vault_path / "recipes" / "Chai.md").write_text("# Chai\n\nTea.\n")

        (vault_path / ".obsidian").mkdir()
        (vault_path / ".obsidian" / "workspace.md").write_text("tool state")

        yield vault_path

        shutil.rmtree(temp_dir)

    def _relative_paths(self, files):
        return sorted(f.relative_path for f in files)

    def test_blocklist_is_default(self, temp_vault):
        result = VaultDiscovery(temp_vault).discover_all()

        assert self._relative_paths(result.published) == ["public.md", "recipes/Chai.md"]
        assert self._relative_paths(result.excluded) == ["fm-private.md", "inline-private.md"]

    def test_blocklist_reason(self, temp_vault):
        result = VaultDiscovery(temp_vault).discover_all()

        assert all(e.reason == "contains #not-for-public" for e in result.excluded)

    def test_allowlist(self, temp_vault):
        result = VaultDiscovery(temp_vault, publish_mode="allowlist").discover_all()

        assert self._relative_paths(result.published) == ["inline-private.md", "public.md"]
        excluded = {e.relative_path: e.reason for e in result.excluded}
        assert excluded["recipes/Chai.md"] == "missing publish: True"

    def test_allowlist_custom_key(self, temp_vault):
        discovery = VaultDiscovery(temp_vault, publish_mode="allowlist", allowlist_key="title", allowlist_value="Public Note")
        result = discovery.discover_all()

        assert self._relative_paths(result.published) == ["public.md"]

    def test_custom_blocklist_tag(self, temp_vault):
        discovery = VaultDiscovery(temp_vault, blocklist_tag="#recipe")
        result = discovery.discover_all()

        assert "public.md" in self._relative_paths(result.excluded)
        assert "inline-private.md" in self._relative_paths(result.published)

    def test_obsidian_folder_skipped(self, temp_vault):
        result = VaultDiscovery(temp_vault).discover_all()
        all_paths = self._relative_paths(result.published) + self._relative_paths(result.excluded)

        assert not any(p.startswith(".obsidian") for p in all_paths)

    def test_published_carries_frontmatter(self, temp_vault):
        result = VaultDiscovery(temp_vault).discover_all()
        public = next(f for f in result.published if f.relative_path == "public.md")

        assert public.frontmatter["title"] == "Public Note"
        assert public.path == temp_vault / "public.md"

    def test_is_publishable_scalar_tag(self, temp_vault):
        discovery = VaultDiscovery(temp_vault)

        assert discovery.is_publishable({'tags': "not-for-public"}, "") == (False, "contains #not-for-public")
        assert discovery.is_publishable({'tags': "other"}, "") == (True, "OK")

    def test_from_config(self, temp_vault):
        config = PreprocessConfig(vault_path=temp_vault, output_dir=temp_vault / "out", publish_mode="allowlist")
        discovery = VaultDiscovery.from_config(config)

        assert discovery.publish_mode == "allowlist"

    def test_unknown_mode(self, temp_vault):
        with pytest.raises(ValueError):
            VaultDiscovery(temp_vault, publish_mode="everything")

    def test_missing_vault(self, temp_vault):
        with pytest.raises(PreprocessError):
            VaultDiscovery(temp_vault / "nope").discover_all()


class TestMalformedFrontmatter:
    """Malformed YAML is recorded but never fatal."""

    @pytest.fixture
    def temp_vault(self):
        temp_dir = tempfile.mkdtemp()
        yield Path(temp_dir)
        shutil.rmtree(temp_dir)

    def test_blocklist_publishes_with_error_recorded(self, temp_vault):
        note = temp_vault / "bad.md"
        note.write_text("""---
title: Bad YAML
tags: [unclosed bracket
---

Content.
""")

        discovery = VaultDiscovery(temp_vault)
        result = discovery.discover_all()

        assert [f.relative_path for f in result.published] == ["bad.md"]
        assert result.published[0].frontmatter == {}
        assert len(discovery.errors) == 1
        assert discovery.errors[0].path == note

    def test_allowlist_excludes_unparsable_note(self, temp_vault):
        (temp_vault / "bad.md").write_text("---\npublish: [true\n---\nBody\n")

        result = VaultDiscovery(temp_vault, publish_mode="allowlist").discover_all()

        assert result.published == []
        assert len(result.excluded) == 1

    def test_frontmatter_without_closing(self, temp_vault):
        (temp_vault / "unclosed.md").write_text("---\ntitle: Unclosed\n\nNo closing fence.\n")

        discovery = VaultDiscovery(temp_vault)
        result = discovery.discover_all()

        assert len(result.published) == 1
        assert discovery.errors == []

    def test_non_mapping_frontmatter(self, temp_vault):
        (temp_vault / "list.md").write_text("---\n- a\n- b\n---\nBody\n")

        discovery = VaultDiscovery(temp_vault)
        discovery.discover_all()

        assert len(discovery.errors) == 1
