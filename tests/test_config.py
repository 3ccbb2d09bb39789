"""Tests for run configuration and vault settings."""

import json
import logging

import pytest

from vault_preprocessor.core.config import PreprocessConfig, VaultConfig, load_config, read_vault_config
from vault_preprocessor.core.models import ConfigError


class TestPreprocessConfig:

    def test_defaults(self, tmp_path):
        config = PreprocessConfig(vault_path=tmp_path / "vault", output_dir=tmp_path / "out")

        assert config.publish_mode == "blocklist"
        assert config.blocklist_tag == "not-for-public"
        assert config.allowlist_value is True
        assert config.media_dir == tmp_path / "out" / "media"

    def test_media_prefix_normalized(self, tmp_path):
        config = PreprocessConfig(vault_path=tmp_path, output_dir=tmp_path, media_url_prefix="assets/")

        assert config.media_url_prefix == "/assets"

    def test_unknown_publish_mode(self, tmp_path):
        with pytest.raises(ConfigError):
            PreprocessConfig(vault_path=tmp_path, output_dir=tmp_path, publish_mode="greylist")

    def test_from_env(self, tmp_path):
        environ = {
            'PUBLISH_MODE': "allowlist",
            'ALLOWLIST_KEY': "share",
            'ALLOWLIST_VALUE': "false",
            'BLOCKLIST_TAG': "private",
        }
        config = PreprocessConfig.from_env(tmp_path, tmp_path / "out", environ=environ)

        assert config.publish_mode == "allowlist"
        assert config.allowlist_key == "share"
        assert config.allowlist_value is False
        assert config.blocklist_tag == "private"

    def test_from_env_empty(self, tmp_path):
        config = PreprocessConfig.from_env(tmp_path, tmp_path / "out", environ={})

        assert config.publish_mode == "blocklist"
        assert config.allowlist_value is True

    def test_overrides_beat_environment(self, tmp_path):
        config = PreprocessConfig.from_env(
            tmp_path, tmp_path / "out", environ={'PUBLISH_MODE': "allowlist"}, publish_mode="blocklist",
        )

        assert config.publish_mode == "blocklist"

    def test_with_overrides(self, tmp_path):
        config = PreprocessConfig(vault_path=tmp_path, output_dir=tmp_path / "out")
        dry = config.with_overrides(dry_run=True)

        assert dry.dry_run is True
        assert config.dry_run is False

    def test_media_dir_follows_output_override(self, tmp_path):
        config = PreprocessConfig(vault_path=tmp_path, output_dir=tmp_path / "a")
        moved = config.with_overrides(output_dir=tmp_path / "b")

        assert moved.media_dir == tmp_path / "b" / "media"

    def test_static_dir_survives_output_override(self, tmp_path):
        config = PreprocessConfig(vault_path=tmp_path, output_dir=tmp_path / "a", static_dir=tmp_path / "static")
        moved = config.with_overrides(output_dir=tmp_path / "b")

        assert moved.media_dir == tmp_path / "static" / "media"


class TestLoadConfig:

    def test_relative_paths_resolved_against_file(self, tmp_path, caplog):
        config_path = tmp_path / "site.yaml"
        config_path.write_text("""
vault_path: vault
output_dir: build/content
static_dir: build/static
publish_mode: allowlist
title_case: true
site_name: My Garden
""")

        with caplog.at_level(logging.WARNING):
            config = load_config(config_path, environ={})

        assert config.vault_path == tmp_path / "vault"
        assert config.output_dir == tmp_path / "build" / "content"
        assert config.media_dir == tmp_path / "build" / "static" / "media"
        assert config.publish_mode == "allowlist"
        assert config.title_case is True
        assert "site_name" in caplog.text

    def test_file_beats_environment(self, tmp_path):
        config_path = tmp_path / "site.yaml"
        config_path.write_text("vault_path: v\noutput_dir: o\nblocklist_tag: secret\n")

        config = load_config(config_path, environ={'BLOCKLIST_TAG': "private", 'PUBLISH_MODE': "allowlist"})

        assert config.blocklist_tag == "secret"
        assert config.publish_mode == "allowlist"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_path = tmp_path / "site.yaml"
        config_path.write_text("vault_path: [oops\n")

        with pytest.raises(ConfigError):
            load_config(config_path)

    def test_not_a_mapping(self, tmp_path):
        config_path = tmp_path / "site.yaml"
        config_path.write_text("- vault\n- out\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_path)

    def test_missing_required_keys(self, tmp_path):
        config_path = tmp_path / "site.yaml"
        config_path.write_text("vault_path: vault\n")

        with pytest.raises(ConfigError, match="output_dir"):
            load_config(config_path)


class TestReadVaultConfig:

    def _write_app_json(self, vault, data):
        (vault / ".obsidian").mkdir()
        (vault / ".obsidian" / "app.json").write_text(json.dumps(data))

    def test_missing_file_gives_defaults(self, tmp_path):
        assert read_vault_config(tmp_path) == VaultConfig()

    def test_attachment_folder(self, tmp_path):
        self._write_app_json(tmp_path, {'attachmentFolderPath': "./assets/images", 'useMarkdownLinks': True})

        config = read_vault_config(tmp_path)

        assert config.attachment_folder == "assets/images"

    def test_vault_root_folder(self, tmp_path):
        self._write_app_json(tmp_path, {'attachmentFolderPath': "./"})

        assert read_vault_config(tmp_path).attachment_folder == "."

    def test_invalid_json_gives_defaults(self, tmp_path):
        (tmp_path / ".obsidian").mkdir()
        (tmp_path / ".obsidian" / "app.json").write_text("{not json")

        assert read_vault_config(tmp_path) == VaultConfig()
