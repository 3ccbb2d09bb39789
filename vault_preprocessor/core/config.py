"""Configuration for a preprocessing run."""

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from vault_preprocessor.core.models import ConfigError

logger = logging.getLogger(__name__)

BLOCKLIST = "blocklist"
ALLOWLIST = "allowlist"
PUBLISH_MODES = (BLOCKLIST, ALLOWLIST)

OBSIDIAN_DEFAULTS = {
    'attachmentFolderPath': '.',
}


@dataclass
class VaultConfig:
    """Settings read from the vault's ``.obsidian/app.json``."""
    attachment_folder: str = '.'


@dataclass
class PreprocessConfig:
    """Settings for one preprocessing run.

    Attributes:
        vault_path: Root of the Obsidian vault
        output_dir: Where rewritten pages and JSON data files are written
        static_dir: Attachments are copied to ``static_dir/media``;
            ``output_dir`` is used when None
        publish_mode: ``blocklist`` or ``allowlist``
        blocklist_tag: Tag that excludes a note in blocklist mode
        allowlist_key: Frontmatter key checked in allowlist mode
        allowlist_value: Value ``allowlist_key`` must equal
        attachment_folder: Attachment folder relative to the vault; read
            from ``.obsidian/app.json`` when None
        media_url_prefix: URL prefix attachments are served under
        include_tags_in_graph: Add tag nodes to the link graph
        title_case: Title-case output titles
        layout: Optional ``layout`` frontmatter value for every page
        use_git_dates: Fill missing ``date`` from git history
        dry_run: Run every stage without writing output
    """
    vault_path: Path
    output_dir: Path
    static_dir: Optional[Path] = None
    publish_mode: str = BLOCKLIST
    blocklist_tag: str = "not-for-public"
    allowlist_key: str = "publish"
    allowlist_value: Any = True
    attachment_folder: Optional[str] = None
    media_url_prefix: str = "/media"
    include_tags_in_graph: bool = True
    title_case: bool = False
    layout: Optional[str] = None
    use_git_dates: bool = False
    dry_run: bool = False

    def __post_init__(self):
        self.vault_path = Path(self.vault_path)
        self.output_dir = Path(self.output_dir)
        self.static_dir = Path(self.static_dir) if self.static_dir else None
        if self.publish_mode not in PUBLISH_MODES:
            modes = ', '.join(PUBLISH_MODES)
            raise ConfigError(f"Unknown publish mode '{self.publish_mode}' (expected one of: {modes})")
        self.media_url_prefix = '/' + self.media_url_prefix.strip('/')

    @property
    def media_dir(self) -> Path:
        return (self.static_dir or self.output_dir) / "media"

    @classmethod
    def from_env(
        cls,
        vault_path: Path,
        output_dir: Path,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "PreprocessConfig":
        """Build a config from ``PUBLISH_MODE`` style environment variables.

        Explicit keyword overrides win over the environment.
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        if env.get('PUBLISH_MODE'):
            values['publish_mode'] = env['PUBLISH_MODE']
        if env.get('BLOCKLIST_TAG'):
            values['blocklist_tag'] = env['BLOCKLIST_TAG']
        if env.get('ALLOWLIST_KEY'):
            values['allowlist_key'] = env['ALLOWLIST_KEY']
        if env.get('ALLOWLIST_VALUE') == 'false':
            values['allowlist_value'] = False
        values.update(overrides)
        return cls(vault_path=vault_path, output_dir=output_dir, **values)

    def with_overrides(self, **overrides: Any) -> "PreprocessConfig":
        return replace(self, **overrides)


def load_config(config_path: Path, environ: Optional[Mapping[str, str]] = None) -> PreprocessConfig:
    """Load a YAML site config file.

    Relative ``vault_path``, ``output_dir`` and ``static_dir`` entries are
    resolved against the config file's directory. Keys not known to
    :class:`PreprocessConfig` are logged and ignored.

    Args:
        config_path: Path to the YAML file
        environ: Environment mapping (default: ``os.environ``)

    Returns:
        PreprocessConfig with file settings layered over the environment

    Raises:
        ConfigError: If the file is missing, unparsable, or incomplete
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}", path=config_path)

    try:
        data = yaml.safe_load(config_path.read_text(encoding='utf-8')) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {config_path.name}: {e}", path=config_path) from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a mapping", path=config_path)

    base_dir = config_path.parent
    for key in ('vault_path', 'output_dir', 'static_dir'):
        if data.get(key):
            data[key] = base_dir / Path(data[key]).expanduser()

    missing = [key for key in ('vault_path', 'output_dir') if not data.get(key)]
    if missing:
        raise ConfigError(f"{config_path.name} is missing: {', '.join(missing)}", path=config_path)

    known = {f.name for f in fields(PreprocessConfig)}
    unknown = sorted(k for k in data if k not in known)
    if unknown:
        logger.warning("Ignoring unknown keys in %s: %s", config_path.name, ", ".join(unknown))
    settings = {k: v for k, v in data.items() if k in known and k not in ('vault_path', 'output_dir')}

    return PreprocessConfig.from_env(
        data['vault_path'],
        data['output_dir'],
        environ=environ,
        **settings,
    )


def read_vault_config(vault_path: Path) -> VaultConfig:
    """Read attachment settings from ``.obsidian/app.json``.

    Falls back to defaults when the file is missing or unreadable.

    Args:
        vault_path: Root of the Obsidian vault

    Returns:
        VaultConfig
    """
    config_path = Path(vault_path) / '.obsidian' / 'app.json'

    if not config_path.exists():
        logger.info("No .obsidian/app.json found, using defaults")
        return VaultConfig()

    try:
        data = json.loads(config_path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        logger.warning("Error reading %s: %s, using defaults", config_path, e)
        return VaultConfig()

    if not isinstance(data, dict):
        logger.warning("%s is not a JSON object, using defaults", config_path)
        return VaultConfig()

    attachment_folder = data.get('attachmentFolderPath') or OBSIDIAN_DEFAULTS['attachmentFolderPath']
    if attachment_folder.startswith('./'):
        attachment_folder = attachment_folder[2:]
    attachment_folder = attachment_folder.strip('/') or '.'

    result = VaultConfig(attachment_folder=attachment_folder)
    logger.info("Attachment folder: %s", result.attachment_folder)
    return result
