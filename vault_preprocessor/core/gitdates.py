"""Last-modified dates from git history."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def get_last_modified_date(file_path: Path, repo_path: Path) -> Optional[str]:
    """Get the ISO date of the last commit touching a file.

    Args:
        file_path: Absolute path to the file
        repo_path: Path to the git repository

    Returns:
        ISO 8601 author date, or None when git is unavailable or the file
        has no history
    """
    try:
        relative_path = Path(file_path).resolve().relative_to(Path(repo_path).resolve())
    except ValueError:
        return None

    try:
        completed = subprocess.run(
            ['git', 'log', '-1', '--format=%aI', '--', relative_path.as_posix()],
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        logger.debug("git unavailable: %s", e)
        return None

    if completed.returncode != 0:
        return None
    return completed.stdout.strip() or None
