"""Project scaffolding for the init command."""

import logging
import pathlib
import shutil
from typing import List

from .constants import DEFAULTS_DIR

logger = logging.getLogger(__name__)


def init_project(project_dir: pathlib.Path) -> List[pathlib.Path]:
    """Copy the default docs site and config files into ``project_dir``.

    Files that already exist are left alone, so running this twice is safe.
    Returns the files that were created.
    """
    created = []
    for source in sorted(DEFAULTS_DIR.rglob("*")):
        if not source.is_file():
            continue
        relative = source.relative_to(DEFAULTS_DIR)
        dest = project_dir / relative
        if dest.exists():
            logger.info(f"Skipping {relative}, it already exists.")
            continue
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
        logger.info(f"Created {relative}")
        created.append(dest)
    return created
