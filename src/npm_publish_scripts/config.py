"""Run configuration assembled from CLI options."""

import pathlib
from dataclasses import dataclass, field

from .constants import (
    DOCS_DIR_NAME,
    JSDOC_CONFIG_NAME,
    PAGES_BRANCH,
    PAGES_DIR_NAME,
    PRIMARY_BRANCH,
    REMOTE_NAME,
)


@dataclass
class PublishConfig:
    """Where the project lives and which branches and remotes to use."""

    project_dir: pathlib.Path = field(default_factory=pathlib.Path.cwd)
    docs_dir_name: str = DOCS_DIR_NAME
    pages_dir_name: str = PAGES_DIR_NAME
    pages_branch: str = PAGES_BRANCH
    remote: str = REMOTE_NAME
    primary_branch: str = PRIMARY_BRANCH
    jsdoc_config_name: str = JSDOC_CONFIG_NAME
    verbose: bool = False

    @property
    def docs_dir(self) -> pathlib.Path:
        return self.project_dir / self.docs_dir_name

    @property
    def pages_dir(self) -> pathlib.Path:
        return self.project_dir / self.pages_dir_name

    @property
    def jsdoc_config(self) -> pathlib.Path:
        return self.project_dir / self.jsdoc_config_name
