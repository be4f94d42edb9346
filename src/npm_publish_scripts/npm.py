"""npm commands used by the release pipeline."""

from __future__ import annotations

import json
import logging
import pathlib
from typing import Optional

from .constants import MANIFEST_NAME
from .exceptions import PreconditionFailure, ProcessFailure
from .process import ProcessRunner

logger = logging.getLogger(__name__)


class NpmClient:
    def __init__(self, runner: ProcessRunner, project_dir: pathlib.Path):
        self.runner = runner
        self.project_dir = project_dir

    @property
    def manifest_path(self) -> pathlib.Path:
        return self.project_dir / MANIFEST_NAME

    def read_manifest(self) -> Optional[dict]:
        """Load package.json, or None when the project has none."""
        if not self.manifest_path.exists():
            return None
        try:
            with open(self.manifest_path, encoding="utf-8") as f:
                return json.load(f)
        except ValueError as exc:
            raise PreconditionFailure(f"Unable to parse {self.manifest_path}: {exc}") from exc

    async def run_script(self, name: str) -> None:
        await self.runner.run("npm", ["run", name], cwd=self.project_dir)

    async def ensure_logged_in(self) -> None:
        """Check the registry session and fall back to an interactive login."""
        try:
            result = await self.runner.run(
                "npm", ["whoami"], cwd=self.project_dir, capture=True
            )
            logger.info(f"Logged in to npm as {result.stdout.strip()}")
            return
        except ProcessFailure:
            logger.info("Not logged in to npm, starting npm login.")
        await self.runner.run("npm", ["login"], cwd=self.project_dir)

    async def bump_version(self, bump: str) -> str:
        """Bump the manifest version without touching git.

        Returns the new version as npm prints it, e.g. ``v1.2.3``.
        """
        result = await self.runner.run(
            "npm",
            ["version", "--no-git-tag-version", bump],
            cwd=self.project_dir,
            capture=True,
        )
        # npm may print lifecycle script output first; the version is last.
        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        return lines[-1] if lines else ""

    async def publish(self, dist_tag: Optional[str] = None) -> None:
        args = ["publish"]
        if dist_tag:
            args.extend(["--tag", dist_tag])
        await self.runner.run("npm", args, cwd=self.project_dir)
