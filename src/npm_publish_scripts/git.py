"""git commands for release tags and the pages branch."""

from __future__ import annotations

import logging
import pathlib
from typing import Optional, Sequence

from .constants import REMOTE_NAME
from .exceptions import PreconditionFailure
from .process import ProcessRunner

logger = logging.getLogger(__name__)


class GitClient:
    def __init__(
        self,
        runner: ProcessRunner,
        project_dir: pathlib.Path,
        remote: str = REMOTE_NAME,
    ):
        self.runner = runner
        self.project_dir = project_dir
        self.remote = remote

    async def _output(self, args: Sequence[str], cwd: Optional[pathlib.Path] = None) -> str:
        result = await self.runner.run(
            "git", list(args), cwd=cwd or self.project_dir, capture=True
        )
        return result.stdout.strip()

    async def current_branch(self) -> str:
        branch = await self._output(["rev-parse", "--abbrev-ref", "HEAD"])
        if not branch or branch == "HEAD":
            raise PreconditionFailure("Unable to determine the current git branch.")
        return branch

    async def remote_url(self) -> str:
        url = await self._output(["config", "--get", f"remote.{self.remote}.url"])
        if not url:
            raise PreconditionFailure(f"No URL configured for git remote '{self.remote}'.")
        return url

    async def commit_files(self, paths: Sequence[pathlib.Path], message: str) -> None:
        names = [str(p.relative_to(self.project_dir)) for p in paths if p.exists()]
        await self.runner.run("git", ["add", *names], cwd=self.project_dir)
        status = await self._output(["status", "--porcelain", "--", *names])
        if status:
            await self.runner.run("git", ["commit", "-m", message, "--", *names], cwd=self.project_dir)

    async def tag_exists(self, tag: str) -> bool:
        return bool(await self._output(["tag", "--list", tag]))

    async def push_tag(self, tag: str) -> None:
        """Create ``tag`` at HEAD unless it exists, then push it.

        Safe to run again after a failed push.
        """
        if not await self.tag_exists(tag):
            await self.runner.run("git", ["tag", tag], cwd=self.project_dir)
        await self.runner.run("git", ["push", self.remote, tag], cwd=self.project_dir)

    async def checkout_pages(self, dest: pathlib.Path, branch: str) -> None:
        """Check out ``branch`` of the project's remote into ``dest``.

        A remote without the branch gets a fresh orphan branch.
        """
        url = await self.remote_url()
        heads = await self._output(["ls-remote", "--heads", url, branch])
        if heads:
            await self.runner.run(
                "git",
                ["clone", "--depth", "1", "--branch", branch, "--single-branch", url, str(dest)],
                cwd=dest.parent,
            )
            return

        logger.info(f"Remote has no '{branch}' branch, starting a new one.")
        await self.runner.run("git", ["init", str(dest)], cwd=dest.parent)
        await self.runner.run("git", ["checkout", "--orphan", branch], cwd=dest)
        await self.runner.run("git", ["remote", "add", self.remote, url], cwd=dest)

    async def publish_pages(self, checkout: pathlib.Path, branch: str, message: str) -> bool:
        """Commit everything in the checkout and push it.

        Returns False when there was nothing to publish.
        """
        await self.runner.run("git", ["add", "--all", "."], cwd=checkout)
        if not await self._output(["status", "--porcelain"], cwd=checkout):
            return False
        await self.runner.run("git", ["commit", "-m", message], cwd=checkout)
        await self.runner.run("git", ["push", self.remote, branch], cwd=checkout)
        return True
