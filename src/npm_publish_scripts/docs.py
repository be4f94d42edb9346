"""Serve the docs site locally or publish it to the pages branch."""

from __future__ import annotations

import dataclasses
import logging
import pathlib
import shutil
from dataclasses import dataclass
from typing import Callable, Optional

from .config import PublishConfig
from .constants import (
    DEFAULTS_DIR,
    GEMFILE_NAME,
    JEKYLL_BUILD_DIRS,
    JEKYLL_OUTPUTS,
    REFERENCE_DOCS_DIR,
    RELEASE_CHANNELS,
    RELEASE_INDEX_PATH,
    THEME_DEST,
    THEME_DIR,
)
from .exceptions import PreconditionFailure
from .git import GitClient
from .logging import print_banner
from .npm import NpmClient
from .process import ProcessRunner
from .prompts import Confirm, Prompter, Select, Text
from .release_index import write_release_index
from .workspace import ScratchWorkspace

logger = logging.getLogger(__name__)

# Top-level entries of a pages checkout that survive the purge step.
PRESERVED_ENTRIES = {".git", REFERENCE_DOCS_DIR}


@dataclass(frozen=True)
class ReferenceDocsTarget:
    """Channel and version label that generated reference docs are filed under."""

    tag: str
    version: str

    @property
    def path(self) -> pathlib.Path:
        return pathlib.Path(REFERENCE_DOCS_DIR) / self.tag / self.version


@dataclass(frozen=True)
class DocsContext:
    workspace: ScratchWorkspace
    local: bool
    reference_docs: Optional[ReferenceDocsTarget] = None

    @property
    def root(self) -> pathlib.Path:
        return self.workspace.root_path


class DocsPublisher:
    """Stages the docs site and either serves it or pushes it.

    Every step takes and returns a DocsContext; nothing about a run is kept on
    the publisher itself.
    """

    def __init__(
        self,
        config: PublishConfig,
        runner: ProcessRunner,
        git: GitClient,
        npm: NpmClient,
        prompter: Prompter,
        on_shutdown: Optional[Callable[[Callable], None]] = None,
    ):
        self.config = config
        self.runner = runner
        self.git = git
        self.npm = npm
        self.prompter = prompter
        self.on_shutdown = on_shutdown

    def _workspace(self, root: pathlib.Path, owned: bool) -> ScratchWorkspace:
        workspace = ScratchWorkspace.at(root, owned=owned)
        if self.on_shutdown:
            self.on_shutdown(workspace.teardown)
        return workspace

    def _require_docs(self) -> pathlib.Path:
        docs_dir = self.config.docs_dir
        if not docs_dir.is_dir():
            raise PreconditionFailure(
                f"Unable to find a '{self.config.docs_dir_name}' directory in "
                f"{self.config.project_dir}. Run 'npm-publish-scripts init' to create one."
            )
        return docs_dir

    async def serve(self) -> None:
        """Stage generated files into the docs directory and run Jekyll.

        Returns when Jekyll exits. Only files this run created are removed
        afterwards.
        """
        docs_dir = self._require_docs()
        ctx = DocsContext(self._workspace(docs_dir, owned=False), local=True)
        try:
            self.purge(ctx)
            self.copy_theme(ctx)
            self.stage_gemfile(ctx)
            ctx = await self.choose_reference_docs(ctx)
            await self.build_reference_docs(ctx)
            self.build_release_index(ctx)

            for name in JEKYLL_OUTPUTS:
                ctx.workspace.claim(pathlib.Path(name))
            print_banner("Starting Jekyll serve.")
            await self.runner.run("bundle", ["install"], cwd=docs_dir)
            await self.runner.run(
                "bundle",
                ["exec", "jekyll", "serve", "--trace", "--config", "_config.yml"],
                cwd=docs_dir,
            )
        finally:
            logger.info("Removing generated docs files.")
            ctx.workspace.teardown()

    async def publish(self, release: Optional[ReferenceDocsTarget] = None) -> None:
        """Rebuild the docs in a pages checkout and push it.

        ``release`` fixes where reference docs go; without it the operator is
        asked. The checkout is deleted whether or not the push succeeds.
        """
        pages_dir = self.config.pages_dir
        if pages_dir.exists():
            raise PreconditionFailure(
                f"The directory '{self.config.pages_dir_name}' already exists. "
                "Please delete it and try again."
            )
        docs_dir = self._require_docs()

        ctx = DocsContext(
            self._workspace(pages_dir, owned=True), local=False, reference_docs=release
        )
        try:
            await self.checkout_pages(ctx)
            self.purge(ctx)
            self.copy_sources(ctx, docs_dir)
            self.copy_theme(ctx)
            ctx = await self.choose_reference_docs(ctx)
            await self.build_reference_docs(ctx)
            self.build_release_index(ctx)
            await self.push(ctx)
        finally:
            ctx.workspace.teardown()

    async def checkout_pages(self, ctx: DocsContext) -> None:
        print_banner(f"Checking out the '{self.config.pages_branch}' branch.")
        await self.git.checkout_pages(ctx.root, self.config.pages_branch)

    def purge(self, ctx: DocsContext) -> None:
        """Drop stale generated files before staging.

        Locally that is Jekyll's previous build, moved aside until the run
        ends. A pages checkout loses everything but history and git data.
        """
        if ctx.local:
            for name in JEKYLL_BUILD_DIRS:
                ctx.workspace.displace(pathlib.Path(name))
            return
        for entry in ctx.root.iterdir():
            if entry.name in PRESERVED_ENTRIES:
                continue
            logger.debug(f"Removing {entry}")
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()

    def copy_sources(self, ctx: DocsContext, docs_dir: pathlib.Path) -> None:
        logger.info(f"Copying {docs_dir} into {ctx.root}")
        shutil.copytree(docs_dir, ctx.root, dirs_exist_ok=True)

    def copy_theme(self, ctx: DocsContext) -> None:
        dest = ctx.workspace.claim(THEME_DEST)
        shutil.copytree(THEME_DIR, dest, dirs_exist_ok=True)

    def stage_gemfile(self, ctx: DocsContext) -> None:
        """Put a Gemfile next to the docs so bundler can find Jekyll."""
        dest = ctx.root / GEMFILE_NAME
        if dest.exists():
            return
        source = self.config.project_dir / GEMFILE_NAME
        if not source.exists():
            source = DEFAULTS_DIR / GEMFILE_NAME
        ctx.workspace.track(dest)
        shutil.copy2(source, dest)

    async def choose_reference_docs(self, ctx: DocsContext) -> DocsContext:
        """Decide where reference docs go, asking the operator when needed."""
        if ctx.reference_docs is not None or not self.config.jsdoc_config.exists():
            return ctx

        manifest = self.npm.read_manifest() or {}
        default_version = f"v{manifest['version']}" if manifest.get("version") else ""
        answers = await self.prompter.ask([
            Confirm(
                "build_reference_docs",
                "Would you like to build new reference docs?",
                default=True,
            ),
            Select(
                "tag",
                "Which release channel should the docs be listed under?",
                choices=RELEASE_CHANNELS,
                default="stable",
                when=lambda answers: answers["build_reference_docs"],
            ),
            Text(
                "version",
                "Which version are these docs for?",
                default=default_version,
                when=lambda answers: answers["build_reference_docs"],
            ),
        ])
        if not answers.get("build_reference_docs") or not answers.get("version"):
            logger.info("Skipping reference docs, only the site theme will be updated.")
            return ctx
        return dataclasses.replace(
            ctx, reference_docs=ReferenceDocsTarget(answers["tag"], answers["version"])
        )

    def _jsdoc_command(self) -> str:
        local = self.config.project_dir / "node_modules" / ".bin" / "jsdoc"
        return str(local) if local.exists() else "jsdoc"

    async def build_reference_docs(self, ctx: DocsContext) -> None:
        jsdoc_config = self.config.jsdoc_config
        if not jsdoc_config.exists():
            logger.info(f"No {jsdoc_config.name} found, skipping reference docs.")
            return
        if ctx.reference_docs is None:
            return

        dest = ctx.root / ctx.reference_docs.path
        if ctx.local:
            ctx.workspace.displace(ctx.reference_docs.path)
        else:
            if dest.exists():
                shutil.rmtree(dest)
            ctx.workspace.claim(ctx.reference_docs.path)

        print_banner(f"Building reference docs into {ctx.reference_docs.path}")
        await self.runner.run(
            self._jsdoc_command(),
            ["-c", str(jsdoc_config), "-d", str(dest)],
            cwd=self.config.project_dir,
        )

    def build_release_index(self, ctx: DocsContext) -> None:
        if (ctx.root / REFERENCE_DOCS_DIR).is_dir():
            if ctx.local:
                ctx.workspace.displace(RELEASE_INDEX_PATH)
            else:
                ctx.workspace.claim(RELEASE_INDEX_PATH)
        write_release_index(ctx.root)

    async def push(self, ctx: DocsContext) -> None:
        print_banner(f"Pushing docs to '{self.config.pages_branch}'.")
        message = "Updating docs"
        if ctx.reference_docs:
            message = f"Updating docs for {ctx.reference_docs.version}"
        pushed = await self.git.publish_pages(ctx.root, self.config.pages_branch, message)
        if not pushed:
            logger.info("No documentation changes to publish.")
