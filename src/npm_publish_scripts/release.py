"""The publish-release workflow: checks, npm publish, git tag and docs."""

from __future__ import annotations

import dataclasses
import enum
import logging
import re
from dataclasses import dataclass
from typing import Optional

from .config import PublishConfig
from .constants import NO_TEST_SCRIPT_WARNING
from .docs import DocsPublisher, ReferenceDocsTarget
from .exceptions import PublishScriptsError, UserDeclined
from .git import GitClient
from .logging import print_banner
from .npm import NpmClient
from .prompts import Confirm, Prompter, Select

logger = logging.getLogger(__name__)

_VERSION = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(-[0-9A-Za-z.-]+)?$")


class VersionBump(str, enum.Enum):
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    def apply(self, current: str) -> Optional[str]:
        """The version npm will produce from ``current``, or None if unparseable."""
        match = _VERSION.match(current)
        if not match:
            return None
        major, minor, patch = (int(part) for part in match.groups()[:3])
        # A prerelease bumps to its own release when nothing lower is set.
        prerelease = match.group(4) is not None
        if self is VersionBump.MAJOR:
            if prerelease and minor == 0 and patch == 0:
                return f"v{major}.0.0"
            return f"v{major + 1}.0.0"
        if self is VersionBump.MINOR:
            if prerelease and patch == 0:
                return f"v{major}.{minor}.0"
            return f"v{major}.{minor + 1}.0"
        if prerelease:
            return f"v{major}.{minor}.{patch}"
        return f"v{major}.{minor}.{patch + 1}"


class ReleaseTag(str, enum.Enum):
    STABLE = "stable"
    BETA = "beta"
    ALPHA = "alpha"


@dataclass(frozen=True)
class PublishDetails:
    version_bump: VersionBump = VersionBump.PATCH
    release_tag: ReleaseTag = ReleaseTag.STABLE

    @property
    def dist_tag(self) -> Optional[str]:
        """npm dist-tag for the release; stable releases use npm's default."""
        if self.release_tag is ReleaseTag.STABLE:
            return None
        return self.release_tag.value

    def git_tag(self, version: str) -> str:
        if self.dist_tag:
            return f"{version}-{self.dist_tag}"
        return version


@dataclass(frozen=True)
class ReleaseContext:
    """What the release has settled so far. Each step returns a new one."""

    branch: Optional[str] = None
    details: Optional[PublishDetails] = None
    version: Optional[str] = None

    def require_details(self) -> PublishDetails:
        if self.details is None:
            raise RuntimeError("Publish details have not been captured yet")
        return self.details

    def require_version(self) -> str:
        if self.version is None:
            raise RuntimeError("The package version has not been bumped yet")
        return self.version


class ReleasePipeline:
    """Runs the release steps in order, stopping at the first failure."""

    def __init__(
        self,
        config: PublishConfig,
        git: GitClient,
        npm: NpmClient,
        prompter: Prompter,
        docs: DocsPublisher,
    ):
        self.config = config
        self.git = git
        self.npm = npm
        self.prompter = prompter
        self.docs = docs

    async def run(self) -> ReleaseContext:
        ctx = ReleaseContext()
        ctx = await self.confirm_expected_git_branch(ctx)
        ctx = await self.get_publish_details(ctx)
        await self.run_npm_scripts()
        await self.login_to_npm()
        await self.confirm_new_package_version(ctx)
        ctx = await self.update_package_version(ctx)
        await self.publish_to_npm(ctx)
        await self.push_git_tag(ctx)
        await self.publish_docs(ctx)
        print_banner(f"Released {ctx.version}.", style="bold green")
        return ctx

    async def confirm_expected_git_branch(self, ctx: ReleaseContext) -> ReleaseContext:
        """Ask before releasing from anything but the primary branch."""
        branch = await self.git.current_branch()
        if branch != self.config.primary_branch:
            answers = await self.prompter.ask([
                Confirm(
                    "publish",
                    f"You are on the '{branch}' branch, not "
                    f"'{self.config.primary_branch}'. Do you want to publish anyway?",
                    default=False,
                )
            ])
            if not answers.get("publish"):
                raise UserDeclined(f"Release from branch '{branch}' declined.")
        return dataclasses.replace(ctx, branch=branch)

    async def get_publish_details(self, ctx: ReleaseContext) -> ReleaseContext:
        answers = await self.prompter.ask([
            Select(
                "version",
                "Is this a patch, minor or major version change?",
                choices=[bump.value for bump in VersionBump],
                default=VersionBump.PATCH.value,
            ),
            Select(
                "tag",
                "Is this a stable, beta or alpha release?",
                choices=[tag.value for tag in ReleaseTag],
                default=ReleaseTag.STABLE.value,
            ),
        ])
        details = PublishDetails(
            version_bump=VersionBump(answers["version"]),
            release_tag=ReleaseTag(answers["tag"]),
        )
        return dataclasses.replace(ctx, details=details)

    async def run_npm_scripts(self) -> None:
        """Run the project's build and test scripts, build first."""
        manifest = self.npm.read_manifest()
        if manifest is None:
            logger.debug("No package.json found, skipping npm scripts.")
            return

        scripts = manifest.get("scripts") or {}
        if "test" not in scripts:
            logger.warning(NO_TEST_SCRIPT_WARNING)
        for name in ("build", "test"):
            if name in scripts:
                print_banner(f"Running npm script '{name}'.")
                await self.npm.run_script(name)

    async def login_to_npm(self) -> None:
        print_banner("Checking npm login.")
        await self.npm.ensure_logged_in()

    async def confirm_new_package_version(self, ctx: ReleaseContext) -> None:
        details = ctx.require_details()
        manifest = self.npm.read_manifest() or {}
        name = manifest.get("name", "this package")
        next_version = details.version_bump.apply(str(manifest.get("version", "")))
        if next_version:
            tag = details.git_tag(next_version)
            release = f"{name} {next_version} (git tag {tag})"
        else:
            release = f"a new {details.version_bump.value} version of {name}"
        answers = await self.prompter.ask([
            Confirm(
                "publish",
                f"Publish {release} to the '{details.release_tag.value}' channel?",
                default=False,
            )
        ])
        if not answers.get("publish"):
            raise UserDeclined("Release declined at version confirmation.")

    async def update_package_version(self, ctx: ReleaseContext) -> ReleaseContext:
        details = ctx.require_details()
        version = await self.npm.bump_version(details.version_bump.value)
        if not version:
            raise PublishScriptsError("npm version did not report the new version.")
        logger.info(f"New package version: {version}")
        return dataclasses.replace(ctx, version=version)

    async def publish_to_npm(self, ctx: ReleaseContext) -> None:
        details = ctx.require_details()
        print_banner(f"Publishing {ctx.require_version()} to npm.")
        await self.npm.publish(details.dist_tag)

    async def push_git_tag(self, ctx: ReleaseContext) -> None:
        """Commit the version bump and push its tag.

        npm already has the package at this point, so a failure names the
        commands that finish the job by hand. Re-running them is safe.
        """
        version = ctx.require_version()
        tag = ctx.require_details().git_tag(version)
        print_banner(f"Pushing git tag {tag}.")
        try:
            manifests = [self.npm.manifest_path, self.npm.manifest_path.with_name("package-lock.json")]
            await self.git.commit_files(manifests, version)
            await self.git.push_tag(tag)
        except PublishScriptsError as exc:
            raise PublishScriptsError(
                f"{exc} (the package is already published to npm; finish with "
                f"'git tag {tag} && git push {self.git.remote} {tag}')"
            ) from exc

    async def publish_docs(self, ctx: ReleaseContext) -> None:
        details = ctx.require_details()
        await self.docs.publish(
            ReferenceDocsTarget(details.release_tag.value, ctx.require_version())
        )
