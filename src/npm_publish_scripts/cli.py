"""CLI entry point for npm-publish-scripts."""

from __future__ import annotations

import asyncio
import logging
import pathlib
import signal
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional

import click

from . import __version__
from .config import PublishConfig
from .constants import EXIT_FAILURE, EXIT_SUCCESS
from .docs import DocsPublisher
from .exceptions import OperatorInterrupt, PublishScriptsError, UserDeclined
from .git import GitClient
from .lifecycle import ExitLifecycle, ShutdownCause
from .logging import setup_logging
from .npm import NpmClient
from .process import ProcessRunner
from .prompts import Prompter, QuestionaryPrompter
from .release import ReleasePipeline
from .scaffold import init_project

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = ("SIGINT", "SIGTERM", "SIGHUP")


@dataclass
class Services:
    """External collaborators for one invocation. Tests pass their own."""

    runner: ProcessRunner
    prompter: Prompter
    npm: NpmClient
    git: GitClient
    docs: Optional[DocsPublisher] = None

    @classmethod
    def default(cls, config: PublishConfig) -> "Services":
        runner = ProcessRunner()
        return cls(
            runner=runner,
            prompter=QuestionaryPrompter(),
            npm=NpmClient(runner, config.project_dir),
            git=GitClient(runner, config.project_dir, remote=config.remote),
        )

    def docs_publisher(self, config: PublishConfig, lifecycle: ExitLifecycle) -> DocsPublisher:
        if self.docs is not None:
            return self.docs
        return DocsPublisher(
            config,
            self.runner,
            self.git,
            self.npm,
            self.prompter,
            on_shutdown=lifecycle.on_shutdown,
        )


async def supervise(lifecycle: ExitLifecycle, work: Awaitable[Any]) -> int:
    """Run ``work`` to completion and turn its outcome into an exit code.

    Installs the process signal handlers for the duration of the run. An
    interrupt cancels ``work``; either way the lifecycle shuts down once.
    """
    loop = asyncio.get_running_loop()
    task = asyncio.ensure_future(work)
    interrupted = False

    def _interrupt() -> None:
        nonlocal interrupted
        if interrupted:
            return
        interrupted = True
        click.echo("\n\nInterrupt received, cleaning up.\n", err=True)
        task.cancel()

    installed: List[signal.Signals] = []
    for name in SHUTDOWN_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        try:
            loop.add_signal_handler(signum, _interrupt)
        except (NotImplementedError, RuntimeError, ValueError):
            # Windows event loops and non-main threads can't take handlers.
            continue
        installed.append(signum)

    cause = ShutdownCause.NORMAL
    exit_code = EXIT_SUCCESS
    try:
        await task
    except asyncio.CancelledError:
        if not interrupted:
            raise
        cause = ShutdownCause.INTERRUPT
    except OperatorInterrupt:
        cause = ShutdownCause.INTERRUPT
    except UserDeclined:
        exit_code = EXIT_FAILURE
    except (PublishScriptsError, OSError) as exc:
        logger.error(str(exc))
        exit_code = EXIT_FAILURE
    except Exception:
        logger.exception("Uncaught exception intercepted.")
        cause = ShutdownCause.UNCAUGHT
    finally:
        for signum in installed:
            loop.remove_signal_handler(signum)

    return await lifecycle.shutdown(cause, exit_code)


def _run(ctx: click.Context, build: Callable[[PublishConfig, Services, ExitLifecycle], Awaitable[Any]]) -> None:
    config: PublishConfig = ctx.meta["config"]
    services = ctx.obj if isinstance(ctx.obj, Services) else Services.default(config)

    lifecycle = ExitLifecycle()
    lifecycle.on_shutdown(services.runner.terminate_all)

    async def _work() -> Any:
        return await build(config, services, lifecycle)

    async def _main() -> int:
        return await supervise(lifecycle, _work())

    ctx.exit(asyncio.run(_main()))


class PublishScriptsGroup(click.Group):
    """Group that answers unknown commands and options with help and exit 1."""

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        try:
            return super().parse_args(ctx, args)
        except click.NoSuchOption as exc:
            click.echo(f"Error: {exc.format_message()}", err=True)
            click.echo(ctx.get_help())
            ctx.exit(EXIT_FAILURE)

    def resolve_command(self, ctx: click.Context, args: List[str]):
        if args and not args[0].startswith("-") and self.get_command(ctx, args[0]) is None:
            click.echo(f"Invalid command given '{args[0]}'", err=True)
            click.echo(ctx.get_help())
            ctx.exit(EXIT_FAILURE)
        return super().resolve_command(ctx, args)


@click.group(
    cls=PublishScriptsGroup,
    invoke_without_command=True,
    context_settings={
        "help_option_names": ["-h", "--help"],
        "auto_envvar_prefix": "NPM_PUBLISH_SCRIPTS",
    },
)
@click.version_option(__version__, "-v", "--version", message="%(version)s")
@click.option(
    "--project-dir",
    type=click.Path(file_okay=False, path_type=pathlib.Path),
    default=".",
    show_default=True,
    help="Root of the npm project (where package.json lives).",
)
@click.option("--docs-dir", default="docs", show_default=True, help="Docs source directory name.")
@click.option(
    "--pages-dir",
    default="gh-pages",
    show_default=True,
    help="Directory the pages branch is checked out into while publishing.",
)
@click.option("--pages-branch", default="gh-pages", show_default=True, help="Branch the docs site is published to.")
@click.option("--remote", default="origin", show_default=True, help="git remote to push tags and docs to.")
@click.option(
    "--primary-branch",
    default="master",
    show_default=True,
    help="Branch releases are expected to be made from.",
)
@click.option(
    "--jsdoc-config",
    default="jsdoc.conf",
    show_default=True,
    help="JSDoc config file; reference docs are skipped when it is missing.",
)
@click.option("--verbose", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(
    ctx: click.Context,
    project_dir: pathlib.Path,
    docs_dir: str,
    pages_dir: str,
    pages_branch: str,
    remote: str,
    primary_branch: str,
    jsdoc_config: str,
    verbose: bool,
):
    """Scaffold, serve and publish docs, and publish npm releases."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(EXIT_FAILURE)

    setup_logging(verbose)
    ctx.meta["config"] = PublishConfig(
        project_dir=project_dir.resolve(),
        docs_dir_name=docs_dir,
        pages_dir_name=pages_dir,
        pages_branch=pages_branch,
        remote=remote,
        primary_branch=primary_branch,
        jsdoc_config_name=jsdoc_config,
        verbose=verbose,
    )


@main.command()
@click.pass_context
def init(ctx: click.Context):
    """Add default docs and config files, skipping any that exist."""
    config: PublishConfig = ctx.meta["config"]
    created = init_project(config.project_dir)
    if not created:
        click.echo("Nothing to do, every default file already exists.")


@main.command()
@click.pass_context
def serve(ctx: click.Context):
    """Serve the docs site locally with Jekyll."""
    _run(ctx, lambda config, services, lifecycle: services.docs_publisher(config, lifecycle).serve())


@main.command("publish-docs")
@click.pass_context
def publish_docs(ctx: click.Context):
    """Publish the docs site to the pages branch."""
    _run(ctx, lambda config, services, lifecycle: services.docs_publisher(config, lifecycle).publish())


@main.command("publish-release")
@click.pass_context
def publish_release(ctx: click.Context):
    """Build, test and publish a new npm release, then its docs."""

    def build(config: PublishConfig, services: Services, lifecycle: ExitLifecycle):
        pipeline = ReleasePipeline(
            config,
            services.git,
            services.npm,
            services.prompter,
            services.docs_publisher(config, lifecycle),
        )
        return pipeline.run()

    _run(ctx, build)


if __name__ == "__main__":
    main()
