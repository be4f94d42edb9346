"""Staging directories that remember everything they created."""

from __future__ import annotations

import logging
import pathlib
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import List, Tuple

logger = logging.getLogger(__name__)

TeardownFailures = List[Tuple[pathlib.Path, OSError]]


@dataclass
class ScratchWorkspace:
    """A staging tree plus the log of paths to remove when the run ends.

    ``created_paths`` is append-only. A path must be tracked before the
    operation that creates it, so a half-finished copy is still removed.
    """

    root_path: pathlib.Path
    created_paths: List[pathlib.Path] = field(default_factory=list)
    displaced: List[Tuple[pathlib.Path, pathlib.Path]] = field(default_factory=list)
    torn_down: bool = False

    @classmethod
    def create(cls, base_dir: pathlib.Path, prefix: str = "npm-publish-") -> "ScratchWorkspace":
        """Allocate a fresh, uniquely named directory under ``base_dir``."""
        base_dir.mkdir(parents=True, exist_ok=True)
        root = pathlib.Path(tempfile.mkdtemp(prefix=prefix, dir=base_dir))
        workspace = cls(root)
        workspace.track(root)
        return workspace

    @classmethod
    def at(cls, root_path: pathlib.Path, owned: bool) -> "ScratchWorkspace":
        """Wrap a fixed location.

        An owned root is tracked up front and removed at teardown; an unowned
        root (the operator's own docs directory) never is.
        """
        workspace = cls(root_path)
        if owned:
            workspace.track(root_path)
        return workspace

    def track(self, path: pathlib.Path) -> pathlib.Path:
        if self.torn_down:
            raise RuntimeError(f"Workspace {self.root_path} was already torn down")
        self.created_paths.append(path)
        return path

    def claim(self, path: pathlib.Path) -> pathlib.Path:
        """Track the outermost missing ancestor of ``path`` within the root.

        Anything that already exists belongs to someone else and stays
        untracked. Returns ``path``.
        """
        target = self.root_path / path
        if target.exists() or target.is_symlink():
            return target

        outermost = target
        for parent in target.parents:
            if parent == self.root_path or parent.exists():
                break
            outermost = parent
        if outermost not in self.created_paths:
            self.track(outermost)
        return target

    def displace(self, path: pathlib.Path) -> pathlib.Path:
        """Move an existing ``path`` aside so this run can regenerate it.

        The original comes back at teardown, after whatever replaced it is
        removed. A missing path is claimed instead. Returns ``path``.
        """
        target = self.root_path / path
        if not (target.exists() or target.is_symlink()):
            return self.claim(path)
        if self.torn_down:
            raise RuntimeError(f"Workspace {self.root_path} was already torn down")

        backup_dir = pathlib.Path(tempfile.mkdtemp(prefix="npm-publish-backup-"))
        backup = backup_dir / target.name
        logger.debug(f"Moving {target} aside to {backup}")
        shutil.move(str(target), str(backup))
        self.displaced.append((target, backup))
        self.track(target)
        return target

    def teardown(self) -> TeardownFailures:
        """Remove every tracked path, newest first.

        Displaced originals are put back afterwards. Keeps going past
        individual failures and returns them. Paths that are already gone are
        skipped. Only the first call does anything.
        """
        if self.torn_down:
            return []
        self.torn_down = True

        failures: TeardownFailures = []
        for path in reversed(self.created_paths):
            try:
                _remove(path)
            except OSError as exc:
                logger.warning(f"Unable to remove {path}: {exc}")
                failures.append((path, exc))

        for original, backup in reversed(self.displaced):
            try:
                _remove(original)
                original.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(backup), str(original))
                backup.parent.rmdir()
            except OSError as exc:
                logger.warning(f"Unable to restore {original} from {backup}: {exc}")
                failures.append((original, exc))
        return failures


def _remove(path: pathlib.Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink(missing_ok=True)
    elif path.is_dir():
        shutil.rmtree(path)
