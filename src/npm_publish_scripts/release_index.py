"""Group reference docs into release channels for the docs site."""

from __future__ import annotations

import logging
import pathlib
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import yaml

from .constants import REFERENCE_DOCS_DIR, RELEASE_CHANNELS, RELEASE_INDEX_PATH

logger = logging.getLogger(__name__)

_SEMVER = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?")


@dataclass
class ChannelReleases:
    all: List[str] = field(default_factory=list)

    @property
    def latest(self) -> Optional[str]:
        return self.all[0] if self.all else None


@dataclass
class ReleaseIndex:
    channels: Dict[str, ChannelReleases] = field(default_factory=dict)
    other: List[str] = field(default_factory=list)

    def to_data(self) -> dict:
        """Plain data for the site generator, with paths relative to the site root."""
        data: dict = {}
        for channel, releases in self.channels.items():
            entries = [
                {"name": name, "path": f"{REFERENCE_DOCS_DIR}/{channel}/{name}/"}
                for name in releases.all
            ]
            data[channel] = {
                "latest": entries[0] if entries else None,
                "all": entries,
            }
        data["other"] = [
            {"name": name, "path": f"{REFERENCE_DOCS_DIR}/{name}/"}
            for name in self.other
        ]
        return data


def _semver_key(label: str) -> Tuple:
    """Sort key placing higher versions first when used with reverse=True.

    A release outranks its own prereleases; unparseable labels sort last.
    """
    match = _SEMVER.match(label)
    if not match:
        return (0, (), 0, label)
    major, minor, patch, prerelease = match.groups()
    return (1, (int(major), int(minor), int(patch)), 0 if prerelease else 1, prerelease or "")


def sort_versions(labels: List[str]) -> List[str]:
    """Order version labels from highest to lowest semantic version."""
    return sorted(labels, key=_semver_key, reverse=True)


def build_release_index(reference_docs: pathlib.Path) -> Optional[ReleaseIndex]:
    """Scan a reference-docs directory.

    Returns None when the directory does not exist.
    """
    if not reference_docs.is_dir():
        return None

    index = ReleaseIndex(channels={channel: ChannelReleases() for channel in RELEASE_CHANNELS})
    for entry in reference_docs.iterdir():
        if not entry.is_dir():
            continue
        if entry.name in RELEASE_CHANNELS:
            versions = [child.name for child in entry.iterdir() if child.is_dir()]
            index.channels[entry.name] = ChannelReleases(sort_versions(versions))
        elif (entry / "index.html").is_file():
            index.other.append(entry.name)

    index.other.sort()
    return index


def write_release_index(staging_root: pathlib.Path) -> Optional[pathlib.Path]:
    """Rebuild ``_data/releases.yml`` from the staging tree's reference docs."""
    index = build_release_index(staging_root / REFERENCE_DOCS_DIR)
    if index is None:
        logger.info("No reference docs found, skipping release index.")
        return None

    target = staging_root / RELEASE_INDEX_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        yaml.safe_dump(index.to_data(), f, default_flow_style=False, sort_keys=False)

    for channel, releases in index.channels.items():
        if releases.latest:
            logger.debug(f"Latest {channel} release docs: {releases.latest}")
    return target
