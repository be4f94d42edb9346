"""Shared names, paths and exit codes."""

import pathlib

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_UNCAUGHT = 99
EXIT_INTERRUPTED = 130

PACKAGE_DIR = pathlib.Path(__file__).parent
DEFAULTS_DIR = PACKAGE_DIR / "defaults"
THEME_DIR = PACKAGE_DIR / "themes" / "jekyll"

DOCS_DIR_NAME = "docs"
PAGES_DIR_NAME = "gh-pages"
PAGES_BRANCH = "gh-pages"
REMOTE_NAME = "origin"
PRIMARY_BRANCH = "master"
JSDOC_CONFIG_NAME = "jsdoc.conf"
MANIFEST_NAME = "package.json"

# Paths inside a staging tree
THEME_DEST = pathlib.Path("themes") / "npm-publish-scripts"
REFERENCE_DOCS_DIR = "reference-docs"
RELEASE_INDEX_PATH = pathlib.Path("_data") / "releases.yml"
GEMFILE_NAME = "Gemfile"
JEKYLL_BUILD_DIRS = ("_site", ".jekyll-cache", ".sass-cache")
JEKYLL_OUTPUTS = (*JEKYLL_BUILD_DIRS, "Gemfile.lock")

RELEASE_CHANNELS = ("stable", "beta", "alpha")

NO_TEST_SCRIPT_WARNING = (
    "No test script found in package.json. Consider adding tests before "
    "publishing a release."
)
