"""Centralized path management for pkgdocs.

The local content root defaults to a directory anchored next to the project
checkout. PKGDOCS_PACKAGES_ROOT (read by settings) overrides it.
"""

from pathlib import Path

# Directory name of the monorepo checkout served in local mode
DEFAULT_PACKAGES_DIRNAME = "react-base-core"


def get_project_root() -> Path:
    """Get the directory containing the pkgdocs package."""
    return Path(__file__).resolve().parent.parent


def get_default_packages_root() -> Path:
    """Get the default local content root.

    Resolved relative to a fixed anchor (the project checkout), so it does
    not depend on the working directory the server is launched from:
    <project>/../react-base-core
    """
    return (get_project_root().parent / DEFAULT_PACKAGES_DIRNAME).resolve()
