"""Platform-specific locations and file-attribute handling."""

from idekit.platform.paths import IdePaths, get_accounts_file_path, resolve_ide_paths
from idekit.platform.permissions import ReadOnlyGuard, default_guard

__all__ = [
    "IdePaths",
    "ReadOnlyGuard",
    "default_guard",
    "get_accounts_file_path",
    "resolve_ide_paths",
]
