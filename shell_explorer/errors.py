"""Exceptions raised by Shell Explorer."""


class ShellExplorerError(Exception):
    """Base class for errors reported to the user."""


class InvalidVersionError(ShellExplorerError, ValueError):
    """A version string could not be parsed."""

    def __init__(self, version: str):
        super().__init__(f"Invalid version format: {version}")
        self.version = version


class ManifestParseError(ShellExplorerError):
    """A package manifest exists but is not valid JSON or TOML."""

    def __init__(self, path, reason: str):
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = path


class BookmarksNotFoundError(ShellExplorerError):
    def __init__(self, path):
        super().__init__(
            f"Chrome bookmarks file not found at: {path}\n"
            "Make sure Chrome is installed and you have bookmarks saved."
        )
        self.path = path


class BookmarkFileError(ShellExplorerError):
    """The bookmarks file could not be read or parsed."""


class DirectoryReadError(ShellExplorerError):
    def __init__(self, path, reason):
        super().__init__(f"Cannot read directory {path}: {reason}")
        self.path = path
