"""Exceptions raised while assembling a bundle."""

from __future__ import annotations


class BundleError(RuntimeError):
    """Base class for fatal bundle build failures."""


class ConfigError(BundleError):
    """Raised when the build configuration cannot be resolved."""


class NoRootFileError(ConfigError):
    """Raised when no root module can be selected for the bundle."""

    def __init__(self) -> None:
        super().__init__(
            "You need to set the package root file explicitly, e.g. `--main index.js`. "
            "This is the file that's exported as the root of the package."
        )


class GraphError(BundleError):
    """Raised when the package graph is unusable."""


class NoFilesError(GraphError):
    """Raised when no packages remain after root correction."""

    def __init__(self) -> None:
        super().__init__("No files were included in the build. Check your include paths.")


class FilesystemError(BundleError):
    """Raised when the filesystem disagrees with the package graph."""


class MissingFileError(FilesystemError, FileNotFoundError):
    """Raised when a file listed in the graph does not exist."""

    def __init__(self, path: str, basepath: str) -> None:
        super().__init__(f"File not found: {path} Basepath = \"{basepath}\", filename=\"{path}\"")
        self.path = path
        self.basepath = basepath


class ExecutionError(BundleError):
    """Raised when a file transform fails while the plan is running."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path
