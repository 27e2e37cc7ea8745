"""File-level transforms applied to module sources."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Mapping, Protocol

from ..errors import ExecutionError
from ..graph.models import FileRecord, PackageRecord
from ..utils import SOURCE_ENCODING, SOURCE_ERRORS

logger = logging.getLogger(__name__)


class FileTask(Protocol):
    name: str

    def __call__(self, source: str) -> str: ...


@dataclass(frozen=True, slots=True)
class WrapCommonJs:
    """Wrap a CommonJS module body in its registry factory function."""

    name: str = "wrap-commonjs"

    def __call__(self, source: str) -> str:
        return "function(module, exports, require){\n" + source + "\n}"


@dataclass(frozen=True, slots=True)
class WrapJson:
    name: str = "wrap-json"

    def __call__(self, source: str) -> str:
        return "function(module, exports, require){\nmodule.exports = " + source.strip() + ";\n}"


@dataclass(frozen=True, slots=True)
class ShellCommand:
    """Pipe module source through an external command (stdin -> stdout)."""

    extension: str
    command: str

    @property
    def name(self) -> str:
        return f"command:{self.extension}"

    def __call__(self, source: str) -> str:
        argv = shlex.split(self.command)
        try:
            proc = subprocess.run(
                argv,
                input=source,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding=SOURCE_ENCODING,
                errors=SOURCE_ERRORS,
                check=False,
            )
        except OSError as exc:
            raise ExecutionError(f"Unable to run '{self.command}': {exc}") from exc
        if proc.returncode != 0:
            raise ExecutionError(
                f"Command '{self.command}' exited with status {proc.returncode}: {proc.stderr.strip()}"
            )
        return proc.stdout


def get_commands(commands: Mapping[str, str]) -> Dict[str, ShellCommand]:
    """Build the named command set keyed by normalized file extension."""

    resolved: Dict[str, ShellCommand] = {}
    for extension, command in commands.items():
        normalized = extension if extension.startswith(".") else f".{extension}"
        resolved[normalized.lower()] = ShellCommand(extension=normalized.lower(), command=command)
    return resolved


def get_file_tasks(
    file: FileRecord,
    package: PackageRecord,
    commands: Mapping[str, ShellCommand],
) -> List[FileTask]:
    """Return the transform pipeline for one file; empty for non-source assets."""

    lowered = file.path.lower()
    for extension, command in commands.items():
        if lowered.endswith(extension):
            return [command, WrapCommonJs()]
    if lowered.endswith(".js"):
        return [WrapCommonJs()]
    if lowered.endswith(".json"):
        return [WrapJson()]
    return []
