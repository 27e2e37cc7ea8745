"""Per-file transform pipelines."""

from .assign import assign_file_tasks
from .transforms import FileTask, ShellCommand, WrapCommonJs, WrapJson, get_commands, get_file_tasks

__all__ = [
    "FileTask",
    "ShellCommand",
    "WrapCommonJs",
    "WrapJson",
    "assign_file_tasks",
    "get_commands",
    "get_file_tasks",
]
