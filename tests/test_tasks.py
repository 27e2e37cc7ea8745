from __future__ import annotations

import sys
from pathlib import Path

import pytest

from aware_bundle.errors import ExecutionError, MissingFileError
from aware_bundle.tasks.assign import assign_file_tasks
from aware_bundle.tasks.transforms import ShellCommand, WrapCommonJs, WrapJson, get_commands, get_file_tasks

from conftest import make_package, make_request, write_tree

PYTHON = sys.executable


def test_file_tasks_by_extension(tmp_path: Path) -> None:
    package = make_package(tmp_path, 0, ["a.js", "b.JSON", "c.css", "d.coffee"])
    commands = get_commands({"coffee": "coffee -sc"})

    kinds = [[task.name for task in get_file_tasks(record, package, commands)] for record in package.files]

    assert kinds == [["wrap-commonjs"], ["wrap-json"], [], ["command:.coffee", "wrap-commonjs"]]


def test_json_is_wrapped_as_module_exports() -> None:
    assert WrapJson()('{"a": 1}\n') == 'function(module, exports, require){\nmodule.exports = {"a": 1};\n}'
    assert WrapCommonJs()("x;") == "function(module, exports, require){\nx;\n}"


def test_shell_command_pipes_source() -> None:
    command = ShellCommand(".txt", f'"{PYTHON}" -c "import sys; sys.stdout.write(sys.stdin.read().upper())"')

    assert command("abc") == "ABC"


def test_failing_shell_command_raises() -> None:
    command = ShellCommand(".txt", f'"{PYTHON}" -c "import sys; sys.exit(3)"')

    with pytest.raises(ExecutionError, match="status 3"):
        command("abc")


def test_assign_prunes_files_without_tasks(tmp_path: Path) -> None:
    write_tree(tmp_path, {"a.js": "", "b.css": "", "c.json": "{}"})
    package = make_package(tmp_path, 0, ["a.js", "b.css", "c.json"])
    request = make_request(package)

    removed = assign_file_tasks(request, {})

    assert removed == [str(tmp_path / "b.css")]
    assert [Path(record.path).name for record in package.files] == ["a.js", "c.json"]
    assert [Path(record.path).name for record in request.files] == ["a.js", "c.json"]
    assert all(record.tasks for record in package.files)


def test_assign_rejects_missing_files(tmp_path: Path) -> None:
    request = make_request(make_package(tmp_path, 0, ["gone.js"]))

    with pytest.raises(MissingFileError) as excinfo:
        assign_file_tasks(request, {})

    assert excinfo.value.path == str(tmp_path / "gone.js")
