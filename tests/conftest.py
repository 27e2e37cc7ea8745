from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

import pytest

from aware_bundle.graph.models import BuildRequest, FileRecord, PackageRecord


def write_tree(root: Path, files: Dict[str, str]) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def make_package(
    root: Path,
    uid: int,
    files: Iterable[str],
    *,
    basepath: str = "",
    main: Optional[str] = "index.js",
    name: Optional[str] = None,
    dependencies: Optional[Dict[str, int]] = None,
) -> PackageRecord:
    base = root / basepath
    return PackageRecord(
        uid=uid,
        basepath=str(base).rstrip("/") + "/",
        files=[FileRecord(path=str(base / relative)) for relative in files],
        main=main,
        name=name,
        dependencies_by_id=dict(dependencies or {}),
    )


def make_request(*packages: PackageRecord) -> BuildRequest:
    return BuildRequest(
        files=[record for package in packages for record in package.files],
        packages=list(packages),
    )


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Root package with one dependency under node_modules."""

    root = tmp_path.resolve() / "project"
    write_tree(
        root,
        {
            "index.js": "module.exports = require('./lib/a.js');",
            "lib/a.js": "module.exports = require('dep');",
            "node_modules/dep/index.js": "module.exports = 42;",
        },
    )
    return root


@pytest.fixture
def project_request(project: Path) -> Callable[[], BuildRequest]:
    """Factory for a fresh graph of ``project``; builds mutate their request."""

    def factory() -> BuildRequest:
        root = make_package(project, 1, ["index.js", "lib/a.js"], dependencies={"dep": 2})
        dep = make_package(project, 2, ["index.js"], basepath="node_modules/dep", name="dep")
        return make_request(root, dep)

    return factory
