"""Group files found under include paths into packages."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Pattern, Sequence

from ..errors import FilesystemError
from .models import BuildRequest, FileRecord, PackageRecord

logger = logging.getLogger(__name__)

NODE_MODULES = "node_modules"


def classify(
    includes: Iterable[Path],
    *,
    exclude_patterns: Sequence[Pattern[str]] = (),
    basepath: str = "",
    main: Optional[str] = None,
    root_dir: Optional[Path] = None,
) -> BuildRequest:
    """Walk ``includes`` and return a build request with inferred packages.

    Files below ``node_modules/<name>/`` (or ``node_modules/@scope/<name>/``)
    form one package per directory; everything else belongs to the root
    package, which always takes uid 0 and sits at index 0 even when empty.
    """

    root = Path(root_dir or Path.cwd()).resolve()
    files = _collect_files(includes, exclude_patterns)

    grouped: Dict[str, List[FileRecord]] = {}
    for path in files:
        grouped.setdefault(_package_dir(path) or "", []).append(FileRecord(path=path))

    packages = [
        PackageRecord(
            uid=0,
            basepath=_with_slash(str(root)),
            files=grouped.pop("", []),
            main=main or _root_main(root, basepath),
        )
    ]
    for uid, package_dir in enumerate(sorted(grouped), start=1):
        packages.append(
            PackageRecord(
                uid=uid,
                basepath=_with_slash(package_dir),
                files=grouped[package_dir],
                main=_read_main(Path(package_dir)) or "index.js",
                name=_package_name(package_dir),
            )
        )

    _link_dependencies(packages, root)
    logger.info("Classified %d files into %d packages", len(files), len(packages))
    return BuildRequest(
        files=[record for package in packages for record in package.files],
        packages=packages,
    )


def is_excluded(path: str, patterns: Sequence[Pattern[str]]) -> bool:
    normalized = path.replace(os.sep, "/")
    return any(pattern.search(normalized) for pattern in patterns)


def _collect_files(includes: Iterable[Path], patterns: Sequence[Pattern[str]]) -> List[str]:
    found: List[str] = []
    seen = set()
    for include in includes:
        include = Path(include).resolve()
        if not include.exists():
            raise FilesystemError(f"Include path not found: {include}")
        if include.is_file():
            candidates = [include]
        else:
            candidates = sorted(path for path in include.rglob("*") if path.is_file())
        for candidate in candidates:
            path = str(candidate)
            if path in seen:
                continue
            seen.add(path)
            if _is_hidden(candidate, include) or is_excluded(path, patterns):
                logger.debug("Excluded %s", path)
                continue
            found.append(path)
    return found


def _is_hidden(path: Path, include: Path) -> bool:
    if path == include:
        return False
    return any(part.startswith(".") for part in path.relative_to(include).parts[:-1])


def _package_dir(path: str) -> Optional[str]:
    """Return the innermost ``node_modules`` package directory holding ``path``."""

    parts = Path(path).parts[:-1]
    boundary: Optional[int] = None
    index = 0
    while index < len(parts) - 1:
        if parts[index] == NODE_MODULES:
            end = index + 1
            if parts[end].startswith("@") and end + 1 < len(parts):
                end += 1
            boundary = end
            index = end
        index += 1
    if boundary is None:
        return None
    return str(Path(*parts[: boundary + 1]))


def _package_name(package_dir: str) -> str:
    parts = Path(package_dir).parts
    if len(parts) >= 2 and parts[-2].startswith("@"):
        return f"{parts[-2]}/{parts[-1]}"
    return parts[-1]


def _modules_dir(package: PackageRecord) -> Path:
    """The ``node_modules`` directory a package was installed into."""

    depth = len((package.name or "").split("/"))
    return Path(package.basepath).parents[depth - 1]


def _root_main(root: Path, basepath: str) -> Optional[str]:
    main = _read_main(root)
    prefix = basepath.replace(os.sep, "/").rstrip("/")
    if main and prefix and main.startswith(prefix + "/"):
        return main[len(prefix) + 1 :]
    return main


def _read_main(directory: Path) -> Optional[str]:
    manifest = directory / "package.json"
    if not manifest.is_file():
        return None
    try:
        payload = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Unable to read %s: %s", manifest, exc)
        return None
    main = payload.get("main") if isinstance(payload, dict) else None
    if not isinstance(main, str) or not main.strip():
        return None
    main = os.path.normpath(main).replace(os.sep, "/")
    if (directory / main).is_dir():
        return f"{main}/index.js"
    if not main.endswith((".js", ".json")):
        return f"{main}.js"
    return main


def _link_dependencies(packages: List[PackageRecord], root: Path) -> None:
    installed: Dict[Path, List[PackageRecord]] = {}
    for package in packages[1:]:
        installed.setdefault(_modules_dir(package), []).append(package)

    for package in packages:
        visible: Dict[str, int] = {}
        search = Path(package.basepath)
        while True:
            # nearest node_modules wins, as with node's own lookup
            for candidate in installed.get(search / NODE_MODULES, []):
                if candidate is not package and candidate.name:
                    visible.setdefault(candidate.name, candidate.uid)
            if search == root or search == search.parent:
                break
            search = search.parent
        package.dependencies_by_id = dict(sorted(visible.items()))


def _with_slash(directory: str) -> str:
    return directory if directory.endswith("/") else directory + "/"
