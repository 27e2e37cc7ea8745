"""Root package correction and root module selection."""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import NoFilesError, NoRootFileError
from .models import BuildRequest

logger = logging.getLogger(__name__)


def finalize_graph(request: BuildRequest, main: Optional[str] = None) -> str:
    """Correct ``request.packages`` in place and return the root module name.

    An empty root package happens when the classifier treats the current
    directory as a package of its own (e.g. building from inside
    ``node_modules``); it is dropped once and the next package becomes root.
    """

    packages = request.packages
    if packages and not packages[0].files:
        dropped = packages.pop(0)
        logger.info("Dropping empty root package (uid=%s)", dropped.uid)
    if not packages:
        raise NoFilesError()

    root_file = packages[0].main or main
    if not root_file:
        raise NoRootFileError()
    return root_file
