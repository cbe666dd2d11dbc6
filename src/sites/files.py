"""Static file apps for the published docs and book trees."""

import os
import re
import stat
from typing import Optional

from starlette.exceptions import HTTPException
from starlette.responses import Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

from ..utils.constants import HTML_EXTENSIONS, SEMVER_PATTERN

_SEMVER_RE = re.compile(SEMVER_PATTERN)


class HtmlStaticFiles(StaticFiles):
    """StaticFiles that resolves extensionless paths to ``.html``/``.htm`` files.

    ``/guide/intro`` is served from ``guide/intro.html`` when that file
    exists. Paths ending in a slash or already carrying an extension are
    left alone.
    """

    def __init__(self, *, directory: str, html: bool = True) -> None:
        super().__init__(directory=directory, html=html, check_dir=False)

    async def get_response(self, path: str, scope: Scope) -> Response:
        # ``path`` is normalised and has lost its trailing slash
        if scope["path"].endswith("/"):
            return await super().get_response(path, scope)
        return await super().get_response(self.resolve_extension(path), scope)

    def resolve_extension(self, path: str) -> str:
        # Starlette normalises paths, so the tree root arrives as "."
        if not path or path.endswith("/") or path == ".":
            return path

        last = path.rsplit("/", 1)[-1]
        if last.rfind(".") > 0:
            return path

        for ext in HTML_EXTENSIONS:
            candidate = path + ext
            _, stat_result = self.lookup_path(candidate)
            if stat_result is not None and _is_regular_file(stat_result):
                return candidate
        return path


class TagStaticFiles(HtmlStaticFiles):
    """Serves released versions; the first path segment must be a semver tag."""

    async def get_response(self, path: str, scope: Scope) -> Response:
        if tag_of(path) is None:
            raise HTTPException(status_code=404)
        return await super().get_response(path, scope)


def tag_of(path: str) -> Optional[str]:
    """Return the leading version tag of a path, if it has one."""
    first = path.lstrip("/").split("/", 1)[0]
    if _SEMVER_RE.match(first):
        return first
    return None


def _is_regular_file(stat_result: os.stat_result) -> bool:
    return stat.S_ISREG(stat_result.st_mode)
