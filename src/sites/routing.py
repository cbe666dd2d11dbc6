"""Host-based routing for the docs site, the book and the webhook.

Each site keeps three trees under ``public/<site>/``: ``stable``, ``master``
and ``tags/<version>``. Bare site roots redirect to the stable tree.
"""

from pathlib import Path
from typing import Any

import structlog
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from starlette.routing import Host, Mount, Route, Router
from starlette.types import ASGIApp

from ..api.middleware import AccessLogMiddleware
from ..config.settings import Settings
from ..exceptions import InvalidConfigError
from ..utils.constants import BOOK_ROOT, DOCS_ROOT
from .files import HtmlStaticFiles, TagStaticFiles

logger = structlog.get_logger()

SITE_TREES = ("stable", "master", "tags")


def load_not_found_page(path: Path) -> str:
    """Read the 404 page served for every unknown path."""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise InvalidConfigError(f"Couldn't read 404 page {path}: {e}") from e


def ensure_site_dirs(public_dir: Path, subdir: str) -> Path:
    """Create ``public/<subdir>/{stable,master,tags}`` and return the site dir."""
    site_dir = public_dir / subdir
    for tree in SITE_TREES:
        try:
            (site_dir / tree).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InvalidConfigError(
                f"Could not create dir {site_dir / tree}: {e}"
            ) from e
    return site_dir


def _redirect(location: str) -> Any:
    async def endpoint(request: Request) -> RedirectResponse:
        return RedirectResponse(location, status_code=301)

    return endpoint


def create_site_router(
    subdir: str, root: str, base_url: str, public_dir: Path
) -> Router:
    """Routes for one published site.

    Args:
        subdir: directory under ``public_dir`` holding the site
        root: path of the site's landing page inside each tree
        base_url: public host used to build absolute redirects
        public_dir: root of all deployed static files
    """
    site_dir = ensure_site_dirs(public_dir, subdir)
    stable_root = f"//{base_url}/stable{root}"
    master_root = f"//{base_url}/master{root}"

    stable = HtmlStaticFiles(directory=str(site_dir / "stable"))
    master = HtmlStaticFiles(directory=str(site_dir / "master"))
    tags = TagStaticFiles(directory=str(site_dir / "tags"))

    return Router(
        routes=[
            Route("/", _redirect(stable_root), methods=["GET", "HEAD"]),
            Route("/stable", _redirect(stable_root), methods=["GET", "HEAD"]),
            Mount("/stable", app=stable),
            Route("/master", _redirect(master_root), methods=["GET", "HEAD"]),
            Mount("/master", app=master),
            Mount("", app=tags),
        ]
    )


def create_site_app(
    settings: Settings, api_app: ASGIApp, not_found_page: str
) -> Starlette:
    """Combine the docs, book and webhook hosts into one application."""

    async def not_found(request: Request, exc: Exception) -> HTMLResponse:
        return HTMLResponse(not_found_page, status_code=404)

    async def health(request: Request) -> PlainTextResponse:
        return PlainTextResponse("up")

    if hasattr(api_app, "add_exception_handler"):
        api_app.add_exception_handler(404, not_found)

    docs = create_site_router(
        "docs", DOCS_ROOT, settings.docs_base_url, settings.public_dir
    )
    book = create_site_router(
        "book", BOOK_ROOT, settings.book_base_url, settings.public_dir
    )
    catch_all = Router(routes=[Route("/health", health, methods=["GET"])])

    app = Starlette(
        routes=[
            Host(settings.docs_url, app=docs),
            Host(settings.book_url, app=book),
            Host(settings.trigger_url, app=api_app),
            Mount("", app=catch_all),
        ],
        exception_handlers={404: not_found},
    )
    app.add_middleware(AccessLogMiddleware)

    logger.info(
        "Static sites enabled",
        docs_url=settings.docs_url,
        book_url=settings.book_url,
        trigger_url=settings.trigger_url,
        public_dir=str(settings.public_dir),
    )
    return app
