"""Static docs and book sites served next to the webhook."""

from .files import HtmlStaticFiles, TagStaticFiles
from .routing import create_site_app, create_site_router, load_not_found_page

__all__ = [
    "HtmlStaticFiles",
    "TagStaticFiles",
    "create_site_app",
    "create_site_router",
    "load_not_found_page",
]
