"""Jinja2 template rendering shared by the blog views and error handlers."""

from pathlib import Path
from typing import Any

from fastapi.templating import Jinja2Templates
from starlette.requests import Request
from starlette.responses import Response

from blogsite.config import SiteConfig
from blogsite.services.urls import encode_path_segment

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=TEMPLATES_DIR)
templates.env.filters["path_segment"] = encode_path_segment


def common_attributes(config: SiteConfig) -> dict[str, Any]:
    """Site-wide attributes every blog view receives."""
    return {
        "blog_title": config.title,
        "blog_description": config.description,
        "publisher_url": config.publisher_url,
        "publisher_name": config.publisher_name,
        "disqus_enabled": config.disqus_enabled,
        "disqus_shortname": config.disqus_shortname,
        "social_sharing_enabled": config.social_sharing_enabled,
        "medium_url": config.medium_url,
    }


def render(
    request: Request,
    view: str,
    config: SiteConfig,
    status_code: int = 200,
    **context: Any,
) -> Response:
    """Render ``view`` with the common attributes merged under ``context``."""
    return templates.TemplateResponse(
        request,
        view,
        {**common_attributes(config), **context},
        status_code=status_code,
    )
