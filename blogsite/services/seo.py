"""SEO metadata builder — page titles, Open Graph fields and JSON-LD.

Everything here is pure and request-scoped: the builders take a post (or
the post list) plus the site configuration and return a ``PageMetadata``.
Missing optional values degrade the output instead of raising.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from jinja2.utils import htmlsafe_json_dumps

from blogsite.config import SiteConfig
from blogsite.models.blog import BlogPost
from blogsite.models.metadata import PageMetadata

logger = logging.getLogger(__name__)

SCHEMA_CONTEXT = "https://schema.org"
EMPTY_JSON_LD = "{}"


def format_timestamp(dt: datetime) -> str:
    """Render a timestamp as UTC ISO-8601 with a ``Z`` suffix.

    Naive datetimes are assumed to be UTC already.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def resolve_image_url(hero_image: str | None, base_url: str) -> str | None:
    """Turn a post's hero image into an absolute URL, or None if unset."""
    if not hero_image:
        return None
    if hero_image.startswith(("http://", "https://")):
        return hero_image
    separator = "" if hero_image.startswith("/") else "/"
    return f"{base_url}{separator}{hero_image}"


def publisher_json_ld(config: SiteConfig) -> dict[str, Any]:
    """Organization node used as ``publisher`` in every JSON-LD document."""
    return {
        "@type": "Organization",
        "name": (
            config.publisher_name
            if config.publisher_name is not None
            else config.title
        ),
        "url": config.publisher_url,
    }


def serialize_json_ld(document: dict[str, Any], context: str = "page") -> str:
    """Serialize a JSON-LD document for a ``<script>`` block.

    Never raises: a document that cannot be serialized is logged and
    replaced by ``{}`` so the page still renders.
    """
    try:
        return str(htmlsafe_json_dumps(document))
    except (TypeError, ValueError):
        logger.error("Failed to generate JSON-LD for %s", context, exc_info=True)
        return EMPTY_JSON_LD


def build_index_metadata(
    posts: Sequence[BlogPost], config: SiteConfig, blog_url: str
) -> PageMetadata:
    """Metadata for the blog index page."""
    logger.debug("Building index metadata for %d posts", len(posts))

    structured_data: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "Blog",
        "name": config.title,
        "description": config.description,
        "url": blog_url,
        "publisher": publisher_json_ld(config),
    }

    return PageMetadata(
        page_title=config.title,
        meta_description=config.description,
        canonical_url=blog_url,
        og_title=config.title,
        og_description=config.description,
        og_type="website",
        structured_data=structured_data,
        json_ld=serialize_json_ld(structured_data, "blog index"),
    )


def build_post_metadata(
    post: BlogPost, config: SiteConfig, canonical_url: str, base_url: str
) -> PageMetadata:
    """Metadata for a single post page.

    ``meta_description`` passes ``post.description`` through untouched,
    while the JSON-LD ``description`` is always a string.
    """
    og_image = resolve_image_url(post.hero_image, base_url)
    published = format_timestamp(post.pub_date)
    modified = format_timestamp(post.effective_date)

    structured_data: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "BlogPosting",
        "headline": post.title,
        "description": post.description if post.description is not None else "",
        "author": {"@type": "Person", "name": post.author},
        "datePublished": published,
        "dateModified": modified,
        "publisher": publisher_json_ld(config),
        "mainEntityOfPage": {"@type": "WebPage", "@id": canonical_url},
    }
    if og_image is not None:
        structured_data["image"] = og_image

    return PageMetadata(
        page_title=f"{post.title} — {config.title}",
        meta_description=post.description,
        canonical_url=canonical_url,
        og_title=post.title,
        og_description=post.description,
        og_type="article",
        og_image=og_image,
        structured_data=structured_data,
        json_ld=serialize_json_ld(structured_data, "blog post"),
        article_published_time=published,
        article_modified_time=modified,
        article_author=post.author,
    )
