"""Blog page endpoints — index and single post."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from blogsite.config import get_site_config
from blogsite.errors import BlogNotFoundError
from blogsite.rendering import render
from blogsite.services.posts import get_all_posts, get_post_by_slug, get_post_content
from blogsite.services.seo import build_index_metadata, build_post_metadata
from blogsite.services.urls import build_base_url, encode_path_segment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blog", tags=["blog"])


@router.get("", response_class=HTMLResponse)
async def blog_index(request: Request):
    """Render the blog index with collection-level metadata."""
    posts = await get_all_posts()
    logger.info("Blog index request: %d posts found", len(posts))

    config = get_site_config()
    base_url = build_base_url(request, config.base_url, config.trusted_proxies)
    blog_url = f"{base_url}/blog"
    metadata = build_index_metadata(posts, config, blog_url)

    return render(
        request, "blog/index.html", config, posts=posts, **metadata.to_context()
    )


@router.get("/{slug}", response_class=HTMLResponse)
async def blog_post(slug: str, request: Request):
    """Render a single post, or the not-found page for an unknown slug."""
    post = await get_post_by_slug(slug)
    if post is None:
        logger.warning("Blog post not found: %s", slug)
        raise BlogNotFoundError(slug)

    logger.info("Blog post request: %s", slug)

    config = get_site_config()
    base_url = build_base_url(request, config.base_url, config.trusted_proxies)
    canonical_url = f"{base_url}/blog/{encode_path_segment(slug)}"
    metadata = build_post_metadata(post, config, canonical_url, base_url)
    content = await get_post_content(post.slug)

    return render(
        request,
        "blog/post.html",
        config,
        post=post,
        content=content,
        **metadata.to_context(),
    )
