"""Post retrieval service — cached view over the blog index in storage."""

import logging
import time

from blogsite.config import get_settings
from blogsite.models.blog import BlogIndex, BlogPost
from blogsite.services.blob_storage import get_blog_index, read_blog_html

logger = logging.getLogger(__name__)

# Index cache: (index, fetched_at)
_index_cache: tuple[BlogIndex, float] | None = None


async def _load_index() -> BlogIndex:
    """Return the blog index, re-reading storage once the TTL expires.

    A failed refresh serves the stale copy when there is one; with nothing
    cached the index is treated as empty.
    """
    global _index_cache
    now = time.time()
    if _index_cache is not None:
        cached, fetched_at = _index_cache
        if now - fetched_at < get_settings().blog_index_ttl:
            return cached

    try:
        index = await get_blog_index()
    except Exception:
        if _index_cache is not None:
            logger.warning(
                "Blog index refresh failed, serving stale copy", exc_info=True
            )
            return _index_cache[0]
        logger.exception("Blog index unavailable")
        return BlogIndex(posts=[], total=0)

    _index_cache = (index, now)
    return index


async def get_all_posts() -> list[BlogPost]:
    """All posts in presentation order (newest first)."""
    index = await _load_index()
    return list(index.posts)


async def get_post_by_slug(slug: str) -> BlogPost | None:
    """Return the post with the given slug, or None."""
    index = await _load_index()
    for post in index.posts:
        if post.slug == slug:
            return post
    return None


async def get_post_content(slug: str) -> str | None:
    """Return the post body HTML, or None when it cannot be read."""
    return await read_blog_html(slug)
