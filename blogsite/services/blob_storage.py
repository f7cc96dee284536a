"""Azure Blob Storage service for reading the blog index and post bodies."""

import json
import logging
import re

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError
from azure.identity import ManagedIdentityCredential
from azure.storage.blob import ContainerClient
from pydantic import ValidationError

from blogsite.config import get_settings
from blogsite.models.blog import BlogIndex, BlogPost

logger = logging.getLogger(__name__)

_SAFE_PATH_SEGMENT_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9._-]*$")

BLOG_INDEX_BLOB = "blog-index.json"

# Lazy singleton — lives for the process lifetime
_blog_container_client: ContainerClient | None = None


def validate_blob_path_segment(segment: str) -> str:
    """Validate a user-supplied blob path segment.

    Rejects inputs containing path traversal sequences (..), slashes,
    backslashes, or other unsafe characters. Returns the segment unchanged
    if valid; raises ValueError otherwise.
    """
    if not segment or not _SAFE_PATH_SEGMENT_RE.match(segment) or ".." in segment:
        raise ValueError(f"Invalid blob path segment: {segment!r}")
    return segment


def _get_blog_container_client() -> ContainerClient:
    """Return a shared blob container client for blog content."""
    global _blog_container_client
    if _blog_container_client is None:
        settings = get_settings()
        account_url = f"https://{settings.azure_storage_account}.blob.core.windows.net"
        credential = ManagedIdentityCredential(
            client_id=settings.managed_identity_client_id or None
        )
        _blog_container_client = ContainerClient(
            account_url=account_url,
            container_name=settings.azure_blog_container,
            credential=credential,
        )
    return _blog_container_client


def check_storage_connectivity() -> bool:
    """Lightweight storage connectivity check — lists 1 blob."""
    try:
        client = _get_blog_container_client()
        next(iter(client.list_blobs(results_per_page=1)))
        return True
    except StopIteration:
        # Container exists but is empty — still connected
        return True
    except Exception:
        logger.warning("Storage connectivity check failed", exc_info=True)
        return False


def _parse_posts(posts_data: list[dict]) -> list[BlogPost]:
    """Validate raw index entries, skipping bad rows and duplicate slugs."""
    posts: list[BlogPost] = []
    seen: set[str] = set()
    for i, raw in enumerate(posts_data):
        try:
            post = BlogPost.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping invalid blog index entry #%d: %s", i, e)
            continue
        if post.slug in seen:
            logger.warning("Skipping duplicate blog slug %s", post.slug)
            continue
        seen.add(post.slug)
        posts.append(post)
    return posts


async def get_blog_index() -> BlogIndex:
    """Read the blog post index, newest first.

    Raises on storage failures other than a missing index so that callers
    can fall back to a cached copy.
    """
    client = _get_blog_container_client()
    try:
        blob = client.get_blob_client(BLOG_INDEX_BLOB)
        data = blob.download_blob().readall()
    except ResourceNotFoundError:
        logger.warning("Blog index %s not found", BLOG_INDEX_BLOB)
        return BlogIndex(posts=[], total=0)
    except HttpResponseError as e:
        logger.warning("Azure API error reading blog index: %s", e.message)
        raise

    posts_data = json.loads(data)
    # Handle both list format and dict format ({"posts": [...]})
    if isinstance(posts_data, dict):
        posts_data = posts_data.get("posts", [])
    posts = _parse_posts(posts_data)
    posts.sort(key=lambda p: p.pub_date, reverse=True)
    return BlogIndex(posts=posts, total=len(posts))


async def read_blog_html(slug: str) -> str | None:
    """Read post body HTML from blog/{slug}/index.html. Returns None if not found."""
    try:
        validate_blob_path_segment(slug)
    except ValueError:
        logger.warning("Refusing to read blog HTML for unsafe slug %r", slug)
        return None
    client = _get_blog_container_client()
    try:
        blob = client.get_blob_client(f"blog/{slug}/index.html")
        return blob.download_blob().readall().decode("utf-8")
    except ResourceNotFoundError:
        return None
    except Exception as e:
        logger.warning("Could not read blog HTML for %s: %s", slug, e)
        return None
