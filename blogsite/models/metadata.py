"""Page metadata models."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class PageMetadata(BaseModel):
    """SEO metadata for a single rendered page.

    ``structured_data`` is the JSON-LD document; ``json_ld`` is its
    serialized, script-safe form.
    """

    model_config = ConfigDict(frozen=True)

    page_title: str
    meta_description: str | None = None
    canonical_url: str
    og_title: str
    og_description: str | None = None
    og_type: str
    og_image: str | None = None
    structured_data: dict[str, Any]
    json_ld: str
    article_published_time: str | None = None
    article_modified_time: str | None = None
    article_author: str | None = None

    def to_context(self) -> dict[str, Any]:
        """Flatten into template attributes."""
        return self.model_dump(exclude={"structured_data"})
