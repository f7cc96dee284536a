"""Blog post data models."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class BlogPost(BaseModel):
    """Blog post metadata as stored in the blog index."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    slug: str = Field(..., min_length=1, max_length=200, pattern=r"^[^/]+$")
    title: str
    description: str | None = None
    author: str
    hero_image: str | None = Field(None, alias="heroImage")
    pub_date: datetime = Field(..., alias="pubDate")
    updated_date: datetime | None = Field(None, alias="updatedDate")
    tags: list[str] = []

    @field_validator("pub_date", "updated_date")
    @classmethod
    def assume_utc(cls, dt: datetime | None) -> datetime | None:
        """Naive timestamps in the index are UTC."""
        if dt is not None and dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt

    @model_validator(mode="after")
    def check_dates(self) -> "BlogPost":
        """Reject posts whose last update predates their publication."""
        if self.updated_date is not None and self.updated_date < self.pub_date:
            raise ValueError(
                f"updatedDate {self.updated_date} is before pubDate {self.pub_date}"
            )
        return self

    @property
    def effective_date(self) -> datetime:
        """Last-modified timestamp, defaulting to the publication date."""
        return self.updated_date or self.pub_date


class BlogIndex(BaseModel):
    """Blog post index."""

    posts: list[BlogPost]
    total: int
