"""Application configuration via environment variables."""

from functools import lru_cache

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    debug: bool = False
    environment: str = "development"

    # Blog
    blog_title: str = "MindMeld360 Blog"
    blog_description: str = "Notes on engineering, product and building software"
    publisher_name: str | None = None  # falls back to blog_title
    publisher_url: str = "https://mindmeld360.com"
    medium_url: str | None = None

    # Public base URL used when the request carries no usable host
    public_base_url: str | None = None

    # Peers whose Forwarded / X-Forwarded-* headers are believed ("*" trusts all)
    trusted_proxies: list[str] = ["127.0.0.1", "::1"]

    # Integrations
    disqus_enabled: bool = False
    disqus_shortname: str = ""
    social_sharing_enabled: bool = True

    # Azure Blob Storage (blog index + post bodies)
    azure_storage_account: str = "mindmeld360storage"
    azure_blog_container: str = "$web"
    managed_identity_client_id: str = ""

    # Seconds the blog index is served from memory before re-reading storage
    blog_index_ttl: int = 300

    model_config = {"env_file": ".env", "extra": "ignore"}


class SiteConfig(BaseModel):
    """Read-only site configuration handed to the metadata builders."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    publisher_name: str | None = None
    publisher_url: str = ""
    disqus_enabled: bool = False
    disqus_shortname: str = ""
    social_sharing_enabled: bool = False
    medium_url: str | None = None
    base_url: str | None = None
    trusted_proxies: tuple[str, ...] = ()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SiteConfig":
        return cls(
            title=settings.blog_title,
            description=settings.blog_description,
            publisher_name=settings.publisher_name or None,
            publisher_url=settings.publisher_url,
            disqus_enabled=settings.disqus_enabled,
            disqus_shortname=settings.disqus_shortname,
            social_sharing_enabled=settings.social_sharing_enabled,
            medium_url=settings.medium_url or None,
            base_url=settings.public_base_url or None,
            trusted_proxies=tuple(settings.trusted_proxies),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def get_site_config() -> SiteConfig:
    """Build the site configuration once from the loaded settings."""
    return SiteConfig.from_settings(get_settings())
