"""Shared fixtures for blog site tests."""

import pytest


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset all module-level singletons and caches between tests."""
    yield

    # 1. Settings and site config LRU caches
    from blogsite.config import get_settings, get_site_config

    get_settings.cache_clear()
    get_site_config.cache_clear()

    # 2. Blob storage singleton
    import blogsite.services.blob_storage as blob_mod

    blob_mod._blog_container_client = None

    # 3. Blog index cache
    import blogsite.services.posts as posts_mod

    posts_mod._index_cache = None

    # 4. Health check cache
    import blogsite.main as main_mod

    main_mod._health_cache = None


@pytest.fixture
def mock_settings(monkeypatch):
    """Provide a Settings object with safe test defaults."""
    from blogsite.config import Settings, get_settings, get_site_config

    test_settings = Settings(
        blog_title="Test Blog",
        blog_description="A blog used in tests",
        publisher_name=None,
        publisher_url="https://publisher.example",
        medium_url=None,
        public_base_url=None,
        disqus_enabled=False,
        disqus_shortname="",
        social_sharing_enabled=False,
        azure_storage_account="teststorage",
        azure_blog_container="test-blog",
        managed_identity_client_id="test-client-id",
        blog_index_ttl=300,
        trusted_proxies=["127.0.0.1"],
    )

    get_settings.cache_clear()
    get_site_config.cache_clear()
    monkeypatch.setattr("blogsite.config.get_settings", lambda: test_settings)

    # Patch get_settings in modules that import it directly
    for mod_path in [
        "blogsite.services.blob_storage",
        "blogsite.services.posts",
        "blogsite.main",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    return test_settings
