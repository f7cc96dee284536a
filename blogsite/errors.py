"""Application exceptions."""


class BlogNotFoundError(Exception):
    """Raised when no post matches the requested slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Blog post not found: {slug}")
        self.slug = slug
