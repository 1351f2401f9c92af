"""Response models for the external page-title search API."""

from pydantic import BaseModel


class Thumbnail(BaseModel):
    """Thumbnail metadata attached to a search hit."""

    mimetype: str
    size: int | None = None
    width: int | None = None
    height: int | None = None
    duration: float | None = None
    url: str

    @property
    def absolute_url(self) -> str:
        """Thumbnail URL with a scheme; the API returns protocol-relative URLs."""
        if self.url.startswith("//"):
            return f"https:{self.url}"
        return self.url


class SearchResult(BaseModel):
    """One page returned by the title search."""

    id: int
    key: str | None = None
    title: str
    excerpt: str = ""
    matched_title: str | None = None
    description: str | None = None
    thumbnail: Thumbnail | None = None


class SearchResponse(BaseModel):
    """Envelope of the search endpoint: ``{"pages": [...]}``."""

    pages: list[SearchResult]
