"""External page-title search used to autofill species fields."""

from speciescatalog.search.client import SearchClient, SearchSession, SearchStatus
from speciescatalog.search.models import SearchResponse, SearchResult, Thumbnail

__all__ = [
    "SearchClient",
    "SearchResponse",
    "SearchResult",
    "SearchSession",
    "SearchStatus",
    "Thumbnail",
]
