from .tag_search_client import TagSearchClient

__all__ = ["TagSearchClient"]
