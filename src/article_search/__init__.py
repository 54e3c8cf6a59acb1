"""Package for fetching, caching and browsing news search results."""

__all__ = ["config", "models", "store", "client", "controller"]
