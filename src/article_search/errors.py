"""
Exceptions raised along the fetch -> persist -> display path.

The controller catches all of these at the fetch boundary; none of them are
fatal to the process.
"""


class ArticleSearchError(Exception):
    """Base class for errors raised by this package."""


class ConfigError(ArticleSearchError):
    """Raised when required configuration (e.g. the API key) is missing."""


class NetworkError(ArticleSearchError):
    """
    Raised when the search request fails at the transport level or returns
    a non-2xx status.

    ``status_code`` is set when the server answered.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


FetchError = NetworkError


class ParseError(ArticleSearchError):
    """Raised when a response body cannot be decoded into search results."""


class StorageError(ArticleSearchError):
    """Raised when a cache or preference read/write fails."""
