class FeedmapClientError(Exception):
    """Base exception for all client errors."""


class FeedmapRateLimitError(FeedmapClientError):
    """Raised when API returns 429 Too Many Requests."""


class FeedmapValidationError(FeedmapClientError):
    """Raised when the API response format is invalid or malformed."""


class FeedmapHTTPError(FeedmapClientError):
    """Raised for unexpected non-2xx HTTP responses."""
