from typing import Any, Dict, Optional


class SearchServiceError(Exception):
    """Base error carrying the HTTP status the API responds with."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class ClientInputError(SearchServiceError):
    status_code = 400
    message = "Invalid request"


class MethodNotAllowedError(SearchServiceError):
    status_code = 405
    message = "Method not allowed"


class RateLimitError(SearchServiceError):
    status_code = 429

    def __init__(self, retry_after_seconds: Optional[float] = None):
        if retry_after_seconds is None:
            message = "Rate limit exceeded. Try again later."
        else:
            message = f"Rate limit exceeded. Try again in {retry_after_seconds:g} seconds."
        super().__init__(message)


class UpstreamUnavailable(SearchServiceError):
    """The search engine answered with a non-success status."""

    status_code = 502
    message = "Search service error"

    def __init__(self, upstream_status: int, body: str):
        self.upstream_status = upstream_status
        super().__init__(detail=body)


class UpstreamTimeout(SearchServiceError):
    status_code = 504
    message = "Search request timed out"


class InternalError(SearchServiceError):
    status_code = 500
    message = "Internal server error"
