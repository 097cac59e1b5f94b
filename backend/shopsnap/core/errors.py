from typing import Any, Dict, Optional


class ProductLookupError(Exception):
    """
    Base for every terminal failure of a lookup request.
    Carries the HTTP status the API answers with and, when the model produced
    text we could not use, that raw text for diagnosis.
    """
    status_code = 500

    def __init__(self, message: str, raw: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.raw = raw
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.raw is not None:
            body["raw"] = self.raw
        return body


class MissingInput(ProductLookupError):
    status_code = 400

    def __init__(self, message: str = "No image provided"):
        super().__init__(message)


class ServiceMisconfigured(ProductLookupError):
    status_code = 500


class UpstreamServiceError(ProductLookupError):
    """Gemini answered with a non-2xx status (or could not be reached)."""
    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


class EmptyModelResponse(ProductLookupError):
    status_code = 500

    def __init__(self, message: str = "No response from Gemini"):
        super().__init__(message)


class MalformedModelOutput(ProductLookupError):
    status_code = 500


class NotAnAmazonUrl(ProductLookupError):
    status_code = 400
