"""
Error hierarchy for the Colore client.

Every failure of a public client operation surfaces as one of three types:
ColoreUnavailable, ClientError or ServerError.
"""

from enum import Enum
from typing import List, Optional, Union

from colore.constants import UNAVAILABLE_MESSAGE


class ErrorKind(Enum):
    """Error classification for a failed exchange with Colore."""
    UNAVAILABLE = "UNAVAILABLE"  # No connection could be made
    CLIENT = "CLIENT"            # 4xx, caller-correctable
    SERVER = "SERVER"            # 5xx or undecodable response


class ColoreError(Exception):
    """Base exception for all Colore client errors."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__


class ColoreUnavailable(ColoreError):
    """
    The Colore storage system could not be reached at all.

    Examples:
    - Connection refused
    - DNS resolution failure
    - Connect timeout
    """

    http_code = None

    def __init__(self):
        super().__init__(UNAVAILABLE_MESSAGE)


class APIError(ColoreError):
    """
    Colore answered with an error response.

    Attributes:
        http_code: Status reported in the error body (0 when it could not be decoded)
        backtrace: Server-side backtrace, when the client asked for one
        response_body: Raw response body, kept for debugging
    """

    def __init__(
        self,
        http_code: int,
        message: str,
        backtrace: Optional[Union[str, List[str]]] = None,
        response_body: Optional[Union[bytes, str]] = None
    ):
        super().__init__(message)
        self.http_code = http_code
        self.backtrace = backtrace
        self.response_body = response_body

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(http_code={self.http_code}, message={self.message!r})"


class ClientError(APIError):
    """
    Caller-correctable error (status 400-499).

    Examples:
    - Document not found
    - Duplicate doc_id
    - Deleting the current version
    """
    pass


class ServerError(APIError):
    """Server-side error (status 500 and above, or an unknown status)."""
    pass
