"""
Error mapper for failed Colore exchanges.

Turns a failed HTTP response body, or a failed connection attempt, into
one of the typed errors in colore.errors.
"""

import json
import logging
from typing import List, Optional, Union

from pydantic import BaseModel, ValidationError

from colore.constants import UNKNOWN_ERROR_MESSAGE
from colore.errors import (
    ErrorKind,
    ColoreError,
    APIError,
    ClientError,
    ServerError,
    ColoreUnavailable
)

logger = logging.getLogger(__name__)


class ErrorBody(BaseModel):
    """Error object returned by Colore: {"status", "description", "backtrace"}."""
    status: Optional[int] = None
    description: Optional[str] = None
    backtrace: Optional[Union[str, List[str]]] = None


class ErrorMapper:
    """
    Maps failed exchanges to typed errors.

    Classification Rules:
    - UNAVAILABLE: the transport never connected, regardless of any body
    - CLIENT: decoded status in 400-499 (inclusive)
    - SERVER: any other status, a missing status, or an undecodable body
    """

    CLIENT_ERROR_RANGE = range(400, 500)

    def classify(self, status: Optional[int], connected: bool = True) -> ErrorKind:
        """
        Classify a failed exchange.

        Args:
            status: Status decoded from the error body (None if absent)
            connected: Whether a response was received at all

        Returns:
            ErrorKind enum value (UNAVAILABLE, CLIENT or SERVER)
        """
        if not connected:
            return ErrorKind.UNAVAILABLE

        if status is not None and status in self.CLIENT_ERROR_RANGE:
            return ErrorKind.CLIENT

        return ErrorKind.SERVER

    def parse_body(self, body: Union[bytes, str, None]) -> Optional[ErrorBody]:
        """
        Decode a response body as a Colore error object.

        Returns:
            ErrorBody, or None if the body is not a JSON object of the expected shape
        """
        if not body:
            return None

        try:
            data = json.loads(body)
        except (ValueError, UnicodeDecodeError):
            return None

        if not isinstance(data, dict):
            return None

        try:
            return ErrorBody.model_validate(data)
        except ValidationError as e:
            logger.debug(f"Error body does not match expected shape: {e}")
            return None

    def build(
        self,
        kind: ErrorKind,
        status: int = 0,
        message: str = UNKNOWN_ERROR_MESSAGE,
        backtrace: Optional[Union[str, List[str]]] = None,
        body: Union[bytes, str, None] = None
    ) -> ColoreError:
        """Instantiate the exception for a classified failure."""
        if kind == ErrorKind.UNAVAILABLE:
            return ColoreUnavailable()
        if kind == ErrorKind.CLIENT:
            return ClientError(status, message, backtrace, body)
        return ServerError(status, message, backtrace, body)

    def from_response(self, body: Union[bytes, str, None]) -> APIError:
        """
        Build the typed error for a failed response.

        Args:
            body: Raw response body

        Returns:
            ClientError or ServerError, always carrying the raw body
        """
        error_body = self.parse_body(body)

        if error_body is None:
            return self.build(ErrorKind.SERVER, body=body)

        status = error_body.status if error_body.status is not None else 0
        message = error_body.description if error_body.description is not None else UNKNOWN_ERROR_MESSAGE

        return self.build(self.classify(error_body.status), status, message, error_body.backtrace, body)

    def from_transport_error(self, exception: Exception) -> ColoreUnavailable:
        """
        Build the error for a connection that could not be established.

        The exception is only logged; the resulting error carries a fixed message.
        """
        kind = self.classify(None, connected=False)
        logger.debug(f"Transport failure talking to Colore ({kind.value}): {type(exception).__name__}: {exception}")
        return self.build(kind)


_error_mapper = ErrorMapper()


def from_response(body: Union[bytes, str, None]) -> APIError:
    """Shortcut for ErrorMapper().from_response(body)."""
    return _error_mapper.from_response(body)
