"""Exceptions for the Soroswap client."""

from typing import Any, Optional


class SoroswapError(Exception):
    """Base exception for Soroswap client errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[Any] = None,
    ):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)


class AuthenticationError(SoroswapError):
    """Raised when the API key is missing or rejected."""

    pass


class NotFoundError(SoroswapError):
    """Raised when a resource (e.g. a route or pool) is not found."""

    pass


class NetworkError(SoroswapError):
    """Raised when there's a network communication error."""

    pass
