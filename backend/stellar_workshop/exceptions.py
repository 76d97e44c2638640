"""Exceptions raised by the workshop steps."""

from typing import Any, Optional


class WorkshopError(Exception):
    """Base exception for workshop errors."""

    response_body: Optional[Any] = None


class FaucetError(WorkshopError):
    """Raised when Friendbot refuses or fails to fund an account."""

    def __init__(self, address: str, response_body: Optional[Any] = None):
        self.address = address
        self.response_body = response_body
        super().__init__(f"Friendbot could not fund {address}")


class TransactionFailedError(WorkshopError):
    """Raised when the network rejects a transaction."""

    def __init__(
        self,
        description: str,
        tx_hash: Optional[str] = None,
        response_body: Optional[Any] = None,
    ):
        self.description = description
        self.tx_hash = tx_hash
        self.response_body = response_body
        super().__init__(f"{description} failed")

    @property
    def result_codes(self) -> Optional[dict]:
        """Horizon-style result codes, if the response carried them."""
        if isinstance(self.response_body, dict):
            return self.response_body.get("result_codes")
        return None


class TransactionTimeoutError(WorkshopError):
    """Raised when a transaction does not reach a terminal state in time."""

    def __init__(self, tx_hash: str, timeout: float):
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(f"Transaction {tx_hash} did not complete within {timeout}s")


class PollCancelledError(WorkshopError):
    """Raised when a transaction poll is cancelled before a terminal state."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Polling for transaction {tx_hash} was cancelled")


def describe_error(error: BaseException) -> str:
    """Error message followed by the nested response body, if any."""
    body = getattr(error, "response_body", None)
    if body is None:
        return str(error)
    return f"{error} (response: {body})"
