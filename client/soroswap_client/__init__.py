from soroswap_client.client import (
    SoroswapClient,
    Quote,
    BuiltTransaction,
    SendResult,
    TradeType,
    SupportedProtocol,
)
from soroswap_client.exceptions import (
    SoroswapError,
    AuthenticationError,
    NotFoundError,
    NetworkError,
)

__all__ = [
    "SoroswapClient",
    "Quote",
    "BuiltTransaction",
    "SendResult",
    "TradeType",
    "SupportedProtocol",
    "SoroswapError",
    "AuthenticationError",
    "NotFoundError",
    "NetworkError",
]
