"""Soroswap client for the aggregator's quote, build and send API."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

import httpx

from soroswap_client.exceptions import (
    AuthenticationError,
    NetworkError,
    NotFoundError,
    SoroswapError,
)

DEFAULT_BASE_URL = "https://soroswap-api-staging-436722401508.us-central1.run.app"


class TradeType(Enum):
    """Which side of the trade is fixed."""

    EXACT_IN = "EXACT_IN"  # Amount is what the sender pays
    EXACT_OUT = "EXACT_OUT"  # Amount is what the receiver gets


class SupportedProtocol(Enum):
    """Venues the aggregator can route through."""

    SOROSWAP = "soroswap"
    PHOENIX = "phoenix"
    AQUA = "aqua"
    SDEX = "sdex"


@dataclass
class Quote:
    """
    Price quote for a trade.

    Amounts are integers in the asset's smallest unit (stroops for
    7-decimal assets). raw holds the full response, which is sent back
    unchanged when building the transaction.
    """

    asset_in: str
    asset_out: str
    amount_in: int
    amount_out: int
    trade_type: str
    price_impact_pct: Optional[str] = None
    platform: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @staticmethod
    def from_response(data: dict[str, Any]) -> "Quote":
        return Quote(
            asset_in=data["assetIn"],
            asset_out=data["assetOut"],
            amount_in=int(data["amountIn"]),
            amount_out=int(data["amountOut"]),
            trade_type=data.get("tradeType", TradeType.EXACT_IN.value),
            price_impact_pct=(
                str(data["priceImpactPct"]) if data.get("priceImpactPct") is not None else None
            ),
            platform=data.get("platform"),
            raw=data,
        )


@dataclass
class BuiltTransaction:
    """Unsigned transaction XDR returned by the API."""

    xdr: str


def _built_transaction(response: dict[str, Any]) -> BuiltTransaction:
    xdr = response.get("xdr")
    if not isinstance(xdr, str) or not xdr:
        raise SoroswapError("Malformed response: no transaction XDR", response_body=response)
    return BuiltTransaction(xdr=xdr)


# Send statuses that mean the transaction will never be applied
SEND_ERROR_STATUSES = frozenset({"ERROR", "FAILED", "TRY_AGAIN_LATER"})


@dataclass
class SendResult:
    """Response from broadcasting a signed transaction."""

    tx_hash: Optional[str]
    status: Optional[str]
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_error(self) -> bool:
        return (self.status or "").upper() in SEND_ERROR_STATUSES


class SoroswapClient:
    """
    Client for the Soroswap aggregator API.

    Requests are authenticated with a bearer API key and scoped to one
    network ("testnet" or "mainnet").
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        network: str = "testnet",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: Soroswap API key
            base_url: Base URL of the Soroswap API
            network: Network every request is scoped to
            timeout: Request timeout in seconds
            transport: Optional httpx transport (e.g. for an in-process app)
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._network = network
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def network(self) -> str:
        return self._network

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "SoroswapClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
    ) -> dict:
        """Make an authenticated request to the API."""
        url = f"{self._base_url}{path}"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = await self._client.request(
                method,
                url,
                params={"network": self._network},
                headers=headers,
                json=json,
            )
        except httpx.RequestError as e:
            raise NetworkError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            try:
                body: Any = response.json()
            except ValueError:
                body = response.text

            if response.status_code in (401, 403):
                raise AuthenticationError(
                    "API key rejected", response.status_code, body
                )
            elif response.status_code == 404:
                raise NotFoundError(
                    f"Not found: {path}", response.status_code, body
                )
            raise SoroswapError(
                f"HTTP {response.status_code}: {path}", response.status_code, body
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SoroswapError(
                f"Malformed response: {path}", response.status_code, response.text
            ) from e
        if not isinstance(data, dict):
            raise SoroswapError(f"Malformed response: {path}", response.status_code, data)
        return data

    async def quote(
        self,
        asset_in: str,
        asset_out: str,
        amount: int,
        trade_type: TradeType = TradeType.EXACT_IN,
        protocols: Sequence[SupportedProtocol] = (SupportedProtocol.SOROSWAP,),
        slippage_bps: int = 50,
    ) -> Quote:
        """
        Request a quote.

        Args:
            asset_in: Contract address of the asset sold
            asset_out: Contract address of the asset bought
            amount: Amount in smallest units, interpreted per trade_type
            trade_type: EXACT_IN or EXACT_OUT
            protocols: Venues to route through
            slippage_bps: Tolerated slippage in basis points

        Returns:
            Quote to pass to build()
        """
        response = await self._request(
            "POST",
            "/quote",
            json={
                "assetIn": asset_in,
                "assetOut": asset_out,
                "amount": str(amount),
                "tradeType": trade_type.value,
                "protocols": [p.value for p in protocols],
                "slippageBps": slippage_bps,
            },
        )
        try:
            return Quote.from_response(response)
        except (KeyError, TypeError, ValueError) as e:
            raise SoroswapError(f"Malformed quote: {e!r}", response_body=response) from e

    async def build(
        self,
        quote: Quote,
        from_address: str,
        to_address: str,
    ) -> BuiltTransaction:
        """
        Build the transaction that executes a quote.

        Args:
            quote: Quote returned by quote()
            from_address: Account paying and signing
            to_address: Account receiving the output

        Returns:
            Unsigned transaction XDR
        """
        response = await self._request(
            "POST",
            "/quote/build",
            json={
                "quote": quote.raw,
                "from": from_address,
                "to": to_address,
            },
        )
        return _built_transaction(response)

    async def send(self, signed_xdr: str, launchtube: bool = False) -> SendResult:
        """
        Broadcast a signed transaction through the API.

        Args:
            signed_xdr: Signed transaction envelope XDR
            launchtube: Submit through Launchtube (fee sponsoring)

        Returns:
            SendResult with whatever hash and status the API reported
        """
        response = await self._request(
            "POST",
            "/send",
            json={"xdr": signed_xdr, "launchtube": launchtube},
        )
        return SendResult(
            tx_hash=response.get("hash") or response.get("txHash"),
            status=response.get("status"),
            raw=response,
        )

    async def add_liquidity(
        self,
        asset_a: str,
        asset_b: str,
        amount_a: int,
        amount_b: int,
        to: str,
        slippage_bps: int = 50,
    ) -> BuiltTransaction:
        """
        Build a transaction adding liquidity to the pool of two assets.

        Args:
            asset_a: Contract address of the first asset
            asset_b: Contract address of the second asset
            amount_a: Desired amount of asset_a in smallest units
            amount_b: Desired amount of asset_b in smallest units
            to: Account providing the liquidity and receiving shares
            slippage_bps: Tolerated slippage in basis points

        Returns:
            Unsigned transaction XDR
        """
        response = await self._request(
            "POST",
            "/liquidity/add",
            json={
                "assetA": asset_a,
                "assetB": asset_b,
                "amountA": str(amount_a),
                "amountB": str(amount_b),
                "to": to,
                "slippageBps": str(slippage_bps),
            },
        )
        return _built_transaction(response)
