from typing import Callable

import httpx
import pytest
from fastapi import FastAPI
from stellar_sdk import Asset, Network, TransactionEnvelope

from soroswap_client import (
    AuthenticationError,
    NetworkError,
    NotFoundError,
    SoroswapClient,
    SendResult,
    SoroswapError,
    TradeType,
)
from stellar_workshop.blockchain.mock import MockSorobanNetwork
from stellar_workshop.models.wallet import Wallet

PASSPHRASE = Network.TESTNET_NETWORK_PASSPHRASE
XLM_CONTRACT = Asset.native().contract_id(PASSPHRASE)
RIO_CONTRACT = Asset("RIO", Wallet.create("issuer").public_key).contract_id(PASSPHRASE)


class TestQuote:
    """Tests for quote requests."""

    @pytest.mark.asyncio
    async def test_quote_request_and_parse(
        self, make_soroswap: Callable[..., SoroswapClient], soroswap_app: FastAPI
    ):
        async with make_soroswap() as client:
            quote = await client.quote(XLM_CONTRACT, RIO_CONTRACT, 5_000_000_000, slippage_bps=500)

        assert quote.asset_in == XLM_CONTRACT
        assert quote.asset_out == RIO_CONTRACT
        assert quote.amount_in == 5_000_000_000
        assert quote.amount_out == 5_000_000_000 * 125 * 997 // 1000
        assert quote.trade_type == TradeType.EXACT_IN.value
        assert quote.platform == "soroswap"

        path, body = soroswap_app.state.calls[0]
        assert path == "/quote"
        assert body == {
            "assetIn": XLM_CONTRACT,
            "assetOut": RIO_CONTRACT,
            "amount": "5000000000",
            "tradeType": "EXACT_IN",
            "protocols": ["soroswap"],
            "slippageBps": 500,
        }

    @pytest.mark.asyncio
    async def test_rejected_key(self, make_soroswap: Callable[..., SoroswapClient]):
        async with make_soroswap(api_key="wrong") as client:
            with pytest.raises(AuthenticationError) as exc_info:
                await client.quote(XLM_CONTRACT, RIO_CONTRACT, 1)

        assert exc_info.value.status_code == 401
        assert exc_info.value.response_body == {"message": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_not_found(
        self, make_soroswap: Callable[..., SoroswapClient], soroswap_app: FastAPI
    ):
        soroswap_app.state.failures["/quote"] = (404, {"message": "No route"})

        async with make_soroswap() as client:
            with pytest.raises(NotFoundError):
                await client.quote(XLM_CONTRACT, RIO_CONTRACT, 1)

    @pytest.mark.asyncio
    async def test_server_error(
        self, make_soroswap: Callable[..., SoroswapClient], soroswap_app: FastAPI
    ):
        """Other HTTP errors keep the status and body."""
        soroswap_app.state.failures["/quote"] = (503, {"message": "Unavailable"})

        async with make_soroswap() as client:
            with pytest.raises(SoroswapError) as exc_info:
                await client.quote(XLM_CONTRACT, RIO_CONTRACT, 1)

        assert type(exc_info.value) is SoroswapError
        assert exc_info.value.status_code == 503
        assert exc_info.value.response_body == {"message": "Unavailable"}

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with SoroswapClient(
            api_key="key",
            base_url="http://soroswap.test",
            transport=httpx.MockTransport(handler),
        ) as client:
            with pytest.raises(NetworkError):
                await client.quote(XLM_CONTRACT, RIO_CONTRACT, 1)


class TestBuildAndSend:
    """Tests for building and broadcasting transactions."""

    @pytest.mark.asyncio
    async def test_build_returns_unsigned_transaction(
        self, make_soroswap: Callable[..., SoroswapClient], soroswap_app: FastAPI
    ):
        trader = Wallet.create("Trader")

        async with make_soroswap() as client:
            quote = await client.quote(XLM_CONTRACT, RIO_CONTRACT, 10_000_000)
            built = await client.build(quote, trader.public_key, trader.public_key)

        envelope = TransactionEnvelope.from_xdr(built.xdr, PASSPHRASE)
        assert envelope.transaction.source.account_id == trader.public_key
        assert envelope.signatures == []

        path, body = soroswap_app.state.calls[1]
        assert path == "/quote/build"
        assert body["quote"] == quote.raw
        assert body["from"] == body["to"] == trader.public_key

    @pytest.mark.asyncio
    async def test_send_signed_transaction(
        self, make_soroswap: Callable[..., SoroswapClient], network: MockSorobanNetwork
    ):
        trader = Wallet.create("Trader")

        async with make_soroswap() as client:
            quote = await client.quote(XLM_CONTRACT, RIO_CONTRACT, 10_000_000)
            built = await client.build(quote, trader.public_key, trader.public_key)
            envelope = TransactionEnvelope.from_xdr(built.xdr, PASSPHRASE)
            envelope.sign(trader.keypair)
            result = await client.send(envelope.to_xdr())

        assert result.tx_hash == envelope.hash_hex()
        assert result.status == "PENDING"
        assert result.tx_hash in network.sent

    @pytest.mark.asyncio
    async def test_send_unsigned_rejected(
        self, make_soroswap: Callable[..., SoroswapClient], network: MockSorobanNetwork
    ):
        trader = Wallet.create("Trader")

        async with make_soroswap() as client:
            built = await client.add_liquidity(
                XLM_CONTRACT, RIO_CONTRACT, 1, 125, to=trader.public_key
            )
            with pytest.raises(SoroswapError) as exc_info:
                await client.send(built.xdr)

        assert exc_info.value.status_code == 400
        assert network.sent == {}

    @pytest.mark.asyncio
    async def test_add_liquidity_body(
        self, make_soroswap: Callable[..., SoroswapClient], soroswap_app: FastAPI
    ):
        """Amounts and slippage are sent as strings."""
        provider = Wallet.create("Token Holder")

        async with make_soroswap() as client:
            await client.add_liquidity(
                XLM_CONTRACT,
                RIO_CONTRACT,
                80_000_000_000,
                10_000_000_000_000,
                to=provider.public_key,
                slippage_bps=500,
            )

        path, body = soroswap_app.state.calls[0]
        assert path == "/liquidity/add"
        assert body == {
            "assetA": XLM_CONTRACT,
            "assetB": RIO_CONTRACT,
            "amountA": "80000000000",
            "amountB": "10000000000000",
            "to": provider.public_key,
            "slippageBps": "500",
        }


class TestMalformedResponses:
    """Successful statuses with unusable bodies raise SoroswapError."""

    @pytest.mark.asyncio
    async def test_build_without_xdr(
        self, make_soroswap: Callable[..., SoroswapClient], soroswap_app: FastAPI
    ):
        soroswap_app.state.failures["/quote/build"] = (200, {"message": "no route"})
        trader = Wallet.create("Trader")

        async with make_soroswap() as client:
            quote = await client.quote(XLM_CONTRACT, RIO_CONTRACT, 10_000_000)
            with pytest.raises(SoroswapError) as exc_info:
                await client.build(quote, trader.public_key, trader.public_key)

        assert "no transaction XDR" in str(exc_info.value)
        assert exc_info.value.response_body == {"message": "no route"}

    @pytest.mark.asyncio
    async def test_add_liquidity_empty_xdr(
        self, make_soroswap: Callable[..., SoroswapClient], soroswap_app: FastAPI
    ):
        soroswap_app.state.failures["/liquidity/add"] = (200, {"xdr": ""})

        async with make_soroswap() as client:
            with pytest.raises(SoroswapError):
                await client.add_liquidity(
                    XLM_CONTRACT, RIO_CONTRACT, 1, 125, to=Wallet.create("Trader").public_key
                )

    @pytest.mark.asyncio
    async def test_body_not_json(
        self, make_soroswap: Callable[..., SoroswapClient], soroswap_app: FastAPI
    ):
        soroswap_app.state.failures["/quote"] = (200, "<html>gateway</html>")

        async with make_soroswap() as client:
            with pytest.raises(SoroswapError) as exc_info:
                await client.quote(XLM_CONTRACT, RIO_CONTRACT, 1)

        assert exc_info.value.status_code == 200
        assert exc_info.value.response_body == "<html>gateway</html>"

    @pytest.mark.asyncio
    async def test_body_not_object(
        self, make_soroswap: Callable[..., SoroswapClient], soroswap_app: FastAPI
    ):
        soroswap_app.state.failures["/quote"] = (200, [1, 2])

        async with make_soroswap() as client:
            with pytest.raises(SoroswapError):
                await client.quote(XLM_CONTRACT, RIO_CONTRACT, 1)

    @pytest.mark.asyncio
    async def test_quote_bad_amount(
        self, make_soroswap: Callable[..., SoroswapClient], soroswap_app: FastAPI
    ):
        soroswap_app.state.failures["/quote"] = (
            200,
            {"assetIn": XLM_CONTRACT, "assetOut": RIO_CONTRACT, "amountIn": "1", "amountOut": "lots"},
        )

        async with make_soroswap() as client:
            with pytest.raises(SoroswapError) as exc_info:
                await client.quote(XLM_CONTRACT, RIO_CONTRACT, 1)

        assert "Malformed quote" in str(exc_info.value)


class TestSendResult:
    def test_error_statuses(self):
        assert SendResult(tx_hash=None, status="ERROR").is_error
        assert SendResult(tx_hash=None, status="try_again_later").is_error
        assert SendResult(tx_hash="ab", status="FAILED").is_error

    def test_pending_and_missing(self):
        assert not SendResult(tx_hash="ab", status="PENDING").is_error
        assert not SendResult(tx_hash="ab", status="SUCCESS").is_error
        assert not SendResult(tx_hash="ab", status=None).is_error
