"""Shared fixtures: in-memory ledgers and an in-process Soroswap API."""

from typing import Any, Callable

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from stellar_sdk import Account, StrKey, TransactionBuilder, TransactionEnvelope, scval

from soroswap_client import SoroswapClient
from stellar_workshop.blockchain.mock import MockLedger, MockSorobanNetwork
from stellar_workshop.exceptions import TransactionFailedError

API_KEY = "test-api-key"
BASE_URL = "http://soroswap.test"
ROUTER_ID = StrKey.encode_contract(b"\x01" * 32)

# Fake market rate of the in-process API: 1 unit in buys 125 units out
QUOTE_RATE = 125


def _contract_call(
    source: str,
    function_name: str,
    parameters: list,
    network_passphrase: str,
) -> str:
    """Unsigned router invocation, as the API returns it."""
    builder = TransactionBuilder(
        source_account=Account(source, 0),
        network_passphrase=network_passphrase,
        base_fee=100,
    )
    builder.append_invoke_contract_function_op(
        contract_id=ROUTER_ID,
        function_name=function_name,
        parameters=parameters,
    )
    return builder.set_timeout(300).build().to_xdr()


def create_soroswap_app(network: MockSorobanNetwork, api_key: str = API_KEY) -> FastAPI:
    """
    In-process stand-in for the Soroswap API.

    Every request is recorded in app.state.calls as (path, body).
    app.state.failures maps a path to the (status, body) it should
    answer with instead; a str body is sent as plain text. /send forwards
    to the mock Soroban network.
    """
    app = FastAPI()
    app.state.calls = []
    app.state.failures = {}

    @app.middleware("http")
    async def authenticate(request: Request, call_next):
        if request.headers.get("authorization") != f"Bearer {api_key}":
            return JSONResponse(status_code=401, content={"message": "Unauthorized"})
        if request.query_params.get("network") != "testnet":
            return JSONResponse(status_code=400, content={"message": "Unknown network"})
        failure = app.state.failures.get(request.url.path)
        if failure is not None:
            status, body = failure
            if isinstance(body, str):
                return PlainTextResponse(body, status_code=status)
            return JSONResponse(status_code=status, content=body)
        return await call_next(request)

    async def record(request: Request) -> dict[str, Any]:
        body = await request.json()
        app.state.calls.append((request.url.path, body))
        return body

    @app.post("/quote")
    async def quote(request: Request):
        body = await record(request)
        amount = int(body["amount"])
        return {
            "assetIn": body["assetIn"],
            "assetOut": body["assetOut"],
            "amountIn": str(amount),
            "amountOut": str(amount * QUOTE_RATE * 997 // 1000),
            "tradeType": body["tradeType"],
            "priceImpactPct": "0.05",
            "platform": "soroswap",
            "routePlan": [{"protocol": "soroswap", "path": [body["assetIn"], body["assetOut"]]}],
        }

    @app.post("/quote/build")
    async def build(request: Request):
        body = await record(request)
        quote = body["quote"]
        xdr = _contract_call(
            body["from"],
            "swap_exact_tokens_for_tokens",
            [
                scval.to_int128(int(quote["amountIn"])),
                scval.to_int128(int(quote["amountOut"])),
                scval.to_vec([
                    scval.to_address(quote["assetIn"]),
                    scval.to_address(quote["assetOut"]),
                ]),
                scval.to_address(body["to"]),
            ],
            network.network_passphrase,
        )
        return {"xdr": xdr}

    @app.post("/send")
    async def send(request: Request):
        body = await record(request)
        envelope = TransactionEnvelope.from_xdr(body["xdr"], network.network_passphrase)
        try:
            tx_hash = network.send_transaction(envelope, "Soroswap send")
        except TransactionFailedError as e:
            return JSONResponse(status_code=400, content={"message": str(e.response_body)})
        return {"hash": tx_hash, "status": "PENDING"}

    @app.post("/liquidity/add")
    async def add_liquidity(request: Request):
        body = await record(request)
        xdr = _contract_call(
            body["to"],
            "add_liquidity",
            [
                scval.to_address(body["assetA"]),
                scval.to_address(body["assetB"]),
                scval.to_int128(int(body["amountA"])),
                scval.to_int128(int(body["amountB"])),
                scval.to_address(body["to"]),
            ],
            network.network_passphrase,
        )
        return {"xdr": xdr}

    return app


@pytest.fixture
def ledger() -> MockLedger:
    return MockLedger()


@pytest.fixture
def network() -> MockSorobanNetwork:
    return MockSorobanNetwork()


@pytest.fixture
def soroswap_app(network: MockSorobanNetwork) -> FastAPI:
    return create_soroswap_app(network)


@pytest.fixture
def make_soroswap(soroswap_app: FastAPI) -> Callable[..., SoroswapClient]:
    """Factory for clients talking to the in-process API."""

    def make(api_key: str = API_KEY, network: str = "testnet") -> SoroswapClient:
        return SoroswapClient(
            api_key=api_key,
            base_url=BASE_URL,
            network=network,
            transport=httpx.ASGITransport(app=soroswap_app),
        )

    return make
