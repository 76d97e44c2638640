from decimal import Decimal

import httpx
import pytest

from stellar_workshop.blockchain.horizon import HorizonLedger
from stellar_workshop.blockchain.mock import MockLedger
from stellar_workshop.exceptions import FaucetError
from stellar_workshop.models.wallet import Wallet
from stellar_workshop.steps.accounts import create_wallet, fund_wallets, load_balances

FRIENDBOT_URL = "https://friendbot.test"


def horizon_ledger(handler) -> HorizonLedger:
    """HorizonLedger whose Friendbot requests go to handler."""
    return HorizonLedger(
        horizon_url="https://horizon.test",
        friendbot_url=FRIENDBOT_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestWallets:
    """Tests for key pair generation."""

    def test_wallets_are_unique(self):
        first = create_wallet("Trader")
        second = create_wallet("Trader")

        assert first.public_key != second.public_key
        assert first.public_key.startswith("G")
        assert first.secret.startswith("S")


class TestFunding:
    """Tests for concurrent Friendbot funding."""

    @pytest.mark.asyncio
    async def test_fund_all_wallets(self, ledger: MockLedger):
        """Every wallet is funded and starts with 10,000 XLM."""
        wallets = [Wallet.create(name) for name in ("A", "B", "C")]

        await fund_wallets(ledger, wallets)

        assert sorted(ledger.fund_requests) == sorted(w.public_key for w in wallets)
        for wallet in wallets:
            lines = load_balances(ledger, wallet)
            assert len(lines) == 1
            assert lines[0].is_native
            assert lines[0].balance == Decimal("10000")

    @pytest.mark.asyncio
    async def test_refused_request_aborts(self, ledger: MockLedger):
        """One refusal fails the whole funding step."""
        wallets = [Wallet.create(name) for name in ("A", "B")]
        ledger.refused_faucet.add(wallets[1].public_key)

        with pytest.raises(FaucetError) as exc_info:
            await fund_wallets(ledger, wallets)

        assert exc_info.value.address == wallets[1].public_key

    @pytest.mark.asyncio
    async def test_already_funded(self, ledger: MockLedger):
        """Friendbot refuses to fund an existing account."""
        wallet = Wallet.create("A")
        await fund_wallets(ledger, [wallet])

        with pytest.raises(FaucetError) as exc_info:
            await fund_wallets(ledger, [wallet])

        assert exc_info.value.response_body == {"detail": "createAccountAlreadyExist"}


class TestHorizonFriendbot:
    """Tests for HorizonLedger's Friendbot requests."""

    @pytest.mark.asyncio
    async def test_fund_account_sends_address(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"successful": True})

        ledger = horizon_ledger(handler)
        address = Wallet.create("A").public_key
        try:
            await ledger.fund_account(address)
        finally:
            await ledger.close()

        assert len(requests) == 1
        assert requests[0].url.params["addr"] == address

    @pytest.mark.asyncio
    async def test_refusal_carries_body(self):
        """A non-200 answer becomes a FaucetError with the response body."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"detail": "createAccountAlreadyExist"})

        ledger = horizon_ledger(handler)
        try:
            with pytest.raises(FaucetError) as exc_info:
                await ledger.fund_account(Wallet.create("A").public_key)
        finally:
            await ledger.close()

        assert exc_info.value.response_body == {"detail": "createAccountAlreadyExist"}

    @pytest.mark.asyncio
    async def test_unreachable(self):
        """Connection errors are not retried."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        ledger = horizon_ledger(handler)
        try:
            with pytest.raises(FaucetError):
                await ledger.fund_account(Wallet.create("A").public_key)
        finally:
            await ledger.close()

        assert len(calls) == 1
