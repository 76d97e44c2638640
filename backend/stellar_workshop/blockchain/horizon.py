"""Horizon client for classic Stellar operations."""

import logging
from typing import Optional

import httpx
from stellar_sdk import Account, Server, TransactionEnvelope
from stellar_sdk.exceptions import BadRequestError

from stellar_workshop.config import FRIENDBOT_URL, HORIZON_URL, NETWORK_PASSPHRASE
from stellar_workshop.exceptions import FaucetError, TransactionFailedError
from stellar_workshop.models.balance import BalanceLine

logger = logging.getLogger(__name__)


class HorizonLedger:
    """
    Client for the classic ledger through Horizon and Friendbot.

    Horizon submission is synchronous: a returned hash means the
    transaction was applied.
    """

    def __init__(
        self,
        horizon_url: str = HORIZON_URL,
        friendbot_url: str = FRIENDBOT_URL,
        network_passphrase: str = NETWORK_PASSPHRASE,
        http_client: Optional[httpx.AsyncClient] = None,
        friendbot_timeout: float = 120.0,
    ) -> None:
        self._friendbot_url = friendbot_url
        self.network_passphrase = network_passphrase
        self._server = Server(horizon_url)
        self._http = http_client or httpx.AsyncClient(timeout=friendbot_timeout)

    async def close(self) -> None:
        """Close the HTTP clients."""
        await self._http.aclose()
        self._server.close()

    def load_account(self, account_id: str) -> Account:
        return self._server.load_account(account_id)

    async def fund_account(self, address: str) -> None:
        """
        Fund an account using Friendbot.

        Raises:
            FaucetError: Friendbot is unreachable or refused (e.g. the
                account is already funded). Not retried.
        """
        try:
            response = await self._http.get(
                self._friendbot_url, params={"addr": address}
            )
        except httpx.RequestError as e:
            raise FaucetError(address, str(e)) from e

        if response.status_code != 200:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            raise FaucetError(address, body)

        logger.info(f"Funded {address} via Friendbot")

    def submit_transaction(
        self,
        envelope: TransactionEnvelope,
        description: str = "Transaction",
    ) -> str:
        """
        Submit a signed transaction to Horizon.

        Returns:
            Transaction hash

        Raises:
            TransactionFailedError: Horizon rejected the transaction; the
                error carries Horizon's extras (result codes).
        """
        try:
            response = self._server.submit_transaction(envelope)
        except BadRequestError as e:
            raise TransactionFailedError(
                description,
                tx_hash=envelope.hash_hex(),
                response_body=e.extras,
            ) from e

        if not response.get("successful", False):
            raise TransactionFailedError(
                description,
                tx_hash=response.get("hash"),
                response_body=response,
            )

        tx_hash = response["hash"]
        logger.info(f"{description} applied: {tx_hash}")
        return tx_hash

    def get_balances(self, account_id: str) -> list[BalanceLine]:
        record = self._server.accounts().account_id(account_id).call()
        return [BalanceLine.from_horizon(b) for b in record["balances"]]
