"""Soroban RPC client for contract transactions."""

import logging

from stellar_sdk import SorobanServer, TransactionEnvelope
from stellar_sdk.soroban_rpc import GetTransactionStatus, SendTransactionStatus

from stellar_workshop.blockchain.protocols import TransactionStatus
from stellar_workshop.config import NETWORK_PASSPHRASE, SOROBAN_RPC_URL
from stellar_workshop.exceptions import TransactionFailedError

logger = logging.getLogger(__name__)

_STATUS_MAP = {
    GetTransactionStatus.SUCCESS: TransactionStatus.SUCCESS,
    GetTransactionStatus.FAILED: TransactionStatus.FAILED,
    GetTransactionStatus.NOT_FOUND: TransactionStatus.NOT_FOUND,
}


class SorobanNetwork:
    """
    Client for Soroban smart-contract transactions.

    Handles simulation, preparation, submission and status lookups.
    Waiting for finality is left to the poller.
    """

    def __init__(
        self,
        rpc_url: str = SOROBAN_RPC_URL,
        network_passphrase: str = NETWORK_PASSPHRASE,
    ) -> None:
        self.network_passphrase = network_passphrase
        self._server = SorobanServer(rpc_url)

    def close(self) -> None:
        self._server.close()

    def prepare_transaction(self, envelope: TransactionEnvelope) -> TransactionEnvelope:
        """
        Simulate a transaction and attach its resource footprint and fee.

        Raises:
            TransactionFailedError: If the simulation reports an error
        """
        sim_response = self._server.simulate_transaction(envelope)

        if sim_response.error:
            raise TransactionFailedError(
                "Simulation",
                response_body=sim_response.error,
            )

        return self._server.prepare_transaction(envelope, sim_response)

    def send_transaction(
        self,
        envelope: TransactionEnvelope,
        description: str = "Transaction",
    ) -> str:
        """
        Send a signed transaction.

        Returns:
            Transaction hash (the transaction may still be pending)
        """
        response = self._server.send_transaction(envelope)

        if response.status == SendTransactionStatus.ERROR:
            raise TransactionFailedError(
                description,
                tx_hash=response.hash,
                response_body=response.error_result_xdr,
            )

        logger.info(f"{description} sent: {response.hash} ({response.status.value})")
        return response.hash

    def get_transaction_status(self, tx_hash: str) -> TransactionStatus:
        result = self._server.get_transaction(tx_hash)
        return _STATUS_MAP.get(result.status, TransactionStatus.PENDING)
