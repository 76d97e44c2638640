"""Interfaces the workflow steps expect from the networks they talk to."""

from enum import Enum
from typing import Protocol

from stellar_sdk import Account, TransactionEnvelope

from stellar_workshop.models.balance import BalanceLine


class TransactionStatus(Enum):
    """Status of a submitted Soroban transaction."""

    NOT_FOUND = "NOT_FOUND"  # Not yet ingested by the RPC node
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (TransactionStatus.SUCCESS, TransactionStatus.FAILED)


class LedgerClient(Protocol):
    """Classic ledger access: accounts, Friendbot, transaction submission."""

    network_passphrase: str

    def load_account(self, account_id: str) -> Account:
        """Load the account with its current sequence number."""
        ...

    async def fund_account(self, address: str) -> None:
        """Fund a new account with testnet XLM."""
        ...

    def submit_transaction(
        self,
        envelope: TransactionEnvelope,
        description: str = "Transaction",
    ) -> str:
        """Submit a signed transaction. Returns tx hash once applied."""
        ...

    def get_balances(self, account_id: str) -> list[BalanceLine]:
        """Current balance lines of an account."""
        ...


class ContractNetwork(Protocol):
    """Soroban RPC access: preparation, submission, status polling."""

    network_passphrase: str

    def prepare_transaction(self, envelope: TransactionEnvelope) -> TransactionEnvelope:
        """Simulate and attach resource footprint and fees."""
        ...

    def send_transaction(
        self,
        envelope: TransactionEnvelope,
        description: str = "Transaction",
    ) -> str:
        """Send a signed transaction. Returns tx hash without waiting."""
        ...

    def get_transaction_status(self, tx_hash: str) -> TransactionStatus:
        """Current status of a sent transaction."""
        ...
