from stellar_workshop.blockchain.protocols import (
    ContractNetwork,
    LedgerClient,
    TransactionStatus,
)
from stellar_workshop.blockchain.horizon import HorizonLedger
from stellar_workshop.blockchain.soroban import SorobanNetwork
from stellar_workshop.blockchain.polling import PollPolicy, wait_for_transaction
from stellar_workshop.blockchain.mock import MockLedger, MockSorobanNetwork

__all__ = [
    "ContractNetwork",
    "LedgerClient",
    "TransactionStatus",
    "HorizonLedger",
    "SorobanNetwork",
    "PollPolicy",
    "wait_for_transaction",
    "MockLedger",
    "MockSorobanNetwork",
]
