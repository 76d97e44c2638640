"""Building, signing and submitting classic transactions."""

import logging
import struct
from typing import Callable

from stellar_sdk import TransactionBuilder, TransactionEnvelope

from stellar_workshop.blockchain.protocols import LedgerClient
from stellar_workshop.config import BASE_FEE
from stellar_workshop.exceptions import WorkshopError
from stellar_workshop.models.wallet import Wallet

logger = logging.getLogger(__name__)

TX_TIMEOUT = 30  # seconds until the transaction expires


def new_transaction(
    ledger: LedgerClient,
    source_account: str,
    base_fee: int = BASE_FEE,
) -> TransactionBuilder:
    """
    Create a transaction builder for the source account.

    Loads the account first so the builder carries the current sequence.
    """
    account = ledger.load_account(source_account)
    return TransactionBuilder(
        source_account=account,
        network_passphrase=ledger.network_passphrase,
        base_fee=base_fee,
    )


def submit_operations(
    ledger: LedgerClient,
    signer: Wallet,
    append_operations: Callable[[TransactionBuilder], None],
    description: str,
    base_fee: int = BASE_FEE,
) -> str:
    """
    Build a transaction from the signer's account, sign it and submit it.

    Args:
        ledger: Ledger to submit to
        signer: Source account and only signer
        append_operations: Adds the operations to the builder
        description: Label used in logs and errors
        base_fee: Base fee per operation in stroops

    Returns:
        Transaction hash
    """
    builder = new_transaction(ledger, signer.public_key, base_fee)
    append_operations(builder)
    envelope = builder.set_timeout(TX_TIMEOUT).build()
    envelope.sign(signer.keypair)

    logger.info(f"Submitting {description} from {signer.name} ({signer.public_key})")
    return ledger.submit_transaction(envelope, description)


def sign_xdr(
    transaction_xdr: str,
    signer: Wallet,
    network_passphrase: str,
) -> TransactionEnvelope:
    """
    Parse a transaction built elsewhere and sign it locally.

    Raises:
        WorkshopError: The XDR does not decode to a transaction envelope
    """
    try:
        envelope = TransactionEnvelope.from_xdr(transaction_xdr, network_passphrase)
    except (ValueError, struct.error, EOFError) as e:
        raise WorkshopError(f"Invalid transaction XDR: {e}") from e
    envelope.sign(signer.keypair)
    return envelope
