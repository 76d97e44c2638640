"""Asset issuance: trustlines, payments, locking the issuer."""

import logging
from decimal import Decimal
from typing import Optional, Sequence, Union

from stellar_sdk import Asset, LiquidityPoolAsset, TransactionBuilder

from stellar_workshop.blockchain.protocols import LedgerClient
from stellar_workshop.blockchain.transaction import submit_operations
from stellar_workshop.models.wallet import Wallet

logger = logging.getLogger(__name__)

Amount = Union[str, Decimal]


def define_asset(code: str, issuer: Wallet) -> Asset:
    """Describe a custom asset issued by the given wallet."""
    return Asset(code, issuer.public_key)


def create_trustlines(
    ledger: LedgerClient,
    holder: Wallet,
    assets: Sequence[Union[Asset, LiquidityPoolAsset]],
    limit: Optional[Amount] = None,
) -> str:
    """
    Establish trustlines from the holder to each asset, in one transaction.

    Args:
        ledger: Ledger client
        holder: Account that will hold the assets; signs the transaction
        assets: Assets or pool assets to trust
        limit: Maximum balance; the network maximum when omitted

    Returns:
        Transaction hash
    """
    if not assets:
        raise ValueError("At least one asset is required")

    def append(builder: TransactionBuilder) -> None:
        for asset in assets:
            builder.append_change_trust_op(
                asset=asset,
                limit=str(limit) if limit is not None else None,
            )

    return submit_operations(ledger, holder, append, f"Trustlines for {holder.name}")


def transfer(
    ledger: LedgerClient,
    source: Wallet,
    destination: str,
    amounts: Sequence[tuple[Asset, Amount]],
    description: Optional[str] = None,
) -> str:
    """
    Send one payment per (asset, amount) from source to destination.

    The destination must already trust every non-native asset it does
    not issue, or the ledger rejects the whole transaction.
    """
    if not amounts:
        raise ValueError("At least one payment is required")

    def append(builder: TransactionBuilder) -> None:
        for asset, amount in amounts:
            builder.append_payment_op(
                destination=destination,
                asset=asset,
                amount=str(amount),
            )

    return submit_operations(
        ledger,
        source,
        append,
        description or f"Payments from {source.name}",
    )


def issue_asset(
    ledger: LedgerClient,
    issuer: Wallet,
    destination: str,
    amounts: Sequence[tuple[Asset, Amount]],
) -> str:
    """Issue new supply of the issuer's own assets to a holder."""
    for asset, _ in amounts:
        if asset.is_native() or asset.issuer != issuer.public_key:
            raise ValueError(f"{issuer.name} does not issue {asset.code}")

    codes = ", ".join(f"{amount} {asset.code}" for asset, amount in amounts)
    logger.info(f"Issuing {codes} to {destination}")
    return transfer(ledger, issuer, destination, amounts, f"Issue {codes}")


def lock_issuer(ledger: LedgerClient, issuer: Wallet) -> str:
    """
    Remove the issuer's signing ability.

    Sets the master key weight to zero, so the issuer can never sign
    again and the asset supply is fixed. Irreversible.
    """

    def append(builder: TransactionBuilder) -> None:
        builder.append_set_options_op(
            master_weight=0,
            low_threshold=1,
            med_threshold=1,
            high_threshold=1,
        )

    return submit_operations(ledger, issuer, append, f"Lock issuer {issuer.name}")
