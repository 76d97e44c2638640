"""Classic liquidity pools: identifiers, pool trustlines, deposits, path payments."""

import logging
from decimal import Decimal
from typing import Sequence, Union

from stellar_sdk import Asset, LiquidityPoolAsset, TransactionBuilder

from stellar_workshop.blockchain.protocols import LedgerClient
from stellar_workshop.blockchain.transaction import submit_operations
from stellar_workshop.models.wallet import Wallet

logger = logging.getLogger(__name__)

Amount = Union[str, Decimal]

POOL_FEE_BPS = 30  # 0.30%, the only fee the ledger accepts

# Prices are int32 fractions on the ledger
MAX_PRICE = Decimal(2**31 - 1)
MIN_PRICE = 1 / MAX_PRICE


def canonical_pair(asset_a: Asset, asset_b: Asset) -> tuple[Asset, Asset]:
    """Order two distinct assets the way the ledger requires for pools."""
    if asset_a == asset_b:
        raise ValueError("A liquidity pool needs two different assets")
    if LiquidityPoolAsset.is_valid_lexicographic_order(asset_a, asset_b):
        return asset_a, asset_b
    return asset_b, asset_a


def pool_asset(
    asset_a: Asset,
    asset_b: Asset,
    fee: int = POOL_FEE_BPS,
) -> LiquidityPoolAsset:
    """Constant-product pool asset for the pair, in either input order."""
    first, second = canonical_pair(asset_a, asset_b)
    return LiquidityPoolAsset(first, second, fee)


def pool_id(asset_a: Asset, asset_b: Asset, fee: int = POOL_FEE_BPS) -> str:
    """
    Liquidity pool identifier as hex.

    Order independent: pool_id(a, b) == pool_id(b, a).
    """
    return pool_asset(asset_a, asset_b, fee).liquidity_pool_id


def create_pool_trustlines(
    ledger: LedgerClient,
    wallet: Wallet,
    pools: Sequence[LiquidityPoolAsset],
) -> str:
    """Trust the share assets of all given pools, in one transaction."""
    if not pools:
        raise ValueError("At least one pool is required")

    def append(builder: TransactionBuilder) -> None:
        for pool in pools:
            builder.append_change_trust_op(asset=pool)

    return submit_operations(ledger, wallet, append, f"Pool trustlines for {wallet.name}")


def deposit_liquidity(
    ledger: LedgerClient,
    wallet: Wallet,
    asset_a: Asset,
    max_amount_a: Amount,
    asset_b: Asset,
    max_amount_b: Amount,
    min_price: Amount = "0.0001",
    max_price: Amount = "10000",
    fee: int = POOL_FEE_BPS,
) -> str:
    """
    Deposit up to the given amounts into the pool of asset_a and asset_b.

    Prices are asset_a per asset_b as the caller ordered them. When the
    pool orders the pair the other way round, amounts are swapped and
    the band is inverted to match. The ledger enforces the band and may
    deposit less than the maxima.

    Returns:
        Transaction hash
    """
    min_price = Decimal(str(min_price))
    max_price = Decimal(str(max_price))
    if min_price <= 0 or max_price < min_price:
        raise ValueError(f"Invalid price band [{min_price}, {max_price}]")
    if min_price < MIN_PRICE or max_price > MAX_PRICE:
        raise ValueError(f"Price band [{min_price}, {max_price}] is not representable")

    pool = pool_asset(asset_a, asset_b, fee)
    if pool.asset_a == asset_a:
        amounts = (max_amount_a, max_amount_b)
        band = (min_price, max_price)
    else:
        amounts = (max_amount_b, max_amount_a)
        band = (1 / max_price, 1 / min_price)

    def append(builder: TransactionBuilder) -> None:
        builder.append_liquidity_pool_deposit_op(
            liquidity_pool_id=pool.liquidity_pool_id,
            max_amount_a=str(amounts[0]),
            max_amount_b=str(amounts[1]),
            min_price=band[0],
            max_price=band[1],
        )

    label = f"{_label(asset_a)}/{_label(asset_b)}"
    logger.info(
        f"Depositing up to {max_amount_a} {_label(asset_a)} + "
        f"{max_amount_b} {_label(asset_b)} into {pool.liquidity_pool_id}"
    )
    return submit_operations(ledger, wallet, append, f"Deposit into {label} pool")


def swap_path_payment(
    ledger: LedgerClient,
    trader: Wallet,
    send_asset: Asset,
    send_amount: Amount,
    dest_asset: Asset,
    dest_min: Amount,
    path: Sequence[Asset] = (),
) -> str:
    """
    Swap an exact amount through the pools with a strict-send path payment.

    The trader pays and receives; an empty path trades directly through
    the pool of the two assets.
    """

    def append(builder: TransactionBuilder) -> None:
        builder.append_path_payment_strict_send_op(
            destination=trader.public_key,
            send_asset=send_asset,
            send_amount=str(send_amount),
            dest_asset=dest_asset,
            dest_min=str(dest_min),
            path=list(path),
        )

    return submit_operations(
        ledger,
        trader,
        append,
        f"Swap {send_amount} {_label(send_asset)} for {_label(dest_asset)}",
    )


def _label(asset: Asset) -> str:
    return "XLM" if asset.is_native() else asset.code

