"""
Trading and liquidity through the Soroswap aggregator.

Quote, build, sign, submit: each phase feeds the next and nothing is
reused. Results are explicit StepResults. A step is CONFIRMED only after
the Soroban RPC reports SUCCESS, SIMULATED when no aggregator client is
configured, and FAILED on any service or network error.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Optional, Union

from soroswap_client import SoroswapClient, SoroswapError, SupportedProtocol, TradeType
from stellar_sdk.exceptions import BaseRequestError

from stellar_workshop.blockchain.polling import PollPolicy, wait_for_transaction
from stellar_workshop.blockchain.protocols import ContractNetwork
from stellar_workshop.blockchain.transaction import sign_xdr
from stellar_workshop.exceptions import PollCancelledError, WorkshopError, describe_error
from stellar_workshop.models.result import StepResult
from stellar_workshop.models.wallet import Wallet

logger = logging.getLogger(__name__)

STROOPS_PER_UNIT = 10_000_000

# Failures reported as a FAILED step rather than ending the workflow
STEP_ERRORS = (SoroswapError, WorkshopError, BaseRequestError)

SWAP_STEP = "Swap via Soroswap"
ADD_LIQUIDITY_STEP = "Add liquidity via Soroswap"


def to_stroops(amount: Union[int, str, Decimal]) -> int:
    """
    Whole units (7 decimals) to integer stroops.

    Raises:
        ValueError: The amount has more than 7 decimal places
    """
    stroops = Decimal(str(amount)) * STROOPS_PER_UNIT
    if stroops != stroops.to_integral_value():
        raise ValueError(f"{amount} is not a whole number of stroops")
    return int(stroops)


def from_stroops(value: int) -> Decimal:
    return Decimal(value) / STROOPS_PER_UNIT


async def swap_exact_in(
    soroswap: Optional[SoroswapClient],
    network: ContractNetwork,
    trader: Wallet,
    asset_in: str,
    asset_out: str,
    amount: int,
    slippage_bps: int = 500,
    policy: PollPolicy = PollPolicy(),
    cancel: Optional[asyncio.Event] = None,
) -> StepResult:
    """
    Sell an exact amount of asset_in for asset_out.

    Args:
        soroswap: Aggregator client, or None to skip the trade
        network: Soroban network used to poll for finality
        trader: Pays, signs and receives
        asset_in: Contract address of the asset sold
        asset_out: Contract address of the asset bought
        amount: Amount sold, in stroops
        slippage_bps: Tolerated slippage in basis points

    Returns:
        StepResult for the swap
    """
    if soroswap is None:
        return StepResult.simulated(SWAP_STEP, "No Soroswap API key configured; swap not executed")

    tx_hash = None
    try:
        quote = await soroswap.quote(
            asset_in=asset_in,
            asset_out=asset_out,
            amount=amount,
            trade_type=TradeType.EXACT_IN,
            protocols=[SupportedProtocol.SOROSWAP],
            slippage_bps=slippage_bps,
        )
        logger.info(
            f"Quote: {from_stroops(quote.amount_in)} in -> "
            f"{from_stroops(quote.amount_out)} out via {quote.platform}"
        )

        built = await soroswap.build(quote, trader.public_key, trader.public_key)
        envelope = sign_xdr(built.xdr, trader, network.network_passphrase)
        tx_hash = envelope.hash_hex()

        sent = await soroswap.send(envelope.to_xdr())
        if sent.is_error:
            raise SoroswapError(f"Send rejected with status {sent.status}", response_body=sent.raw)
        if sent.tx_hash and sent.tx_hash != tx_hash:
            raise SoroswapError(
                f"Send reported hash {sent.tx_hash}, signed {tx_hash}",
                response_body=sent.raw,
            )
        await wait_for_transaction(network, tx_hash, policy, cancel, "Swap")
    except PollCancelledError:
        raise
    except STEP_ERRORS as e:
        logger.error(f"Swap failed: {describe_error(e)}")
        return StepResult.failed(SWAP_STEP, describe_error(e), tx_hash)

    return StepResult.confirmed(
        SWAP_STEP,
        tx_hash,
        detail=(
            f"{from_stroops(quote.amount_in)} in, {from_stroops(quote.amount_out)} out"
            f" (price impact {quote.price_impact_pct}%)"
        ),
    )


async def add_liquidity(
    soroswap: Optional[SoroswapClient],
    network: ContractNetwork,
    provider: Wallet,
    asset_a: str,
    asset_b: str,
    amount_a: int,
    amount_b: int,
    slippage_bps: int = 500,
    policy: PollPolicy = PollPolicy(),
    cancel: Optional[asyncio.Event] = None,
) -> StepResult:
    """
    Add liquidity to the aggregator's pool of two contract assets.

    The API builds the transaction; it is signed locally, sent through
    the Soroban RPC and polled until final. Amounts are in stroops.
    """
    if soroswap is None:
        return StepResult.simulated(
            ADD_LIQUIDITY_STEP, "No Soroswap API key configured; liquidity not added"
        )

    tx_hash = None
    try:
        built = await soroswap.add_liquidity(
            asset_a=asset_a,
            asset_b=asset_b,
            amount_a=amount_a,
            amount_b=amount_b,
            to=provider.public_key,
            slippage_bps=slippage_bps,
        )
        envelope = sign_xdr(built.xdr, provider, network.network_passphrase)
        tx_hash = network.send_transaction(envelope, "Add liquidity")
        await wait_for_transaction(network, tx_hash, policy, cancel, "Add liquidity")
    except PollCancelledError:
        raise
    except STEP_ERRORS as e:
        logger.error(f"Add liquidity failed: {describe_error(e)}")
        return StepResult.failed(ADD_LIQUIDITY_STEP, describe_error(e), tx_hash)

    return StepResult.confirmed(
        ADD_LIQUIDITY_STEP,
        tx_hash,
        detail=f"{from_stroops(amount_a)} + {from_stroops(amount_b)}",
    )
