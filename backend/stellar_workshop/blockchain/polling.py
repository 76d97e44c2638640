"""Waiting for Soroban transactions to reach a terminal state."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from stellar_workshop.blockchain.protocols import ContractNetwork, TransactionStatus
from stellar_workshop.config import POLL_INITIAL_DELAY, POLL_MAX_DELAY, POLL_TIMEOUT
from stellar_workshop.exceptions import (
    PollCancelledError,
    TransactionFailedError,
    TransactionTimeoutError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollPolicy:
    """
    Capped exponential backoff under an overall deadline.

    Delays run initial_delay, initial_delay * multiplier, ... up to
    max_delay. The poll gives up once timeout seconds have elapsed.
    """

    initial_delay: float = POLL_INITIAL_DELAY
    max_delay: float = POLL_MAX_DELAY
    multiplier: float = 2.0
    timeout: float = POLL_TIMEOUT

    def delays(self):
        """Yield the successive sleep intervals."""
        delay = self.initial_delay
        while True:
            yield delay
            delay = min(delay * self.multiplier, self.max_delay)


async def _sleep(seconds: float, cancel: Optional[asyncio.Event]) -> None:
    """Sleep, waking early if the cancellation token is set."""
    if cancel is None:
        await asyncio.sleep(seconds)
        return
    try:
        await asyncio.wait_for(cancel.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        pass


async def wait_for_transaction(
    network: ContractNetwork,
    tx_hash: str,
    policy: PollPolicy = PollPolicy(),
    cancel: Optional[asyncio.Event] = None,
    description: str = "Transaction",
) -> TransactionStatus:
    """
    Poll a transaction until it succeeds or fails.

    NOT_FOUND and PENDING are transient. No status request is made after
    the first terminal status.

    Args:
        network: Soroban network client
        tx_hash: Hash of the sent transaction
        policy: Backoff and deadline settings
        cancel: Optional cancellation token
        description: Label used in logs and errors

    Returns:
        TransactionStatus.SUCCESS

    Raises:
        TransactionFailedError: The transaction reached FAILED
        TransactionTimeoutError: The deadline passed first
        PollCancelledError: The cancellation token was set
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + policy.timeout

    delays = policy.delays()
    while True:
        if cancel is not None and cancel.is_set():
            raise PollCancelledError(tx_hash)

        status = network.get_transaction_status(tx_hash)

        if status == TransactionStatus.SUCCESS:
            logger.info(f"{description} confirmed: {tx_hash}")
            return status
        if status == TransactionStatus.FAILED:
            raise TransactionFailedError(description, tx_hash=tx_hash)

        remaining = deadline - loop.time()
        if remaining <= 0:
            raise TransactionTimeoutError(tx_hash, policy.timeout)

        delay = next(delays)
        logger.debug(f"{description} {tx_hash} is {status.value}, retrying in {delay}s")
        await _sleep(min(delay, remaining), cancel)
