"""Account provisioning: key pairs, Friendbot funding, balances."""

import asyncio
import logging
from typing import Sequence

from stellar_workshop.blockchain.protocols import LedgerClient
from stellar_workshop.models.balance import BalanceLine
from stellar_workshop.models.wallet import Wallet

logger = logging.getLogger(__name__)


def create_wallet(name: str) -> Wallet:
    wallet = Wallet.create(name)
    logger.info(f"Created wallet {name}: {wallet.public_key}")
    return wallet


async def fund_wallets(ledger: LedgerClient, wallets: Sequence[Wallet]) -> None:
    """
    Fund all wallets via Friendbot concurrently.

    A plain join: if any request fails the error propagates and the
    remaining results are discarded. Nothing is retried.
    """
    await asyncio.gather(*(ledger.fund_account(w.public_key) for w in wallets))
    logger.info(f"Funded {len(wallets)} wallets")


def load_balances(ledger: LedgerClient, wallet: Wallet) -> list[BalanceLine]:
    return ledger.get_balances(wallet.public_key)
