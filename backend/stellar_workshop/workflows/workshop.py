"""
Stellar workshop: the full lifecycle of a custom asset on the classic ledger.

1. Create wallets (Asset Creator, Token Holder, Trader)
2. Fund them with Friendbot
3. Create the RIO asset and issue it to the Token Holder
4. Lock the issuer so no more RIO can be minted
5. Create and fund an XLM/RIO liquidity pool
6. Swap XLM for RIO through the pool with a path payment
"""

import asyncio
from typing import Optional

from stellar_sdk import Asset

from stellar_workshop import narration
from stellar_workshop.config import Settings
from stellar_workshop.models.balance import balance_of
from stellar_workshop.models.result import StepResult, WorkflowReport
from stellar_workshop.steps.accounts import create_wallet, fund_wallets, load_balances
from stellar_workshop.steps.issuance import (
    create_trustlines,
    define_asset,
    issue_asset,
    lock_issuer,
)
from stellar_workshop.steps.liquidity import (
    POOL_FEE_BPS,
    create_pool_trustlines,
    deposit_liquidity,
    pool_asset,
    swap_path_payment,
)
from stellar_workshop.workflows.runner import Clients, main as run_main

NAME = "Stellar workshop"

ASSET_CODE = "RIO"
TOKEN_SUPPLY = "1000000"

# 1 XLM = 500 RIO initial rate
XLM_DEPOSIT = "1000"
RIO_DEPOSIT = "500000"
MIN_PRICE = "0.0001"
MAX_PRICE = "10000"

TRADER_TRUST_LIMIT = "1000000000"
SWAP_AMOUNT = "100"
SWAP_DEST_MIN = "1"  # Very low for the demo

LEARNING_POINTS = (
    "Custom assets require trustlines before receiving",
    "Asset supply can be locked by setting issuer account options",
    "Liquidity pools enable decentralized trading",
    "Path payments can swap assets through pools",
    "All transactions are recorded on the Stellar ledger",
)


async def run(
    clients: Clients,
    settings: Settings,
    cancel: Optional[asyncio.Event] = None,
) -> WorkflowReport:
    ledger = clients.ledger
    report = WorkflowReport(name=NAME)
    xlm = Asset.native()

    narration.title("Starting Stellar Workshop")

    narration.step(1, "Creating Wallets")
    creator = create_wallet("Asset Creator")
    holder = create_wallet("Token Holder")
    trader = create_wallet("Trader")
    for wallet in (creator, holder, trader):
        narration.wallet(wallet, show_secret=True)

    narration.step(2, "Funding Wallets with Testnet XLM")
    await fund_wallets(ledger, [creator, holder, trader])
    narration.done("All wallets funded")
    for wallet in (creator, holder, trader):
        xlm_balance = balance_of(load_balances(ledger, wallet), xlm)
        narration.info(f"{wallet.name}: {xlm_balance} XLM")
    report.record(StepResult.confirmed("Created and funded 3 wallets"))

    narration.step(3, f"Creating Custom Asset ({ASSET_CODE})")
    rio = define_asset(ASSET_CODE, creator)
    narration.info(f"Asset Code: {rio.code}")
    narration.info(f"Issuer: {rio.issuer}")

    narration.step(4, f"Creating Trustline for {ASSET_CODE}")
    tx_hash = create_trustlines(ledger, holder, [rio])
    narration.done("Trustline created")
    report.record(StepResult.confirmed(f"Token Holder trusts {ASSET_CODE}", tx_hash))

    narration.step(5, f"Issuing {ASSET_CODE} Tokens")
    tx_hash = issue_asset(ledger, creator, holder.public_key, [(rio, TOKEN_SUPPLY)])
    narration.done(f"Issued {TOKEN_SUPPLY} {ASSET_CODE} to Token Holder")
    report.record(StepResult.confirmed(f"Issued {TOKEN_SUPPLY} {ASSET_CODE}", tx_hash))

    narration.step(6, "Removing Minting Ability")
    tx_hash = lock_issuer(ledger, creator)
    narration.done(f"Asset Creator locked - no more {ASSET_CODE} can be minted")
    report.record(StepResult.confirmed("Locked token supply", tx_hash))
    narration.balances(holder.name, load_balances(ledger, holder))

    narration.step(7, f"Creating Liquidity Pool (XLM/{ASSET_CODE})")
    pool = pool_asset(xlm, rio, POOL_FEE_BPS)
    narration.info(f"Pool ID: {pool.liquidity_pool_id}")
    narration.info(f"Fee: {POOL_FEE_BPS / 100:.2f}%")
    tx_hash = create_pool_trustlines(ledger, holder, [pool])
    narration.done("Pool trustline created")
    report.record(StepResult.confirmed(f"Created XLM/{ASSET_CODE} pool trustline", tx_hash))

    narration.step(8, "Depositing Liquidity to Pool")
    narration.info(f"{XLM_DEPOSIT} XLM + {RIO_DEPOSIT} {ASSET_CODE}")
    tx_hash = deposit_liquidity(
        ledger,
        holder,
        xlm,
        XLM_DEPOSIT,
        rio,
        RIO_DEPOSIT,
        min_price=MIN_PRICE,
        max_price=MAX_PRICE,
    )
    narration.done("Liquidity deposited")
    report.record(
        StepResult.confirmed(
            "Deposited liquidity",
            tx_hash,
            detail=f"{XLM_DEPOSIT} XLM + {RIO_DEPOSIT} {ASSET_CODE}",
        )
    )
    narration.balances(holder.name, load_balances(ledger, holder))

    narration.step(9, f"Trader Swaps XLM for {ASSET_CODE}")
    create_trustlines(ledger, trader, [rio], limit=TRADER_TRUST_LIMIT)
    narration.done(f"Trader trustline to {ASSET_CODE} created")
    narration.info(f"Sending {SWAP_AMOUNT} XLM, receiving {ASSET_CODE} at market rate")
    tx_hash = swap_path_payment(
        ledger,
        trader,
        send_asset=xlm,
        send_amount=SWAP_AMOUNT,
        dest_asset=rio,
        dest_min=SWAP_DEST_MIN,
    )
    received = balance_of(load_balances(ledger, trader), rio)
    narration.done("Path payment executed")
    report.record(
        StepResult.confirmed(
            f"Swapped XLM for {ASSET_CODE}",
            tx_hash,
            detail=f"{SWAP_AMOUNT} XLM -> {received} {ASSET_CODE}",
        )
    )

    narration.step(10, "Final Results")
    narration.balances(trader.name, load_balances(ledger, trader))

    report.addresses.update({
        f"{ASSET_CODE} Asset": f"{rio.code}:{rio.issuer}",
        "Liquidity Pool ID": pool.liquidity_pool_id,
        "Token Holder": holder.public_key,
        "Trader": trader.public_key,
    })
    narration.summary(report, LEARNING_POINTS)
    print("Explore these assets on Stellar Expert: https://stellar.expert/explorer/testnet")
    return report


def main() -> int:
    return run_main(NAME, run)


if __name__ == "__main__":
    raise SystemExit(main())
